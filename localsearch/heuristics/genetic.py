"""Genetic recombination heuristics (time-limited)."""

import time
from typing import List, Optional, Sequence

import numpy as np

from ..model.board import Board
from ..model.functions import ContinuousProblem
from ..model.point import Direction
from ..model.result import SearchResult
from .config import GeneticConfig
from .neighborhoods import random_mutation, random_splice
from .path import Path
from .utils import make_rng, rounds, sort_key, strictly_better


def _survivors(population: List[Path], size: int) -> List[Path]:
    """Cheapest ``size`` distinct paths; infeasible ones sort last."""
    population.sort(key=lambda p: sort_key(p.cost))
    unique = {}
    for path in population:
        unique.setdefault(path.key, path)
        if len(unique) == size:
            break
    return list(unique.values())


def path_genetic_search(
    board: Board,
    deadline: float,
    initial_moves: Optional[Sequence[List[Direction]]] = None,
    population_size: Optional[int] = None,
    config: Optional[GeneticConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Genetic recombination over maze paths.

    Each round keeps the N cheapest distinct paths, appends a splice child for
    each of ``pairs_per_round * N`` uniformly drawn parent pairs and a swap
    mutant of each survivor with ``mutation_probability``. Children are only
    verified, never repaired, so infeasible ones simply sort last.

    Args:
        board: Maze with an exit reachable from the agent
        deadline: Absolute ``time.perf_counter()`` value
        initial_moves: Move lists seeding the population
        population_size: Requested N, capped by ``config.population_size``
        config: Parameters
        rng: Random generator of the run
        seed: Seed used when ``rng`` is None
        verbose: Print best-cost transitions

    Returns:
        SearchResult with the cheapest path of the final population
    """
    start_time = time.perf_counter()
    rng = make_rng(rng, seed)
    config = config or GeneticConfig()

    size = config.population_size
    if population_size is not None:
        size = max(1, min(size, population_size))

    population = [Path.from_moves(board.agent_position, moves, board) for moves in initial_moves or []]
    if not any(p.is_feasible for p in population):
        first = Path.new_to_exit(board, rng)
        first.simplify(board, rng)
        population.append(first)

    best = min(population, key=lambda p: sort_key(p.cost)).copy()
    cost_log = [best.cost_key]
    iterations = 0

    for it in rounds(deadline, verbose, report_every=1000, label='genetic'):
        iterations = it + 1
        population = _survivors(population, size)
        if strictly_better(population[0].cost_key, best.cost_key):
            if verbose:
                print(f"Iteration {iterations}: best_cost {best.cost} -> {population[0].cost}")
            best = population[0].copy()
        cost_log.append(best.cost_key)

        parents = rng.integers(0, len(population), size=(config.pairs_per_round * size, 2))
        children = []
        for a, b in parents:
            child = random_splice(population[a], population[b], board, rng)
            if child is not None:
                children.append(child)

        mutants = []
        for path in population:
            if rng.random() < config.mutation_probability:
                mutant = random_mutation(path, board, rng, config.mutation_sigma)
                if mutant is not None:
                    mutants.append(mutant)

        population.extend(children)
        population.extend(mutants)

    final = min(population, key=lambda p: sort_key(p.cost))
    if strictly_better(final.cost_key, best.cost_key):
        best = final.copy()
        cost_log.append(best.cost_key)
    return SearchResult(best, best.cost_key, time.perf_counter() - start_time, cost_log, iterations)


class BitGenome:
    """
    Fixed-point encoding of a point in a box, ``bits`` bits per coordinate.

    Gene value ``v`` in ``[0, max_value]`` decodes to
    ``low + v / max_value * (high - low)``.
    """

    def __init__(self, problem: ContinuousProblem, bits: int = 40):
        if not 1 <= bits <= 62:
            raise ValueError(f"genome bits must lie in 1..62, got {bits}")
        self.problem = problem
        self.bits = bits
        self.mask = (1 << bits) - 1
        self.max_value = self.mask

    def encode(self, point: np.ndarray) -> np.ndarray:
        low, high = self.problem.bounds
        fraction = (self.problem.clamp(np.asarray(point, dtype=float)) - low) / (high - low)
        return np.rint(fraction * self.max_value).astype(np.int64)

    def decode(self, genes: np.ndarray) -> np.ndarray:
        low, high = self.problem.bounds
        return low + genes.astype(float) / self.max_value * (high - low)

    def random(self, rng: np.random.Generator) -> np.ndarray:
        return rng.integers(0, self.max_value, size=self.problem.dimensions, endpoint=True, dtype=np.int64)

    def recombine_inner(self, g1: np.ndarray, g2: np.ndarray, i: int, j: int) -> np.ndarray:
        """Bits ``i..j`` (counted from the most significant) from ``g2``, the rest from ``g1``, in every coordinate."""
        length = j - i + 1
        mask = ((1 << length) - 1) << (self.bits - j - 1)
        return ((g1 & ~mask) | (g2 & mask)) & self.mask

    def recombine_outer(self, g1: np.ndarray, g2: np.ndarray, i: int) -> np.ndarray:
        """Copy of ``g1`` with coordinate ``i`` taken from ``g2``."""
        child = g1.copy()
        child[i] = g2[i]
        return child

    def mutate_big(self, genes: np.ndarray, i: int) -> np.ndarray:
        """Invert every bit of coordinate ``i``."""
        mutant = genes.copy()
        mutant[i] = ~mutant[i] & self.mask
        return mutant

    def mutate_small(self, genes: np.ndarray, positions: Sequence[int]) -> np.ndarray:
        """Flip the given bit positions in every coordinate."""
        flips = 0
        for pos in positions:
            flips ^= 1 << int(pos)
        return (genes ^ flips) & self.mask


def roulette_table(values: np.ndarray) -> np.ndarray:
    """
    Cumulative selection weights, cheaper specimens weigh more.

    The weight of a value is ``1 / (1 + value - min(values))``.
    """
    weights = 1.0 / (1.0 + values - values.min())
    return np.cumsum(weights)


def continuous_genetic_search(
    problem: ContinuousProblem,
    deadline: float,
    start: Optional[np.ndarray] = None,
    config: Optional[GeneticConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Genetic recombination over bit-encoded points of a continuous box.

    The population starts with ``start`` (if given) and random genomes. Each
    round keeps the N cheapest, draws N / 2 parent pairs by roulette and
    appends one child per pair: a whole coordinate swap with
    ``outer_recombination_probability``, otherwise a bit-range splice. Every
    specimen then spawns a coordinate-inverting mutant with
    ``big_mutation_probability`` or, otherwise, a bit-flip mutant when at least
    one of its bits is hit with ``bit_flip_probability``.

    Returns:
        SearchResult whose state is the best point found
    """
    start_time = time.perf_counter()
    rng = make_rng(rng, seed)
    config = config or GeneticConfig()
    genome = BitGenome(problem, config.genome_bits)
    size = config.population_size
    dims = problem.dimensions

    genomes = [genome.random(rng) for _ in range(size)]
    if start is not None:
        genomes[0] = genome.encode(start)
    values = [problem.value(genome.decode(g)) for g in genomes]

    best_index = int(np.argmin([sort_key(v) for v in values]))
    best_point, best_value = genome.decode(genomes[best_index]), values[best_index]
    cost_log = [best_value]
    iterations = 0

    for it in rounds(deadline, verbose, report_every=1000, label='continuous genetic'):
        iterations = it + 1
        order = sorted(range(len(genomes)), key=lambda k: sort_key(values[k]))[:size]
        genomes = [genomes[k] for k in order]
        values = [values[k] for k in order]
        if strictly_better(values[0], best_value):
            if verbose:
                print(f"Iteration {iterations}: best_value {best_value:.6g} -> {values[0]:.6g}")
            best_point, best_value = genome.decode(genomes[0]), values[0]
        cost_log.append(best_value)

        table = roulette_table(np.array([sort_key(v) for v in values]))
        draws = rng.uniform(0.0, table[-1], size=(max(1, size // 2), 2))
        parents = np.minimum(np.searchsorted(table, draws), len(genomes) - 1)

        children = []
        for a, b in parents:
            if rng.random() < config.outer_recombination_probability:
                child = genome.recombine_outer(genomes[a], genomes[b], int(rng.integers(0, dims)))
            else:
                i = int(rng.integers(0, genome.bits))
                j = int(rng.integers(i, genome.bits))
                child = genome.recombine_inner(genomes[a], genomes[b], i, j)
            children.append(child)

        for genes in genomes:
            if rng.random() < config.big_mutation_probability:
                children.append(genome.mutate_big(genes, int(rng.integers(0, dims))))
                continue
            positions = np.flatnonzero(rng.random(genome.bits) < config.bit_flip_probability)
            if positions.size:
                children.append(genome.mutate_small(genes, positions))

        genomes.extend(children)
        values.extend(problem.value(genome.decode(g)) for g in children)

    final = int(np.argmin([sort_key(v) for v in values]))
    if strictly_better(values[final], best_value):
        best_point, best_value = genome.decode(genomes[final]), values[final]
        cost_log.append(best_value)
    return SearchResult(best_point, best_value, time.perf_counter() - start_time, cost_log, iterations)
