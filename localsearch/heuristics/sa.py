"""Simulated Annealing heuristics (time-limited, single-start)."""

import math
import time
from typing import Any, Callable, Optional, Tuple

import numpy as np

from ..model.block_matrix import BlockMatrix
from ..model.board import Board
from ..model.functions import ContinuousProblem
from ..model.result import SearchResult
from .config import AnnealingConfig, block_annealing_defaults, continuous_annealing_defaults, resolve_maze_annealing
from .neighborhoods import neighbour_by_swap_extend, random_tour_swap
from .path import Path
from .tour import Tour
from .utils import make_rng, rounds, strictly_better


def acceptance_probability(delta: float, temperature: float) -> float:
    """
    Metropolis probability of moving to a candidate ``delta`` worse than the current state.

    Non-worsening (and incomparable) candidates are always accepted; at zero
    temperature worsening ones never are.
    """
    if math.isnan(delta) or delta <= 0:
        return 1.0
    if temperature <= 0:
        return 0.0
    return math.exp(-delta / temperature)


def cool(temperature: float, config: AnnealingConfig) -> float:
    """Apply one round of geometric and/or linear cooling, floored at ``min_temperature``."""
    if config.alpha is not None:
        temperature *= config.alpha
    if config.cooling_step is not None:
        temperature -= config.cooling_step
    return max(temperature, config.min_temperature)


def _anneal(
    state: Any,
    cost: float,
    propose: Callable[[Any, float, float], Tuple[Any, float]],
    copy: Callable[[Any], Any],
    deadline: float,
    config: AnnealingConfig,
    rng: np.random.Generator,
    verbose: bool,
    label: str,
) -> SearchResult:
    """
    Shared annealing loop.

    ``propose(current, best_cost, temperature)`` returns a candidate and its
    cost. Acceptance halves the fail counter, a new best divides it by four
    more and a rejection adds one; the loop stops early once the counter
    exceeds ``config.max_fails`` (never when it is None).
    """
    start_time = time.perf_counter()
    current, current_cost = state, cost
    best, best_cost = copy(state), cost
    temperature = config.initial_temperature
    fails = 0
    iterations = 0
    cost_log = [best_cost]

    for it in rounds(deadline, verbose, report_every=10000, label=label):
        iterations = it + 1
        candidate, candidate_cost = propose(current, best_cost, temperature)

        if (strictly_better(candidate_cost, current_cost)
                or rng.random() < acceptance_probability(candidate_cost - current_cost, temperature)):
            current, current_cost = candidate, candidate_cost
            fails //= 2
            if strictly_better(current_cost, best_cost):
                if verbose:
                    print(f"Iteration {iterations}: best_cost {best_cost} -> {current_cost}, T={temperature:.4g}")
                best, best_cost = copy(current), current_cost
                fails //= 4
        else:
            fails += 1

        cost_log.append(best_cost)
        if config.max_fails is not None and fails > config.max_fails:
            if verbose:
                print(f"Stopping SA: {fails} fails exceed {config.max_fails:.1f}")
            break

        temperature = cool(temperature, config)

    return SearchResult(best, best_cost, time.perf_counter() - start_time, cost_log, iterations)


def path_simulated_annealing(
    board: Board,
    deadline: float,
    initial: Optional[Path] = None,
    config: Optional[AnnealingConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Simulated Annealing over maze paths.

    One perturb-and-repair neighbour per round, with the best cost so far as
    the mean swap count. The run stops at the deadline or once the fail
    counter exceeds ``(h + w) ** fail_exponent``.

    Args:
        board: Maze with an exit reachable from the agent
        deadline: Absolute ``time.perf_counter()`` value
        initial: Starting path (default: random path to an exit)
        config: Parameters (defaults: T0 = 273.15, alpha = 0.98)
        rng: Random generator of the run
        seed: Seed used when ``rng`` is None
        verbose: Print best-cost transitions

    Returns:
        SearchResult with the best path found
    """
    rng = make_rng(rng, seed)
    config = resolve_maze_annealing(config or AnnealingConfig(), board.height, board.width)

    current = initial.copy() if initial is not None else Path.new_to_exit(board, rng)
    current.simplify(board, rng)

    def propose(path: Path, best_cost: float, temperature: float) -> Tuple[Path, float]:
        candidate = neighbour_by_swap_extend(path, best_cost, board, rng)
        candidate.simplify(board, rng)
        return candidate, candidate.cost_key

    return _anneal(current, current.cost_key, propose, Path.copy, deadline, config, rng, verbose, 'maze SA')


def tour_simulated_annealing(
    costs: np.ndarray,
    deadline: float,
    initial: Optional[Tour] = None,
    config: Optional[AnnealingConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """Simulated Annealing over TSP tours: one random swap per round, cost updated incrementally."""
    rng = make_rng(rng, seed)
    config = config or AnnealingConfig()
    current = initial if initial is not None else Tour.new_random(costs, rng)

    def propose(tour: Tour, best_cost: float, temperature: float) -> Tuple[Tour, float]:
        candidate = random_tour_swap(tour, costs, rng)
        return candidate, candidate.cost_key

    return _anneal(current, current.cost_key, propose, lambda t: t, deadline, config, rng, verbose, 'TSP SA')


def continuous_simulated_annealing(
    problem: ContinuousProblem,
    deadline: float,
    start: Optional[np.ndarray] = None,
    config: Optional[AnnealingConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Simulated Annealing over a continuous box.

    Candidates are drawn with ``random_near(current, near_scale * max(T, 1))``
    so the radius shrinks with the temperature. The default schedule is linear
    (T -= 1 per round).
    """
    rng = make_rng(rng, seed)
    config = config or continuous_annealing_defaults()
    current = problem.clamp(np.asarray(start, dtype=float)) if start is not None else problem.random(1.0, rng)

    def propose(point: np.ndarray, best_cost: float, temperature: float) -> Tuple[np.ndarray, float]:
        candidate = problem.random_near(point, config.near_scale * max(temperature, 1.0), rng)
        return candidate, problem.value(candidate)

    return _anneal(current, problem.value(current), propose, np.copy, deadline, config, rng, verbose, f'{problem.name} SA')


def block_simulated_annealing(
    image: np.ndarray,
    block_size: int,
    deadline: float,
    config: Optional[AnnealingConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Simulated Annealing over block approximations of ``image``.

    Starts from an all-black matrix of ``block_size`` blocks. With
    ``resize_probability`` a candidate resamples to a random block size of at
    least ``block_size``; otherwise it perturbs the block colours. The cost is
    the mean squared error.

    Args:
        image: Grey-scale values, shape (n, m)
        block_size: Minimal block height and width
        deadline: Absolute ``time.perf_counter()`` value
        config: Parameters (default cooling factor 0.9)
        rng: Random generator of the run
        seed: Seed used when ``rng`` is None
        verbose: Print best-cost transitions

    Returns:
        SearchResult whose state is the best ``BlockMatrix``
    """
    rng = make_rng(rng, seed)
    config = config or block_annealing_defaults()
    h, w = image.shape

    current = BlockMatrix.zeros(block_size, block_size, h, w)

    def propose(matrix: BlockMatrix, best_cost: float, temperature: float) -> Tuple[BlockMatrix, float]:
        if rng.random() < config.resize_probability:
            block_height = int(rng.integers(block_size, max(block_size + 1, h)))
            block_width = int(rng.integers(block_size, max(block_size + 1, w)))
            candidate = matrix.with_block_size(block_height, block_width, h, w)
        else:
            candidate = matrix.perturb_values(rng, config.perturb_probability, config.perturb_sigma)
        return candidate, candidate.distance_from(image)

    return _anneal(current, current.distance_from(image), propose, BlockMatrix.copy, deadline, config, rng, verbose, 'image SA')
