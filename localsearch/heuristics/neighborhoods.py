"""Neighbourhood move operators for local search."""

import math
from itertools import islice
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from ..model.board import Board
from .path import Path
from .tour import Tour, random_swap_pairs
from .utils import draw_count

State = TypeVar('State')


def neighbour_by_swap_extend(
    path: Path,
    target_mean: float,
    board: Board,
    rng: np.random.Generator,
    sigma: float = 4.0,
) -> Path:
    """
    Perturb-then-repair neighbour of a maze path.

    The swap count is the first Normal(target_mean, sigma) draw above 1; that
    many random index pairs of a copy are swapped, after which the copy is
    repaired with ``extend_to_exit`` since the swaps invalidate its suffix.

    Args:
        path: Path to perturb (left unchanged)
        target_mean: Mean number of swaps
        board: Maze the path lives on
        rng: Random generator of the run
        sigma: Stddev of the swap count

    Returns:
        New feasible path
    """
    new = path.copy()
    length = len(new.moves)
    if length >= 2:
        num = int(draw_count(rng, target_mean, sigma, 1.0))
        positions = rng.integers(0, length, size=(num, 2))
        moves = new.moves
        for a, b in positions:
            moves[a], moves[b] = moves[b], moves[a]
    new.extend_to_exit(board, rng)
    return new


def recombine_splice(p1: Path, p2: Path, start1: int, start2: int, end2: int, board: Board) -> Path:
    """
    Child ``p1[:start1] + p2[start2:end2] + p1[start1 + len:]``.

    The child is verified from index 0 because the spliced prefix may no
    longer lead to the same cell; it is not repaired and may be infeasible.
    """
    length = end2 - start2
    moves = p1.moves[:start1] + p2.moves[start2:end2] + p1.moves[start1 + length:]
    return Path.from_moves(p1.starting_point, moves, board)


def mutate_swap(path: Path, board: Board, positions: Iterable[Tuple[int, int]]) -> Path:
    """Copy of ``path`` with the given index pairs swapped, verified from index 0."""
    moves = list(path.moves)
    for a, b in positions:
        moves[a], moves[b] = moves[b], moves[a]
    return Path.from_moves(path.starting_point, moves, board)


def random_splice(p1: Path, p2: Path, board: Board, rng: np.random.Generator) -> Optional[Path]:
    """
    Splice child with random cut points, None if the parents are too short.

    ``start1`` is drawn from ``[0, len(p1))``, ``start2`` from
    ``[0, len(p2) - 1)`` and ``end2`` from ``[start2 + 1, len(p2))``.
    """
    if not p1.moves or len(p2.moves) < 2:
        return None
    start1 = int(rng.integers(0, len(p1.moves)))
    start2 = int(rng.integers(0, len(p2.moves) - 1))
    end2 = int(rng.integers(start2 + 1, len(p2.moves)))
    return recombine_splice(p1, p2, start1, start2, end2, board)


def random_mutation(path: Path, board: Board, rng: np.random.Generator, sigma: float = 3.0) -> Optional[Path]:
    """
    Swap mutation with ``ceil`` of the first positive Normal(len / 2, sigma)
    draw as the number of swaps. None for an empty path.
    """
    length = len(path.moves)
    if length == 0:
        return None
    count = int(math.ceil(draw_count(rng, length / 2.0, sigma, 0.0)))
    positions = rng.integers(0, length, size=(count, 2))
    return mutate_swap(path, board, ((int(a), int(b)) for a, b in positions))


def path_neighbours(
    current: Path,
    target_mean: float,
    board: Board,
    rng: np.random.Generator,
    sigma: float = 4.0,
    simplified: bool = False,
) -> Iterator[Path]:
    """
    Endless stream of perturb-and-repair neighbours of ``current``.

    With ``simplified`` each neighbour is reduced to its canonical form before
    it is yielded, so a tabu filter downstream sees the key that gets stored.
    """
    while True:
        neighbour = neighbour_by_swap_extend(current, target_mean, board, rng, sigma)
        if simplified:
            neighbour.simplify(board, rng)
        yield neighbour


def tour_neighbours(
    current: Tour,
    costs: np.ndarray,
    rng: np.random.Generator,
    limit: Optional[int] = None,
) -> Iterator[Tour]:
    """Swap neighbours of ``current`` with incrementally updated costs, in random order."""
    for i, j in random_swap_pairs(current, rng, limit):
        yield current.swap(i, j, costs)


def random_tour_swap(current: Tour, costs: np.ndarray, rng: np.random.Generator) -> Tour:
    """Single random swap neighbour (the tour itself if it has fewer than two free positions)."""
    for neighbour in tour_neighbours(current, costs, rng, limit=1):
        return neighbour
    return current


def take_non_tabu(
    candidates: Iterable[State],
    is_tabu: Callable[[State], bool],
    survivors: Optional[int],
    raw_limit: Optional[int] = None,
) -> List[State]:
    """
    Lazily filter a candidate stream.

    At most ``raw_limit`` candidates are generated and at most ``survivors``
    non-tabu ones are kept, which bounds the work when most candidates are tabu.
    """
    raw = candidates if raw_limit is None else islice(candidates, raw_limit)
    return list(islice((c for c in raw if not is_tabu(c)), survivors))


def best_of(candidates: Sequence[State]) -> Optional[State]:
    """Candidate with the lowest ``cost_key``; the earliest wins ties."""
    best = None
    for candidate in candidates:
        if best is None or candidate.cost_key < best.cost_key:
            best = candidate
    return best
