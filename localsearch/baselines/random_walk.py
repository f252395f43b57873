"""Random feasible baselines: best of repeated random constructions."""

import time
from typing import Optional, Tuple

import numpy as np

from ..model.board import Board
from ..heuristics.path import Path
from ..heuristics.tour import Tour
from ..heuristics.utils import make_rng, strictly_better


def random_paths(
    board: Board,
    num_samples: int = 100,
    time_limit: Optional[float] = None,
    seed: int = 42,
) -> Tuple[float, Path]:
    """
    Random feasible baseline for the maze: keep the shortest of repeated random walks.

    Each sample is a ``Path.new_to_exit`` walk with its redundant moves removed.

    Args:
        board: Maze with an exit reachable from the agent
        num_samples: Number of random walks
        time_limit: Optional wall-clock budget in seconds (stops sampling early)
        seed: Random seed for reproducibility

    Returns:
        Tuple of (cost, path)
    """
    rng = make_rng(seed=seed)
    start_time = time.perf_counter()

    best = None
    for _ in range(num_samples):
        if time_limit is not None and time.perf_counter() - start_time >= time_limit:
            break
        path = Path.new_to_exit(board, rng)
        path.simplify(board, rng)
        if best is None or strictly_better(path.cost_key, best.cost_key):
            best = path

    if best is None:
        best = Path.new_to_exit(board, rng)
    return best.cost_key, best


def random_tours(costs: np.ndarray, num_samples: int = 100, seed: int = 42) -> Tuple[float, Tour]:
    """Random feasible baseline for the TSP: cheapest of ``num_samples`` random tours."""
    rng = make_rng(seed=seed)
    best = Tour.new_random(costs, rng)
    for _ in range(num_samples - 1):
        tour = Tour.new_random(costs, rng)
        if strictly_better(tour.cost_key, best.cost_key):
            best = tour
    return best.cost_key, best
