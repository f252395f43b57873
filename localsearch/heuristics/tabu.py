"""Tabu Search heuristics (time-limited, multi-start)."""

import time
from collections import deque
from typing import Callable, Hashable, Iterable, List, Optional, Tuple

import numpy as np

from ..model.board import Board
from ..model.result import SearchResult
from .config import TabuConfig, TourTabuConfig, resolve_tabu, resolve_tour_tabu
from .neighborhoods import best_of, path_neighbours, take_non_tabu, tour_neighbours
from .path import Path
from .tour import Tour
from .utils import make_rng, rounds, strictly_better


class TabuMemory:
    """
    Set of canonical state keys with an optional capacity.

    When the capacity is exceeded the oldest key is evicted first.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity < 1:
            raise ValueError(f"tabu capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._keys = set()
        self._order = deque()

    def add(self, key: Hashable) -> None:
        if key in self._keys:
            return
        self._keys.add(key)
        self._order.append(key)
        if self.capacity is not None and len(self._order) > self.capacity:
            self._keys.discard(self._order.popleft())

    def extend(self, keys: Iterable[Hashable]) -> None:
        for key in keys:
            self.add(key)

    def refill(self, keys: Iterable[Hashable]) -> None:
        """Replace the contents with ``keys``."""
        self.clear()
        self.extend(keys)

    def clear(self) -> None:
        self._keys.clear()
        self._order.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)


def path_tabu_round(
    current: Path,
    k: int,
    board: Board,
    rng: np.random.Generator,
    is_tabu: Callable[[Path], bool],
) -> Tuple[List[Path], Optional[Path]]:
    """
    One neighbourhood step of the maze Tabu Search.

    Draws up to K*K simplified neighbours of ``current``, keeps at most K that
    are not tabu and picks the cheapest.

    Returns:
        Tuple of (surviving candidates, chosen candidate or None)
    """
    candidates = take_non_tabu(path_neighbours(current, k, board, rng, simplified=True), is_tabu, k, k * k)
    return candidates, best_of(candidates)

def path_tabu_search(
    board: Board,
    deadline: float,
    initial: Optional[Path] = None,
    config: Optional[TabuConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Tabu Search over maze paths.

    Each round draws up to K*K perturb-and-repair neighbours of the current
    path, simplifies them, drops tabu ones, keeps at most K and moves to the
    cheapest. K = max(1, tabu_size ** 2 / best_cost) shrinks as the best path
    gets longer. The tabu set holds the previous round's batch. Improving the
    best halves the fail counter, a non-improving round adds one and a round
    where every candidate was tabu adds ``empty_round_penalty``. Once the
    counter exceeds ``max_fails`` the search restarts from a fresh random path
    (its local best joins the outer tabu) or stops.

    Args:
        board: Maze with an exit reachable from the agent
        deadline: Absolute ``time.perf_counter()`` value
        initial: Starting path (default: random path to an exit)
        config: Parameters, size-dependent ones resolved from the board
        rng: Random generator of the run (default: seeded with ``seed``)
        seed: Seed used when ``rng`` is None
        verbose: Print best-cost transitions and restarts

    Returns:
        SearchResult with the best path found
    """
    start_time = time.perf_counter()
    rng = make_rng(rng, seed)
    config = resolve_tabu(config or TabuConfig(), board.height, board.width)

    current = initial.copy() if initial is not None else Path.new_to_exit(board, rng)
    current.simplify(board, rng)
    best = current.copy()
    local_best = current.copy()

    tabu = TabuMemory()
    outer_tabu = TabuMemory()
    fails = 0
    iterations = 0
    cost_log = [best.cost_key]

    def is_tabu(path: Path) -> bool:
        return path.key in tabu or path.key in outer_tabu

    for it in rounds(deadline, verbose, report_every=10000, label='tabu'):
        iterations = it + 1
        k = max(1, int(config.tabu_size ** 2 / best.cost_key))

        candidates, chosen = path_tabu_round(current, k, board, rng, is_tabu)
        if chosen is None:
            fails += config.empty_round_penalty
        else:
            current = chosen
            if strictly_better(current.cost_key, local_best.cost_key):
                local_best = current.copy()
            if strictly_better(current.cost_key, best.cost_key):
                if verbose:
                    print(f"Iteration {iterations}: best_cost {best.cost} -> {current.cost}")
                best = current.copy()
                fails //= 2
            else:
                fails += 1
            tabu.refill(c.key for c in candidates)

        if fails > config.max_fails:
            if not config.restart:
                if verbose:
                    print(f"Stopping Tabu: {fails} fails exceed {config.max_fails}")
                cost_log.append(best.cost_key)
                break
            if config.use_outer_tabu:
                outer_tabu.add(local_best.key)
            current = Path.new_to_exit(board, rng)
            current.simplify(board, rng)
            local_best = current.copy()
            tabu.clear()
            fails = 0
            if verbose:
                print(f"Iteration {iterations}: restart with cost {current.cost}, "
                      f"outer_tabu_size={len(outer_tabu)}")

        cost_log.append(best.cost_key)

    return SearchResult(best, best.cost_key, time.perf_counter() - start_time, cost_log, iterations)


def tour_tabu_search(
    costs: np.ndarray,
    deadline: float,
    initial: Optional[Tour] = None,
    config: Optional[TourTabuConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Multi-start Tabu Search over TSP tours.

    Every local start evaluates the swap neighbourhood of the current tour
    incrementally, skips tours in the tabu or outer tabu set and moves to the
    cheapest remaining one. A random fraction of each evaluated batch joins the
    tabu set, together with the adopted tour. A local start ends after
    ``max_inner_iters`` rounds, ``max_fails`` rounds without improving its own
    best or an empty neighbourhood; its best tour then joins the outer tabu and
    a new random tour is started.

    Args:
        costs: Square cost matrix, node 0 is the depot
        deadline: Absolute ``time.perf_counter()`` value
        initial: First local start (default: random tour)
        config: Parameters, size-dependent ones resolved from ``n``
        rng: Random generator of the run
        seed: Seed used when ``rng`` is None
        verbose: Print best-cost transitions and restarts

    Returns:
        SearchResult with the best tour found
    """
    start_time = time.perf_counter()
    rng = make_rng(rng, seed)
    n = costs.shape[0]
    config = resolve_tour_tabu(config or TourTabuConfig(), n)
    k = config.neighbourhood_size

    current = initial if initial is not None else Tour.new_random(costs, rng)
    best = current
    local_best = current
    cost_log = [best.cost_key]
    iterations = 0

    if current.last_swappable < 2:
        # A single free position (or none) leaves nothing to swap.
        return SearchResult(best, best.cost_key, time.perf_counter() - start_time, cost_log, iterations)

    tabu = TabuMemory(config.tabu_capacity)
    tabu.add(current.key)
    outer_tabu = TabuMemory()
    inner = 0
    fails = 0

    def is_tabu(tour: Tour) -> bool:
        return tour.key in tabu or tour.key in outer_tabu

    for it in rounds(deadline, verbose, report_every=1000, label='tour tabu'):
        iterations = it + 1
        raw_limit = None if k is None else k * k
        candidates = take_non_tabu(tour_neighbours(current, costs, rng, raw_limit), is_tabu, k)

        chosen = best_of(candidates)
        if chosen is not None:
            inserted = rng.random(len(candidates)) < config.tabu_insert_probability
            tabu.extend(c.key for c, keep in zip(candidates, inserted) if keep)
            tabu.add(chosen.key)
            current = chosen
            if strictly_better(current.cost_key, local_best.cost_key):
                local_best = current
                fails = 0
            else:
                fails += 1
            if strictly_better(current.cost_key, best.cost_key):
                if verbose:
                    print(f"Iteration {iterations}: best_cost {best.cost} -> {current.cost}")
                best = current
        inner += 1

        if chosen is None or inner >= config.max_inner_iters or fails > config.max_fails:
            if config.use_outer_tabu:
                outer_tabu.add(local_best.key)
            current = Tour.new_random(costs, rng)
            local_best = current
            tabu.refill([current.key])
            inner = 0
            fails = 0
            if verbose:
                print(f"Iteration {iterations}: restart with cost {current.cost}, "
                      f"outer_tabu_size={len(outer_tabu)}")

        cost_log.append(best.cost_key)

    return SearchResult(best, best.cost_key, time.perf_counter() - start_time, cost_log, iterations)
