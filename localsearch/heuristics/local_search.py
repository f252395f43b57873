"""Random local search over a continuous box."""

import time
from typing import Optional

import numpy as np

from ..model.functions import ContinuousProblem
from ..model.result import SearchResult
from .config import LocalSearchConfig
from .utils import make_rng, rounds, strictly_better


def random_local_search(
    problem: ContinuousProblem,
    deadline: float,
    start: Optional[np.ndarray] = None,
    config: Optional[LocalSearchConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Random local search: move to a random nearby point when it is strictly better.

    The neighbour radius starts at ``initial_scale`` (a fraction of the box
    length), is multiplied by ``shrink`` after ``patience`` failed draws in a
    row and resets on improvement or once it drops below ``min_scale``.

    Args:
        problem: Objective with its domain box
        deadline: Absolute ``time.perf_counter()`` value
        start: Starting point (default: uniform in the whole box)
        config: Parameters
        rng: Random generator of the run
        seed: Seed used when ``rng`` is None
        verbose: Print value transitions

    Returns:
        SearchResult whose state is the best point found
    """
    start_time = time.perf_counter()
    rng = make_rng(rng, seed)
    config = config or LocalSearchConfig()

    current = problem.clamp(np.asarray(start, dtype=float)) if start is not None else problem.random(1.0, rng)
    current_value = problem.value(current)
    cost_log = [current_value]
    scale = config.initial_scale
    fails = 0
    iterations = 0

    for it in rounds(deadline, verbose, report_every=100000, label=f'{problem.name} local search'):
        iterations = it + 1
        candidate = problem.random_near(current, scale, rng)
        value = problem.value(candidate)

        if strictly_better(value, current_value):
            if verbose:
                print(f"Iteration {iterations}: value {current_value:.6g} -> {value:.6g}, scale={scale:.3g}")
            current, current_value = candidate, value
            scale = config.initial_scale
            fails = 0
        else:
            fails += 1
            if fails >= config.patience:
                scale *= config.shrink
                fails = 0
                if scale < config.min_scale:
                    scale = config.initial_scale

        cost_log.append(current_value)

    return SearchResult(current, current_value, time.perf_counter() - start_time, cost_log, iterations)
