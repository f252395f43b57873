"""Shared helpers for the search loops: deadlines, cost ordering and random draws."""

import math
import time
from typing import Iterator, Optional

import numpy as np


def make_rng(rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> np.random.Generator:
    """Return ``rng`` if given, otherwise a fresh generator seeded with ``seed``."""
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def deadline_after(seconds: float) -> float:
    """Absolute ``time.perf_counter()`` deadline ``seconds`` from now."""
    return time.perf_counter() + seconds


def rounds(deadline: float, verbose: bool = False, report_every: int = 0, label: str = 'search') -> Iterator[int]:
    """
    Yield round numbers until ``deadline`` has passed.

    The clock is polled once per round, before the round starts; a running
    round is never interrupted.

    Args:
        deadline: Absolute ``time.perf_counter()`` value
        verbose: Print a progress line every ``report_every`` rounds
        report_every: Reporting period in rounds (0 disables reporting)
        label: Name printed in progress lines
    """
    start = time.perf_counter()
    k = 0
    while True:
        now = time.perf_counter()
        if verbose and report_every and k and k % report_every == 0:
            elapsed = now - start
            print(f"{label}: {k:12d} rounds in {elapsed:.6f}s, avg {elapsed / k:.3e}s")
        if now >= deadline:
            return
        yield k
        k += 1


def strictly_better(a: float, b: float) -> bool:
    """
    ``a < b`` under the weak ordering used by every search loop.

    Incomparable values (NaN) count as equal, so they never replace anything.
    """
    return a < b


def sort_key(cost: Optional[float]) -> float:
    """Total-order key for sorting populations; NaN and None sort last."""
    if cost is None or math.isnan(cost):
        return math.inf
    return cost


def draw_count(rng: np.random.Generator, mean: float, sigma: float, minimum: float) -> float:
    """First Normal(mean, sigma) draw strictly greater than ``minimum``."""
    while True:
        value = rng.normal(mean, sigma)
        if value > minimum:
            return value
