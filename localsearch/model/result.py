"""Search result data structure."""

from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class SearchResult:
    """
    Results from a time-bounded search run.

    Attributes:
        state: Best state found (Path, Tour, point array or BlockMatrix)
        cost: Cost of ``state`` (``inf`` if nothing feasible was found)
        elapsed: Wall-clock seconds spent in the search
        cost_log: Best cost after each round, starting with the initial state
        iterations: Number of completed rounds
    """
    state: Any
    cost: float
    elapsed: float
    cost_log: List[float] = field(default_factory=list)
    iterations: int = 0

    def __iter__(self):
        # Unpacks as (state, cost, elapsed).
        return iter((self.state, self.cost, self.elapsed))
