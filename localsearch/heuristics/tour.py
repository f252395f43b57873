"""Node-permutation state for the TSP with O(1) swap re-evaluation."""

from typing import Iterator, List, Optional, Tuple

import numpy as np

DEPOT = 0


class Tour:
    """
    Closed tour over nodes ``0..n-1`` stored as ``[0, ..., 0]``.

    Positions 0 and ``len(nodes) - 1`` hold the depot and are never swapped.
    ``cost`` is the sum of ``costs[nodes[k], nodes[k + 1]]``.
    """
    __slots__ = ('nodes', 'cost')

    def __init__(self, nodes: List[int], cost: int):
        self.nodes = nodes
        self.cost = cost

    @classmethod
    def from_nodes(cls, nodes: List[int], costs: np.ndarray) -> 'Tour':
        nodes = [int(v) for v in nodes]
        if len(nodes) < 2 or nodes[0] != DEPOT or nodes[-1] != DEPOT:
            raise ValueError(f"a tour must start and end at the depot, got {nodes}")
        return cls(nodes, full_cost(nodes, costs))

    @classmethod
    def new_random(cls, costs: np.ndarray, rng: np.random.Generator) -> 'Tour':
        n = costs.shape[0]
        middle = (rng.permutation(n - 1) + 1).tolist()
        return cls.from_nodes([DEPOT] + middle + [DEPOT], costs)

    @property
    def key(self) -> Tuple[int, ...]:
        """Canonical hashable identity used by tabu memories."""
        return tuple(self.nodes)

    @property
    def cost_key(self) -> float:
        return self.cost

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tour):
            return NotImplemented
        return self.nodes == other.nodes

    __hash__ = None

    def __repr__(self) -> str:
        return f"Tour(nodes={self.nodes}, cost={self.cost})"

    @property
    def last_swappable(self) -> int:
        return len(self.nodes) - 2

    def swap(self, i: int, j: int, costs: np.ndarray) -> 'Tour':
        """
        Tour with positions ``i`` and ``j`` exchanged, cost updated incrementally.

        Requires ``1 <= i < j <= len(nodes) - 2``. Adjacent positions change
        three edges, all others change four; both cases reference the original
        neighbours of ``i`` and ``j``.
        """
        if not 1 <= i < j <= self.last_swappable:
            raise ValueError(f"invalid swap ({i}, {j}) for a tour of length {len(self.nodes)}")

        nodes = self.nodes
        before_i, at_i, at_j, after_j = nodes[i - 1], nodes[i], nodes[j], nodes[j + 1]

        if j == i + 1:
            removed = costs[before_i, at_i] + costs[at_i, at_j] + costs[at_j, after_j]
            added = costs[before_i, at_j] + costs[at_j, at_i] + costs[at_i, after_j]
        else:
            after_i, before_j = nodes[i + 1], nodes[j - 1]
            removed = (costs[before_i, at_i] + costs[at_i, after_i]
                       + costs[before_j, at_j] + costs[at_j, after_j])
            added = (costs[before_i, at_j] + costs[at_j, after_i]
                     + costs[before_j, at_i] + costs[at_i, after_j])

        swapped = list(nodes)
        swapped[i], swapped[j] = at_j, at_i
        return Tour(swapped, int(self.cost - removed + added))


def full_cost(nodes: List[int], costs: np.ndarray) -> int:
    """Cost of the tour recomputed from scratch."""
    return int(sum(costs[a, b] for a, b in zip(nodes, nodes[1:])))


def swap_pairs(tour: Tour) -> Iterator[Tuple[int, int]]:
    """Every valid swap ``(i, j)`` in index order."""
    last = tour.last_swappable
    for i in range(1, last):
        for j in range(i + 1, last + 1):
            yield i, j


def random_swap_pairs(tour: Tour, rng: np.random.Generator, limit: Optional[int] = None) -> Iterator[Tuple[int, int]]:
    """
    Valid swaps in random order.

    Without ``limit`` the full neighbourhood is shuffled, so no pair repeats.
    With ``limit`` that many pairs are drawn lazily with replacement.
    """
    last = tour.last_swappable
    if last < 2:
        return
    if limit is None:
        pairs = list(swap_pairs(tour))
        for k in rng.permutation(len(pairs)):
            yield pairs[k]
        return
    for _ in range(limit):
        i, j = rng.choice(last, size=2, replace=False) + 1
        yield (int(i), int(j)) if i < j else (int(j), int(i))
