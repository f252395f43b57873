"""Greedy nearest-neighbour baseline for the TSP."""

from typing import Tuple

import numpy as np

from ..heuristics.tour import DEPOT, Tour


def nearest_neighbour_tour(costs: np.ndarray) -> Tuple[float, Tour]:
    """
    Greedy tour: from the depot, always travel to the cheapest unvisited node.

    Ties go to the lowest node index.

    Args:
        costs: Square cost matrix, node 0 is the depot

    Returns:
        Tuple of (cost, tour)
    """
    n = costs.shape[0]
    unvisited = set(range(1, n))
    nodes = [DEPOT]

    while unvisited:
        here = nodes[-1]
        nearest = min(unvisited, key=lambda v: (costs[here, v], v))
        nodes.append(nearest)
        unvisited.remove(nearest)

    nodes.append(DEPOT)
    tour = Tour.from_nodes(nodes, costs)
    return tour.cost_key, tour
