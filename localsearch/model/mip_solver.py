"""Exact MIP solver for small TSP instances."""

import numpy as np
from typing import List, Optional, Tuple

import pulp


def solve_exact_tsp(distances: np.ndarray, time_limit: Optional[float] = 60.0) -> Tuple[Optional[int], Optional[List[int]]]:
    """
    Solve a TSP instance to optimality using an MTZ formulation.

    Tours start and end at node 0, matching the tours built by the heuristics.
    If the time limit is exceeded, returns None to indicate the instance was too
    difficult.

    Args:
        distances: Square cost matrix, shape (n, n)
        time_limit: Time limit in seconds (default: 60 seconds)

    Returns:
        Tuple of (optimal_cost, optimal_nodes) where optimal_nodes starts and
        ends with 0. Returns (None, None) if the solver did not finish.
    """
    if time_limit is None:
        time_limit = 60.0

    n = distances.shape[0]
    if n == 1:
        return int(distances[0, 0]), [0, 0]

    prob = pulp.LpProblem("TravellingSalesman", pulp.LpMinimize)

    # x[a, b] = 1 if the tour goes from a directly to b
    x = {}
    for a in range(n):
        for b in range(n):
            if a != b:
                x[a, b] = pulp.LpVariable(f"x_{a}_{b}", cat='Binary')

    # Visit order of every non-depot node (MTZ)
    order = {}
    for a in range(1, n):
        order[a] = pulp.LpVariable(f"order_{a}", lowBound=1, upBound=n - 1, cat='Continuous')

    prob += pulp.lpSum([int(distances[a, b]) * x[a, b] for (a, b) in x])

    for a in range(n):
        prob += pulp.lpSum([x[a, b] for b in range(n) if b != a]) == 1
        prob += pulp.lpSum([x[b, a] for b in range(n) if b != a]) == 1

    # Subtour elimination
    for a in range(1, n):
        for b in range(1, n):
            if a != b:
                prob += order[a] - order[b] + (n - 1) * x[a, b] <= n - 2

    prob.solve(pulp.PULP_CBC_CMD(timeLimit=time_limit, msg=0))

    if prob.status != pulp.LpStatusOptimal:
        print(f"Warning: MIP solver status: {pulp.LpStatus[prob.status]} (n={n})")
        return None, None

    successor = {}
    for (a, b), var in x.items():
        val = pulp.value(var)
        if val is not None and val > 0.5:
            successor[a] = b

    nodes = [0]
    while len(nodes) <= n:
        nodes.append(successor[nodes[-1]])
    if nodes[-1] != 0 or len(set(nodes[:-1])) != n:
        print("Warning: MIP solution is not a single tour")
        return None, None

    cost = sum(int(distances[a, b]) for a, b in zip(nodes, nodes[1:]))
    return cost, nodes
