"""Tests for TSP tours: incremental swap costs and neighbourhoods."""

import numpy as np
import pytest
from localsearch.heuristics.tour import Tour, full_cost, swap_pairs, random_swap_pairs
from localsearch.heuristics.neighborhoods import take_non_tabu, tour_neighbours
from localsearch.model import generate_tsp


def random_matrix(n: int, symmetric: bool, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    costs = rng.integers(0, 100, size=(n, n))
    if symmetric:
        costs = np.triu(costs) + np.triu(costs, 1).T
    np.fill_diagonal(costs, 0)
    return costs


@pytest.mark.parametrize('symmetric', [True, False])
def test_swap_cost_matches_full_recomputation(symmetric):
    for n in (3, 4, 5, 8):
        costs = random_matrix(n, symmetric, seed=n)
        tour = Tour.new_random(costs, np.random.default_rng(n))
        for i, j in swap_pairs(tour):
            swapped = tour.swap(i, j, costs)
            assert swapped.cost == full_cost(swapped.nodes, costs), f"pair ({i}, {j}) on n={n}"
            assert tour.nodes[i] == swapped.nodes[j] and tour.nodes[j] == swapped.nodes[i]


def test_chained_swaps_stay_exact():
    costs = random_matrix(10, symmetric=False, seed=1)
    rng = np.random.default_rng(2)
    tour = Tour.new_random(costs, rng)
    for _ in range(200):
        (i, j), = random_swap_pairs(tour, rng, limit=1)
        tour = tour.swap(i, j, costs)
    assert tour.cost == full_cost(tour.nodes, costs)


def test_swap_rejects_invalid_positions():
    costs = random_matrix(5, symmetric=True, seed=0)
    tour = Tour.from_nodes([0, 1, 2, 3, 4, 0], costs)
    for i, j in [(0, 1), (2, 2), (3, 2), (1, 5), (4, 5)]:
        with pytest.raises(ValueError):
            tour.swap(i, j, costs)


def test_from_nodes_requires_depot_at_both_ends():
    costs = random_matrix(3, symmetric=True, seed=0)
    with pytest.raises(ValueError):
        Tour.from_nodes([1, 0, 2, 0], costs)
    with pytest.raises(ValueError):
        Tour.from_nodes([0, 1, 2], costs)


def test_scenario_three_nodes():
    costs = np.array([[0, 1, 2], [1, 0, 1], [2, 1, 0]])
    tour = Tour.from_nodes([0, 1, 2, 0], costs)
    assert tour.cost == 4
    assert tour.swap(1, 2, costs).cost == 4


def test_new_random_is_a_permutation():
    costs = generate_tsp(n=12, seed=4).distances
    tour = Tour.new_random(costs, np.random.default_rng(0))
    assert tour.nodes[0] == 0 and tour.nodes[-1] == 0
    assert sorted(tour.nodes[1:-1]) == list(range(1, 12))
    assert tour.cost == full_cost(tour.nodes, costs)


def test_full_random_neighbourhood_visits_each_pair_once():
    costs = random_matrix(7, symmetric=True, seed=3)
    tour = Tour.new_random(costs, np.random.default_rng(3))
    pairs = list(random_swap_pairs(tour, np.random.default_rng(4)))
    assert sorted(pairs) == list(swap_pairs(tour))
    assert len(pairs) == 15


def test_short_tours_have_no_neighbours():
    costs = np.array([[0, 3], [3, 0]])
    tour = Tour.from_nodes([0, 1, 0], costs)
    assert list(random_swap_pairs(tour, np.random.default_rng(0))) == []
    assert list(random_swap_pairs(tour, np.random.default_rng(0), limit=5)) == []


def test_take_non_tabu_skips_tabu_tours():
    costs = random_matrix(6, symmetric=False, seed=5)
    rng = np.random.default_rng(6)
    tour = Tour.new_random(costs, rng)
    everything = {t.key for t in tour_neighbours(tour, costs, rng)}
    banned = set(list(everything)[:4])

    kept = take_non_tabu(tour_neighbours(tour, costs, rng), lambda t: t.key in banned, survivors=None)
    assert len(kept) == len(everything) - 4
    assert all(t.key not in banned for t in kept)

    capped = take_non_tabu(tour_neighbours(tour, costs, rng), lambda t: t.key in banned, survivors=2, raw_limit=3)
    assert len(capped) <= 2
