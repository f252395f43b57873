"""Tests for the tabu memory, acceptance rule and the time-bounded search loops."""

import math
import time

import numpy as np
import pytest
from localsearch.model import Griewank, HappyCat, Salomon, XsYang, generate_maze, generate_image, parse_maze
from localsearch.heuristics import (
    TabuMemory,
    TabuConfig,
    AnnealingConfig,
    GeneticConfig,
    acceptance_probability,
    path_tabu_search,
    tour_tabu_search,
    path_simulated_annealing,
    tour_simulated_annealing,
    continuous_simulated_annealing,
    block_simulated_annealing,
    path_genetic_search,
    continuous_genetic_search,
    random_local_search,
    deadline_after,
)
from localsearch.heuristics.genetic import BitGenome, roulette_table
from localsearch.heuristics.path import Path
from localsearch.heuristics.sa import cool
from localsearch.heuristics.tabu import path_tabu_round
from localsearch.heuristics.utils import strictly_better, sort_key, draw_count

SCENARIO_MAZE = "1 3 3\n181\n151\n111\n"
SCENARIO_COSTS = np.array([[0, 1, 2], [1, 0, 1], [2, 1, 0]])


def test_tabu_memory_membership_and_refill():
    tabu = TabuMemory()
    tabu.add('a')
    tabu.add('b')
    tabu.add('a')
    assert 'a' in tabu and 'b' in tabu
    assert len(tabu) == 2

    tabu.refill(['c'])
    assert 'a' not in tabu
    assert 'c' in tabu
    assert len(tabu) == 1

    tabu.clear()
    assert len(tabu) == 0


def test_tabu_memory_evicts_oldest():
    tabu = TabuMemory(capacity=2)
    tabu.extend(['a', 'b', 'c'])
    assert 'a' not in tabu
    assert 'b' in tabu and 'c' in tabu

    with pytest.raises(ValueError):
        TabuMemory(capacity=0)


def test_path_tabu_round_never_picks_a_tabu_key():
    board = generate_maze(height=12, width=12, wall_density=0.15, seed=3).board
    rng = np.random.default_rng(0)
    current = Path.new_to_exit(board, rng)
    current.simplify(board, rng)
    tabu = TabuMemory()

    chosen_rounds = 0
    for _ in range(300):
        k = max(1, int(4 ** 2 / current.cost_key))
        candidates, chosen = path_tabu_round(current, k, board, rng, lambda p: p.key in tabu)
        assert all(c.key not in tabu for c in candidates)
        if chosen is None:
            continue
        chosen_rounds += 1
        assert chosen.key not in tabu
        current = chosen
        tabu.refill(c.key for c in candidates)
    assert chosen_rounds > 0


def test_acceptance_probability_limits():
    assert acceptance_probability(-3.0, 10.0) == 1.0
    assert acceptance_probability(0.0, 0.0) == 1.0
    assert acceptance_probability(float('nan'), 1.0) == 1.0
    assert acceptance_probability(1.0, 0.0) == 0.0
    assert acceptance_probability(1.0, 1e-9) < 1e-100
    assert acceptance_probability(1.0, 1e12) > 0.999999
    assert acceptance_probability(5.0, 10.0) == pytest.approx(math.exp(-0.5))
    # Hotter means more permissive
    assert acceptance_probability(5.0, 1.0) < acceptance_probability(5.0, 10.0)


def test_cooling_schedules():
    geometric = AnnealingConfig()
    assert cool(100.0, geometric) == pytest.approx(98.0)

    linear = AnnealingConfig(alpha=None, cooling_step=1.0)
    assert cool(100.0, linear) == 99.0
    assert cool(0.5, linear) == 0.0


def test_weak_cost_ordering():
    nan = float('nan')
    assert strictly_better(1, 2)
    assert not strictly_better(2, 2)
    assert not strictly_better(nan, 1)
    assert not strictly_better(1, nan)
    assert sort_key(None) == math.inf
    assert sort_key(nan) == math.inf


def test_draw_count_respects_minimum():
    rng = np.random.default_rng(0)
    draws = [draw_count(rng, 1.0, 4.0, 1.0) for _ in range(100)]
    assert all(d > 1.0 for d in draws)


def test_expired_deadline_returns_initial_state():
    board = parse_maze(SCENARIO_MAZE).board
    result = path_tabu_search(board, time.perf_counter() - 1.0, seed=0)
    assert result.iterations == 0
    assert result.cost == 1
    assert result.cost_log == [1]


def test_scenario_maze_all_loops():
    board = parse_maze(SCENARIO_MAZE).board
    for search in (path_tabu_search, path_simulated_annealing, path_genetic_search):
        result = search(board, deadline_after(0.05), seed=1)
        assert result.cost == 1, search.__name__
        assert result.state.moves == Path.new_to_exit(board, np.random.default_rng(0)).moves


def test_scenario_tsp_all_loops():
    for search in (tour_tabu_search, tour_simulated_annealing):
        result = search(SCENARIO_COSTS, deadline_after(0.05), seed=1)
        assert result.cost == 4, search.__name__
        assert result.state.nodes in ([0, 1, 2, 0], [0, 2, 1, 0])


def test_maze_searches_return_feasible_best():
    board = generate_maze(height=10, width=10, wall_density=0.2, seed=8).board
    for search in (path_tabu_search, path_simulated_annealing, path_genetic_search):
        result = search(board, deadline_after(0.2), seed=2)
        path = result.state
        assert path.is_feasible, search.__name__
        assert result.cost == len(path.moves)
        assert Path.from_moves(path.starting_point, path.moves, board).cost == path.cost
        assert result.cost == min(result.cost_log)
        assert all(a >= b for a, b in zip(result.cost_log, result.cost_log[1:]))


def test_tabu_without_restarts_stops_when_stalled():
    board = parse_maze(SCENARIO_MAZE).board
    config = TabuConfig(restart=False)
    result = path_tabu_search(board, deadline_after(5.0), config=config, seed=0)
    assert result.elapsed < 5.0
    assert result.cost == 1


def test_genetic_uses_supplied_paths():
    instance = parse_maze("1 5 5 2 4\n11811\n10001\n10501\n10001\n11111\nLURU\nRULU\n")
    assert instance.population_size == 4
    result = path_genetic_search(instance.board, deadline_after(0.1), initial_moves=instance.initial_moves,
                                 population_size=instance.population_size, seed=3)
    assert 2 <= result.cost <= 4


def test_continuous_searches_do_not_get_worse():
    problems = [Griewank(), HappyCat(), Salomon(), XsYang([0.5, 0.2, 0.8, 0.1, 0.3])]
    for problem in problems:
        start = problem.random(0.5, np.random.default_rng(0))
        start_value = problem.value(start)
        for search in (random_local_search, continuous_simulated_annealing):
            result = search(problem, deadline_after(0.05), start=start, seed=4)
            assert result.cost <= start_value, (problem.name, search.__name__)
            assert result.cost == pytest.approx(problem.value(result.state))
            low, high = problem.bounds
            assert np.all(result.state >= low) and np.all(result.state <= high)


def test_local_search_approaches_salomon_root():
    problem = Salomon()
    result = random_local_search(problem, deadline_after(0.3), start=np.full(4, 3.0), seed=9)
    assert result.cost < problem.value(np.full(4, 3.0))


def test_continuous_genetic_search_on_xs_yang():
    problem = XsYang([1.0, 1.0, 1.0, 1.0, 1.0])
    start = np.array([4.0, -4.0, 3.0, 2.0, -1.0])
    config = GeneticConfig(population_size=50)
    result = continuous_genetic_search(problem, deadline_after(0.2), start=start, config=config, seed=6)
    assert result.cost <= problem.value(start)
    assert result.cost >= 0.0
    assert result.cost == pytest.approx(problem.value(result.state))


def test_bit_genome_operators():
    genome = BitGenome(XsYang([0.0] * 5), bits=8)
    g1 = np.zeros(5, dtype=np.int64)
    g2 = np.full(5, 0xFF, dtype=np.int64)

    child = genome.recombine_inner(g1, g2, 0, 3)
    assert np.all(child == 0xF0)
    child = genome.recombine_outer(g1, g2, 2)
    assert list(child) == [0, 0, 0xFF, 0, 0]
    assert genome.mutate_big(g1, 1)[1] == 0xFF
    assert np.all(genome.mutate_small(g1, [0, 7]) == 0x81)

    decoded = genome.decode(genome.encode(np.array([-5.0, 5.0, 0.0, 1.0, -2.5])))
    assert decoded[0] == pytest.approx(-5.0)
    assert decoded[1] == pytest.approx(5.0)

    # Operators may set every bit; the decoded point still lies in the box.
    low, high = genome.problem.bounds
    for genes in (genome.mutate_big(g1, 0), genome.mutate_small(g1, range(8)), genome.recombine_inner(g1, g2, 0, 7)):
        point = genome.decode(genes)
        assert np.all(point >= low) and np.all(point <= high)
    assert genome.decode(g2)[0] == pytest.approx(high)


def test_roulette_prefers_cheaper_values():
    table = roulette_table(np.array([0.0, 1.0, 9.0]))
    weights = np.diff(np.concatenate([[0.0], table]))
    assert weights[0] > weights[1] > weights[2]
    assert np.all(np.diff(table) > 0)


def test_block_annealing_improves_on_black_image():
    instance = generate_image(height=12, width=10, block_size=2, seed=1)
    result = block_simulated_annealing(instance.values, instance.block_size, deadline_after(0.2), seed=2)
    assert result.cost <= result.cost_log[0]
    assert result.cost == pytest.approx(result.state.distance_from(instance.values))
    assert result.state.block_height >= 2 and result.state.block_width >= 2
