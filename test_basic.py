"""Basic integration test to verify all components work together."""

import io
import json

import numpy as np
import pandas as pd
from localsearch.model import parse_maze, parse_tsp, parse_function, generate_maze, generate_tsp, generate_image
from localsearch.baselines import wall_follow_path, random_paths, nearest_neighbour_tour, random_tours
from localsearch.heuristics import path_tabu_search, tour_tabu_search, deadline_after
from localsearch.model.instance import TspInstance
from localsearch.model.instance_generator import tsp_to_text, save_instance
from localsearch.model.parsing import PARSERS
from localsearch.experiments.run_all import (
    solve, run_all_algorithms_on_instance, run_all_experiments, load_results, summarise_runs,
)
from localsearch.experiments.run_experiment import run
from localsearch.heuristics.config import load_config


def test_small_maze():
    """Scenario: 3x3 maze whose agent already touches the exit."""
    print("Testing with the 3x3 maze...")

    instance = parse_maze("1 3 3\n181\n151\n111\n")
    instance.validate()
    print("  Instance validated successfully")

    path = wall_follow_path(instance.board)
    assert path.cost == 1, f"Wall following should step straight into the exit, got {path}"

    cost, path = random_paths(instance.board, num_samples=5, seed=42)
    assert cost == 1

    result = path_tabu_search(instance.board, deadline_after(0.2), seed=42)
    print(f"  Tabu search: cost = {result.cost}, rounds = {result.iterations}")
    assert result.cost == 1
    assert [d.value for d in result.state.moves] == ['U']

    print("\nAll basic maze tests passed!")


def test_small_tsp():
    """Scenario: every tour of the 3-node instance costs 4."""
    instance = parse_tsp("1 3\n0 1 2\n1 0 1\n2 1 0\n")
    instance.validate()

    cost, tour = nearest_neighbour_tour(instance.distances)
    assert cost == 4
    assert tour.nodes[0] == 0 and tour.nodes[-1] == 0

    cost, _ = random_tours(instance.distances, num_samples=3, seed=42)
    assert cost == 4

    result = tour_tabu_search(instance.distances, deadline_after(0.1), seed=42)
    assert result.cost == 4


def test_solve_every_algorithm_on_generated_instances():
    """Randomised algorithms return feasible answers within a short budget."""
    maze = generate_maze(height=7, width=9, wall_density=0.2, seed=3)
    results = run_all_algorithms_on_instance('maze', maze, algorithms=['tabu', 'sa', 'genetic', 'random'],
                                             seed=1, time_limit=0.1)
    for name, res in results.items():
        assert res['cost'] is not None, f"{name} failed: {res}"
        assert res['cost'] == len(res['solution']), f"{name} cost does not match its moves"

    tsp = generate_tsp(n=6, seed=3)
    results = run_all_algorithms_on_instance('tsp', tsp, algorithms=['tabu', 'sa', 'nearest_neighbour'],
                                             seed=1, time_limit=0.1)
    for name, res in results.items():
        assert sorted(res['solution'][1:-1]) == list(range(1, 6)), f"{name} is not a permutation"

    image = generate_image(height=8, width=8, block_size=2, seed=3)
    result = solve('image', image, seed=1, time_limit=0.1)
    assert result.cost <= result.cost_log[0]


def test_function_instance_end_to_end():
    instance = parse_function("1 50 -50 20 10\n")
    result = solve('function', instance, 'local_search', seed=5, time_limit=0.1)
    assert result.cost <= instance.problem.value(instance.start)
    assert np.all(np.abs(result.state) <= 100.0)


def test_cli_output_format():
    """The CLI prints the cost on stdout and the moves on stderr."""
    out, err = io.StringIO(), io.StringIO()
    status = run('maze', "1 3 3\n181\n151\n111\n", seed=1, time_limit=0.05, out=out, err=err)
    assert status == 0
    assert out.getvalue().strip() == '1'
    assert err.getvalue().strip() == 'U'


def test_cli_rejects_malformed_instance():
    out, err = io.StringIO(), io.StringIO()
    status = run('tsp', "1 3\n0 1 2\n1 0 1\n", out=out, err=err)
    assert status == 1
    assert 'Not enough lines' in err.getvalue()
    assert out.getvalue() == ''


def test_cli_rejects_maze_without_exit():
    out, err = io.StringIO(), io.StringIO()
    status = run('maze', "1 3 3\n111\n151\n111\n", time_limit=0.1, out=out, err=err)
    assert status == 1
    assert 'no exit' in err.getvalue()
    assert out.getvalue() == ''


def test_cli_validates_parsed_instance(monkeypatch):
    """Instances failing their own validation are rejected before any search."""
    negative = TspInstance(distances=np.array([[0, -1], [1, 0]]), time_limit=1.0)
    monkeypatch.setitem(PARSERS, 'tsp', lambda text: negative)
    out, err = io.StringIO(), io.StringIO()
    status = run('tsp', "ignored", out=out, err=err)
    assert status == 1
    assert 'non-negative' in err.getvalue()
    assert out.getvalue() == ''


def test_annealing_overrides_reach_continuous_and_image_runs(tmp_path):
    config_path = tmp_path / 'params.json'
    config_path.write_text(json.dumps({
        'continuous_annealing': {'near_scale': 0.0},
        'block_annealing': {'resize_probability': 0.0, 'perturb_probability': 0.0},
    }))
    configs = load_config(str(config_path))

    # A zero radius proposes the current point every round.
    instance = parse_function("1 50 -50 20 10\n")
    result = solve('function', instance, 'sa', configs, seed=5, time_limit=0.05)
    assert np.array_equal(result.state, instance.start)
    assert result.cost == instance.problem.value(instance.start)

    # Without resizes or colour shifts the image stays black.
    image = generate_image(height=8, width=8, block_size=2, seed=3)
    result = solve('image', image, 'sa', configs, seed=1, time_limit=0.05)
    assert result.cost == result.cost_log[0]
    assert not np.any(result.state.values)
    assert (result.state.block_height, result.state.block_width) == (2, 2)


def test_batch_experiments_write_results(tmp_path):
    instance_file = tmp_path / "tsp_small.txt"
    save_instance(tsp_to_text(generate_tsp(n=5, seed=11)), str(instance_file))

    df = run_all_experiments('tsp', [str(instance_file)], str(tmp_path / 'results'),
                             algorithms=['nearest_neighbour', 'tabu'], seeds=[1, 2],
                             time_limit=0.05, plot=False)
    assert len(df) == 4
    assert (tmp_path / 'results' / 'all_results.csv').exists()

    saved = load_results(str(tmp_path / 'results' / 'tsp_small_results.json'))
    assert sorted(saved) == ['1', '2']
    assert saved['1']['nearest_neighbour']['cost'] == saved['2']['nearest_neighbour']['cost']

    rows, cost_logs = summarise_runs('tsp_small', saved)
    assert len(rows) == 4
    assert sorted(cost_logs) == [
        'nearest_neighbour seed=1', 'nearest_neighbour seed=2', 'tabu seed=1', 'tabu seed=2',
    ]


def test_batch_plots(tmp_path):
    import matplotlib
    matplotlib.use('Agg')
    from localsearch.experiments.plots import create_all_plots

    df = pd.DataFrame({
        'instance': ['a', 'a'], 'algorithm': ['tabu', 'sa'], 'seed': [1, 1],
        'cost': [10.0, 12.0], 'runtime': [0.1, 0.1], 'iterations': [5, 7],
    })
    create_all_plots(df, {'a': {'tabu': [14.0, 12.0, 10.0], 'sa': [15.0, 12.0]}}, str(tmp_path))
    assert (tmp_path / 'cost_comparison.png').exists()
    assert (tmp_path / 'a_convergence.png').exists()


if __name__ == '__main__':
    test_small_maze()
    test_small_tsp()
