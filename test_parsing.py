"""Tests for the instance readers, generators and the JSON configuration."""

import json

import numpy as np
import pytest
from localsearch.model import (
    ErrorKind,
    Field,
    InstanceFormatError,
    Point,
    Salomon,
    XsYang,
    HappyCat,
    Griewank,
    parse_maze,
    parse_tsp,
    parse_image,
    parse_function,
    load_instance,
    exit_reachable,
    generate_maze,
    generate_tsp,
    generate_image,
)
from localsearch.model.instance_generator import maze_to_text, tsp_to_text, image_to_text, save_instance, generate_instance_set
from localsearch.heuristics.config import (
    TabuConfig,
    load_config,
    default_configs,
    resolve_tabu,
    resolve_tour_tabu,
    resolve_maze_annealing,
    AnnealingConfig,
    TourTabuConfig,
)


def error_kind(parser, text) -> ErrorKind:
    with pytest.raises(InstanceFormatError) as excinfo:
        parser(text)
    return excinfo.value.kind


def test_parse_scenario_maze():
    instance = parse_maze("1 3 3\n181\n151\n111\n")
    board = instance.board
    assert instance.time_limit == 1.0
    assert board.agent_position == Point(1, 1)
    # The first text line is the top row.
    assert board.fields[2, 1] == Field.EXIT
    assert board.is_exit(Point(1, 2))
    assert instance.initial_moves == []
    assert instance.population_size is None


def test_parse_maze_with_initial_paths():
    instance = parse_maze("2 5 5 2 10\n11811\n10001\n10501\n10001\n11111\nUU\nLURU\n")
    assert instance.population_size == 10
    assert [''.join(d.value for d in m) for m in instance.initial_moves] == ['UU', 'LURU']


@pytest.mark.parametrize('text, kind', [
    ("x 3 3\n181\n151\n111\n", ErrorKind.INVALID_HEADER),
    ("0 3 3\n181\n151\n111\n", ErrorKind.INVALID_HEADER),
    ("1 3\n181\n151\n111\n", ErrorKind.INVALID_HEADER),
    ("", ErrorKind.NOT_ENOUGH_LINES),
    ("1 3 3\n181\n151\n", ErrorKind.NOT_ENOUGH_LINES),
    ("1 3 3\n181\n15\n111\n", ErrorKind.INVALID_LINE),
    ("1 3 3\n181\n151\n101\n", ErrorKind.INVALID_LINE),
    ("1 3 3\n181\n1x1\n111\n", ErrorKind.INVALID_LINE),
    ("1 3 3\n811\n151\n111\n", ErrorKind.INVALID_GOAL),
    ("1 4 4\n1181\n1801\n1501\n1111\n", ErrorKind.INVALID_GOAL),
    ("1 3 3\n111\n151\n111\n", ErrorKind.INVALID_GOAL),
    ("1 3 3\n181\n101\n111\n", ErrorKind.INVALID_AGENT),
    ("1 4 4\n1181\n1551\n1001\n1111\n", ErrorKind.INVALID_AGENT),
    ("1 3 3\n181\n151\n151\n", ErrorKind.INVALID_AGENT),
    ("1 3 3 1 5\n181\n151\n111\n", ErrorKind.NOT_ENOUGH_LINES),
    ("1 3 3 1 5\n181\n151\n111\nUX\n", ErrorKind.INVALID_LINE),
])
def test_maze_errors(text, kind):
    assert error_kind(parse_maze, text) == kind


def test_parse_tsp():
    instance = parse_tsp("3 3\n0 1 2\n1 0 1\n2 1 0\n\n")
    assert instance.time_limit == 3.0
    assert instance.num_nodes == 3
    assert instance.distances.tolist() == [[0, 1, 2], [1, 0, 1], [2, 1, 0]]


@pytest.mark.parametrize('text, kind', [
    ("1\n0\n", ErrorKind.INVALID_HEADER),
    ("a 2\n0 1\n1 0\n", ErrorKind.INVALID_HEADER),
    ("1 3\n0 1 2\n1 0 1\n", ErrorKind.NOT_ENOUGH_LINES),
    ("1 2\n0 1\n1 0\n0 0\n", ErrorKind.TOO_MANY_LINES),
    ("1 2\n0 1 1\n1 0\n", ErrorKind.INVALID_LINE),
    ("1 2\n0 -1\n1 0\n", ErrorKind.INVALID_LINE),
    ("1 2\n0 x\n1 0\n", ErrorKind.INVALID_LINE),
])
def test_tsp_errors(text, kind):
    assert error_kind(parse_tsp, text) == kind


def test_parse_image():
    instance = parse_image("1 2 3 1\n0 128 255\n32 64 1\n")
    assert instance.values.shape == (2, 3)
    assert instance.block_size == 1
    assert error_kind(parse_image, "1 2 3 1\n0 128 256\n32 64 1\n") == ErrorKind.INVALID_LINE
    assert error_kind(parse_image, "1 2 3 3\n0 1 2\n3 4 5\n") == ErrorKind.INVALID_HEADER
    assert error_kind(parse_image, "1 2 3 0\n0 1 2\n3 4 5\n") == ErrorKind.INVALID_HEADER


def test_parse_function_forms():
    instance = parse_function("1 0")
    assert isinstance(instance.problem, HappyCat)
    assert instance.start is None

    instance = parse_function("2 1\n")
    assert isinstance(instance.problem, Griewank)

    instance = parse_function("5 1 2 3 4")
    assert isinstance(instance.problem, Salomon)
    assert instance.start.tolist() == [1.0, 2.0, 3.0, 4.0]
    assert instance.time_limit == 5.0

    instance = parse_function("1 1 2 3 4 5 0.1 0.2 0.3 0.4 0.5")
    assert isinstance(instance.problem, XsYang)
    assert instance.start.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert instance.problem.parameters.tolist() == [0.1, 0.2, 0.3, 0.4, 0.5]


@pytest.mark.parametrize('text, kind', [
    ("", ErrorKind.INVALID_HEADER),
    ("0 1", ErrorKind.INVALID_HEADER),
    ("1 7", ErrorKind.INVALID_HEADER),
    ("1 1 2", ErrorKind.INVALID_HEADER),
    ("1 a", ErrorKind.INVALID_HEADER),
    ("1 1 2 3 4 5 0.1 0.2 0.3 0.4 1.5", ErrorKind.INVALID_LINE),
])
def test_function_errors(text, kind):
    assert error_kind(parse_function, text) == kind


def test_generated_instances_round_trip_through_text(tmp_path):
    maze = generate_maze(height=8, width=12, wall_density=0.3, seed=5)
    assert exit_reachable(maze.board)
    path = tmp_path / 'maze.txt'
    save_instance(maze_to_text(maze), str(path))
    parsed = load_instance('maze', str(path))
    assert np.array_equal(parsed.board.fields, maze.board.fields)
    assert parsed.board.agent_position == maze.board.agent_position

    tsp = generate_tsp(n=7, symmetric=False, seed=5)
    parsed = parse_tsp(tsp_to_text(tsp))
    assert np.array_equal(parsed.distances, tsp.distances)

    image = generate_image(height=6, width=8, block_size=2, seed=5)
    parsed = parse_image(image_to_text(image))
    assert parsed.block_size == 2
    assert np.array_equal(parsed.values, image.values)


def test_generate_instance_set(tmp_path):
    counts = generate_instance_set(str(tmp_path / 'instances'), n_mazes=2, n_tsp=2)
    assert counts == (2, 2)
    assert sorted(p.name for p in (tmp_path / 'instances').iterdir()) == [
        'maze_00.txt', 'maze_01.txt', 'tsp_00.txt', 'tsp_01.txt',
    ]


def test_load_config_overrides_defaults(tmp_path):
    path = tmp_path / 'params.json'
    path.write_text(json.dumps({'tabu': {'tabu_size': 4, 'restart': False}, 'annealing': {'alpha': 0.9}}))
    configs = load_config(str(path))
    assert configs['tabu'].tabu_size == 4
    assert configs['tabu'].restart is False
    assert configs['tabu'].empty_round_penalty == 5
    assert configs['annealing'].alpha == 0.9
    assert configs['genetic'] == default_configs()['genetic']


def test_load_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / 'params.json'
    path.write_text(json.dumps({'tabu': {'tenure': 4}}))
    with pytest.raises(ValueError):
        load_config(str(path))

    path.write_text(json.dumps({'ant_colony': {}}))
    with pytest.raises(ValueError):
        load_config(str(path))


def test_size_dependent_defaults():
    tabu = resolve_tabu(TabuConfig(), height=7, width=12)
    assert tabu.tabu_size == 7
    assert tabu.max_fails == 19
    assert resolve_tabu(TabuConfig(tabu_size=3), 7, 12).tabu_size == 3

    assert resolve_tour_tabu(TourTabuConfig(), 10).max_fails == 20

    annealing = resolve_maze_annealing(AnnealingConfig(), 10, 22)
    assert annealing.max_fails == pytest.approx(32.0 ** 1.6)


def test_annealing_sections_for_continuous_and_image_runs():
    configs = default_configs()
    assert configs['continuous_annealing'].alpha is None
    assert configs['continuous_annealing'].cooling_step == 1.0
    assert configs['block_annealing'].alpha == 0.9
    assert configs['annealing'].alpha == 0.98
