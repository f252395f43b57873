"""Experimental harness for running all algorithms on instances."""

import argparse
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..model.instance import MazeInstance, TspInstance
from ..model.parsing import load_instance
from ..model.point import moves_to_string
from ..model.result import SearchResult
from ..model.mip_solver import solve_exact_tsp
from ..baselines import nearest_neighbour_tour, random_paths, random_tours, wall_follow_path
from ..heuristics.config import default_configs, load_config
from ..heuristics.genetic import continuous_genetic_search, path_genetic_search
from ..heuristics.local_search import random_local_search
from ..heuristics.sa import (
    block_simulated_annealing,
    continuous_simulated_annealing,
    path_simulated_annealing,
    tour_simulated_annealing,
)
from ..heuristics.tabu import path_tabu_search, tour_tabu_search
from ..heuristics.tour import Tour
from ..heuristics.utils import deadline_after, make_rng

# Each runner takes (instance, deadline, configs, rng, verbose) and returns a SearchResult.
Runner = Callable[[Any, float, Dict[str, Any], np.random.Generator, bool], SearchResult]


def _baseline_result(cost, state, start: float) -> SearchResult:
    return SearchResult(state, float(cost), time.perf_counter() - start, [float(cost)], 1)


def _wall_follow(inst: MazeInstance, deadline, configs, rng, verbose) -> SearchResult:
    start = time.perf_counter()
    path = wall_follow_path(inst.board)
    return _baseline_result(path.cost_key, path, start)


def _random_paths(inst: MazeInstance, deadline, configs, rng, verbose) -> SearchResult:
    start = time.perf_counter()
    cost, path = random_paths(inst.board, time_limit=deadline - start, seed=int(rng.integers(2 ** 31)))
    return _baseline_result(cost, path, start)


def _nearest_neighbour(inst: TspInstance, deadline, configs, rng, verbose) -> SearchResult:
    start = time.perf_counter()
    cost, tour = nearest_neighbour_tour(inst.distances)
    return _baseline_result(cost, tour, start)


def _random_tours(inst: TspInstance, deadline, configs, rng, verbose) -> SearchResult:
    start = time.perf_counter()
    cost, tour = random_tours(inst.distances, seed=int(rng.integers(2 ** 31)))
    return _baseline_result(cost, tour, start)


def _exact_tsp(inst: TspInstance, deadline, configs, rng, verbose) -> SearchResult:
    start = time.perf_counter()
    cost, nodes = solve_exact_tsp(inst.distances, time_limit=max(1.0, deadline - start))
    if cost is None:
        return SearchResult(None, float('inf'), time.perf_counter() - start)
    return _baseline_result(cost, Tour.from_nodes(nodes, inst.distances), start)


ALGORITHMS: Dict[str, Dict[str, Runner]] = {
    'maze': {
        'tabu': lambda inst, deadline, configs, rng, verbose: path_tabu_search(
            inst.board, deadline, config=configs['tabu'], rng=rng, verbose=verbose),
        'sa': lambda inst, deadline, configs, rng, verbose: path_simulated_annealing(
            inst.board, deadline, config=configs['annealing'], rng=rng, verbose=verbose),
        'genetic': lambda inst, deadline, configs, rng, verbose: path_genetic_search(
            inst.board, deadline, initial_moves=inst.initial_moves,
            population_size=inst.population_size, config=configs['genetic'], rng=rng, verbose=verbose),
        'wall_follow': _wall_follow,
        'random': _random_paths,
    },
    'tsp': {
        'tabu': lambda inst, deadline, configs, rng, verbose: tour_tabu_search(
            inst.distances, deadline, config=configs['tour_tabu'], rng=rng, verbose=verbose),
        'sa': lambda inst, deadline, configs, rng, verbose: tour_simulated_annealing(
            inst.distances, deadline, config=configs['annealing'], rng=rng, verbose=verbose),
        'nearest_neighbour': _nearest_neighbour,
        'random': _random_tours,
        'mip': _exact_tsp,
    },
    'function': {
        'local_search': lambda inst, deadline, configs, rng, verbose: random_local_search(
            inst.problem, deadline, start=inst.start, config=configs['local_search'], rng=rng, verbose=verbose),
        'sa': lambda inst, deadline, configs, rng, verbose: continuous_simulated_annealing(
            inst.problem, deadline, start=inst.start, config=configs['continuous_annealing'],
            rng=rng, verbose=verbose),
        'genetic': lambda inst, deadline, configs, rng, verbose: continuous_genetic_search(
            inst.problem, deadline, start=inst.start, config=configs['genetic'], rng=rng, verbose=verbose),
    },
    'image': {
        'sa': lambda inst, deadline, configs, rng, verbose: block_simulated_annealing(
            inst.values, inst.block_size, deadline, config=configs['block_annealing'],
            rng=rng, verbose=verbose),
    },
}

# Algorithm used when none is requested.
DEFAULT_ALGORITHMS = {
    'maze': 'tabu',
    'tsp': 'tabu',
    'function': 'local_search',
    'image': 'sa',
}


def solve(
    problem: str,
    instance,
    algorithm: Optional[str] = None,
    configs: Optional[Dict[str, Any]] = None,
    seed: Optional[int] = None,
    time_limit: Optional[float] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Run one algorithm on a parsed instance.

    Args:
        problem: 'maze', 'tsp', 'function' or 'image'
        instance: Parsed instance of that problem
        algorithm: Key of ``ALGORITHMS[problem]`` (default: ``DEFAULT_ALGORITHMS[problem]``)
        configs: Sections as returned by ``load_config`` (default: all defaults)
        seed: Seed of the run's random generator
        time_limit: Overrides the instance's time limit (seconds)
        verbose: Passed on to the search loop

    Returns:
        SearchResult of the run
    """
    algorithm = algorithm or DEFAULT_ALGORITHMS[problem]
    if algorithm not in ALGORITHMS[problem]:
        raise ValueError(
            f"unknown algorithm {algorithm!r} for {problem}, choose from {sorted(ALGORITHMS[problem])}"
        )
    instance.validate()
    configs = configs or default_configs()
    rng = make_rng(seed=seed)
    deadline = deadline_after(time_limit if time_limit is not None else instance.time_limit)
    return ALGORITHMS[problem][algorithm](instance, deadline, configs, rng, verbose)


def state_to_json(state) -> Any:
    """JSON-friendly form of a search state."""
    if state is None:
        return None
    if isinstance(state, Tour):
        return state.nodes
    if isinstance(state, np.ndarray):
        return state.tolist()
    if hasattr(state, 'moves'):
        return moves_to_string(state.moves)
    if hasattr(state, 'values'):
        return {'values': state.values.tolist(),
                'block_height': state.block_height, 'block_width': state.block_width}
    return repr(state)


def run_all_algorithms_on_instance(
    problem: str,
    instance,
    algorithms: Optional[List[str]] = None,
    configs: Optional[Dict[str, Any]] = None,
    seed: int = 42,
    time_limit: Optional[float] = None,
    verbose: bool = False,
) -> Dict[str, Dict[str, Any]]:
    """
    Run several algorithms on an instance, each with its own full time budget.

    Returns:
        Dictionary mapping algorithm name to results
        Each result contains: cost, runtime, iterations, cost_log, solution, seed
    """
    results = {}
    for alg_name in algorithms or list(ALGORITHMS[problem]):
        try:
            result = solve(problem, instance, alg_name, configs, seed, time_limit, verbose)
        except (ValueError, RuntimeError) as e:
            print(f"Error running {alg_name}: {e}")
            results[alg_name] = {'error': str(e), 'cost': None, 'runtime': None}
            continue

        if result.state is None:
            results[alg_name] = {
                'error': 'Solver timed out or failed',
                'cost': None,
                'runtime': result.elapsed,
                'skipped': True,
            }
            continue

        results[alg_name] = {
            'cost': float(result.cost),
            'runtime': result.elapsed,
            'iterations': result.iterations,
            'cost_log': [float(c) for c in result.cost_log],
            'solution': state_to_json(result.state),
            'seed': seed,
        }
    return results


def save_results(results: Dict[str, Any], filepath: str) -> None:
    """
    Save results to JSON file.

    Args:
        results: Results dictionary
        filepath: Path to save file
    """
    with open(filepath, 'w') as f:
        json.dump(results, f, indent=2)


def load_results(filepath: str) -> Dict[str, Any]:
    with open(filepath, 'r') as f:
        return json.load(f)


def summarise_runs(
    name: str,
    per_seed: Dict[str, Dict[str, Dict[str, Any]]],
) -> Tuple[List[Dict[str, Any]], Dict[str, List[float]]]:
    """
    Flatten the per-seed results of one instance.

    Failed runs are skipped. Cost logs are keyed ``"<algorithm> seed=<seed>"``
    so every run gets its own convergence curve.

    Returns:
        Tuple of (summary rows, cost logs)
    """
    rows = []
    cost_logs = {}
    for seed, results in per_seed.items():
        for alg_name, alg_results in results.items():
            if alg_results.get('cost') is None:
                continue
            rows.append({
                'instance': name,
                'algorithm': alg_name,
                'seed': int(seed),
                'cost': alg_results['cost'],
                'runtime': alg_results['runtime'],
                'iterations': alg_results['iterations'],
            })
            cost_logs[f"{alg_name} seed={seed}"] = alg_results['cost_log']
            print(f"  {alg_name:>18s} seed={seed}: cost={alg_results['cost']:.6g} "
                  f"({alg_results['iterations']} rounds)")
    return rows, cost_logs


def run_all_experiments(
    problem: str,
    instance_files: List[str],
    output_dir: str,
    algorithms: Optional[List[str]] = None,
    configs: Optional[Dict[str, Any]] = None,
    seeds: Optional[List[int]] = None,
    time_limit: Optional[float] = None,
    plot: bool = True,
) -> pd.DataFrame:
    """
    Run the algorithms of ``problem`` on every instance file and save results.

    Per-instance results go to ``<output_dir>/<instance>_results.json``, the
    summary table to ``<output_dir>/all_results.csv`` and plots next to it.

    Args:
        problem: 'maze', 'tsp', 'function' or 'image'
        instance_files: Instance text files
        output_dir: Directory to save results
        algorithms: Algorithm names (default: every algorithm of the problem)
        configs: Algorithm parameters (default: all defaults)
        seeds: One run per seed (default: [42])
        time_limit: Overrides each instance's time limit
        plot: Also create the summary plots

    Returns:
        Summary DataFrame with one row per (instance, algorithm, seed)
    """
    from .plots import create_all_plots

    output_path = Path(output_dir)
    output_path.mkdir(exist_ok=True, parents=True)
    seeds = seeds or [42]

    rows = []
    cost_logs = {}
    print(f"Running {problem} experiments on {len(instance_files)} instances...")

    for instance_file in sorted(instance_files):
        name = Path(instance_file).stem
        print(f"\nProcessing {name}...")
        instance = load_instance(problem, instance_file)

        per_seed = {}
        for seed in seeds:
            per_seed[str(seed)] = run_all_algorithms_on_instance(
                problem, instance, algorithms, configs, seed=seed, time_limit=time_limit,
            )
        instance_rows, instance_logs = summarise_runs(name, per_seed)
        rows.extend(instance_rows)
        if instance_logs:
            cost_logs[name] = instance_logs

        save_results(per_seed, str(output_path / f"{name}_results.json"))

    df = pd.DataFrame(rows, columns=['instance', 'algorithm', 'seed', 'cost', 'runtime', 'iterations'])
    if not df.empty:
        df.to_csv(output_path / 'all_results.csv', index=False)
        print(f"\nSaved summary to {output_path / 'all_results.csv'}")
        if plot:
            print("\nCreating plots...")
            create_all_plots(df, cost_logs, str(output_path))

    print(f"\nExperiments complete! Results saved to {output_dir}/")
    return df


def main():
    """CLI entry point for batch experiments."""
    parser = argparse.ArgumentParser(description='Run every algorithm on a set of instances')
    parser.add_argument('problem', choices=sorted(ALGORITHMS), help='Problem type of the instances')
    parser.add_argument('instances', nargs='+', help='Instance text files')
    parser.add_argument('--output', type=str, default='results', help='Results directory (default: results)')
    parser.add_argument('--algorithms', nargs='+', default=None,
                        help='Algorithms to run (default: all for the problem)')
    parser.add_argument('--seeds', nargs='+', type=int, default=[42], help='Seeds, one run each (default: 42)')
    parser.add_argument('--time-limit', type=float, default=None,
                        help='Override the time limit of every instance (seconds)')
    parser.add_argument('--config', type=str, default=None, help='JSON file with algorithm parameters')
    parser.add_argument('--no-plots', action='store_true', help='Skip plot creation')
    args = parser.parse_args()

    configs = load_config(args.config) if args.config else None
    run_all_experiments(
        args.problem,
        args.instances,
        args.output,
        algorithms=args.algorithms,
        configs=configs,
        seeds=args.seeds,
        time_limit=args.time_limit,
        plot=not args.no_plots,
    )


if __name__ == '__main__':
    main()
