"""CLI runner: solve one instance and print the answer in the exercise output format."""

import argparse
import sys
from typing import Optional, TextIO

import numpy as np

from ..model.parsing import PARSERS
from ..model.point import moves_to_string
from ..model.result import SearchResult
from ..heuristics.config import load_config
from .run_all import ALGORITHMS, solve


def format_result(problem: str, instance, result: SearchResult) -> tuple:
    """
    Split a result into its stdout and stderr text.

    Maze: move count / move string. TSP: tour cost / node list. Function:
    coordinates followed by the value / nothing. Image: distance / the
    full-size approximation, one row per line.

    Returns:
        Tuple of (stdout_text, stderr_text)
    """
    state = result.state
    if problem == 'maze':
        return f"{result.cost:g}", moves_to_string(state.moves)
    if problem == 'tsp':
        return f"{result.cost:g}", ' '.join(str(v) for v in state.nodes)
    if problem == 'function':
        coordinates = ' '.join(f"{x:.10g}" for x in np.asarray(state))
        return f"{coordinates} {result.cost:.10g}", ''
    full = state.to_full_size(instance.values.shape)
    return f"{result.cost:.10g}", '\n'.join(' '.join(str(v) for v in row) for row in full)


def run(
    problem: str,
    text: str,
    algorithm: Optional[str] = None,
    config_path: Optional[str] = None,
    seed: Optional[int] = None,
    time_limit: Optional[float] = None,
    verbose: bool = False,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """
    Parse ``text``, solve it and write the answer to ``out`` and ``err``
    (default: stdout and stderr).

    Returns:
        Process exit status: 0 on success, 1 for a malformed instance or config
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    try:
        instance = PARSERS[problem](text)
        instance.validate()
    except ValueError as e:
        print(f"Invalid {problem} instance: {e}", file=err)
        return 1
    try:
        configs = load_config(config_path) if config_path else None
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=err)
        return 1

    result = solve(problem, instance, algorithm, configs, seed, time_limit, verbose)
    stdout_text, stderr_text = format_result(problem, instance, result)
    print(stdout_text, file=out)
    if stderr_text:
        print(stderr_text, file=err)
    if verbose:
        print(f"{result.iterations} rounds in {result.elapsed:.3f}s", file=err)
    return 0


def main():
    """CLI entry point for solving a single instance."""
    parser = argparse.ArgumentParser(
        description='Solve one local-search exercise instance',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Maze from stdin with the default tabu search
  python -m localsearch.experiments.run_experiment maze < maze.txt

  # TSP with annealing, fixed seed and a shorter budget
  python -m localsearch.experiments.run_experiment tsp tsp.txt --algorithm sa --seed 7 --time-limit 2

  # Custom parameters
  python -m localsearch.experiments.run_experiment maze maze.txt --config params.json --verbose
        """
    )
    parser.add_argument('problem', choices=sorted(ALGORITHMS), help='Problem type')
    parser.add_argument('instance', nargs='?', default=None,
                        help='Instance text file (default: read stdin)')
    parser.add_argument('--algorithm', type=str, default=None,
                        help='Algorithm name (maze: tabu|sa|genetic|wall_follow|random, '
                             'tsp: tabu|sa|nearest_neighbour|random|mip, '
                             'function: local_search|sa|genetic, image: sa)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (default: fresh entropy)')
    parser.add_argument('--time-limit', type=float, default=None,
                        help="Override the instance's time limit (seconds)")
    parser.add_argument('--config', type=str, default=None, help='JSON file with algorithm parameters')
    parser.add_argument('--verbose', action='store_true', help='Verbose output')
    args = parser.parse_args()

    if args.algorithm is not None and args.algorithm not in ALGORITHMS[args.problem]:
        parser.error(f"unknown algorithm {args.algorithm!r} for {args.problem}, "
                     f"choose from {sorted(ALGORITHMS[args.problem])}")

    if args.instance is None:
        text = sys.stdin.read()
    else:
        with open(args.instance, 'r') as f:
            text = f.read()

    sys.exit(run(args.problem, text, args.algorithm, args.config, args.seed, args.time_limit, args.verbose))


if __name__ == '__main__':
    main()
