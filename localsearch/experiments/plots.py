"""Plotting functions for experiment results."""

import math
from pathlib import Path
from typing import Dict, List

import matplotlib.pyplot as plt
import pandas as pd


def plot_convergence(cost_logs: Dict[str, List[float]], output_path: str = 'results/convergence.png',
                     title: str = 'Best Cost per Round'):
    """
    Plot the best-cost log of each algorithm against the round number.

    Args:
        cost_logs: Dictionary mapping a run label to its per-round best costs
        output_path: Path to save plot
        title: Plot title
    """
    plotted = False
    plt.figure(figsize=(10, 6))
    for alg_name, log in cost_logs.items():
        finite = [c for c in log if not math.isinf(c)]
        if len(finite) < 2:
            continue
        plt.plot(range(len(log) - len(finite), len(log)), finite, label=alg_name)
        plotted = True

    if not plotted:
        plt.close()
        print("No convergence data to plot")
        return

    plt.xscale('symlog')
    plt.xlabel('Round')
    plt.ylabel('Best Cost')
    plt.title(title)
    plt.legend(title='Run')
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def plot_cost_comparison(results_df: pd.DataFrame, output_path: str = 'results/cost_comparison.png'):
    """
    Create boxplot comparing costs across algorithms.

    Args:
        results_df: DataFrame with columns: algorithm, cost
        output_path: Path to save plot
    """
    if results_df.empty:
        print("No cost data to plot")
        return

    plt.figure(figsize=(10, 6))
    results_df.boxplot(column='cost', by='algorithm', ax=plt.gca())
    plt.ylabel('Cost')
    plt.title('Cost Comparison Across Algorithms')
    plt.suptitle('')
    plt.xticks(rotation=45)
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def plot_runtime_comparison(results_df: pd.DataFrame, output_path: str = 'results/runtime_comparison.png'):
    """Bar chart of the mean runtime per algorithm (log scale)."""
    if results_df.empty:
        print("No runtime data to plot")
        return

    plt.figure(figsize=(10, 6))
    results_df.groupby('algorithm')['runtime'].mean().plot(kind='bar')
    plt.ylabel('Runtime (seconds)')
    plt.title('Runtime Comparison')
    plt.xticks(rotation=45)
    plt.yscale('log')
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def create_all_plots(results_df: pd.DataFrame, cost_logs: Dict[str, Dict[str, List[float]]] = None,
                     output_dir: str = 'results'):
    """
    Create all plots from results.

    Args:
        results_df: Summary table with columns: instance, algorithm, cost, runtime
        cost_logs: Instance name -> run label -> best-cost log (optional)
        output_dir: Directory to save plots
    """
    Path(output_dir).mkdir(exist_ok=True, parents=True)

    plot_cost_comparison(results_df, f'{output_dir}/cost_comparison.png')
    plot_runtime_comparison(results_df, f'{output_dir}/runtime_comparison.png')

    for instance_name, logs in (cost_logs or {}).items():
        plot_convergence(logs, f'{output_dir}/{instance_name}_convergence.png',
                         title=f'Best Cost per Round ({instance_name})')
