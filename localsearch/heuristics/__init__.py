"""Heuristic algorithms: states, neighbourhoods, Tabu Search, SA, genetic recombination and utilities"""

from .path import Path
from .tour import Tour, DEPOT
from .tabu import TabuMemory, path_tabu_search, tour_tabu_search
from .sa import (
    acceptance_probability,
    path_simulated_annealing,
    tour_simulated_annealing,
    continuous_simulated_annealing,
    block_simulated_annealing,
)
from .genetic import path_genetic_search, continuous_genetic_search
from .local_search import random_local_search
from .config import (
    TabuConfig, TourTabuConfig, AnnealingConfig, GeneticConfig, LocalSearchConfig,
    default_configs, load_config,
)
from .neighborhoods import neighbour_by_swap_extend, recombine_splice, mutate_swap
from .utils import make_rng, deadline_after

__all__ = [
    'Path', 'Tour', 'DEPOT',
    'TabuMemory', 'path_tabu_search', 'tour_tabu_search',
    'acceptance_probability', 'path_simulated_annealing', 'tour_simulated_annealing',
    'continuous_simulated_annealing', 'block_simulated_annealing',
    'path_genetic_search', 'continuous_genetic_search', 'random_local_search',
    'TabuConfig', 'TourTabuConfig', 'AnnealingConfig', 'GeneticConfig', 'LocalSearchConfig',
    'default_configs', 'load_config',
    'neighbour_by_swap_extend', 'recombine_splice', 'mutate_swap',
    'make_rng', 'deadline_after',
]
