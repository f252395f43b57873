"""Baseline algorithms for comparison"""

from .wall_follow import wall_follow_path
from .random_walk import random_paths, random_tours
from .nearest_neighbour import nearest_neighbour_tour

__all__ = ['wall_follow_path', 'random_paths', 'random_tours', 'nearest_neighbour_tour']
