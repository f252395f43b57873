"""Continuous benchmark objectives used by the random-search exercises."""

import math
from typing import Tuple

import numpy as np


class ContinuousProblem:
    """
    Cost model over a box-bounded real vector space.

    Subclasses define ``dimensions``, ``bounds`` and ``value``. Points are
    1-D float arrays of length ``dimensions``.
    """
    name: str = 'continuous'
    dimensions: int = 4
    bounds: Tuple[float, float] = (-1.0, 1.0)

    def value(self, point: np.ndarray) -> float:
        raise NotImplementedError

    @property
    def box_length(self) -> float:
        low, high = self.bounds
        return high - low

    def random(self, scale: float, rng: np.random.Generator) -> np.ndarray:
        """Uniform sample inside the box scaled by ``scale`` around the origin."""
        low, high = self.bounds
        return rng.uniform(scale * low, scale * high, size=self.dimensions)

    def random_near(self, point: np.ndarray, scale: float, rng: np.random.Generator) -> np.ndarray:
        """Uniform sample within ``scale * box_length`` of ``point``, clamped to the box."""
        low, high = self.bounds
        distance = scale * self.box_length
        lower = np.maximum(point - distance, low)
        upper = np.minimum(point + distance, high)
        return rng.uniform(lower, upper)

    def clamp(self, point: np.ndarray) -> np.ndarray:
        low, high = self.bounds
        return np.clip(point, low, high)


class Griewank(ContinuousProblem):
    name = 'griewank'
    dimensions = 4
    bounds = (-600.0, 600.0)

    def value(self, point: np.ndarray) -> float:
        point = np.asarray(point, dtype=float)
        indices = np.arange(1, point.size + 1)
        product = np.prod(np.cos(point / np.sqrt(indices)))
        return float(1.0 + np.dot(point, point) / 4000.0 - product)


class HappyCat(ContinuousProblem):
    name = 'happy_cat'
    dimensions = 4
    bounds = (-2.0, 2.0)
    alpha = 0.125

    def value(self, point: np.ndarray) -> float:
        point = np.asarray(point, dtype=float)
        n = point.size
        norm2 = float(np.dot(point, point))
        first = abs(norm2 - n) ** (2.0 * self.alpha)
        second = (0.5 * norm2 + float(np.sum(point))) / n
        return first + second + 0.5


class Salomon(ContinuousProblem):
    name = 'salomon'
    dimensions = 4
    bounds = (-100.0, 100.0)

    def value(self, point: np.ndarray) -> float:
        norm = float(np.linalg.norm(point))
        return 1.0 - math.cos(2.0 * math.pi * norm) + 0.1 * norm


class XsYang(ContinuousProblem):
    """Xin-She Yang function ``sum(eps_i * |x_i| ** i)`` with fixed weights ``eps``."""
    name = 'xs_yang'
    dimensions = 5
    bounds = (-5.0, 5.0)

    def __init__(self, parameters):
        parameters = np.asarray(parameters, dtype=float)
        if parameters.shape != (self.dimensions,):
            raise ValueError(f"XsYang needs {self.dimensions} parameters, got {parameters.shape}")
        if np.any(parameters < 0.0) or np.any(parameters > 1.0):
            raise ValueError("XsYang parameters must lie in [0, 1]")
        self.parameters = parameters

    def value(self, point: np.ndarray) -> float:
        point = np.asarray(point, dtype=float)
        powers = np.arange(1, point.size + 1)
        return float(np.sum(self.parameters * np.abs(point) ** powers))


# Function choices accepted by the ``t choice`` input format.
FUNCTION_CHOICES = {
    0: HappyCat,
    1: Griewank,
}
