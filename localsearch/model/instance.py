"""Instance data structures for the four exercise problems."""

from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np

from .board import Board
from .functions import ContinuousProblem
from .point import Direction


@dataclass
class MazeInstance:
    """
    Maze-escape instance.

    Attributes:
        board: Maze layout and agent start
        time_limit: Wall-clock budget in seconds
        initial_moves: Move lists supplied with the instance (may be empty)
        population_size: Population size requested by the instance header,
            None if the header did not carry one
    """
    board: Board
    time_limit: float
    initial_moves: List[List[Direction]] = field(default_factory=list)
    population_size: Optional[int] = None

    def validate(self) -> None:
        self.board.validate()
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")


@dataclass
class TspInstance:
    """
    Travelling-salesman instance.

    Attributes:
        distances: Cost matrix, shape (n, n)
            distances[a, b] = cost of travelling from node a to node b
            Node 0 is the depot where every tour starts and ends.
        time_limit: Wall-clock budget in seconds
    """
    distances: np.ndarray
    time_limit: float

    @property
    def num_nodes(self) -> int:
        return self.distances.shape[0]

    def validate(self) -> None:
        """
        Validate that the matrix is square and non-negative.
        Raises ValueError if validation fails.
        """
        if self.distances.ndim != 2 or self.distances.shape[0] != self.distances.shape[1]:
            raise ValueError(f"distances must be square, got shape {self.distances.shape}")
        if self.num_nodes < 1:
            raise ValueError("distances must contain at least the depot")
        if np.any(self.distances < 0):
            raise ValueError("distances must be non-negative")
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")


@dataclass
class ImageInstance:
    """
    Block-approximation instance.

    Attributes:
        values: Grey-scale image, shape (n, m), values 0-255
        block_size: Minimal block height and width
        time_limit: Wall-clock budget in seconds
    """
    values: np.ndarray
    block_size: int
    time_limit: float

    def validate(self) -> None:
        n, m = self.values.shape
        if not 0 < self.block_size <= min(n, m):
            raise ValueError(f"block_size {self.block_size} does not fit a {n}x{m} image")
        if np.any(self.values < 0) or np.any(self.values > 255):
            raise ValueError("image values must lie in 0..255")
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")


@dataclass
class FunctionInstance:
    """
    Continuous minimisation instance.

    Attributes:
        problem: Objective with its domain box
        time_limit: Wall-clock budget in seconds
        start: Optional starting point, None for a random start
    """
    problem: ContinuousProblem
    time_limit: float
    start: Optional[np.ndarray] = None

    def validate(self) -> None:
        if self.start is not None and self.start.shape != (self.problem.dimensions,):
            raise ValueError(
                f"start has shape {self.start.shape}, expected ({self.problem.dimensions},)"
            )
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")
