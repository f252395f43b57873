"""Maze board for the exit-search problem."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Optional, Tuple

import numpy as np

from .point import Point, Direction, DIRECTIONS


class Field(IntEnum):
    EMPTY = 0
    WALL = 1
    EXIT = 2


@dataclass
class Board:
    """
    Rectangular maze with walls, exits on the edge and a single agent.

    Attributes:
        fields: Field codes, shape (h, w)
            fields[y, x] = Field of the cell at Point(x, y)
        agent_position: Starting point of the agent (strict interior)
    """
    fields: np.ndarray
    agent_position: Point

    @property
    def height(self) -> int:
        return self.fields.shape[0]

    @property
    def width(self) -> int:
        return self.fields.shape[1]

    def in_bounds(self, point: Point) -> bool:
        """True for points strictly inside the border."""
        return 0 < point.x < self.width - 1 and 0 < point.y < self.height - 1

    def in_grid(self, point: Point) -> bool:
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def is_next_to_edge(self, point: Point) -> bool:
        return (point.x == 1 or point.x == self.width - 2
                or point.y == 1 or point.y == self.height - 2)

    def is_valid_position(self, point: Point) -> bool:
        return self.in_bounds(point) and self.fields[point.y, point.x] != Field.WALL

    def is_exit(self, point: Point) -> bool:
        return self.in_grid(point) and self.fields[point.y, point.x] == Field.EXIT

    def move_into_exit(self, point: Point) -> Optional[Tuple[Direction, Point]]:
        """
        Direction and cell of an exit adjacent to ``point``, if any.

        Neighbours are probed in the order Left, Up, Right, Down.
        """
        for direction in DIRECTIONS:
            target = direction.move_point(point)
            if self.is_exit(target):
                return direction, target
        return None

    def adjacent_positions(self, point: Point) -> Iterator[Tuple[Direction, Point]]:
        if not self.in_bounds(point):
            raise ValueError(f"only points in bounds have adjacent ones, got {point}")
        for direction in DIRECTIONS:
            yield direction, direction.move_point(point)

    def adjacent(self, point: Point) -> Iterator[Tuple[Direction, Point, Field]]:
        """Neighbours of ``point`` that lie inside the grid, with their field."""
        for direction in DIRECTIONS:
            target = direction.move_point(point)
            if self.in_grid(target):
                yield direction, target, Field(self.fields[target.y, target.x])

    def validate(self) -> None:
        """
        Check the board layout.
        Raises ValueError if validation fails.
        """
        if self.fields.ndim != 2 or self.height < 3 or self.width < 3:
            raise ValueError(f"board must be at least 3x3, got shape {self.fields.shape}")
        if not self.in_bounds(self.agent_position):
            raise ValueError(f"agent {self.agent_position} is not inside the border")
        if self.fields[self.agent_position.y, self.agent_position.x] == Field.WALL:
            raise ValueError(f"agent {self.agent_position} stands on a wall")
        interior = self.fields[1:-1, 1:-1]
        if np.any(interior == Field.EXIT):
            raise ValueError("exits must lie on the edge")
        if not np.any(self.fields == Field.EXIT):
            raise ValueError("board has no exit")
