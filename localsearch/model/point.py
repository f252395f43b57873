"""Grid points and movement directions for the maze problem."""

from enum import Enum
from typing import List, NamedTuple, Optional

import numpy as np


class Point(NamedTuple):
    """Integer grid coordinate. ``y`` grows upwards (towards the first text line)."""
    x: int
    y: int

    def __str__(self) -> str:
        return f"Point({self.x}, {self.y})"


class Direction(Enum):
    UP = 'U'
    DOWN = 'D'
    RIGHT = 'R'
    LEFT = 'L'

    def inverse(self) -> 'Direction':
        return _INVERSE[self]

    @property
    def displacement(self) -> Point:
        return _DISPLACEMENT[self]

    def move_point(self, point: Point) -> Point:
        dx, dy = _DISPLACEMENT[self]
        return Point(point.x + dx, point.y + dy)

    @classmethod
    def parse(cls, letter: str) -> Optional['Direction']:
        """Direction for a ``U``/``D``/``R``/``L`` letter, None for anything else."""
        try:
            return cls(letter)
        except ValueError:
            return None

    @classmethod
    def random(cls, rng: np.random.Generator, count: int) -> List['Direction']:
        """``count`` uniformly drawn directions."""
        return [_SAMPLING_ORDER[k] for k in rng.integers(0, 4, size=count)]

    def __str__(self) -> str:
        return self.value


_INVERSE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.RIGHT: Direction.LEFT,
    Direction.LEFT: Direction.RIGHT,
}

_DISPLACEMENT = {
    Direction.UP: Point(0, 1),
    Direction.DOWN: Point(0, -1),
    Direction.RIGHT: Point(1, 0),
    Direction.LEFT: Point(-1, 0),
}

_SAMPLING_ORDER = (Direction.UP, Direction.DOWN, Direction.RIGHT, Direction.LEFT)

# Order in which neighbouring cells are probed for exits.
DIRECTIONS = (Direction.LEFT, Direction.UP, Direction.RIGHT, Direction.DOWN)


def moves_to_string(moves: List[Direction]) -> str:
    return ''.join(d.value for d in moves)


def moves_from_string(text: str) -> Optional[List[Direction]]:
    """Parse a move string; returns None if any letter is not a direction."""
    moves = []
    for letter in text:
        direction = Direction.parse(letter)
        if direction is None:
            return None
        moves.append(direction)
    return moves
