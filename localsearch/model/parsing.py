"""Text-format readers for exercise instances.

Every reader raises ``InstanceFormatError`` with one of the ``ErrorKind``
values; nothing downstream ever sees malformed input.
"""

from enum import Enum
from pathlib import Path
from typing import List, Sequence

import numpy as np

from .board import Board, Field
from .functions import FUNCTION_CHOICES, Salomon, XsYang
from .instance import MazeInstance, TspInstance, ImageInstance, FunctionInstance
from .point import Point, moves_from_string


class ErrorKind(Enum):
    INVALID_HEADER = "Invalid header (first line)"
    INVALID_LINE = "Invalid data in a line"
    NOT_ENOUGH_LINES = "Not enough lines"
    TOO_MANY_LINES = "Too many lines"
    INVALID_GOAL = "Invalid goal"
    INVALID_AGENT = "Invalid agent"


class InstanceFormatError(ValueError):
    """Malformed instance text. Not retryable."""

    def __init__(self, kind: ErrorKind, detail: str = ''):
        self.kind = kind
        self.detail = detail
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


def _lines(text: str) -> List[str]:
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _parse_header(lines: List[str], allowed_lengths: Sequence[int]) -> List[int]:
    if not lines:
        raise InstanceFormatError(ErrorKind.NOT_ENOUGH_LINES)
    try:
        header = [int(token) for token in lines[0].split()]
    except ValueError:
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, lines[0])
    if len(header) not in allowed_lengths or header[0] <= 0 or any(v < 0 for v in header):
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, lines[0])
    return header


def _parse_matrix_rows(rows: List[str], n: int, m: int, max_value=None) -> np.ndarray:
    if len(rows) < n:
        raise InstanceFormatError(ErrorKind.NOT_ENOUGH_LINES, f"expected {n} rows, got {len(rows)}")
    if len(rows) > n:
        raise InstanceFormatError(ErrorKind.TOO_MANY_LINES, f"expected {n} rows, got {len(rows)}")

    matrix = np.zeros((n, m), dtype=np.int64)
    for r, line in enumerate(rows):
        tokens = line.split()
        if len(tokens) != m:
            raise InstanceFormatError(ErrorKind.INVALID_LINE, f"row {r} has {len(tokens)} values")
        try:
            values = [int(token) for token in tokens]
        except ValueError:
            raise InstanceFormatError(ErrorKind.INVALID_LINE, line)
        if any(v < 0 for v in values) or (max_value is not None and any(v > max_value for v in values)):
            raise InstanceFormatError(ErrorKind.INVALID_LINE, line)
        matrix[r, :] = values
    return matrix


def parse_maze(text: str) -> MazeInstance:
    """
    Parse a maze instance.

    Format::

        t n m [s p]
        n lines of m characters: 0 empty, 1 wall, 5 agent, 8 exit
        s lines of U/D/L/R moves (initial paths, only with the 5-value header)

    The first board line is the top row. Exits must lie on the edge but not in
    a corner; the agent must lie strictly inside and appear exactly once.
    """
    lines = _lines(text)
    header = _parse_header(lines, (3, 5))
    time_limit, n, m = header[:3]
    num_paths = header[3] if len(header) == 5 else 0
    population_size = header[4] if len(header) == 5 else None

    if n < 3 or m < 3:
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, lines[0])

    rows = lines[1:1 + n]
    if len(rows) < n:
        raise InstanceFormatError(ErrorKind.NOT_ENOUGH_LINES, f"expected {n} rows, got {len(rows)}")

    fields = np.full((n, m), Field.EMPTY, dtype=np.int8)
    agent = None

    for line_index, line in enumerate(rows):
        if len(line) != m:
            raise InstanceFormatError(ErrorKind.INVALID_LINE, f"row {line_index} has length {len(line)}")
        y = n - 1 - line_index
        horizontal_edge = y == 0 or y == n - 1
        for x, c in enumerate(line):
            vertical_edge = x == 0 or x == m - 1
            on_edge = horizontal_edge or vertical_edge
            if c == '8':
                if not on_edge or (horizontal_edge and vertical_edge):
                    raise InstanceFormatError(ErrorKind.INVALID_GOAL, f"exit at ({x}, {y})")
                fields[y, x] = Field.EXIT
            elif c == '5':
                if on_edge or agent is not None:
                    raise InstanceFormatError(ErrorKind.INVALID_AGENT, f"agent at ({x}, {y})")
                agent = Point(x, y)
            elif c == '1':
                fields[y, x] = Field.WALL
            elif c == '0' and not on_edge:
                pass
            else:
                raise InstanceFormatError(ErrorKind.INVALID_LINE, f"unexpected {c!r} at ({x}, {y})")

    if agent is None:
        raise InstanceFormatError(ErrorKind.INVALID_AGENT, "no agent on the board")
    if not np.any(fields == Field.EXIT):
        raise InstanceFormatError(ErrorKind.INVALID_GOAL, "no exit on the board")

    path_lines = lines[1 + n:1 + n + num_paths]
    if len(path_lines) < num_paths:
        raise InstanceFormatError(
            ErrorKind.NOT_ENOUGH_LINES, f"expected {num_paths} initial paths, got {len(path_lines)}"
        )
    initial_moves = []
    for line in path_lines:
        moves = moves_from_string(line.strip())
        if moves is None:
            raise InstanceFormatError(ErrorKind.INVALID_LINE, line)
        initial_moves.append(moves)

    return MazeInstance(
        board=Board(fields=fields, agent_position=agent),
        time_limit=float(time_limit),
        initial_moves=initial_moves,
        population_size=population_size,
    )


def parse_tsp(text: str) -> TspInstance:
    """
    Parse a TSP instance.

    Format::

        t n
        n lines of n non-negative integers
    """
    lines = _lines(text)
    time_limit, n = _parse_header(lines, (2,))
    if n == 0:
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, lines[0])
    distances = _parse_matrix_rows(lines[1:], n, n)
    return TspInstance(distances=distances, time_limit=float(time_limit))


def parse_image(text: str) -> ImageInstance:
    """
    Parse an image block-approximation instance.

    Format::

        t n m k
        n lines of m values in 0..255
    """
    lines = _lines(text)
    time_limit, n, m, k = _parse_header(lines, (4,))
    if n == 0 or m == 0 or k == 0 or k > n or k > m:
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, lines[0])
    values = _parse_matrix_rows(lines[1:], n, m, max_value=255)
    return ImageInstance(values=values, block_size=k, time_limit=float(time_limit))


def parse_function(text: str) -> FunctionInstance:
    """
    Parse a continuous-objective instance.

    Accepted forms (whitespace separated)::

        t choice                  0 = HappyCat, 1 = Griewank, random start
        t x1 x2 x3 x4             Salomon from the given start
        t x1 .. x5 e1 .. e5       Xin-She Yang with weights e, from the given start
    """
    tokens = text.split()
    try:
        numbers = [float(token) for token in tokens]
    except ValueError:
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, text.strip())
    if not numbers or numbers[0] <= 0 or not numbers[0].is_integer():
        raise InstanceFormatError(ErrorKind.INVALID_HEADER, text.strip())

    time_limit = numbers[0]
    rest = numbers[1:]
    if len(rest) == 1:
        problem_cls = FUNCTION_CHOICES.get(int(rest[0])) if rest[0].is_integer() else None
        if problem_cls is None:
            raise InstanceFormatError(ErrorKind.INVALID_HEADER, f"unknown function choice {rest[0]}")
        return FunctionInstance(problem=problem_cls(), time_limit=time_limit)
    if len(rest) == Salomon.dimensions:
        return FunctionInstance(problem=Salomon(), time_limit=time_limit, start=np.array(rest))
    if len(rest) == 2 * XsYang.dimensions:
        start = np.array(rest[:XsYang.dimensions])
        try:
            problem = XsYang(rest[XsYang.dimensions:])
        except ValueError as e:
            raise InstanceFormatError(ErrorKind.INVALID_LINE, str(e))
        return FunctionInstance(problem=problem, time_limit=time_limit, start=start)
    raise InstanceFormatError(ErrorKind.INVALID_HEADER, f"unexpected number of values: {len(numbers)}")


PARSERS = {
    'maze': parse_maze,
    'tsp': parse_tsp,
    'image': parse_image,
    'function': parse_function,
}


def load_instance(problem: str, filepath: str):
    """Read and parse an instance file for ``problem`` ('maze', 'tsp', 'image', 'function')."""
    with Path(filepath).open('r') as f:
        return PARSERS[problem](f.read())
