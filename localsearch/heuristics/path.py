"""Move-list state for the maze-escape problem.

A ``Path`` is a list of moves from the agent's start. When ``cost`` is set the
walk stays on valid cells and its last move enters an exit; ``cost`` is then the
number of moves. When ``cost`` is None the moves do not reach an exit yet.
"""

import math
from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..model.board import Board
from ..model.point import Direction, Point, moves_to_string


class Path:
    __slots__ = ('starting_point', 'ending_point', 'moves', 'cost')

    def __init__(self, starting_point: Point, moves: Optional[List[Direction]] = None,
                 ending_point: Optional[Point] = None, cost: Optional[int] = None):
        self.starting_point = starting_point
        self.ending_point = ending_point if ending_point is not None else starting_point
        self.moves = moves if moves is not None else []
        self.cost = cost

    @classmethod
    def from_moves(cls, starting_point: Point, moves: List[Direction], board: Board) -> 'Path':
        """Path with the given moves, verified from the start."""
        path = cls(starting_point, list(moves))
        path.verify(0, board)
        return path

    @classmethod
    def new_to_exit(cls, board: Board, rng: np.random.Generator) -> 'Path':
        """Random feasible path from the agent to an exit."""
        path = cls(board.agent_position)
        path.extend_to_exit(board, rng)
        return path

    def copy(self) -> 'Path':
        return Path(self.starting_point, list(self.moves), self.ending_point, self.cost)

    @property
    def is_feasible(self) -> bool:
        return self.cost is not None

    @property
    def cost_key(self) -> float:
        return math.inf if self.cost is None else self.cost

    @property
    def key(self) -> Tuple[Point, Tuple[Direction, ...]]:
        """Canonical hashable identity used by tabu memories."""
        return self.starting_point, tuple(self.moves)

    def __len__(self) -> int:
        return len(self.moves)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self.key == other.key

    __hash__ = None

    def __repr__(self) -> str:
        return f"Path(start={self.starting_point}, moves={moves_to_string(self.moves)!r}, cost={self.cost})"

    def verify(self, from_index: int, board: Board) -> bool:
        """
        Walk ``moves[from_index:]`` and update ``cost`` and ``ending_point``.

        The walk starts at ``starting_point`` for index 0 and at the cached
        ``ending_point`` otherwise, so ``ending_point`` must be the position
        after ``moves[:from_index]``. At the first position next to an exit the
        moves are truncated there and the exit's direction is appended. A move
        into an invalid cell truncates the moves before it.

        Returns:
            True if the path now reaches an exit
        """
        moves = self.moves
        current = self.starting_point if from_index == 0 else self.ending_point

        for index in range(from_index, len(moves)):
            found = board.move_into_exit(current)
            if found is not None:
                exit_direction, exit_point = found
                del moves[index:]
                moves.append(exit_direction)
                self.ending_point = exit_point
                self.cost = index + 1
                return True

            dx, dy = moves[index].displacement
            target = Point(current.x + dx, current.y + dy)
            if not board.is_valid_position(target):
                del moves[index:]
                break
            current = target
        else:
            # Every move was valid; the final position may itself touch an exit.
            found = board.move_into_exit(current)
            if found is not None:
                exit_direction, exit_point = found
                moves.append(exit_direction)
                self.ending_point = exit_point
                self.cost = len(moves)
                return True

        self.ending_point = current
        self.cost = None
        return False

    def extend(self, new_moves: Iterable[Direction], board: Board) -> bool:
        """Append ``new_moves`` and verify only the appended suffix."""
        current_length = len(self.moves)
        self.moves.extend(new_moves)
        return self.verify(current_length, board)

    def extend_to_exit(self, board: Board, rng: np.random.Generator) -> None:
        """
        Repair step: re-verify from the start, then append batches of ``h + w``
        random moves until an exit is reached.

        Assumes an exit is reachable from the start.
        """
        batch = board.height + board.width
        if self.verify(0, board):
            return
        while not self.extend(Direction.random(rng, batch), board):
            pass

    def remove_redundancies(self) -> bool:
        """
        Collapse ``(d, inverse(d))`` pairs and ``(d, x, inverse(d))`` triples.

        Repeated until nothing changes, so applying it twice is a no-op. A
        changed path loses its cached cost (a collapsed triple may cut through
        a wall); call ``verify`` or ``extend_to_exit`` afterwards.

        Returns:
            True if the moves changed
        """
        changed = False
        while _collapse_once(self.moves):
            changed = True
        if changed:
            self.cost = None
        return changed

    def simplify(self, board: Board, rng: np.random.Generator) -> None:
        """Remove redundancies, then restore feasibility if they broke it."""
        if self.remove_redundancies():
            self.extend_to_exit(board, rng)


def _collapse_once(moves: List[Direction]) -> bool:
    changed = False
    i = 0
    while i + 1 < len(moves):
        inverse = moves[i].inverse()
        if moves[i + 1] is inverse:
            del moves[i:i + 2]
            changed = True
            i = max(i - 1, 0)
        elif i + 2 < len(moves) and moves[i + 2] is inverse:
            # d, x, d' -> x
            moves[i + 1], moves[i + 2] = moves[i + 2], moves[i + 1]
            del moves[i:i + 2]
            changed = True
            i = max(i - 1, 0)
        else:
            i += 1
    return changed

