"""Deterministic wall-following baseline for the maze."""

from typing import Set, Tuple

from ..model.board import Board
from ..model.point import DIRECTIONS, Point
from ..heuristics.path import Path


def wall_follow_path(board: Board) -> Path:
    """
    Constructive maze path that needs no randomness.

    Cycles through the directions Left, Up, Right, Down. For each pair of
    consecutive directions the agent walks in the second one until the next
    cell is blocked, stepping into an exit as soon as one is adjacent.

    Args:
        board: Maze

    Returns:
        Feasible path if an exit was reached, otherwise the moves made before
        the walk started repeating itself (``cost`` None)
    """
    start = board.agent_position
    moves = []
    current = start
    seen: Set[Tuple[Point, int]] = set()
    k = 0

    while True:
        state = (current, k % 4)
        if state in seen:
            return Path(start, moves, current, None)
        seen.add(state)

        move_dir = DIRECTIONS[(k + 1) % 4]
        while True:
            found = board.move_into_exit(current)
            if found is not None:
                exit_direction, exit_point = found
                moves.append(exit_direction)
                return Path(start, moves, exit_point, len(moves))

            target = move_dir.move_point(current)
            if not board.is_valid_position(target):
                break
            moves.append(move_dir)
            current = target
        k += 1
