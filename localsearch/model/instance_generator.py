"""Instance generator for creating synthetic problem instances."""

from collections import deque
from pathlib import Path
from typing import Tuple

import numpy as np

from .board import Board, Field
from .instance import MazeInstance, TspInstance, ImageInstance
from .point import Point, moves_to_string


def exit_reachable(board: Board) -> bool:
    """Breadth-first check that some exit is adjacent to a cell reachable from the agent."""
    start = board.agent_position
    seen = {start}
    queue = deque([start])
    while queue:
        point = queue.popleft()
        if board.move_into_exit(point) is not None:
            return True
        for _, neighbour in board.adjacent_positions(point):
            if neighbour not in seen and board.is_valid_position(neighbour):
                seen.add(neighbour)
                queue.append(neighbour)
    return False


def generate_maze(
    height: int = 10,
    width: int = 10,
    wall_density: float = 0.2,
    num_exits: int = 1,
    time_limit: float = 1.0,
    seed: int = 42,
    max_tries: int = 100,
) -> MazeInstance:
    """
    Generate a random maze with a reachable exit.

    Args:
        height: Number of rows including the border
        width: Number of columns including the border
        wall_density: Fraction of interior cells turned into walls
        num_exits: Number of exits placed on the (non-corner) edge
        time_limit: Time budget stored in the instance
        seed: Random seed for reproducibility
        max_tries: Layouts drawn before giving up

    Returns:
        MazeInstance whose exit is reachable from the agent

    Raises:
        ValueError: if no escapable layout was found within ``max_tries``
    """
    if height < 3 or width < 3:
        raise ValueError("maze must be at least 3x3")
    rng = np.random.default_rng(seed)

    edge_cells = [Point(x, 0) for x in range(1, width - 1)]
    edge_cells += [Point(x, height - 1) for x in range(1, width - 1)]
    edge_cells += [Point(0, y) for y in range(1, height - 1)]
    edge_cells += [Point(width - 1, y) for y in range(1, height - 1)]

    for _ in range(max_tries):
        fields = np.full((height, width), Field.WALL, dtype=np.int8)
        interior = rng.random((height - 2, width - 2)) < wall_density
        fields[1:-1, 1:-1] = np.where(interior, Field.WALL, Field.EMPTY)

        free = np.argwhere(fields == Field.EMPTY)
        if len(free) == 0:
            continue
        y, x = free[rng.integers(len(free))]
        agent = Point(int(x), int(y))

        chosen = rng.choice(len(edge_cells), size=min(num_exits, len(edge_cells)), replace=False)
        for k in chosen:
            cell = edge_cells[k]
            fields[cell.y, cell.x] = Field.EXIT

        board = Board(fields=fields, agent_position=agent)
        if exit_reachable(board):
            return MazeInstance(board=board, time_limit=time_limit)

    raise ValueError(f"no escapable maze found in {max_tries} tries")


def generate_tsp(
    n: int = 20,
    symmetric: bool = True,
    max_cost: int = 100,
    time_limit: float = 1.0,
    seed: int = 42,
) -> TspInstance:
    """
    Generate a TSP instance from random points in the plane.

    Symmetric instances use rounded Euclidean distances; asymmetric ones add
    independent integer noise per direction.
    """
    rng = np.random.default_rng(seed)
    coords = rng.uniform(0.0, max_cost, size=(n, 2))
    diff = coords[:, None, :] - coords[None, :, :]
    distances = np.rint(np.sqrt(np.sum(diff * diff, axis=2))).astype(np.int64)
    if not symmetric:
        distances += rng.integers(0, max(1, max_cost // 10), size=(n, n))
    np.fill_diagonal(distances, 0)
    return TspInstance(distances=distances, time_limit=time_limit)


def generate_image(
    height: int = 16,
    width: int = 16,
    block_size: int = 2,
    time_limit: float = 1.0,
    seed: int = 42,
) -> ImageInstance:
    """Generate a smooth random grey-scale image (row/column gradients plus noise)."""
    rng = np.random.default_rng(seed)
    rows = np.linspace(0.0, 1.0, height)[:, None]
    cols = np.linspace(0.0, 1.0, width)[None, :]
    base = 255.0 * (0.5 * rows + 0.5 * cols)
    noise = rng.normal(0.0, 10.0, size=(height, width))
    values = np.clip(np.rint(base + noise), 0, 255).astype(np.int64)
    return ImageInstance(values=values, block_size=block_size, time_limit=time_limit)


def maze_to_text(instance: MazeInstance) -> str:
    """Serialise a maze in the format read by ``parse_maze``."""
    board = instance.board
    symbols = {Field.EMPTY: '0', Field.WALL: '1', Field.EXIT: '8'}
    t = int(round(instance.time_limit))
    if instance.initial_moves or instance.population_size is not None:
        population = instance.population_size if instance.population_size is not None else len(instance.initial_moves)
        lines = [f"{t} {board.height} {board.width} {len(instance.initial_moves)} {population}"]
    else:
        lines = [f"{t} {board.height} {board.width}"]
    for y in reversed(range(board.height)):
        row = []
        for x in range(board.width):
            if Point(x, y) == board.agent_position:
                row.append('5')
            else:
                row.append(symbols[Field(board.fields[y, x])])
        lines.append(''.join(row))
    lines.extend(moves_to_string(moves) for moves in instance.initial_moves)
    return '\n'.join(lines) + '\n'


def tsp_to_text(instance: TspInstance) -> str:
    """Serialise a TSP instance in the format read by ``parse_tsp``."""
    t = int(round(instance.time_limit))
    lines = [f"{t} {instance.num_nodes}"]
    lines.extend(' '.join(str(int(v)) for v in row) for row in instance.distances)
    return '\n'.join(lines) + '\n'


def image_to_text(instance: ImageInstance) -> str:
    """Serialise an image instance in the format read by ``parse_image``."""
    n, m = instance.values.shape
    t = int(round(instance.time_limit))
    lines = [f"{t} {n} {m} {instance.block_size}"]
    lines.extend(' '.join(str(int(v)) for v in row) for row in instance.values)
    return '\n'.join(lines) + '\n'


def save_instance(text: str, filepath: str) -> None:
    """Write a serialised instance to ``filepath``, creating parent directories."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open('w') as f:
        f.write(text)


def generate_instance_set(
    output_dir: str = 'instances',
    n_mazes: int = 5,
    n_tsp: int = 5,
    time_limit: float = 1.0,
) -> Tuple[int, int]:
    """
    Generate a set of maze and TSP instances and save them.

    Args:
        output_dir: Directory to save instances
        n_mazes: Number of mazes to generate
        n_tsp: Number of TSP instances to generate
        time_limit: Time budget written into every instance

    Returns:
        Tuple of (mazes written, tsp instances written)
    """
    output_path = Path(output_dir)
    output_path.mkdir(exist_ok=True, parents=True)

    print(f"Generating {n_mazes} mazes...")
    for i in range(n_mazes):
        maze = generate_maze(height=8 + 2 * i, width=8 + 2 * i, time_limit=time_limit, seed=100 + i)
        filepath = output_path / f'maze_{i:02d}.txt'
        save_instance(maze_to_text(maze), str(filepath))
        print(f"  Saved {filepath}")

    print(f"Generating {n_tsp} TSP instances...")
    for i in range(n_tsp):
        tsp = generate_tsp(n=10 + 5 * i, time_limit=time_limit, seed=200 + i)
        filepath = output_path / f'tsp_{i:02d}.txt'
        save_instance(tsp_to_text(tsp), str(filepath))
        print(f"  Saved {filepath}")

    return n_mazes, n_tsp
