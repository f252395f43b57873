"""Model components: boards, cost models, instances, parsers and the exact solver"""

from .point import Point, Direction, DIRECTIONS
from .board import Board, Field
from .functions import ContinuousProblem, Griewank, HappyCat, Salomon, XsYang
from .block_matrix import BlockMatrix
from .instance import MazeInstance, TspInstance, ImageInstance, FunctionInstance
from .result import SearchResult
from .parsing import ErrorKind, InstanceFormatError, parse_maze, parse_tsp, parse_image, parse_function, load_instance
from .instance_generator import generate_maze, generate_tsp, generate_image, exit_reachable

__all__ = ['Point', 'Direction', 'DIRECTIONS', 'Board', 'Field',
           'ContinuousProblem', 'Griewank', 'HappyCat', 'Salomon', 'XsYang', 'BlockMatrix',
           'MazeInstance', 'TspInstance', 'ImageInstance', 'FunctionInstance', 'SearchResult',
           'ErrorKind', 'InstanceFormatError', 'parse_maze', 'parse_tsp', 'parse_image',
           'parse_function', 'load_instance', 'generate_maze', 'generate_tsp', 'generate_image',
           'exit_reachable']
