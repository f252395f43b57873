"""Block approximation of a grey-scale image over a fixed palette."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

ALLOWED_VALUES = np.array([0, 32, 64, 128, 160, 192, 223, 255], dtype=np.int64)


@dataclass
class BlockMatrix:
    """
    Image approximation made of constant blocks.

    Attributes:
        values: Palette indices per block, shape (rows, cols)
            values[r, c] = index into ALLOWED_VALUES for block (r, c)
        block_height: Height of a regular block in pixels
        block_width: Width of a regular block in pixels

    The last block row and column absorb the pixels left over when the image
    size is not a multiple of the block size.
    """
    values: np.ndarray
    block_height: int
    block_width: int

    @classmethod
    def zeros(cls, block_height: int, block_width: int, outer_height: int, outer_width: int) -> 'BlockMatrix':
        rows = max(1, outer_height // block_height)
        cols = max(1, outer_width // block_width)
        return cls(np.zeros((rows, cols), dtype=np.int64), block_height, block_width)

    def copy(self) -> 'BlockMatrix':
        return BlockMatrix(self.values.copy(), self.block_height, self.block_width)

    def with_block_size(self, block_height: int, block_width: int, outer_height: int, outer_width: int) -> 'BlockMatrix':
        """Resample to a new block size, keeping the colour under each new block's corner."""
        full = self._index_image((outer_height, outer_width))
        resized = BlockMatrix.zeros(block_height, block_width, outer_height, outer_width)
        rows, cols = resized.values.shape
        resized.values = full[np.arange(rows) * block_height][:, np.arange(cols) * block_width].copy()
        return resized

    def perturb_values(self, rng: np.random.Generator, probability: float = 0.2, sigma: float = 2.0) -> 'BlockMatrix':
        """Shift each block's palette index by a rounded Normal(0, sigma) draw with ``probability``."""
        perturbed = self.copy()
        mask = rng.random(perturbed.values.shape) < probability
        shifts = np.rint(rng.normal(0.0, sigma, size=perturbed.values.shape)).astype(np.int64)
        moved = perturbed.values + np.where(mask, shifts, 0)
        perturbed.values = np.clip(moved, 0, len(ALLOWED_VALUES) - 1)
        return perturbed

    def _bounds(self, size: int, block: int, count: int) -> np.ndarray:
        edges = np.arange(count + 1) * block
        edges[-1] = size
        return edges

    def _index_image(self, shape: Tuple[int, int]) -> np.ndarray:
        n, m = shape
        rows, cols = self.values.shape
        row_edges = self._bounds(n, self.block_height, rows)
        col_edges = self._bounds(m, self.block_width, cols)
        row_of_pixel = np.repeat(np.arange(rows), np.diff(row_edges))
        col_of_pixel = np.repeat(np.arange(cols), np.diff(col_edges))
        return self.values[np.ix_(row_of_pixel, col_of_pixel)]

    def to_full_size(self, shape: Tuple[int, int]) -> np.ndarray:
        """Pixel values of the approximation for an image of ``shape``."""
        return ALLOWED_VALUES[self._index_image(shape)]

    def distance_from(self, image: np.ndarray) -> float:
        """Mean squared error between the approximation and ``image``."""
        approximation = self.to_full_size(image.shape)
        diff = image.astype(np.float64) - approximation
        return float(np.mean(diff * diff))
