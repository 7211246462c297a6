"""Square grid of per-cell height statistics for landing-site detection."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


class Grid:
    """Square grid of mean, variance, semantics, point count and land flags.

    The arrays are public and indexed by (row, column).
    """

    def __init__(self, grid_size: float, cell_size: float) -> None:
        self.corner_min = (0.0, 0.0)
        self.corner_max = (0.0, 0.0)
        self.resize(grid_size, cell_size)

    def reset(self) -> None:
        """Zero every array."""
        for array in (self.mean, self.variance, self.semantics, self.counter, self.land):
            array.fill(0)

    def resize(self, grid_size: float, cell_size: float) -> None:
        """Change the grid dimensions and clear all data."""
        self.grid_size = float(grid_size)
        self.cell_size = float(cell_size)
        n = math.ceil(self.grid_size / self.cell_size)
        self.row_col_size = n
        self.mean = np.zeros((n, n), dtype=np.float32)
        self.variance = np.zeros((n, n), dtype=np.float32)
        self.semantics = np.zeros((n, n), dtype=np.int32)
        self.counter = np.zeros((n, n), dtype=np.int32)
        self.land = np.zeros((n, n), dtype=np.int32)

    def increase_counter(self, idx: Sequence[int]) -> None:
        """Add one point to the count of the cell at idx."""
        self.counter[tuple(idx)] += 1

    def set_filter_limits(self, pos: Sequence[float]) -> None:
        """Centre the grid's XY extent on pos."""
        half = self.grid_size / 2.0
        self.corner_min = (pos[0] - half, pos[1] - half)
        self.corner_max = (pos[0] + half, pos[1] + half)

    def limits(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """The (min, max) XY corners of the grid."""
        return self.corner_min, self.corner_max

    def combine(self, prev_grid: Grid, alpha: float) -> None:
        """Blend mean and variance with those of prev_grid, weighting it by alpha."""
        if prev_grid.mean.shape != self.mean.shape:
            raise ValueError(
                f"grid shapes differ: {prev_grid.mean.shape} and {self.mean.shape}"
            )
        self.mean = (alpha * prev_grid.mean + (1.0 - alpha) * self.mean).astype(np.float32)
        self.variance = (alpha * prev_grid.variance + (1.0 - alpha) * self.variance).astype(
            np.float32
        )