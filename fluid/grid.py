"""
grid.py — Dense 2D Field Storage
=================================
Every field in the simulation (velocities, mask, pressure, smoke) is a
`Grid`: a fixed width × height block of float64 values addressed by
(column, row).

Layout:
  - Backing array has shape (width, height) → grid.data[x, y]
  - flatten() returns ROW-MAJOR order → index y * width + x
    (what a renderer walking scanlines expects)

Indexing is bounds-checked: negative indices do NOT wrap around like
plain numpy indexing, they raise.
"""

import numpy as np


class GridIndexError(IndexError):
    """Raised on any access outside [0, width) × [0, height)."""


class Grid:
    """
    Fixed-size 2D float field.

    Usage:
        g = Grid(4, 3)           # zero-filled
        g[1, 2] = 5.0
        g.reset(1.0)             # bulk overwrite
        g.flatten()              # row-major copy
    """

    def __init__(self, width: int, height: int, fill_value: float = 0.0):
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.data = np.full((self.width, self.height), fill_value, dtype=np.float64)

    @classmethod
    def filled(cls, value: float, width: int, height: int) -> "Grid":
        """Uniformly filled grid."""
        return cls(width, height, fill_value=value)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Grid":
        """Wrap an existing (width, height) array. The array is not copied."""
        if array.ndim != 2:
            raise ValueError(f"Expected a 2D array, got shape {array.shape}")
        grid = cls.__new__(cls)
        grid.width, grid.height = array.shape
        grid.data = np.asarray(array, dtype=np.float64)
        return grid

    @property
    def shape(self) -> tuple:
        return (self.width, self.height)

    def _check(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise GridIndexError(
                f"Index out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})"
            )

    def get(self, x: int, y: int) -> float:
        self._check(x, y)
        return float(self.data[x, y])

    def set(self, x: int, y: int, value: float):
        self._check(x, y)
        self.data[x, y] = value

    def __getitem__(self, index):
        x, y = index
        return self.get(x, y)

    def __setitem__(self, index, value):
        x, y = index
        self.set(x, y, value)

    def zero(self):
        """Overwrite every cell with 0.0 in place."""
        self.data[:] = 0.0

    def reset(self, value: float):
        """Overwrite every cell with `value` in place."""
        self.data[:] = value

    def copy(self) -> "Grid":
        return Grid.from_array(self.data.copy())

    def flatten(self) -> np.ndarray:
        """Row-major copy: element y * width + x holds grid[x, y]."""
        return self.data.flatten(order="F")

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.data, other.data)

    def __repr__(self):
        rows = []
        for y in range(self.height):
            rows.append(" ".join(f"{self.data[x, y]:+.4f}" for x in range(self.width)))
        return f"Grid({self.width}x{self.height})\n" + "\n".join(rows)
