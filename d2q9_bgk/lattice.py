# lattice.py

import numpy as np

from .exceptions import AllocationError
from .parameters import NSPEEDS, W0, W1, W2


class Lattice:
    """
    Grid storage for one run: a pair of distribution fields, the obstacle
    mask and the per-row reduction buffers used by the streaming kernel.

    Each field is a (NSPEEDS, nx*ny) array, so every direction is stored
    contiguously and a cell (ii, jj) lives at column ii + jj*nx. The two
    fields sit in one (2, NSPEEDS, nx*ny) buffer; `current` selects which slot
    is read this timestep, the other slot is written.
    """

    def __init__(self, nx, ny, obstacles=None):
        if nx <= 0 or ny <= 0:
            raise ValueError(f"Lattice dimensions must be positive, got {nx}x{ny}")

        self.nx = nx
        self.ny = ny
        self.num_cells = nx * ny

        try:
            self.buffers = np.zeros((2, NSPEEDS, self.num_cells), dtype=np.float64)
            self.row_u = np.zeros(ny, dtype=np.float64)
            self.row_cells = np.zeros(ny, dtype=np.int64)
        except MemoryError as err:
            raise AllocationError(f"cannot allocate memory for a {nx}x{ny} lattice") from err

        if obstacles is None:
            self.obstacles = np.zeros(self.num_cells, dtype=np.int32)
        else:
            obstacles = np.ascontiguousarray(obstacles, dtype=np.int32).reshape(-1)
            if obstacles.size != self.num_cells:
                raise ValueError(
                    f"Obstacle mask has {obstacles.size} cells, expected {self.num_cells}"
                )
            self.obstacles = obstacles

        self.current = 0

    @property
    def cells(self):
        """Field holding the most recent state."""
        return self.buffers[self.current]

    @property
    def tmp_cells(self):
        """Scratch field written by the next streaming pass."""
        return self.buffers[1 - self.current]

    def swap(self):
        self.current = 1 - self.current

    def idx(self, ii, jj):
        return ii + jj * self.nx

    def neighbours(self, ii, jj):
        """
        Periodic axis neighbours of a cell.

        Returns:
            (x_e, x_w, y_n, y_s): East and west column, north and south row
        """

        x_e = (ii + 1) % self.nx
        x_w = (ii - 1 + self.nx) % self.nx
        y_n = (jj + 1) % self.ny
        y_s = (jj - 1 + self.ny) % self.ny

        return x_e, x_w, y_n, y_s

    def initialise_densities(self, density):
        """
        Set every cell of the current field to the zero-velocity equilibrium
        for `density`.
        """

        cells = self.cells
        cells[0, :] = density * W0
        cells[1:5, :] = density * W1
        cells[5:9, :] = density * W2

        return cells

    def mark_obstacles(self, xs, ys):
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        self.obstacles[xs + ys * self.nx] = 1

    def blocked(self, ii, jj):
        return bool(self.obstacles[self.idx(ii, jj)])

    @property
    def num_fluid_cells(self):
        return int(np.count_nonzero(self.obstacles == 0))

    def as_grid(self, field=None):
        """View of a field as (NSPEEDS, ny, nx), row jj first."""
        if field is None:
            field = self.cells
        return field.reshape(NSPEEDS, self.ny, self.nx)
