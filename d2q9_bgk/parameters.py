# parameters.py

from dataclasses import dataclass

import numpy as np


NSPEEDS = 9

# Speeds are numbered as follows:
#
#     6 2 5
#      \|/
#     3-0-1
#      /|\
#     7 4 8
EX = np.array([0, 1, 0, -1, 0, 1, -1, -1, 1], dtype=np.int64)
EY = np.array([0, 0, 1, 0, -1, 1, 1, -1, -1], dtype=np.int64)

W0 = 4.0 / 9.0  # Rest weight
W1 = 1.0 / 9.0  # Axis weight
W2 = 1.0 / 36.0  # Diagonal weight
W = np.array([W0, W1, W1, W1, W1, W2, W2, W2, W2], dtype=np.float64)

OPPOSITE = np.array([0, 3, 4, 1, 2, 7, 8, 5, 6], dtype=np.int64)

C_SQ = 1.0 / 3.0  # Square of the lattice speed of sound


@dataclass(frozen=True)
class Parameters:
    """
    Run configuration, as read from the parameter file.

    nx, ny:
        Lattice size in x (columns) and y (rows)
    max_iters:
        Number of timesteps
    reynolds_dim:
        Characteristic length used for the Reynolds number
    density:
        Reference fluid density per cell
    accel:
        Density redistributed by the forcing step
    omega:
        BGK relaxation rate, stable for 0 < omega <= 2
    """

    nx: int
    ny: int
    max_iters: int
    reynolds_dim: int
    density: float
    accel: float
    omega: float

    @property
    def num_cells(self):
        return self.nx * self.ny

    @property
    def viscosity(self):
        """Kinematic viscosity implied by omega, infinite for omega = 0."""
        with np.errstate(divide='ignore'):
            return float((2.0 / np.float64(self.omega) - 1.0) / 6.0)
