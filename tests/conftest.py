"""Pytest configuration and fixtures for the lattice Boltzmann tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from d2q9_bgk.fluid_dynamics import equilibrium
from d2q9_bgk.lattice import Lattice
from d2q9_bgk.parameters import Parameters


DEFAULT_PARAMS = {
    "nx": 4,
    "ny": 4,
    "max_iters": 10,
    "reynolds_dim": 4,
    "density": 1.0,
    "accel": 0.0,
    "omega": 1.0,
}


@pytest.fixture
def make_params():
    """Factory for Parameters on a small 4x4 grid, with overrides."""

    def _make(**overrides):
        values = dict(DEFAULT_PARAMS)
        values.update(overrides)
        return Parameters(**values)

    return _make


@pytest.fixture
def make_lattice():
    """Factory for a lattice initialised to the zero-velocity equilibrium."""

    def _make(params, blocked=()):
        lattice = Lattice(params.nx, params.ny)
        if blocked:
            xs, ys = zip(*blocked)
            lattice.mark_obstacles(xs, ys)
        lattice.initialise_densities(params.density)
        return lattice

    return _make


@pytest.fixture
def write_param_file(tmp_path):
    """Write a parameter file in the nx/ny/maxIters/reynolds_dim/density/accel/omega order."""

    def _write(nx=4, ny=4, max_iters=10, reynolds_dim=4, density=0.1, accel=0.005, omega=1.7,
               name="input.params", text=None):
        path = tmp_path / name
        if text is None:
            text = f"{nx}\n{ny}\n{max_iters}\n{reynolds_dim}\n{density}\n{accel}\n{omega}\n"
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def write_obstacle_file(tmp_path):
    """Write an obstacle file from (x, y) pairs, or from raw text."""

    def _write(cells=(), name="obstacles.dat", text=None):
        path = tmp_path / name
        if text is None:
            text = "".join(f"{x} {y} 1\n" for x, y in cells)
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def uniform_equilibrium():
    """Fill the current field of a lattice with one equilibrium everywhere."""

    def _fill(lattice, density, u_x, u_y):
        d_equ = equilibrium(density, u_x, u_y)
        lattice.cells[:, :] = d_equ[:, np.newaxis]
        return d_equ

    return _fill
