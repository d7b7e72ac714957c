# diagnostics.py

import numpy as np

from .parameters import EX, EY, C_SQ


def total_density(cells):
    """
    Sum all the densities in the grid. The total should remain constant
    from one timestep to the next.

    Arguments:
        cells (np.ndarray): Distribution field of shape (NSPEEDS, nx*ny)

    Returns:
        total (float): Total mass held by the field
    """

    return float(np.einsum('ki->', cells))


def fluid_density(cells):
    """
    Calculate the fluid density from the distribution function.

    Arguments:
        cells (np.ndarray): Distribution field of shape (NSPEEDS, nx*ny)

    Returns:
        rho (np.ndarray): Density of each cell, length nx*ny
    """

    return np.einsum('ki->i', cells)


def fluid_velocity(cells, obstacles):
    """
    Calculate the fluid velocity from the distribution function. Blocked
    cells report a velocity of exactly zero.

    Arguments:
        cells (np.ndarray): Distribution field of shape (NSPEEDS, nx*ny)
        obstacles (np.ndarray): Binary obstacle mask of length nx*ny

    Returns:
        u_x (np.ndarray): x velocity of each cell
        u_y (np.ndarray): y velocity of each cell
    """

    blocked = obstacles != 0
    rho = fluid_density(cells)

    with np.errstate(divide='ignore', invalid='ignore'):
        u_x = np.einsum('k,ki->i', EX.astype(cells.dtype), cells) / rho
        u_y = np.einsum('k,ki->i', EY.astype(cells.dtype), cells) / rho

    u_x = np.where(blocked, 0.0, u_x)
    u_y = np.where(blocked, 0.0, u_y)

    return u_x, u_y


def fluid_pressure(params, cells, obstacles):
    """Pressure of each cell; blocked cells take the reference density."""
    rho = np.where(obstacles != 0, params.density, fluid_density(cells))
    return rho * C_SQ


def fluid_vorticity(u_x, u_y):
    """
    Compute the vorticity of the velocity field.

    Arguments:
        u_x (np.ndarray): x velocity on a (ny, nx) grid
        u_y (np.ndarray): y velocity on a (ny, nx) grid

    Returns:
        vor (np.ndarray): 2D array of vorticity, shape (ny, nx)
    """

    vor = (np.roll(u_y, -1, 1) - np.roll(u_y, 1, 1) -
           np.roll(u_x, -1, 0) + np.roll(u_x, 1, 0))

    return vor


def av_velocity(cells, obstacles):
    """
    Average velocity magnitude over the non-blocked cells, recomputed from
    a field snapshot.

    Returns:
        av_vel (float): Mean |u|, or NaN when every cell is blocked
    """

    fluid = obstacles == 0
    tot_cells = int(np.count_nonzero(fluid))
    if tot_cells == 0:
        return float('nan')

    u_x, u_y = fluid_velocity(cells, obstacles)
    tot_u = np.sqrt(u_x[fluid] * u_x[fluid] + u_y[fluid] * u_y[fluid]).sum()

    return float(tot_u / tot_cells)


def calc_reynolds(params, cells, obstacles):
    """
    Reynolds number of the flow held in `cells`. A vanishing viscosity
    (omega = 2) gives inf rather than raising.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(av_velocity(cells, obstacles)) * params.reynolds_dim
                     / np.float64(params.viscosity))
