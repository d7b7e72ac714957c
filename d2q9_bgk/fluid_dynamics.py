# fluid_dynamics.py

from numba import njit, prange
import numpy as np

from .parameters import NSPEEDS, EX, EY, W, W0, W1, W2, C_SQ


@njit(fastmath=True, nogil=True, cache=True)
def equilibrium_speed(weight, local_density, u_dir, u_sq):
    """
    Second-order BGK equilibrium for a single direction.

    Arguments:
        weight (float): Lattice weight of the direction
        local_density (float): Fluid density of the cell
        u_dir (float): Projection of the cell velocity onto the direction
        u_sq (float): Magnitude squared of the cell velocity

    Returns:
        d_equ (float): Equilibrium density for the direction
    """

    return weight * local_density * (
        1.0 + u_dir / C_SQ +
        (u_dir * u_dir) / (2.0 * C_SQ * C_SQ) -
        u_sq / (2.0 * C_SQ)
    )


@njit(fastmath=True, nogil=True, cache=True)
def equilibrium(local_density, u_x, u_y):
    """
    Evaluates the equilibrium distribution of one cell for a given
    fluid density and velocity.

    Arguments:
        local_density (float): Fluid density of the cell
        u_x (float): x velocity of the cell
        u_y (float): y velocity of the cell

    Returns:
        d_equ (np.ndarray): Equilibrium density for each of the NSPEEDS directions
    """

    d_equ = np.empty(NSPEEDS, dtype=np.float64)
    u_sq = u_x * u_x + u_y * u_y # Magnitude squared of velocity

    for k in range(NSPEEDS):
        u_dir = EX[k] * u_x + EY[k] * u_y # Velocity component in direction
        d_equ[k] = equilibrium_speed(W[k], local_density, u_dir, u_sq)

    return d_equ


@njit(parallel=True, fastmath=True, nogil=True, boundscheck=False, cache=True)
def accelerate_flow(nx, ny, density, accel, cells, obstacles):
    """
    Push fluid east along the second row from the top by moving density
    from the west-going into the east-going speeds.

    Arguments:
        nx (int): Lattice size in x-direction
        ny (int): Lattice size in y-direction
        density (float): Reference fluid density
        accel (float): Density redistribution per cell
        cells (np.ndarray): Distribution field of shape (NSPEEDS, nx*ny), updated in place
        obstacles (np.ndarray): Binary obstacle mask of length nx*ny

    Returns:
        cells (np.ndarray): The forced distribution field
    """

    # Compute weighting factors
    w1 = density * accel / 9.0
    w2 = density * accel / 36.0

    jj = ny - 2
    if jj < 0: # No forcing row on a single-row lattice
        return cells

    for ii in prange(nx): # Parallelize over x
        idx = ii + jj * nx

        # Only if the cell is not occupied and no density would go negative
        if (obstacles[idx] == 0
                and cells[3, idx] - w1 > 0.0
                and cells[6, idx] - w2 > 0.0
                and cells[7, idx] - w2 > 0.0):
            # Increase 'east-side' densities
            cells[1, idx] += w1
            cells[5, idx] += w2
            cells[8, idx] += w2
            # Decrease 'west-side' densities
            cells[3, idx] -= w1
            cells[6, idx] -= w2
            cells[7, idx] -= w2

    return cells


@njit(parallel=True, fastmath=True, nogil=True, boundscheck=False, cache=True,
      error_model='numpy')
def propagate(nx, ny, omega, cells, tmp_cells, obstacles, row_u, row_cells):
    """
    Perform the streaming, reflection and collision steps in a single pass.

    Every population is pulled from its upstream neighbour (periodic in both
    directions). Blocked cells bounce the gathered populations back into the
    opposite direction, fluid cells relax towards the local equilibrium.
    Only `cells` is read and only `tmp_cells` is written.

    Arguments:
        nx (int): Lattice size in x-direction
        ny (int): Lattice size in y-direction
        omega (float): Relaxation rate
        cells (np.ndarray): Current distribution field of shape (NSPEEDS, nx*ny)
        tmp_cells (np.ndarray): Scratch distribution field, overwritten
        obstacles (np.ndarray): Binary obstacle mask of length nx*ny
        row_u (np.ndarray): Per-row sum of velocity magnitudes, overwritten
        row_cells (np.ndarray): Per-row count of fluid cells, overwritten

    Returns:
        av_vel (float): Average velocity magnitude over the fluid cells
    """

    for jj in prange(ny): # Parallelize over rows
        # Row neighbours, respecting periodic boundary conditions
        y_n = (jj + 1) % ny
        y_s = jj - 1 if jj > 0 else ny - 1

        tot_u = 0.0
        tot_cells = 0

        for ii in range(nx):
            x_e = (ii + 1) % nx
            x_w = ii - 1 if ii > 0 else nx - 1
            idx = ii + jj * nx

            # Propagate densities from neighbouring cells, following
            # the direction of travel
            speeds0 = cells[0, idx]               # central cell, no movement
            speeds1 = cells[1, x_w + jj * nx]     # east
            speeds2 = cells[2, ii + y_s * nx]     # north
            speeds3 = cells[3, x_e + jj * nx]     # west
            speeds4 = cells[4, ii + y_n * nx]     # south
            speeds5 = cells[5, x_w + y_s * nx]    # north-east
            speeds6 = cells[6, x_e + y_s * nx]    # north-west
            speeds7 = cells[7, x_e + y_n * nx]    # south-west
            speeds8 = cells[8, x_w + y_n * nx]    # south-east

            if obstacles[idx] != 0:
                # Bounce back into the opposite direction
                tmp_cells[0, idx] = speeds0
                tmp_cells[1, idx] = speeds3
                tmp_cells[2, idx] = speeds4
                tmp_cells[3, idx] = speeds1
                tmp_cells[4, idx] = speeds2
                tmp_cells[5, idx] = speeds7
                tmp_cells[6, idx] = speeds8
                tmp_cells[7, idx] = speeds5
                tmp_cells[8, idx] = speeds6

            else:
                local_density = (speeds0 + speeds1 + speeds2 + speeds3 + speeds4 +
                                 speeds5 + speeds6 + speeds7 + speeds8)

                u_x = (speeds1 + speeds5 + speeds8 - (speeds3 + speeds6 + speeds7)) / local_density
                u_y = (speeds2 + speeds5 + speeds6 - (speeds4 + speeds7 + speeds8)) / local_density
                u_sq = u_x * u_x + u_y * u_y

                # Relaxation towards the equilibrium, direction by direction
                tmp_cells[0, idx] = speeds0 + omega * (
                    equilibrium_speed(W0, local_density, 0.0, u_sq) - speeds0)
                tmp_cells[1, idx] = speeds1 + omega * (
                    equilibrium_speed(W1, local_density, u_x, u_sq) - speeds1)
                tmp_cells[2, idx] = speeds2 + omega * (
                    equilibrium_speed(W1, local_density, u_y, u_sq) - speeds2)
                tmp_cells[3, idx] = speeds3 + omega * (
                    equilibrium_speed(W1, local_density, -u_x, u_sq) - speeds3)
                tmp_cells[4, idx] = speeds4 + omega * (
                    equilibrium_speed(W1, local_density, -u_y, u_sq) - speeds4)
                tmp_cells[5, idx] = speeds5 + omega * (
                    equilibrium_speed(W2, local_density, u_x + u_y, u_sq) - speeds5)
                tmp_cells[6, idx] = speeds6 + omega * (
                    equilibrium_speed(W2, local_density, -u_x + u_y, u_sq) - speeds6)
                tmp_cells[7, idx] = speeds7 + omega * (
                    equilibrium_speed(W2, local_density, -u_x - u_y, u_sq) - speeds7)
                tmp_cells[8, idx] = speeds8 + omega * (
                    equilibrium_speed(W2, local_density, u_x - u_y, u_sq) - speeds8)

                tot_u += np.sqrt(u_sq)
                tot_cells += 1

        row_u[jj] = tot_u
        row_cells[jj] = tot_cells

    # Combine the per-row partial sums in a fixed order
    total_u = 0.0
    total_cells = 0
    for jj in range(ny):
        total_u += row_u[jj]
        total_cells += row_cells[jj]

    if total_cells == 0:
        return np.nan

    return total_u / total_cells
