# initialisation.py

import logging

import numpy as np

from .exceptions import ParameterFileError, ObstacleFileError
from .lattice import Lattice
from .parameters import Parameters

log = logging.getLogger(__name__)

# Fields of the parameter file, in the order they appear
PARAMETER_FIELDS = (
    ("nx", int),
    ("ny", int),
    ("maxIters", int),
    ("reynolds_dim", int),
    ("density", float),
    ("accel", float),
    ("omega", float),
)


def read_parameters(paramfile):
    """
    Load the run parameters from a text file of seven whitespace-separated
    values: nx, ny, maxIters, reynolds_dim, density, accel, omega.

    Arguments:
        paramfile (str or Path): Parameter file to read

    Returns:
        params (Parameters): The loaded parameters
    """

    try:
        with open(paramfile, "r") as fp:
            tokens = fp.read().split()
    except OSError as err:
        raise ParameterFileError(
            f"could not open input parameter file: {paramfile}", path=paramfile) from err

    values = []
    for position, (name, kind) in enumerate(PARAMETER_FIELDS):
        if position >= len(tokens):
            raise ParameterFileError(f"could not read param file: {name}", path=paramfile)
        try:
            values.append(kind(tokens[position]))
        except ValueError as err:
            raise ParameterFileError(f"could not read param file: {name}", path=paramfile) from err

    nx, ny, max_iters, reynolds_dim, density, accel, omega = values

    if nx <= 0 or ny <= 0:
        raise ParameterFileError(f"grid dimensions must be positive, got {nx}x{ny}", path=paramfile)
    if max_iters < 0:
        raise ParameterFileError(f"maxIters must not be negative, got {max_iters}", path=paramfile)
    if not 0.0 < omega <= 2.0:
        log.warning(f"omega={omega} is outside (0, 2], the collision step will be unstable")

    return Parameters(nx=nx, ny=ny, max_iters=max_iters, reynolds_dim=reynolds_dim,
                      density=density, accel=accel, omega=omega)


def read_obstacles(obstaclefile, nx, ny):
    """
    Load the blocked cells from a text file with one `x y blocked` triple
    per line. Unlisted cells are fluid.

    Arguments:
        obstaclefile (str or Path): Obstacle file to read
        nx (int): Lattice size in x-direction
        ny (int): Lattice size in y-direction

    Returns:
        obstacles (np.ndarray): Binary obstacle mask of length nx*ny, indexed ii + jj*nx
    """

    obstacles = np.zeros(nx * ny, dtype=np.int32)

    try:
        fp = open(obstaclefile, "r")
    except OSError as err:
        raise ObstacleFileError(
            f"could not open input obstacles file: {obstaclefile}", path=obstaclefile) from err

    with fp:
        for line_number, line in enumerate(fp, start=1):
            fields = line.split()
            if not fields:
                continue

            if len(fields) != 3:
                raise ObstacleFileError("expected 3 values per line in obstacle file",
                                        path=obstaclefile, line=line_number)
            try:
                xx, yy, blocked = (int(field) for field in fields)
            except ValueError as err:
                raise ObstacleFileError("expected 3 values per line in obstacle file",
                                        path=obstaclefile, line=line_number) from err

            if xx < 0 or xx > nx - 1:
                raise ObstacleFileError("obstacle x-coord out of range",
                                        path=obstaclefile, line=line_number)
            if yy < 0 or yy > ny - 1:
                raise ObstacleFileError("obstacle y-coord out of range",
                                        path=obstaclefile, line=line_number)
            if blocked != 1:
                raise ObstacleFileError("obstacle blocked value should be 1",
                                        path=obstaclefile, line=line_number)

            obstacles[xx + yy * nx] = blocked

    return obstacles


def initialise(paramfile, obstaclefile):
    """
    Load parameters and obstacles, allocate the lattice and set the initial
    fluid densities.

    Returns:
        params (Parameters): The loaded parameters
        lattice (Lattice): Grid storage holding the initial state
        av_vels (np.ndarray): Zeroed record of the average velocity per timestep
    """

    params = read_parameters(paramfile)
    obstacles = read_obstacles(obstaclefile, params.nx, params.ny)

    lattice = Lattice(params.nx, params.ny, obstacles=obstacles)
    lattice.initialise_densities(params.density)

    av_vels = np.zeros(params.max_iters, dtype=np.float64)

    log.info(f"Loaded {params.nx}x{params.ny} lattice, {params.max_iters} iterations, "
             f"{params.num_cells - lattice.num_fluid_cells} blocked cells")

    return params, lattice, av_vels
