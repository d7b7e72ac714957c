# results.py

import logging
import os

import numpy as np

from .diagnostics import fluid_pressure, fluid_velocity
from .exceptions import ResultsFileError

log = logging.getLogger(__name__)

FINAL_STATE_FILE = "final_state.dat"
AV_VELS_FILE = "av_vels.dat"

FINAL_STATE_FORMAT = "%d %d %.12E %.12E %.12E %.12E %d"
AV_VELS_FORMAT = "%d:\t%.12E"


def final_state_table(params, cells, obstacles):
    """
    Per-cell results in row-major order.

    Returns:
        table (np.ndarray): Rows of (x, y, u_x, u_y, |u|, pressure, obstacle)
    """

    ii, jj = np.meshgrid(np.arange(params.nx), np.arange(params.ny))
    u_x, u_y = fluid_velocity(cells, obstacles)
    speed = np.sqrt(u_x * u_x + u_y * u_y)
    pressure = fluid_pressure(params, cells, obstacles)

    return np.column_stack((ii.ravel(), jj.ravel(), u_x, u_y, speed, pressure, obstacles))


def write_final_state(params, cells, obstacles, path):
    try:
        np.savetxt(path, final_state_table(params, cells, obstacles), fmt=FINAL_STATE_FORMAT)
    except OSError as err:
        raise ResultsFileError(f"could not open file output file: {path}", path=path) from err

    return path


def write_av_vels(av_vels, path):
    table = np.column_stack((np.arange(len(av_vels)), av_vels))
    try:
        np.savetxt(path, table, fmt=AV_VELS_FORMAT)
    except OSError as err:
        raise ResultsFileError(f"could not open file output file: {path}", path=path) from err

    return path


def write_values(params, cells, obstacles, av_vels, output_dir="."):
    """
    Write the final state and the average velocity history.

    Arguments:
        params (Parameters): Run parameters
        cells (np.ndarray): Final distribution field
        obstacles (np.ndarray): Binary obstacle mask
        av_vels (np.ndarray): Average velocity for each timestep
        output_dir (str): Directory receiving the two output files

    Returns:
        final_state_path (str): Path of the final state file
        av_vels_path (str): Path of the average velocity file
    """

    try:
        os.makedirs(output_dir, exist_ok=True) # Ensure output directory exists
    except OSError as err:
        raise ResultsFileError(f"could not create output directory: {output_dir}",
                               path=output_dir) from err

    final_state_path = write_final_state(params, cells, obstacles,
                                         os.path.join(output_dir, FINAL_STATE_FILE))
    av_vels_path = write_av_vels(av_vels, os.path.join(output_dir, AV_VELS_FILE))

    log.info(f"Wrote {final_state_path} and {av_vels_path}")

    return final_state_path, av_vels_path
