# main.py

import argparse
import cProfile
import logging
import os
import pstats
import sys
import time

import numba
import numpy as np

from .diagnostics import calc_reynolds, total_density
from .exceptions import LBMError, ResultsFileError
from .fluid_dynamics import accelerate_flow, propagate
from .initialisation import initialise
from .results import write_values

log = logging.getLogger(__name__)


def simulation_setup(paramfile, obstaclefile):
    """
    Load the run description and build the initial lattice.

    Returns:
        params (Parameters): Run parameters
        lattice (Lattice): Grid storage at equilibrium
        av_vels (np.ndarray): Average velocity record, one entry per timestep
    """

    return initialise(paramfile, obstaclefile)


def timestep(params, lattice):
    """
    Advance the lattice by one timestep: forcing, then the fused streaming,
    reflection and collision pass into the scratch field. The scratch field
    becomes the current field afterwards.

    Arguments:
        params (Parameters): Run parameters
        lattice (Lattice): Grid storage, advanced in place

    Returns:
        av_vel (float): Average velocity magnitude over the fluid cells
    """

    accelerate_flow(params.nx, params.ny, params.density, params.accel,
                    lattice.cells, lattice.obstacles)

    av_vel = propagate(params.nx, params.ny, params.omega,
                       lattice.cells, lattice.tmp_cells, lattice.obstacles,
                       lattice.row_u, lattice.row_cells)

    lattice.swap()

    return av_vel


def timestep_loop(params, lattice, av_vels=None):
    """
    Evolves the simulation over time

    Arguments:
        params (Parameters): Run parameters
        lattice (Lattice): Grid storage, left holding the final state
        av_vels (np.ndarray): Optional preallocated record of length max_iters

    Returns:
        av_vels (np.ndarray): Average velocity for each timestep
    """

    if av_vels is None:
        av_vels = np.zeros(params.max_iters, dtype=np.float64)

    debug = log.isEnabledFor(logging.DEBUG)

    for tt in range(params.max_iters):
        av_vels[tt] = timestep(params, lattice)

        if debug:
            log.debug(f"==timestep: {tt}== av velocity: {av_vels[tt]:.12E} "
                      f"tot density: {total_density(lattice.cells):.12E}")

    return av_vels


def build_parser():
    parser = argparse.ArgumentParser(
        prog="d2q9-bgk",
        description="D2Q9 BGK lattice Boltzmann simulation on a periodic grid.")
    parser.add_argument("paramfile", help="Input parameter file.")
    parser.add_argument("obstaclefile", help="Input obstacle file.")
    parser.add_argument("--output-dir", default=".",
                        help="Directory for final_state.dat and av_vels.dat.")
    parser.add_argument("--threads", type=int, default=None,
                        help="Number of threads for Numba parallelization.")
    parser.add_argument("--timings-file", default=None,
                        help="Append the timestep loop wall time to this file.")
    parser.add_argument("--profile", action="store_true",
                        help="Profile the run and print the top 20 functions.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log the average velocity and total density of every timestep.")
    return parser


def report_error(err):
    # The message goes to stderr once; the log only keeps a trace of it
    log.debug(f"run aborted: {err.message}")
    print(err, file=sys.stderr)
    sys.stderr.flush()


def run(args):
    """
    Initialise, iterate and write results for parsed command-line arguments.

    Returns:
        status (int): Process exit status
    """

    if args.threads is not None:
        numba.set_num_threads(args.threads)

    # Verify the threads
    log.info(f"Using {numba.get_num_threads()} threads for Numba parallelization.")

    try:
        params, lattice, av_vels = simulation_setup(args.paramfile, args.obstaclefile)
    except LBMError as err:
        report_error(err)
        return 1

    # Iterate for max_iters timesteps
    cpu_start = os.times()
    time_start = time.time()

    timestep_loop(params, lattice, av_vels)

    time_end = time.time()
    cpu_end = os.times()
    execution_time = time_end - time_start
    log.info(f"TIME FOR TIMESTEP_LOOP FUNCTION: {execution_time}")

    print("==done==")
    print(f"Reynolds number:\t\t{calc_reynolds(params, lattice.cells, lattice.obstacles):.12E}")
    print(f"Elapsed time:\t\t\t{execution_time:.6f} (s)")
    print(f"Elapsed user CPU time:\t\t{cpu_end.user - cpu_start.user:.6f} (s)")
    print(f"Elapsed system CPU time:\t{cpu_end.system - cpu_start.system:.6f} (s)")

    try:
        write_values(params, lattice.cells, lattice.obstacles, av_vels, args.output_dir)
        if args.timings_file:
            append_timing(args.timings_file, execution_time)
    except LBMError as err:
        report_error(err)
        return 1

    return 0


def append_timing(path, execution_time):
    """Append the timestep loop wall time to a text file, one run per line."""
    try:
        with open(path, "a") as file:
            file.write(f"{execution_time}\n")
    except OSError as err:
        raise ResultsFileError(f"could not append loop timing: {err.strerror}", path) from err


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.threads is not None and not 1 <= args.threads <= numba.config.NUMBA_NUM_THREADS:
        parser.error(f"--threads must be between 1 and {numba.config.NUMBA_NUM_THREADS}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.profile:
        return run(args)

    profiler = cProfile.Profile()
    profiler.enable()
    status = run(args)
    profiler.disable()

    # Print the top 20 functions by cumulative time spent
    stats = pstats.Stats(profiler)
    stats.sort_stats('cumulative').print_stats(20)

    return status


if __name__ == "__main__":
    sys.exit(main())
