# plotting.py

import argparse
import gc
import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from .diagnostics import fluid_vorticity

log = logging.getLogger(__name__)

plt.rcParams['figure.dpi'] = 300
plt.rcParams['savefig.dpi'] = 300


def load_final_state(path):
    """
    Read a final state file back onto the grid.

    Arguments:
        path (str): final_state.dat written by a run

    Returns:
        fields (dict): 'u_x', 'u_y', 'speed', 'pressure' and 'obstacles' as (ny, nx) arrays
    """

    table = np.loadtxt(path, ndmin=2)
    nx = int(table[:, 0].max()) + 1
    ny = int(table[:, 1].max()) + 1
    if table.shape[0] != nx * ny:
        raise ValueError(f"{path} holds {table.shape[0]} cells, expected {nx}x{ny}")

    # Rows are written with y as the outer loop, so they reshape directly to (ny, nx)
    names = ('u_x', 'u_y', 'speed', 'pressure', 'obstacles')
    return {name: table[:, column + 2].reshape(ny, nx) for column, name in enumerate(names)}


def load_av_vels(path):
    """Average velocity history as (timestep, value) arrays."""
    with open(path, "r") as file:
        rows = [line.split(':') for line in file if line.strip()]

    steps = np.array([int(step) for step, _ in rows], dtype=np.int64)
    values = np.array([float(value) for _, value in rows], dtype=np.float64)
    return steps, values


def setup_plot_directories(plot_dir='plots'):
    """
    Create the directory receiving the figures.

    Returns:
        plot_dir (str): Directory to save plots
    """

    os.makedirs(plot_dir, exist_ok=True)
    return plot_dir


def plot_final_state(fields, plot_dir):
    """
    Create and save plots of velocity, vorticity and pressure fields of the
    final state.

    Arguments:
        fields (dict): Output of load_final_state
        plot_dir (str): Directory to save the figure

    Returns:
        path (str): Saved figure
    """

    # Rows of the arrays are y, so imshow with origin='lower' puts y upwards
    ny, nx = fields['speed'].shape
    x = np.arange(nx) + 0.5
    y = np.arange(ny) + 0.5
    extent = [0, nx, 0, ny]
    blocked = np.ma.masked_where(fields['obstacles'] == 0, fields['obstacles'])

    vor = fluid_vorticity(fields['u_x'], fields['u_y'])

    [fig, ax] = plt.subplots(3, 1, figsize=(16, 9))

    # VELOCITY FIELD PLOT
    c = ax[0].imshow(fields['speed'], origin='lower', extent=extent)
    bar = fig.colorbar(c, ax=ax[0])
    bar.set_label(r'$|\mathbf{u}|$')
    if nx > 1 and ny > 1:
        ax[0].streamplot(x, y, fields['u_x'], fields['u_y'], color=[1, 1, 1],
                         density=1, linewidth=0.7, arrowsize=0.7)
    ax[0].imshow(blocked, origin='lower', extent=extent, cmap='gray')
    ax[0].set_title(r'Velocity $\mathbf{u}$')
    ax[0].set_xlabel('$X$')
    ax[0].set_ylabel('$Y$')

    # VORTICITY FIELD PLOT
    c = ax[1].imshow(vor, origin='lower', extent=extent, cmap='gist_ncar')
    bar = fig.colorbar(c, ax=ax[1])
    bar.set_label('$v$')
    ax[1].set_title(r'Vorticity $v$')
    ax[1].set_xlabel('$X$')
    ax[1].set_ylabel('$Y$')

    # PRESSURE FIELD PLOT
    c = ax[2].imshow(fields['pressure'], origin='lower', extent=extent)
    bar = fig.colorbar(c, ax=ax[2])
    bar.set_label('$p$')
    ax[2].set_title(r'Pressure $p$')
    ax[2].set_xlabel('$X$')
    ax[2].set_ylabel('$Y$')

    plt.subplots_adjust(hspace=0.85)
    path = os.path.join(plot_dir, "final_state.png")
    plt.savefig(path)

    fig.clear()
    del fig, ax
    plt.close('all')
    gc.collect()

    return path


def plot_av_vels(steps, values, plot_dir):
    """Plot the average velocity against timestep."""
    plt.figure(figsize=(10, 6))
    plt.plot(steps, values)
    plt.xlabel("Timestep")
    plt.ylabel("Average velocity")
    plt.title("Average velocity over non-blocked cells")
    plt.grid(True, linestyle="--", linewidth=0.5)
    plt.tight_layout()

    path = os.path.join(plot_dir, "av_vels.png")
    plt.savefig(path)
    plt.close()

    return path


def main(argv=None):
    parser = argparse.ArgumentParser(prog="d2q9-bgk-plot",
                                     description="Plot the results of a d2q9-bgk run.")
    parser.add_argument("final_state", help="final_state.dat written by a run.")
    parser.add_argument("av_vels", help="av_vels.dat written by a run.")
    parser.add_argument("--plot-dir", default="plots", help="Directory for the figures.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    plot_dir = setup_plot_directories(args.plot_dir)
    paths = [
        plot_final_state(load_final_state(args.final_state), plot_dir),
        plot_av_vels(*load_av_vels(args.av_vels), plot_dir),
    ]
    for path in paths:
        log.info(f"PLOT {path} complete")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
