# timings_analysis.py

import argparse
import logging

import numpy as np
import matplotlib.pyplot as plt

log = logging.getLogger(__name__)


def find_min_times(filepath, num_runs, max_threads):
    """
    Finds the minimum loop time for each number of threads.

    The file is expected to hold one line per run, as appended by
    `d2q9-bgk --timings-file`, with `num_runs` consecutive runs for 1 thread,
    then `num_runs` runs for 2 threads, and so on up to `max_threads`.

    Arguments:
        filepath (str): Path to the text file containing timings
        num_runs (int): Number of runs per thread count
        max_threads (int): Maximum number of threads tested

    Returns:
        min_times (list): Minimum run time for each thread count
    """

    min_times = [] # Will hold the fastest run for each number of threads

    # Read the timing data from the text file
    with open(filepath, "r") as file:
        lines = [line for line in file if line.strip()]

    # Quick check to ensure expected number of lines in file
    if len(lines) != num_runs * max_threads:
        raise ValueError(f"Expected {num_runs * max_threads} lines, but found {len(lines)} in {filepath}")

    # Find the fastest run for each thread count
    for thread in range(max_threads):
        start_idx = thread * num_runs
        end_idx = start_idx + num_runs

        thread_times = [float(lines[i].strip()) for i in range(start_idx, end_idx)]

        min_times.append(min(thread_times)) # List now only includes fastest run for each thread count

    return min_times


def speedup(min_times):
    """Speed-up of each thread count relative to a single thread."""
    min_times = np.asarray(min_times, dtype=np.float64)
    return min_times[0] / min_times


def plot_timings(min_times, output="timings_plots_log.png"):
    """
    Plot minimum execution time and speed-up against the number of threads.

    Returns:
        output (str): Saved figure
    """

    threads = np.arange(1, len(min_times) + 1)

    fig, ax = plt.subplots(1, 2, figsize=(14, 6))

    ax[0].plot(threads, min_times, label="Numba", marker="o")
    ax[0].set_xlabel("Number of Threads")
    ax[0].set_ylabel("Minimum Execution Time (seconds)")
    ax[0].set_title("Minimum Execution Time vs Number of Threads (Logarithmic Scale)")
    ax[0].set_yscale('log') # Set y-axis to logarithmic scale
    ax[0].legend()
    ax[0].grid(True, which="both", linestyle="--", linewidth=0.5) # Grid for both major and minor ticks

    ax[1].plot(threads, speedup(min_times), label="Measured", marker="o")
    ax[1].plot(threads, threads, label="Ideal", linestyle="--")
    ax[1].set_xlabel("Number of Threads")
    ax[1].set_ylabel("Speed-up")
    ax[1].set_title("Speed-up vs Number of Threads")
    ax[1].legend()
    ax[1].grid(True, linestyle="--", linewidth=0.5)

    plt.tight_layout()
    plt.savefig(output, dpi=300)
    plt.close(fig)

    return output


def main(argv=None):
    parser = argparse.ArgumentParser(prog="d2q9-bgk-timings",
                                     description="Thread scaling of repeated d2q9-bgk runs.")
    parser.add_argument("filepath", help="Timings file appended by d2q9-bgk --timings-file.")
    parser.add_argument("--num-runs", type=int, required=True, help="Runs per thread count.")
    parser.add_argument("--max-threads", type=int, required=True, help="Highest thread count tested.")
    parser.add_argument("--output", default="timings_plots_log.png", help="Figure to write.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    min_times = find_min_times(args.filepath, args.num_runs, args.max_threads)
    for threads, (seconds, factor) in enumerate(zip(min_times, speedup(min_times)), start=1):
        log.info(f"{threads} threads: {seconds:.6f} s, speed-up {factor:.2f}")

    plot_timings(min_times, args.output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
