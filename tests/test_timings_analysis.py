"""Tests for the thread-scaling analysis of loop timings."""

import numpy as np
import pytest

from d2q9_bgk.timings_analysis import find_min_times, main, plot_timings, speedup


@pytest.fixture
def timings_file(tmp_path):
    """Three runs each for one, two and three threads."""
    path = tmp_path / "loop_timings.txt"
    times = [4.2, 4.0, 4.1,
             2.3, 2.1, 2.2,
             1.6, 1.5, 1.7]
    path.write_text("".join(f"{t}\n" for t in times))
    return path


class TestFindMinTimes:
    """Tests for reducing repeated runs to the fastest per thread count."""

    def test_fastest_run_per_thread_count(self, timings_file):
        """The minimum of each block of runs is kept."""
        assert find_min_times(timings_file, num_runs=3, max_threads=3) == [4.0, 2.1, 1.5]

    def test_line_count_checked(self, timings_file):
        """A file with the wrong number of runs is rejected."""
        with pytest.raises(ValueError, match="Expected 8 lines"):
            find_min_times(timings_file, num_runs=4, max_threads=2)


class TestSpeedup:
    """Tests for speed-up against a single thread."""

    def test_relative_to_one_thread(self):
        """A single thread has a speed-up of one."""
        np.testing.assert_allclose(speedup([4.0, 2.0, 1.0]), [1.0, 2.0, 4.0])


class TestPlots:
    """Tests for the scaling figure and command line."""

    def test_plot_timings(self, tmp_path):
        """The figure is written where requested."""
        output = plot_timings([4.0, 2.1, 1.5], str(tmp_path / "scaling.png"))

        assert (tmp_path / "scaling.png").stat().st_size > 0
        assert output.endswith("scaling.png")

    def test_main(self, timings_file, tmp_path):
        """The command line reads the timings and saves the figure."""
        output = tmp_path / "timings.png"

        status = main([str(timings_file), "--num-runs", "3", "--max-threads", "3",
                       "--output", str(output)])

        assert status == 0
        assert output.exists()
