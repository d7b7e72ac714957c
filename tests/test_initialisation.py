"""Tests for the parameter and obstacle loaders."""

import logging

import numpy as np
import pytest

from d2q9_bgk.diagnostics import total_density
from d2q9_bgk.exceptions import ConfigurationError, ObstacleFileError, ParameterFileError
from d2q9_bgk.initialisation import initialise, read_obstacles, read_parameters
from d2q9_bgk.parameters import Parameters


class TestReadParameters:
    """Tests for the parameter file loader."""

    def test_reads_values_in_order(self, write_param_file):
        """Seven values map onto the parameters in file order."""
        path = write_param_file(nx=128, ny=64, max_iters=1000, reynolds_dim=128,
                                density=0.1, accel=0.005, omega=1.7)

        params = read_parameters(path)

        assert params == Parameters(nx=128, ny=64, max_iters=1000, reynolds_dim=128,
                                    density=0.1, accel=0.005, omega=1.7)

    def test_any_whitespace_separates(self, write_param_file):
        """Values may share a line."""
        path = write_param_file(text="4 4 10 4\n0.1 0.005\n1.7")

        assert read_parameters(path).omega == pytest.approx(1.7)

    def test_parameters_are_immutable(self, write_param_file):
        """Loaded parameters cannot be modified."""
        params = read_parameters(write_param_file())

        with pytest.raises(AttributeError):
            params.nx = 8

    def test_missing_file(self, tmp_path):
        """A missing file is a configuration error naming the path."""
        path = tmp_path / "absent.params"

        with pytest.raises(ParameterFileError, match="could not open input parameter file"):
            read_parameters(path)

    def test_missing_value(self, write_param_file):
        """A truncated file names the first missing value."""
        path = write_param_file(text="4\n4\n10\n4\n0.1\n0.005\n")

        with pytest.raises(ParameterFileError, match="could not read param file: omega"):
            read_parameters(path)

    def test_unparsable_value(self, write_param_file):
        """An integer field holding a float is rejected."""
        path = write_param_file(text="4.5\n4\n10\n4\n0.1\n0.005\n1.7\n")

        with pytest.raises(ParameterFileError, match="could not read param file: nx"):
            read_parameters(path)

    def test_non_positive_grid(self, write_param_file):
        """Grid dimensions must be positive."""
        with pytest.raises(ParameterFileError, match="positive"):
            read_parameters(write_param_file(ny=0))

    def test_negative_iterations(self, write_param_file):
        """maxIters cannot be negative."""
        with pytest.raises(ParameterFileError, match="maxIters"):
            read_parameters(write_param_file(max_iters=-1))

    def test_unstable_omega_warns(self, write_param_file, caplog):
        """omega outside (0, 2] loads but logs a warning."""
        with caplog.at_level(logging.WARNING, logger="d2q9_bgk.initialisation"):
            params = read_parameters(write_param_file(omega=2.5))

        assert params.omega == pytest.approx(2.5)
        assert "outside (0, 2]" in caplog.text

    def test_error_is_configuration_error(self, write_param_file):
        """Loader errors share the configuration error base class."""
        with pytest.raises(ConfigurationError) as excinfo:
            read_parameters(write_param_file(text=""))

        assert "Error at file" in str(excinfo.value)


class TestReadObstacles:
    """Tests for the obstacle file loader."""

    def test_marks_listed_cells(self, write_obstacle_file):
        """Listed cells are blocked at x + y*nx, all others are fluid."""
        path = write_obstacle_file([(4, 2), (0, 1)])

        obstacles = read_obstacles(path, 5, 3)

        assert obstacles.shape == (15,)
        assert np.flatnonzero(obstacles).tolist() == [5, 14]

    def test_empty_file(self, write_obstacle_file):
        """An empty obstacle file leaves the whole grid fluid."""
        obstacles = read_obstacles(write_obstacle_file(), 4, 4)

        assert not obstacles.any()

    def test_blank_lines_ignored(self, write_obstacle_file):
        """Blank lines between entries are skipped."""
        path = write_obstacle_file(text="1 1 1\n\n2 2 1\n")

        assert np.count_nonzero(read_obstacles(path, 4, 4)) == 2

    def test_missing_file(self, tmp_path):
        """A missing obstacle file is a configuration error."""
        with pytest.raises(ObstacleFileError, match="could not open input obstacles file"):
            read_obstacles(tmp_path / "absent.dat", 4, 4)

    @pytest.mark.parametrize("text, message", [
        ("1 1\n", "expected 3 values per line"),
        ("1 1 1 1\n", "expected 3 values per line"),
        ("a 1 1\n", "expected 3 values per line"),
        ("4 1 1\n", "obstacle x-coord out of range"),
        ("-1 1 1\n", "obstacle x-coord out of range"),
        ("1 3 1\n", "obstacle y-coord out of range"),
        ("1 1 0\n", "obstacle blocked value should be 1"),
    ])
    def test_malformed_lines(self, write_obstacle_file, text, message):
        """Malformed or out-of-range entries are fatal."""
        with pytest.raises(ObstacleFileError, match=message):
            read_obstacles(write_obstacle_file(text=text), 4, 3)

    def test_error_reports_line(self, write_obstacle_file):
        """The error names the offending line of the file."""
        path = write_obstacle_file(text="0 0 1\n1 1 1\n9 9 1\n")

        with pytest.raises(ObstacleFileError) as excinfo:
            read_obstacles(path, 4, 4)

        assert excinfo.value.line == 3
        assert str(excinfo.value).startswith(f"Error at line 3 of file {path}:")


class TestInitialise:
    """Tests for building the initial simulation state."""

    def test_initial_state(self, write_param_file, write_obstacle_file):
        """Parameters, obstacles and equilibrium densities are all in place."""
        params, lattice, av_vels = initialise(
            write_param_file(nx=6, ny=4, max_iters=7, density=0.1),
            write_obstacle_file([(1, 1), (2, 1)]),
        )

        assert (lattice.nx, lattice.ny) == (6, 4)
        assert lattice.num_fluid_cells == 22
        assert total_density(lattice.cells) == pytest.approx(0.1 * 24)
        assert av_vels.shape == (7,)
        assert not av_vels.any()

    def test_obstacle_error_propagates(self, write_param_file, write_obstacle_file):
        """Obstacle errors surface from initialise unchanged."""
        with pytest.raises(ObstacleFileError):
            initialise(write_param_file(nx=4, ny=4), write_obstacle_file([(5, 0)]))
