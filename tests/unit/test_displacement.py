"""Test square and mean square displacements."""

import numpy as np
import pandas as pd
import pytest

from spotfit.core.algorithms.displacement import (
    fit_diffusion_coefficients,
    mean_square_displacement,
    square_displacements,
    step_size_distribution,
    step_sizes,
)
from spotfit.core.shared.exceptions import ConfigError, DataIOError


@pytest.fixture
def tracks():
    """One trajectory moving along x, one single-point trajectory."""
    return pd.DataFrame(
        {
            "trajectory": pd.array([0, 0, 0, 1, pd.NA], dtype="Int64"),
            "frame": [0, 1, 2, 0, 3],
            "x": [0.0, 1.0, 3.0, 10.0, 20.0],
            "y": [0.0, 0.0, 0.0, 10.0, 20.0],
        }
    )


class TestSquareDisplacements:
    """Tests for square_displacements."""

    def test_all_pairs(self, tracks):
        """Every ordered pair of a trajectory contributes once."""
        sd = square_displacements(tracks)
        assert sd["trajectory"].tolist() == [0, 0, 0]
        assert sorted(zip(sd["dt"], sd["sd"], strict=True)) == [(1.0, 1.0), (1.0, 4.0), (2.0, 9.0)]

    def test_physical_units(self, tracks):
        """Pixel size and time interval scale the output."""
        sd = square_displacements(tracks, pixel_size=0.5, time_interval=0.1)
        assert sorted(sd["sd"]) == pytest.approx([0.25, 1.0, 2.25])
        assert sorted(sd["dt"]) == pytest.approx([0.1, 0.1, 0.2])

    def test_missing_columns(self):
        """Tables without trajectories are rejected."""
        with pytest.raises(DataIOError, match="trajectory"):
            square_displacements(pd.DataFrame({"frame": [0], "x": [0.0], "y": [0.0]}))


class TestMeanSquareDisplacement:
    """Tests for mean_square_displacement."""

    def test_per_lag_statistics(self, tracks):
        """Mean, population std and count per lag."""
        msd = mean_square_displacement(tracks)
        assert msd["dt"].tolist() == [1.0, 2.0]
        assert msd["msd"].tolist() == pytest.approx([2.5, 9.0])
        assert msd["std"].tolist() == pytest.approx([1.5, 0.0])
        assert msd["n"].tolist() == [2, 1]

    def test_min_points(self, tracks):
        """Lags with too few displacements are dropped."""
        msd = mean_square_displacement(tracks, min_points=2)
        assert msd["dt"].tolist() == [1.0]

    def test_average(self):
        """Pooled MSD is reported as trajectory -1."""
        data = pd.DataFrame(
            {
                "trajectory": [0, 0, 1, 1],
                "frame": [0, 1, 0, 1],
                "x": [0.0, 1.0, 5.0, 8.0],
                "y": [0.0, 0.0, 0.0, 0.0],
            }
        )
        msd = mean_square_displacement(data, average=True)
        assert msd["trajectory"].tolist() == [-1]
        assert msd["msd"].tolist() == pytest.approx([5.0])


def msd_table(dt, msd, std, trajectory=0):
    return pd.DataFrame(
        {
            "trajectory": trajectory,
            "dt": np.asarray(dt, dtype=float),
            "msd": np.asarray(msd, dtype=float),
            "std": np.asarray(std, dtype=float),
            "n": 10,
        }
    )


def brownian_tracks(n_steps=5000, sigma=1.0, seed=42):
    """One long 2D random walk with per-axis step deviation ``sigma``."""
    steps = np.random.default_rng(seed).normal(0.0, sigma, (n_steps, 2))
    positions = np.vstack([[0.0, 0.0], np.cumsum(steps, axis=0)])
    return pd.DataFrame(
        {
            "trajectory": 0,
            "frame": np.arange(n_steps + 1),
            "x": positions[:, 0],
            "y": positions[:, 1],
        }
    )


class TestFitDiffusionCoefficients:
    """Tests for fit_diffusion_coefficients."""

    def test_recovers_linear_msd(self):
        """D is recovered from a noisy free-diffusion MSD curve."""
        dt = np.arange(1, 11) * 0.1
        wobble = 1 + 0.02 * (-1) ** np.arange(10)
        msd = 4 * 0.25 * dt * wobble
        table = fit_diffusion_coefficients(msd_table(dt, msd, 0.05 * msd))

        assert table["trajectory"].tolist() == [0]
        assert table.loc[0, "D"] == pytest.approx(0.25, rel=0.03)
        assert table.loc[0, "D_error"] > 0
        assert table.loc[0, "n_lags"] == 10

    def test_dimensionality(self):
        """The slope factor divides the fitted coefficient."""
        dt = np.array([1.0, 2.0, 3.0])
        table = fit_diffusion_coefficients(msd_table(dt, 2.0 * dt, [0.1, 0.1, 0.1]), 2.0)
        assert table.loc[0, "D"] == pytest.approx(1.0)

    def test_lags_are_weighted(self):
        """A lag with a huge spread barely influences the fit."""
        table = fit_diffusion_coefficients(
            msd_table([1.0, 2.0, 3.0], [4.0, 8.0, 100.0], [0.1, 0.1, 1000.0])
        )
        assert table.loc[0, "D"] == pytest.approx(1.0, abs=1e-3)

    def test_max_fit_time(self):
        """Lags beyond max_fit_time are left out."""
        dt = np.array([1.0, 2.0, 3.0, 4.0])
        msd = np.array([4.0, 8.0, 9.0, 9.5])
        table = fit_diffusion_coefficients(msd_table(dt, msd, [0.1] * 4), max_fit_time=2.0)
        assert table.loc[0, "n_lags"] == 2
        assert table.loc[0, "D"] == pytest.approx(1.0)

    def test_one_row_per_trajectory(self):
        """Every trajectory gets its own coefficient."""
        dt = np.array([1.0, 2.0])
        table = fit_diffusion_coefficients(
            pd.concat(
                [
                    msd_table(dt, 4 * dt, [0.1, 0.1], trajectory=0),
                    msd_table(dt, 8 * dt, [0.1, 0.1], trajectory=3),
                ]
            )
        )
        assert table["trajectory"].tolist() == [0, 3]
        assert table["D"].tolist() == pytest.approx([1.0, 2.0])

    def test_no_lag_within_limit(self):
        """Trajectories without lags to fit are skipped."""
        table = fit_diffusion_coefficients(
            msd_table([5.0, 6.0], [1.0, 2.0], [0.1, 0.1]), max_fit_time=1.0
        )
        assert table.empty
        assert list(table.columns) == ["trajectory", "D", "D_error", "r_squared", "n_lags"]

    def test_from_tracks(self, tracks):
        """MSD tables feed straight into the fit."""
        table = fit_diffusion_coefficients(mean_square_displacement(tracks))
        assert table["trajectory"].tolist() == [0]
        assert np.isfinite(table.loc[0, "D"])


class TestStepSizes:
    """Tests for step_sizes and step_size_distribution."""

    def test_single_frame_steps(self, tracks):
        """Only steps between consecutive frames of a trajectory count."""
        np.testing.assert_allclose(step_sizes(tracks), [1.0, 2.0])
        np.testing.assert_allclose(step_sizes(tracks, pixel_size=0.1), [0.1, 0.2])

    def test_gaps_are_skipped(self):
        """A step across a missing frame is ignored."""
        data = pd.DataFrame(
            {"trajectory": [0, 0, 0], "frame": [0, 1, 3], "x": [0.0, 1.0, 5.0], "y": 0.0}
        )
        np.testing.assert_allclose(step_sizes(data), [1.0])

    def test_histogram_is_normalized(self):
        """Probabilities integrate to one over the bins."""
        result = step_size_distribution(brownian_tracks(500), bin_width=0.2)
        assert result.n_steps == 500
        assert result.histogram["probability"].sum() * 0.2 == pytest.approx(1.0)
        np.testing.assert_allclose(np.diff(result.histogram["step_size"]), 0.2)
        assert result.histogram["step_size"].iloc[0] == pytest.approx(0.1)

    def test_recovers_diffusion(self):
        """The fitted mean square step of a random walk is 2 sigma²."""
        result = step_size_distribution(brownian_tracks(), time_interval=0.5, bin_width=0.1)
        assert result.msd == pytest.approx(2.0, rel=0.05)
        assert result.fitted_msd == pytest.approx(2.0, rel=0.1)
        assert result.diffusion_coefficient == pytest.approx(result.fitted_msd / 2.0)
        assert result.diffusion_error == pytest.approx(result.fitted_msd_error / 2.0)
        assert result.density(np.array([0.0]))[0] == 0.0

    def test_min_step_size(self):
        """Bins centered below the minimum are dropped."""
        result = step_size_distribution(brownian_tracks(500), bin_width=0.2, min_step_size=0.5)
        assert result.histogram["step_size"].min() >= 0.5

    def test_default_bin_width(self):
        """Bins default to a tenth of the pixel size."""
        result = step_size_distribution(brownian_tracks(200), pixel_size=2.0)
        np.testing.assert_allclose(np.diff(result.histogram["step_size"]), 0.2)

    def test_no_steps(self):
        """Without linked steps the result is empty and D is NaN."""
        data = pd.DataFrame(
            {
                "trajectory": pd.array([pd.NA], dtype="Int64"),
                "frame": [0],
                "x": [0.0],
                "y": [0.0],
            }
        )
        result = step_size_distribution(data)
        assert result.n_steps == 0
        assert result.histogram.empty
        assert np.isnan(result.diffusion_coefficient)

    def test_invalid_bin_width(self, tracks):
        """Bin widths must be positive."""
        with pytest.raises(ConfigError, match="bin_width"):
            step_size_distribution(tracks, bin_width=0.0)
