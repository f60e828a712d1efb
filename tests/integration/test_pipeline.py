"""End-to-end localization, tracking and step fitting on synthetic data."""

import numpy as np
import pytest

from spotfit.core.domain.config import SpotFitConfig
from spotfit.io.tables import read_table, write_table
from spotfit.services import LocalizeService, StepService, TrackService


@pytest.fixture
def bleaching_stack(spot_renderer):
    """Two drifting spots; the slower one bleaches from 120 to 70 at frame 6."""
    frames = []
    for i in range(12):
        amplitude = 120.0 if i < 6 else 70.0
        spots = [(10.0 + 0.3 * i, 12.0, amplitude, 1.3), (30.0, 20.0 + 0.5 * i, 90.0, 1.3)]
        frames.append(spot_renderer((48, 48), spots, noise=1.0, seed=i))
    return np.stack(frames)


class TestPipeline:
    """Full pipeline through the service layer."""

    def test_localize_track_and_fit_steps(self, bleaching_stack, tmp_path):
        """Spots are localized, linked into two tracks and the bleaching step found."""
        config = SpotFitConfig.model_validate({"output": {"n_workers": 3}})

        localized = LocalizeService().run(bleaching_stack, config)
        assert localized.found_peaks == 24
        assert localized.fitted_peaks == 24

        # Round trip through CSV as the command line does
        path = write_table(localized.localizations, tmp_path / "localizations.csv")
        table = read_table(path, ("frame", "x", "y"))

        tracked = TrackService().link(table, config.linking)
        assert tracked.n_trajectories == 2
        assert tracked.tracks["trajectory_length"].tolist() == [12] * 24

        # The slower spot has the shortest first link and gets id 0
        steps_config = config.steps.model_copy(update={"noise_sigma": 3.0, "segments": 2})
        steps = StepService().fit_trajectories(tracked.tracks, "amplitude", steps_config)
        bleaching = steps[steps["trajectory"] == 0]
        assert bleaching["start"].tolist() == [0, 6]
        np.testing.assert_allclose(bleaching["mean"], [120.0, 70.0], atol=3.0)

    def test_msd_of_linear_drift(self, bleaching_stack):
        """Drift of 0.5 px per frame gives an MSD growing as (0.5 dt)²."""
        localized = LocalizeService().run(bleaching_stack)
        tracks = TrackService().link(localized.localizations).tracks
        msd = TrackService().msd(tracks)
        drifting = msd[(msd["trajectory"] == 1) & (msd["dt"] <= 4)]
        assert drifting["dt"].tolist() == [1.0, 2.0, 3.0, 4.0]
        expected = (0.5 * drifting["dt"]) ** 2
        np.testing.assert_allclose(drifting["msd"], expected, rtol=0.15, atol=0.05)
