"""Test 2D Gaussian peak fitting."""

import numpy as np
import pytest

from spotfit.core.algorithms.peak_fitting import (
    fit_peak,
    fit_peaks,
    initial_guess,
    is_valid_fit,
    localize_frame,
    saturation_level,
    to_localization,
    window_samples,
)
from spotfit.core.constants import SIGMA_TO_FWHM
from spotfit.core.domain.config import DetectionConfig, FitConfig, MaxErrors
from spotfit.core.domain.peaks import Peak, Roi


class TestFitPeak:
    """Tests for fit_peak."""

    def test_recovers_noise_free_spot(self, single_spot_image):
        """Parameters of a synthetic spot are recovered."""
        result = fit_peak(single_spot_image, Peak(10, 10))
        baseline, amplitude, x, y, sigma_x, sigma_y = result.parameters
        assert baseline == pytest.approx(5.0, abs=1e-4)
        assert amplitude == pytest.approx(100.0, abs=1e-4)
        assert x == pytest.approx(10.0, abs=1e-4)
        assert y == pytest.approx(10.0, abs=1e-4)
        assert abs(sigma_x) == pytest.approx(1.2, abs=1e-4)
        assert abs(sigma_y) == pytest.approx(1.2, abs=1e-4)
        assert result.r_squared >= 0.999

    def test_off_center_spot(self, spot_renderer):
        """Sub-pixel positions are recovered from a pixel seed."""
        image = spot_renderer((21, 21), [(9.6, 10.3, 100.0, 1.5)])
        result = fit_peak(image, Peak(10, 10))
        np.testing.assert_allclose(result.parameters[2:4], [9.6, 10.3], atol=1e-4)

    def test_roi_window(self, single_spot_image):
        """A ROI can be used as the fit window."""
        result = fit_peak(single_spot_image, Roi(6, 6, 9, 9))
        assert result.n_observations == 81
        np.testing.assert_allclose(result.parameters[2:4], [10.0, 10.0], atol=1e-4)

    def test_window_is_clipped(self, single_spot_image):
        """A peak near the border uses only in-image samples."""
        result = fit_peak(single_spot_image, Peak(1, 1))
        assert result.n_observations == 36

    def test_empty_window_gives_nan(self, single_spot_image):
        """A window outside the image produces an all-NaN result."""
        result = fit_peak(single_spot_image, Roi(50, 50, 5, 5))
        assert np.all(np.isnan(result.parameters))
        assert not is_valid_fit(result, FitConfig())

    def test_negative_sigma_seed(self, single_spot_image):
        """Sigmas may converge negative; localizations store magnitudes."""
        seed = [np.nan, np.nan, np.nan, np.nan, -1.0, -1.0]
        result = fit_peak(single_spot_image, Peak(10, 10), seed)
        localization = to_localization(result, frame=3)
        assert localization.frame == 3
        assert localization.parameters[4] == pytest.approx(1.2, abs=1e-3)
        assert localization.parameters[5] == pytest.approx(1.2, abs=1e-3)
        assert localization.fwhm == pytest.approx(1.2 * SIGMA_TO_FWHM, abs=1e-2)


class TestInitialGuess:
    """Tests for the starting point of the fit."""

    def test_estimates_from_window(self, single_spot_image):
        """Baseline, amplitude and position come from the window extremes."""
        coordinates, values = window_samples(single_spot_image, Roi.around(10, 10, 4))
        guess = initial_guess(coordinates, values, single_spot_image, np.full(6, np.nan))
        assert guess[0] == pytest.approx(values.min())
        assert guess[1] == pytest.approx(values.max() - values.min())
        np.testing.assert_array_equal(guess[2:], [10.0, 10.0, 1.0, 1.0])

    def test_seeded_position_sets_amplitude(self, single_spot_image):
        """With a seeded position the amplitude is read at that pixel."""
        coordinates, values = window_samples(single_spot_image, Roi.around(10, 10, 4))
        seed = np.array([np.nan, np.nan, 9.0, 10.0, np.nan, 2.0])
        guess = initial_guess(coordinates, values, single_spot_image, seed)
        assert guess[1] == pytest.approx(single_spot_image[10, 9] - values.min())
        assert guess[2:4].tolist() == [9.0, 10.0]
        assert guess[4] == 1.0
        assert guess[5] == 2.0


class TestSaturation:
    """Tests for saturated sample exclusion."""

    def test_default_levels(self):
        """Integer images saturate at the dtype maximum, float images never."""
        assert saturation_level(np.zeros((2, 2), dtype=np.uint16), FitConfig()) == 65535
        assert saturation_level(np.zeros((2, 2)), FitConfig()) == np.inf

    def test_configured_level(self):
        """The configured value overrides the default."""
        config = FitConfig(saturation_value=200)
        assert saturation_level(np.zeros((2, 2), dtype=np.uint8), config) == 200

    def test_saturated_samples_excluded(self):
        """Samples at the saturation level are left out of the window."""
        image = np.full((5, 5), 10, dtype=np.uint8)
        image[2, 2] = 255
        coordinates, values = window_samples(image, Roi.full(image.shape), 255)
        assert values.size == 24
        assert [2.0, 2.0] not in coordinates.tolist()


class TestValidation:
    """Tests for fit validation and batch fitting."""

    def test_error_limits(self, two_spot_image):
        """Fits whose errors exceed the limits are rejected."""
        image, _ = two_spot_image
        result = fit_peak(image, Peak(10, 12))
        assert is_valid_fit(result, FitConfig())
        strict = FitConfig(max_errors=MaxErrors(x=0.0))
        assert not is_valid_fit(result, strict)

    def test_fit_peaks_keeps_valid(self, two_spot_image):
        """Invalid fits are dropped silently."""
        image, _ = two_spot_image
        peaks = [Peak(10, 12, 4), Peak(24, 20, 4), Peak(60, 60, 4)]
        localizations = fit_peaks(image, peaks)
        assert len(localizations) == 2
        assert all(loc.frame == 4 for loc in localizations)
        assert localizations[0].x == pytest.approx(10.0, abs=0.1)

    def test_localize_frame(self, two_spot_image):
        """Detect-then-fit returns localizations and the detected count."""
        image, spots = two_spot_image
        localizations, n_found = localize_frame(image, DetectionConfig(), FitConfig(), frame=2)
        assert n_found == 2
        assert len(localizations) == 2
        for loc, (x, y, _, _) in zip(localizations, spots, strict=True):
            assert loc.frame == 2
            assert loc.x == pytest.approx(x, abs=0.1)
            assert loc.y == pytest.approx(y, abs=0.1)
