"""Test the discoidal averaging filter."""

import numpy as np
import pytest

from spotfit.core.algorithms.filters import (
    DiscoidalAveragingFilter,
    disc_kernels,
    discoidal_average,
)


class TestDiscKernels:
    """Tests for the filter footprints."""

    def test_inner_disc(self):
        """Radius-1 disc contains the 3x3 neighbourhood (rounded distances)."""
        inner, _ = disc_kernels(1, 3)
        assert inner.shape == (7, 7)
        assert inner.sum() == 9
        assert inner[3, 3] == 1

    def test_outer_ring_excludes_center(self):
        """Ring pixels sit at rounded distance equal to the outer radius."""
        _, outer = disc_kernels(1, 3)
        assert outer[3, 3] == 0
        assert outer[3, 0] == 1
        assert outer[0, 3] == 1


class TestDiscoidalAverage:
    """Tests for discoidal_average."""

    def test_flat_image_gives_zero(self):
        """A constant background is removed everywhere, borders included."""
        image = np.full((16, 16), 7.0)
        np.testing.assert_allclose(discoidal_average(image, 1, 3), 0.0, atol=1e-12)

    def test_spot_response_is_maximal_at_spot(self, single_spot_image):
        """The filtered maximum stays on the spot."""
        filtered = discoidal_average(single_spot_image, 1, 3)
        assert np.unravel_index(np.argmax(filtered), filtered.shape) == (10, 10)

    def test_non_negative_and_input_unchanged(self, two_spot_image):
        """Output is clamped at zero and the input is not modified."""
        image, _ = two_spot_image
        before = image.copy()
        filtered = discoidal_average(image, 1, 3)
        assert filtered.min() >= 0
        np.testing.assert_array_equal(image, before)


class TestDiscoidalAveragingFilter:
    """Tests for the callable filter object."""

    def test_callable(self, single_spot_image):
        """Calling the filter applies discoidal_average."""
        transform = DiscoidalAveragingFilter(1, 3)
        np.testing.assert_array_equal(
            transform(single_spot_image), discoidal_average(single_spot_image, 1, 3)
        )

    @pytest.mark.parametrize(("inner", "outer"), [(3, 3), (4, 2), (-1, 3)])
    def test_invalid_radii(self, inner, outer):
        """Radii must satisfy 0 <= inner < outer."""
        with pytest.raises(ValueError, match="radii"):
            DiscoidalAveragingFilter(inner, outer)
