"""Pytest fixtures for SpotFit tests."""

import numpy as np
import pandas as pd
import pytest

from spotfit.core.fitting.models import Gaussian2D


def render_spots(shape, spots, baseline=5.0, noise=0.0, seed=42):
    """Render 2D Gaussian spots (x, y, amplitude, sigma) on a flat background."""
    ys, xs = np.mgrid[: shape[0], : shape[1]]
    coordinates = np.column_stack([xs.ravel(), ys.ravel()]).astype(float)
    image = np.full(coordinates.shape[0], baseline)
    model = Gaussian2D()
    for x, y, amplitude, sigma in spots:
        image += model.evaluate(coordinates, np.array([0.0, amplitude, x, y, sigma, sigma]))
    image = image.reshape(shape)
    if noise:
        image += np.random.default_rng(seed).normal(0, noise, shape)
    return image


@pytest.fixture
def single_spot_image():
    """Noise-free spot of amplitude 100, sigma 1.2 at (10, 10) on baseline 5."""
    return render_spots((25, 25), [(10.0, 10.0, 100.0, 1.2)])


@pytest.fixture
def two_spot_image():
    """Two well-separated noisy spots."""
    spots = [(10.0, 12.0, 100.0, 1.2), (24.0, 20.0, 80.0, 1.2)]
    return render_spots((40, 40), spots, noise=1.0), spots


@pytest.fixture
def moving_spot_stack():
    """Stack of 5 frames with one spot drifting by 1.5 px per frame in x."""
    frames = [
        render_spots((32, 32), [(8.0 + 1.5 * i, 16.0, 100.0, 1.2)], noise=1.0, seed=i)
        for i in range(5)
    ]
    return np.stack(frames)


@pytest.fixture
def localization_table():
    """Two particles over three frames, far apart from each other."""
    return pd.DataFrame(
        {
            "frame": [0, 0, 1, 1, 2, 2],
            "x": [0.0, 50.0, 1.0, 50.5, 3.0, 51.0],
            "y": [0.0, 50.0, 0.0, 50.0, 0.0, 50.0],
            "amplitude": [100.0, 80.0, 100.0, 80.0, 40.0, 80.0],
        }
    )


@pytest.fixture
def spot_renderer():
    """Access to ``render_spots`` for tests that build their own images."""
    return render_spots
