"""Configuration file loading and saving."""

import tomllib
from pathlib import Path

import tomli_w

from spotfit.core.domain.config import SpotFitConfig


def load_config(path: Path) -> SpotFitConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        SpotFitConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the configuration is invalid.
    """
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as f:
        data = tomllib.load(f)

    return SpotFitConfig.model_validate(data)


def save_config(config: SpotFitConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: Configuration object to save.
        path: Path where to save the TOML file.
    """
    data = config.model_dump(mode="json", exclude_none=True)

    with path.open("wb") as f:
        tomli_w.dump(data, f)


def generate_default_config() -> str:
    """Generate a default configuration file as a string.

    Returns:
        str: TOML-formatted default configuration.
    """
    return """# SpotFit Configuration File
# Generated automatically - edit as needed

[detection]
use_filter = true       # discoidal averaging before thresholding
inner_radius = 1
outer_radius = 3
threshold_sigma = 6.0   # threshold = mean + threshold_sigma * std
# threshold_value = 100.0  # Uncomment to use a fixed threshold
min_separation = 8

[fitting]
fit_radius = 4
max_iterations = 100
precision = 1e-6
damping = 1e-3
# saturation_value = 65535.0

[fitting.max_errors]
baseline = 5000.0
amplitude = 5000.0
x = 1.0
y = 1.0
sigma_x = 1.0
sigma_y = 1.0

[linking]
look_ahead = 1          # frames searched for blinking particles
max_step = 8.0          # pixels
discard_unlinked = true

[steps]
noise_sigma = 1.0
# segments = 3  # Uncomment for a fixed number of segments (automatic otherwise)

[output]
directory = "Results"
# n_workers = 4
"""


__all__ = ["generate_default_config", "load_config", "save_config"]
