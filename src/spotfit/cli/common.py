"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

from spotfit.core.domain.config import SpotFitConfig
from spotfit.io.config import load_config


def resolve_config(path: Path | None, **sections: dict[str, object]) -> SpotFitConfig:
    """Load a configuration file (or defaults) and apply command-line overrides.

    Each keyword names a config section and maps option names to values;
    options left at None are not overridden. The merged configuration is
    validated again so overrides obey the same rules as the file.

    Example:
        >>> resolve_config(None, linking={"max_step": 5.0, "look_ahead": None})
    """
    config = load_config(path) if path is not None else SpotFitConfig()

    data = config.model_dump()
    changed = False
    for section, values in sections.items():
        updates = {key: value for key, value in values.items() if value is not None}
        if updates:
            data[section].update(updates)
            changed = True

    return SpotFitConfig.model_validate(data) if changed else config


__all__ = ["resolve_config"]
