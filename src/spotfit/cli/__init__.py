"""Command-line interface for SpotFit."""

from spotfit.cli.app import app

__all__ = ["app"]
