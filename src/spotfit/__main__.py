"""Allow running SpotFit with ``python -m spotfit``."""

from spotfit.cli.app import app

app()
