"""Input/output: configuration files, tables and image stacks."""

from spotfit.io.config import generate_default_config, load_config, save_config
from spotfit.io.tables import (
    localizations_to_frame,
    read_stack,
    read_table,
    segments_to_frame,
    write_stack,
    write_table,
)

__all__ = [
    "generate_default_config",
    "load_config",
    "localizations_to_frame",
    "read_stack",
    "read_table",
    "save_config",
    "segments_to_frame",
    "write_stack",
    "write_table",
]
