"""Tabular input/output for localizations, tracks and segments.

Tables are pandas DataFrames written as CSV. Image stacks are read from
NumPy ``.npy``/``.npz`` files.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from spotfit.core.algorithms.changepoint import Segment
from spotfit.core.domain.peaks import LOCALIZATION_COLUMNS, Localization
from spotfit.core.shared.exceptions import DataIOError


def localizations_to_frame(localizations: Iterable[Localization]) -> pd.DataFrame:
    """Convert localizations into a table with one row each."""
    return pd.DataFrame([loc.to_row() for loc in localizations], columns=LOCALIZATION_COLUMNS)


def segments_to_frame(segments: Sequence[Segment], **extra: object) -> pd.DataFrame:
    """Convert segments into a table (``start``, ``stop``, ``mean``, ``chi_squared``).

    Keyword arguments are added as constant columns, e.g. ``trajectory=3``.
    """
    table = pd.DataFrame(
        {
            "start": [s.start for s in segments],
            "stop": [s.stop for s in segments],
            "mean": [s.mean for s in segments],
            "chi_squared": [s.chi_squared for s in segments],
        }
    )
    for name, value in extra.items():
        table.insert(0, name, value)
    return table


def read_table(path: Path, required: Sequence[str] = ()) -> pd.DataFrame:
    """Read a CSV table and check that the required columns are present.

    Raises
    ------
        DataIOError: If the file cannot be parsed or a column is missing
    """
    try:
        table = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        msg = f"Cannot read table {path}: {exc}"
        raise DataIOError(msg) from exc

    missing = [column for column in required if column not in table.columns]
    if missing:
        msg = f"Table {path} is missing required columns: {', '.join(missing)}"
        raise DataIOError(msg)

    if "trajectory" in table.columns:
        table["trajectory"] = table["trajectory"].astype("Int64")
    return table


def write_table(table: pd.DataFrame, path: Path) -> Path:
    """Write a table as CSV, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=False)
    return path


def read_stack(path: Path) -> np.ndarray:
    """Read an image stack of shape (frames, height, width).

    ``.npz`` archives must contain a single array. A 2D image is returned as a
    stack of one frame.

    Raises
    ------
        DataIOError: If the file is not a 2D or 3D array
    """
    try:
        loaded = np.load(path, allow_pickle=False)
    except (OSError, ValueError) as exc:
        msg = f"Cannot read image stack {path}: {exc}"
        raise DataIOError(msg) from exc

    if isinstance(loaded, np.lib.npyio.NpzFile):
        with loaded:
            if len(loaded.files) != 1:
                msg = f"Expected one array in {path}, found {len(loaded.files)}"
                raise DataIOError(msg)
            stack = loaded[loaded.files[0]]
    else:
        stack = loaded

    if stack.ndim == 2:
        stack = stack[np.newaxis]
    if stack.ndim != 3:
        msg = f"Image stack {path} must be 2D or 3D, got shape {stack.shape}"
        raise DataIOError(msg)
    return stack


def write_stack(stack: np.ndarray, path: Path) -> Path:
    """Write an image stack as a ``.npy`` file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    np.save(path, stack)
    return path


__all__ = [
    "localizations_to_frame",
    "read_stack",
    "read_table",
    "segments_to_frame",
    "write_stack",
    "write_table",
]
