"""Greedy frame-to-frame particle linking.

Localizations are linked into trajectories frame by frame. For every source
frame, all candidate links to the next ``look_ahead`` frames within
``max_step`` are sorted by (frame gap, squared distance) and accepted greedily.
A localization has at most one successor and one predecessor, so trajectories
never merge or branch.

This is a heuristic, not a globally optimal assignment: an early, slightly
worse link can block a better one considered later, and equally good links
competing for the same endpoint are resolved by enumeration order.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist

from spotfit.core.domain.config import LinkingConfig
from spotfit.core.shared.exceptions import DataIOError

REQUIRED_COLUMNS = ("frame", "x", "y")

TRACK_COLUMNS = ("trajectory", "dx", "dy", "step_size", "displacement_sq", "trajectory_length")


@dataclass(frozen=True)
class Link:
    """Candidate link between two table rows (positional indices)."""

    gap: int
    distance_sq: float
    source: int
    target: int
    dx: float
    dy: float


def _check_columns(localizations: pd.DataFrame) -> None:
    missing = [column for column in REQUIRED_COLUMNS if column not in localizations.columns]
    if missing:
        msg = f"Localization table is missing required columns: {', '.join(missing)}"
        raise DataIOError(msg)


def candidate_links(
    frames: np.ndarray,
    xy: np.ndarray,
    source_rows: np.ndarray,
    config: LinkingConfig,
) -> list[Link]:
    """All links from ``source_rows`` (one frame) to later rows within reach.

    Args:
        frames: Frame index of every row
        xy: (n, 2) positions of every row
        source_rows: Positional indices of the rows of one frame
        config: Linking configuration

    Returns
    -------
        Links sorted by frame gap, then squared distance (stable)
    """
    frame = frames[source_rows[0]]
    gaps = frames - frame
    target_rows = np.flatnonzero((gaps >= 1) & (gaps <= config.look_ahead))
    if target_rows.size == 0:
        return []

    distance_sq = cdist(xy[source_rows], xy[target_rows], metric="sqeuclidean")
    limit = config.max_step * config.max_step
    links = []
    for i, j in zip(*np.nonzero(distance_sq < limit), strict=True):
        source, target = int(source_rows[i]), int(target_rows[j])
        links.append(
            Link(
                gap=int(gaps[target]),
                distance_sq=float(distance_sq[i, j]),
                source=source,
                target=target,
                dx=float(xy[target, 0] - xy[source, 0]),
                dy=float(xy[target, 1] - xy[source, 1]),
            )
        )
    links.sort(key=lambda link: (link.gap, link.distance_sq))
    return links


def link_particles(
    localizations: pd.DataFrame, config: LinkingConfig | None = None
) -> pd.DataFrame:
    """Assign a trajectory id to every localization.

    Args:
        localizations: Table with at least ``frame``, ``x`` and ``y`` columns
        config: Linking configuration

    Returns
    -------
        Copy of the table (original index kept) with the added columns
        ``trajectory`` (nullable integer, <NA> when unlinked), ``dx``, ``dy``,
        ``step_size``, ``displacement_sq`` (step from the predecessor, 0 for
        the first point) and ``trajectory_length``; sorted by trajectory then
        frame. Unlinked rows are dropped when ``config.discard_unlinked``.
    """
    config = config or LinkingConfig()
    _check_columns(localizations)

    table = localizations.sort_values("frame", kind="stable")
    n = len(table)
    frames = table["frame"].to_numpy(dtype=np.int64)
    xy = table[["x", "y"]].to_numpy(dtype=float)

    trajectory = np.full(n, -1, dtype=np.int64)
    steps = np.zeros((n, 4))
    has_successor = np.zeros(n, dtype=bool)
    has_predecessor = np.zeros(n, dtype=bool)
    n_trajectories = 0

    boundaries = np.flatnonzero(np.diff(frames)) + 1
    frame_groups = np.split(np.arange(n), boundaries) if n else []
    for source_rows in frame_groups:
        for link in candidate_links(frames, xy, source_rows, config):
            if has_successor[link.source] or has_predecessor[link.target]:
                continue
            if trajectory[link.source] < 0:
                trajectory[link.source] = n_trajectories
                n_trajectories += 1
            trajectory[link.target] = trajectory[link.source]
            steps[link.target] = (
                link.dx,
                link.dy,
                np.sqrt(link.distance_sq),
                link.distance_sq,
            )
            has_successor[link.source] = True
            has_predecessor[link.target] = True

    linked = trajectory >= 0
    lengths = np.ones(n, dtype=np.int64)
    lengths[linked] = np.bincount(trajectory[linked])[trajectory[linked]]

    result = table.copy()
    result["trajectory"] = pd.Series(trajectory, index=table.index, dtype="Int64").mask(~linked)
    result["dx"] = steps[:, 0]
    result["dy"] = steps[:, 1]
    result["step_size"] = steps[:, 2]
    result["displacement_sq"] = steps[:, 3]
    result["trajectory_length"] = lengths

    if config.discard_unlinked:
        result = result[linked]

    return result.sort_values(["trajectory", "frame"], kind="stable", na_position="last")


def trajectory_ids(tracks: pd.DataFrame) -> list[int]:
    """Sorted ids of the trajectories present in a linked table."""
    return sorted(int(t) for t in tracks["trajectory"].dropna().unique())


__all__ = [
    "REQUIRED_COLUMNS",
    "TRACK_COLUMNS",
    "Link",
    "candidate_links",
    "link_particles",
    "trajectory_ids",
]
