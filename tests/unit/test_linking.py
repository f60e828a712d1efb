"""Test particle linking."""

import pandas as pd
import pytest

from spotfit.core.algorithms.linking import link_particles, trajectory_ids
from spotfit.core.domain.config import LinkingConfig
from spotfit.core.shared.exceptions import DataIOError


def table(frames, xs, ys):
    return pd.DataFrame({"frame": frames, "x": xs, "y": ys})


class TestLinkParticles:
    """Tests for link_particles."""

    def test_links_within_max_step(self):
        """Two localizations 3 px apart are linked when max_step is 5."""
        tracks = link_particles(table([0, 1], [0.0, 3.0], [0.0, 0.0]), LinkingConfig(max_step=5))
        assert tracks["trajectory"].tolist() == [0, 0]
        assert tracks["dx"].tolist() == [0.0, 3.0]
        assert tracks["step_size"].tolist() == [0.0, 3.0]
        assert tracks["displacement_sq"].tolist() == [0.0, 9.0]
        assert tracks["trajectory_length"].tolist() == [2, 2]

    def test_not_linked_beyond_max_step(self):
        """Localizations further apart than max_step stay unlinked."""
        config = LinkingConfig(max_step=2, discard_unlinked=False)
        tracks = link_particles(table([0, 1], [0.0, 3.0], [0.0, 0.0]), config)
        assert tracks["trajectory"].isna().all()
        assert tracks["trajectory_length"].tolist() == [1, 1]

    def test_discard_unlinked(self):
        """Unlinked rows are dropped by default."""
        tracks = link_particles(table([0, 1], [0.0, 3.0], [0.0, 0.0]), LinkingConfig(max_step=2))
        assert tracks.empty

    def test_max_step_is_exclusive(self):
        """A step exactly equal to max_step is not linked."""
        tracks = link_particles(table([0, 1], [0.0, 3.0], [0.0, 0.0]), LinkingConfig(max_step=3))
        assert tracks.empty

    def test_two_particles(self, localization_table):
        """Two distant particles give two trajectories of three points."""
        tracks = link_particles(localization_table)
        assert trajectory_ids(tracks) == [0, 1]
        assert tracks["trajectory_length"].tolist() == [3] * 6
        # The shortest first link (0.5 px) is accepted first
        first = tracks[tracks["trajectory"] == 0]
        assert first["x"].tolist() == [50.0, 50.5, 51.0]
        assert first["frame"].tolist() == [0, 1, 2]

    def test_index_preserved(self, localization_table):
        """Rows keep their original index."""
        tracks = link_particles(localization_table)
        pd.testing.assert_series_equal(
            tracks["x"], localization_table.loc[tracks.index, "x"], check_names=True
        )

    def test_nearest_wins(self):
        """Of two candidates the closer target is linked."""
        tracks = link_particles(
            table([0, 1, 1], [0.0, 2.0, 1.0], [0.0, 0.0, 0.0]),
            LinkingConfig(discard_unlinked=False),
        )
        assert tracks.loc[2, "trajectory"] == 0
        assert pd.isna(tracks.loc[1, "trajectory"])

    def test_no_merging(self):
        """A target is linked to at most one predecessor."""
        tracks = link_particles(
            table([0, 0, 1], [0.0, 2.0, 1.0], [0.0, 0.0, 0.0]),
            LinkingConfig(discard_unlinked=False),
        )
        linked = tracks["trajectory"].dropna()
        assert len(linked) == 2
        assert linked.nunique() == 1

    def test_look_ahead_bridges_gap(self):
        """With look_ahead 2 a particle missing for one frame stays linked."""
        data = table([0, 2], [0.0, 1.0], [0.0, 0.0])
        assert link_particles(data, LinkingConfig(look_ahead=1)).empty
        tracks = link_particles(data, LinkingConfig(look_ahead=2))
        assert tracks["trajectory"].tolist() == [0, 0]

    def test_smaller_gap_preferred(self):
        """A link to the next frame wins over a closer one two frames later."""
        data = table([0, 1, 2], [0.0, 3.0, 0.5], [0.0, 0.0, 0.0])
        tracks = link_particles(data, LinkingConfig(look_ahead=2, discard_unlinked=False))
        assert tracks.loc[1, "trajectory"] == 0
        assert tracks.loc[0, "trajectory"] == 0

    def test_earlier_frame_claims_target(self):
        """A target reached across a gap keeps that predecessor.

        Frame 0 links to frame 2 first, so the closer-in-time candidate from
        frame 1 is refused when its own frame is processed.
        """
        data = table([0, 1, 2], [0.0, 3.0, 1.0], [0.0, 0.0, 0.0])

        tracks = link_particles(
            data, LinkingConfig(look_ahead=2, max_step=2.5, discard_unlinked=False)
        )
        assert tracks.loc[0, "trajectory"] == 0
        assert tracks.loc[2, "trajectory"] == 0
        assert pd.isna(tracks.loc[1, "trajectory"])
        assert tracks.loc[2, "dx"] == 1.0

        tracks = link_particles(
            data, LinkingConfig(look_ahead=1, max_step=2.5, discard_unlinked=False)
        )
        assert tracks.loc[1, "trajectory"] == 0
        assert tracks.loc[2, "trajectory"] == 0
        assert pd.isna(tracks.loc[0, "trajectory"])

    def test_unsorted_input(self, localization_table):
        """Input order does not matter."""
        shuffled = localization_table.sample(frac=1.0, random_state=42)
        tracks = link_particles(shuffled)
        assert sorted(tracks["frame"].tolist()) == [0, 0, 1, 1, 2, 2]
        assert len(trajectory_ids(tracks)) == 2

    def test_empty_table(self):
        """No localizations, no trajectories."""
        tracks = link_particles(table([], [], []))
        assert tracks.empty
        assert "trajectory" in tracks.columns

    def test_missing_columns(self):
        """Tables without positions are rejected."""
        with pytest.raises(DataIOError, match="x"):
            link_particles(pd.DataFrame({"frame": [0], "y": [0.0]}))
