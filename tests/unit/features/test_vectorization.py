"""Unit tests for season vectorization.

Tests cover:
- per-set conversion for both schemes
- the minimum sets filter running before population statistics
- z-vector shape and column properties
- DataFrame export
"""

from __future__ import annotations

import numpy as np
import pytest

from volley_model.features.aggregation import PlayerSeasonAggregate
from volley_model.features.schema import FEATURE_COUNT, SCHEME_V1, SCHEME_V2, PerSetFeatures
from volley_model.features.vectorization import (
    PlayerSeasonVectorRow,
    build_season_vectors,
    compute_per_set_features,
    rows_to_frame,
)
from volley_model.types import UnknownSchemeError, VectorDimensionError


class TestComputePerSetFeatures:
    """Tests for compute_per_set_features function."""

    def test_divides_by_sets_played(self) -> None:
        """10 kills and 20 attempts over 5 sets give 2.0 and 4.0 per set."""
        agg = PlayerSeasonAggregate(
            season_number=4, sets_played=5, spike_kills=10, spike_attempts=20
        )

        features = compute_per_set_features(agg)

        assert features["spike_kills_per_set"] == 2.0
        assert features["spike_attempts_per_set"] == 4.0
        assert sum(features.values()) == 6.0
        assert features.version == "v2"

    def test_zero_sets_divides_by_one(self) -> None:
        """With no sets played the raw totals are used."""
        agg = PlayerSeasonAggregate(season_number=4, sets_played=0, digs=3)

        features = compute_per_set_features(agg)

        assert features["digs_per_set"] == 3.0

    def test_v1_combined_features(self) -> None:
        """The legacy scheme combines attacks and derives percentages."""
        agg = PlayerSeasonAggregate(
            season_number=4,
            sets_played=4,
            spike_kills=6,
            spike_attempts=12,
            ape_kills=2,
            ape_attempts=4,
            assists=4,
            aces=2,
            digs=3,
            block_follows=1,
            spiking_errors=2,
            serving_errors=2,
        )

        features = compute_per_set_features(agg, "v1")

        assert features.version == "v1"
        assert features["kills_per_set"] == 2.0
        assert features["attempts_per_set"] == 4.0
        assert features["total_spike_pct"] == 0.5
        assert features["spike_pct"] == 0.5
        assert features["ape_pct"] == 0.5
        assert features["receives_per_set"] == 1.0
        assert features["errors_per_set"] == 1.0
        # kills 8 + aces 2 + assists 4 - errors 4
        assert features["plus_minus_per_set"] == 2.5

    def test_v1_percentages_without_attempts(self) -> None:
        """Kill percentages are 0 when there were no attempts."""
        features = compute_per_set_features(
            PlayerSeasonAggregate(season_number=4, sets_played=3), SCHEME_V1
        )

        assert features["total_spike_pct"] == 0.0
        assert features["spike_pct"] == 0.0
        assert features["ape_pct"] == 0.0

    def test_unknown_scheme_raises(self) -> None:
        """Unknown version tags should raise."""
        with pytest.raises(UnknownSchemeError):
            compute_per_set_features(PlayerSeasonAggregate(season_number=4), "v0")


class TestBuildSeasonVectors:
    """Tests for build_season_vectors function."""

    def test_filters_by_min_sets(self, sample_players) -> None:
        """Only players with enough sets are returned, in input order."""
        rows = build_season_vectors(sample_players, 4, 5)

        assert [row.player_id for row in rows] == ["1", "2", "3", "5"]
        assert [row.sets_played for row in rows] == [8, 10, 9, 5]
        assert rows[0].player_name == "Sam"

    def test_zero_threshold_includes_idle_players(self, sample_players) -> None:
        """A threshold of 0 admits players with no sets at all."""
        rows = build_season_vectors(sample_players, 4, 0)

        assert len(rows) == 6
        ben = rows[-1]
        assert ben.sets_played == 0
        assert all(v == 0.0 for v in ben.raw_features.values())

    def test_vector_lengths(self, sample_players) -> None:
        """Every row has FEATURE_COUNT raw features and z-scores."""
        rows = build_season_vectors(sample_players, 4, 5)

        for row in rows:
            assert len(row.z_vector) == len(row.raw_features) == FEATURE_COUNT

    def test_z_columns_centered(self, sample_players) -> None:
        """Each non-constant z column averages to 0 over the population."""
        rows = build_season_vectors(sample_players, 4, 5)
        matrix = np.array([row.z_vector for row in rows])

        assert matrix.mean(axis=0) == pytest.approx(np.zeros(FEATURE_COUNT), abs=1e-9)

    def test_constant_feature_is_exactly_zero(self, sample_players) -> None:
        """Nobody in season 4 has ape attacks, so those z-scores are exactly 0."""
        rows = build_season_vectors(sample_players, 4, 5)
        index = SCHEME_V2.index("ape_kills_per_set")

        assert all(row.z_vector[index] == 0.0 for row in rows)

    def test_statistics_use_only_qualifying_players(self, make_player, make_record) -> None:
        """Population stats cover the 2 of 5 players reaching 10 sets."""
        players = [
            make_player(1, "A", make_record(team1=3, team2=2, digs=10),
                        make_record(team1=3, team2=2, digs=10)),
            make_player(2, "B", make_record(team1=3, team2=2, digs=30),
                        make_record(team1=3, team2=2, digs=30)),
            make_player(3, "C", make_record(team1=3, team2=0, digs=90)),
            make_player(4, "D", make_record(team1=3, team2=1, digs=0)),
            make_player(5, "E", make_record(team1=3, team2=2, digs=45)),
        ]

        rows = build_season_vectors(players, 4, 10)
        index = SCHEME_V2.index("digs_per_set")

        # Qualifiers dig 2 and 6 per set: mean 4, std 2
        assert [row.player_id for row in rows] == ["1", "2"]
        assert [row.z_vector[index] for row in rows] == pytest.approx([-1.0, 1.0])

    def test_nobody_qualifies(self, sample_players) -> None:
        """An unreachable threshold returns no rows."""
        assert build_season_vectors(sample_players, 4, 100) == []

    def test_unknown_season(self, sample_players) -> None:
        """A season with no records returns no rows at a positive threshold."""
        assert build_season_vectors(sample_players, 12, 1) == []

    def test_v1_scheme(self, sample_players) -> None:
        """Rows carry their scheme version."""
        rows = build_season_vectors(sample_players, 4, 5, scheme="v1")

        assert all(row.version == "v1" for row in rows)
        assert all(len(row.z_vector) == len(SCHEME_V1) for row in rows)


class TestPlayerSeasonVectorRow:
    """Tests for PlayerSeasonVectorRow invariants."""

    def test_mismatched_lengths_rejected(self) -> None:
        """A z-vector must align with the raw features."""
        with pytest.raises(VectorDimensionError):
            PlayerSeasonVectorRow(
                player_id="1",
                player_name="Kai",
                season_number=4,
                sets_played=5,
                raw_features=PerSetFeatures.zeros(SCHEME_V2),
                z_vector=(0.0,) * 12,
            )


class TestRowsToFrame:
    """Tests for rows_to_frame function."""

    def test_columns(self, sample_players) -> None:
        """The frame holds identity, raw and z columns for every row."""
        rows = build_season_vectors(sample_players, 4, 5)

        frame = rows_to_frame(rows)

        assert len(frame) == 4
        assert list(frame["player_id"]) == ["1", "2", "3", "5"]
        assert "assists_per_set" in frame.columns
        assert "z_assists_per_set" in frame.columns
        assert frame.loc[0, "assists_per_set"] == pytest.approx(7.0)
        assert set(frame["vector_version"]) == {"v2"}
