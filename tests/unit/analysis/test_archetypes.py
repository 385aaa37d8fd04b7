"""Unit tests for the archetype classifier.

Tests cover:
- each rule tier (standalone, dual role, special pair, combined, lone traits)
- rule tables passed in as values
- scheme guard and determinism
"""

from __future__ import annotations

import pytest

from volley_model.analysis.archetypes import (
    ARCHETYPE_CATALOG,
    DEFAULT_RULES,
    NEUTRAL_COLOR,
    Archetype,
    ArchetypeRules,
    DualRoleRule,
    StandaloneRule,
    Trait,
    classify_archetype,
    classify_rows,
    is_intimidator,
    is_playmaker,
)
from volley_model.features.schema import SCHEME_V1, PerSetFeatures
from volley_model.features.vectorization import build_season_vectors
from volley_model.types import UnknownSchemeError


class TestDualRole:
    """Tests for the playmaker/intimidator override."""

    def test_assist_dominant(self, make_features) -> None:
        """7 assists against 1 block per set is the assist-dominant composite."""
        archetype = classify_archetype(
            make_features(assists_per_set=7.0, blocks_per_set=1.0)
        )

        assert archetype.id == "architect"
        assert archetype.name == "Architect"

    def test_block_dominant(self, make_features) -> None:
        """Assists under three times blocks give the block-dominant composite."""
        archetype = classify_archetype(
            make_features(assists_per_set=2.5, blocks_per_set=1.0)
        )

        assert archetype.id == "sentinel"

    def test_partial_feature_map(self) -> None:
        """Plain dicts work; missing keys read as 0."""
        archetype = classify_archetype({"assists_per_set": 7.0, "blocks_per_set": 1.0})

        assert archetype.id == "architect"

    def test_predicates(self, make_features) -> None:
        """Block follows alone can make an intimidator."""
        features = make_features(assists_per_set=2.0, block_follows_per_set=0.8)

        assert is_playmaker(features)
        assert is_intimidator(features)


class TestStandalone:
    """Tests for standalone archetypes."""

    @pytest.mark.parametrize(
        "values, expected",
        [
            (
                {"spike_kills_per_set": 1.6, "blocks_per_set": 0.9, "digs_per_set": 1.6},
                "franchise",
            ),
            (
                {
                    "blocks_per_set": 1.2,
                    "block_follows_per_set": 0.8,
                    "spike_kills_per_set": 0.2,
                    "spike_attempts_per_set": 0.6,
                    "misc_errors_per_set": 0.2,
                },
                "the-wall",
            ),
            (
                {"digs_per_set": 3.0, "assists_per_set": 0.2, "spike_attempts_per_set": 0.1},
                "backcourt-anchor",
            ),
            (
                {
                    "spike_kills_per_set": 0.5,
                    "spike_attempts_per_set": 0.9,
                    "blocks_per_set": 0.5,
                    "assists_per_set": 0.6,
                    "digs_per_set": 0.7,
                    "aces_per_set": 0.4,
                    "block_follows_per_set": 0.5,
                },
                "metronome",
            ),
            ({}, "ghost"),
        ],
    )
    def test_standalone_archetypes(
        self, make_features, values: dict[str, float], expected: str
    ) -> None:
        """Complete profiles short-circuit the trait tiers."""
        assert classify_archetype(make_features(**values)).id == expected

    def test_standalone_beats_dual_role(self, make_features) -> None:
        """A franchise playmaker-intimidator stays Franchise Player."""
        features = make_features(
            assists_per_set=7.0, blocks_per_set=1.0, digs_per_set=2.0
        )

        assert is_playmaker(features) and is_intimidator(features)
        assert classify_archetype(features).id == "franchise"


class TestTraitCombination:
    """Tests for primary and secondary trait tiers."""

    def test_combined_label(self, make_features) -> None:
        """Primary and secondary combine with the secondary's color."""
        archetype = classify_archetype(
            make_features(
                spike_kills_per_set=1.0,
                spike_attempts_per_set=2.5,
                spiking_errors_per_set=0.3,
                digs_per_set=0.5,
                serving_errors_per_set=0.1,
            )
        )

        assert archetype == Archetype(
            id="workhorse-striker",
            name="Workhorse Striker",
            color="#FF6B6B",
            description="workhorse striker",
        )

    def test_special_pair(self, make_features) -> None:
        """A maverick playmaker has its own name."""
        archetype = classify_archetype(
            make_features(assists_per_set=3.0, setting_errors_per_set=0.6)
        )

        assert archetype.id == "riverboat-gambler"
        assert archetype.name == "Riverboat Gambler"

    def test_secondary_only(self, make_features) -> None:
        """A lone secondary trait is a specialized archetype."""
        archetype = classify_archetype(
            make_features(
                spike_kills_per_set=0.7,
                spike_attempts_per_set=1.2,
                spiking_errors_per_set=0.3,
            )
        )

        assert archetype == Archetype(
            id="finisher",
            name="Finisher",
            color="#A8E6CF",
            description="Specialized Finisher",
        )

    def test_primary_only(self, make_features) -> None:
        """A lone primary trait uses the neutral color."""
        archetype = classify_archetype(
            make_features(digs_per_set=0.4, serving_errors_per_set=0.3)
        )

        assert archetype == Archetype(
            id="selective",
            name="Selective",
            color=NEUTRAL_COLOR,
            description="selective player",
        )

    def test_no_archetype(self, make_features) -> None:
        """Profiles matching nothing return None."""
        features = make_features(
            spike_kills_per_set=0.2,
            spike_attempts_per_set=1.5,
            spiking_errors_per_set=0.3,
        )

        assert classify_archetype(features) is None


class TestRuleTables:
    """Tests for rule tables passed as values."""

    def test_custom_rules(self, make_features) -> None:
        """The classifier only uses the rules it is given."""
        rules = ArchetypeRules(
            standalone=(),
            primary=(),
            secondary=(Trait("digger", "Digger", lambda f: f["digs_per_set"] > 1, "#000000"),),
        )

        archetype = classify_archetype(make_features(digs_per_set=2.0), rules)

        assert archetype.name == "Digger"
        assert archetype.color == "#000000"
        assert classify_archetype(make_features(), rules) is None

    def test_custom_dual_role_ratio(self, make_features) -> None:
        """The dominance ratio is part of the rule."""
        architect = Archetype("a", "A", "#111111", "a")
        sentinel = Archetype("s", "S", "#222222", "s")
        rules = ArchetypeRules(
            standalone=(),
            primary=(),
            secondary=(),
            dual_role=DualRoleRule(is_playmaker, is_intimidator, architect, sentinel, ratio=10.0),
        )

        features = make_features(assists_per_set=7.0, blocks_per_set=1.0)

        assert classify_archetype(features, rules) == sentinel

    def test_standalone_order(self, make_features) -> None:
        """The first matching standalone wins."""
        first = Archetype("first", "First", "#111111", "")
        second = Archetype("second", "Second", "#222222", "")
        rules = ArchetypeRules(
            standalone=(
                StandaloneRule(first, lambda f: True),
                StandaloneRule(second, lambda f: True),
            ),
            primary=(),
            secondary=(),
        )

        assert classify_archetype(make_features(), rules) == first

    def test_default_rules_unchanged_by_classification(self, make_features) -> None:
        """Classifying does not mutate the shipped tables."""
        before = (DEFAULT_RULES.standalone, DEFAULT_RULES.primary, DEFAULT_RULES.secondary)

        classify_archetype(make_features(assists_per_set=7.0, blocks_per_set=1.0))

        assert (DEFAULT_RULES.standalone, DEFAULT_RULES.primary, DEFAULT_RULES.secondary) == before

    def test_catalog_ids_unique(self) -> None:
        """Every named archetype appears once in the catalog."""
        ids = [archetype.id for archetype in ARCHETYPE_CATALOG]

        assert len(ids) == len(set(ids)) == 15
        assert {"architect", "sentinel", "riverboat-gambler"} <= set(ids)


class TestClassifier:
    """Tests for classifier guards and helpers."""

    def test_deterministic(self, make_features) -> None:
        """Identical feature maps classify identically."""
        features = make_features(spike_kills_per_set=1.0, spike_attempts_per_set=2.5)

        assert classify_archetype(features) == classify_archetype(features)

    def test_v1_features_rejected(self) -> None:
        """Rules are written for v2 features only."""
        with pytest.raises(UnknownSchemeError):
            classify_archetype(PerSetFeatures.zeros(SCHEME_V1))

    def test_classify_rows(self, sample_players) -> None:
        """Rows are labeled by player id."""
        rows = build_season_vectors(sample_players, 4, 5)

        labels = classify_rows(rows)

        assert {pid: a.id for pid, a in labels.items()} == {
            "1": "architect",
            "2": "workhorse-striker",
            "3": "backcourt-anchor",
            "5": "the-wall",
        }
