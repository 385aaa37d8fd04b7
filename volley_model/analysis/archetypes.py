"""Rule-based player archetype classification.

Labels a player from their raw (v2) per-set features. Rules are evaluated in
tiers, and the first match wins inside each tier:

    1. Standalone archetypes: complete profiles that short-circuit.
    2. One primary trait (error and consistency tendency) and one secondary
       trait (role), each the first match of its ordered list.
    3. Dual-role override: a playmaker who is also an intimidator becomes a
       composite archetype chosen by whether assists or blocks dominate.
    4. Primary + secondary combine into "{Primary} {Secondary}", except for
       registered special pairs.
    5. A lone secondary or lone primary is returned by itself; otherwise
       there is no archetype.

Rule tables are immutable values passed into ``classify_archetype``;
``DEFAULT_RULES`` holds the shipped catalog.

Example:
    >>> from volley_model.analysis.archetypes import classify_archetype
    >>> classify_archetype({"assists_per_set": 7.0, "blocks_per_set": 1.0}).name
    'Architect'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from volley_model.features.aggregation import as_number
from volley_model.features.schema import SCHEME_V2, PerSetFeatures
from volley_model.types import FeatureMap, FeaturePredicate, PlayerId, UnknownSchemeError

if TYPE_CHECKING:
    from volley_model.features.vectorization import PlayerSeasonVectorRow

# =============================================================================
# Constants
# =============================================================================

NEUTRAL_COLOR: str = "#95a5a6"

# Dual-role thresholds
PLAYMAKER_ASSISTS: float = 2.0
INTIMIDATOR_BLOCKS: float = 0.6
INTIMIDATOR_BLOCK_FOLLOWS: float = 0.8
DOMINANCE_RATIO: float = 3.0

# Franchise player category cutoffs
ELITE_KILLS: float = 1.5
ELITE_BLOCKS: float = 0.8
ELITE_ASSISTS: float = 3.0
ELITE_DIGS: float = 1.5
ELITE_ACES: float = 0.5
ELITE_CATEGORIES_REQUIRED: int = 3

# Metronome band
BALANCED_LOW: float = 0.3
BALANCED_HIGH: float = 1.2
BALANCED_SPREAD: float = 0.6


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class Archetype:
    """Human-readable label for a statistical profile."""

    id: str
    name: str
    color: str
    description: str


@dataclass(frozen=True)
class Trait:
    """Primary or secondary trait: a named predicate with a display color."""

    id: str
    name: str
    predicate: FeaturePredicate
    color: str = NEUTRAL_COLOR

    def matches(self, features: FeatureMap) -> bool:
        return bool(self.predicate(features))


@dataclass(frozen=True)
class StandaloneRule:
    """Complete archetype returned as soon as its predicate holds."""

    archetype: Archetype
    predicate: FeaturePredicate

    def matches(self, features: FeatureMap) -> bool:
        return bool(self.predicate(features))


@dataclass(frozen=True)
class DualRoleRule:
    """Override for players who both distribute and defend the net.

    When both predicates hold, the assist-dominant archetype is chosen if
    assists per set reach ``ratio`` times blocks per set, otherwise the
    block-dominant one.
    """

    is_playmaker: FeaturePredicate
    is_intimidator: FeaturePredicate
    assist_dominant: Archetype
    block_dominant: Archetype
    ratio: float = DOMINANCE_RATIO

    def resolve(self, features: FeatureMap) -> Archetype | None:
        if not (self.is_playmaker(features) and self.is_intimidator(features)):
            return None
        assists = rate(features, "assists_per_set")
        blocks = rate(features, "blocks_per_set")
        if assists >= self.ratio * blocks:
            return self.assist_dominant
        return self.block_dominant


@dataclass(frozen=True)
class SpecialPair:
    """Primary/secondary combination with its own name."""

    primary_id: str
    secondary_id: str
    archetype: Archetype


@dataclass(frozen=True)
class ArchetypeRules:
    """Complete, ordered rule set for the classifier."""

    standalone: tuple[StandaloneRule, ...]
    primary: tuple[Trait, ...]
    secondary: tuple[Trait, ...]
    dual_role: DualRoleRule | None = None
    special_pairs: tuple[SpecialPair, ...] = ()
    neutral_color: str = NEUTRAL_COLOR

    def special_pair(self, primary: Trait, secondary: Trait) -> Archetype | None:
        for pair in self.special_pairs:
            if pair.primary_id == primary.id and pair.secondary_id == secondary.id:
                return pair.archetype
        return None


# =============================================================================
# Feature Helpers
# =============================================================================


def rate(features: FeatureMap, key: str) -> float:
    """Read a per-set rate, treating missing or non-numeric values as 0."""
    return as_number(features.get(key, 0.0))


def kills(f: FeatureMap) -> float:
    return rate(f, "spike_kills_per_set") + rate(f, "ape_kills_per_set")


def attempts(f: FeatureMap) -> float:
    return rate(f, "spike_attempts_per_set") + rate(f, "ape_attempts_per_set")


def kill_rate(f: FeatureMap) -> float:
    return kills(f) / max(1.0, attempts(f))


def error_rates(f: FeatureMap) -> list[float]:
    return [
        rate(f, "spiking_errors_per_set"),
        rate(f, "setting_errors_per_set"),
        rate(f, "serving_errors_per_set"),
        rate(f, "misc_errors_per_set"),
    ]


def total_errors(f: FeatureMap) -> float:
    return sum(error_rates(f))


def contributions(f: FeatureMap) -> list[float]:
    """Positive-play rates: kills, blocks, assists, digs, aces, block follows."""
    return [
        kills(f),
        rate(f, "blocks_per_set"),
        rate(f, "assists_per_set"),
        rate(f, "digs_per_set"),
        rate(f, "aces_per_set"),
        rate(f, "block_follows_per_set"),
    ]


def activity(f: FeatureMap) -> float:
    return sum(contributions(f)) + attempts(f)


# =============================================================================
# Predicates
# =============================================================================


def is_playmaker(f: FeatureMap) -> bool:
    return rate(f, "assists_per_set") >= PLAYMAKER_ASSISTS


def is_intimidator(f: FeatureMap) -> bool:
    return (
        rate(f, "blocks_per_set") >= INTIMIDATOR_BLOCKS
        or rate(f, "block_follows_per_set") >= INTIMIDATOR_BLOCK_FOLLOWS
    )


def _is_franchise(f: FeatureMap) -> bool:
    elite = [
        kills(f) >= ELITE_KILLS,
        rate(f, "blocks_per_set") >= ELITE_BLOCKS,
        rate(f, "assists_per_set") >= ELITE_ASSISTS,
        rate(f, "digs_per_set") >= ELITE_DIGS,
        rate(f, "aces_per_set") >= ELITE_ACES,
    ]
    return sum(elite) >= ELITE_CATEGORIES_REQUIRED


def _is_high_flyer(f: FeatureMap) -> bool:
    return (
        kill_rate(f) > 0.6
        and (rate(f, "spike_kills_per_set") > 0.4 or rate(f, "ape_kills_per_set") > 0.4)
        and rate(f, "spiking_errors_per_set") < 0.25
        and rate(f, "setting_errors_per_set") < 0.25
    )


def _is_risk_taker(f: FeatureMap) -> bool:
    return (
        (rate(f, "spike_attempts_per_set") > 0.5 or rate(f, "ape_attempts_per_set") > 0.5)
        and (rate(f, "spike_kills_per_set") > 0.4 or rate(f, "ape_kills_per_set") > 0.4)
        and (rate(f, "spiking_errors_per_set") > 0.4 or rate(f, "setting_errors_per_set") > 0.4)
    )


def _is_wall(f: FeatureMap) -> bool:
    return (
        rate(f, "blocks_per_set") >= 1.0
        and rate(f, "block_follows_per_set") >= 0.5
        and kills(f) < 0.5
    )


def _is_floor_general(f: FeatureMap) -> bool:
    return (
        rate(f, "assists_per_set") >= 5.0
        and rate(f, "setting_errors_per_set") < 0.3
        and rate(f, "blocks_per_set") < 0.5
        and rate(f, "block_follows_per_set") < INTIMIDATOR_BLOCK_FOLLOWS
    )


def _is_ace_machine(f: FeatureMap) -> bool:
    return rate(f, "aces_per_set") >= 0.6 and rate(f, "serving_errors_per_set") < 0.3


def _is_serve_gambler(f: FeatureMap) -> bool:
    return rate(f, "aces_per_set") >= 0.4 and rate(f, "serving_errors_per_set") >= 0.6


def _is_backcourt_anchor(f: FeatureMap) -> bool:
    return (
        rate(f, "digs_per_set") >= 2.0
        and attempts(f) < 0.5
        and rate(f, "assists_per_set") < 1.0
    )


def _is_ape_specialist(f: FeatureMap) -> bool:
    ape = rate(f, "ape_attempts_per_set")
    return (
        ape >= 1.0
        and ape >= 2 * rate(f, "spike_attempts_per_set")
        and rate(f, "ape_kills_per_set") >= 0.5
    )


def _is_metronome(f: FeatureMap) -> bool:
    values = contributions(f)
    return (
        all(BALANCED_LOW <= v <= BALANCED_HIGH for v in values)
        and max(values) - min(values) <= BALANCED_SPREAD
        and total_errors(f) < 0.5
    )


def _is_ghost(f: FeatureMap) -> bool:
    return activity(f) < 0.3 and total_errors(f) < 0.2


def _is_conservative(f: FeatureMap) -> bool:
    return (
        rate(f, "spike_attempts_per_set") < 0.2
        and rate(f, "ape_attempts_per_set") < 0.2
        and rate(f, "assists_per_set") < 0.5
        and rate(f, "blocks_per_set") < 0.3
        and rate(f, "digs_per_set") < 0.5
        and rate(f, "spiking_errors_per_set") < 0.2
        and rate(f, "setting_errors_per_set") < 0.2
        and rate(f, "serving_errors_per_set") < 0.2
    )


def _is_versatile(f: FeatureMap) -> bool:
    return sum(1 for v in contributions(f) if 0.2 < v < 0.6) >= 3


def _is_jack_of_all_trades(f: FeatureMap) -> bool:
    offense = kills(f) > 0.3
    defense = rate(f, "digs_per_set") > 0.3 or rate(f, "blocks_per_set") > 0.3
    setting = rate(f, "assists_per_set") > 0.3
    return sum([offense, defense, setting]) >= 2


# =============================================================================
# Default Rule Tables
# =============================================================================

STANDALONE_RULES: tuple[StandaloneRule, ...] = (
    StandaloneRule(
        Archetype("franchise", "Franchise Player", "#FFD700",
                  "Elite production in three or more independent categories"),
        _is_franchise,
    ),
    StandaloneRule(
        Archetype("high-flyer", "High Flyer", "#FFB74D",
                  "High kills relative to attempts, low errors"),
        _is_high_flyer,
    ),
    StandaloneRule(
        Archetype("risk-taker", "Risk Taker", "#FF8C94",
                  "High attempts, high errors, high kills"),
        _is_risk_taker,
    ),
    StandaloneRule(
        Archetype("the-wall", "The Wall", "#8D6E63",
                  "Dominant net presence that rarely attacks"),
        _is_wall,
    ),
    StandaloneRule(
        Archetype("floor-general", "Floor General", "#7986CB",
                  "Pure distributor with elite assists and clean hands"),
        _is_floor_general,
    ),
    StandaloneRule(
        Archetype("ace-machine", "Ace Machine", "#FFCC80",
                  "Scores from the service line without giving points back"),
        _is_ace_machine,
    ),
    StandaloneRule(
        Archetype("serve-gambler", "Serve Gambler", "#FF7043",
                  "Trades aces for service errors"),
        _is_serve_gambler,
    ),
    StandaloneRule(
        Archetype("backcourt-anchor", "Backcourt Anchor", "#4DB6AC",
                  "Keeps rallies alive from the back row, rarely attacks"),
        _is_backcourt_anchor,
    ),
    StandaloneRule(
        Archetype("ape-specialist", "Ape Specialist", "#BA68C8",
                  "Scores mostly with ape attacks"),
        _is_ape_specialist,
    ),
    StandaloneRule(
        Archetype("metronome", "Metronome", "#90A4AE",
                  "Balanced across every category within a tight band"),
        _is_metronome,
    ),
    StandaloneRule(
        Archetype("ghost", "Ghost", "#CFD8DC",
                  "Barely registers on the stat sheet"),
        _is_ghost,
    ),
    StandaloneRule(
        Archetype("conservative", "Conservative", "#C8E6C9",
                  "Low attempts, low errors"),
        _is_conservative,
    ),
)

PRIMARY_TRAITS: tuple[Trait, ...] = (
    Trait(
        "maverick",
        "Maverick",
        lambda f: max(error_rates(f)) > 0.5 or total_errors(f) > 1.0,
    ),
    Trait(
        "precise",
        "Precise",
        lambda f: max(error_rates(f)) < 0.2 and activity(f) >= 1.0,
    ),
    Trait(
        "workhorse",
        "Workhorse",
        lambda f: (
            attempts(f) >= 2.0
            or rate(f, "assists_per_set") >= 4.0
            or rate(f, "digs_per_set") >= 2.5
        ),
    ),
    Trait(
        "selective",
        "Selective",
        lambda f: attempts(f) < 0.5 and rate(f, "assists_per_set") < 0.5,
    ),
    Trait(
        "steady",
        "Steady",
        lambda f: attempts(f) < 1.0 and total_errors(f) < 0.5,
    ),
)

SECONDARY_TRAITS: tuple[Trait, ...] = (
    Trait("striker", "Striker", lambda f: kills(f) >= 0.8 and attempts(f) >= 1.5, "#FF6B6B"),
    Trait(
        "guardian",
        "Guardian",
        lambda f: (
            rate(f, "digs_per_set") >= 1.0
            or rate(f, "block_follows_per_set") >= INTIMIDATOR_BLOCK_FOLLOWS
        ),
        "#4ECDC4",
    ),
    Trait("playmaker", "Playmaker", is_playmaker, "#C7CEEA"),
    Trait("finisher", "Finisher", lambda f: kills(f) >= 0.4 and kill_rate(f) >= 0.5, "#A8E6CF"),
    Trait("intimidator", "Intimidator", is_intimidator, "#FCBAD3"),
    Trait("bomber", "Bomber", lambda f: rate(f, "aces_per_set") >= 0.4, "#FFD3A5"),
    Trait("versatile", "Versatile", _is_versatile, "#D4A5FF"),
    Trait("jack-of-all-trades", "Jack of All Trades", _is_jack_of_all_trades, "#FFFFD2"),
)

DUAL_ROLE_RULE = DualRoleRule(
    is_playmaker=is_playmaker,
    is_intimidator=is_intimidator,
    assist_dominant=Archetype(
        "architect", "Architect", "#9575CD",
        "Runs the offense and still owns the net",
    ),
    block_dominant=Archetype(
        "sentinel", "Sentinel", "#5C6BC0",
        "Net defender who also distributes",
    ),
)

SPECIAL_PAIRS: tuple[SpecialPair, ...] = (
    SpecialPair(
        "maverick",
        "playmaker",
        Archetype(
            "riverboat-gambler", "Riverboat Gambler", "#E57373",
            "Creative distributor whose risky sets cost points",
        ),
    ),
)

DEFAULT_RULES = ArchetypeRules(
    standalone=STANDALONE_RULES,
    primary=PRIMARY_TRAITS,
    secondary=SECONDARY_TRAITS,
    dual_role=DUAL_ROLE_RULE,
    special_pairs=SPECIAL_PAIRS,
)

# Every archetype with a fixed name (combined primary/secondary labels excluded)
ARCHETYPE_CATALOG: tuple[Archetype, ...] = (
    *(rule.archetype for rule in STANDALONE_RULES),
    DUAL_ROLE_RULE.assist_dominant,
    DUAL_ROLE_RULE.block_dominant,
    *(pair.archetype for pair in SPECIAL_PAIRS),
)


# =============================================================================
# Classifier
# =============================================================================


def _first_match(traits: Iterable[Trait], features: FeatureMap) -> Trait | None:
    return next((trait for trait in traits if trait.matches(features)), None)


def classify_archetype(
    features: FeatureMap,
    rules: ArchetypeRules = DEFAULT_RULES,
) -> Archetype | None:
    """Classify a player from raw v2 per-set features.

    Args:
        features: Per-set rates keyed by v2 feature names. Missing keys read
            as 0.
        rules: Rule tables to evaluate.

    Returns:
        The matching Archetype, or None when nothing matches.

    Raises:
        UnknownSchemeError: If given PerSetFeatures built with another scheme.
    """
    if isinstance(features, PerSetFeatures) and features.version != SCHEME_V2.version:
        raise UnknownSchemeError(
            f"Archetype rules need {SCHEME_V2.version} features, got {features.version}"
        )

    for standalone in rules.standalone:
        if standalone.matches(features):
            return standalone.archetype

    primary = _first_match(rules.primary, features)
    secondary = _first_match(rules.secondary, features)

    if rules.dual_role is not None:
        composite = rules.dual_role.resolve(features)
        if composite is not None:
            return composite

    if primary and secondary:
        special = rules.special_pair(primary, secondary)
        if special is not None:
            return special
        return Archetype(
            id=f"{primary.id}-{secondary.id}",
            name=f"{primary.name} {secondary.name}",
            color=secondary.color,
            description=f"{primary.name} {secondary.name}".lower(),
        )

    if secondary:
        return Archetype(
            id=secondary.id,
            name=secondary.name,
            color=secondary.color,
            description=f"Specialized {secondary.name}",
        )

    if primary:
        return Archetype(
            id=primary.id,
            name=primary.name,
            color=rules.neutral_color,
            description=f"{primary.name.lower()} player",
        )

    return None


def classify_rows(
    rows: Iterable[PlayerSeasonVectorRow],
    rules: ArchetypeRules = DEFAULT_RULES,
) -> dict[PlayerId, Archetype | None]:
    """Classify every vector row, keyed by player id."""
    return {
        row.player_id: classify_archetype(row.raw_features, rules)
        for row in rows
    }


__all__ = [
    "ARCHETYPE_CATALOG",
    "DEFAULT_RULES",
    "DUAL_ROLE_RULE",
    "NEUTRAL_COLOR",
    "PRIMARY_TRAITS",
    "SECONDARY_TRAITS",
    "SPECIAL_PAIRS",
    "STANDALONE_RULES",
    "Archetype",
    "ArchetypeRules",
    "DualRoleRule",
    "SpecialPair",
    "StandaloneRule",
    "Trait",
    "classify_archetype",
    "classify_rows",
    "is_intimidator",
    "is_playmaker",
]
