"""Season aggregation of per-game volleyball stat records.

Collapses a player's stat records for one season into counter totals and an
estimated number of sets played. Sets are the sum of both teams' set scores
of the game each stat record points to. The sum runs per stat record, so two
records for the same game count that game's sets twice.

Input records are duck typed: players, stat records, games and seasons may
be API mappings (camelCase keys) or objects (snake_case attributes). Missing
or non-numeric values read as 0 and never raise.

Example:
    >>> from volley_model.features.aggregation import aggregate_player_season
    >>> agg = aggregate_player_season(player, season_number=4)
    >>> agg.sets_played
    18
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from numbers import Real

from volley_model.logging import get_logger
from volley_model.types import RawRecord, SeasonNumber

logger = get_logger(__name__)

# Aggregate counter name -> source field name on the API stat record
STAT_FIELDS: dict[str, str] = {
    "spike_kills": "spikeKills",
    "spike_attempts": "spikeAttempts",
    "ape_kills": "apeKills",
    "ape_attempts": "apeAttempts",
    "blocks": "blocks",
    "assists": "assists",
    "aces": "aces",
    "digs": "digs",
    "block_follows": "blockFollows",
    "spiking_errors": "spikingErrors",
    "setting_errors": "settingErrors",
    "serving_errors": "servingErrors",
    "misc_errors": "miscErrors",
}


@dataclass(frozen=True)
class PlayerSeasonAggregate:
    """Season totals for one player.

    Attributes:
        season_number: Season the totals cover.
        sets_played: Accumulated set count (may be 0).
        spike_kills..misc_errors: Summed counters over matching stat records.
        record_count: Number of stat records that matched the season.
    """

    season_number: SeasonNumber
    sets_played: float = 0
    spike_kills: float = 0
    spike_attempts: float = 0
    ape_kills: float = 0
    ape_attempts: float = 0
    blocks: float = 0
    assists: float = 0
    aces: float = 0
    digs: float = 0
    block_follows: float = 0
    spiking_errors: float = 0
    setting_errors: float = 0
    serving_errors: float = 0
    misc_errors: float = 0
    record_count: int = 0

    @property
    def total_kills(self) -> float:
        return self.spike_kills + self.ape_kills

    @property
    def total_attempts(self) -> float:
        return self.spike_attempts + self.ape_attempts

    @property
    def total_errors(self) -> float:
        return (
            self.spiking_errors
            + self.setting_errors
            + self.serving_errors
            + self.misc_errors
        )

    def counters(self) -> dict[str, float]:
        """Return the 13 summed counters keyed by aggregate field name."""
        return {name: getattr(self, name) for name in STAT_FIELDS}


def _snake_case(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def read_field(obj: RawRecord, name: str) -> object:
    """Read a camelCase field from a mapping or object, else its snake_case twin.

    Returns None when neither spelling is present.
    """
    if obj is None:
        return None
    candidates = (name, _snake_case(name))
    if isinstance(obj, Mapping):
        for key in candidates:
            if key in obj:
                return obj[key]
        return None
    for key in candidates:
        value = getattr(obj, key, None)
        if value is not None:
            return value
    return None


def is_number(value: object) -> bool:
    """True for real, non-NaN, non-boolean numbers."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(float(value))


def as_number(value: object) -> float:
    """Coerce a raw stat value to a float, treating anything else as 0."""
    return float(value) if is_number(value) else 0.0


def _whole_season(value: Real) -> SeasonNumber | None:
    # 4.7 is not season 4
    number = float(value)
    return int(number) if number.is_integer() else None


def record_season_number(record: RawRecord) -> SeasonNumber | None:
    """Season number of the game a stat record belongs to, if known."""
    game = read_field(record, "game")
    if game is None:
        return None

    season = read_field(game, "season")
    if is_number(season):
        return _whole_season(season)
    number = read_field(season, "seasonNumber")
    if number is None:
        number = read_field(game, "seasonNumber")
    return _whole_season(number) if is_number(number) else None


def record_sets(record: RawRecord) -> float | None:
    """Sets contributed by a stat record, or None when the scores are missing."""
    game = read_field(record, "game")
    team1 = read_field(game, "team1Score")
    team2 = read_field(game, "team2Score")
    if not (is_number(team1) and is_number(team2)):
        return None
    return float(team1) + float(team2)  # type: ignore[arg-type]


def player_stat_records(player: RawRecord) -> list[RawRecord]:
    """Stat records attached to a player (empty when absent)."""
    stats = read_field(player, "stats")
    if not stats or isinstance(stats, (str, bytes, Mapping)):
        return []
    return list(stats)


def aggregate_player_season(
    player: RawRecord,
    season_number: SeasonNumber,
) -> PlayerSeasonAggregate:
    """Sum a player's stat records for one season.

    Args:
        player: Player mapping/object with an optional ``stats`` collection.
        season_number: Target season.

    Returns:
        Season totals; all zeros when the player has no matching records.
    """
    totals = dict.fromkeys(STAT_FIELDS, 0.0)
    sets_played = 0.0
    matched = 0

    for record in player_stat_records(player):
        if record_season_number(record) != season_number:
            continue
        matched += 1

        for name, source in STAT_FIELDS.items():
            totals[name] += as_number(read_field(record, source))

        sets = record_sets(record)
        if sets is not None:
            sets_played += sets

    if matched:
        logger.debug(
            "Player {} season {}: {} records, {} sets",
            read_field(player, "id"),
            season_number,
            matched,
            sets_played,
        )

    return PlayerSeasonAggregate(
        season_number=season_number,
        sets_played=sets_played,
        record_count=matched,
        **totals,
    )


def available_seasons(players: Iterable[RawRecord]) -> list[SeasonNumber]:
    """Distinct season numbers present in the players' stat records, newest first."""
    seasons: set[SeasonNumber] = set()
    for player in players:
        for record in player_stat_records(player):
            number = record_season_number(record)
            if number is not None:
                seasons.add(number)
    return sorted(seasons, reverse=True)


__all__ = [
    "STAT_FIELDS",
    "PlayerSeasonAggregate",
    "aggregate_player_season",
    "as_number",
    "available_seasons",
    "is_number",
    "player_stat_records",
    "read_field",
    "record_season_number",
    "record_sets",
]
