"""Season vectorization of player stat lines.

Converts (player, season) stat lines into fixed-order per-set feature maps,
filters the population by sets played, and z-scores the survivors against
each other. Filtering happens before normalization, so population statistics
only describe players who made the cut.

Example:
    >>> from volley_model.features.vectorization import build_season_vectors
    >>> rows = build_season_vectors(players, season_number=4, min_sets_played=5)
    >>> rows[0].z_vector[:3]
    [0.41, -0.88, 1.32]
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from volley_model.features.aggregation import (
    PlayerSeasonAggregate,
    aggregate_player_season,
    read_field,
)
from volley_model.features.normalization import (
    compute_feature_population_stats,
    standardize,
)
from volley_model.features.schema import (
    SCHEME_V1,
    SCHEME_V2,
    FeatureScheme,
    PerSetFeatures,
    get_scheme,
)
from volley_model.logging import WARN, get_logger
from volley_model.types import PlayerId, RawRecord, SeasonNumber, VectorDimensionError

if TYPE_CHECKING:
    import pandas as pd

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlayerSeasonVectorRow:
    """One qualifying player's vector for one season.

    Attributes:
        player_id: Player identifier (stringified).
        player_name: Display name.
        season_number: Season the vector describes.
        sets_played: Sets played as reported by the aggregate (may be 0).
        raw_features: Per-set features before normalization.
        z_vector: Z-scores in the scheme's key order.
    """

    player_id: PlayerId
    player_name: str
    season_number: SeasonNumber
    sets_played: float
    raw_features: PerSetFeatures
    z_vector: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.z_vector) != len(self.raw_features):
            raise VectorDimensionError(
                f"Player {self.player_id}: z-vector has {len(self.z_vector)} "
                f"values but {len(self.raw_features)} raw features"
            )

    @property
    def version(self) -> str:
        return self.raw_features.version


def _per_set_v2(agg: PlayerSeasonAggregate, sets: float) -> dict[str, float]:
    return {
        "spike_kills_per_set": agg.spike_kills / sets,
        "spike_attempts_per_set": agg.spike_attempts / sets,
        "ape_kills_per_set": agg.ape_kills / sets,
        "ape_attempts_per_set": agg.ape_attempts / sets,
        "blocks_per_set": agg.blocks / sets,
        "assists_per_set": agg.assists / sets,
        "aces_per_set": agg.aces / sets,
        "digs_per_set": agg.digs / sets,
        "block_follows_per_set": agg.block_follows / sets,
        "spiking_errors_per_set": agg.spiking_errors / sets,
        "setting_errors_per_set": agg.setting_errors / sets,
        "serving_errors_per_set": agg.serving_errors / sets,
        "misc_errors_per_set": agg.misc_errors / sets,
    }


def _per_set_v1(agg: PlayerSeasonAggregate, sets: float) -> dict[str, float]:
    kills = agg.total_kills
    attempts = agg.total_attempts
    errors = agg.total_errors
    # Points responsible for, minus errors
    plus_minus = kills + agg.aces + agg.assists - errors

    return {
        "kills_per_set": kills / sets,
        "attempts_per_set": attempts / sets,
        "total_spike_pct": kills / attempts if attempts > 0 else 0.0,
        "spike_pct": (
            agg.spike_kills / agg.spike_attempts if agg.spike_attempts > 0 else 0.0
        ),
        "ape_pct": agg.ape_kills / agg.ape_attempts if agg.ape_attempts > 0 else 0.0,
        "blocks_per_set": agg.blocks / sets,
        "assists_per_set": agg.assists / sets,
        "aces_per_set": agg.aces / sets,
        "digs_per_set": agg.digs / sets,
        "receives_per_set": (agg.digs + agg.block_follows) / sets,
        "errors_per_set": errors / sets,
        "plus_minus_per_set": plus_minus / sets,
    }


_BUILDERS = {
    SCHEME_V2.version: _per_set_v2,
    SCHEME_V1.version: _per_set_v1,
}


def compute_per_set_features(
    aggregate: PlayerSeasonAggregate,
    scheme: FeatureScheme | str = SCHEME_V2,
) -> PerSetFeatures:
    """Convert season totals into per-set features.

    Sets played of 0 divide as 1; the aggregate keeps reporting 0.
    """
    scheme = get_scheme(scheme)
    sets = aggregate.sets_played if aggregate.sets_played > 0 else 1
    return PerSetFeatures(scheme, _BUILDERS[scheme.version](aggregate, sets))


def build_season_vectors(
    players: Iterable[RawRecord],
    season_number: SeasonNumber,
    min_sets_played: float,
    scheme: FeatureScheme | str = SCHEME_V2,
) -> list[PlayerSeasonVectorRow]:
    """Build z-scored vectors for every qualifying player in a season.

    Args:
        players: Player mappings/objects carrying stat records.
        season_number: Season to vectorize.
        min_sets_played: Players below this many sets are dropped before
            population statistics are computed.
        scheme: Feature scheme or version tag.

    Returns:
        Rows in input order; empty when nobody qualifies.
    """
    scheme = get_scheme(scheme)

    qualified: list[tuple[RawRecord, PlayerSeasonAggregate, PerSetFeatures]] = []
    total = 0
    for player in players:
        total += 1
        aggregate = aggregate_player_season(player, season_number)
        if aggregate.sets_played < min_sets_played:
            continue
        qualified.append((player, aggregate, compute_per_set_features(aggregate, scheme)))

    if not qualified:
        logger.warning(
            f"{WARN} No players reached {min_sets_played} sets "
            f"in season {season_number} ({total} checked)"
        )
        return []

    population = compute_feature_population_stats(
        [features for _, _, features in qualified], scheme
    )

    rows = [
        PlayerSeasonVectorRow(
            player_id=str(read_field(player, "id")),
            player_name=str(read_field(player, "name") or ""),
            season_number=season_number,
            sets_played=aggregate.sets_played,
            raw_features=features,
            z_vector=tuple(standardize(features, population)),
        )
        for player, aggregate, features in qualified
    ]

    logger.info(
        "Season {}: {} of {} players qualified with >= {} sets ({})",
        season_number,
        len(rows),
        total,
        min_sets_played,
        scheme.version,
    )
    return rows


def rows_to_frame(rows: Iterable[PlayerSeasonVectorRow]) -> pd.DataFrame:
    """Flatten vector rows into a DataFrame.

    Columns: identity columns, one column per raw feature, and one ``z_``
    prefixed column per z-score.
    """
    import pandas as pd

    records = []
    for row in rows:
        record: dict[str, object] = {
            "player_id": row.player_id,
            "player_name": row.player_name,
            "season_number": row.season_number,
            "sets_played": row.sets_played,
            "vector_version": row.version,
        }
        record.update(row.raw_features.as_dict())
        record.update(
            {f"z_{key}": z for key, z in zip(row.raw_features, row.z_vector)}
        )
        records.append(record)
    return pd.DataFrame.from_records(records)


__all__ = [
    "PlayerSeasonVectorRow",
    "build_season_vectors",
    "compute_per_set_features",
    "rows_to_frame",
]
