"""Nearest and farthest neighbor search over season z-vectors.

Distances are Euclidean over the full standardized vector, not the 3D
projection, so players that look close on the plot are not necessarily the
most similar.

Example:
    >>> from volley_model.analysis.similarity import find_similar_players
    >>> result = find_similar_players(rows, player_id="17")
    >>> result.most_similar.row.player_name, round(result.most_similar.distance, 2)
    ('Kai', 1.37)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from volley_model.features.vectorization import PlayerSeasonVectorRow
from volley_model.logging import get_logger
from volley_model.types import PlayerId, Vector, VectorDimensionError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Neighbor:
    """Another player and their distance from the queried player."""

    row: PlayerSeasonVectorRow
    distance: float


@dataclass(frozen=True)
class SimilarityResult:
    """Most and least similar players; both None when undefined."""

    player_id: PlayerId
    most_similar: Neighbor | None = None
    least_similar: Neighbor | None = None


def euclidean_distance(a: Vector, b: Vector) -> float:
    """Euclidean distance between two equal-length vectors.

    Raises:
        VectorDimensionError: If the lengths differ.
    """
    if len(a) != len(b):
        raise VectorDimensionError(
            f"Cannot compare vectors with lengths {len(a)} and {len(b)}"
        )
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def _find_row(
    rows: Sequence[PlayerSeasonVectorRow],
    player_id: PlayerId,
) -> PlayerSeasonVectorRow | None:
    return next((row for row in rows if row.player_id == str(player_id)), None)


def rank_neighbors(
    rows: Sequence[PlayerSeasonVectorRow],
    player_id: PlayerId,
    limit: int | None = None,
) -> list[Neighbor]:
    """All other players ordered by ascending distance.

    The first row carrying ``player_id`` is the target; other rows sharing
    that id are still ranked. Ties keep input order. Returns an empty list
    when the player is not in ``rows``.
    """
    target = _find_row(rows, player_id)
    if target is None:
        logger.warning("Player {} not found among {} rows", player_id, len(rows))
        return []

    neighbors = [
        Neighbor(row=row, distance=euclidean_distance(target.z_vector, row.z_vector))
        for row in rows
        if row is not target
    ]
    neighbors.sort(key=lambda n: n.distance)
    return neighbors[:limit] if limit is not None else neighbors


def find_similar_players(
    rows: Sequence[PlayerSeasonVectorRow],
    player_id: PlayerId,
) -> SimilarityResult:
    """Find the closest and farthest other player in a season population.

    Args:
        rows: Season vector rows built with one scheme.
        player_id: Player to compare against everyone else.

    Returns:
        SimilarityResult; both neighbors are None with fewer than two rows or
        when the player is absent. Ties go to the earlier row.
    """
    player_id = str(player_id)
    if len(rows) < 2:
        return SimilarityResult(player_id=player_id)

    target = _find_row(rows, player_id)
    if target is None:
        logger.warning("Player {} not found among {} rows", player_id, len(rows))
        return SimilarityResult(player_id=player_id)

    nearest: Neighbor | None = None
    farthest: Neighbor | None = None
    for row in rows:
        if row is target:
            continue
        distance = euclidean_distance(target.z_vector, row.z_vector)
        if nearest is None or distance < nearest.distance:
            nearest = Neighbor(row=row, distance=distance)
        if farthest is None or distance > farthest.distance:
            farthest = Neighbor(row=row, distance=distance)

    return SimilarityResult(
        player_id=player_id,
        most_similar=nearest,
        least_similar=farthest,
    )


__all__ = [
    "Neighbor",
    "SimilarityResult",
    "euclidean_distance",
    "find_similar_players",
    "rank_neighbors",
]
