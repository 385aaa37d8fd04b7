"""Season profile pipeline.

Runs the full chain for one (season, minimum sets, scheme) combination:
vectorization -> PCA -> archetype classification, and packages the result as
an immutable view for a presentation layer. Everything is recomputed from
scratch on every call; callers that need memoization should key it on
(season, min sets, vector version) and drop it when the underlying stats
change.

Example:
    >>> from volley_model.pipeline import build_season_profile
    >>> profile = build_season_profile(players, season_number=4, min_sets_played=5)
    >>> for point in profile.points:
    ...     print(point.row.player_name, point.projection, point.archetype)
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from volley_model.analysis.archetypes import (
    DEFAULT_RULES,
    Archetype,
    ArchetypeRules,
    classify_archetype,
)
from volley_model.analysis.pca import (
    PCAModel,
    Projection,
    compute_pca_3d,
    describe_components,
)
from volley_model.analysis.similarity import SimilarityResult, find_similar_players
from volley_model.config import Settings, get_settings
from volley_model.features.schema import SCHEME_V2, FeatureScheme, get_scheme
from volley_model.features.vectorization import (
    PlayerSeasonVectorRow,
    build_season_vectors,
)
from volley_model.logging import SUCCESS, get_logger, profile_run
from volley_model.types import AxisDescription, PlayerId, RawRecord, SeasonNumber

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlayerProfile:
    """One player's vector row, plot position and archetype."""

    row: PlayerSeasonVectorRow
    projection: Projection
    archetype: Archetype | None


@dataclass(frozen=True)
class SeasonProfile:
    """Read-only result of profiling one season population.

    Attributes:
        season_number: Season profiled.
        min_sets_played: Qualification threshold used.
        version: Feature scheme version of every row and of the PCA model.
        points: One PlayerProfile per qualifying player, in input order.
        model: PCA basis fitted on this population.
        axes: Loading-based descriptions of each projected axis.
    """

    season_number: SeasonNumber
    min_sets_played: float
    version: str
    points: tuple[PlayerProfile, ...]
    model: PCAModel
    axes: tuple[AxisDescription, ...]

    @property
    def rows(self) -> list[PlayerSeasonVectorRow]:
        return [point.row for point in self.points]

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    def profile_for(self, player_id: PlayerId) -> PlayerProfile | None:
        return next(
            (p for p in self.points if p.row.player_id == str(player_id)), None
        )

    def similar_to(self, player_id: PlayerId) -> SimilarityResult:
        return find_similar_players(self.rows, player_id)

    def archetype_counts(self) -> dict[str, int]:
        """Number of players per archetype name (unlabeled players excluded)."""
        counts = Counter(
            p.archetype.name for p in self.points if p.archetype is not None
        )
        return dict(counts.most_common())


def build_season_profile(
    players: Iterable[RawRecord],
    season_number: SeasonNumber,
    min_sets_played: float | None = None,
    scheme: FeatureScheme | str | None = None,
    rules: ArchetypeRules = DEFAULT_RULES,
    settings: Settings | None = None,
) -> SeasonProfile:
    """Profile every qualifying player in a season.

    Args:
        players: Player mappings/objects with nested stat records.
        season_number: Season to profile.
        min_sets_played: Qualification threshold. Defaults to settings.
        scheme: Feature scheme or version tag. Defaults to settings.
        rules: Archetype rule tables.
        settings: Settings to read defaults from. Uses the singleton if None.

    Returns:
        SeasonProfile; empty (no points, empty model) when nobody qualifies.
    """
    settings = settings or get_settings()
    if min_sets_played is None:
        min_sets_played = settings.min_sets_played
    resolved = get_scheme(scheme if scheme is not None else settings.vector_version)

    with profile_run(season_number, resolved.version, min_sets_played):
        players = list(players)
        rows = build_season_vectors(players, season_number, min_sets_played, resolved)

        pca = compute_pca_3d(
            [row.z_vector for row in rows],
            max_iterations=settings.pca_max_iterations,
            tolerance=settings.pca_tolerance,
        )

        if resolved.version == SCHEME_V2.version:
            classified = rows
        else:
            # Archetype rules read v2 keys; qualification is scheme independent,
            # so these rows line up with `rows` by position
            classified = build_season_vectors(
                players, season_number, min_sets_played, SCHEME_V2
            )

        points = tuple(
            PlayerProfile(
                row=row,
                projection=projection,
                archetype=classify_archetype(source.raw_features, rules),
            )
            for row, projection, source in zip(rows, pca.projections, classified)
        )

        profile = SeasonProfile(
            season_number=season_number,
            min_sets_played=min_sets_played,
            version=resolved.version,
            points=points,
            model=pca.model,
            axes=tuple(describe_components(pca.model, resolved)),
        )

        if points:
            labeled = sum(1 for p in points if p.archetype is not None)
            logger.info(
                f"{SUCCESS} Season {{}} profiled: {{}} players, {{}} labeled",
                season_number,
                len(points),
                labeled,
            )
        return profile


__all__ = [
    "PlayerProfile",
    "SeasonProfile",
    "build_season_profile",
]
