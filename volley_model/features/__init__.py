"""Feature engineering for volley model.

This module turns raw per-game stat records into standardized per-set
feature vectors for one season population.

Submodules:
    schema: Versioned feature key orders and the PerSetFeatures map
    aggregation: Season totals and sets played per player
    normalization: Population mean/std and z-scores
    vectorization: Filtering, per-set rates and z-vector rows

Example:
    >>> from volley_model.features import build_season_vectors
    >>> rows = build_season_vectors(players, season_number=4, min_sets_played=5)
"""

from __future__ import annotations

# Season aggregation
from volley_model.features.aggregation import (
    STAT_FIELDS,
    PlayerSeasonAggregate,
    aggregate_player_season,
    available_seasons,
)

# Population normalization
from volley_model.features.normalization import (
    STD_FLOOR,
    FeatureStats,
    PopulationNormalizer,
    PopulationStats,
    compute_feature_population_stats,
    standardize,
    z_score,
)

# Feature schemes
from volley_model.features.schema import (
    FEATURE_COUNT,
    FEATURE_ORDER,
    SCHEME_V1,
    SCHEME_V2,
    SCHEMES,
    VECTOR_VERSION,
    FeatureScheme,
    PerSetFeatures,
    get_scheme,
)

# Vectorization
from volley_model.features.vectorization import (
    PlayerSeasonVectorRow,
    build_season_vectors,
    compute_per_set_features,
    rows_to_frame,
)

__all__ = [
    "FEATURE_COUNT",
    "FEATURE_ORDER",
    "SCHEMES",
    "SCHEME_V1",
    "SCHEME_V2",
    "STAT_FIELDS",
    "STD_FLOOR",
    "VECTOR_VERSION",
    "FeatureScheme",
    "FeatureStats",
    "PerSetFeatures",
    "PlayerSeasonAggregate",
    "PlayerSeasonVectorRow",
    "PopulationNormalizer",
    "PopulationStats",
    "aggregate_player_season",
    "available_seasons",
    "build_season_vectors",
    "compute_feature_population_stats",
    "compute_per_set_features",
    "get_scheme",
    "rows_to_frame",
    "standardize",
    "z_score",
]
