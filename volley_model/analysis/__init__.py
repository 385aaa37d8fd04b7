"""Population analysis for volley model.

Submodules:
    pca: Power-iteration PCA projection of z-vectors to 3D
    archetypes: Layered rule-based archetype labeling
    similarity: Nearest and farthest neighbors by Euclidean distance

Example:
    >>> from volley_model.analysis import compute_pca_3d, classify_archetype
    >>> result = compute_pca_3d([row.z_vector for row in rows])
    >>> classify_archetype(rows[0].raw_features)
"""

from __future__ import annotations

# Archetype classifier
from volley_model.analysis.archetypes import (
    ARCHETYPE_CATALOG,
    DEFAULT_RULES,
    NEUTRAL_COLOR,
    Archetype,
    ArchetypeRules,
    DualRoleRule,
    SpecialPair,
    StandaloneRule,
    Trait,
    classify_archetype,
    classify_rows,
)

# PCA engine
from volley_model.analysis.pca import (
    NUM_COMPONENTS,
    PCAModel,
    PCAResult,
    Projection,
    compute_pca_3d,
    describe_components,
    project_z_vector_to_3d,
)

# Similarity engine
from volley_model.analysis.similarity import (
    Neighbor,
    SimilarityResult,
    euclidean_distance,
    find_similar_players,
    rank_neighbors,
)

__all__ = [
    "ARCHETYPE_CATALOG",
    "DEFAULT_RULES",
    "NEUTRAL_COLOR",
    "NUM_COMPONENTS",
    "Archetype",
    "ArchetypeRules",
    "DualRoleRule",
    "Neighbor",
    "PCAModel",
    "PCAResult",
    "Projection",
    "SimilarityResult",
    "SpecialPair",
    "StandaloneRule",
    "Trait",
    "classify_archetype",
    "classify_rows",
    "compute_pca_3d",
    "describe_components",
    "euclidean_distance",
    "find_similar_players",
    "project_z_vector_to_3d",
    "rank_neighbors",
]
