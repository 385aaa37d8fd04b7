"""Type definitions and protocols for the volleyball profiling pipeline.

This module defines common types, protocols, and type aliases used throughout
the application, together with the exception hierarchy.

Example:
    >>> from volley_model.types import FeatureMap
    >>> def score(features: FeatureMap) -> float:
    ...     return features["spike_kills_per_set"]
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, TypedDict

# =============================================================================
# Type Aliases
# =============================================================================

PlayerId = str
SeasonNumber = int
FeatureKey = str
FeatureMap = Mapping[str, float]
Vector = Sequence[float]

# Raw records arrive either as API JSON (dicts) or as objects with attributes
RawRecord = Any


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class FeaturePredicate(Protocol):
    """Boolean test over a raw per-set feature map."""

    def __call__(self, features: FeatureMap) -> bool:
        """Return True when the profile matches."""
        ...


# =============================================================================
# TypedDicts for Structured Data
# =============================================================================


class AxisLoading(TypedDict):
    """One feature's contribution to a principal component."""

    feature: FeatureKey
    loading: float


class AxisDescription(TypedDict):
    """Human-readable description of one projected axis."""

    axis: str
    label: str
    explained_variance: float
    explained_variance_ratio: float
    top_loadings: list[AxisLoading]


class ScatterPoint(TypedDict):
    """Single player point in a 3D scatter payload."""

    player_id: PlayerId
    player_name: str
    sets_played: float
    x: float
    y: float
    z: float
    archetype_id: str | None
    archetype_name: str | None
    color: str


# =============================================================================
# Exceptions
# =============================================================================


class VolleyModelError(Exception):
    """Base exception for volleyball profiling errors."""


class VectorDimensionError(VolleyModelError):
    """Two vectors that must align have different lengths.

    Signals inconsistent feature ordering in the caller; never recovered.
    """


class InsufficientDataError(VolleyModelError):
    """Not enough data for calculation."""


class UnknownSchemeError(VolleyModelError):
    """Requested feature scheme version is not registered."""


class DataLoadError(VolleyModelError):
    """Player export could not be read or parsed."""
