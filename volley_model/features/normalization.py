"""Population normalization of per-set features.

Standardizes each feature against the season population that survived the
minimum-sets filter. Statistics use the population (biased) variance computed
as E[X^2] - E[X]^2, clamped at zero.

Formula: z = (x - μ_population) / σ_population, or 0 when σ <= 1e-9

Example:
    >>> from volley_model.features.normalization import PopulationNormalizer
    >>> normalizer = PopulationNormalizer().fit(feature_rows)
    >>> z_vector = normalizer.transform(feature_rows[0])
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from volley_model.features.schema import SCHEME_V2, FeatureScheme, PerSetFeatures
from volley_model.logging import get_logger
from volley_model.types import InsufficientDataError

logger = get_logger(__name__)

# Standard deviations at or below this are treated as constant features
STD_FLOOR: float = 1e-9


@dataclass(frozen=True)
class FeatureStats:
    """Population statistics for a single feature."""

    feature: str
    mean: float
    std: float

    @property
    def is_constant(self) -> bool:
        return self.std <= STD_FLOOR


@dataclass(frozen=True)
class PopulationStats:
    """Per-feature statistics over one season population.

    Attributes:
        scheme: Feature scheme the statistics are aligned with.
        features: Mapping of feature key to FeatureStats, in scheme order.
        size: Number of rows the statistics were computed from.
    """

    scheme: FeatureScheme
    features: Mapping[str, FeatureStats]
    size: int

    def __getitem__(self, key: str) -> FeatureStats:
        return self.features[key]

    @property
    def means(self) -> np.ndarray:
        return np.array([self.features[k].mean for k in self.scheme.keys])

    @property
    def stds(self) -> np.ndarray:
        return np.array([self.features[k].std for k in self.scheme.keys])


def _infer_scheme(rows: Sequence[Mapping[str, float]]) -> FeatureScheme:
    first = rows[0]
    if isinstance(first, PerSetFeatures):
        return first.scheme
    return SCHEME_V2


def compute_feature_population_stats(
    feature_rows: Sequence[Mapping[str, float]],
    scheme: FeatureScheme | None = None,
) -> PopulationStats:
    """Compute mean and population standard deviation per feature.

    Args:
        feature_rows: Raw per-set feature maps, one per qualifying player.
        scheme: Key order to use. Inferred from the rows when omitted.

    Returns:
        PopulationStats aligned with the scheme.

    Raises:
        InsufficientDataError: If ``feature_rows`` is empty. Callers are
            expected to short-circuit an empty population first.
    """
    if len(feature_rows) == 0:
        raise InsufficientDataError(
            "Cannot compute population statistics for an empty population"
        )

    scheme = scheme or _infer_scheme(feature_rows)
    matrix = np.array(
        [[float(row[key]) for key in scheme.keys] for row in feature_rows],
        dtype=float,
    )
    n = matrix.shape[0]

    sums = matrix.sum(axis=0)
    squared_sums = (matrix * matrix).sum(axis=0)
    # Identical values can leave floating-point residue in E[X^2] - E[X]^2
    constant = np.all(matrix == matrix[0], axis=0)

    stats: dict[str, FeatureStats] = {}
    for i, key in enumerate(scheme.keys):
        mean = float(sums[i]) / n
        variance = max(0.0, float(squared_sums[i]) / n - mean * mean)
        std = 0.0 if constant[i] else math.sqrt(variance)
        stats[key] = FeatureStats(feature=key, mean=mean, std=std)
        logger.debug("{}: mean={:.4f}, std={:.4f}", key, mean, std)

    return PopulationStats(scheme=scheme, features=stats, size=n)


def z_score(value: float, stats: FeatureStats) -> float:
    """Standardize one value, returning 0 for constant features."""
    if stats.is_constant:
        return 0.0
    return (value - stats.mean) / stats.std


def standardize(
    features: Mapping[str, float],
    population: PopulationStats,
) -> list[float]:
    """Convert a raw feature map into a z-score vector in scheme order."""
    return [
        z_score(float(features[key]), population[key])
        for key in population.scheme.keys
    ]


class PopulationNormalizer:
    """Z-score normalizer fitted on one season population.

    Attributes:
        scheme: Feature scheme; inferred from the fitted rows when None.
        population: Fitted statistics, or None before ``fit``.
        fitted_: Whether the normalizer has been fitted.

    Example:
        >>> normalizer = PopulationNormalizer()
        >>> normalizer.fit(rows)
        >>> normalizer.transform_value(1.5, "digs_per_set")
        0.42
    """

    def __init__(self, scheme: FeatureScheme | None = None) -> None:
        self.scheme = scheme
        self.population: PopulationStats | None = None
        self.fitted_ = False

    def fit(self, feature_rows: Sequence[Mapping[str, float]]) -> PopulationNormalizer:
        """Compute population statistics.

        Returns:
            Self for method chaining.
        """
        self.population = compute_feature_population_stats(feature_rows, self.scheme)
        self.scheme = self.population.scheme
        self.fitted_ = True
        logger.info(
            "Fitted normalizer on {} players ({} features, {})",
            self.population.size,
            len(self.scheme),
            self.scheme.version,
        )
        return self

    def _require_population(self) -> PopulationStats:
        if not self.fitted_ or self.population is None:
            raise ValueError("Normalizer has not been fitted. Call fit() first.")
        return self.population

    def transform(self, features: Mapping[str, float]) -> list[float]:
        """Return the z-score vector of one feature map."""
        return standardize(features, self._require_population())

    def transform_value(self, value: float, feature: str) -> float:
        """Standardize a single value of one feature."""
        return z_score(value, self._require_population()[feature])

    def inverse_transform_value(self, z_value: float, feature: str) -> float:
        """Map a z-score back to the original per-set scale."""
        stats = self._require_population()[feature]
        if stats.is_constant:
            return stats.mean
        return z_value * stats.std + stats.mean


__all__ = [
    "STD_FLOOR",
    "FeatureStats",
    "PopulationNormalizer",
    "PopulationStats",
    "compute_feature_population_stats",
    "standardize",
    "z_score",
]
