"""Versioned feature schemes and the fixed-key per-set feature value type.

Every consumer of a player vector (z-scoring, PCA, archetype rules, axis
labels) relies on positional alignment with a scheme's key order. Changing
the key list or its order requires a new version tag, and vectors built under
different versions are never compared.

Schemes:
    v2: 13 features, spike and ape attacks kept separate (default)
    v1: 12 features, attacks combined with kill percentages and plus-minus

Example:
    >>> from volley_model.features.schema import SCHEME_V2, PerSetFeatures
    >>> features = PerSetFeatures.zeros(SCHEME_V2)
    >>> features["digs_per_set"]
    0.0
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

import numpy as np

from volley_model.types import UnknownSchemeError


@dataclass(frozen=True)
class FeatureScheme:
    """Ordered feature key list identified by a version tag."""

    version: str
    keys: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.keys)

    def index(self, key: str) -> int:
        """Return the vector position of a feature key."""
        return self.keys.index(key)


SCHEME_V2 = FeatureScheme(
    version="v2",
    keys=(
        "spike_kills_per_set",
        "spike_attempts_per_set",
        "ape_kills_per_set",
        "ape_attempts_per_set",
        "blocks_per_set",
        "assists_per_set",
        "aces_per_set",
        "digs_per_set",
        "block_follows_per_set",
        "spiking_errors_per_set",
        "setting_errors_per_set",
        "serving_errors_per_set",
        "misc_errors_per_set",
    ),
)

SCHEME_V1 = FeatureScheme(
    version="v1",
    keys=(
        "kills_per_set",
        "attempts_per_set",
        "total_spike_pct",
        "spike_pct",
        "ape_pct",
        "blocks_per_set",
        "assists_per_set",
        "aces_per_set",
        "digs_per_set",
        "receives_per_set",
        "errors_per_set",
        "plus_minus_per_set",
    ),
)

SCHEMES: dict[str, FeatureScheme] = {
    SCHEME_V1.version: SCHEME_V1,
    SCHEME_V2.version: SCHEME_V2,
}

VECTOR_VERSION: str = SCHEME_V2.version
FEATURE_ORDER: tuple[str, ...] = SCHEME_V2.keys
FEATURE_COUNT: int = len(FEATURE_ORDER)


def get_scheme(version: str | FeatureScheme) -> FeatureScheme:
    """Resolve a scheme from its version tag.

    Raises:
        UnknownSchemeError: If the version is not registered.
    """
    if isinstance(version, FeatureScheme):
        return version
    try:
        return SCHEMES[version]
    except KeyError:
        raise UnknownSchemeError(
            f"Unknown vector version '{version}'. Available: {sorted(SCHEMES)}"
        ) from None


class PerSetFeatures(Mapping[str, float]):
    """Immutable per-set rate map with exactly the keys of one scheme.

    Iteration follows the scheme order, so ``list(features.values())`` is
    the raw feature vector.
    """

    __slots__ = ("_scheme", "_values")

    def __init__(self, scheme: FeatureScheme, values: Mapping[str, float]) -> None:
        missing = [k for k in scheme.keys if k not in values]
        extra = [k for k in values if k not in scheme.keys]
        if missing or extra:
            raise KeyError(
                f"Feature keys do not match scheme {scheme.version}: "
                f"missing={missing}, unexpected={extra}"
            )
        self._scheme = scheme
        self._values = tuple(float(values[k]) for k in scheme.keys)

    @classmethod
    def zeros(cls, scheme: FeatureScheme = SCHEME_V2) -> PerSetFeatures:
        return cls(scheme, dict.fromkeys(scheme.keys, 0.0))

    @property
    def scheme(self) -> FeatureScheme:
        return self._scheme

    @property
    def version(self) -> str:
        return self._scheme.version

    def __getitem__(self, key: str) -> float:
        try:
            return self._values[self._scheme.index(key)]
        except ValueError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._scheme.keys)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PerSetFeatures):
            return self._scheme == other._scheme and self._values == other._values
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash((self._scheme.version, self._values))

    def __repr__(self) -> str:
        pairs = ", ".join(f"{k}={v:.3f}" for k, v in zip(self._scheme.keys, self._values))
        return f"PerSetFeatures({self._scheme.version}: {pairs})"

    def to_array(self) -> np.ndarray:
        """Return the values as a float vector in scheme order."""
        return np.array(self._values, dtype=float)

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self._scheme.keys, self._values))


__all__ = [
    "FEATURE_COUNT",
    "FEATURE_ORDER",
    "SCHEMES",
    "SCHEME_V1",
    "SCHEME_V2",
    "VECTOR_VERSION",
    "FeatureScheme",
    "PerSetFeatures",
    "get_scheme",
]
