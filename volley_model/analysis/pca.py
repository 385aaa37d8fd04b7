"""Principal component projection of season z-vectors to 3D.

Finds the top three principal directions of a season's standardized vectors
and projects every player onto them for plotting.

Algorithm:
    1. Center each column on its mean.
    2. Sample covariance C = Xcᵀ·Xc / (N - 1).
    3. Power iteration from a uniform unit vector, up to ``max_iterations``
       multiplications or until the change norm drops below ``tolerance``.
       The eigenvalue is the Rayleigh quotient vᵀ·C·v, after which C is
       deflated by λ·v·vᵀ (on a private copy) before the next component.
    4. Components sorted by eigenvalue, descending.
    5. Components with no remaining variance are dropped. Coordinates are
       the dot products of the centered vector with each component; missing
       axes are 0.

Power iteration is an approximation. Components are unit length, and each is
oriented so its largest absolute loading is positive.

Example:
    >>> from volley_model.analysis.pca import compute_pca_3d, project_z_vector_to_3d
    >>> result = compute_pca_3d([row.z_vector for row in rows])
    >>> project_z_vector_to_3d(rows[0].z_vector, result.model) == result.projections[0]
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from volley_model.features.schema import FeatureScheme
from volley_model.logging import get_logger
from volley_model.types import AxisDescription, AxisLoading, Vector, VectorDimensionError

logger = get_logger(__name__)

# Constants
NUM_COMPONENTS: int = 3
DEFAULT_MAX_ITERATIONS: int = 100
DEFAULT_TOLERANCE: float = 1e-6
MIN_VECTOR_NORM: float = 1e-10
# Components explaining no more variance than this are dropped
MIN_EIGENVALUE: float = 1e-10
AXIS_NAMES: tuple[str, ...] = ("x", "y", "z")


class Projection(NamedTuple):
    """Projected 3D coordinates."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class PCAModel:
    """Fitted principal component basis.

    Attributes:
        components: Up to three unit-length component vectors.
        explained_variance: Eigenvalue of each component, descending.
        mean: Column means used for centering.
        explained_variance_ratio: Each eigenvalue over the covariance trace.
    """

    components: tuple[tuple[float, ...], ...] = ()
    explained_variance: tuple[float, ...] = ()
    mean: tuple[float, ...] = ()
    explained_variance_ratio: tuple[float, ...] = ()

    @property
    def is_empty(self) -> bool:
        return len(self.mean) == 0

    @property
    def dimension(self) -> int:
        return len(self.mean)


@dataclass(frozen=True)
class PCAResult:
    """Projections of every input vector plus the model that produced them."""

    projections: list[Projection]
    model: PCAModel


def dot(a: Vector, b: Vector) -> float:
    """Dot product of two equal-length vectors.

    Raises:
        VectorDimensionError: If the lengths differ.
    """
    if len(a) != len(b):
        raise VectorDimensionError(
            f"Cannot take dot product of vectors with lengths {len(a)} and {len(b)}"
        )
    return float(np.dot(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))


def _as_matrix(z_vectors: Sequence[Vector]) -> np.ndarray:
    width = len(z_vectors[0])
    for i, vec in enumerate(z_vectors):
        if len(vec) != width:
            raise VectorDimensionError(
                f"Vector {i} has {len(vec)} features, expected {width}"
            )
    return np.array([list(vec) for vec in z_vectors], dtype=float)


def power_iteration(
    matrix: np.ndarray,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> tuple[float, np.ndarray, int]:
    """Dominant eigenpair of a symmetric matrix.

    Args:
        matrix: Square symmetric matrix.
        max_iterations: Multiplication cap.
        tolerance: Stop once ||v_k - v_{k-1}|| falls below this.

    Returns:
        Tuple of (eigenvalue, unit eigenvector, iterations used).
    """
    n = matrix.shape[0]
    vector = np.full(n, 1.0 / np.sqrt(n))

    iterations = 0
    while iterations < max_iterations:
        product = matrix @ vector
        norm = float(np.linalg.norm(product))
        if norm < MIN_VECTOR_NORM:
            # Matrix annihilates the current direction; no variance left
            break
        next_vector = product / norm
        change = float(np.linalg.norm(next_vector - vector))
        vector = next_vector
        iterations += 1
        if change < tolerance:
            break

    eigenvalue = float(vector @ (matrix @ vector))
    return eigenvalue, vector, iterations


def top_eigenpairs(
    covariance: np.ndarray,
    k: int = NUM_COMPONENTS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[tuple[float, np.ndarray]]:
    """Extract up to ``k`` eigenpairs by power iteration with deflation.

    The caller's matrix is left untouched.
    """
    matrix = np.array(covariance, dtype=float, copy=True)
    pairs: list[tuple[float, np.ndarray]] = []

    for i in range(min(k, matrix.shape[0])):
        eigenvalue, vector, iterations = power_iteration(
            matrix, max_iterations=max_iterations, tolerance=tolerance
        )
        logger.debug(
            "Component {}: eigenvalue={:.4f} after {} iterations",
            i + 1,
            eigenvalue,
            iterations,
        )
        pairs.append((eigenvalue, vector.copy()))
        matrix -= eigenvalue * np.outer(vector, vector)

    return pairs


def _orient(vector: np.ndarray) -> np.ndarray:
    pivot = int(np.argmax(np.abs(vector)))
    return -vector if vector[pivot] < 0 else vector


def compute_pca_3d(
    z_vectors: Sequence[Vector],
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> PCAResult:
    """Fit a 3-component PCA on a population and project every vector.

    Args:
        z_vectors: Equal-length standardized vectors, one per player.
        max_iterations: Power iteration cap per component.
        tolerance: Power iteration convergence threshold.

    Returns:
        PCAResult with one Projection per input vector, in input order. An
        empty population yields no projections and an empty model.

    Raises:
        VectorDimensionError: If the vectors have different lengths.
    """
    if len(z_vectors) == 0:
        return PCAResult(projections=[], model=PCAModel())

    data = _as_matrix(z_vectors)
    num_samples, num_features = data.shape

    mean = data.mean(axis=0)
    centered = data - mean

    # A single sample has no spread; keep the covariance at zero
    denominator = num_samples - 1 if num_samples > 1 else 1
    covariance = (centered.T @ centered) / denominator

    pairs = top_eigenpairs(
        covariance, max_iterations=max_iterations, tolerance=tolerance
    )
    pairs = [pair for pair in pairs if pair[0] > MIN_EIGENVALUE]
    pairs.sort(key=lambda pair: pair[0], reverse=True)

    components: list[np.ndarray] = []
    for _, vector in pairs:
        norm = float(np.linalg.norm(vector))
        components.append(_orient(vector / norm if norm > 0 else vector))

    eigenvalues = [value for value, _ in pairs]
    trace = float(np.trace(covariance))
    ratios = [value / trace if trace > 0 else 0.0 for value in eigenvalues]

    model = PCAModel(
        components=tuple(tuple(float(v) for v in c) for c in components),
        explained_variance=tuple(float(v) for v in eigenvalues),
        mean=tuple(float(v) for v in mean),
        explained_variance_ratio=tuple(float(r) for r in ratios),
    )

    basis = np.array(components) if components else np.zeros((0, num_features))
    coords = centered @ basis.T
    projections = [_to_projection(row) for row in coords]

    logger.info(
        "PCA on {} vectors x {} features: explained variance {}",
        num_samples,
        num_features,
        [round(v, 4) for v in model.explained_variance],
    )
    return PCAResult(projections=projections, model=model)


def _to_projection(values: Sequence[float]) -> Projection:
    padded = [float(v) for v in values[:NUM_COMPONENTS]]
    padded += [0.0] * (NUM_COMPONENTS - len(padded))
    return Projection(*padded)


def project_z_vector_to_3d(z_vector: Vector, model: PCAModel) -> Projection:
    """Project one vector with a precomputed model.

    With an empty model, the first three raw components are used directly
    (missing ones as 0).

    Raises:
        VectorDimensionError: If the vector and model dimensions differ.
    """
    if model.is_empty:
        return _to_projection(list(z_vector))

    if len(z_vector) != model.dimension:
        raise VectorDimensionError(
            f"Vector has {len(z_vector)} features but the model was fitted on "
            f"{model.dimension}"
        )

    centered = [value - mu for value, mu in zip(z_vector, model.mean)]
    return _to_projection([dot(centered, component) for component in model.components])


def _pretty(feature: str) -> str:
    return feature.removesuffix("_per_set").replace("_", " ").title()


def describe_components(
    model: PCAModel,
    scheme: FeatureScheme,
    top_n: int = 3,
) -> list[AxisDescription]:
    """Summarize each axis by its heaviest feature loadings.

    Args:
        model: Fitted PCA model.
        scheme: Scheme the model's vectors were built with.
        top_n: Number of loadings to report per axis.

    Returns:
        One AxisDescription per component, x first.

    Raises:
        VectorDimensionError: If the model does not match the scheme.
    """
    if model.is_empty:
        return []
    if model.dimension != len(scheme):
        raise VectorDimensionError(
            f"Model has {model.dimension} features, scheme {scheme.version} "
            f"has {len(scheme)}"
        )

    axes: list[AxisDescription] = []
    for i, component in enumerate(model.components):
        order = sorted(range(len(component)), key=lambda j: -abs(component[j]))
        loadings: list[AxisLoading] = [
            {"feature": scheme.keys[j], "loading": component[j]}
            for j in order[:top_n]
        ]
        label = " / ".join(
            f"{'+' if item['loading'] >= 0 else '-'}{_pretty(item['feature'])}"
            for item in loadings
        )
        ratio = (
            model.explained_variance_ratio[i]
            if i < len(model.explained_variance_ratio)
            else 0.0
        )
        axes.append(
            {
                "axis": AXIS_NAMES[i],
                "label": label,
                "explained_variance": model.explained_variance[i],
                "explained_variance_ratio": ratio,
                "top_loadings": loadings,
            }
        )
    return axes


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_TOLERANCE",
    "NUM_COMPONENTS",
    "PCAModel",
    "PCAResult",
    "Projection",
    "compute_pca_3d",
    "describe_components",
    "dot",
    "power_iteration",
    "project_z_vector_to_3d",
    "top_eigenpairs",
]
