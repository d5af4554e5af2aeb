"""Cosine similarity between embedding vectors."""

from collections.abc import Sequence

import numpy as np

from semroute.errors import DimensionMismatch


def as_vector(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert ``values`` to a one-dimensional, finite float64 array."""
    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1:
        raise DimensionMismatch(
            1, vector.ndim, f"Expected a one-dimensional vector, got {vector.ndim} dimensions"
        )
    if not np.isfinite(vector).all():
        raise ValueError("Vector contains NaN or infinite values")
    return vector


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """dot(a, b) / (|a| * |b|), or 0.0 when either magnitude is zero.

    Raises:
        DimensionMismatch: If the vectors have different lengths.
        ValueError: If either vector contains NaN or infinity.
    """
    a = as_vector(a)
    b = as_vector(b)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(b.shape[0], a.shape[0])

    magnitude = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if magnitude == 0.0:
        return 0.0
    return float(np.dot(a, b)) / magnitude
