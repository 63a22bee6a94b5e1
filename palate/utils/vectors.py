"""Dense vector helpers shared by profile aggregation and dish search."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class DimensionMismatchError(ValueError):
    """Raised when vectors that must share a dimension do not."""


def ensure_dimension(vector: Sequence[float], dimension: int, *, label: str = "vector") -> None:
    if len(vector) != dimension:
        raise DimensionMismatchError(f"{label} has dimension {len(vector)}, expected {dimension}")


def weighted_centroid(
    vectors: Sequence[Sequence[float]],
    weights: Sequence[float],
    dimension: int,
) -> np.ndarray | None:
    """Sum ``vectors`` scaled by ``weights`` and divide by how many there are.

    The divisor is the vector count, not the sum of weights, so negative
    weights pull the centroid away without renormalizing it.
    Returns None for an empty input.
    """
    if len(vectors) != len(weights):
        raise ValueError("vectors and weights must have the same length")
    if not vectors:
        return None
    for position, vector in enumerate(vectors):
        ensure_dimension(vector, dimension, label=f"vector[{position}]")
    matrix = np.asarray(vectors, dtype=float)
    scale = np.asarray(weights, dtype=float)
    return (matrix * scale[:, np.newaxis]).sum(axis=0) / len(vectors)


def cosine_distances(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Return ``1 - cosine`` between ``query`` and each row of ``matrix``.

    Rows or queries with zero norm are treated as orthogonal (distance 1).
    """
    q = np.asarray(query, dtype=float)
    if matrix.size == 0:
        return np.empty(0, dtype=float)
    if matrix.shape[1] != q.shape[0]:
        raise DimensionMismatchError(f"query has dimension {q.shape[0]}, index has {matrix.shape[1]}")
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    similarity = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
    return 1.0 - similarity
