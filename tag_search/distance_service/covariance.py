from typing import Sequence

import logging
import numpy as np

from tag_search.util.exceptions import (
    DimensionMismatchError,
    EmptySampleError,
    SingularCovarianceError,
)
from tag_search.util.vectors import as_vector

logger = logging.getLogger(__name__)

DEFAULT_SINGULAR_TOLERANCE = 1e-12


def covariance(vectors: Sequence[np.ndarray], bias: bool = False) -> np.ndarray:
    """
    Sample covariance of a set of equal-length vectors.

    Each dimension is mean-centered across the sample before the second-moment
    matrix is formed.

    Args:
        vectors: Feature vectors, one per observation, all of length D
        bias: Divide by N instead of N - 1

    Returns:
        Symmetric D x D covariance matrix. A single observation gives the zero
        matrix.

    Raises:
        EmptySampleError: if no vectors are given
        DimensionMismatchError: if the vectors differ in length
    """
    if len(vectors) == 0:
        raise EmptySampleError("Covariance requires at least one vector")

    dimension = as_vector(vectors[0], context="covariance sample 0").shape[0]
    data = np.vstack(
        [
            as_vector(v, dimension, context=f"covariance sample {i}")
            for i, v in enumerate(vectors)
        ]
    )
    n_samples = data.shape[0]

    if dimension == 0:
        return np.zeros((0, 0), dtype=np.float64)
    if n_samples == 1:
        return np.zeros((dimension, dimension), dtype=np.float64)

    matrix = np.atleast_2d(np.cov(data, rowvar=False, bias=bias))
    # Exact symmetry, np.cov can differ in the last ulp
    return (matrix + matrix.T) / 2.0


def invert(
    matrix: np.ndarray, tolerance: float = DEFAULT_SINGULAR_TOLERANCE
) -> np.ndarray:
    """
    Invert a square matrix, refusing singular or ill-conditioned input.

    Args:
        matrix: Square matrix
        tolerance: Reciprocal of the largest condition number accepted

    Returns:
        Inverse matrix

    Raises:
        SingularCovarianceError: if the matrix is (numerically) singular
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {matrix.shape}")
    if matrix.shape[0] == 0:
        return np.zeros((0, 0), dtype=np.float64)

    try:
        with np.errstate(divide="ignore", invalid="ignore"):
            condition = np.linalg.cond(matrix)
        if not np.isfinite(condition) or condition * tolerance > 1.0:
            logger.debug("Refusing to invert matrix with condition number %s", condition)
            raise SingularCovarianceError(
                f"Covariance matrix is singular (condition number {condition:.3g})"
            )
        inverse = np.linalg.inv(matrix)
    except SingularCovarianceError:
        raise
    except np.linalg.LinAlgError as e:
        raise SingularCovarianceError(f"Covariance matrix is singular: {e}") from e

    if not np.all(np.isfinite(inverse)):
        raise SingularCovarianceError("Covariance matrix inverse is not finite")

    return inverse


def check_square(matrix: np.ndarray, dimension: int) -> None:
    if matrix.shape != (dimension, dimension):
        raise DimensionMismatchError(dimension, matrix.shape[0], "covariance matrix")
