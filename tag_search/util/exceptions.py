import numpy as np


class TagSearchError(Exception):
    """Base class for errors raised by the vectorization and search core."""


class DimensionMismatchError(TagSearchError, ValueError):
    """Two vectors, or a vector and a vocabulary, have different lengths."""

    def __init__(self, expected: int, actual: int, context: str = "vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Dimension mismatch for {context}: expected length {expected}, got {actual}"
        )


class SingularCovarianceError(TagSearchError, np.linalg.LinAlgError):
    """The corpus covariance matrix cannot be inverted."""


class EmptySampleError(TagSearchError, ValueError):
    """A corpus statistic was requested over zero vectors."""
