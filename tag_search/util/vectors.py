from typing import Optional

import numpy as np

from tag_search.util.exceptions import DimensionMismatchError


def as_vector(values, dimension: Optional[int] = None, context: str = "vector") -> np.ndarray:
    """Coerce ``values`` to a 1-D float64 array, checking its length if given."""
    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError(f"{context} must be one-dimensional, got shape {vector.shape}")
    if dimension is not None and vector.shape[0] != dimension:
        raise DimensionMismatchError(dimension, vector.shape[0], context)
    return vector
