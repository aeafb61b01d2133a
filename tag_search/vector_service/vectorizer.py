from typing import Dict, Hashable, Iterator, List, Mapping

import logging
import numpy as np

from tag_search.distance_service.covariance import (
    DEFAULT_SINGULAR_TOLERANCE,
    covariance,
    invert,
)
from tag_search.util.vectors import as_vector
from tag_search.vector_service.vocabulary import LabelMap, Vocabulary

logger = logging.getLogger(__name__)


def vectorize(vocabulary: Vocabulary, label_map: LabelMap) -> np.ndarray:
    """Project a sparse label map onto the dense vocabulary space.

    Labels missing from the map become 0.0. Labels missing from the vocabulary
    are dropped.

    Returns:
        Read-only float64 vector of length ``len(vocabulary)``.
    """
    vector = np.array(
        [float(label_map.get(label, 0.0)) for label in vocabulary], dtype=np.float64
    )
    vector.flags.writeable = False
    return vector


def dropped_labels(vocabulary: Vocabulary, label_map: LabelMap) -> List[str]:
    """Labels of ``label_map`` that a projection onto ``vocabulary`` discards."""
    return [label for label in label_map if label not in vocabulary]


class VectorCorpus(Mapping):
    """Immutable, insertion-ordered mapping of item id -> feature vector.

    All vectors share one vocabulary. Since the corpus never changes after
    construction, derived statistics such as the inverse covariance are memoized
    on the instance.
    """

    def __init__(self, vocabulary: Vocabulary, vectors: Mapping[Hashable, np.ndarray]):
        self._vocabulary = vocabulary
        self._vectors: Dict[Hashable, np.ndarray] = {}
        for item_id, values in vectors.items():
            vector = as_vector(values, len(vocabulary), context=f"item {item_id!r}")
            if vector.flags.writeable:
                vector = vector.copy()
                vector.flags.writeable = False
            self._vectors[item_id] = vector
        self._inverse_covariance: Dict[tuple, np.ndarray] = {}

    @classmethod
    def from_label_maps(
        cls, vocabulary: Vocabulary, label_maps: Mapping[Hashable, LabelMap]
    ) -> "VectorCorpus":
        vectors = {
            item_id: vectorize(vocabulary, label_map)
            for item_id, label_map in label_maps.items()
        }
        logger.debug(
            "Vectorized %d items into %d dimensions", len(vectors), len(vocabulary)
        )
        return cls(vocabulary, vectors)

    def __getitem__(self, item_id) -> np.ndarray:
        return self._vectors[item_id]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._vectors)

    def __len__(self) -> int:
        return len(self._vectors)

    def __repr__(self) -> str:
        return f"VectorCorpus(items={len(self)}, dimension={self.dimension})"

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    @property
    def dimension(self) -> int:
        return len(self._vocabulary)

    def matrix(self) -> np.ndarray:
        """Stack the vectors into an (items x dimension) array."""
        if not self._vectors:
            return np.empty((0, self.dimension), dtype=np.float64)
        return np.vstack(list(self._vectors.values()))

    def inverse_covariance(
        self, bias: bool = False, tolerance: float = DEFAULT_SINGULAR_TOLERANCE
    ) -> np.ndarray:
        """Inverse sample covariance of the corpus, computed once per estimator."""
        key = (bias, tolerance)
        if key not in self._inverse_covariance:
            matrix = covariance(list(self._vectors.values()), bias=bias)
            self._inverse_covariance[key] = invert(matrix, tolerance=tolerance)
        return self._inverse_covariance[key]
