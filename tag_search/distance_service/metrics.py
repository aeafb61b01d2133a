from enum import Enum
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from tag_search.distance_service.covariance import (
    DEFAULT_SINGULAR_TOLERANCE,
    check_square,
    covariance,
    invert,
)
from tag_search.util.vectors import as_vector
from tag_search.vector_service.vectorizer import VectorCorpus

Corpus = Union[Mapping, Sequence[np.ndarray]]
Metric = Callable[[np.ndarray, np.ndarray], float]


class MetricKind(Enum):
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    CHEBYSHEV = "chebyshev"
    MAHALANOBIS = "mahalanobis"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: Union[str, "MetricKind"]) -> "MetricKind":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown metric: {name}")


def _pair(a, b) -> Tuple[np.ndarray, np.ndarray]:
    a = as_vector(a, context="first vector")
    b = as_vector(b, a.shape[0], context="second vector")
    return a, b


# Euclidean (L2 norm)
def euclidean(a, b) -> float:
    a, b = _pair(a, b)
    return float(np.sqrt(np.sum((a - b) ** 2)))


# Manhattan (L1 norm)
def manhattan(a, b) -> float:
    a, b = _pair(a, b)
    return float(np.sum(np.abs(a - b)))


# Chebyshev (L-infinity norm)
def chebyshev(a, b) -> float:
    a, b = _pair(a, b)
    if a.size == 0:
        return 0.0
    return float(np.max(np.abs(a - b)))


def _corpus_vectors(corpus: Corpus) -> list:
    if isinstance(corpus, Mapping):
        return list(corpus.values())
    return list(corpus)


def mahalanobis(
    a,
    b,
    corpus: Corpus,
    bias: bool = False,
    tolerance: float = DEFAULT_SINGULAR_TOLERANCE,
    inverse_covariance: Optional[np.ndarray] = None,
) -> float:
    """
    Mahalanobis distance between two vectors under the corpus covariance.

    The covariance and its inverse are rebuilt from ``corpus`` on every call
    unless ``inverse_covariance`` is supplied.

    Raises:
        SingularCovarianceError: if the corpus covariance cannot be inverted
        DimensionMismatchError: if any vector has the wrong length
        EmptySampleError: if the corpus holds no vectors
    """
    a, b = _pair(a, b)
    if inverse_covariance is None:
        inverse_covariance = invert(
            covariance(_corpus_vectors(corpus), bias=bias), tolerance=tolerance
        )
    check_square(inverse_covariance, a.shape[0])

    diff = a - b
    squared = float(diff @ inverse_covariance @ diff)
    # Rounding can push a near-zero quadratic form below zero
    return float(np.sqrt(max(squared, 0.0)))


class MahalanobisMetric:
    """Mahalanobis distance bound to one corpus.

    The inverse covariance is computed on first use and reused for the rest of
    the pass, so a scan costs one inversion instead of one per candidate. A
    VectorCorpus shares its memoized inverse across passes. Plain mappings must
    not change while the bound metric is in use.
    """

    def __init__(
        self,
        corpus: Corpus,
        bias: bool = False,
        tolerance: float = DEFAULT_SINGULAR_TOLERANCE,
    ):
        self.corpus = corpus
        self.bias = bias
        self.tolerance = tolerance
        self._inverse = None

    @property
    def inverse_covariance(self) -> np.ndarray:
        if self._inverse is None:
            if isinstance(self.corpus, VectorCorpus):
                self._inverse = self.corpus.inverse_covariance(
                    bias=self.bias, tolerance=self.tolerance
                )
            else:
                self._inverse = invert(
                    covariance(_corpus_vectors(self.corpus), bias=self.bias),
                    tolerance=self.tolerance,
                )
        return self._inverse

    def __call__(self, a, b) -> float:
        return mahalanobis(
            a, b, self.corpus, inverse_covariance=self.inverse_covariance
        )


def get_metric(
    kind: Union[str, MetricKind], corpus: Optional[Corpus] = None, **options
) -> Metric:
    """Return a two-argument distance function for ``kind``.

    Mahalanobis needs ``corpus``; ``options`` (bias, tolerance) apply only to it.
    """
    kind = MetricKind.parse(kind)
    if kind is MetricKind.EUCLIDEAN:
        return euclidean
    elif kind is MetricKind.MANHATTAN:
        return manhattan
    elif kind is MetricKind.CHEBYSHEV:
        return chebyshev
    elif kind is MetricKind.MAHALANOBIS:
        if corpus is None:
            raise ValueError("Mahalanobis distance requires a corpus")
        return MahalanobisMetric(corpus, **options)
    raise ValueError(f"Unsupported metric: {kind}")


def compute_distance(
    kind: Union[str, MetricKind], a, b, corpus: Optional[Corpus] = None, **options
) -> float:
    """Single entry point: distance between ``a`` and ``b`` under ``kind``."""
    kind = MetricKind.parse(kind)
    if kind is MetricKind.MAHALANOBIS:
        if corpus is None:
            raise ValueError("Mahalanobis distance requires a corpus")
        if isinstance(corpus, VectorCorpus):
            return MahalanobisMetric(corpus, **options)(a, b)
        return mahalanobis(a, b, corpus, **options)
    return get_metric(kind)(a, b)
