from dataclasses import dataclass
from typing import Hashable, Iterable, List, Mapping, Optional, Union

import logging
import time
import numpy as np

from tag_search.distance_service.metrics import MetricKind, get_metric
from tag_search.util.exceptions import TagSearchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkResult:
    metric: MetricKind
    elapsed_ms: Optional[float] = None
    error: Optional[str] = None


def time_metric(
    query,
    corpus: Mapping[Hashable, np.ndarray],
    kind: Union[MetricKind, str],
    repeats: int = 1,
    **options,
) -> float:
    """Wall-clock milliseconds to compute the query's distance to every item.

    Each repeat binds a fresh metric, so Mahalanobis pays for its covariance
    inversion on every repeat over a plain mapping.
    """
    if repeats < 1:
        raise ValueError(f"repeats must be positive, got {repeats}")

    start = time.perf_counter()
    for _ in range(repeats):
        metric = get_metric(kind, corpus, **options)
        for vector in corpus.values():
            metric(query, vector)
    return (time.perf_counter() - start) * 1000.0 / repeats


def benchmark(
    query,
    corpus: Mapping[Hashable, np.ndarray],
    metrics: Optional[Iterable[Union[MetricKind, str]]] = None,
    repeats: int = 1,
    **options,
) -> List[BenchmarkResult]:
    """Time a full scan of the corpus under each metric."""
    if metrics is None:
        metrics = list(MetricKind)
    kinds = [MetricKind.parse(m) for m in metrics]

    results = []
    for kind in kinds:
        try:
            elapsed_ms = time_metric(query, corpus, kind, repeats, **options)
        except TagSearchError as e:
            logger.warning("%s benchmark failed: %s", kind.label, e)
            results.append(BenchmarkResult(metric=kind, error=str(e)))
            continue

        logger.debug("%s scan took %.3f ms", kind.label, elapsed_ms)
        results.append(BenchmarkResult(metric=kind, elapsed_ms=elapsed_ms))

    return results
