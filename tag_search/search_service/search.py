from dataclasses import dataclass
from typing import Hashable, Iterable, List, Mapping, Optional, Union

import logging
import numpy as np

from tag_search.distance_service.metrics import Metric, MetricKind, get_metric
from tag_search.util.exceptions import TagSearchError
from tag_search.util.vectors import as_vector
from tag_search.vector_service.vectorizer import VectorCorpus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearestMatch:
    item_id: Hashable
    distance: float


@dataclass(frozen=True)
class MetricResult:
    """Outcome of one nearest-neighbour pass under a single metric."""

    metric: MetricKind
    item_id: Optional[Hashable] = None
    distance: Optional[float] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.error is None and self.item_id is not None


def find_nearest(
    query,
    corpus: Mapping[Hashable, np.ndarray],
    metric: Union[Metric, MetricKind, str],
    **options,
) -> Optional[NearestMatch]:
    """Find the corpus item closest to the query by exhaustive scan.

    Items are visited in the corpus iteration order (insertion order for dicts
    and VectorCorpus) and only a strictly smaller distance replaces the current
    best, so the first of several tied items wins. Items whose distance is NaN
    are never matched.

    Args:
        query: Query feature vector
        corpus: Mapping of item id to feature vector
        metric: Distance function, or a metric kind resolved with ``get_metric``
        options: Passed to ``get_metric`` when ``metric`` is a kind

    Returns:
        NearestMatch, or None when the corpus is empty
    """
    if not callable(metric):
        metric = get_metric(metric, corpus, **options)

    if isinstance(corpus, VectorCorpus):
        query = as_vector(query, corpus.dimension, context="query")

    best: Optional[NearestMatch] = None
    for item_id, vector in corpus.items():
        distance = metric(query, vector)
        if np.isnan(distance):
            logger.debug("Skipping %r: distance is not a number", item_id)
            continue
        if best is None or distance < best.distance:
            best = NearestMatch(item_id=item_id, distance=distance)

    return best


def search_all_metrics(
    query,
    corpus: Mapping[Hashable, np.ndarray],
    metrics: Optional[Iterable[Union[MetricKind, str]]] = None,
    **options,
) -> List[MetricResult]:
    """Run ``find_nearest`` once per metric, isolating failures per metric."""
    if metrics is None:
        metrics = list(MetricKind)
    kinds = [MetricKind.parse(m) for m in metrics]

    results = []
    for kind in kinds:
        try:
            match = find_nearest(query, corpus, kind, **options)
        except TagSearchError as e:
            logger.warning("%s search failed: %s", kind.label, e)
            results.append(MetricResult(metric=kind, error=str(e)))
            continue

        if match is None:
            logger.info("No match found using %s distance", kind.label)
            results.append(MetricResult(metric=kind))
        else:
            results.append(
                MetricResult(
                    metric=kind, item_id=match.item_id, distance=match.distance
                )
            )

    return results
