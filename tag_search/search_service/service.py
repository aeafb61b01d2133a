from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Union

import logging
import numpy as np

from tag_search.distance_service.metrics import MetricKind
from tag_search.search_service.search import MetricResult, search_all_metrics
from tag_search.util.utils import load_config
from tag_search.vector_service.vectorizer import (
    VectorCorpus,
    dropped_labels,
    vectorize,
)
from tag_search.vector_service.vocabulary import LabelMap, Vocabulary, build_vocabulary

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent / "config.json"


@dataclass
class SearchReport:
    vocabulary: Vocabulary
    corpus: VectorCorpus
    query_vector: np.ndarray
    dropped_labels: List[str]
    results: List[MetricResult]


def metric_options(config: Dict) -> Dict:
    """Mahalanobis options from a search config."""
    return {
        "bias": bool(config.get("covariance_bias", False)),
        "tolerance": float(config.get("singular_tolerance", 1e-12)),
    }


def build_corpus(corpus_label_maps: Mapping[Hashable, LabelMap]) -> VectorCorpus:
    """Build the vocabulary from every item's labels and vectorize the items."""
    vocabulary = build_vocabulary(corpus_label_maps.values())
    return VectorCorpus.from_label_maps(vocabulary, corpus_label_maps)


def search_labels(
    corpus_label_maps: Mapping[Hashable, LabelMap],
    query_label_map: LabelMap,
    metrics: Optional[Iterable[Union[MetricKind, str]]] = None,
    config: Optional[Dict] = None,
) -> SearchReport:
    """Find the item most similar to the query under each configured metric.

    The vocabulary comes from the corpus alone. Query labels outside it are
    dropped from the query vector and reported in ``dropped_labels``.
    """
    config = config if config is not None else load_config(CONFIG_PATH)
    if metrics is None:
        metrics = config["metrics"]

    corpus = build_corpus(corpus_label_maps)
    query_vector = vectorize(corpus.vocabulary, query_label_map)

    dropped = dropped_labels(corpus.vocabulary, query_label_map)
    if dropped:
        logger.warning(
            "Query labels outside the corpus vocabulary are ignored: %s",
            ", ".join(dropped),
        )

    results = search_all_metrics(
        query_vector, corpus, metrics, **metric_options(config)
    )
    return SearchReport(
        vocabulary=corpus.vocabulary,
        corpus=corpus,
        query_vector=query_vector,
        dropped_labels=dropped,
        results=results,
    )
