from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import time

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..benchmark_service.benchmark import benchmark
from ..search_service.service import (
    CONFIG_PATH,
    build_corpus,
    metric_options,
    search_labels,
)
from ..util.utils import load_config
from ..vector_service.vectorizer import vectorize


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    global config

    config = load_config(CONFIG_PATH)

    yield


app = FastAPI(title="Tag Vector Search", lifespan=lifespan)

# Global objects
config = None


def get_config() -> Dict:
    return config if config is not None else load_config(CONFIG_PATH)


class VectorizeRequest(BaseModel):
    label_maps: Dict[str, Dict[str, float]]


class VectorizeResponse(BaseModel):
    vocabulary: List[str]
    vectors: Dict[str, List[float]]


class SearchRequest(BaseModel):
    corpus: Dict[str, Dict[str, float]]
    query: Dict[str, float]
    metrics: Optional[List[str]] = None


class MetricResultModel(BaseModel):
    metric: str
    item_id: Optional[str] = None
    distance: Optional[float] = None
    error: Optional[str] = None


class SearchResponse(BaseModel):
    results: List[MetricResultModel]
    vocabulary: List[str]
    dropped_labels: List[str]
    query_time: float


class BenchmarkRequest(SearchRequest):
    repeats: int = 1


class BenchmarkResultModel(BaseModel):
    metric: str
    elapsed_ms: Optional[float] = None
    error: Optional[str] = None


class BenchmarkResponse(BaseModel):
    results: List[BenchmarkResultModel]


@app.post("/vectorize")
async def vectorize_label_maps(request: VectorizeRequest) -> VectorizeResponse:
    """Build the shared vocabulary and the dense vector of every item."""
    corpus = build_corpus(request.label_maps)
    return VectorizeResponse(
        vocabulary=list(corpus.vocabulary),
        vectors={item_id: vector.tolist() for item_id, vector in corpus.items()},
    )


@app.post("/search")
async def search_similar(request: SearchRequest) -> SearchResponse:
    """Find the most similar item under each requested metric."""
    start = time.perf_counter()
    try:
        report = search_labels(
            request.corpus, request.query, metrics=request.metrics, config=get_config()
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    results = [
        MetricResultModel(
            metric=result.metric.value,
            item_id=result.item_id,
            distance=result.distance,
            error=result.error,
        )
        for result in report.results
    ]
    return SearchResponse(
        results=results,
        vocabulary=list(report.vocabulary),
        dropped_labels=report.dropped_labels,
        query_time=time.perf_counter() - start,
    )


@app.post("/benchmark")
async def benchmark_metrics(request: BenchmarkRequest) -> BenchmarkResponse:
    """Time a full corpus scan under each requested metric."""
    search_config = get_config()
    corpus = build_corpus(request.corpus)
    query_vector = vectorize(corpus.vocabulary, request.query)
    metrics = request.metrics if request.metrics is not None else search_config["metrics"]

    try:
        timings = benchmark(
            query_vector,
            corpus,
            metrics,
            repeats=request.repeats,
            **metric_options(search_config),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BenchmarkResponse(
        results=[
            BenchmarkResultModel(
                metric=timing.metric.value,
                elapsed_ms=timing.elapsed_ms,
                error=timing.error,
            )
            for timing in timings
        ]
    )
