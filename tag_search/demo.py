from tag_search.benchmark_service.benchmark import benchmark
from tag_search.search_service.search import search_all_metrics
from tag_search.search_service.service import (
    CONFIG_PATH as SEARCH_CONFIG_PATH,
    build_corpus,
    metric_options,
)
from tag_search.tagging_service.service import (
    CONFIG_PATH as TAGGING_CONFIG_PATH,
    extract_label_maps,
    get_configured_tagger,
    load_samples,
)
from tag_search.util.logging import setup_logging
from tag_search.util.utils import load_config
from tag_search.vector_service.vectorizer import vectorize


def find_most_similar_image_per_metric(query_vector, corpus, image_names, config):
    results = search_all_metrics(
        query_vector, corpus, config["metrics"], **metric_options(config)
    )
    for result in results:
        if result.found and result.item_id in image_names:
            print(
                f"Using {result.metric.label} distance, this picture is most "
                f"similar to: {image_names[result.item_id]}"
            )
        else:
            print(f"No match found using {result.metric.label} distance.")
            if result.error:
                print(f"  ({result.error})")
    return results


def run_benchmark(query_vector, corpus, config):
    timings = benchmark(
        query_vector,
        corpus,
        config["metrics"],
        repeats=config["benchmark_repeats"],
        **metric_options(config),
    )
    for timing in timings:
        if timing.error:
            print(f"{timing.metric.label} distance computation failed: {timing.error}")
        else:
            print(
                f"{timing.metric.label} distance computation time: "
                f"{timing.elapsed_ms:.3f} ms"
            )
    return timings


def main():
    setup_logging(load_config()["log_level"])
    search_config = load_config(SEARCH_CONFIG_PATH)
    tagging_config = load_config(TAGGING_CONFIG_PATH)

    # Sample scenes with their display names
    samples = load_samples(tagging_config)
    image_names = {url: entry["name"] for url, entry in samples["images"].items()}
    tagger = get_configured_tagger(tagging_config)

    # Vocabulary comes from the corpus images only
    label_maps = extract_label_maps(image_names.keys(), tagger)
    corpus = build_corpus(label_maps)

    query_tags = tagger.extract_tags(samples["query"]["url"])
    query_vector = vectorize(corpus.vocabulary, query_tags)

    print("\nSearching for the most similar image...")
    find_most_similar_image_per_metric(query_vector, corpus, image_names, search_config)

    print("\nBenchmarking distance metrics...")
    run_benchmark(query_vector, corpus, search_config)


if __name__ == "__main__":
    main()
