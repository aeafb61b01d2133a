from pathlib import Path
from typing import Dict, Hashable, Iterable, Optional

import json
import logging

from tqdm import tqdm

from tag_search.tagging_service.tagger import ImageTagger, StaticTagger, get_tagger
from tag_search.util.utils import load_config

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent / "config.json"


def extract_label_maps(
    items: Iterable[Hashable], tagger: ImageTagger
) -> Dict[Hashable, Dict[str, float]]:
    """Tag every item, preserving the order the items were given in."""
    label_maps = {}
    for item in tqdm(items, desc="Extracting tags"):
        label_maps[item] = tagger.extract_tags(item)
        logger.info("Extracted %d tags for %s", len(label_maps[item]), item)
    return label_maps


def load_samples(config: Optional[Dict] = None) -> Dict:
    """Load the bundled sample scenes: ``{"images": {...}, "query": {...}}``."""
    config = config if config is not None else load_config(CONFIG_PATH)
    path = Path(config["sample_tags_path"])
    if not path.is_absolute():
        path = Path(__file__).parent / path
    with path.open("r") as f:
        return json.load(f)


def get_configured_tagger(config: Optional[Dict] = None) -> ImageTagger:
    """Build the tagger named by the tagging config."""
    config = config if config is not None else load_config(CONFIG_PATH)
    if config["tagger"] == "static":
        samples = load_samples(config)
        label_maps = {url: entry["tags"] for url, entry in samples["images"].items()}
        label_maps[samples["query"]["url"]] = samples["query"]["tags"]
        return StaticTagger(label_maps)

    return get_tagger(
        config["tagger"],
        architecture=config["architecture"],
        weights=config["weights"],
        top_k=config["top_k"],
        min_confidence=config["min_confidence"],
        device=config["device"],
    )
