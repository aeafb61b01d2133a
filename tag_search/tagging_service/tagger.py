from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Optional, Union

import json
import logging

import torch
import torch.nn as nn
import torch.nn.functional as F
import torchvision.models as models
from PIL import Image

from tag_search.util.utils import get_transform

logger = logging.getLogger(__name__)


class ImageTagger(ABC):
    """Abstract base class for tag extraction providers."""

    @abstractmethod
    def extract_tags(self, item) -> Dict[str, float]:
        """Return the label -> confidence map for a single item."""
        pass


class StaticTagger(ImageTagger):
    """Serves label maps that were extracted ahead of time."""

    def __init__(self, label_maps: Mapping[Hashable, Mapping[str, float]]):
        self.label_maps = {
            item: {str(label): float(conf) for label, conf in tags.items()}
            for item, tags in label_maps.items()
        }

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "StaticTagger":
        """Load ``{item: {label: confidence}}`` from a JSON file."""
        with Path(path).open("r") as f:
            return cls(json.load(f))

    def extract_tags(self, item) -> Dict[str, float]:
        if item not in self.label_maps:
            raise KeyError(f"No tags recorded for {item}")
        return dict(self.label_maps[item])


class TorchvisionTagger(ImageTagger):
    """Tags images with the top-k categories of a classification model."""

    def __init__(
        self,
        model: Optional[nn.Module] = None,
        categories: Optional[List[str]] = None,
        architecture: str = "resnet50",
        weights: str = "DEFAULT",
        transform: str = "imagenet",
        image_size: int = 224,
        top_k: int = 5,
        min_confidence: float = 0.0,
        device: str = "cpu",
    ):
        if model is None:
            weights_enum = models.get_model_weights(architecture)
            model_weights = (
                weights_enum.DEFAULT if weights == "DEFAULT" else weights_enum[weights]
            )
            model = models.get_model(architecture, weights=model_weights)
            categories = categories or list(model_weights.meta["categories"])
            self.transform = model_weights.transforms()
            logger.info("Loaded %s classifier with %s weights", architecture, model_weights)
        else:
            self.transform = get_transform(name=transform, image_size=image_size)

        if not categories:
            raise ValueError("Category names are required to label model outputs")

        self.categories = categories
        self.top_k = top_k
        self.min_confidence = min_confidence
        self.device = device
        self.model = model.to(device)
        self.model.eval()

    def extract_tags(self, item: Union[str, Path, Image.Image]) -> Dict[str, float]:
        image = Image.open(item) if isinstance(item, (str, Path)) else item
        if image.mode != "RGB":
            image = image.convert("RGB")

        tensor = self.transform(image).unsqueeze(0).to(self.device)
        with torch.no_grad():
            logits = self.model(tensor)
        probabilities = F.softmax(logits, dim=1).squeeze(0).cpu()

        if probabilities.shape[0] != len(self.categories):
            raise ValueError(
                f"Model produced {probabilities.shape[0]} scores for "
                f"{len(self.categories)} categories"
            )

        k = min(self.top_k, probabilities.shape[0])
        confidences, indices = torch.topk(probabilities, k)

        tags = {}
        for confidence, index in zip(confidences.tolist(), indices.tolist()):
            if confidence < self.min_confidence:
                break
            # Scores are sorted, keep the best one for repeated category names
            tags.setdefault(self.categories[index], confidence)
        return tags


def get_tagger(tagger_type: str = "static", **kwargs) -> ImageTagger:
    """Factory function to create image taggers."""
    taggers = {
        "static": StaticTagger,
        "torchvision": TorchvisionTagger,
    }

    if tagger_type not in taggers:
        raise ValueError(f"Unknown tagger type: {tagger_type}")

    return taggers[tagger_type](**kwargs)
