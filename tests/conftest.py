"""
Shared fixtures for the tag vector search tests.
"""

import numpy as np
import pytest

from tag_search.vector_service.vectorizer import VectorCorpus
from tag_search.vector_service.vocabulary import build_vocabulary


@pytest.fixture
def scene_label_maps():
    """Label maps for a small corpus of scenes, in insertion order."""
    return {
        "city": {"building": 0.95, "sky": 0.80, "street": 0.70},
        "forest": {"tree": 0.98, "plant": 0.85, "sky": 0.30},
        "ocean": {"water": 0.97, "sky": 0.90, "wave": 0.60},
        "desert": {"sand": 0.96, "sky": 0.85, "dune": 0.50},
    }


@pytest.fixture
def scene_corpus(scene_label_maps):
    vocabulary = build_vocabulary(scene_label_maps.values())
    return VectorCorpus.from_label_maps(vocabulary, scene_label_maps)


@pytest.fixture
def spread_corpus():
    """Two-dimensional corpus whose covariance is well conditioned."""
    return {
        "a": np.array([1.0, 0.0]),
        "b": np.array([0.0, 1.0]),
        "c": np.array([2.0, 2.0]),
        "d": np.array([-1.0, 0.5]),
        "e": np.array([0.5, -1.5]),
    }
