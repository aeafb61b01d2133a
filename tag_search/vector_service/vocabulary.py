from typing import Dict, Iterable, Iterator, Mapping, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

LabelMap = Mapping[str, float]


class Vocabulary(Sequence):
    """Ordered, duplicate-free sequence of labels with a stable label -> index map.

    Index ``i`` denotes the same label for the lifetime of the vocabulary. A new
    vocabulary means every vector built against the old one must be rebuilt.
    """

    def __init__(self, labels: Iterable[str] = ()):
        self._labels: Tuple[str, ...] = tuple(dict.fromkeys(labels))
        self._index: Dict[str, int] = {
            label: i for i, label in enumerate(self._labels)
        }

    def __getitem__(self, i):
        return self._labels[i]

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __contains__(self, label) -> bool:
        return label in self._index

    def __eq__(self, other) -> bool:
        if isinstance(other, Vocabulary):
            return self._labels == other._labels
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"Vocabulary({list(self._labels)!r})"

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def index_of(self, label: str) -> int:
        """Return the position of ``label``; raises KeyError if it is unknown."""
        return self._index[label]


def build_vocabulary(label_maps: Iterable[LabelMap]) -> Vocabulary:
    """Merge label maps into one vocabulary, ordered by first appearance."""
    labels = []
    for label_map in label_maps:
        labels.extend(label_map.keys())

    vocabulary = Vocabulary(labels)
    logger.debug("Built vocabulary with %d labels", len(vocabulary))
    return vocabulary
