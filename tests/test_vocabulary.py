import pytest

from tag_search.vector_service.vocabulary import Vocabulary, build_vocabulary


def test_build_vocabulary_merges_and_deduplicates():
    vocabulary = build_vocabulary(
        [{"cat": 0.9, "dog": 0.1}, {"dog": 0.8, "bird": 0.5}]
    )

    assert len(vocabulary) == 3
    assert set(vocabulary) == {"cat", "dog", "bird"}


def test_build_vocabulary_orders_by_first_appearance():
    vocabulary = build_vocabulary(
        [{"cat": 0.9, "dog": 0.1}, {"dog": 0.8, "bird": 0.5}]
    )

    assert list(vocabulary) == ["cat", "dog", "bird"]
    assert vocabulary.index_of("bird") == 2
    assert vocabulary[0] == "cat"


def test_build_vocabulary_is_stable_across_builds():
    label_maps = [{"b": 1.0, "a": 0.5}, {"c": 0.2, "a": 0.1}]

    assert build_vocabulary(label_maps) == build_vocabulary(label_maps)


def test_empty_inputs_give_empty_vocabulary():
    assert len(build_vocabulary([])) == 0
    assert len(build_vocabulary([{}, {}])) == 0


def test_build_vocabulary_accepts_generators():
    vocabulary = build_vocabulary(m for m in [{"x": 1.0}, {"y": 1.0}])

    assert vocabulary.labels == ("x", "y")


def test_unknown_label_index_raises_key_error():
    vocabulary = Vocabulary(["cat"])

    assert "cat" in vocabulary
    assert "dog" not in vocabulary
    with pytest.raises(KeyError):
        vocabulary.index_of("dog")
