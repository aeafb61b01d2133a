import numpy as np
import pytest

from tag_search.distance_service.covariance import covariance, invert
from tag_search.util.exceptions import (
    DimensionMismatchError,
    EmptySampleError,
    SingularCovarianceError,
    TagSearchError,
)


def test_covariance_matches_unbiased_estimator(spread_corpus):
    vectors = list(spread_corpus.values())

    matrix = covariance(vectors)

    np.testing.assert_allclose(matrix, np.cov(np.vstack(vectors), rowvar=False))
    np.testing.assert_array_equal(matrix, matrix.T)


def test_biased_covariance_divides_by_sample_count(spread_corpus):
    vectors = list(spread_corpus.values())
    data = np.vstack(vectors)
    centered = data - data.mean(axis=0)

    matrix = covariance(vectors, bias=True)

    np.testing.assert_allclose(matrix, centered.T @ centered / len(vectors))


def test_single_vector_gives_zero_matrix():
    matrix = covariance([np.array([0.3, 0.7, 0.1])])

    np.testing.assert_array_equal(matrix, np.zeros((3, 3)))


def test_one_dimensional_vectors_give_one_by_one_matrix():
    matrix = covariance([np.array([1.0]), np.array([3.0])])

    assert matrix.shape == (1, 1)
    assert matrix[0, 0] == pytest.approx(2.0)


def test_zero_dimensional_vectors_give_empty_matrix():
    assert covariance([np.array([]), np.array([])]).shape == (0, 0)


def test_covariance_requires_vectors():
    with pytest.raises(EmptySampleError):
        covariance([])


def test_covariance_rejects_ragged_vectors():
    with pytest.raises(DimensionMismatchError):
        covariance([np.array([1.0, 2.0]), np.array([1.0])])


def test_invert_returns_inverse(spread_corpus):
    matrix = covariance(list(spread_corpus.values()))

    inverse = invert(matrix)

    np.testing.assert_allclose(matrix @ inverse, np.eye(2), atol=1e-10)


def test_invert_zero_matrix_raises_singular():
    with pytest.raises(SingularCovarianceError):
        invert(np.zeros((2, 2)))


def test_invert_rank_deficient_matrix_raises_singular():
    matrix = np.array([[1.0, 2.0], [2.0, 4.0]])

    with pytest.raises(SingularCovarianceError) as exc_info:
        invert(matrix)

    assert isinstance(exc_info.value, TagSearchError)
    assert isinstance(exc_info.value, np.linalg.LinAlgError)


def test_invert_empty_matrix():
    assert invert(np.zeros((0, 0))).shape == (0, 0)


def test_invert_rejects_non_square_matrix():
    with pytest.raises(ValueError):
        invert(np.zeros((2, 3)))


def test_empty_sample_error_is_a_search_error():
    with pytest.raises(TagSearchError):
        covariance([])


def test_invert_non_finite_matrix_raises_singular():
    matrix = np.array([[1.0, np.nan], [np.nan, 2.0]])

    with pytest.raises(SingularCovarianceError):
        invert(matrix)


def test_covariance_of_nan_sample_cannot_be_inverted():
    vectors = [np.array([1.0, np.nan]), np.array([0.0, 1.0]), np.array([0.3, 0.2])]

    with pytest.raises(SingularCovarianceError):
        invert(covariance(vectors))
