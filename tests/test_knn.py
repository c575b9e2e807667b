# File: tests/test_knn.py

import numpy as np
import pytest
from scipy.spatial.distance import cdist

from umappy import FaissKNN, knn_search


def brute_force(data, k, metric):
    dist = cdist(data, data, metric=metric)
    order = np.argsort(dist, axis=1, kind="stable")[:, :k]
    return order, np.take_along_axis(dist, order, axis=1)


@pytest.mark.parametrize("metric", ["euclidean", "cosine"])
def test_knn_search_matches_brute_force(metric):
    """
    The FAISS backed search returns the same distances as an exhaustive
    scipy computation, sorted ascending, with self first.
    """
    rng = np.random.default_rng(0)
    data = rng.random((200, 8))
    k = 7

    indices, distances = knn_search(data, k, metric)
    _, expected = brute_force(data, k, metric)

    assert indices.shape == (200, k)
    assert distances.shape == (200, k)
    assert indices.dtype == np.int64
    np.testing.assert_array_equal(indices[:, 0], np.arange(200))
    np.testing.assert_array_equal(distances[:, 0], 0.0)
    assert np.all(np.diff(distances, axis=1) >= 0)
    np.testing.assert_allclose(distances, expected, atol=1e-4)


def test_knn_search_precomputed():
    rng = np.random.default_rng(1)
    data = rng.random((50, 3))
    dist = cdist(data, data)

    indices, distances = knn_search(dist, 5, "precomputed")
    expected_idx, expected_dist = brute_force(data, 5, "euclidean")

    np.testing.assert_array_equal(indices, expected_idx)
    np.testing.assert_allclose(distances, expected_dist)


def test_knn_search_scipy_metric_and_dtype():
    rng = np.random.default_rng(2)
    data = rng.random((40, 5))

    indices, distances = knn_search(data, 4, "chebyshev", dtype=np.float32)
    expected_idx, expected_dist = brute_force(data, 4, "chebyshev")

    assert distances.dtype == np.float32
    np.testing.assert_array_equal(indices, expected_idx)
    np.testing.assert_allclose(distances, expected_dist, rtol=1e-6)


def test_knn_search_rejects_too_many_neighbors():
    with pytest.raises(ValueError):
        knn_search(np.random.rand(5, 3), 6)


def test_knn_search_rejects_non_square_precomputed():
    with pytest.raises(ValueError):
        knn_search(np.random.rand(5, 3), 2, "precomputed")


def test_faiss_knn_requires_add():
    knn = FaissKNN()
    with pytest.raises(ValueError):
        knn.search(np.random.rand(3, 2), 1)


def test_faiss_knn_unknown_metric():
    with pytest.raises(ValueError):
        FaissKNN(metric="manhattan")


def test_faiss_knn_repr():
    knn = FaissKNN(metric="l2").add(np.random.rand(10, 2))
    assert repr(knn) == "FaissKNN(metric='euclidean', n_points=10)"
