# File: tests/test_layout.py

import numpy as np
import pytest
import scipy.sparse

from umappy import optimize_embedding, spectral_layout, random_layout


def random_fuzzy_graph(n, density, seed):
    A = scipy.sparse.random(n, n, density=density, format="csr", random_state=seed)
    B = A + A.T - A.multiply(A.T)
    B = scipy.sparse.csr_matrix(B)
    B.eliminate_zeros()
    return B


def test_optimize_embedding_large_graph_one_epoch():
    """
    One epoch over a 10,000 vertex random graph runs and keeps shape, dtype
    and identity of the buffer.
    """
    graph = random_fuzzy_graph(10000, 0.001, seed=0)
    result = spectral_layout(graph, 5)
    layout = result.layout if result.success else random_layout(10000, 5, random_state=0)

    embedding = optimize_embedding(layout, graph, 1, 1.0, 1.0, 5, 1.0, 2.0, random_state=0)

    assert embedding is layout
    assert embedding.shape == (10000, 5)
    assert embedding.dtype == np.float64
    assert np.all(np.isfinite(embedding))


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_optimize_embedding_preserves_dtype(dtype):
    graph = random_fuzzy_graph(200, 0.05, seed=1).astype(dtype)
    embedding = random_layout(200, 2, random_state=1, dtype=dtype)

    out = optimize_embedding(embedding, graph, 5, 1.0, 1.0, 5, 1.577, 0.895, random_state=1)

    assert out.dtype == dtype
    assert out.shape == (200, 2)


def test_optimize_embedding_pulls_connected_pair_together():
    """
    A single strong edge without negative sampling shrinks the distance of
    its endpoints.
    """
    graph = scipy.sparse.csr_matrix(np.array([[0.0, 1.0], [1.0, 0.0]]))
    embedding = np.array([[0.0, 0.0], [3.0, 4.0]])

    optimize_embedding(embedding, graph, 10, 0.1, 1.0, 0, 1.0, 1.0, random_state=0)

    assert np.linalg.norm(embedding[0] - embedding[1]) < 5.0


def test_optimize_embedding_repels_coincident_points():
    """
    Coincident points are pushed apart by the maximal repulsive step even
    though the attraction between them vanishes.
    """
    dense = np.zeros((3, 3))
    dense[0, 2] = dense[2, 0] = 1.0
    graph = scipy.sparse.csr_matrix(dense)
    embedding = np.zeros((3, 2))

    optimize_embedding(embedding, graph, 1, 1.0, 1.0, 20, 1.0, 1.0, random_state=0)

    assert np.any(embedding != 0)


def test_optimize_embedding_isolated_point_drifts():
    """
    A vertex without edges never gets an attractive update, but when it is
    drawn as a negative sample it is pushed away from the edge head, so it
    still moves.
    """
    dense = np.zeros((4, 4))
    dense[0, 1] = dense[1, 0] = 1.0
    dense[1, 2] = dense[2, 1] = 1.0
    graph = scipy.sparse.csr_matrix(dense)
    embedding = random_layout(4, 2, random_state=0)
    isolated = embedding[3].copy()

    optimize_embedding(embedding, graph, 200, 1.0, 1.0, 50, 1.0, 1.0, random_state=0)

    assert np.all(np.isfinite(embedding[3]))
    assert not np.array_equal(embedding[3], isolated)


def test_optimize_embedding_repulsion_moves_sampled_vertex():
    """
    Vertex 2 has no edges, so any movement comes from being drawn as a
    negative sample. It is pushed away from the heads sitting at the origin.
    """
    dense = np.zeros((3, 3))
    dense[0, 1] = dense[1, 0] = 1.0
    graph = scipy.sparse.csr_matrix(dense)
    embedding = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 0.0]])

    optimize_embedding(embedding, graph, 1, 1.0, 1.0, 20, 1.0, 1.0, random_state=0)

    assert embedding[2, 0] > 1.0
    assert embedding[2, 1] == 0.0


def test_optimize_embedding_is_reproducible():
    graph = random_fuzzy_graph(300, 0.02, seed=2)
    first = random_layout(300, 2, random_state=5)
    second = first.copy()

    optimize_embedding(first, graph, 10, 1.0, 1.0, 5, 1.577, 0.895, random_state=7)
    optimize_embedding(second, graph, 10, 1.0, 1.0, 5, 1.577, 0.895, random_state=7)

    np.testing.assert_array_equal(first, second)


def test_optimize_embedding_sequential_and_scheduled():
    """
    batch_size=1 (strictly sequential) and the scheduled sampler are valid
    configurations of the same optimizer.
    """
    graph = random_fuzzy_graph(100, 0.05, seed=3)
    embedding = random_layout(100, 2, random_state=3)

    out = optimize_embedding(
        embedding, graph, 3, 1.0, 1.0, 2, 1.577, 0.895,
        sampler="scheduled", random_state=3, batch_size=1,
    )

    assert np.all(np.isfinite(out))
    assert np.all(np.abs(out) < 100)
