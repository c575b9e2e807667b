"""Nearest neighbor search.

Exact k-nearest-neighbor tables used to build the fuzzy simplicial set.
Euclidean and cosine searches go through FAISS flat indices; any other
metric falls back to a brute-force ``scipy.spatial.distance.cdist``.

Every search returns ``(indices, distances)``, both of shape
``(n_samples, n_neighbors)``, with each row sorted by ascending distance and
the query point itself included.
"""

import numpy as np
import faiss
from scipy.spatial.distance import cdist

FAISS_METRICS = ("euclidean", "l2", "cosine")


class FaissKNN:
    """K-Nearest Neighbors search on a FAISS flat index.

    For ``metric="euclidean"`` an ``IndexFlatL2`` is used and the squared
    distances it reports are converted to distances. For ``metric="cosine"``
    rows are L2 normalized and stored in an ``IndexFlatIP`` so that the inner
    product is the cosine similarity; the distance is ``1 - similarity``.
    """

    def __init__(self, metric="euclidean"):
        """Initialize FaissKNN.

        Args:
            metric: str, "euclidean" (or "l2") or "cosine" (default: "euclidean")
        """
        if metric not in FAISS_METRICS:
            raise ValueError(
                f"FaissKNN supports metrics {FAISS_METRICS}, got {metric!r}"
            )
        self.metric = "euclidean" if metric == "l2" else metric
        self.index = None

    def _prepare(self, data):
        emb = np.ascontiguousarray(data, dtype=np.float32).copy()
        if self.metric == "cosine":
            faiss.normalize_L2(emb)
        return emb

    def add(self, data):
        """Build FAISS index from data.

        Args:
            data: np.ndarray of shape (n, dim)

        Returns:
            self for method chaining
        """
        emb = self._prepare(data)
        if self.metric == "cosine":
            self.index = faiss.IndexFlatIP(emb.shape[1])
        else:
            self.index = faiss.IndexFlatL2(emb.shape[1])
        self.index.add(emb)
        return self

    def search(self, data, n_neighbors):
        """Find k nearest neighbors.

        Args:
            data: np.ndarray of shape (n, dim) - query points
            n_neighbors: int, number of neighbors to find

        Returns:
            distances: np.ndarray of shape (n, n_neighbors) - ascending distances
            indices: np.ndarray of shape (n, n_neighbors) - neighbor indices
        """
        if self.index is None:
            raise ValueError("Must call add() before search()")
        if n_neighbors > self.index.ntotal:
            raise ValueError(
                f"Cannot find {n_neighbors} neighbors among {self.index.ntotal} points"
            )

        scores, indices = self.index.search(self._prepare(data), n_neighbors)
        scores = scores.astype(np.float64)

        if self.metric == "cosine":
            distances = np.maximum(1.0 - scores, 0.0)
        else:
            # IndexFlatL2 reports squared distances, which can dip below zero
            distances = np.sqrt(np.maximum(scores, 0.0))

        return distances, indices.astype(np.int64)

    def __repr__(self):
        n_points = self.index.ntotal if self.index is not None else 0
        return f"FaissKNN(metric='{self.metric}', n_points={n_points})"


def _sort_rows(dist_matrix, n_neighbors):
    """Take the n_neighbors smallest entries of every row, in ascending order."""
    n_samples = dist_matrix.shape[0]
    if n_neighbors < n_samples:
        part = np.argpartition(dist_matrix, n_neighbors - 1, axis=1)[:, :n_neighbors]
    else:
        part = np.tile(np.arange(n_samples), (n_samples, 1))
    part_dists = np.take_along_axis(dist_matrix, part, axis=1)
    order = np.argsort(part_dists, axis=1, kind="stable")
    indices = np.take_along_axis(part, order, axis=1)
    distances = np.take_along_axis(part_dists, order, axis=1)
    return indices.astype(np.int64), distances


def knn_search(X, n_neighbors, metric="euclidean", dtype=np.float64):
    """Exact k-nearest-neighbor table of every point in X.

    Args:
        X: np.ndarray of shape (n_samples, n_features), or of shape
            (n_samples, n_samples) when metric == "precomputed"
        n_neighbors: int, number of neighbors per point (self included)
        metric: str or callable, "euclidean", "cosine", "precomputed", any
            metric name understood by scipy's cdist, or a callable
            ``distance(x, y) -> float`` (default: "euclidean")
        dtype: numpy float dtype of the returned distances (default: float64)

    Returns:
        indices: np.ndarray of shape (n_samples, n_neighbors), int64
        distances: np.ndarray of shape (n_samples, n_neighbors), ascending per row
    """
    X = np.asarray(X)
    n_samples = X.shape[0]
    if not 0 < n_neighbors <= n_samples:
        raise ValueError(
            f"n_neighbors={n_neighbors} is invalid for a dataset of {n_samples} points"
        )

    if isinstance(metric, str) and metric == "precomputed":
        if X.ndim != 2 or X.shape[0] != X.shape[1]:
            raise ValueError(
                f"precomputed metric expects a square distance matrix, got shape {X.shape}"
            )
        indices, distances = _sort_rows(X.astype(np.float64), n_neighbors)
    elif isinstance(metric, str) and metric in FAISS_METRICS:
        knn = FaissKNN(metric=metric).add(X)
        distances, indices = knn.search(X, n_neighbors)
    else:
        dist_matrix = cdist(X, X, metric=metric)
        indices, distances = _sort_rows(dist_matrix, n_neighbors)

    # Float error can leave a small positive self distance; self is exactly 0
    is_self = indices == np.arange(n_samples)[:, None]
    distances[is_self] = 0.0
    order = np.argsort(distances, axis=1, kind="stable")
    indices = np.take_along_axis(indices, order, axis=1)
    distances = np.take_along_axis(distances, order, axis=1)

    return indices, distances.astype(dtype)
