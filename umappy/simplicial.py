"""Fuzzy simplicial set construction.

Turns a nearest neighbor table into the weighted, symmetric graph that UMAP
optimizes against:

1. calibrate every point's neighbor distances (see ``calibration``),
2. convert them into directed membership strengths,
3. assemble the directed sparse matrix, summing duplicate entries,
4. symmetrize with a fuzzy union / intersection.
"""

import numpy as np
import scipy.sparse

from .calibration import smooth_knn_dists
from .knn import knn_search as default_knn_search
from ._utils import check_dtype


def compute_membership_strengths(knns, dists, rhos, sigmas):
    """Membership strengths of the 1-skeleton of every local fuzzy set.

    The point ``i`` is the column and its neighbor ``knns[i, j]`` the row of
    each triplet. The strength of a point to itself is 0.

    Args:
        knns: np.ndarray of shape (n_samples, n_neighbors) - neighbor indices
        dists: np.ndarray of shape (n_samples, n_neighbors) - neighbor distances
        rhos: np.ndarray of shape (n_samples,) - local connectivity radii
        sigmas: np.ndarray of shape (n_samples,) - bandwidths

    Returns:
        rows: np.ndarray of shape (n_samples * n_neighbors,)
        cols: np.ndarray of shape (n_samples * n_neighbors,)
        vals: np.ndarray of shape (n_samples * n_neighbors,)
    """
    knns = np.asarray(knns)
    dists = np.asarray(dists)
    if dists.dtype.kind != "f":
        dists = dists.astype(np.float64)
    rhos = np.asarray(rhos, dtype=dists.dtype)
    sigmas = np.asarray(sigmas, dtype=dists.dtype)
    n_samples, n_neighbors = knns.shape

    cols = np.repeat(np.arange(n_samples, dtype=knns.dtype), n_neighbors)
    rows = knns.ravel().copy()

    shifted = np.maximum(dists - rhos[:, None], 0.0)
    vals = np.exp(-shifted / sigmas[:, None]).astype(dists.dtype)
    vals[knns == np.arange(n_samples)[:, None]] = 0.0

    return rows, cols, vals.ravel()


def accumulate_triplets(rows, cols, vals, shape, dtype=None):
    """Assemble (row, col, value) triplets into a CSR matrix.

    Contributions sharing a (row, col) key are summed before compaction.

    Args:
        rows: array-like of int - row indices
        cols: array-like of int - column indices
        vals: array-like of float - values
        shape: tuple (n_rows, n_cols)
        dtype: numpy float dtype of the result (default: dtype of vals)

    Returns:
        scipy.sparse.csr_matrix of the given shape
    """
    rows = np.asarray(rows, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    vals = np.asarray(vals)
    dtype = vals.dtype if dtype is None else dtype

    keys = rows * shape[1] + cols
    unique_keys, inverse = np.unique(keys, return_inverse=True)
    summed = np.bincount(inverse.ravel(), weights=vals, minlength=unique_keys.shape[0])

    return scipy.sparse.csr_matrix(
        (summed.astype(dtype), (unique_keys // shape[1], unique_keys % shape[1])),
        shape=shape,
    )


def combine_fuzzy_sets(fs_set, set_op_ratio):
    """Symmetrize a directed membership matrix.

    Interpolates between fuzzy union (``set_op_ratio=1``) and fuzzy
    intersection (``set_op_ratio=0``):

        ratio * (A + A^T - A * A^T) + (1 - ratio) * (A * A^T)

    Args:
        fs_set: scipy.sparse matrix of shape (n, n) - directed memberships
        set_op_ratio: float in [0, 1]

    Returns:
        scipy.sparse.csr_matrix of shape (n, n), symmetric, without stored zeros
    """
    fs_set = scipy.sparse.csr_matrix(fs_set)
    transpose = fs_set.transpose().tocsr()
    prod = fs_set.multiply(transpose).tocsr()

    result = (
        set_op_ratio * (fs_set + transpose - prod)
        + (1.0 - set_op_ratio) * prod
    )
    result = scipy.sparse.csr_matrix(result, dtype=fs_set.dtype)
    result.eliminate_zeros()
    return result


def fuzzy_simplicial_set(
    X,
    n_neighbors,
    metric="euclidean",
    local_connectivity=1.0,
    set_op_ratio=1.0,
    dtype=np.float64,
    knn_search=None,
):
    """Build the global fuzzy simplicial set of X.

    Args:
        X: np.ndarray of shape (n_samples, n_features), or a square distance
            matrix when metric == "precomputed"
        n_neighbors: int, neighborhood size (self included)
        metric: str or callable passed to the neighbor search (default: "euclidean")
        local_connectivity: float, neighbors assumed locally connected (default: 1.0)
        set_op_ratio: float in [0, 1], 1 is fuzzy union, 0 fuzzy intersection
            (default: 1.0)
        dtype: numpy float dtype of the graph (default: float64)
        knn_search: callable ``(X, n_neighbors, metric) -> (indices, distances)``
            replacing the default exact search (default: None)

    Returns:
        scipy.sparse.csr_matrix of shape (n_samples, n_samples)
    """
    dtype = check_dtype(dtype)
    if knn_search is None:
        knns, dists = default_knn_search(X, n_neighbors, metric, dtype=dtype)
    else:
        knns, dists = knn_search(X, n_neighbors, metric)
        knns = np.asarray(knns, dtype=np.int64)
        dists = np.asarray(dists, dtype=dtype)

    rhos, sigmas = smooth_knn_dists(dists, n_neighbors, local_connectivity)
    rows, cols, vals = compute_membership_strengths(knns, dists, rhos, sigmas)

    n_samples = knns.shape[0]
    fs_set = accumulate_triplets(rows, cols, vals, (n_samples, n_samples), dtype=dtype)

    return combine_fuzzy_sets(fs_set, set_op_ratio)
