"""Internal utilities for umappy."""

import numbers

import numpy as np
import scipy.sparse

FLOAT_DTYPES = (np.float32, np.float64)


def check_random_state(seed):
    """Turn seed into a numpy Generator.

    Args:
        seed: None, int, np.random.Generator or np.random.RandomState

    Returns:
        np.random.Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if isinstance(seed, np.random.RandomState):
        return np.random.default_rng(seed.randint(np.iinfo(np.int32).max))
    if seed is None or isinstance(seed, numbers.Integral):
        return np.random.default_rng(seed)
    raise ValueError(f"{seed!r} cannot be used to seed a numpy random Generator")


def check_dtype(dtype):
    """Validate the numeric precision parameter.

    Args:
        dtype: np.float32 or np.float64 (or anything np.dtype accepts for them)

    Returns:
        np.dtype
    """
    try:
        dtype = np.dtype(dtype)
    except TypeError:
        raise ValueError(f"dtype must be float32 or float64, got {dtype!r}")
    if dtype.type not in FLOAT_DTYPES:
        raise ValueError(f"dtype must be float32 or float64, got {dtype}")
    return dtype


def is_symmetric(graph, rtol=1e-5, atol=1e-8):
    """Check that a sparse (or dense) square matrix equals its transpose.

    Args:
        graph: scipy.sparse matrix or np.ndarray of shape (n, n)
        rtol: float, relative tolerance
        atol: float, absolute tolerance

    Returns:
        bool
    """
    if graph.shape[0] != graph.shape[1]:
        return False
    if scipy.sparse.issparse(graph):
        graph = graph.tocsr()
        diff = (graph - graph.T).tocoo()
        diff.eliminate_zeros()
        if diff.nnz == 0:
            return True
        scale = abs(graph).maximum(abs(graph.T)).tocsr()
        bound = atol + rtol * np.asarray(scale[diff.row, diff.col]).ravel()
        return bool(np.all(np.abs(diff.data) <= bound))
    graph = np.asarray(graph)
    return bool(np.allclose(graph, graph.T, rtol=rtol, atol=atol))
