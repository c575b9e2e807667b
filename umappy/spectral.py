"""Initial layouts for the embedding optimizer.

Two strategies are available:

- random: coordinates drawn uniformly from [-10, 10].
- spectral: eigenvectors of the symmetric normalized graph Laplacian, which
  capture the global structure of the graph before refinement.

The spectral attempt reports failure through a ``LayoutResult`` instead of
raising, and ``initialize_embedding`` falls back to a random layout when it
does not succeed.
"""

import warnings

import numpy as np
import scipy.sparse
from scipy.sparse.csgraph import connected_components
from scipy.sparse.linalg import eigsh, ArpackError, ArpackNoConvergence

from ._utils import check_random_state, check_dtype

INIT_MAX_COORD = 10.0
INIT_NOISE = 1e-4


class LayoutResult:
    """Outcome of a spectral layout attempt.

    Attributes:
        success: bool, whether a usable layout was produced
        layout: np.ndarray of shape (n_samples, n_components), or None on failure
        message: str, reason for the failure ("" on success)
    """

    def __init__(self, layout=None, message=""):
        self.layout = layout
        self.message = message

    @property
    def success(self):
        return self.layout is not None

    @classmethod
    def failure(cls, message):
        return cls(layout=None, message=message)

    def __repr__(self):
        if self.success:
            return f"LayoutResult(success=True, shape={self.layout.shape})"
        return f"LayoutResult(success=False, message={self.message!r})"


def random_layout(n_samples, n_components, random_state=None, dtype=np.float64):
    """Uniform random layout in [-10, 10].

    Args:
        n_samples: int, number of points
        n_components: int, embedding dimension
        random_state: None, int or np.random.Generator
        dtype: numpy float dtype (default: float64)

    Returns:
        np.ndarray of shape (n_samples, n_components)
    """
    rng = check_random_state(random_state)
    layout = rng.uniform(-INIT_MAX_COORD, INIT_MAX_COORD, size=(n_samples, n_components))
    return layout.astype(dtype)


def spectral_layout(graph, n_components, dtype=None):
    """Spectral embedding of a fuzzy simplicial set.

    Computes the ``n_components + 1`` smallest eigenpairs of the symmetric
    normalized Laplacian ``L = I - D^-1/2 G D^-1/2`` with ARPACK and drops the
    trivial one. Graphs with isolated vertices or more than one connected
    component are reported as failures without calling the eigensolver.

    Args:
        graph: scipy.sparse matrix of shape (n, n) - symmetric edge weights
        n_components: int, embedding dimension
        dtype: numpy float dtype of the layout (default: dtype of graph)

    Returns:
        LayoutResult with a layout of shape (n, n_components) on success
    """
    graph = scipy.sparse.csr_matrix(graph)
    dtype = check_dtype(graph.dtype if dtype is None else dtype)
    graph = graph.astype(dtype)
    n_samples = graph.shape[0]
    k = n_components + 1

    if k >= n_samples:
        return LayoutResult.failure(
            f"cannot compute {k} eigenvectors of a graph with {n_samples} vertices"
        )

    degrees = np.asarray(graph.sum(axis=1)).ravel()
    n_isolated = int(np.sum(degrees <= 0))
    if n_isolated > 0:
        return LayoutResult.failure(
            f"graph has {n_isolated} isolated vertices; Laplacian is degenerate"
        )

    # The Laplacian has one zero eigenvalue per component
    n_connected, _ = connected_components(graph, directed=False)
    if n_connected > 1:
        return LayoutResult.failure(
            f"graph has {n_connected} connected components; spectral layout needs a connected graph"
        )

    D = scipy.sparse.diags(1.0 / np.sqrt(degrees)).astype(dtype)
    identity = scipy.sparse.identity(n_samples, dtype=dtype, format="csr")
    L = (identity - D @ graph @ D).tocsr()

    num_lanczos_vectors = max(2 * k + 1, int(round(np.sqrt(n_samples))))
    num_lanczos_vectors = min(num_lanczos_vectors, n_samples - 1)

    try:
        eigenvalues, eigenvectors = eigsh(
            L,
            k=k,
            which="SM",
            ncv=num_lanczos_vectors,
            tol=1e-4,
            v0=np.ones(n_samples, dtype=dtype),
            maxiter=n_samples * 5,
        )
    except ArpackNoConvergence as e:
        return LayoutResult.failure(f"eigensolver did not converge: {e}")
    except (ArpackError, ValueError) as e:
        return LayoutResult.failure(f"eigensolver failed: {e}")

    order = np.argsort(eigenvalues)[1:k]
    layout = eigenvectors[:, order].astype(dtype)

    if not np.all(np.isfinite(layout)) or np.abs(layout).max() == 0:
        return LayoutResult.failure("eigenvectors are not usable as a layout")

    return LayoutResult(layout=layout)


def noisy_scale_coords(coords, random_state=None, max_coord=INIT_MAX_COORD, noise=INIT_NOISE):
    """Scale so the largest absolute coordinate is max_coord, then add jitter."""
    rng = check_random_state(random_state)
    expansion = max_coord / np.abs(coords).max()
    scaled = coords * expansion
    return (scaled + rng.normal(scale=noise, size=coords.shape)).astype(coords.dtype)


def initialize_embedding(
    graph, n_components, init="spectral", random_state=None, dtype=np.float64
):
    """Initial layout for the optimizer.

    Args:
        graph: scipy.sparse matrix of shape (n, n) - fuzzy simplicial set
        n_components: int, embedding dimension
        init: "spectral", "random", or np.ndarray of shape (n, n_components)
            (default: "spectral")
        random_state: None, int or np.random.Generator
        dtype: numpy float dtype (default: float64)

    Returns:
        np.ndarray of shape (n, n_components)
    """
    rng = check_random_state(random_state)
    dtype = check_dtype(dtype)
    n_samples = graph.shape[0]

    if isinstance(init, np.ndarray):
        if init.shape != (n_samples, n_components):
            raise ValueError(
                f"init array must have shape {(n_samples, n_components)}, got {init.shape}"
            )
        return np.array(init, dtype=dtype)

    if init == "random":
        return random_layout(n_samples, n_components, rng, dtype)

    if init != "spectral":
        raise ValueError(f"init must be 'spectral', 'random' or an array, got {init!r}")

    result = spectral_layout(graph, n_components, dtype=dtype)
    if not result.success:
        warnings.warn(
            f"Spectral initialisation failed ({result.message}); "
            f"falling back to random layout.",
            RuntimeWarning,
        )
        return random_layout(n_samples, n_components, rng, dtype)

    return noisy_scale_coords(result.layout, rng)
