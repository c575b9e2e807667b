"""umappy: Uniform Manifold Approximation and Projection in Python.

Embeds high-dimensional point sets into a low-dimensional space while
preserving the topology of local neighborhoods.

Main features:
- Exact nearest neighbor search (FAISS, scipy cdist or precomputed distances)
- Smooth kNN distance calibration and fuzzy simplicial set construction
- Spectral or random initialization with automatic fallback
- Curve fitting of the (a, b) embedding parameters
- Stochastic embedding optimization with swappable edge sampling policies
- Visualization of embeddings and graph edges

Convention:
    - Data and embeddings are row-major: shape (n_samples, n_features) and
      (n_samples, n_components)
    - Neighbor tables have shape (n_samples, n_neighbors), self included,
      rows sorted by ascending distance
    - Numeric precision is chosen explicitly with dtype=np.float32 or np.float64
"""

# Estimator
from .umap_ import UMAP, UMAPResult, umap

# Neighbor search
from .knn import FaissKNN, knn_search

# Graph construction
from .calibration import smooth_knn_dist, smooth_knn_dists, SMOOTH_K_TOLERANCE
from .simplicial import (
    compute_membership_strengths,
    accumulate_triplets,
    combine_fuzzy_sets,
    fuzzy_simplicial_set,
)

# Initialization
from .spectral import (
    LayoutResult,
    spectral_layout,
    random_layout,
    initialize_embedding,
)

# Curve fitting
from .curve import find_ab_params

# Optimization
from .layout import optimize_embedding
from .sampling import (
    bernoulli_edge_sampler,
    scheduled_edge_sampler,
    get_edge_sampler,
)

# Plotting
from .plotting import plot_embedding, plot_graph

from . import sampling

__all__ = [
    # Estimator
    "UMAP",
    "UMAPResult",
    "umap",
    # Neighbor search
    "FaissKNN",
    "knn_search",
    # Graph construction
    "smooth_knn_dist",
    "smooth_knn_dists",
    "SMOOTH_K_TOLERANCE",
    "compute_membership_strengths",
    "accumulate_triplets",
    "combine_fuzzy_sets",
    "fuzzy_simplicial_set",
    # Initialization
    "LayoutResult",
    "spectral_layout",
    "random_layout",
    "initialize_embedding",
    # Curve fitting
    "find_ab_params",
    # Optimization
    "optimize_embedding",
    "bernoulli_edge_sampler",
    "scheduled_edge_sampler",
    "get_edge_sampler",
    # Plotting
    "plot_embedding",
    "plot_graph",
    # Modules
    "sampling",
]

__version__ = "0.1.0"
