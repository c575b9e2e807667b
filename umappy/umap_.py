"""Uniform Manifold Approximation and Projection.

Reference:
    McInnes, Healy and Melville, "UMAP: Uniform Manifold Approximation and
    Projection for Dimension Reduction" (2018)
"""

import numbers
from typing import Callable, Optional, Union

import numpy as np
import scipy.sparse

from .curve import find_ab_params
from .layout import optimize_embedding
from .sampling import get_edge_sampler
from .simplicial import fuzzy_simplicial_set
from .spectral import initialize_embedding
from ._utils import check_random_state, check_dtype, is_symmetric


class UMAPResult:
    """Fuzzy simplicial set and embedding produced by one UMAP run.

    The graph must be symmetric; an asymmetric graph means the set
    combination went wrong and is rejected with an AssertionError.

    Attributes:
        graph: scipy.sparse.csr_matrix of shape (n_samples, n_samples)
        embedding: np.ndarray of shape (n_samples, n_components)
    """

    def __init__(self, graph, embedding):
        if not is_symmetric(graph):
            raise AssertionError("UMAPResult expected graph to be a symmetric matrix")
        self.graph = graph
        self.embedding = embedding

    def __iter__(self):
        return iter((self.graph, self.embedding))

    def __repr__(self):
        return (
            f"UMAPResult(n_samples={self.embedding.shape[0]}, "
            f"n_components={self.embedding.shape[1]}, n_edges={self.graph.nnz})"
        )


class UMAP:
    """Uniform Manifold Approximation and Projection.

    Finds a low dimensional embedding of the data that approximates an
    underlying manifold. API follows scikit-learn conventions.

    Algorithm:
        1. Build the fuzzy simplicial set of the k nearest neighbor graph
        2. Initialize the embedding (spectral or random)
        3. Fit the (a, b) curve parameters from min_dist and spread
        4. Optimize the embedding with attractive / repulsive updates

    Attributes (after fitting):
        graph_: scipy.sparse.csr_matrix of shape (n_samples, n_samples)
            The fuzzy simplicial set.
        embedding_: np.ndarray of shape (n_samples, n_components)
            The embedding of the training data.
        a_: float
        b_: float
            Curve parameters used by the optimizer.
        n_features_in_: int
            Number of features (columns) of the training data.

    Example:
        >>> import numpy as np
        >>> import umappy
        >>>
        >>> X = np.random.rand(500, 10)
        >>> reducer = umappy.UMAP(n_neighbors=10, random_state=42)
        >>> embedding = reducer.fit_transform(X)
        >>> embedding.shape
        (500, 2)
    """

    def __init__(
        self,
        n_components: int = 2,
        n_neighbors: int = 15,
        metric: Union[str, Callable] = "euclidean",
        n_epochs: int = 300,
        learning_rate: float = 1.0,
        init: Union[str, np.ndarray] = "spectral",
        min_dist: float = 0.1,
        spread: float = 1.0,
        set_op_ratio: float = 1.0,
        local_connectivity: float = 1.0,
        repulsion_strength: float = 1.0,
        neg_sample_rate: int = 5,
        a: Optional[float] = None,
        b: Optional[float] = None,
        edge_sampler: Union[str, Callable] = "bernoulli",
        batch_size: int = 256,
        knn_search: Optional[Callable] = None,
        dtype=np.float64,
        random_state=None,
        verbose: bool = False,
    ):
        """Initialize UMAP.

        Args:
            n_components: int, dimension of the embedding space (default: 2)
            n_neighbors: int, size of the local neighborhood, self included.
                Larger values capture more global structure (default: 15)
            metric: str or callable, distance in the input space, or
                "precomputed" to treat X as a distance matrix (default: "euclidean")
            n_epochs: int, number of optimization epochs (default: 300)
            learning_rate: float, initial learning rate (default: 1.0)
            init: "spectral", "random" or an array of shape (n_samples, n_components)
                (default: "spectral")
            min_dist: float, minimum spacing of embedded points (default: 0.1)
            spread: float, effective scale of embedded points (default: 1.0)
            set_op_ratio: float in [0, 1], 1.0 is pure fuzzy union and 0.0 pure
                fuzzy intersection when symmetrizing the graph (default: 1.0)
            local_connectivity: float, number of nearest neighbors assumed to
                be locally connected (default: 1.0)
            repulsion_strength: float, weight of negative samples (default: 1.0)
            neg_sample_rate: int, negative samples per positive sample (default: 5)
            a: float or None, explicit curve parameter (default: fit from min_dist)
            b: float or None, explicit curve parameter (default: fit from min_dist)
            edge_sampler: str or callable, "bernoulli", "scheduled" or a custom
                sampler, see umappy.sampling (default: "bernoulli")
            batch_size: int, edges per vectorized optimizer update (default: 256)
            knn_search: callable ``(X, n_neighbors, metric) -> (indices, distances)``
                replacing the built-in exact search (default: None)
            dtype: np.float32 or np.float64, numeric precision of the graph and
                the embedding (default: np.float64)
            random_state: None, int or np.random.Generator, seed for
                initialization and negative sampling
            verbose: bool, if True, print progress (default: False)
        """
        self.n_components = n_components
        self.n_neighbors = n_neighbors
        self.metric = metric
        self.n_epochs = n_epochs
        self.learning_rate = learning_rate
        self.init = init
        self.min_dist = min_dist
        self.spread = spread
        self.set_op_ratio = set_op_ratio
        self.local_connectivity = local_connectivity
        self.repulsion_strength = repulsion_strength
        self.neg_sample_rate = neg_sample_rate
        self.a = a
        self.b = b
        self.edge_sampler = edge_sampler
        self.batch_size = batch_size
        self.knn_search = knn_search
        self.dtype = dtype
        self.random_state = random_state
        self.verbose = verbose

        # Fitted attributes (sklearn naming convention)
        self.graph_: Optional[scipy.sparse.csr_matrix] = None
        self.embedding_: Optional[np.ndarray] = None
        self.a_: Optional[float] = None
        self.b_: Optional[float] = None
        self.n_features_in_: int = 0

    def _validate_parameters(self, X: np.ndarray) -> None:
        """Check the configuration against the data before any computation.

        Args:
            X: np.ndarray of shape (n_samples, n_features)

        Raises:
            ValueError naming the first invalid parameter
        """
        if X.ndim != 2:
            raise ValueError(f"X must be a 2D array, got {X.ndim} dimensions")
        n_samples, n_features = X.shape
        if self.metric == "precomputed" and n_samples != n_features:
            raise ValueError("X must be a square distance matrix when metric='precomputed'")

        if not isinstance(self.n_neighbors, numbers.Integral):
            raise ValueError("n_neighbors must be an integer")
        if not 0 < self.n_neighbors < n_samples:
            raise ValueError(
                "n_neighbors must be greater than 0 and smaller than the number of samples"
            )
        if not isinstance(self.n_components, numbers.Integral):
            raise ValueError("n_components must be an integer")
        if not 1 < self.n_components < n_features:
            raise ValueError(
                "n_components must be greater than 1 and smaller than the number of features"
            )
        if self.n_epochs <= 0:
            raise ValueError("n_epochs must be greater than 0")
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be greater than 0")
        if self.min_dist <= 0:
            raise ValueError("min_dist must be greater than 0")
        if self.spread <= 0:
            raise ValueError("spread must be greater than 0")
        if not 0 <= self.set_op_ratio <= 1:
            raise ValueError("set_op_ratio must lie in [0, 1]")
        if self.local_connectivity <= 0:
            raise ValueError("local_connectivity must be greater than 0")
        if self.repulsion_strength < 0:
            raise ValueError("repulsion_strength cannot be negative")
        if self.neg_sample_rate < 0:
            raise ValueError("neg_sample_rate cannot be negative")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be greater than 0")
        if self.a is not None and self.a <= 0:
            raise ValueError("a must be greater than 0")
        if self.b is not None and self.b <= 0:
            raise ValueError("b must be greater than 0")

        if isinstance(self.init, np.ndarray):
            if self.init.shape != (n_samples, self.n_components):
                raise ValueError(
                    f"init array must have shape {(n_samples, self.n_components)}, "
                    f"got {self.init.shape}"
                )
        elif self.init not in ("spectral", "random"):
            raise ValueError(f"init must be 'spectral', 'random' or an array, got {self.init!r}")

        check_dtype(self.dtype)
        get_edge_sampler(self.edge_sampler)

    def fit_result(self, X) -> UMAPResult:
        """Fit the model and return the graph and embedding together.

        Args:
            X: np.ndarray of shape (n_samples, n_features), or
                (n_samples, n_samples) distances when metric="precomputed"

        Returns:
            UMAPResult
        """
        X = np.asarray(X)
        self._validate_parameters(X)

        dtype = check_dtype(self.dtype)
        rng = check_random_state(self.random_state)

        if self.verbose:
            print(f"Constructing fuzzy simplicial set ({self.n_neighbors} neighbors)")
        graph = fuzzy_simplicial_set(
            X,
            self.n_neighbors,
            metric=self.metric,
            local_connectivity=self.local_connectivity,
            set_op_ratio=self.set_op_ratio,
            dtype=dtype,
            knn_search=self.knn_search,
        )

        if self.verbose:
            print("Initializing embedding")
        embedding = initialize_embedding(
            graph, self.n_components, init=self.init, random_state=rng, dtype=dtype
        )

        a, b = find_ab_params(self.spread, self.min_dist, self.a, self.b)

        if self.verbose:
            print(f"Optimizing embedding for {self.n_epochs} epochs (a={a:.4f}, b={b:.4f})")
        embedding = optimize_embedding(
            embedding,
            graph,
            self.n_epochs,
            self.learning_rate,
            self.repulsion_strength,
            self.neg_sample_rate,
            a,
            b,
            sampler=self.edge_sampler,
            random_state=rng,
            batch_size=self.batch_size,
            verbose=self.verbose,
        )

        result = UMAPResult(graph, embedding)

        self.graph_ = result.graph
        self.embedding_ = result.embedding
        self.a_ = a
        self.b_ = b
        self.n_features_in_ = X.shape[1]

        if self.verbose:
            print(f"UMAP finished: {result}")

        return result

    def fit(self, X) -> "UMAP":
        """Fit the embedding of X.

        Args:
            X: np.ndarray of shape (n_samples, n_features)

        Returns:
            self
        """
        self.fit_result(X)
        return self

    def fit_transform(self, X) -> np.ndarray:
        """Fit X and return its embedding.

        Args:
            X: np.ndarray of shape (n_samples, n_features)

        Returns:
            np.ndarray of shape (n_samples, n_components)
        """
        return self.fit_result(X).embedding

    def __repr__(self):
        init = repr(self.init) if isinstance(self.init, str) else "<array>"
        return (
            f"UMAP(n_components={self.n_components}, n_neighbors={self.n_neighbors}, "
            f"metric={self.metric!r}, min_dist={self.min_dist}, init={init})"
        )


def umap(X, n_components=2, **kwargs):
    """Embed X into an n_components-dimensional space.

    Convenience wrapper around ``UMAP(n_components, **kwargs).fit_transform(X)``.

    Args:
        X: np.ndarray of shape (n_samples, n_features)
        n_components: int, dimension of the embedding (default: 2)
        **kwargs: any other UMAP keyword argument

    Returns:
        np.ndarray of shape (n_samples, n_components)
    """
    return UMAP(n_components=n_components, **kwargs).fit_transform(X)
