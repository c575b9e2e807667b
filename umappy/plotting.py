"""Plotting utilities for visualizing UMAP embeddings.

Functions for drawing 2D embeddings and the fuzzy simplicial set edges
connecting them.
"""

import numpy as np
import scipy.sparse
from matplotlib.colors import to_rgba
from matplotlib.collections import LineCollection


def plot_embedding(ax, embedding, labels=None, cmap="Spectral", **scatter_kwargs):
    """Scatter plot of a 2D embedding.

    Args:
        ax: matplotlib axes object
        embedding: np.ndarray of shape (n_samples, 2) (extra columns are ignored)
        labels: array-like of shape (n_samples,), values used to color the
            points (default: None)
        cmap: str, colormap used when labels are given (default: "Spectral")
        **scatter_kwargs: additional arguments for scatter

    Returns:
        scatter: matplotlib PathCollection
    """
    embedding = np.asarray(embedding)
    if embedding.ndim != 2 or embedding.shape[1] < 2:
        raise ValueError(f"embedding must have shape (n_samples, >=2), got {embedding.shape}")

    # Default scatter settings
    kwargs = {"s": 5, "alpha": 0.8, "linewidths": 0}
    if labels is not None:
        kwargs.update({"c": np.asarray(labels), "cmap": cmap})
    kwargs.update(scatter_kwargs)

    scatter = ax.scatter(embedding[:, 0], embedding[:, 1], **kwargs)
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xticks([])
    ax.set_yticks([])
    return scatter


def plot_graph(ax, embedding, graph, min_weight=0.0, color="gray", **line_kwargs):
    """Draw the edges of a fuzzy simplicial set on top of an embedding.

    Each edge is drawn once with an opacity proportional to its membership
    strength.

    Args:
        ax: matplotlib axes object
        embedding: np.ndarray of shape (n_samples, 2)
        graph: scipy.sparse matrix of shape (n_samples, n_samples)
        min_weight: float, edges with weight <= min_weight are skipped (default: 0.0)
        color: matplotlib color of the edges (default: "gray")
        **line_kwargs: additional arguments for LineCollection

    Returns:
        lines: matplotlib LineCollection
    """
    embedding = np.asarray(embedding)
    coo = scipy.sparse.triu(graph, k=1).tocoo()
    mask = coo.data > min_weight
    rows, cols, weights = coo.row[mask], coo.col[mask], coo.data[mask]

    segments = np.stack([embedding[rows, :2], embedding[cols, :2]], axis=1)
    rgba = np.tile(np.array(to_rgba(color)), (len(weights), 1))
    if len(weights) > 0:
        rgba[:, 3] = np.clip(weights / weights.max(), 0.0, 1.0) * rgba[:, 3]

    kwargs = {"linewidths": 0.5, "zorder": 0}
    kwargs.update(line_kwargs)
    lines = LineCollection(segments, colors=rgba, **kwargs)
    ax.add_collection(lines)
    ax.autoscale_view()
    return lines
