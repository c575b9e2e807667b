"""Stochastic gradient optimization of the low-dimensional embedding.

The fuzzy simplicial set acts as a set of constraints: sampled edges pull
their endpoints together, and for every sampled edge its head and a few
random vertices are pushed apart (negative sampling). Both ends of a
repulsive pair move, so vertices without edges still drift.

Attractive coefficient for squared embedded distance d:

    -2ab d^(b-1) / (1 + a d^b)

Repulsive coefficient:

    2 gamma b / ((0.001 + d) (1 + a d^b))

Every per-coordinate gradient is clipped to [-4, 4].
"""

import sys

import numpy as np
import scipy.sparse
from tqdm import tqdm

from .sampling import get_edge_sampler
from ._utils import check_random_state

GRAD_CLIP = 4.0
REPULSION_EPS = 0.001


def _attractive_grad(diff, a, b):
    dist_sq = np.sum(diff * diff, axis=1)
    coeff = np.zeros_like(dist_sq)
    pos = dist_sq > 0
    d = dist_sq[pos]
    coeff[pos] = -2.0 * a * b * d ** (b - 1.0) / (1.0 + a * d**b)
    return np.clip(coeff[:, None] * diff, -GRAD_CLIP, GRAD_CLIP)


def _repulsive_grad(diff, a, b, gamma):
    dist_sq = np.sum(diff * diff, axis=1)
    coeff = np.zeros_like(dist_sq)
    pos = dist_sq > 0
    d = dist_sq[pos]
    coeff[pos] = 2.0 * gamma * b / ((REPULSION_EPS + d) * (1.0 + a * d**b))
    grad = np.clip(coeff[:, None] * diff, -GRAD_CLIP, GRAD_CLIP)
    # Coincident points get the maximal push
    grad[~pos] = GRAD_CLIP
    return grad


def _optimize_batch(embedding, head, tail, alpha, gamma, a, b, neg_sample_rate, rng):
    """Apply the updates of one batch of selected edges in place."""
    n_vertices = embedding.shape[0]
    dtype = embedding.dtype

    diff = embedding[head] - embedding[tail]
    grad = (alpha * _attractive_grad(diff, a, b)).astype(dtype)
    np.add.at(embedding, head, grad)
    np.add.at(embedding, tail, -grad)

    if neg_sample_rate <= 0:
        return

    neg_head = np.repeat(head, neg_sample_rate)
    neg_tail = rng.integers(0, n_vertices, size=neg_head.shape[0])
    keep = neg_tail != neg_head
    neg_head, neg_tail = neg_head[keep], neg_tail[keep]
    if neg_head.shape[0] == 0:
        return

    diff = embedding[neg_head] - embedding[neg_tail]
    grad = (alpha * _repulsive_grad(diff, a, b, gamma)).astype(dtype)
    np.add.at(embedding, neg_head, grad)
    np.add.at(embedding, neg_tail, -grad)


def optimize_embedding(
    embedding,
    graph,
    n_epochs,
    initial_alpha,
    gamma,
    neg_sample_rate,
    a,
    b,
    sampler=None,
    random_state=None,
    batch_size=256,
    verbose=False,
):
    """Refine an embedding against a fuzzy simplicial set.

    The optimizer takes ownership of ``embedding``: it is modified in place
    and the same array is returned. The learning rate decays linearly from
    ``initial_alpha`` towards 0 over ``n_epochs``.

    Selected edges are processed in consecutive batches of ``batch_size``.
    Inside a batch all gradients are computed from the current embedding and
    written with ``np.add.at``, so rows shared by several edges accumulate
    every contribution. ``batch_size=1`` gives the strictly sequential
    update order.

    Args:
        embedding: np.ndarray of shape (n_samples, n_components) - initial layout
        graph: scipy.sparse matrix of shape (n_samples, n_samples) - edge weights
        n_epochs: int, number of passes over the graph
        initial_alpha: float, initial learning rate
        gamma: float, repulsion strength
        neg_sample_rate: int, negative samples per selected edge
        a: float, curve parameter
        b: float, curve parameter
        sampler: str or callable, edge sampling policy (default: "bernoulli")
        random_state: None, int or np.random.Generator
        batch_size: int, edges per vectorized update (default: 256)
        verbose: bool, if True, show a progress bar (default: False)

    Returns:
        np.ndarray, the optimized ``embedding`` (same object)
    """
    rng = check_random_state(random_state)
    sampler = get_edge_sampler(sampler)

    coo = scipy.sparse.coo_matrix(graph)
    head = coo.row.astype(np.int64)
    tail = coo.col.astype(np.int64)
    weights = coo.data.astype(np.float64)

    if verbose:
        iterator = tqdm(range(n_epochs), file=sys.stdout)
    else:
        iterator = range(n_epochs)

    alpha = initial_alpha
    for epoch in iterator:
        selected = np.flatnonzero(sampler(weights, epoch, n_epochs, rng))

        for start in range(0, selected.shape[0], batch_size):
            batch = selected[start:start + batch_size]
            _optimize_batch(
                embedding,
                head[batch],
                tail[batch],
                alpha,
                gamma,
                a,
                b,
                neg_sample_rate,
                rng,
            )

        if verbose:
            iterator.set_postfix({"alpha": alpha, "edges": selected.shape[0]})

        alpha = initial_alpha * (1.0 - (epoch + 1) / n_epochs)

    return embedding
