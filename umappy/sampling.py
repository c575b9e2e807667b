"""Weighted edge sampling policies for the embedding optimizer.

In every epoch the optimizer asks an edge sampler which graph edges take part
in an update. Each edge must be selected with probability proportional to its
membership strength. Two policies are provided:

- ``bernoulli_edge_sampler``: every edge is an independent coin flip with
  success probability equal to its weight. Since weights lie in [0, 1] this is
  directly proportional to the weight.
- ``scheduled_edge_sampler``: a deterministic schedule where an edge of weight
  ``w`` fires once every ``max(w) / w`` epochs, so over the full run it is
  updated ``n_epochs * w / max(w)`` times.

Custom policies are plain callables with the signature

    sampler(weights, epoch, n_epochs, rng) -> np.ndarray of bool

where ``weights`` has shape (n_edges,), ``epoch`` is 0-based and ``rng`` is
the optimizer's ``np.random.Generator``.
"""

from typing import Callable, Optional, Union

import numpy as np

Sampler = Callable[[np.ndarray, int, int, np.random.Generator], np.ndarray]


def epochs_per_sample(weights: np.ndarray) -> np.ndarray:
    """Number of epochs between two updates of every edge.

    Args:
        weights: np.ndarray of shape (n_edges,) - edge weights

    Returns:
        np.ndarray of shape (n_edges,), inf for edges of non-positive weight
    """
    weights = np.asarray(weights, dtype=np.float64)
    result = np.full(weights.shape[0], np.inf)
    max_weight = weights.max() if weights.shape[0] > 0 else 0.0
    if max_weight <= 0:
        return result
    positive = weights > 0
    result[positive] = max_weight / weights[positive]
    return result


def bernoulli_edge_sampler() -> Sampler:
    """Create a sampler selecting each edge with probability equal to its weight.

    Returns:
        Sampler function that takes (weights, epoch, n_epochs, rng) and returns
        a boolean selection mask
    """

    def sampler(
        weights: np.ndarray, epoch: int, n_epochs: int, rng: np.random.Generator
    ) -> np.ndarray:
        return rng.random(weights.shape[0]) < weights

    return sampler


def scheduled_edge_sampler() -> Sampler:
    """Create a sampler following a deterministic epochs-per-sample schedule.

    An edge with ``epochs_per_sample == s`` fires in epoch ``e`` exactly when
    ``floor((e + 1) / s) > floor(e / s)``. The heaviest edges fire every epoch.

    Returns:
        Sampler function that takes (weights, epoch, n_epochs, rng) and returns
        a boolean selection mask
    """

    def sampler(
        weights: np.ndarray, epoch: int, n_epochs: int, rng: np.random.Generator
    ) -> np.ndarray:
        eps = epochs_per_sample(weights)
        return np.floor((epoch + 1) / eps) > np.floor(epoch / eps)

    return sampler


EDGE_SAMPLERS = {
    "bernoulli": bernoulli_edge_sampler,
    "scheduled": scheduled_edge_sampler,
}


def get_edge_sampler(sampler: Optional[Union[str, Sampler]]) -> Sampler:
    """Resolve an edge sampler from a name or a callable.

    Args:
        sampler: str, one of EDGE_SAMPLERS, a sampler callable, or None for
            the default Bernoulli policy

    Returns:
        Sampler function
    """
    if sampler is None:
        return bernoulli_edge_sampler()
    if callable(sampler):
        return sampler
    if sampler in EDGE_SAMPLERS:
        return EDGE_SAMPLERS[sampler]()
    raise ValueError(
        f"Unknown edge sampler {sampler!r}; expected one of {sorted(EDGE_SAMPLERS)} "
        f"or a callable"
    )
