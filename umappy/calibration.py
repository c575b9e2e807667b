"""Smooth nearest-neighbor distance calibration.

For every point we derive two local constants from its k nearest neighbor
distances:

- rho: the local connectivity radius, i.e. the distance to the
  ``local_connectivity``-th nearest (non-identical) neighbor, interpolated
  for fractional values.
- sigma: the bandwidth normalizer such that the fuzzy set cardinality
  ``sum_j exp(-max(d_j - rho, 0) / sigma)`` equals ``log2(k) * bandwidth``.

Together they turn each point's neighbor distances into a local
pseudo-metric where every point has the same effective neighborhood size.
"""

import numpy as np

SMOOTH_K_TOLERANCE = 1e-5


def _local_rho(dists, local_connectivity):
    """Distance to the local_connectivity-th positive neighbor distance."""
    nz_dists = np.sort(dists[dists > 0])
    if nz_dists.shape[0] >= local_connectivity:
        index = int(np.floor(local_connectivity))
        interpolation = local_connectivity - index
        if index > 0:
            rho = nz_dists[index - 1]
            if interpolation > SMOOTH_K_TOLERANCE:
                rho += interpolation * (nz_dists[index] - nz_dists[index - 1])
        else:
            rho = interpolation * nz_dists[0]
        return rho
    if nz_dists.shape[0] > 0:
        return np.max(nz_dists)
    return 0.0


def smooth_knn_dist(dists, rho, k, bandwidth=1.0, n_iter=64):
    """Binary search the bandwidth of a single point.

    The search never fails: if the target is not reached within ``n_iter``
    halvings the last midpoint is returned.

    Args:
        dists: np.ndarray of shape (k,) - distances to the nearest neighbors,
            self included
        rho: float, local connectivity radius of the point
        k: float, effective number of neighbors (target is log2(k) * bandwidth)
        bandwidth: float, scales the target cardinality (default: 1.0)
        n_iter: int, maximum binary search steps (default: 64)

    Returns:
        float, sigma
    """
    target = np.log2(k) * bandwidth
    shifted = np.maximum(dists - rho, 0.0)
    lo, mid, hi = 0.0, 1.0, np.inf

    for _ in range(n_iter):
        psum = np.sum(np.exp(-shifted / mid))
        if abs(psum - target) < SMOOTH_K_TOLERANCE:
            break

        if psum > target:
            hi = mid
            mid = (lo + hi) / 2.0
        else:
            lo = mid
            if hi == np.inf:
                mid *= 2.0
            else:
                mid = (lo + hi) / 2.0

    return mid


def smooth_knn_dists(knn_dists, k, local_connectivity, n_iter=64, bandwidth=1.0):
    """Compute rho and sigma for every point.

    Args:
        knn_dists: np.ndarray of shape (n_samples, n_neighbors) - ascending
            neighbor distances per point, self included
        k: float, effective number of neighbors
        local_connectivity: float, number of nearest neighbors assumed to be
            fully connected; may be fractional
        n_iter: int, maximum binary search steps per point (default: 64)
        bandwidth: float, kernel bandwidth (default: 1.0)

    Returns:
        rhos: np.ndarray of shape (n_samples,)
        sigmas: np.ndarray of shape (n_samples,)

    Example:
        >>> knn_dists = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 2.0], [0.0, 2.0, 3.0]])
        >>> rhos, sigmas = smooth_knn_dists(knn_dists, 2, 1.5)
        >>> rhos
        array([0. , 1.5, 2.5])
    """
    knn_dists = np.asarray(knn_dists)
    dtype = knn_dists.dtype if knn_dists.dtype.kind == "f" else np.float64
    n_samples = knn_dists.shape[0]

    rhos = np.zeros(n_samples, dtype=dtype)
    sigmas = np.empty(n_samples, dtype=dtype)
    for i in range(n_samples):
        dists = knn_dists[i].astype(np.float64)
        rho = _local_rho(dists, local_connectivity)
        rhos[i] = rho
        sigmas[i] = smooth_knn_dist(dists, rho, k, bandwidth, n_iter)

    return rhos, sigmas
