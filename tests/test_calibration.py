# File: tests/test_calibration.py

import numpy as np
import pytest

from umappy import smooth_knn_dist, smooth_knn_dists, SMOOTH_K_TOLERANCE


def psum(dists, rho, sigma):
    return np.sum(np.exp(-np.maximum(dists - rho, 0.0) / sigma))


def test_smooth_knn_dist_single_point_hits_target():
    """
    The binary search must find a bandwidth whose fuzzy cardinality equals
    log2(k) * bandwidth.
    """
    dists = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
    rho, k, bandwidth = 1.0, 6, 1.0

    sigma = smooth_knn_dist(dists, rho, k, bandwidth, n_iter=64)

    assert abs(psum(dists, rho, sigma) - np.log2(k) * bandwidth) < SMOOTH_K_TOLERANCE


def test_smooth_knn_dists_rhos_and_sigmas():
    """
    rho is the distance to the nearest non-identical neighbor and every sigma
    calibrates its point to log2(k).
    """
    knn_dists = np.array(
        [
            [0.0, 1.0, 2.0, 3.0, 4.0, 5.0],
            [0.0, 2.0, 4.0, 4.0, 6.0, 6.0],
            [0.0, 3.0, 5.0, 5.0, 6.0, 10.0],
        ]
    )

    rhos, sigmas = smooth_knn_dists(knn_dists, 6, 1)

    np.testing.assert_array_equal(rhos, [1.0, 2.0, 3.0])
    for i in range(3):
        assert abs(psum(knn_dists[i], rhos[i], sigmas[i]) - np.log2(6)) < SMOOTH_K_TOLERANCE
    assert np.all(sigmas > 0)
    assert np.all(np.isfinite(sigmas))


@pytest.mark.parametrize(
    "local_connectivity, expected",
    [(1, [0.0, 1.0, 2.0]), (1.5, [0.0, 1.5, 2.5])],
)
def test_smooth_knn_dists_local_connectivity_interpolation(local_connectivity, expected):
    """
    Fractional local connectivity interpolates between consecutive positive
    distances; a point without positive distances gets rho = 0.
    """
    knn_dists = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 2.0], [0.0, 2.0, 3.0]])

    rhos, _ = smooth_knn_dists(knn_dists, 2, local_connectivity)

    np.testing.assert_allclose(rhos, expected)


def test_smooth_knn_dists_fractional_below_one():
    """
    With local_connectivity < 1, rho is a fraction of the nearest distance.
    """
    knn_dists = np.array([[0.0, 2.0, 4.0]])

    rhos, _ = smooth_knn_dists(knn_dists, 3, 0.5)

    np.testing.assert_allclose(rhos, [1.0])


def test_smooth_knn_dists_too_few_positive_distances():
    """
    If fewer positive distances exist than local_connectivity, rho is the
    largest positive distance.
    """
    knn_dists = np.array([[0.0, 0.0, 0.5]])

    rhos, _ = smooth_knn_dists(knn_dists, 3, 2)

    np.testing.assert_allclose(rhos, [0.5])


def test_smooth_knn_dists_preserves_float32():
    knn_dists = np.array([[0.0, 1.0, 2.0], [0.0, 0.5, 3.0]], dtype=np.float32)

    rhos, sigmas = smooth_knn_dists(knn_dists, 3, 1)

    assert rhos.dtype == np.float32
    assert sigmas.dtype == np.float32


def test_smooth_knn_dist_returns_best_effort_after_cap():
    """
    The search never raises; with a single iteration it returns the first
    midpoint update.
    """
    dists = np.array([0.0, 1.0, 2.0, 3.0])

    sigma = smooth_knn_dist(dists, 1.0, 4, n_iter=1)

    assert sigma in (0.5, 2.0)
