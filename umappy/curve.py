"""Shape parameters of the low-dimensional membership curve.

The embedding space uses the smooth family ``1 / (1 + a * r^(2b))`` as its
distance-to-membership curve. ``a`` and ``b`` are fit so that this curve
approximates the offset exponential decay implied by ``min_dist`` and
``spread``.
"""

import numpy as np
from scipy.optimize import curve_fit


def membership_curve(r, a, b):
    """Low-dimensional membership strength at distance r."""
    return 1.0 / (1.0 + a * r ** (2 * b))


def target_curve(r, min_dist, spread):
    """Ideal membership: 1 up to min_dist, exponential decay beyond."""
    r = np.asarray(r, dtype=np.float64)
    return np.where(r <= min_dist, 1.0, np.exp(-(r - min_dist) / spread))


def find_ab_params(spread, min_dist, a=None, b=None):
    """Fit the (a, b) curve parameters.

    Explicitly supplied parameters are kept as given; only the missing ones
    are fit by nonlinear least squares over 300 points in [0, 3 * spread].

    Args:
        spread: float, effective scale of embedded points
        min_dist: float, minimum spacing of embedded points
        a: float or None, fixed value of a (default: None)
        b: float or None, fixed value of b (default: None)

    Returns:
        a: float
        b: float
    """
    if a is not None and b is not None:
        return float(a), float(b)

    xv = np.linspace(0, spread * 3, 300)
    yv = target_curve(xv, min_dist, spread)

    if a is None and b is None:
        params, _ = curve_fit(membership_curve, xv, yv, p0=(1.0, 1.0))
        return float(params[0]), float(params[1])

    if a is None:
        params, _ = curve_fit(lambda x, a_: membership_curve(x, a_, b), xv, yv, p0=(1.0,))
        return float(params[0]), float(b)

    params, _ = curve_fit(lambda x, b_: membership_curve(x, a, b_), xv, yv, p0=(1.0,))
    return float(a), float(params[0])
