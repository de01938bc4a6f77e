"""
Closed-form periodic points of the systems in `InvariantSets.systems`.

These are used as markers on invariant-set figures and as reference values
for checking the samplers and engines.
"""

import numpy as np
from typing import Callable, List, Tuple

from .systems import complex_to_point, principal_sqrt, rotation_multiplier


def quadratic_rotation_fixed_points(alpha: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Fixed points of z -> z^2 + lambda*z, lambda = exp(2*pi*i*alpha).

    z^2 + lambda*z = z has the roots z = 0 and z = 1 - lambda.
    """
    lam = rotation_multiplier(alpha)
    return complex_to_point(0j), complex_to_point(1.0 - lam)


def quadratic_rotation_period_two_cycle(alpha: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    The period-2 orbit of z -> z^2 + lambda*z.

    Dividing f(f(z)) - z by the fixed-point factor z*(z - (1 - lambda))
    leaves z^2 + (lambda + 1)*z + (lambda + 1) = 0, whose two roots are
    swapped by the map.
    """
    lam = rotation_multiplier(alpha)
    b = lam + 1.0
    c = lam + 1.0
    root = principal_sqrt(b * b - 4.0 * c)
    return complex_to_point((-b + root) / 2.0), complex_to_point((-b - root) / 2.0)


def henon_fixed_points(a: float = 1.4, b: float = 0.3) -> List[np.ndarray]:
    """
    Real fixed points of the Henon map.

    A fixed point satisfies y = b*x and a*x^2 + (1 - b)*x - 1 = 0.
    Returns an empty list when the quadratic has no real roots.
    """
    if a == 0:
        if b == 1:
            return []
        x = 1.0 / (1.0 - b)
        return [np.array([x, b * x])]

    disc = (1.0 - b) ** 2 + 4.0 * a
    if disc < 0:
        return []
    sq = np.sqrt(disc)
    roots = sorted({(-(1.0 - b) - sq) / (2.0 * a), (-(1.0 - b) + sq) / (2.0 * a)})
    return [np.array([x, b * x]) for x in roots]


def is_periodic_point(map_f: Callable[[np.ndarray], np.ndarray],
                      point, period: int, tol: float = 1e-9) -> bool:
    """Check whether `point` returns to itself after `period` applications of `map_f`."""
    if period < 1:
        raise ValueError(f"period must be at least 1, got {period}")
    start = np.asarray(point, dtype=float)
    current = start
    for _ in range(period):
        current = np.asarray(map_f(current), dtype=float)
    return bool(np.linalg.norm(current - start) <= tol)
