"""
Standard dynamical systems for invariant-set approximation.

This module provides forward maps of the plane (consumed by the forward
subdivision engine) and two-branch inverse relations of quadratic maps of
the complex plane (consumed by the inverse iteration sampler).

Complex-plane systems take and return points (x, y) = (Re z, Im z), so
every system here shares the calling convention f(point) -> point.
"""

import cmath
import numpy as np
from typing import Callable, Tuple


# =============================================================================
# Complex <-> point conversion
# =============================================================================

def as_complex(point) -> complex:
    """Interpret a point (x, y) as the complex number x + iy."""
    return complex(float(point[0]), float(point[1]))


def complex_to_point(z: complex) -> np.ndarray:
    """Return the point (Re z, Im z)."""
    return np.array([z.real, z.imag])


def principal_sqrt(z: complex) -> complex:
    """
    Principal square root with a pinned branch-cut convention.

    The result always has a non-negative real part. When the real part is
    zero (z on the closed negative real axis), the imaginary part is
    non-negative, regardless of the sign of a zero imaginary part of z.

    cmath.sqrt alone would return -2j for complex(-4, -0.0) and 2j for
    complex(-4, 0.0); here both give 2j.

    Args:
        z: Complex number

    Returns:
        The square root w with w*w == z, Re(w) >= 0 and Im(w) >= 0 when Re(w) == 0

    Example:
        >>> principal_sqrt(complex(-4.0, -0.0))
        2j
    """
    w = cmath.sqrt(complex(z))
    if w.real < 0.0 or (w.real == 0.0 and w.imag < 0.0):
        w = -w
    # normalize a signed zero real part
    return complex(abs(w.real) if w.real == 0.0 else w.real, w.imag)


# =============================================================================
# Forward maps of the plane
# =============================================================================

def henon_map(x: np.ndarray, a: float = 1.4, b: float = 0.3) -> np.ndarray:
    """
    Henon map: A canonical chaotic discrete dynamical system.

    The Henon map is defined by:
        x_{n+1} = 1 - a*x_n^2 + y_n
        y_{n+1} = b*x_n

    Args:
        x: Point of shape (2,) with [x, y]
        a: Parameter a (default: 1.4)
        b: Parameter b (default: 0.3)

    Returns:
        Next point of shape (2,)

    Example:
        >>> from InvariantSets.systems import henon_map
        >>> henon_map(np.array([0.0, 0.0]))
        array([1., 0.])
    """
    x_val, y_val = x
    return np.array([1.0 - a * x_val * x_val + y_val, b * x_val])


def ikeda_map(x: np.ndarray, u: float = 0.9) -> np.ndarray:
    """
    Ikeda map of a ring laser cavity.

        t = 0.4 - 6 / (1 + x^2 + y^2)
        x_{n+1} = 1 + u*(x*cos(t) - y*sin(t))
        y_{n+1} = u*(x*sin(t) + y*cos(t))

    Args:
        x: Point of shape (2,)
        u: Dissipation parameter (default: 0.9)

    Returns:
        Next point of shape (2,)
    """
    x_val, y_val = x
    t = 0.4 - 6.0 / (1.0 + x_val * x_val + y_val * y_val)
    cos_t, sin_t = np.cos(t), np.sin(t)
    return np.array([
        1.0 + u * (x_val * cos_t - y_val * sin_t),
        u * (x_val * sin_t + y_val * cos_t),
    ])


# =============================================================================
# Quadratic maps of the complex plane
# =============================================================================

def rotation_multiplier(alpha: float) -> complex:
    """lambda = exp(2*pi*i*alpha), the multiplier of the fixed point at 0."""
    return cmath.exp(2j * cmath.pi * alpha)


def quadratic_julia_map(x: np.ndarray, c_re: float = -0.123, c_im: float = 0.745) -> np.ndarray:
    """
    Quadratic family z -> z^2 + c.

    The default c = -0.123 + 0.745i gives the "Douady rabbit" Julia set.
    """
    z = as_complex(x)
    return complex_to_point(z * z + complex(c_re, c_im))


def quadratic_rotation_map(x: np.ndarray, alpha: float = 0.05) -> np.ndarray:
    """
    Quadratic map z -> z^2 + lambda*z with lambda = exp(2*pi*i*alpha).

    The origin is a fixed point with rotation number alpha.
    """
    z = as_complex(x)
    lam = rotation_multiplier(alpha)
    return complex_to_point(z * z + lam * z)


def quadratic_inverse_relation(b: complex, c0: complex) -> Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]:
    """
    Two-branch inverse of the map z -> z^2 + b*z + c0.

    Solving z^2 + b*z + (c0 - w) = 0 for z gives the branches

        z_a = (-b + sqrt(disc)) / 2
        z_b = (-b - sqrt(disc)) / 2,    disc = b^2 - 4*(c0 - w)

    where sqrt is `principal_sqrt`. The square root is evaluated once per
    call and both branches are returned.

    Args:
        b: Linear coefficient
        c0: Constant coefficient

    Returns:
        relation(w_point) -> (z_a_point, z_b_point)
    """
    b = complex(b)
    c0 = complex(c0)
    b_sq = b * b

    def relation(point):
        w = as_complex(point)
        root = principal_sqrt(b_sq - 4.0 * (c0 - w))
        return complex_to_point((-b + root) / 2.0), complex_to_point((-b - root) / 2.0)

    return relation


def julia_inverse_relation(c_re: float = -0.123, c_im: float = 0.745):
    """Inverse of z -> z^2 + c: the branches +sqrt(w - c) and -sqrt(w - c)."""
    return quadratic_inverse_relation(0.0, complex(c_re, c_im))


def quadratic_rotation_inverse_relation(alpha: float = 0.05):
    """Inverse of z -> z^2 + lambda*z: (-lambda +- sqrt(lambda^2 + 4w)) / 2."""
    return quadratic_inverse_relation(rotation_multiplier(alpha), 0.0)


def split_branches(relation) -> Tuple[Callable, Callable]:
    """Split a two-branch relation into two single-valued branch callables."""
    return (lambda p: relation(p)[0]), (lambda p: relation(p)[1])


def julia_inverse_branches(c_re: float = -0.123, c_im: float = 0.745):
    return split_branches(julia_inverse_relation(c_re, c_im))


def quadratic_rotation_inverse_branches(alpha: float = 0.05):
    return split_branches(quadratic_rotation_inverse_relation(alpha))
