"""
Planar geometry primitives shared by the invariant-set algorithms.

Points are numpy arrays of shape (2,) and polygonal chains are arrays of
shape (N, 2). A bounding domain stores its corners in the same (2, D)
layout used for grid bounds: row 0 holds the lower corner, row 1 the upper.
"""

import numpy as np
from typing import Sequence


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def midpoint(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (np.asarray(a, dtype=float) + np.asarray(b, dtype=float)) / 2.0


def as_point(p) -> np.ndarray:
    point = np.asarray(p, dtype=float)
    if point.shape != (2,):
        raise ValueError(f"A point must have shape (2,), got {point.shape}")
    return point


def as_chain(points) -> np.ndarray:
    """
    Coerce a sequence of points to a float array of shape (N, 2).

    An empty input gives an empty (0, 2) chain.
    """
    chain = np.asarray(points, dtype=float)
    if chain.size == 0:
        return np.empty((0, 2))
    if chain.ndim != 2 or chain.shape[1] != 2:
        raise ValueError(f"A polygonal chain must have shape (N, 2), got {chain.shape}")
    return chain


def dedup_adjacent(chain: np.ndarray) -> np.ndarray:
    """
    Collapse runs of consecutive equal points to a single point.

    Repeated points at non-adjacent positions are kept.

    :param chain: Array of shape (N, 2)
    :return: New array of shape (M, 2) with M <= N
    """
    chain = as_chain(chain)
    if len(chain) < 2:
        return chain.copy()
    keep = np.ones(len(chain), dtype=bool)
    keep[1:] = np.any(chain[1:] != chain[:-1], axis=1)
    return chain[keep]


def square_chain(center: Sequence[float], side: float) -> np.ndarray:
    """
    Closed square polygon centered at `center`, first corner repeated last.

    Corners are visited in the order (-,-), (-,+), (+,+), (+,-), (-,-).
    """
    signs = np.array([[-1.0, -1.0], [-1.0, 1.0], [1.0, 1.0], [1.0, -1.0], [-1.0, -1.0]])
    return np.asarray(center, dtype=float) + signs * side / 2.0


class BoundingDomain:
    """
    An axis-aligned rectangle used to clip images of chain points.
    """

    def __init__(self, bounds):
        """
        :param bounds: Array-like of shape (2, D) holding [[mins], [maxs]].
        """
        bounds = np.array(bounds, dtype=float)
        if bounds.ndim != 2 or bounds.shape[0] != 2:
            raise ValueError(f"bounds must have shape (2, D), got {bounds.shape}")
        if not np.all(np.isfinite(bounds)):
            raise ValueError("bounds must be finite")
        if np.any(bounds[0] > bounds[1]):
            raise ValueError(f"domain lower corner {bounds[0]} exceeds upper corner {bounds[1]}")
        bounds.setflags(write=False)
        self.bounds = bounds
        self.dim = bounds.shape[1]

    @classmethod
    def from_center(cls, center: Sequence[float], width: float, height: float) -> "BoundingDomain":
        half = np.array([width, height], dtype=float) / 2.0
        center = np.asarray(center, dtype=float)
        return cls([center - half, center + half])

    @property
    def lower(self) -> np.ndarray:
        return self.bounds[0]

    @property
    def upper(self) -> np.ndarray:
        return self.bounds[1]

    def contains(self, point) -> bool:
        """
        Inclusive membership test. NaN and infinite coordinates are outside.
        """
        p = np.asarray(point, dtype=float)
        # comparisons against NaN are False, so NaN falls outside
        return bool(np.all((p >= self.bounds[0]) & (p <= self.bounds[1])))

    def as_list(self):
        return self.bounds.tolist()

    def __eq__(self, other):
        if not isinstance(other, BoundingDomain):
            return NotImplemented
        return np.array_equal(self.bounds, other.bounds)

    def __repr__(self):
        return f"BoundingDomain({self.as_list()})"
