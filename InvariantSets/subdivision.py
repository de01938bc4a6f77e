"""
Forward subdivision engine.

Refines a polygonal chain so that the image of every retained segment under
a map is shorter than a fragmentation distance, then replaces the chain by
its image. Repeating this refine-then-map round converges toward the
invariant set of the map inside a bounding domain.
"""

from dataclasses import dataclass
import numpy as np
from typing import Callable, Dict, List, Sequence, Any

from .geometry import BoundingDomain, as_chain, dedup_adjacent, distance, midpoint, square_chain


@dataclass(frozen=True, eq=False)
class SubdivisionConfig:
    """
    Immutable configuration of one segment-iteration run.

    :param domain: Region the images of retained points must lie in.
    :param niters: Number of refine-then-map rounds (>= 0).
    :param fragm_dist: Largest allowed distance between the images of two
                       adjacent chain points (> 0).
    :param chain_base: Seed polygonal chain of shape (N, 2), N >= 1.
    """
    domain: BoundingDomain
    niters: int
    fragm_dist: float
    chain_base: np.ndarray

    def __post_init__(self):
        if not isinstance(self.domain, BoundingDomain):
            object.__setattr__(self, 'domain', BoundingDomain(self.domain))
        if isinstance(self.niters, bool) or int(self.niters) != self.niters or self.niters < 0:
            raise ValueError(f"niters must be a non-negative integer, got {self.niters}")
        if not np.isfinite(self.fragm_dist) or self.fragm_dist <= 0:
            raise ValueError(f"fragm_dist must be positive, got {self.fragm_dist}")

        chain = np.array(as_chain(self.chain_base))
        if len(chain) == 0:
            raise ValueError("chain_base must contain at least one point")
        chain.setflags(write=False)

        object.__setattr__(self, 'niters', int(self.niters))
        object.__setattr__(self, 'fragm_dist', float(self.fragm_dist))
        object.__setattr__(self, 'chain_base', chain)

    @classmethod
    def from_center(cls, center: Sequence[float], width: float, height: float,
                    seed_size: float, fragm_dist: float, niters: int) -> "SubdivisionConfig":
        """
        Build a configuration from a center point.

        The domain is the width x height rectangle around `center` and the
        seed chain is the closed square of side `seed_size` around it.

        Example:
            >>> config = SubdivisionConfig.from_center((0.0, 0.0), 4.0, 4.0, 0.75, 0.01, 20)
            >>> config.domain.as_list()
            [[-2.0, -2.0], [2.0, 2.0]]
        """
        return cls(
            domain=BoundingDomain.from_center(center, width, height),
            niters=niters,
            fragm_dist=fragm_dist,
            chain_base=square_chain(center, seed_size),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'domain': self.domain.as_list(),
            'niters': self.niters,
            'fragm_dist': self.fragm_dist,
            'chain_base': self.chain_base.tolist(),
        }


def fragmentize_segment(p1: np.ndarray, p2: np.ndarray,
                        map_f: Callable[[np.ndarray], np.ndarray],
                        domain: BoundingDomain,
                        fragm_dist: float) -> List[np.ndarray]:
    """
    Adaptively bisect the segment [p1, p2] against the image tolerance.

    A (sub)segment is dropped when the image of either endpoint leaves the
    domain, emitted as its two endpoints when the images are closer than
    `fragm_dist`, and otherwise split at its midpoint. Subsegments are
    processed depth-first, left half before right half.

    :param p1: First endpoint, shape (2,)
    :param p2: Second endpoint, shape (2,)
    :param map_f: Forward map
    :param domain: Bounding domain for the images
    :param fragm_dist: Fragmentation distance
    :return: List of emitted points, in order
    """
    emitted = []
    stack = [(np.asarray(p1, dtype=float), np.asarray(p2, dtype=float))]

    while stack:
        a, b = stack.pop()
        fa = map_f(a)
        fb = map_f(b)

        if not (domain.contains(fa) and domain.contains(fb)):
            continue

        if distance(fa, fb) < fragm_dist:
            emitted.append(a)
            emitted.append(b)
            continue

        mid = midpoint(a, b)
        if np.array_equal(mid, a) or np.array_equal(mid, b):
            # floating point cannot split this segment any further
            emitted.append(a)
            emitted.append(b)
            continue

        # right half pushed first so the left half is emitted first
        stack.append((mid, b))
        stack.append((a, mid))

    return emitted


def fragmentize(chain: np.ndarray,
                map_f: Callable[[np.ndarray], np.ndarray],
                domain: BoundingDomain,
                fragm_dist: float) -> np.ndarray:
    """
    Refine every consecutive pair of a chain and deduplicate the result.

    :param chain: Polygonal chain of shape (N, 2)
    :return: Refined chain of shape (M, 2); empty when N < 2 or when every
             segment is clipped by the domain
    """
    chain = as_chain(chain)
    fragments = []
    for i in range(len(chain) - 1):
        fragments.extend(fragmentize_segment(chain[i], chain[i + 1], map_f, domain, fragm_dist))

    if not fragments:
        return np.empty((0, 2))
    return dedup_adjacent(np.array(fragments))


def apply_map(chain: np.ndarray, map_f: Callable[[np.ndarray], np.ndarray]) -> np.ndarray:
    """Element-wise image of a chain under `map_f`."""
    chain = as_chain(chain)
    if len(chain) == 0:
        return np.empty((0, 2))
    return np.array([np.asarray(map_f(p), dtype=float) for p in chain])


def run_segment_iteration(map_f: Callable[[np.ndarray], np.ndarray],
                          config: SubdivisionConfig,
                          verbose: bool = False,
                          history: bool = False):
    """
    Approximate the invariant set of `map_f` by iterated chain refinement.

    Each of the `config.niters` rounds:
    1. Refines the current chain with `fragmentize`
    2. Replaces the chain by its image under `map_f`

    With niters == 0 the seed chain is returned unchanged.

    :param map_f: Forward map, point -> point
    :param config: Run configuration
    :param verbose: Print the chain size at the start of each round
    :param history: Also return per-round statistics
    :return: Final chain of shape (M, 2), or (chain, history_list) when
             `history` is True
    """
    chain = np.array(config.chain_base)
    rounds = []

    for i in range(config.niters):
        if verbose:
            print(f"Iteration {i + 1}/{config.niters} (points: {len(chain)})")

        refined = fragmentize(chain, map_f, config.domain, config.fragm_dist)
        next_chain = apply_map(refined, map_f)

        rounds.append({
            'iteration': i,
            'num_points_in': len(chain),
            'num_points_refined': len(refined),
            'num_points_out': len(next_chain),
        })
        chain = next_chain

        if len(chain) == 0:
            # every later round would also be empty
            if verbose:
                print("  Chain left the domain - terminating.")
            break

    if history:
        return chain, rounds
    return chain
