"""
Inverse iteration sampler.

Approximates an invariant set that repels under forward iteration (such as
a Julia set) by a random walk through the branches of the inverse relation:
at every step one of the two preimages is chosen with a fair coin.
"""

import itertools
import numpy as np
from joblib import Parallel, delayed
from tqdm import tqdm
from typing import Callable, Iterable, Optional, Sequence, Tuple

from .geometry import as_point


def make_bit_source(bits: Iterable) -> Callable[[], bool]:
    """
    Deterministic branch chooser that cycles through `bits`.

    Example:
        >>> choose = make_bit_source([1, 0])
        >>> [choose() for _ in range(3)]
        [True, False, True]
    """
    bits = list(bits)
    if not bits:
        raise ValueError("bit sequence must not be empty")
    cycle = itertools.cycle(bits)
    return lambda: bool(next(cycle))


def _random_bit_source(rng: np.random.Generator) -> Callable[[], bool]:
    return lambda: bool(rng.integers(2))


def _check_iteration_counts(total_iterations: int, transient: int):
    if total_iterations < 1:
        raise ValueError(f"total_iterations must be at least 1, got {total_iterations}")
    if transient < 0:
        raise ValueError(f"transient must be non-negative, got {transient}")
    if transient >= total_iterations:
        raise ValueError(
            f"transient ({transient}) must be smaller than total_iterations ({total_iterations})"
        )


def sample_inverse_relation(relation: Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]],
                            seed: Sequence[float],
                            total_iterations: int,
                            transient: int,
                            choose_branch: Optional[Callable[[], bool]] = None,
                            random_seed: Optional[int] = None) -> np.ndarray:
    """
    Random walk through a two-branch inverse relation.

    Steps are numbered 1..total_iterations. At each step both branches are
    evaluated at the current point and one is taken; the new point is
    recorded when the step number exceeds `transient`.

    Non-finite values are not clamped: once a branch returns NaN or inf the
    walk carries it forward.

    :param relation: relation(point) -> (branch_a_point, branch_b_point)
    :param seed: Starting point (x, y)
    :param total_iterations: Number of steps T (>= 1)
    :param transient: Number of leading steps K to discard (0 <= K < T)
    :param choose_branch: Zero-argument callable; truthy selects branch A.
                          Defaults to fair coin flips from
                          np.random.default_rng(random_seed).
    :param random_seed: Seed for the default coin (ignored when
                        `choose_branch` is given)
    :return: Array of shape (T - K, 2)
    """
    _check_iteration_counts(total_iterations, transient)
    point = as_point(seed)

    if choose_branch is None:
        choose_branch = _random_bit_source(np.random.default_rng(random_seed))

    samples = np.empty((total_iterations - transient, 2))
    for step in range(1, total_iterations + 1):
        branch_a, branch_b = relation(point)
        point = np.asarray(branch_a if choose_branch() else branch_b, dtype=float)
        if step > transient:
            samples[step - transient - 1] = point

    return samples


def sample_inverse_iteration(branch_a: Callable[[np.ndarray], np.ndarray],
                             branch_b: Callable[[np.ndarray], np.ndarray],
                             seed: Sequence[float],
                             total_iterations: int,
                             transient: int,
                             choose_branch: Optional[Callable[[], bool]] = None,
                             random_seed: Optional[int] = None) -> np.ndarray:
    """
    Random inverse iteration with the two branches given separately.

    See `sample_inverse_relation` for the walk semantics.

    Example:
        >>> from InvariantSets.systems import julia_inverse_branches
        >>> branch_a, branch_b = julia_inverse_branches(-0.123, 0.745)
        >>> points = sample_inverse_iteration(branch_a, branch_b, (0.0, 0.0), 1000, 50, random_seed=0)
        >>> points.shape
        (950, 2)
    """
    def relation(point):
        return branch_a(point), branch_b(point)

    return sample_inverse_relation(relation, seed, total_iterations, transient,
                                   choose_branch=choose_branch, random_seed=random_seed)


def sample_inverse_iteration_walks(relation: Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]],
                                   seeds: Sequence[Sequence[float]],
                                   total_iterations: int,
                                   transient: int,
                                   random_seed: Optional[int] = None,
                                   n_jobs: int = 1,
                                   progress: bool = False) -> np.ndarray:
    """
    Run one independent walk per seed and concatenate their samples.

    Every walk gets its own generator spawned from a common
    np.random.SeedSequence, so the result depends only on `random_seed`
    and not on `n_jobs`.

    :param relation: Two-branch inverse relation
    :param seeds: Starting points, one walk each
    :param total_iterations: Steps per walk
    :param transient: Discarded leading steps per walk
    :param random_seed: Entropy for the seed sequence
    :param n_jobs: Number of parallel jobs. -1 uses all CPUs (default: 1)
    :param progress: Show a progress bar over walks
    :return: Array of shape (len(seeds) * (T - K), 2), walks in seed order
    """
    _check_iteration_counts(total_iterations, transient)
    seeds = [as_point(s) for s in seeds]
    if not seeds:
        return np.empty((0, 2))

    child_seeds = np.random.SeedSequence(random_seed).spawn(len(seeds))

    def run_walk(seed, seed_seq):
        rng = np.random.default_rng(seed_seq)
        return sample_inverse_relation(relation, seed, total_iterations, transient,
                                       choose_branch=_random_bit_source(rng))

    # results arrive in submission order
    results = Parallel(n_jobs=n_jobs, return_as="generator")(
        delayed(run_walk)(seed, seed_seq) for seed, seed_seq in zip(seeds, child_seeds)
    )
    if progress:
        results = tqdm(results, total=len(seeds), desc="  Walks", ncols=80)
    results = list(results)
    return np.concatenate(results, axis=0)
