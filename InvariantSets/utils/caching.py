"""
Caching of computed point sets keyed on a parameter hash.

Long segment-iteration and inverse-iteration runs are stored under
<cache_base_dir>/<hash>/ and reused when the same system, parameters and
run settings are requested again.
"""

import os
import json
import hashlib
import numpy as np
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from .io import save_point_set, load_point_set, _json_default


def compute_parameter_hash(system_name: str,
                           params: Dict[str, Any],
                           settings: Dict[str, Any]) -> str:
    """
    Compute a unique hash for a point-set computation.

    Args:
        system_name: Registry name of the dynamical system
        params: Parameters of the dynamics
        settings: Run settings (domain, tolerance, iteration counts, seeds)

    Returns:
        SHA256 hash string (first 16 characters for readability)

    Example:
        >>> compute_parameter_hash('henon_map', {'a': 1.4, 'b': 0.3},
        ...                        {'niters': 20, 'fragm_dist': 0.01})
    """
    payload = {
        'system': system_name,
        'params': params,
        'settings': settings,
    }
    encoded = json.dumps(payload, sort_keys=True, default=_json_default)
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()[:16]


def get_cache_path(cache_base_dir: str, hash_value: str) -> str:
    return os.path.join(cache_base_dir, hash_value, 'points.npz')


def load_or_compute_point_set(cache_base_dir: str,
                              hash_value: str,
                              compute_func: Callable[[], np.ndarray],
                              metadata: Optional[Dict[str, Any]] = None,
                              force_recompute: bool = False,
                              verbose: bool = True) -> Tuple[np.ndarray, bool]:
    """
    Load a cached point set or compute and cache it.

    Args:
        cache_base_dir: Directory holding one subdirectory per hash
        hash_value: Key from compute_parameter_hash
        compute_func: Zero-argument callable producing the point set
        metadata: Extra metadata stored alongside the points
        force_recompute: If True, ignore the cache
        verbose: Whether to print cache messages

    Returns:
        Tuple of (points, was_cached)
    """
    cache_path = get_cache_path(cache_base_dir, hash_value)

    if os.path.exists(cache_path) and not force_recompute:
        if verbose:
            print(f"Loading cached point set from {os.path.dirname(cache_path)}")
        points, _ = load_point_set(cache_path)
        return points, True

    if verbose:
        print(f"Computing point set (hash: {hash_value})")
    points = compute_func()

    save_point_set(cache_path, points, {
        'hash': hash_value,
        'timestamp': datetime.now().isoformat(),
        **(metadata or {}),
    }, verbose=verbose)
    return points, False


__all__ = [
    'compute_parameter_hash',
    'get_cache_path',
    'load_or_compute_point_set',
]
