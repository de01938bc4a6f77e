"""
Data I/O utilities for point sets and run directories.
"""

import os
import json
import numpy as np
from typing import Dict, Tuple, Optional, Any

from ..geometry import as_chain


def save_point_set(filepath: str, points: np.ndarray,
                   metadata: Optional[Dict[str, Any]] = None,
                   verbose: bool = True) -> None:
    """
    Save a point set and metadata to disk in compressed NPZ format.

    Metadata is stored as a JSON string so nested values survive the
    round trip without pickling.

    Args:
        filepath: Path to save the .npz file
        points: Array of shape (N, 2)
        metadata: JSON-serializable dictionary

    Example:
        >>> save_point_set('henon.npz', chain, {'system': 'henon_map', 'niters': 20})
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    np.savez_compressed(
        filepath,
        points=as_chain(points),
        metadata=json.dumps(metadata or {}, default=_json_default),
    )
    if verbose:
        print(f"  Saved {len(points)} points to: {filepath}")


def load_point_set(filepath: str) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Load a point set and its metadata from disk.

    Args:
        filepath: Path to the .npz file

    Returns:
        points: Array of shape (N, 2)
        metadata: Dictionary of metadata
    """
    with np.load(filepath) as data:
        points = as_chain(data['points'])
        metadata = json.loads(str(data['metadata']))
    return points, metadata


def _json_default(obj):
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, complex):
        return [obj.real, obj.imag]
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def get_next_run_number(base_dir: str) -> int:
    """
    Find the next available run number in a directory containing run_XXX folders.

    Scans the base directory for existing folders named 'run_001', 'run_002', etc.,
    and returns the next available number in the sequence.

    Args:
        base_dir: Directory to scan for existing run folders

    Returns:
        Next available run number (starting from 1)

    Example:
        >>> # Directory contains run_001, run_002, run_005
        >>> get_next_run_number('/path/to/runs')
        6
    """
    if not os.path.exists(base_dir):
        return 1

    run_numbers = []
    for name in os.listdir(base_dir):
        if not name.startswith('run_') or not os.path.isdir(os.path.join(base_dir, name)):
            continue
        try:
            run_numbers.append(int(name.split('_')[1]))
        except (IndexError, ValueError):
            continue

    return max(run_numbers) + 1 if run_numbers else 1


__all__ = [
    'save_point_set',
    'load_point_set',
    'get_next_run_number',
]
