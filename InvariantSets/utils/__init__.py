"""
Utility modules for InvariantSets package.

This package is split into focused modules:
- io: Point set I/O and run directories
- caching: Hash-keyed caching of computed point sets

All public functions are re-exported here.
"""

from .io import (
    save_point_set,
    load_point_set,
    get_next_run_number,
)
from .caching import (
    compute_parameter_hash,
    get_cache_path,
    load_or_compute_point_set,
)

__all__ = [
    'save_point_set',
    'load_point_set',
    'get_next_run_number',
    'compute_parameter_hash',
    'get_cache_path',
    'load_or_compute_point_set',
]
