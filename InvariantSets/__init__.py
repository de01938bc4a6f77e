"""
InvariantSets: Approximation of invariant sets of planar maps.

This library provides two strategies for approximating invariant point sets
of discrete dynamical systems: adaptive refinement of a polygonal chain under
a forward map, and random iteration of a two-branch inverse relation.
"""

__version__ = "0.1.0"

# Core components
from .geometry import (
    BoundingDomain,
    distance,
    midpoint,
    dedup_adjacent,
    square_chain,
)
from .subdivision import (
    SubdivisionConfig,
    fragmentize_segment,
    fragmentize,
    apply_map,
    run_segment_iteration,
)
from .sampler import (
    sample_inverse_relation,
    sample_inverse_iteration,
    sample_inverse_iteration_walks,
    make_bit_source,
)
from .systems import principal_sqrt

# Utility modules
from . import systems
from . import periodic
from . import utils

__all__ = [
    # Geometry
    'BoundingDomain',
    'distance',
    'midpoint',
    'dedup_adjacent',
    'square_chain',
    # Forward subdivision engine
    'SubdivisionConfig',
    'fragmentize_segment',
    'fragmentize',
    'apply_map',
    'run_segment_iteration',
    # Inverse iteration sampler
    'sample_inverse_relation',
    'sample_inverse_iteration',
    'sample_inverse_iteration_walks',
    'make_bit_source',
    'principal_sqrt',
    # Modules
    'systems',
    'periodic',
    'utils',
]
