#!/usr/bin/env python3
"""
InvariantSets Example 1: Segment iteration of the Hénon map

A small square around the origin is refined and pushed forward by the
Hénon map. Each round bisects every segment whose image is longer than the
fragmentation distance and drops segments whose image leaves the domain,
so after enough rounds the chain traces the attractor.
"""

import os
import time
import argparse

from InvariantSets.subdivision import SubdivisionConfig, run_segment_iteration
from InvariantSets.systems import henon_map
from InvariantSets.periodic import henon_fixed_points
from InvariantSets.plot import plot_invariant_set_with_markers
from InvariantSets.utils import save_point_set

# Set up output directory for figures
output_dir = os.path.dirname(os.path.abspath(__file__))
output_path = os.path.join(output_dir, "output", "1_henon_segment_iteration")

# =============================================================================
# CONFIGURATION - Edit this section to customize the run
# =============================================================================

CENTER = (0.0, 0.0)     # Center of the domain and of the seed square
WIDTH, HEIGHT = 4.0, 4.0  # Domain size
SEED_SIZE = 0.75        # Side of the seed square
FRAGM_DIST = 0.01       # Fragmentation distance
NITERS = 20             # Refine-then-map rounds

# Henon map parameters
A, B = 1.4, 0.3


def main(niters=NITERS, fragm_dist=FRAGM_DIST, a=A, b=B):
    print("InvariantSets Example 1: Hénon segment iteration")
    print("=" * 50)
    os.makedirs(output_path, exist_ok=True)

    config = SubdivisionConfig.from_center(CENTER, WIDTH, HEIGHT, SEED_SIZE, fragm_dist, niters)
    print(f"Domain: {config.domain.as_list()}")
    print(f"Seed chain: {len(config.chain_base)} points")

    start = time.time()
    chain, history = run_segment_iteration(
        lambda p: henon_map(p, a=a, b=b), config, verbose=True, history=True
    )
    print(f"Completed in {time.time() - start:.2f}s with {len(chain)} points")

    fixed_points = henon_fixed_points(a, b)
    for p in fixed_points:
        print(f"  Fixed point: ({p[0]:.4f}, {p[1]:.4f})")

    plot_invariant_set_with_markers(
        chain,
        {'Fixed Points': fixed_points},
        output_path=os.path.join(output_path, "result1.png"),
        title="Henon Invariant Set",
        alpha=1.0,
    )
    save_point_set(os.path.join(output_path, "henon_chain.npz"), chain, {
        'a': a, 'b': b, 'history': history, **config.to_dict()
    })


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Approximate the Hénon attractor by adaptive segment iteration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python 1_henon_segment_iteration.py
  python 1_henon_segment_iteration.py --niters 10 --fragm-dist 0.005
        """
    )
    parser.add_argument('--niters', type=int, default=NITERS,
                        help='number of refine-then-map rounds')
    parser.add_argument('--fragm-dist', type=float, default=FRAGM_DIST,
                        help='fragmentation distance')
    parser.add_argument('-a', type=float, default=A, help='Hénon parameter a')
    parser.add_argument('-b', type=float, default=B, help='Hénon parameter b')
    args = parser.parse_args()

    main(niters=args.niters, fragm_dist=args.fragm_dist, a=args.a, b=args.b)
