import dataclasses

import numpy as np
import pytest

from InvariantSets.geometry import BoundingDomain, distance, square_chain
from InvariantSets.subdivision import (
    SubdivisionConfig,
    apply_map,
    fragmentize,
    fragmentize_segment,
    run_segment_iteration,
)
from InvariantSets.systems import henon_map


BIG_DOMAIN = BoundingDomain([[-10.0, -10.0], [10.0, 10.0]])


def henon_config(niters, fragm_dist=0.01, domain_size=4.0):
    return SubdivisionConfig.from_center((0.0, 0.0), domain_size, domain_size, 0.75, fragm_dist, niters)


def test_fragmentize_segment_identity_bisection_order():
    identity = lambda p: p
    emitted = fragmentize_segment(np.array([0.0, 0.0]), np.array([1.0, 0.0]), identity, BIG_DOMAIN, 0.3)
    xs = [p[0] for p in emitted]
    assert xs == [0.0, 0.25, 0.25, 0.5, 0.5, 0.75, 0.75, 1.0]

def test_fragmentize_identity_deduplicates_shared_endpoints():
    identity = lambda p: p
    chain = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
    result = fragmentize(chain, identity, BIG_DOMAIN, 0.3)
    expected = np.array([
        [0.0, 0.0], [0.25, 0.0], [0.5, 0.0], [0.75, 0.0], [1.0, 0.0],
        [1.0, 0.25], [1.0, 0.5], [1.0, 0.75], [1.0, 1.0],
    ])
    assert np.allclose(result, expected)

def test_resolved_segment_emits_endpoints_unchanged():
    identity = lambda p: p
    emitted = fragmentize_segment(np.array([0.0, 0.0]), np.array([0.1, 0.0]), identity, BIG_DOMAIN, 1.0)
    assert len(emitted) == 2
    assert np.array_equal(emitted[0], [0.0, 0.0])
    assert np.array_equal(emitted[1], [0.1, 0.0])

def test_segment_with_one_image_outside_is_discarded():
    identity = lambda p: p
    domain = BoundingDomain([[-1.0, -1.0], [1.0, 1.0]])
    # second endpoint outside, whole segment dropped even though the first is inside
    emitted = fragmentize_segment(np.array([0.0, 0.0]), np.array([2.0, 0.0]), identity, domain, 0.1)
    assert emitted == []

def test_fragmentize_domain_containment_henon():
    config = henon_config(niters=1)
    refined = fragmentize(config.chain_base, henon_map, config.domain, config.fragm_dist)
    assert len(refined) > 0
    for p in refined:
        assert config.domain.contains(henon_map(p))

def test_fragmentize_segment_tolerance_bound_henon():
    config = henon_config(niters=1)
    chain = config.chain_base
    for i in range(len(chain) - 1):
        emitted = fragmentize_segment(chain[i], chain[i + 1], henon_map, config.domain, config.fragm_dist)
        assert len(emitted) % 2 == 0
        for p1, p2 in zip(emitted[0::2], emitted[1::2]):
            assert distance(henon_map(p1), henon_map(p2)) < config.fragm_dist

def test_fragmentize_has_no_adjacent_duplicates():
    config = henon_config(niters=1, fragm_dist=0.05)
    chain = run_segment_iteration(henon_map, dataclasses.replace(config, niters=2))
    refined = fragmentize(chain, henon_map, config.domain, config.fragm_dist)
    assert len(refined) > 1
    assert not np.any(np.all(refined[1:] == refined[:-1], axis=1))

def test_fragmentize_short_chains():
    identity = lambda p: p
    assert fragmentize(np.empty((0, 2)), identity, BIG_DOMAIN, 0.1).shape == (0, 2)
    assert fragmentize(np.array([[0.0, 0.0]]), identity, BIG_DOMAIN, 0.1).shape == (0, 2)

def test_fragmentize_prunes_non_finite_images():
    nan_map = lambda p: np.array([np.nan, np.nan])
    result = fragmentize(square_chain((0.0, 0.0), 1.0), nan_map, BIG_DOMAIN, 0.1)
    assert result.shape == (0, 2)

def test_fragmentize_discontinuous_map_terminates():
    step = lambda p: np.array([0.0, 0.0]) if p[0] < 0.5 else np.array([1.0, 0.0])
    chain = np.array([[0.0, 0.0], [1.0, 0.0]])
    result = fragmentize(chain, step, BIG_DOMAIN, 0.1)
    assert np.array_equal(result[0], [0.0, 0.0])
    assert np.array_equal(result[-1], [1.0, 0.0])
    assert np.all(np.diff(result[:, 0]) > 0)

def test_apply_map():
    chain = np.array([[0.0, 0.0], [1.0, 0.0]])
    image = apply_map(chain, henon_map)
    assert np.allclose(image, [[1.0, 0.0], [-0.4, 0.3]])
    assert apply_map(np.empty((0, 2)), henon_map).shape == (0, 2)

def test_zero_iterations_returns_seed_chain():
    # niters=0: no refinement and no map step
    config = henon_config(niters=0)
    result = run_segment_iteration(henon_map, config)
    assert np.array_equal(result, config.chain_base)
    assert result is not config.chain_base

def test_seed_fragmentation_of_zero_iteration_config():
    config = henon_config(niters=0)
    refined = fragmentize(config.chain_base, henon_map, config.domain, config.fragm_dist)
    assert np.array_equal(refined[0], config.chain_base[0])
    assert np.array_equal(refined[-1], config.chain_base[-1])
    assert len(refined) > len(config.chain_base)

def test_tiny_domain_gives_empty_result():
    config = henon_config(niters=1, domain_size=0.002)
    assert np.allclose(config.domain.as_list(), [[-0.001, -0.001], [0.001, 0.001]])
    result = run_segment_iteration(henon_map, config)
    assert result.shape == (0, 2)

def test_empty_chain_stops_early_with_history():
    config = henon_config(niters=5, domain_size=0.002)
    result, history = run_segment_iteration(henon_map, config, history=True)
    assert result.shape == (0, 2)
    assert len(history) == 1
    assert history[0]['num_points_in'] == 5
    assert history[0]['num_points_out'] == 0

def test_run_is_deterministic():
    config = henon_config(niters=3, fragm_dist=0.05)
    first = run_segment_iteration(henon_map, config)
    second = run_segment_iteration(henon_map, config)
    assert np.array_equal(first, second)

def test_run_history_and_verbose_output(capsys):
    config = henon_config(niters=2, fragm_dist=0.05)
    chain, history = run_segment_iteration(henon_map, config, verbose=True, history=True)
    out = capsys.readouterr().out
    assert "Iteration 1/2 (points: 5)" in out
    assert "Iteration 2/2" in out
    assert [h['iteration'] for h in history] == [0, 1]
    assert history[-1]['num_points_out'] == len(chain)
    assert history[0]['num_points_refined'] == history[0]['num_points_out']

def test_run_output_is_image_of_points_inside_domain():
    config = henon_config(niters=2, fragm_dist=0.05)
    chain = run_segment_iteration(henon_map, config)
    assert len(chain) > 0
    for p in chain:
        assert config.domain.contains(p)

def test_identity_map_keeps_nonempty_chain():
    config = SubdivisionConfig.from_center((0.0, 0.0), 4.0, 4.0, 1.0, 0.1, 3)
    chain = run_segment_iteration(lambda p: p, config)
    assert len(chain) > len(config.chain_base)
    steps = np.linalg.norm(np.diff(chain, axis=0), axis=1)
    assert np.all(steps < 0.1)


# Configuration

def test_config_from_center():
    config = henon_config(niters=20)
    assert config.niters == 20
    assert config.fragm_dist == 0.01
    assert np.allclose(config.domain.as_list(), [[-2.0, -2.0], [2.0, 2.0]])
    assert np.allclose(config.chain_base, square_chain((0.0, 0.0), 0.75))

def test_config_is_immutable():
    config = henon_config(niters=1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.niters = 5
    with pytest.raises(ValueError):
        config.chain_base[0, 0] = 1.0

def test_config_copies_seed_chain():
    seed = square_chain((0.0, 0.0), 1.0)
    config = SubdivisionConfig(BoundingDomain([[-1, -1], [1, 1]]), 1, 0.1, seed)
    seed[0, 0] = 99.0
    assert config.chain_base[0, 0] == -0.5

def test_config_accepts_bounds_for_domain():
    config = SubdivisionConfig([[-1.0, -1.0], [1.0, 1.0]], 1, 0.1, [[0.0, 0.0], [0.5, 0.5]])
    assert isinstance(config.domain, BoundingDomain)

@pytest.mark.parametrize("kwargs", [
    {'fragm_dist': 0.0},
    {'fragm_dist': -0.1},
    {'fragm_dist': float('nan')},
    {'niters': -1},
    {'niters': 1.5},
    {'chain_base': np.empty((0, 2))},
    {'domain': [[1.0, 1.0], [-1.0, -1.0]]},
])
def test_config_preconditions(kwargs):
    params = {
        'domain': [[-1.0, -1.0], [1.0, 1.0]],
        'niters': 1,
        'fragm_dist': 0.1,
        'chain_base': [[0.0, 0.0], [0.5, 0.5]],
    }
    params.update(kwargs)
    with pytest.raises(ValueError):
        SubdivisionConfig(**params)

def test_config_to_dict():
    config = henon_config(niters=2)
    d = config.to_dict()
    assert d['niters'] == 2
    assert d['fragm_dist'] == 0.01
    assert d['domain'] == [[-2.0, -2.0], [2.0, 2.0]]
    assert len(d['chain_base']) == 5
