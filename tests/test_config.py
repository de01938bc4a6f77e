import os
import copy

import numpy as np
import pytest
import yaml

from InvariantSets.config import (
    ConfigError,
    build_sampler_settings,
    build_subdivision_config,
    get_system_domain,
    get_system_dynamics,
    get_system_name,
    get_system_parameters,
    load_problem_config,
    load_yaml_config,
    merge_configs,
    save_config_to_yaml,
    validate_config,
)
from InvariantSets.geometry import square_chain

CONFIG_DIR = os.path.join(os.path.dirname(__file__), '..', 'configs')

FORWARD_CONFIG = {
    'system': {'type': 'forward', 'name': 'henon_map'},
    'dynamics': {'a': 1.4, 'b': 0.3},
    'domain': {'center': [0.0, 0.0], 'width': 4.0, 'height': 4.0},
    'segment_iteration': {'seed_size': 0.75, 'fragm_dist': 0.01, 'niters': 20},
}

INVERSE_CONFIG = {
    'system': {'type': 'inverse', 'name': 'julia_inverse'},
    'inverse_iteration': {'seed': [0.0, 0.0], 'total_iterations': 1000, 'transient': 51},
}


def test_system_registry_lookup():
    assert get_system_name('forward', 'henon_map') == 'Forward_henon_map'
    assert get_system_parameters('forward', 'henon_map') == {'a': 1.4, 'b': 0.3}
    assert np.allclose(get_system_domain('forward', 'henon_map'), [[-2.0, -2.0], [2.0, 2.0]])

def test_get_system_parameters_returns_copy():
    params = get_system_parameters('forward', 'henon_map')
    params['a'] = 0.0
    assert get_system_parameters('forward', 'henon_map')['a'] == 1.4

def test_get_system_dynamics_forward():
    henon = get_system_dynamics('forward', 'henon_map', a=1.0)
    assert np.allclose(henon(np.array([1.0, 1.0])), [1.0, 0.3])

def test_get_system_dynamics_inverse():
    relation = get_system_dynamics('inverse', 'julia_inverse', c_re=0.0, c_im=0.0)
    za, zb = relation(np.array([4.0, 0.0]))
    assert np.allclose(za, [2.0, 0.0])
    assert np.allclose(zb, [-2.0, 0.0])

def test_unknown_system_or_parameter():
    with pytest.raises(ConfigError):
        get_system_dynamics('backward', 'henon_map')
    with pytest.raises(ConfigError):
        get_system_dynamics('forward', 'lorenz')
    with pytest.raises(ConfigError):
        get_system_dynamics('forward', 'henon_map', c=1.0)
    with pytest.raises(ConfigError):
        get_system_domain('inverse', 'julia_inverse')

def test_merge_configs_is_recursive():
    base = {'segment_iteration': {'niters': 20, 'fragm_dist': 0.01}, 'plot': {'alpha': 1.0}}
    override = {'segment_iteration': {'fragm_dist': 0.005}}
    merged = merge_configs(base, override)
    assert merged['segment_iteration'] == {'niters': 20, 'fragm_dist': 0.005}
    assert merged['plot'] == {'alpha': 1.0}
    assert base['segment_iteration']['fragm_dist'] == 0.01

def test_validate_accepts_good_configs():
    validate_config(FORWARD_CONFIG)
    validate_config(INVERSE_CONFIG)

@pytest.mark.parametrize("section, key, value", [
    ('segment_iteration', 'fragm_dist', 0.0),
    ('segment_iteration', 'niters', -1),
    ('segment_iteration', 'niters', 2.5),
    ('segment_iteration', 'seed_size', 0.0),
    ('domain', 'width', -1.0),
    ('domain', 'center', [0.0]),
])
def test_validate_rejects_bad_forward_values(section, key, value):
    cfg = copy.deepcopy(FORWARD_CONFIG)
    cfg[section][key] = value
    with pytest.raises(ValueError):
        validate_config(cfg)

@pytest.mark.parametrize("key, value", [
    ('total_iterations', 0),
    ('transient', 1000),
    ('transient', -1),
    ('seed', [0.0, 0.0, 0.0]),
])
def test_validate_rejects_bad_inverse_values(key, value):
    cfg = copy.deepcopy(INVERSE_CONFIG)
    cfg['inverse_iteration'][key] = value
    with pytest.raises(ValueError):
        validate_config(cfg)

def test_validate_missing_sections():
    with pytest.raises(ValueError):
        validate_config({})
    with pytest.raises(ValueError):
        validate_config({'system': {'type': 'forward', 'name': 'henon_map'}})
    with pytest.raises(ConfigError):
        validate_config({'system': {'type': 'forward', 'name': 'nope'}})

def test_validate_rejects_inverted_bounds():
    cfg = copy.deepcopy(FORWARD_CONFIG)
    cfg['domain'] = {'bounds': [[1.0, 1.0], [-1.0, -1.0]]}
    with pytest.raises(ValueError):
        validate_config(cfg)

def test_build_subdivision_config_from_center():
    config = build_subdivision_config(FORWARD_CONFIG)
    assert config.niters == 20
    assert config.fragm_dist == 0.01
    assert np.allclose(config.domain.as_list(), [[-2.0, -2.0], [2.0, 2.0]])
    assert np.allclose(config.chain_base, square_chain((0.0, 0.0), 0.75))

def test_build_subdivision_config_bounds_and_default():
    cfg = copy.deepcopy(FORWARD_CONFIG)
    cfg['domain'] = {'bounds': [[0.0, 0.0], [2.0, 4.0]]}
    config = build_subdivision_config(cfg)
    assert np.allclose(config.domain.as_list(), [[0.0, 0.0], [2.0, 4.0]])
    assert np.allclose(config.chain_base[:4].mean(axis=0), [1.0, 2.0])

    del cfg['domain']
    config = build_subdivision_config(cfg)
    assert np.allclose(config.domain.as_list(), [[-2.0, -2.0], [2.0, 2.0]])

def test_build_subdivision_config_off_center_seed():
    cfg = copy.deepcopy(FORWARD_CONFIG)
    cfg['domain'] = {'bounds': [[-2.0, -2.0], [2.0, 2.0]], 'center': [1.0, 0.0],
                     'width': 4.0, 'height': 4.0}
    config = build_subdivision_config(cfg)
    assert np.allclose(config.domain.as_list(), [[-2.0, -2.0], [2.0, 2.0]])
    assert np.allclose(config.chain_base[:4].mean(axis=0), [1.0, 0.0])

def test_build_sampler_settings():
    cfg = copy.deepcopy(INVERSE_CONFIG)
    cfg['inverse_iteration']['random_seed'] = 7
    settings = build_sampler_settings(cfg)
    assert settings == {'seed': [0.0, 0.0], 'total_iterations': 1000,
                        'transient': 51, 'random_seed': 7}
    assert build_sampler_settings(INVERSE_CONFIG)['random_seed'] is None

@pytest.mark.parametrize("filename", ['henon.yaml', 'julia.yaml', 'quadratic_rotation.yaml'])
def test_shipped_problem_files_are_valid(filename):
    cfg = load_problem_config(os.path.join(CONFIG_DIR, filename), verbose=False)
    assert cfg['system']['type'] in ('forward', 'inverse')

def test_load_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(str(tmp_path / 'missing.yaml'))
    empty = tmp_path / 'empty.yaml'
    empty.write_text('')
    with pytest.raises(ValueError):
        load_yaml_config(str(empty))

def test_load_problem_config_with_base(tmp_path):
    base_path = tmp_path / 'base.yaml'
    override_path = tmp_path / 'override.yaml'
    base_path.write_text(yaml.dump(FORWARD_CONFIG))
    override_path.write_text(yaml.dump({'segment_iteration': {'niters': 3}}))
    cfg = load_problem_config(str(override_path), base_config_path=str(base_path), verbose=False)
    assert cfg['segment_iteration']['niters'] == 3
    assert cfg['segment_iteration']['fragm_dist'] == 0.01

def test_save_config_round_trip(tmp_path):
    path = tmp_path / 'nested' / 'config.yaml'
    save_config_to_yaml(FORWARD_CONFIG, str(path))
    assert load_yaml_config(str(path)) == FORWARD_CONFIG

def test_null_domain_section_uses_registry_default():
    cfg = yaml.safe_load(
        "system: {type: forward, name: henon_map}\n"
        "domain:\n"
        "segment_iteration: {seed_size: 0.75, fragm_dist: 0.01, niters: 2}\n"
    )
    assert cfg['domain'] is None
    validate_config(cfg)
    config = build_subdivision_config(cfg)
    assert np.allclose(config.domain.as_list(), [[-2.0, -2.0], [2.0, 2.0]])
    assert np.allclose(config.chain_base, square_chain((0.0, 0.0), 0.75))
