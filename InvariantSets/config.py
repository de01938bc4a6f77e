import os
import yaml
import numpy as np
from typing import Dict, Any, Optional, Callable
from functools import partial

# Import dynamical systems
from InvariantSets import systems
from InvariantSets.geometry import BoundingDomain, square_chain
from InvariantSets.subdivision import SubdivisionConfig


# Define a registry for dynamical systems
# Each entry contains:
# 'dynamics_func': Callable returning the next point ('forward') or a factory
#                  returning a two-branch relation ('inverse')
# 'default_domain': Default bounding domain as [[min_vals], [max_vals]] (forward only)
# 'default_params': Default parameters for the dynamics
system_registry: Dict[str, Dict[str, Any]] = {
    'forward': {
        'henon_map': {
            'dynamics_func': systems.henon_map,
            'default_domain': [[-2.0, -2.0], [2.0, 2.0]],
            'default_params': {'a': 1.4, 'b': 0.3}
        },
        'ikeda_map': {
            'dynamics_func': systems.ikeda_map,
            'default_domain': [[-1.0, -3.0], [3.0, 2.0]],
            'default_params': {'u': 0.9}
        },
        'quadratic_julia_map': {
            'dynamics_func': systems.quadratic_julia_map,
            'default_domain': [[-2.0, -2.0], [2.0, 2.0]],
            'default_params': {'c_re': -0.123, 'c_im': 0.745}
        },
        'quadratic_rotation_map': {
            'dynamics_func': systems.quadratic_rotation_map,
            'default_domain': [[-2.0, -1.8], [1.5, 1.8]],
            'default_params': {'alpha': 0.05}
        }
    },
    'inverse': {
        'julia_inverse': {
            'dynamics_func': systems.julia_inverse_relation,
            'default_params': {'c_re': -0.123, 'c_im': 0.745}
        },
        'quadratic_rotation_inverse': {
            'dynamics_func': systems.quadratic_rotation_inverse_relation,
            'default_params': {'alpha': 0.05}
        }
    }
}


class ConfigError(Exception):
    """Custom exception for configuration related errors."""
    pass


def get_system_info(system_type: str, dynamics_name: str) -> Dict[str, Any]:
    """Helper to retrieve system info from the registry."""
    if system_type not in system_registry:
        raise ConfigError(f"Unknown system type: {system_type}. Choose from {list(system_registry.keys())}")
    if dynamics_name not in system_registry[system_type]:
        raise ConfigError(f"Unknown dynamics name for {system_type}: {dynamics_name}. Choose from {list(system_registry[system_type].keys())}")
    return system_registry[system_type][dynamics_name]


def get_system_name(system_type: str, dynamics_name: str) -> str:
    """Returns a formatted name for the system."""
    return f"{system_type.capitalize()}_{dynamics_name}"


def get_system_dynamics(system_type: str, dynamics_name: str, **kwargs) -> Callable:
    """
    Retrieve the dynamics for a given system, with custom parameters
    applied on top of the defaults.

    Forward systems yield a map point -> point. Inverse systems yield a
    two-branch relation point -> (point, point).
    """
    info = get_system_info(system_type, dynamics_name)
    default_params = info.get('default_params', {})

    unknown = set(kwargs) - set(default_params)
    if unknown:
        raise ConfigError(f"Unknown parameters for {dynamics_name}: {sorted(unknown)}")

    final_params = {**default_params, **kwargs}

    if system_type == 'inverse':
        return info['dynamics_func'](**final_params)
    return partial(info['dynamics_func'], **final_params)


def get_system_domain(system_type: str, dynamics_name: str) -> np.ndarray:
    """Retrieve the default bounding domain for a forward system."""
    info = get_system_info(system_type, dynamics_name)
    if 'default_domain' not in info:
        raise ConfigError(f"{dynamics_name} has no default domain")
    return np.array(info['default_domain'])


def get_system_parameters(system_type: str, dynamics_name: str) -> Dict[str, Any]:
    """Retrieve the default parameters for a given system."""
    info = get_system_info(system_type, dynamics_name)
    return dict(info.get('default_params', {}))


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
        ValueError: If config file is empty

    Example:
        >>> config_dict = load_yaml_config('configs/henon.yaml')
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML config {config_path}: {e}")

    if config_dict is None:
        raise ValueError(f"Empty config file: {config_path}")

    return config_dict


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Override config takes precedence. Handles nested dictionaries recursively.

    Example:
        >>> base = {'segment_iteration': {'niters': 20}}
        >>> override = {'segment_iteration': {'fragm_dist': 0.005}}
        >>> merge_configs(base, override)
        {'segment_iteration': {'niters': 20, 'fragm_dist': 0.005}}
    """
    result = base_config.copy()

    for key, value in override_config.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            result[key] = merge_configs(result[key], value)
        else:
            # Override value
            result[key] = value

    return result


def _validate_point(value, name: str):
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{name} must be a list [x, y]")


def validate_config(config_dict: Dict[str, Any]) -> None:
    """
    Validate a problem configuration dictionary.

    Checks that the system exists in the registry and that the section
    matching its type is present with values in range.

    Raises:
        ConfigError: If the system type or name is unknown
        ValueError: If validation fails
    """
    if 'system' not in config_dict:
        raise ValueError("Missing required config section: 'system'")
    system = config_dict['system']
    for key in ['type', 'name']:
        if key not in system:
            raise ValueError(f"Missing required field: 'system.{key}'")
    get_system_info(system['type'], system['name'])

    dynamics = config_dict.get('dynamics') or {}
    if not isinstance(dynamics, dict):
        raise ValueError("dynamics must be a mapping of parameter names to values")

    if system['type'] == 'forward':
        if 'segment_iteration' not in config_dict:
            raise ValueError("Missing required config section: 'segment_iteration'")
        seg = config_dict['segment_iteration']
        for key in ['seed_size', 'fragm_dist', 'niters']:
            if key not in seg:
                raise ValueError(f"Missing required field: 'segment_iteration.{key}'")
        if seg['fragm_dist'] <= 0:
            raise ValueError("segment_iteration.fragm_dist must be positive")
        if int(seg['niters']) != seg['niters'] or seg['niters'] < 0:
            raise ValueError("segment_iteration.niters must be a non-negative integer")
        if seg['seed_size'] <= 0:
            raise ValueError("segment_iteration.seed_size must be positive")

        domain = config_dict.get('domain') or {}
        if 'bounds' in domain:
            bounds = domain['bounds']
            if not isinstance(bounds, list) or len(bounds) != 2:
                raise ValueError("domain.bounds must be a list of [lower, upper] bounds")
            _validate_point(bounds[0], "domain.bounds[0]")
            _validate_point(bounds[1], "domain.bounds[1]")
            if bounds[0][0] > bounds[1][0] or bounds[0][1] > bounds[1][1]:
                raise ValueError("domain.bounds lower corner must not exceed upper corner")
        if 'center' in domain:
            _validate_point(domain['center'], "domain.center")
            for key in ['width', 'height']:
                if key not in domain:
                    raise ValueError(f"domain.center requires 'domain.{key}'")
                if domain[key] < 0:
                    raise ValueError(f"domain.{key} must be non-negative")

    elif system['type'] == 'inverse':
        if 'inverse_iteration' not in config_dict:
            raise ValueError("Missing required config section: 'inverse_iteration'")
        inv = config_dict['inverse_iteration']
        for key in ['seed', 'total_iterations', 'transient']:
            if key not in inv:
                raise ValueError(f"Missing required field: 'inverse_iteration.{key}'")
        _validate_point(inv['seed'], "inverse_iteration.seed")
        if inv['total_iterations'] < 1:
            raise ValueError("inverse_iteration.total_iterations must be at least 1")
        if inv['transient'] < 0 or inv['transient'] >= inv['total_iterations']:
            raise ValueError("inverse_iteration.transient must be in [0, total_iterations)")


def load_problem_config(config_path: str,
                        base_config_path: Optional[str] = None,
                        verbose: bool = True) -> Dict[str, Any]:
    """
    Load and validate a problem configuration from YAML.

    Args:
        config_path: Path to YAML configuration file
        base_config_path: Optional path to base config to inherit from
        verbose: Whether to print loading messages

    Returns:
        Validated configuration dictionary

    Example:
        >>> from InvariantSets.config import load_problem_config
        >>> config = load_problem_config('configs/henon.yaml')
        >>> config['segment_iteration']['niters']
        20
    """
    if verbose:
        print(f"Loading config from: {config_path}")

    config_dict = load_yaml_config(config_path)

    if base_config_path is not None:
        if verbose:
            print(f"  Inheriting from: {base_config_path}")
        base_dict = load_yaml_config(base_config_path)
        config_dict = merge_configs(base_dict, config_dict)

    validate_config(config_dict)

    if verbose:
        print(f"  ✓ Config loaded successfully")
        print(f"  System: {config_dict['system']['name']}")

    return config_dict


def build_subdivision_config(config_dict: Dict[str, Any]) -> SubdivisionConfig:
    """
    Turn a validated forward-problem config into a SubdivisionConfig.

    The seed square is centered on `domain.center` (or the center of
    `domain.bounds`, or the center of the system's default domain).
    """
    system = config_dict['system']
    seg = config_dict['segment_iteration']
    domain = config_dict.get('domain') or {}

    if 'bounds' in domain:
        bounds = np.array(domain['bounds'], dtype=float)
    elif 'center' in domain:
        center = np.array(domain['center'], dtype=float)
        half = np.array([domain['width'], domain['height']], dtype=float) / 2.0
        bounds = np.array([center - half, center + half])
    else:
        bounds = get_system_domain(system['type'], system['name'])

    center = np.array(domain.get('center', (bounds[0] + bounds[1]) / 2.0), dtype=float)

    return SubdivisionConfig(
        domain=BoundingDomain(bounds),
        niters=int(seg['niters']),
        fragm_dist=seg['fragm_dist'],
        chain_base=square_chain(center, seg['seed_size']),
    )


def build_sampler_settings(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Extract keyword arguments for the inverse iteration sampler."""
    inv = config_dict['inverse_iteration']
    return {
        'seed': [float(v) for v in inv['seed']],
        'total_iterations': int(inv['total_iterations']),
        'transient': int(inv['transient']),
        'random_seed': inv.get('random_seed'),
    }


def save_config_to_yaml(config_dict: Dict[str, Any], output_path: str) -> None:
    """
    Save a problem configuration to YAML.

    Useful for saving the exact configuration used in a run.
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
