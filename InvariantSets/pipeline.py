import os
import time
from datetime import datetime

from InvariantSets.config import (
    load_problem_config,
    save_config_to_yaml,
    build_subdivision_config,
    build_sampler_settings,
    get_system_dynamics,
    get_system_parameters,
    get_system_name,
)
from InvariantSets.subdivision import run_segment_iteration
from InvariantSets.sampler import sample_inverse_relation
from InvariantSets.periodic import (
    henon_fixed_points,
    quadratic_rotation_fixed_points,
    quadratic_rotation_period_two_cycle,
)
from InvariantSets.plot import plot_point_set, plot_invariant_set_with_markers
from InvariantSets.utils import (
    compute_parameter_hash,
    load_or_compute_point_set,
    save_point_set,
    get_next_run_number,
)


class InvariantSetPipeline:
    """
    Runs one problem file end to end: load config, compute the point set
    (or load it from cache), plot it and save it inside a numbered run
    directory.
    """

    def __init__(self, config_path: str, output_dir: str = "runs", verbose: bool = True):
        self.config_path = config_path
        self.verbose = verbose
        self.config = load_problem_config(config_path, verbose=verbose)
        self.system_type = self.config['system']['type']
        self.dynamics_name = self.config['system']['name']
        self.system_name = get_system_name(self.system_type, self.dynamics_name)

        # If output_dir is generic "runs", append system name.
        if os.path.basename(os.path.normpath(output_dir)) == "runs":
            self.base_dir = os.path.join(output_dir, self.system_name)
        else:
            self.base_dir = output_dir
        os.makedirs(self.base_dir, exist_ok=True)

        self.cache_dir = os.path.join(self.base_dir, "point_sets")

        run_num = get_next_run_number(self.base_dir)
        self.run_dir = os.path.join(self.base_dir, f"run_{run_num:03d}")
        os.makedirs(self.run_dir, exist_ok=True)

        self.log_file = os.path.join(self.run_dir, "pipeline_log.txt")
        self._log(f"Pipeline initialized for {self.system_name}")
        self._log(f"Run directory: {self.run_dir}")

        save_config_to_yaml(self.config, os.path.join(self.run_dir, "config.yaml"))

        self.params = {**get_system_parameters(self.system_type, self.dynamics_name),
                       **(self.config.get('dynamics') or {})}
        self.results = {}

    def _log(self, message: str):
        timestamp = datetime.now().strftime("[%Y-%m-%d %H:%M:%S]")
        with open(self.log_file, "a") as f:
            f.write(f"{timestamp} {message}\n")
        if self.verbose:
            print(f"{timestamp} {message}")

    def _compute_forward(self, force_recompute: bool):
        subdivision_config = build_subdivision_config(self.config)
        map_f = get_system_dynamics(self.system_type, self.dynamics_name, **self.params)
        self._log(f"Segment iteration: niters={subdivision_config.niters}, "
                  f"fragm_dist={subdivision_config.fragm_dist}, "
                  f"domain={subdivision_config.domain.as_list()}")

        settings = subdivision_config.to_dict()
        hash_value = compute_parameter_hash(self.dynamics_name, self.params, settings)

        def compute():
            return run_segment_iteration(map_f, subdivision_config, verbose=self.verbose)

        points, was_cached = load_or_compute_point_set(
            self.cache_dir, hash_value, compute,
            metadata={'system': self.dynamics_name, 'params': self.params, 'settings': settings},
            force_recompute=force_recompute, verbose=self.verbose,
        )
        return points, was_cached, settings

    def _compute_inverse(self, force_recompute: bool):
        settings = build_sampler_settings(self.config)
        relation = get_system_dynamics(self.system_type, self.dynamics_name, **self.params)
        self._log(f"Inverse iteration: total_iterations={settings['total_iterations']}, "
                  f"transient={settings['transient']}, seed={settings['seed']}")

        hash_value = compute_parameter_hash(self.dynamics_name, self.params, settings)

        def compute():
            return sample_inverse_relation(relation, **settings)

        points, was_cached = load_or_compute_point_set(
            self.cache_dir, hash_value, compute,
            metadata={'system': self.dynamics_name, 'params': self.params, 'settings': settings},
            force_recompute=force_recompute, verbose=self.verbose,
        )
        return points, was_cached, settings

    def special_points(self):
        """Known fixed points and cycles of the configured system, by legend label."""
        if self.dynamics_name in ('quadratic_rotation_inverse', 'quadratic_rotation_map'):
            alpha = self.params['alpha']
            return {
                'Fixed Points': list(quadratic_rotation_fixed_points(alpha)),
                'Cycle Period 2': list(quadratic_rotation_period_two_cycle(alpha)),
            }
        if self.dynamics_name == 'henon_map':
            return {'Fixed Points': henon_fixed_points(self.params['a'], self.params['b'])}
        return {}

    def plot(self, points, markers=None):
        plot_cfg = self.config.get('plot') or {}
        title = plot_cfg.get('title', f"{self.system_name} Invariant Set")
        filename = plot_cfg.get('filename', f"{self.dynamics_name}.png")
        limits = plot_cfg.get('limits')
        output_path = os.path.join(self.run_dir, filename)

        if markers:
            for label, pts in markers.items():
                self._log(f"  {label}: " + ", ".join(f"({p[0]:.4f}, {p[1]:.4f})" for p in pts))
            plot_invariant_set_with_markers(points, markers, output_path=output_path,
                                            title=title, limits=limits,
                                            alpha=plot_cfg.get('alpha', 0.15))
        else:
            plot_point_set(points, output_path=output_path, title=title, limits=limits,
                           alpha=plot_cfg.get('alpha', 1.0))
        self._log(f"Figure saved to: {output_path}")
        return output_path

    def run(self, force_recompute: bool = False, show_markers: bool = True):
        start = time.time()
        if self.system_type == 'forward':
            points, was_cached, settings = self._compute_forward(force_recompute)
        else:
            points, was_cached, settings = self._compute_inverse(force_recompute)
        elapsed = time.time() - start

        self._log(f"Computed {len(points)} points in {elapsed:.2f}s"
                  + (" (cached)" if was_cached else ""))

        points_path = os.path.join(self.run_dir, "points.npz")
        save_point_set(points_path, points, {
            'system': self.dynamics_name,
            'params': self.params,
            'settings': settings,
        }, verbose=self.verbose)

        markers = self.special_points() if show_markers else {}
        figure_path = self.plot(points, markers)

        self.results = {
            'points': points,
            'num_points': len(points),
            'was_cached': was_cached,
            'markers': markers,
            'figure_path': figure_path,
            'points_path': points_path,
            'run_dir': self.run_dir,
            'compute_time': elapsed,
        }
        self._log("Pipeline execution finished.")
        return self.results
