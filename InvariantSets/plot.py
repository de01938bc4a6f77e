"""
Plotting functions for approximated invariant sets.

Point sets are drawn as scatter plots; fixed points and periodic orbits
can be overlaid as large markers with a legend.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Dict, Optional, Sequence

from .geometry import as_chain


def setup_figure_and_axes(ax=None, figsize=(10, 10)):
    """
    Standardized figure/axes setup with cleanup handling.

    Args:
        ax: Existing matplotlib axes (if None, creates new)
        figsize: Figure size tuple (width, height)

    Returns:
        Tuple of (fig, ax, should_close) where should_close indicates
        whether the figure should be closed after plotting
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax, True
    return ax.get_figure(), ax, False


def finalize_plot(fig, ax, output_path=None, should_close=True, tight_layout=True):
    """
    Standardized plot finalization.

    Args:
        fig: Matplotlib figure
        ax: Matplotlib axes
        output_path: Path to save figure (if None, displays instead)
        should_close: Whether to close the figure after saving
        tight_layout: Whether to apply tight_layout
    """
    if tight_layout:
        fig.tight_layout()

    if output_path and should_close:
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
    elif should_close:
        plt.show()


def compute_plot_limits(points: np.ndarray, margin: float = 0.1) -> np.ndarray:
    """
    Bounding box of a point set padded by `margin` times its extent.

    Degenerate extents are padded by a unit amount so the axes stay valid.

    :return: Array [[x_min, y_min], [x_max, y_max]]
    """
    points = as_chain(points)
    finite = points[np.all(np.isfinite(points), axis=1)]
    if len(finite) == 0:
        return np.array([[-1.0, -1.0], [1.0, 1.0]])
    lower = finite.min(axis=0)
    upper = finite.max(axis=0)
    pad = (upper - lower) * margin
    pad[pad == 0] = 1.0
    return np.array([lower - pad, upper + pad])


def plot_point_set(points,
                   ax=None,
                   output_path: Optional[str] = None,
                   title: Optional[str] = None,
                   limits: Optional[Sequence[Sequence[float]]] = None,
                   color: str = 'blue',
                   alpha: float = 1.0,
                   size: float = 1.0,
                   label: Optional[str] = None,
                   figsize=(10, 10)):
    """
    Scatter plot of an approximated invariant set.

    Args:
        points: Array of shape (N, 2)
        ax: Existing axes to draw into (a new figure is created if None)
        output_path: File to save the figure to (displayed if None)
        title: Plot title
        limits: [[x_min, y_min], [x_max, y_max]]; defaults to the data
                bounding box with a 10% margin
        color: Marker color
        alpha: Marker transparency
        size: Marker size
        label: Legend label for the point set

    Returns:
        The matplotlib axes
    """
    fig, ax, should_close = setup_figure_and_axes(ax, figsize=figsize)
    points = as_chain(points)

    if len(points) > 0:
        ax.scatter(points[:, 0], points[:, 1], s=size, c=color, alpha=alpha,
                   marker='.', linewidths=0, label=label, rasterized=True)

    if limits is None:
        limits = compute_plot_limits(points)
    limits = np.asarray(limits, dtype=float)
    ax.set_xlim(limits[0][0], limits[1][0])
    ax.set_ylim(limits[0][1], limits[1][1])

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.grid(True, alpha=0.3)
    if title:
        ax.set_title(title)

    finalize_plot(fig, ax, output_path, should_close)
    return ax


def plot_invariant_set_with_markers(points,
                                    markers: Dict[str, Sequence],
                                    ax=None,
                                    output_path: Optional[str] = None,
                                    title: Optional[str] = None,
                                    limits: Optional[Sequence[Sequence[float]]] = None,
                                    alpha: float = 0.15,
                                    marker_colors: Optional[Dict[str, str]] = None,
                                    figsize=(10, 10)):
    """
    Plot an invariant set with labelled special points on top.

    Args:
        points: Array of shape (N, 2) with the invariant set
        markers: Mapping from legend label to a list of points, e.g.
                 {'Fixed Points': [p0, p1], 'Cycle Period 2': [q0, q1]}
        marker_colors: Optional mapping from label to color
        (remaining arguments as in plot_point_set)

    Returns:
        The matplotlib axes
    """
    fig, ax, should_close = setup_figure_and_axes(ax, figsize=figsize)
    marker_colors = marker_colors or {}
    default_colors = ['red', 'green', 'orange', 'purple', 'black']

    all_points = [as_chain(points)]
    for label, marker_points in markers.items():
        all_points.append(as_chain(marker_points))
    if limits is None:
        limits = compute_plot_limits(np.concatenate(all_points, axis=0))

    plot_point_set(points, ax=ax, limits=limits, alpha=alpha, label='Invariant Set')

    for i, (label, marker_points) in enumerate(markers.items()):
        marker_points = as_chain(marker_points)
        if len(marker_points) == 0:
            continue
        color = marker_colors.get(label, default_colors[i % len(default_colors)])
        ax.scatter(marker_points[:, 0], marker_points[:, 1], s=80, c=color,
                   edgecolors='black', linewidths=1.0, label=label, zorder=10)

    if title:
        ax.set_title(title)
    ax.legend(loc='upper right', fontsize=9)

    finalize_plot(fig, ax, output_path, should_close)
    return ax
