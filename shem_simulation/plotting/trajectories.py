"""
Ray path visualization module.

This module plots the paths of traced rays in 3D and in the x-y projection,
coloured by the state each ray finished in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D

from .. import config
from ..core.data_classes import RayState, SceneGeometry, TraceResult
from .geometry_viewer import draw_back_wall, plot_mesh_wireframe

STATE_COLORS = {
    RayState.DETECTED.name: 'red',
    RayState.KILLED.name: 'black',
    RayState.ESCAPED.name: 'steelblue',
    RayState.IN_FLIGHT.name: 'gray',
}

# Path data as {ray_id: (state name, (n_points, 3) positions)}
PathDict = Dict[int, tuple]


def load_ray_paths(csv_file: Union[str, Path]) -> PathDict:
    """Load ray paths written by :func:`export_ray_paths_to_csv`.

    Example
    -------
    >>> paths = load_ray_paths('Data/ray_paths.csv')
    >>> print(f"Loaded {len(paths)} paths")
    """
    df = pd.read_csv(csv_file)
    paths = {}
    for ray_id, group in df.sort_values(['ray_id', 'step_id']).groupby('ray_id'):
        positions = group[['position_x_mm', 'position_y_mm', 'position_z_mm']].to_numpy(dtype=float)
        paths[int(ray_id)] = (group['state'].iloc[0], positions)
    return paths


def _as_paths(results: Union[Sequence[TraceResult], PathDict]) -> PathDict:
    if isinstance(results, dict):
        return results
    paths = {}
    for ray_id, result in enumerate(results, start=1):
        points: List[np.ndarray] = result.path if result.path else [result.position]
        paths[ray_id] = (result.state.name, np.array(points, dtype=float))
    return paths


def plot_ray_paths(
    results: Union[Sequence[TraceResult], PathDict],
    scene: Optional[SceneGeometry] = None,
    max_paths: int = config.MAX_PATHS_TO_PLOT,
    save_path: Optional[str] = None,
    figsize: tuple = (16, 7),
    dpi: int = config.PLOT_DPI,
    show: bool = False
) -> Optional[plt.Figure]:
    """Plot ray paths in 3D next to their x-y projection.

    Parameters
    ----------
    results : sequence of TraceResult or dict
        Traced rays recorded with ``record_path=True``, or paths loaded
        with :func:`load_ray_paths`.
    scene : SceneGeometry, optional
        Scene to draw behind the paths.
    max_paths : int
        Maximum number of paths to plot.
    save_path : str, optional
        Base path to save the figure ("_paths.png" is appended).
    figsize : tuple
        Figure size (width, height) in inches.
    dpi : int
        Resolution for saved figure.
    show : bool
        Whether to display the figure interactively.

    Returns
    -------
    fig : matplotlib.figure.Figure or None
        The figure object if save_path is None and show is False.
    """
    paths = _as_paths(results)
    ray_ids = sorted(paths.keys())[:max_paths]
    if not ray_ids:
        print("[warning] No ray paths to plot.")
        return None

    fig = plt.figure(figsize=figsize)
    ax3d = fig.add_subplot(1, 2, 1, projection='3d')
    ax_xy = fig.add_subplot(1, 2, 2)

    if scene is not None:
        for surface in scene.surfaces:
            plot_mesh_wireframe(ax3d, surface)
        draw_back_wall(ax3d, scene)
        ax_xy.axhline(0.0, color='black', linewidth=1.5)
        for aperture in scene.back_wall.apertures:
            half = aperture.axes[0] / 2.0
            ax_xy.plot([aperture.centre[0] - half, aperture.centre[0] + half], [0.0, 0.0],
                       color=config.APERTURE_COLOR, linewidth=4)

    counts = {}
    for ray_id in ray_ids:
        state, positions = paths[ray_id]
        color = STATE_COLORS.get(state, 'gray')
        counts[state] = counts.get(state, 0) + 1
        ax3d.plot(positions[:, 0], positions[:, 1], positions[:, 2], color=color, linewidth=0.8, alpha=0.6)
        ax_xy.plot(positions[:, 0], positions[:, 1], color=color, linewidth=0.8, alpha=0.6)
        ax_xy.scatter(positions[1:-1, 0], positions[1:-1, 1], color=color, s=6, alpha=0.6)

    ax3d.set_xlabel('x (mm)')
    ax3d.set_ylabel('y (mm)')
    ax3d.set_zlabel('z (mm)')
    ax3d.set_title(f'Ray paths (n={len(ray_ids)})', fontweight='bold')

    ax_xy.set_xlabel('x (mm)')
    ax_xy.set_ylabel('y (mm)')
    ax_xy.set_title('x-y projection')
    ax_xy.set_aspect('equal', adjustable='datalim')
    ax_xy.grid(True, alpha=0.3)

    legend_elements = [
        Line2D([0], [0], color=STATE_COLORS.get(state, 'gray'), linewidth=2, label=f'{state.lower()} ({n})')
        for state, n in sorted(counts.items())
    ]
    ax_xy.legend(handles=legend_elements, loc='lower right')

    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(f'{save_path}_paths.png', dpi=dpi, bbox_inches='tight')
        print(f"[info] Saved ray path plot to {save_path}_paths.png")
        plt.close(fig)
        return None
    elif show:
        plt.show()
        return None
    else:
        return fig
