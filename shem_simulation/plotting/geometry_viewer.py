"""
Scene geometry visualization.

This module draws the sample surfaces, the analytic sphere, the pinhole
plate with its detector apertures and the beam source in 3D.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Patch
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .. import config
from ..core.data_classes import SceneGeometry, TriangulatedSurface
from ..core.sampling import BeamSource


def plot_mesh_wireframe(
    ax,
    surface: TriangulatedSurface,
    color: str = config.SAMPLE_COLOR,
    alpha: float = config.SAMPLE_ALPHA,
    label: Optional[str] = None
) -> Optional[Patch]:
    """Plot a triangulated surface on an existing 3D axis.

    Returns a legend handle if ``label`` is given.
    """
    triangles = np.stack([surface.v0, surface.v1, surface.v2], axis=1)
    collection = Poly3DCollection(
        triangles,
        alpha=alpha,
        facecolors=color,
        edgecolors='black',
        linewidths=0.1
    )
    ax.add_collection3d(collection)

    if label:
        return Patch(facecolor=color, alpha=alpha, label=label)
    return None


def _set_axes_equal(ax) -> None:
    """Set equal aspect ratio for 3D axes."""
    limits = np.array(
        [ax.get_xlim3d(), ax.get_ylim3d(), ax.get_zlim3d()],
        dtype=float,
    )
    centres = np.mean(limits, axis=1)
    half = max(limits[:, 1] - limits[:, 0]) / 2.0
    ax.set_xlim3d(centres[0] - half, centres[0] + half)
    ax.set_ylim3d(centres[1] - half, centres[1] + half)
    ax.set_zlim3d(centres[2] - half, centres[2] + half)


def draw_back_wall(ax, scene: SceneGeometry, n_points: int = 64) -> list:
    """Draw the plate outline and the aperture ellipses in the plane y = 0."""
    handles = []
    t = np.linspace(0.0, 2.0 * np.pi, n_points)
    wall = scene.back_wall
    if wall.plate_radius > 0:
        ax.plot(wall.plate_radius * np.cos(t), np.zeros_like(t), wall.plate_radius * np.sin(t),
                color='black', linewidth=1.0, alpha=0.6)
        handles.append(Patch(facecolor='none', edgecolor='black', label='Pinhole plate'))

    for aperture in wall.apertures:
        cx, cz = aperture.centre
        ax.plot(cx + aperture.axes[0] / 2.0 * np.cos(t), np.zeros_like(t),
                cz + aperture.axes[1] / 2.0 * np.sin(t),
                color=config.APERTURE_COLOR, linewidth=2.0)
    handles.append(Patch(facecolor='none', edgecolor=config.APERTURE_COLOR, label='Detector apertures'))
    return handles


def plot_scene(
    scene: SceneGeometry,
    source: Optional[BeamSource] = None,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.QUICK_PLOT_DPI,
    ax=None,
):
    """Plot the scene in 3D.

    Parameters
    ----------
    scene : SceneGeometry
        Surfaces, sphere and back wall to draw.
    source : BeamSource, optional
        Beam source; its pinhole and the central beam down to the sample
        are drawn.
    save_path : str, optional
        Path to save the figure.
    show : bool
        Whether to display interactively.
    dpi : int
        Resolution for saved figure.
    ax : Axes3D, optional
        Axis to draw on; a new figure is created otherwise.

    Returns
    -------
    ax : mpl_toolkits.mplot3d.Axes3D
    """
    own_figure = ax is None
    if own_figure:
        fig = plt.figure(figsize=(9, 8))
        ax = fig.add_subplot(111, projection="3d")
    else:
        fig = ax.figure

    handles = []
    points = [np.zeros((1, 3))]
    for surface in scene.surfaces:
        handle = plot_mesh_wireframe(ax, surface, label=surface.name)
        if handle is not None:
            handles.append(handle)
        points.append(surface.vertices)

    sphere = scene.sphere
    if sphere is not None and sphere.enabled and sphere.radius > 0:
        u, v = np.mgrid[0:2 * np.pi:24j, 0:np.pi:12j]
        xs = sphere.centre[0] + sphere.radius * np.cos(u) * np.sin(v)
        ys = sphere.centre[1] + sphere.radius * np.sin(u) * np.sin(v)
        zs = sphere.centre[2] + sphere.radius * np.cos(v)
        ax.plot_wireframe(xs, ys, zs, color=config.SPHERE_COLOR, linewidth=0.4, alpha=0.6)
        handles.append(Patch(facecolor=config.SPHERE_COLOR, alpha=0.6, label='Analytic sphere'))
        points.append(sphere.centre + sphere.radius * np.eye(3))

    handles += draw_back_wall(ax, scene)
    wall = scene.back_wall
    points.append(np.array([[wall.plate_radius, 0.0, wall.plate_radius],
                            [-wall.plate_radius, 0.0, -wall.plate_radius]]))

    if source is not None:
        ax.scatter(*source.position, color='orange', s=40, label='Source pinhole')
        lowest = min((s.vertices[:, 1].min() for s in scene.surfaces if s.n_faces), default=None)
        if source.direction[1] != 0.0 and lowest is not None:
            # Extend the central beam down to the lowest sample point
            length = (lowest - source.position[1]) / source.direction[1]
            if length > 0:
                end = source.position + length * source.direction
                ax.plot(*np.stack([source.position, end], axis=1), color='orange', linestyle='--')
        points.append(source.position[np.newaxis, :])

    pts = np.concatenate(points, axis=0)
    for setter, low, high in zip((ax.set_xlim3d, ax.set_ylim3d, ax.set_zlim3d), pts.min(axis=0), pts.max(axis=0)):
        setter(low, high if high > low else low + 1.0)
    _set_axes_equal(ax)

    ax.set_xlabel("x (mm)")
    ax.set_ylabel("y (mm)")
    ax.set_zlabel("z (mm)")
    ax.set_title("SHeM scene geometry")
    if handles:
        ax.legend(handles=handles, loc="upper right")

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=dpi)
        print(f"[info] Saved scene plot to {save_path}")
    if show:
        plt.show()
    elif own_figure and save_path:
        plt.close(fig)
    return ax
