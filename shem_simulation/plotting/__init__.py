"""
Plotting subpackage for SHeM simulation visualization.

This subpackage provides visualization tools for:
- Simulated scan images and scatter-count histograms
- Outgoing direction distributions
- Scene geometry in 3D
- Ray paths

Example usage:
    from shem_simulation.plotting import plot_scan_image, print_statistics

    plot_scan_image(result, aperture=1, save_path='Figures/scan_image')
    print_statistics(result)
"""

from .trajectories import (
    load_ray_paths,
    plot_ray_paths,
)

from .geometry_viewer import (
    plot_scene,
    plot_mesh_wireframe,
    draw_back_wall,
)

from .results import (
    plot_scan_image,
    plot_effuse_image,
    plot_scatter_histogram,
    plot_outgoing_directions,
    print_statistics,
)

__all__ = [
    # Ray paths
    "load_ray_paths",
    "plot_ray_paths",
    # Geometry visualization
    "plot_scene",
    "plot_mesh_wireframe",
    "draw_back_wall",
    # Simulation results
    "plot_scan_image",
    "plot_effuse_image",
    "plot_scatter_histogram",
    "plot_outgoing_directions",
    "print_statistics",
]
