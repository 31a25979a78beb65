#!/usr/bin/env python
"""
Ray Path Visualization Script

This script plots the ray paths exported by a single-position run of the
SHeM simulation.

Usage:
    python plot_ray_paths.py
    python plot_ray_paths.py --max-paths 20
    python plot_ray_paths.py --no-geometry
"""

from pathlib import Path
import sys
import argparse

# Make shem_simulation importable when running from a source checkout
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from shem_simulation import SceneGeometry, config
from shem_simulation.plotting import load_ray_paths, plot_ray_paths
from shem_simulation.runner import build_back_wall, build_sample


def main():
    """Script entry point."""
    parser = argparse.ArgumentParser(description="Plot SHeM ray paths")
    parser.add_argument("--max-paths", "-n", type=int,
                        default=config.MAX_PATHS_TO_PLOT,
                        help="Maximum number of paths to plot")
    parser.add_argument("--no-geometry", action="store_true",
                        help="Don't draw the sample and pinhole plate")
    parser.add_argument("--data-file", type=Path, default=None,
                        help="Path to the ray path CSV file")

    args = parser.parse_args()

    data_dir = project_dir / config.DATA_OUTPUT_DIR
    figures_dir = project_dir / config.FIGURES_OUTPUT_DIR
    path_file = args.data_file or data_dir / config.RAY_PATHS_CSV

    if not path_file.exists():
        print(f"[error] Ray path file not found: {path_file}")
        print("[info] Please run run_simulation.py --single first to generate ray paths.")
        sys.exit(1)

    print(f"[info] Loading ray paths from {path_file}")
    paths = load_ray_paths(path_file)
    print(f"[info] Loaded {len(paths)} ray paths")

    scene = None
    if not args.no_geometry:
        scene = SceneGeometry(surfaces=(build_sample(),), back_wall=build_back_wall())

    plot_ray_paths(
        paths,
        scene=scene,
        max_paths=args.max_paths,
        save_path=str(figures_dir / config.RAY_PATHS_FIGURE_BASE),
    )
    print("[info] Visualization complete!")


if __name__ == "__main__":
    main()
