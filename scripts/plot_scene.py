#!/usr/bin/env python
"""
Scene Geometry Visualization Script

This script draws the configured SHeM scene: sample, optional sphere,
pinhole plate with its apertures and the incident beam.

Usage:
    python plot_scene.py
    python plot_scene.py --sample-stl sample.stl --sphere
"""

from pathlib import Path
import sys
import argparse

# Make shem_simulation importable when running from a source checkout
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from shem_simulation import SceneGeometry, config
from shem_simulation.plotting import plot_scene
from shem_simulation.runner import build_back_wall, build_beam_source, build_sample, build_sphere
from shem_simulation.testing import print_mesh_info


def main():
    """Script entry point."""
    parser = argparse.ArgumentParser(description="Visualize the SHeM scene geometry")
    parser.add_argument("--sample-stl", type=Path, default=None,
                        help="STL file of the sample (flat sample if omitted)")
    parser.add_argument("--sphere", action="store_true", default=None,
                        help="Draw the analytic sphere on the sample")

    args = parser.parse_args()

    sample = build_sample(args.sample_stl)
    print_mesh_info(sample, sample.name)
    scene = SceneGeometry(surfaces=(sample,), back_wall=build_back_wall(), sphere=build_sphere(args.sphere))

    save_path = project_dir / config.FIGURES_OUTPUT_DIR / config.SCENE_FIGURE
    plot_scene(scene, source=build_beam_source(), save_path=str(save_path), dpi=config.QUICK_PLOT_DPI)
    print(f"\n✓ Scene plot saved to {save_path}")


if __name__ == "__main__":
    main()
