"""
SHeM Simulation Runner Module

This module builds the default scene from :mod:`shem_simulation.config` and
provides the main simulation runner that can be called from scripts or
imported directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from . import config
from .core.data_classes import AnalyticSphere, Aperture, BackWall, SceneGeometry, TriangulatedSurface
from .core.geometry import prepare_surface, surface_bounds
from .core.random_source import RandomSource
from .core.sampling import BeamSource, SourceModel
from .core.simulation import ScanResult, rectangular_scan, trace_ray_paths, trace_rays
from .core.stl_utils import load_stl_surface
from .core.io_utils import export_detected_rays_to_csv, export_ray_paths_to_csv, save_scan_result
from .plotting import (
    plot_effuse_image,
    plot_outgoing_directions,
    plot_ray_paths,
    plot_scan_image,
    plot_scatter_histogram,
    plot_scene,
    print_statistics,
)
from .testing.simple_geometry import create_flat_sample
from .testing.validation import validate_scene


def build_beam_source(model: Optional[str] = None) -> BeamSource:
    """Beam source from the configured incidence angle and pinhole."""
    model = SourceModel(model or config.SOURCE_MODEL)
    return BeamSource(
        position=np.array(config.source_position()),
        direction=np.array(config.beam_direction()),
        pinhole_radius=config.SOURCE_PINHOLE_RADIUS_MM,
        model=model,
        theta_max_deg=config.SOURCE_THETA_MAX_DEG,
        sigma_deg=config.SOURCE_SIGMA_DEG,
    )


def build_effuse_source() -> BeamSource:
    """Effusive beam: a wide uniform cone from the source pinhole."""
    return BeamSource(
        position=np.array(config.source_position()),
        direction=np.array(config.beam_direction()),
        pinhole_radius=config.SOURCE_PINHOLE_RADIUS_MM,
        model=SourceModel.UNIFORM,
        theta_max_deg=config.EFFUSE_THETA_MAX_DEG,
    )


def build_back_wall() -> BackWall:
    """Pinhole plate with the configured detector apertures."""
    apertures = tuple(Aperture(centre=centre, axes=axes) for centre, axes in config.APERTURES)
    return BackWall(
        apertures=apertures,
        plate_radius=config.PLATE_RADIUS_MM,
        plate_represent=config.PLATE_REPRESENT,
        composition=config.PLATE_COMPOSITION,
        parameter=config.PLATE_PARAMETER,
    )


def build_sample(stl_file: Optional[Path] = None) -> TriangulatedSurface:
    """Sample surface from an STL file, or the default flat sample."""
    stl_file = stl_file or config.SAMPLE_STL_FILE
    if stl_file is not None:
        stl_path = Path(stl_file)
        if not stl_path.exists():
            raise FileNotFoundError(f"Sample STL not found: {stl_path}")
        print(f"[info] Loading sample STL: {stl_path.name}")
        return load_stl_surface(
            str(stl_path),
            surface_index=0,
            composition=config.SAMPLE_COMPOSITION,
            parameter=config.SAMPLE_PARAMETER,
            scale=config.SAMPLE_STL_SCALE,
        )

    print("[info] Using flat sample")
    mesh = create_flat_sample(height=-config.WORKING_DISTANCE_MM, size=config.SAMPLE_SIZE_MM)
    return prepare_surface(
        mesh,
        surface_index=0,
        composition=config.SAMPLE_COMPOSITION,
        parameter=config.SAMPLE_PARAMETER,
        name="flat_sample",
    )


def build_sphere(enabled: Optional[bool] = None) -> Optional[AnalyticSphere]:
    """Analytic sphere from the configuration, or None when disabled."""
    if enabled is None:
        enabled = config.SPHERE_ENABLED
    if not enabled:
        return None
    return AnalyticSphere(
        centre=np.array(config.SPHERE_CENTRE_MM),
        radius=config.SPHERE_RADIUS_MM,
        composition=config.SPHERE_COMPOSITION,
        parameter=config.SPHERE_PARAMETER,
    )


def run_full_simulation(
    output_dir: Optional[Path] = None,
    n_rays: Optional[int] = None,
    max_scatters: Optional[int] = None,
    seed: Optional[int] = None,
    sample_stl: Optional[Path] = None,
    use_sphere: Optional[bool] = None,
    n_effuse: Optional[int] = None,
    scan: bool = True,
    save_results: bool = True,
    generate_plots: bool = True,
):
    """Run the complete SHeM simulation.

    This is the main entry point for running simulations. It handles:
    1. Building the beam source, pinhole plate, sample and sphere
    2. Running a rectangular scan (or a single-position batch)
    3. Exporting results
    4. Generating plots

    Parameters
    ----------
    output_dir : Path, optional
        Directory for output files (Data/, Figures/). If None, uses current working directory.
    n_rays : int, optional
        Rays per pixel (scan) or in total (single position). If None, uses config default.
    max_scatters : int, optional
        Maximum scattering events per ray. If None, uses config default.
    seed : int, optional
        Seed of the random source. If None, uses config default.
    sample_stl : Path, optional
        STL file for the sample; the flat sample is used otherwise.
    use_sphere : bool, optional
        Place the analytic sphere on the sample. If None, uses config default.
    n_effuse : int, optional
        Effusive rays per pixel during a scan (0 disables the effusive beam).
        If None, uses config default.
    scan : bool
        Run a rectangular scan; otherwise trace one batch at the scan origin.
    save_results : bool
        Whether to save results to disk.
    generate_plots : bool
        Whether to generate plots.

    Returns
    -------
    ScanResult or RayBatchResult
        Result of the scan or of the single batch.
    """
    output_dir = Path.cwd() if output_dir is None else Path(output_dir)
    n_rays = config.DEFAULT_N_RAYS if n_rays is None else n_rays
    max_scatters = config.DEFAULT_MAX_SCATTERS if max_scatters is None else max_scatters
    seed = config.DEFAULT_SEED if seed is None else seed
    n_effuse = config.EFFUSE_N_RAYS if n_effuse is None else n_effuse

    source = build_beam_source()
    back_wall = build_back_wall()
    sample = build_sample(sample_stl)
    sphere = build_sphere(use_sphere)

    scene = SceneGeometry(surfaces=(sample,), back_wall=back_wall, sphere=sphere)
    valid, messages = validate_scene(scene)
    for message in messages:
        print(f"[warning] {message}")
    if not valid:
        raise ValueError("Scene failed validation; see the warnings above")

    low, high = surface_bounds(sample)
    print("\n" + "=" * 70)
    print("GEOMETRY CONFIGURATION")
    print("=" * 70)
    print(f"Pinhole plate: y = 0, radius {back_wall.plate_radius:.3f} mm, "
          f"scatters: {back_wall.plate_represent}")
    print(f"Working distance: {config.WORKING_DISTANCE_MM:.3f} mm")
    print(f"Source: {np.round(source.position, 4)} mm, direction {np.round(source.direction, 4)}")
    print(f"Incidence angle: {config.INCIDENCE_ANGLE_DEG:.1f}°, model: {source.model.value}")
    for i, aperture in enumerate(back_wall.apertures, start=1):
        print(f"Aperture {i}: centre {aperture.centre} mm, axes {aperture.axes} mm")
    print(f"Sample '{sample.name}': {sample.n_faces} facets, bounds {np.round(low, 3)} to {np.round(high, 3)} mm")
    if sphere is not None:
        print(f"Sphere: centre {sphere.centre} mm, radius {sphere.radius:.3f} mm")
    print("=" * 70 + "\n")

    if scan:
        print(f"[info] Starting scan with {n_rays} rays per pixel...")
        result = rectangular_scan(
            sample=sample,
            source=source,
            back_wall=back_wall,
            x_range=config.SCAN_X_RANGE_MM,
            z_range=config.SCAN_Z_RANGE_MM,
            step=config.SCAN_STEP_MM,
            n_rays=n_rays,
            max_scatters=max_scatters,
            seed=seed,
            sphere=sphere,
            effuse_source=build_effuse_source() if n_effuse else None,
            n_effuse=n_effuse,
        )
        print_statistics(result)
        if save_results:
            save_scan_result(result, str(output_dir / config.DATA_OUTPUT_DIR / config.SCAN_RESULT_FILE))
        if generate_plots:
            _plot_scan(result, scene, output_dir)
        return result

    print(f"[info] Starting single-position batch with {n_rays} rays...")
    rng = RandomSource(seed)
    batch = trace_rays(source, scene, n_rays, max_scatters, rng, keep_detected=True, progress=True)
    print_statistics(batch)

    # A few full paths for inspection, on their own stream
    paths = trace_ray_paths(source, scene, min(n_rays, config.MAX_PATHS_TO_PLOT), max_scatters, rng.spawn(1)[0])

    if save_results:
        data = output_dir / config.DATA_OUTPUT_DIR
        if batch.counters.detected:
            export_detected_rays_to_csv(batch, str(data / config.DETECTED_RAYS_CSV))
        export_ray_paths_to_csv(paths, str(data / config.RAY_PATHS_CSV))
    if generate_plots:
        figures = output_dir / config.FIGURES_OUTPUT_DIR
        plot_scatter_histogram(batch.histogram, save_path=str(figures / config.HISTOGRAM_FIGURE_BASE))
        if batch.counters.detected:
            plot_outgoing_directions(batch.final_directions, save_path=str(figures / config.DIRECTIONS_FIGURE_BASE))
        plot_scene(scene, source=source, save_path=str(figures / config.SCENE_FIGURE))
        plot_ray_paths(paths, scene=scene, save_path=str(figures / config.RAY_PATHS_FIGURE_BASE))
    return batch


def _plot_scan(result: ScanResult, scene: SceneGeometry, output_dir: Path) -> None:
    print("[info] Generating plots...")
    figures = output_dir / config.FIGURES_OUTPUT_DIR
    for aperture in range(1, result.counts.shape[2] + 1):
        plot_scan_image(
            result,
            aperture=aperture,
            save_path=str(figures / f"{config.SCAN_IMAGE_FIGURE_BASE}_aperture{aperture}"),
        )
    plot_scatter_histogram(result.histograms.sum(axis=(1, 2)),
                           save_path=str(figures / config.HISTOGRAM_FIGURE_BASE))
    if result.n_effuse:
        plot_effuse_image(result, save_path=str(figures / config.EFFUSE_IMAGE_FIGURE_BASE))
    plot_scene(scene, source=build_beam_source(), save_path=str(figures / config.SCENE_FIGURE))
    print("[info] Plotting complete!")


def main():
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run SHeM ray-tracing simulation")
    parser.add_argument("-n", "--rays", type=int, default=None,
                        help="Rays per pixel (or in total with --single)")
    parser.add_argument("--max-scatters", type=int, default=None,
                        help="Maximum scattering events per ray")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed of the random source")
    parser.add_argument("--sample-stl", type=Path, default=None,
                        help="STL file of the sample (flat sample if omitted)")
    parser.add_argument("--sphere", action="store_true", default=None,
                        help="Place the analytic sphere on the sample")
    parser.add_argument("--effuse", type=int, default=None,
                        help="Effusive rays per pixel during a scan (0 disables)")
    parser.add_argument("--single", action="store_true",
                        help="Trace one batch at the scan origin instead of scanning")
    parser.add_argument("--no-save", action="store_true",
                        help="Don't save results")
    parser.add_argument("--no-plot", action="store_true",
                        help="Don't generate plots")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for results and figures")

    args = parser.parse_args()

    run_full_simulation(
        output_dir=args.output_dir,
        n_rays=args.rays,
        max_scatters=args.max_scatters,
        seed=args.seed,
        sample_stl=args.sample_stl,
        use_sphere=args.sphere,
        n_effuse=args.effuse,
        scan=not args.single,
        save_results=not args.no_save,
        generate_plots=not args.no_plot,
    )


if __name__ == "__main__":
    main()
