"""
Basic usage examples for the shem_simulation package.

Shows how to trace single rays, run a batch from the beam source and build
simple samples.
"""

import numpy as np

from shem_simulation import (
    Aperture,
    BackWall,
    RandomSource,
    SceneGeometry,
    ScatteringLaw,
    create_ray,
    prepare_surface,
    trace_ray,
    trace_rays,
)
from shem_simulation.runner import build_back_wall, build_beam_source
from shem_simulation.testing import (
    create_flat_sample,
    create_trench_sample,
    print_mesh_info,
    run_quick_test,
)


def example_single_ray():
    """Trace one ray straight into a detector aperture."""
    print("=" * 60)
    print("Single ray example")
    print("=" * 60)

    wall = BackWall(apertures=(Aperture(centre=(0.0, 0.0), axes=(1.0, 1.0)),))
    scene = SceneGeometry(surfaces=(), back_wall=wall)
    ray = create_ray([0.0, 5.0, 0.0], [0.0, -1.0, 0.0])
    result = trace_ray(ray, scene, max_scatters=0, rng=RandomSource(1))
    print(f"\nState: {result.state.name}, aperture {result.aperture}, position {result.position}")

    # A specular sample sends a 45 degree ray straight into the mirrored aperture
    sample = prepare_surface(create_flat_sample(height=-1.0), composition=ScatteringLaw.SPECULAR)
    wall = BackWall(apertures=(Aperture(centre=(1.0, 0.3), axes=(0.2, 0.2)),))
    scene = SceneGeometry(surfaces=(sample,), back_wall=wall)
    ray = create_ray([-0.9, -0.1, 0.3], [1.0, -1.0, 0.0])
    result = trace_ray(ray, scene, max_scatters=5, rng=RandomSource(1), record_path=True)
    print(f"State: {result.state.name} after {result.n_scatters} scatter(s)")
    for point in result.path:
        print(f"  path point: [{point[0]:.4f}, {point[1]:.4f}, {point[2]:.4f}]")


def example_batch():
    """Trace a batch of rays from the configured beam at a diffuse sample."""
    print("\n" + "=" * 60)
    print("Batch example")
    print("=" * 60)

    source = build_beam_source()
    sample = prepare_surface(create_trench_sample(), composition=ScatteringLaw.COSINE, name="trench")
    scene = SceneGeometry(surfaces=(sample,), back_wall=build_back_wall())
    batch = trace_rays(source, scene, n_rays=1000, max_scatters=10, rng=RandomSource(7))

    counters = batch.counters
    print(f"\nDetected: {counters.detected}, killed: {counters.killed}, escaped: {counters.escaped}")
    print(f"Detected rays by number of scatters: {batch.histogram.tolist()}")
    if counters.detected:
        mean = np.dot(np.arange(len(batch.histogram)), batch.histogram) / counters.detected
        print(f"Mean scatters of detected rays: {mean:.3f}")


def example_simple_geometry():
    """Build and inspect the simple samples."""
    print("\n" + "=" * 60)
    print("Simple geometry example")
    print("=" * 60)

    print_mesh_info(create_flat_sample(), "Flat sample")
    print_mesh_info(create_trench_sample(), "Trench sample")


def main():
    print("\n" + "=" * 60)
    print("shem_simulation basic usage")
    print("=" * 60)

    example_single_ray()
    example_batch()
    example_simple_geometry()
    run_quick_test()

    print("\n" + "=" * 60)
    print("Examples complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
