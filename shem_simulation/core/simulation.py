"""
High-level simulation driver functions: batches of rays and rectangular scans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from .constants import DEBUG
from .data_classes import (
    AnalyticSphere,
    BackWall,
    RayState,
    SceneGeometry,
    TraceCounters,
    TraceResult,
    TriangulatedSurface,
)
from .geometry import translate_surface
from .random_source import RandomSource
from .sampling import BeamSource, create_ray_source
from .tracing import trace_ray


@dataclass
class RayBatchResult:
    """Outcome of tracing a batch of rays from one source.

    Attributes
    ----------
    counters : TraceCounters
        Detected, killed and escaped totals plus per-aperture counts.
    histogram : np.ndarray, shape (max_scatters + 1,)
        Number of detected rays per scatter count (index = scatter count).
    final_positions, final_directions : np.ndarray or None
        Final positions/directions of the detected rays, shape (n, 3), kept
        when requested.
    scatter_counts, apertures : np.ndarray or None
        Scatter count and aperture index of each kept detected ray.
    """

    counters: TraceCounters
    histogram: np.ndarray
    final_positions: Optional[np.ndarray] = None
    final_directions: Optional[np.ndarray] = None
    scatter_counts: Optional[np.ndarray] = None
    apertures: Optional[np.ndarray] = None

    @property
    def n_rays(self) -> int:
        return self.counters.total


@dataclass
class ScanResult:
    """Detector counts for every pixel of a rectangular scan.

    Arrays are indexed ``[z_pixel, x_pixel]``; ``counts`` has a trailing
    aperture axis and ``histograms`` a leading scatter-count axis.
    """

    x_positions: np.ndarray
    z_positions: np.ndarray
    counts: np.ndarray  # (n_z, n_x, n_apertures)
    killed: np.ndarray  # (n_z, n_x)
    escaped: np.ndarray  # (n_z, n_x)
    histograms: np.ndarray  # (max_scatters + 1, n_z, n_x)
    n_rays: int
    effuse_counts: Optional[np.ndarray] = None  # (n_z, n_x)
    n_effuse: int = 0
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.effuse_counts is None:
            self.effuse_counts = np.zeros_like(self.killed)

    def image(self, aperture: Optional[int] = None) -> np.ndarray:
        """Return the image for one aperture (1-based) or summed over all."""
        if aperture is None:
            return self.counts.sum(axis=2)
        if not 1 <= aperture <= self.counts.shape[2]:
            raise ValueError(f"Aperture index must lie in [1, {self.counts.shape[2]}], got {aperture}")
        return self.counts[:, :, aperture - 1]

    def single_scatter_image(self) -> np.ndarray:
        """Image of rays detected after exactly one scattering event."""
        if self.histograms.shape[0] < 2:
            return np.zeros_like(self.killed)
        return self.histograms[1]

    def multiple_scatter_image(self) -> np.ndarray:
        """Image of rays detected after two or more scattering events."""
        return self.histograms[2:].sum(axis=0)


def trace_rays(
    source: BeamSource,
    scene: SceneGeometry,
    n_rays: int,
    max_scatters: int,
    rng: RandomSource,
    keep_detected: bool = False,
    progress: bool = False,
) -> RayBatchResult:
    """Trace ``n_rays`` rays from ``source`` through ``scene``.

    Parameters
    ----------
    source : BeamSource
        Source the rays are generated from.
    scene : SceneGeometry
        Geometry, shared read-only by every ray.
    n_rays : int
        Number of rays to trace.
    max_scatters : int
        Maximum number of scattering events per ray.
    rng : RandomSource
        Random source used for ray generation and scattering.
    keep_detected : bool
        Keep final positions and directions of detected rays.
    progress : bool
        Show a tqdm progress bar.
    """
    if n_rays < 0:
        raise ValueError(f"n_rays must be non-negative, got {n_rays}")
    if max_scatters < 0:
        raise ValueError(f"max_scatters must be non-negative, got {max_scatters}")

    counters = TraceCounters(n_apertures=scene.back_wall.n_apertures)
    histogram = np.zeros(max_scatters + 1, dtype=np.int64)
    positions, directions, scatters, apertures = [], [], [], []

    for _ in tqdm(range(n_rays), desc="Tracing rays", disable=not progress):
        ray = create_ray_source(source, rng)
        result = trace_ray(ray, scene, max_scatters, rng, counters=counters)
        if result.state is not RayState.DETECTED:
            continue
        histogram[result.n_scatters] += 1
        if keep_detected:
            positions.append(result.position)
            directions.append(result.direction)
            scatters.append(result.n_scatters)
            apertures.append(result.aperture)

    if DEBUG:
        print(f"[debug] Batch of {n_rays}: detected={counters.detected}, "
              f"killed={counters.killed}, escaped={counters.escaped}")

    batch = RayBatchResult(counters=counters, histogram=histogram)
    if keep_detected:
        batch.final_positions = np.array(positions, dtype=float).reshape(-1, 3)
        batch.final_directions = np.array(directions, dtype=float).reshape(-1, 3)
        batch.scatter_counts = np.array(scatters, dtype=np.int64)
        batch.apertures = np.array(apertures, dtype=np.int64)
    return batch


def _scan_axis(value_range: Tuple[float, float], step: float) -> np.ndarray:
    low, high = value_range
    if step <= 0.0:
        raise ValueError(f"Raster step must be positive, got {step}")
    if high < low:
        raise ValueError(f"Scan range must be increasing, got {value_range}")
    n = int(np.floor((high - low) / step + 1e-9)) + 1
    return low + step * np.arange(n)


def rectangular_scan(
    sample: TriangulatedSurface,
    source: BeamSource,
    back_wall: BackWall,
    x_range: Tuple[float, float],
    z_range: Tuple[float, float],
    step: float,
    n_rays: int,
    max_scatters: int,
    seed: Optional[int] = None,
    sphere: Optional[AnalyticSphere] = None,
    extra_surfaces: Sequence[TriangulatedSurface] = (),
    effuse_source: Optional[BeamSource] = None,
    n_effuse: int = 0,
    progress: bool = True,
) -> ScanResult:
    """Simulate a rectangular raster scan of the sample.

    For each pixel the sample (and the sphere, if any) is moved by the scan
    offset in the x-z plane and ``n_rays`` rays are traced. Each pixel uses
    its own child random stream, so a pixel's result does not depend on the
    order pixels are simulated in.

    Parameters
    ----------
    sample : TriangulatedSurface
        Sample surface at scan position (0, 0).
    source : BeamSource
        Beam source (fixed with respect to the pinhole plate).
    back_wall : BackWall
        Back wall with the detector apertures.
    x_range, z_range : tuple of float
        Scan limits ``(low, high)`` in mm, inclusive.
    step : float
        Raster step in mm.
    n_rays : int
        Rays per pixel.
    max_scatters : int
        Maximum number of scattering events per ray.
    seed : int, optional
        Seed of the scan; identical seeds reproduce identical scans.
    sphere : AnalyticSphere, optional
        Sphere placed on the sample; it moves with the sample.
    extra_surfaces : sequence of TriangulatedSurface
        Fixed surfaces such as a triangulated pinhole plate.
    effuse_source : BeamSource, optional
        Effusive beam leaving the source alongside the main beam. Only its
        detected rays are counted, per pixel, in ``effuse_counts``.
    n_effuse : int
        Effusive rays per pixel; zero (or no ``effuse_source``) leaves the
        effusive image empty.
    progress : bool
        Show a tqdm progress bar over pixels.
    """
    xs = _scan_axis(x_range, step)
    zs = _scan_axis(z_range, step)
    n_x, n_z = len(xs), len(zs)
    n_apertures = back_wall.n_apertures

    counts = np.zeros((n_z, n_x, n_apertures), dtype=np.int64)
    killed = np.zeros((n_z, n_x), dtype=np.int64)
    escaped = np.zeros((n_z, n_x), dtype=np.int64)
    histograms = np.zeros((max_scatters + 1, n_z, n_x), dtype=np.int64)

    if n_effuse < 0:
        raise ValueError(f"n_effuse must be non-negative, got {n_effuse}")
    if effuse_source is None:
        n_effuse = 0
    effuse_counts = np.zeros((n_z, n_x), dtype=np.int64)

    # Effusive streams come after the main ones; main streams never depend on n_effuse
    root_rng = RandomSource(seed)
    pixel_rngs = root_rng.spawn(n_x * n_z)
    effuse_rngs = root_rng.spawn(n_x * n_z)

    with tqdm(total=n_x * n_z, desc="Scanning pixels", disable=not progress) as bar:
        for i_z, z in enumerate(zs):
            for i_x, x in enumerate(xs):
                offset = np.array([x, 0.0, z])
                moved_sphere = None
                if sphere is not None:
                    moved_sphere = AnalyticSphere(
                        centre=sphere.centre + offset,
                        radius=sphere.radius,
                        composition=sphere.composition,
                        parameter=sphere.parameter,
                        enabled=sphere.enabled,
                    )
                scene = SceneGeometry(
                    surfaces=(translate_surface(sample, offset),) + tuple(extra_surfaces),
                    back_wall=back_wall,
                    sphere=moved_sphere,
                )
                batch = trace_rays(source, scene, n_rays, max_scatters, pixel_rngs[i_z * n_x + i_x])

                counts[i_z, i_x] = batch.counters.per_aperture
                killed[i_z, i_x] = batch.counters.killed
                escaped[i_z, i_x] = batch.counters.escaped
                histograms[:, i_z, i_x] = batch.histogram

                if n_effuse:
                    effuse = trace_rays(effuse_source, scene, n_effuse, max_scatters, effuse_rngs[i_z * n_x + i_x])
                    effuse_counts[i_z, i_x] = effuse.counters.detected
                bar.update(1)

    total_detected = int(counts.sum())
    print(f"[info] Scan complete: {n_x} x {n_z} pixels, {n_rays} rays per pixel")
    print(f"[info] Detected rays: {total_detected}, killed rays: {int(killed.sum())}")
    if n_effuse:
        print(f"[info] Effusive rays detected: {int(effuse_counts.sum())} of {n_effuse * n_x * n_z}")

    return ScanResult(
        x_positions=xs,
        z_positions=zs,
        counts=counts,
        killed=killed,
        escaped=escaped,
        histograms=histograms,
        n_rays=n_rays,
        effuse_counts=effuse_counts,
        n_effuse=n_effuse,
        metadata={
            "step": step,
            "max_scatters": max_scatters,
            "seed": seed,
            "n_apertures": n_apertures,
        },
    )


def trace_ray_paths(
    source: BeamSource,
    scene: SceneGeometry,
    n_rays: int,
    max_scatters: int,
    rng: RandomSource,
) -> List[TraceResult]:
    """Trace ``n_rays`` rays keeping every visited point, for plotting and export."""
    if n_rays < 0:
        raise ValueError(f"n_rays must be non-negative, got {n_rays}")
    results = []
    for _ in range(n_rays):
        ray = create_ray_source(source, rng)
        results.append(trace_ray(ray, scene, max_scatters, rng, record_path=True))
    return results
