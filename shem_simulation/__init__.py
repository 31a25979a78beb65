"""
SHeM Ray-Tracing Simulation Package
===================================

This package provides a Monte-Carlo ray tracer for the scanning helium
microscope (SHeM). Rays leave a source pinhole, scatter off triangulated
sample surfaces, an optional analytic sphere and the pinhole plate, and are
counted when they pass through one of the detector apertures.

Modules:
--------
- config: Configurable simulation parameters
- core.data_classes: Rays, surfaces, sphere, back wall and results
- core.geometry: Vector helpers and surface preparation
- core.intersection: Nearest-intersection search
- core.scattering: Scattering-law samplers
- core.sampling: Beam source
- core.tracing: Per-ray state machine
- core.simulation: Batches of rays and rectangular scans
- core.stl_utils: STL file loading
- core.io_utils: Data import/export utilities
- plotting: Scan images, histograms, scene and path plots
- testing: Simple samples, validation and model comparison
"""

from .core.constants import DEBUG, DETERMINANT_EPSILON, NO_ELEMENT
from . import config
from .core.data_classes import (
    RayState,
    ScatteringLaw,
    SurfaceId,
    Ray,
    TriangulatedSurface,
    AnalyticSphere,
    Aperture,
    BackWall,
    SceneGeometry,
    Intersection,
    TraceCounters,
    TraceResult,
)
from .core.stl_utils import load_stl_mesh, load_stl_surface
from .core.geometry import prepare_surface, translate_surface, build_orthonormal_frame
from .core.intersection import find_nearest_intersection
from .core.random_source import RandomSource
from .core.scattering import scatter_direction
from .core.sampling import SourceModel, BeamSource, create_ray, create_ray_source
from .core.tracing import trace_ray
from .core.simulation import (
    RayBatchResult,
    ScanResult,
    trace_rays,
    trace_ray_paths,
    rectangular_scan,
)
from .core.io_utils import (
    export_detected_rays_to_csv,
    load_detected_rays,
    export_ray_paths_to_csv,
    save_scan_result,
    load_scan_result,
)

__version__ = "1.0.0"
__all__ = [
    # Config module
    "config",
    # Constants
    "DEBUG",
    "DETERMINANT_EPSILON",
    "NO_ELEMENT",
    # Data classes
    "RayState",
    "ScatteringLaw",
    "SurfaceId",
    "Ray",
    "TriangulatedSurface",
    "AnalyticSphere",
    "Aperture",
    "BackWall",
    "SceneGeometry",
    "Intersection",
    "TraceCounters",
    "TraceResult",
    # STL utils
    "load_stl_mesh",
    "load_stl_surface",
    # Geometry
    "prepare_surface",
    "translate_surface",
    "build_orthonormal_frame",
    "find_nearest_intersection",
    # Sampling and scattering
    "RandomSource",
    "scatter_direction",
    "SourceModel",
    "BeamSource",
    "create_ray",
    "create_ray_source",
    # Simulation
    "trace_ray",
    "RayBatchResult",
    "ScanResult",
    "trace_rays",
    "trace_ray_paths",
    "rectangular_scan",
    # IO
    "export_detected_rays_to_csv",
    "load_detected_rays",
    "export_ray_paths_to_csv",
    "save_scan_result",
    "load_scan_result",
]
