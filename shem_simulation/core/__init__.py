"""
SHeM ray-tracing core

This subpackage contains the core simulation modules:
- constants: numerical tolerances and the debug flag
- data_classes: rays, surfaces, sphere, back wall, intersections, results
- geometry: vector helpers, 3x3 solves and surface preparation
- intersection: nearest-intersection search
- random_source: seeded random number source
- scattering: scattering-law direction samplers
- sampling: beam source and ray generation
- tracing: per-ray state machine
- simulation: batches of rays and rectangular scans
- stl_utils: STL file handling
- io_utils: input/output helpers
"""

# Constants
from .constants import (
    DEBUG,
    DETERMINANT_EPSILON,
    NO_ELEMENT,
)

# Data classes
from .data_classes import (
    RayState,
    ScatteringLaw,
    SurfaceKind,
    SurfaceId,
    NO_SURFACE,
    SPHERE_SURFACE,
    PLATE_SURFACE,
    mesh_surface,
    Ray,
    TriangulatedSurface,
    AnalyticSphere,
    Aperture,
    BackWall,
    SceneGeometry,
    Intersection,
    NO_INTERSECTION,
    TraceCounters,
    TraceResult,
)

# Geometry
from .geometry import (
    normalise,
    solve_3x3,
    solve_3x3_batch,
    get_element,
    build_orthonormal_frame,
    prepare_surface,
    translate_surface,
    surface_bounds,
)

# Intersections
from .intersection import (
    intersect_surface,
    intersect_sphere,
    intersect_back_wall,
    aperture_index,
    find_nearest_intersection,
)

# Random numbers
from .random_source import RandomSource

# Scattering
from .scattering import (
    specular_direction,
    cosine_direction,
    uniform_direction,
    broad_specular_direction,
    scatter_direction,
)

# Sampling
from .sampling import (
    SourceModel,
    BeamSource,
    create_ray,
    create_ray_source,
    sample_point_in_disc,
    sample_direction_in_cone,
    sample_direction_gaussian,
)

# Tracing
from .tracing import (
    trace_step,
    trace_ray,
)

# Simulation
from .simulation import (
    RayBatchResult,
    ScanResult,
    trace_rays,
    trace_ray_paths,
    rectangular_scan,
)

# STL
from .stl_utils import (
    load_stl_mesh,
    load_stl_surface,
    save_stl_mesh,
)

# IO
from .io_utils import (
    export_detected_rays_to_csv,
    load_detected_rays,
    export_ray_paths_to_csv,
    save_scan_result,
    load_scan_result,
)

__all__ = [
    # Constants
    'DEBUG',
    'DETERMINANT_EPSILON',
    'NO_ELEMENT',
    # Data classes
    'RayState',
    'ScatteringLaw',
    'SurfaceKind',
    'SurfaceId',
    'NO_SURFACE',
    'SPHERE_SURFACE',
    'PLATE_SURFACE',
    'mesh_surface',
    'Ray',
    'TriangulatedSurface',
    'AnalyticSphere',
    'Aperture',
    'BackWall',
    'SceneGeometry',
    'Intersection',
    'NO_INTERSECTION',
    'TraceCounters',
    'TraceResult',
    # Geometry
    'normalise',
    'solve_3x3',
    'solve_3x3_batch',
    'get_element',
    'build_orthonormal_frame',
    'prepare_surface',
    'translate_surface',
    'surface_bounds',
    # Intersections
    'intersect_surface',
    'intersect_sphere',
    'intersect_back_wall',
    'aperture_index',
    'find_nearest_intersection',
    # Random numbers
    'RandomSource',
    # Scattering
    'specular_direction',
    'cosine_direction',
    'uniform_direction',
    'broad_specular_direction',
    'scatter_direction',
    # Sampling
    'SourceModel',
    'BeamSource',
    'create_ray',
    'create_ray_source',
    'sample_point_in_disc',
    'sample_direction_in_cone',
    'sample_direction_gaussian',
    # Tracing
    'trace_step',
    'trace_ray',
    # Simulation
    'RayBatchResult',
    'ScanResult',
    'trace_rays',
    'trace_ray_paths',
    'rectangular_scan',
    # STL
    'load_stl_mesh',
    'load_stl_surface',
    'save_stl_mesh',
    # IO
    'export_detected_rays_to_csv',
    'load_detected_rays',
    'export_ray_paths_to_csv',
    'save_scan_result',
    'load_scan_result',
]
