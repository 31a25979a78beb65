"""
Data classes for the SHeM ray tracing simulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

import numpy as np

from .constants import NO_ELEMENT


class RayState(Enum):
    """States of the per-ray trace loop."""

    IN_FLIGHT = "in_flight"
    DETECTED = "detected"
    KILLED = "killed"
    ESCAPED = "escaped"


class ScatteringLaw(IntEnum):
    """Scattering distributions selected by a surface's composition index.

    SPECULAR        - mirror reflection about the normal
    COSINE          - cosine (Lambertian) distribution about the normal
    UNIFORM         - uniform over the outward hemisphere
    BROAD_SPECULAR  - Gaussian lobe about the specular direction,
                      parameter is the angular width sigma (radians)
    COSINE_SPECULAR - cosine with probability ``parameter``, else specular
    """

    SPECULAR = 0
    COSINE = 1
    UNIFORM = 2
    BROAD_SPECULAR = 3
    COSINE_SPECULAR = 4


def check_composition(composition, parameter) -> None:
    """Raise ``ValueError`` for an unknown law index or an invalid parameter."""
    valid = {law.value for law in ScatteringLaw}
    compositions = np.atleast_1d(np.asarray(composition))
    parameters = np.atleast_1d(np.asarray(parameter, dtype=float))
    unknown = sorted(set(int(c) for c in np.unique(compositions)) - valid)
    if unknown:
        raise ValueError(f"Unknown scattering law index: {unknown}")
    if np.any(~np.isfinite(parameters)):
        raise ValueError("Scattering parameters must be finite")
    parameters = np.broadcast_to(parameters, compositions.shape)
    broad = compositions == ScatteringLaw.BROAD_SPECULAR
    if np.any(parameters[broad] < 0.0):
        raise ValueError("Broad specular width must be non-negative")
    mixed = compositions == ScatteringLaw.COSINE_SPECULAR
    if np.any((parameters[mixed] < 0.0) | (parameters[mixed] > 1.0)):
        raise ValueError("Cosine fraction of a mixed law must lie in [0, 1]")


class SurfaceKind(Enum):
    """Which kind of surface a ray is on or has struck."""

    NONE = "none"
    MESH = "mesh"
    SPHERE = "sphere"
    PLATE = "plate"


@dataclass(frozen=True)
class SurfaceId:
    """Tagged identifier of a surface.

    ``index`` distinguishes triangulated surfaces from each other (sample,
    pinhole plate mesh, ...). It is 0 for the other kinds.
    """

    kind: SurfaceKind
    index: int = 0

    def __str__(self) -> str:
        if self.kind is SurfaceKind.MESH:
            return f"mesh[{self.index}]"
        return self.kind.value


NO_SURFACE = SurfaceId(SurfaceKind.NONE)
SPHERE_SURFACE = SurfaceId(SurfaceKind.SPHERE)
PLATE_SURFACE = SurfaceId(SurfaceKind.PLATE)


def mesh_surface(index: int) -> SurfaceId:
    """Return the identifier of the triangulated surface ``index``."""
    return SurfaceId(SurfaceKind.MESH, int(index))


@dataclass
class Ray:
    """State of a single ray in flight.

    Attributes
    ----------
    position : np.ndarray
        Current position (mm).
    direction : np.ndarray
        Current unit direction.
    on_surface : SurfaceId
        Surface the ray last left, used to skip self-intersection.
    on_element : int
        Triangle index the ray last left, or ``NO_ELEMENT``.
    n_scatters : int
        Number of scattering events so far.
    """

    position: np.ndarray
    direction: np.ndarray
    on_surface: SurfaceId = NO_SURFACE
    on_element: int = NO_ELEMENT
    n_scatters: int = 0


@dataclass(frozen=True)
class TriangulatedSurface:
    """An immutable triangulated surface with per-triangle scattering laws."""

    vertices: np.ndarray  # (n_vertices, 3)
    faces: np.ndarray  # (n_faces, 3) vertex indices
    normals: np.ndarray  # (n_faces, 3) outward unit normals
    compositions: np.ndarray  # (n_faces,) scattering law index
    parameters: np.ndarray  # (n_faces,) scattering law parameter
    surface_id: SurfaceId
    name: str = "sample"
    v0: np.ndarray = field(init=False, repr=False)
    v1: np.ndarray = field(init=False, repr=False)
    v2: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if self.surface_id.kind is not SurfaceKind.MESH:
            raise ValueError(f"Triangulated surface needs a mesh id, got {self.surface_id}")
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError(f"Vertices must have shape (n, 3), got {self.vertices.shape}")
        n_faces = self.faces.shape[0]
        if self.faces.ndim != 2 or self.faces.shape[1] != 3:
            raise ValueError(f"Faces must have shape (m, 3), got {self.faces.shape}")
        if self.normals.shape != (n_faces, 3):
            raise ValueError(f"Expected {n_faces} normals, got array of shape {self.normals.shape}")
        if self.compositions.shape != (n_faces,) or self.parameters.shape != (n_faces,):
            raise ValueError("One composition and one parameter are required per face")
        if n_faces and (self.faces.min() < 0 or self.faces.max() >= self.vertices.shape[0]):
            raise ValueError("Face indices refer to vertices that do not exist")
        check_composition(self.compositions, self.parameters)

        corners = self.vertices[self.faces] if n_faces else np.zeros((0, 3, 3))
        object.__setattr__(self, "v0", corners[:, 0, :])
        object.__setattr__(self, "v1", corners[:, 1, :])
        object.__setattr__(self, "v2", corners[:, 2, :])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])


@dataclass(frozen=True)
class AnalyticSphere:
    """Analytically defined sphere that may be placed on the sample."""

    centre: np.ndarray
    radius: float
    composition: int = 1
    parameter: float = 0.0
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, "centre", np.asarray(self.centre, dtype=float))
        if self.centre.shape != (3,):
            raise ValueError(f"Sphere centre must be a 3-vector, got shape {self.centre.shape}")
        if self.radius < 0.0:
            raise ValueError(f"Sphere radius must be non-negative, got {self.radius}")
        check_composition(self.composition, self.parameter)


@dataclass(frozen=True)
class Aperture:
    """Elliptical detector aperture in the back wall (plane y = 0).

    ``centre`` is the (x, z) position of the ellipse centre and ``axes`` are
    the full lengths of the ellipse axes along x and z.
    """

    centre: Tuple[float, float]
    axes: Tuple[float, float]

    def __post_init__(self):
        if len(self.centre) != 2 or len(self.axes) != 2:
            raise ValueError("Aperture centre and axes must both have two components")
        if self.axes[0] <= 0.0 or self.axes[1] <= 0.0:
            raise ValueError(f"Aperture axes must be positive, got {self.axes}")


@dataclass(frozen=True)
class BackWall:
    """Back wall at y = 0 containing the detector apertures.

    Attributes
    ----------
    apertures : tuple of Aperture
        Detector apertures, tested in order.
    plate_radius : float
        Radius of the circular pinhole plate about the origin (mm).
    plate_represent : bool
        Whether the plate outside the apertures scatters rays.
    composition : int
        Scattering law of the plate.
    parameter : float
        Scattering law parameter of the plate.
    """

    apertures: Tuple[Aperture, ...]
    plate_radius: float = 0.0
    plate_represent: bool = False
    composition: int = 1
    parameter: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "apertures", tuple(self.apertures))
        if not self.apertures:
            raise ValueError("The back wall needs at least one detector aperture")
        if self.plate_radius < 0.0:
            raise ValueError(f"Plate radius must be non-negative, got {self.plate_radius}")
        check_composition(self.composition, self.parameter)

    @property
    def n_apertures(self) -> int:
        return len(self.apertures)


@dataclass(frozen=True)
class SceneGeometry:
    """All geometry a ray can interact with, validated once up front."""

    surfaces: Tuple[TriangulatedSurface, ...]
    back_wall: BackWall
    sphere: Optional[AnalyticSphere] = None

    def __post_init__(self):
        object.__setattr__(self, "surfaces", tuple(self.surfaces))
        ids = [surface.surface_id for surface in self.surfaces]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Surface ids must be unique, got {[str(i) for i in ids]}")


@dataclass(frozen=True)
class Intersection:
    """Nearest intersection found along a ray.

    ``distance_sq`` is the squared distance from the ray origin. ``aperture``
    is the 1-based index of the detector aperture entered, 0 if none.
    """

    hit: bool
    distance_sq: float
    position: Optional[np.ndarray] = None
    normal: Optional[np.ndarray] = None
    surface: SurfaceId = NO_SURFACE
    element: int = NO_ELEMENT
    aperture: int = 0

    @property
    def detected(self) -> bool:
        return self.hit and self.aperture > 0


NO_INTERSECTION = Intersection(hit=False, distance_sq=float("inf"))


@dataclass
class TraceCounters:
    """Running totals of ray outcomes, accumulated by the caller."""

    n_apertures: int = 1
    detected: int = 0
    killed: int = 0
    escaped: int = 0
    per_aperture: np.ndarray = field(default=None)

    def __post_init__(self):
        if self.per_aperture is None:
            self.per_aperture = np.zeros(self.n_apertures, dtype=np.int64)

    @property
    def total(self) -> int:
        return self.detected + self.killed + self.escaped


@dataclass
class TraceResult:
    """Outcome of tracing one ray to completion.

    Attributes
    ----------
    state : RayState
        Terminal state reached.
    position : np.ndarray
        Final position of the ray.
    direction : np.ndarray
        Final direction of the ray.
    n_scatters : int
        Number of scattering events undergone.
    aperture : int
        1-based aperture index for detected rays, 0 otherwise.
    path : list of np.ndarray or None
        Visited positions (source, scattering points, final point) when
        path recording was requested.
    """

    state: RayState
    position: np.ndarray
    direction: np.ndarray
    n_scatters: int
    aperture: int = 0
    path: Optional[List[np.ndarray]] = None
