"""
Geometry primitives: vector helpers, the 3x3 ray/triangle solve and
surface preparation.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import numpy as np

from .constants import DETERMINANT_EPSILON
from .data_classes import TriangulatedSurface, mesh_surface


def normalise(vector: np.ndarray) -> np.ndarray:
    """Return ``vector`` scaled to unit length (zero vectors are returned unchanged)."""
    vector = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(vector)
    if norm == 0.0:
        return vector.copy()
    return vector / norm


def solve_3x3_batch(
    col0: np.ndarray,
    col1: np.ndarray,
    col2: np.ndarray,
    rhs: np.ndarray,
    epsilon: float = DETERMINANT_EPSILON,
) -> Tuple[np.ndarray, np.ndarray]:
    """Solve many 3x3 systems ``A u = v`` given the columns of each ``A``.

    Uses Cramer's rule. Systems whose determinant satisfies
    ``|det(A)| < epsilon`` are reported as failed.

    Parameters
    ----------
    col0, col1, col2 : np.ndarray, shape (n, 3)
        Columns of the matrices. ``col2`` may be a single 3-vector shared by
        all systems.
    rhs : np.ndarray, shape (n, 3)
        Right-hand sides.
    epsilon : float
        Tolerance on the determinant.

    Returns
    -------
    u : np.ndarray, shape (n, 3)
        Solutions (zero where the solve failed).
    ok : np.ndarray of bool, shape (n,)
        Whether each system was solved.
    """
    col0 = np.atleast_2d(col0)
    col1 = np.atleast_2d(col1)
    rhs = np.atleast_2d(rhs)
    col2 = np.broadcast_to(col2, col0.shape)

    c12 = np.cross(col1, col2)
    det = np.einsum("ij,ij->i", col0, c12)
    ok = np.abs(det) >= epsilon

    u = np.zeros_like(rhs, dtype=float)
    if not np.any(ok):
        return u, ok

    inv_det = 1.0 / det[ok]
    c0, c1, c2, v = col0[ok], col1[ok], col2[ok], rhs[ok]
    u[ok, 0] = np.einsum("ij,ij->i", v, c12[ok]) * inv_det
    u[ok, 1] = np.einsum("ij,ij->i", c0, np.cross(v, c2)) * inv_det
    u[ok, 2] = np.einsum("ij,ij->i", c0, np.cross(c1, v)) * inv_det
    return u, ok


def solve_3x3(
    matrix: np.ndarray,
    rhs: np.ndarray,
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[np.ndarray]:
    """Solve ``A u = v`` for a single 3x3 matrix.

    Returns ``None`` when ``|det(A)| < epsilon`` (near-parallel ray or a
    degenerate triangle).
    """
    matrix = np.asarray(matrix, dtype=float)
    u, ok = solve_3x3_batch(matrix[:, 0], matrix[:, 1], matrix[:, 2], np.asarray(rhs, dtype=float), epsilon)
    if not ok[0]:
        return None
    return u[0]


def get_element(surface: TriangulatedSurface, index: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return the three vertices and the normal of triangle ``index``."""
    return surface.v0[index], surface.v1[index], surface.v2[index], surface.normals[index]


def build_orthonormal_frame(axis: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build an orthonormal coordinate frame from a given axis."""
    axis = np.array(axis, dtype=float)
    norm = np.linalg.norm(axis)
    if norm == 0.0:
        raise ValueError("Axis vector must be non-zero")
    axis /= norm
    up = np.array([0.0, 0.0, 1.0])
    if abs(np.dot(axis, up)) > 0.99:
        up = np.array([1.0, 0.0, 0.0])
    u = np.cross(up, axis)
    u /= np.linalg.norm(u)
    v = np.cross(axis, u)
    return axis, u, v


def prepare_surface(
    mesh: np.ndarray,
    surface_index: int = 0,
    composition: Union[int, np.ndarray] = 1,
    parameter: Union[float, np.ndarray] = 0.0,
    name: str = "sample",
) -> TriangulatedSurface:
    """Build a :class:`TriangulatedSurface` from STL-style facet data.

    Parameters
    ----------
    mesh : np.ndarray
        Facets with shape (n_facets, 4, 3) where each facet contains
        [normal, v0, v1, v2], or (n_facets, 3, 3) with just vertices. Missing
        or zero normals are computed from the winding order.
    surface_index : int
        Mesh identifier, unique within a scene.
    composition : int or array of int
        Scattering law index, per surface or per facet.
    parameter : float or array of float
        Scattering law parameter, per surface or per facet.
    name : str
        Human readable name.
    """
    triangles = np.asarray(mesh, dtype=float)
    if triangles.ndim != 3 or triangles.shape[1] not in (3, 4) or triangles.shape[2] != 3:
        raise ValueError(f"Expected mesh of shape (n, 3, 3) or (n, 4, 3), got {triangles.shape}")

    if triangles.shape[1] == 4:
        stl_normals = triangles[:, 0, :].copy()
        corners = triangles[:, 1:4, :]
    else:
        stl_normals = np.zeros((triangles.shape[0], 3))
        corners = triangles

    winding_normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    norms = np.linalg.norm(stl_normals, axis=1)
    missing = norms == 0.0
    stl_normals[missing] = winding_normals[missing]

    norms = np.linalg.norm(stl_normals, axis=1, keepdims=True)
    norms = np.where(norms > 0, norms, 1.0)
    stl_normals = stl_normals / norms

    n_faces = corners.shape[0]
    vertices = corners.reshape(-1, 3)
    faces = np.arange(3 * n_faces, dtype=np.int64).reshape(n_faces, 3)
    compositions = np.broadcast_to(np.asarray(composition, dtype=np.int64), (n_faces,)).copy()
    parameters = np.broadcast_to(np.asarray(parameter, dtype=float), (n_faces,)).copy()

    return TriangulatedSurface(
        vertices=vertices,
        faces=faces,
        normals=stl_normals,
        compositions=compositions,
        parameters=parameters,
        surface_id=mesh_surface(surface_index),
        name=name,
    )


def translate_surface(surface: TriangulatedSurface, offset: np.ndarray) -> TriangulatedSurface:
    """Return a copy of ``surface`` moved by ``offset``."""
    offset = np.asarray(offset, dtype=float)
    return TriangulatedSurface(
        vertices=surface.vertices + offset,
        faces=surface.faces,
        normals=surface.normals,
        compositions=surface.compositions,
        parameters=surface.parameters,
        surface_id=surface.surface_id,
        name=surface.name,
    )


def surface_bounds(surface: TriangulatedSurface) -> Tuple[np.ndarray, np.ndarray]:
    """Return the minimum and maximum corner of the surface's bounding box."""
    if surface.vertices.size == 0:
        raise ValueError("Surface does not contain any vertices")
    return surface.vertices.min(axis=0), surface.vertices.max(axis=0)
