"""
Simple Geometry Generators for Testing and Debugging
=====================================================

This module provides simple analytical samples that can be used in place of
STL meshes:
- a flat sample facing the pinhole plate
- a sample with a rectangular trench
- a box and an icosphere for topography and sphere comparisons

Each function returns facets in the same format as load_stl_mesh()
([normal, v0, v1, v2] per facet, lengths in mm), with the winding arranged so
the normals point out of the solid.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from ..core.data_classes import TriangulatedSurface


def _facet(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray, outward: np.ndarray) -> np.ndarray:
    """Facet with its winding flipped, if needed, so the normal follows ``outward``."""
    normal = np.cross(v1 - v0, v2 - v0)
    if np.dot(normal, outward) < 0.0:
        v1, v2 = v2, v1
        normal = -normal
    norm = np.linalg.norm(normal)
    if norm > 0:
        normal = normal / norm
    return np.stack([normal, v0, v1, v2], axis=0)


def _quad(corners, outward) -> list:
    """Two facets covering the planar quad ``corners`` (in perimeter order)."""
    p0, p1, p2, p3 = (np.asarray(c, dtype=float) for c in corners)
    outward = np.asarray(outward, dtype=float)
    return [_facet(p0, p1, p2, outward), _facet(p0, p2, p3, outward)]


def create_flat_sample(
    height: float = -2.121,
    size: float = 6.0,
    center: tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Create a square flat sample in the plane y = ``height``, facing +y.

    Parameters
    ----------
    height : float, optional
        y coordinate of the sample surface in mm, by default -2.121
    size : float, optional
        Side length of the square in mm, by default 6.0
    center : tuple[float, float], optional
        (x, z) centre of the square, by default (0, 0)

    Returns
    -------
    np.ndarray, shape (2, 4, 3)
    """
    if size <= 0:
        raise ValueError(f"Sample size must be positive, got {size}")
    cx, cz = center
    h = size / 2.0
    corners = [
        (cx - h, height, cz - h),
        (cx + h, height, cz - h),
        (cx + h, height, cz + h),
        (cx - h, height, cz + h),
    ]
    return np.stack(_quad(corners, (0.0, 1.0, 0.0)), axis=0)


def create_trench_sample(
    height: float = -2.121,
    size: float = 6.0,
    trench_width: float = 0.5,
    trench_depth: float = 0.25,
) -> np.ndarray:
    """Create a flat sample with a rectangular trench running along z.

    The trench is centred on x = 0. Its floor and walls face into the trench
    and the top surfaces face +y.

    Returns
    -------
    np.ndarray, shape (10, 4, 3)
    """
    if trench_width <= 0 or trench_width >= size:
        raise ValueError(f"Trench width must lie in (0, {size}), got {trench_width}")
    if trench_depth <= 0:
        raise ValueError(f"Trench depth must be positive, got {trench_depth}")

    h = size / 2.0
    w = trench_width / 2.0
    floor = height - trench_depth
    up = (0.0, 1.0, 0.0)

    facets = []
    # Top surfaces either side of the trench
    facets += _quad([(-h, height, -h), (-w, height, -h), (-w, height, h), (-h, height, h)], up)
    facets += _quad([(w, height, -h), (h, height, -h), (h, height, h), (w, height, h)], up)
    # Floor
    facets += _quad([(-w, floor, -h), (w, floor, -h), (w, floor, h), (-w, floor, h)], up)
    # Walls
    facets += _quad([(-w, floor, -h), (-w, height, -h), (-w, height, h), (-w, floor, h)], (1.0, 0.0, 0.0))
    facets += _quad([(w, floor, -h), (w, height, -h), (w, height, h), (w, floor, h)], (-1.0, 0.0, 0.0))
    return np.stack(facets, axis=0)


def create_simple_box(
    center: tuple[float, float, float] = (0.0, -1.871, 0.0),
    size: tuple[float, float, float] = (0.5, 0.5, 0.5),
) -> np.ndarray:
    """Create a rectangular box mesh with outward normals.

    Parameters
    ----------
    center : tuple[float, float, float], optional
        Box center (x, y, z) in mm, by default resting on the default sample
    size : tuple[float, float, float], optional
        Box dimensions along x, y and z in mm

    Returns
    -------
    np.ndarray, shape (12, 4, 3)
        12 triangular facets (2 per box face)
    """
    c = np.asarray(center, dtype=float)
    hx, hy, hz = (s / 2.0 for s in size)

    def corner(sx, sy, sz):
        return c + np.array([sx * hx, sy * hy, sz * hz])

    facets = []
    for axis in range(3):
        for sign in (-1.0, 1.0):
            outward = np.zeros(3)
            outward[axis] = sign
            # Walk the face perimeter in the two remaining axes
            a, b = [i for i in range(3) if i != axis]
            corners = []
            for sa, sb in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
                signs = [0.0, 0.0, 0.0]
                signs[axis] = sign
                signs[a] = sa
                signs[b] = sb
                corners.append(corner(*signs))
            facets += _quad(corners, outward)
    return np.stack(facets, axis=0)


def create_simple_sphere(
    center: tuple[float, float, float] = (0.0, -1.621, 0.0),
    radius: float = 0.5,
    subdivisions: int = 3,
) -> np.ndarray:
    """Create a triangulated sphere using icosphere subdivision.

    Parameters
    ----------
    center : tuple[float, float, float], optional
        Center coordinates (x, y, z) in mm, by default resting on the
        default sample
    radius : float, optional
        Sphere radius in mm, by default 0.5
    subdivisions : int, optional
        Number of icosphere subdivisions (0-4), by default 3
        0: 20 faces (icosahedron)
        1: 80 faces
        2: 320 faces
        3: 1280 faces (good balance)
        4: 5120 faces (fine detail)

    Returns
    -------
    np.ndarray, shape (n_facets, 4, 3)
    """
    if radius <= 0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    phi = (1.0 + np.sqrt(5.0)) / 2.0
    vertices = [
        [-1, phi, 0], [1, phi, 0], [-1, -phi, 0], [1, -phi, 0],
        [0, -1, phi], [0, 1, phi], [0, -1, -phi], [0, 1, -phi],
        [phi, 0, -1], [phi, 0, 1], [-phi, 0, -1], [-phi, 0, 1]
    ]
    vertices = [np.array(v, dtype=float) / np.sqrt(1.0 + phi * phi) for v in vertices]

    faces = [
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1]
    ]

    for _ in range(subdivisions):
        midpoints = {}

        def midpoint(i: int, j: int) -> int:
            key = (min(i, j), max(i, j))
            if key not in midpoints:
                mid = (vertices[i] + vertices[j]) / 2.0
                vertices.append(mid / np.linalg.norm(mid))
                midpoints[key] = len(vertices) - 1
            return midpoints[key]

        new_faces = []
        for v0, v1, v2 in faces:
            a = midpoint(v0, v1)
            b = midpoint(v1, v2)
            c = midpoint(v2, v0)
            new_faces += [[v0, a, c], [v1, b, a], [v2, c, b], [a, b, c]]
        faces = new_faces

    centre = np.asarray(center, dtype=float)
    points = np.array(vertices) * radius + centre
    facets = []
    for face in faces:
        v0, v1, v2 = points[face[0]], points[face[1]], points[face[2]]
        facets.append(_facet(v0, v1, v2, (v0 + v1 + v2) / 3.0 - centre))
    return np.stack(facets, axis=0)


def print_mesh_info(mesh: Union[np.ndarray, TriangulatedSurface], name: str = "Mesh") -> None:
    """Print diagnostic information about a facet array or prepared surface.

    Parameters
    ----------
    mesh : np.ndarray or TriangulatedSurface
        Mesh data in STL format, or a prepared surface
    name : str, optional
        Name to display, by default "Mesh"
    """
    if isinstance(mesh, TriangulatedSurface):
        n_facets = mesh.n_faces
        vertices = mesh.vertices
    else:
        n_facets = mesh.shape[0]
        vertices = mesh[:, 1:4, :].reshape(-1, 3) if mesh.shape[1] == 4 else mesh.reshape(-1, 3)

    bbox_min = vertices.min(axis=0)
    bbox_max = vertices.max(axis=0)
    bbox_size = bbox_max - bbox_min
    center = (bbox_min + bbox_max) / 2

    print(f"\n{name} Information:")
    print(f"  Number of facets: {n_facets}")
    print(f"  Bounding box min: ({bbox_min[0]:.3f}, {bbox_min[1]:.3f}, {bbox_min[2]:.3f}) mm")
    print(f"  Bounding box max: ({bbox_max[0]:.3f}, {bbox_max[1]:.3f}, {bbox_max[2]:.3f}) mm")
    print(f"  Bounding box size: ({bbox_size[0]:.3f}, {bbox_size[1]:.3f}, {bbox_size[2]:.3f}) mm")
    print(f"  Center: ({center[0]:.3f}, {center[1]:.3f}, {center[2]:.3f}) mm")
