"""
Nearest-intersection search over triangulated surfaces, the analytic sphere
and the back wall with its detector apertures.

Every test takes the ray and the current best :class:`Intersection` and
returns the new best. A candidate only replaces the record when its squared
distance from the ray origin is strictly smaller, so on equal distances the
surface evaluated first wins.
"""

from __future__ import annotations

import math

import numpy as np

from .constants import DEBUG, DETERMINANT_EPSILON, NO_ELEMENT
from .data_classes import (
    AnalyticSphere,
    BackWall,
    Intersection,
    NO_INTERSECTION,
    PLATE_SURFACE,
    Ray,
    SceneGeometry,
    SPHERE_SURFACE,
    TriangulatedSurface,
)
from .geometry import normalise, solve_3x3_batch


def intersect_surface(
    ray: Ray,
    surface: TriangulatedSurface,
    best: Intersection = NO_INTERSECTION,
    epsilon: float = DETERMINANT_EPSILON,
) -> Intersection:
    """Test the ray against every triangle of ``surface``.

    A triangle is skipped when the ray is leaving it, when it is back-facing
    (``normal . d > 0``) or when all three vertices lie behind the ray origin.
    The remaining triangles are solved for ``(beta, gamma, t)`` in
    ``e + t d = a + beta (b - a) + gamma (c - a)`` and accepted when
    ``beta >= 0``, ``gamma >= 0``, ``beta + gamma <= 1`` and ``t > 0``.
    """
    if surface.n_faces == 0:
        return best

    e = ray.position
    d = ray.direction
    a, b, c = surface.v0, surface.v1, surface.v2

    candidates = surface.normals @ d <= 0.0
    if ray.on_surface == surface.surface_id and 0 <= ray.on_element < surface.n_faces:
        candidates[ray.on_element] = False

    to_a = a - e
    in_front = (to_a @ d >= 0.0) | ((b - e) @ d >= 0.0) | ((c - e) @ d >= 0.0)
    candidates &= in_front
    if not np.any(candidates):
        return best

    indices = np.flatnonzero(candidates)
    u, solved = solve_3x3_batch(
        a[indices] - b[indices],
        a[indices] - c[indices],
        d,
        to_a[indices],
        epsilon,
    )
    beta, gamma, t = u[:, 0], u[:, 1], u[:, 2]
    accepted = solved & (beta >= 0.0) & (gamma >= 0.0) & (beta + gamma <= 1.0) & (t > 0.0)
    if not np.any(accepted):
        return best

    hits = indices[accepted]
    points = e + t[accepted, np.newaxis] * d
    movement = points - e
    dist_sq = np.einsum("ij,ij->i", movement, movement)

    # argmin returns the first minimum, keeping encounter order on ties
    nearest = int(np.argmin(dist_sq))
    if not dist_sq[nearest] < best.distance_sq:
        return best

    element = int(hits[nearest])
    return Intersection(
        hit=True,
        distance_sq=float(dist_sq[nearest]),
        position=points[nearest],
        normal=surface.normals[element].copy(),
        surface=surface.surface_id,
        element=element,
    )


def intersect_sphere(
    ray: Ray,
    sphere: AnalyticSphere,
    best: Intersection = NO_INTERSECTION,
) -> Intersection:
    """Test the ray against the analytic sphere.

    Solves ``|e + t d - centre|^2 = r^2`` and keeps the smaller root, which
    must be positive.
    """
    if sphere is None or not sphere.enabled or sphere.radius == 0.0:
        return best

    e = ray.position
    d = ray.direction
    offset = e - sphere.centre

    b = 2.0 * float(np.dot(d, offset))
    g = float(np.dot(offset, offset)) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * g
    if discriminant < 0.0:
        return best

    t = (-b - math.sqrt(discriminant)) / 2.0
    if not (t > 0.0 and t * t < best.distance_sq):
        return best

    point = e + t * d
    normal = normalise((point - sphere.centre) / sphere.radius)
    return Intersection(
        hit=True,
        distance_sq=t * t,
        position=point,
        normal=normal,
        surface=SPHERE_SURFACE,
        element=NO_ELEMENT,
    )


def aperture_index(wall: BackWall, x: float, z: float) -> int:
    """Return the 1-based index of the first aperture containing (x, z), or 0."""
    for i, aperture in enumerate(wall.apertures):
        x_disp = x - aperture.centre[0]
        z_disp = z - aperture.centre[1]
        test = (x_disp * x_disp / (0.25 * aperture.axes[0] * aperture.axes[0])
                + z_disp * z_disp / (0.25 * aperture.axes[1] * aperture.axes[1]))
        if test < 1.0:
            return i + 1
    return 0


def intersect_back_wall(
    ray: Ray,
    wall: BackWall,
    best: Intersection = NO_INTERSECTION,
) -> Intersection:
    """Test the ray against the back wall in the plane y = 0.

    The wall is only reachable when the ray travels towards the plane. The
    apertures are checked before the plate: a point inside an aperture is a
    detection, a point elsewhere within ``plate_radius`` is a plate
    scattering hit when ``plate_represent`` is set.
    """
    e = ray.position
    d = ray.direction
    if d[1] == 0.0:
        return best

    alpha = -e[1] / d[1]
    if not alpha > 0.0:
        return best
    if alpha * alpha >= best.distance_sq:
        return best

    wall_hit = e + alpha * d
    wall_hit[1] = 0.0
    # The wall normal faces the incoming ray
    normal = np.array([0.0, -math.copysign(1.0, d[1]), 0.0])

    which = aperture_index(wall, wall_hit[0], wall_hit[2])
    if which > 0:
        if DEBUG:
            print(f"[debug] Wall hit at {wall_hit} inside aperture {which}")
        return Intersection(
            hit=True,
            distance_sq=alpha * alpha,
            position=wall_hit,
            normal=normal,
            surface=PLATE_SURFACE,
            element=NO_ELEMENT,
            aperture=which,
        )

    radial_sq = wall_hit[0] * wall_hit[0] + wall_hit[2] * wall_hit[2]
    if wall.plate_represent and radial_sq <= wall.plate_radius * wall.plate_radius:
        return Intersection(
            hit=True,
            distance_sq=alpha * alpha,
            position=wall_hit,
            normal=normal,
            surface=PLATE_SURFACE,
            element=NO_ELEMENT,
        )

    return best


def find_nearest_intersection(ray: Ray, scene: SceneGeometry) -> Intersection:
    """Return the closest intersection of the ray with anything in the scene.

    Triangulated surfaces are tested in order, then the sphere, then the back
    wall. The result has ``hit == False`` when nothing is struck.
    """
    best = NO_INTERSECTION
    for surface in scene.surfaces:
        best = intersect_surface(ray, surface, best)
    best = intersect_sphere(ray, scene.sphere, best)
    best = intersect_back_wall(ray, scene.back_wall, best)
    return best
