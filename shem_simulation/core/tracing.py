"""
Per-ray state machine: repeatedly find the nearest intersection and scatter
until the ray is detected, killed or escapes.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .constants import DEBUG
from .data_classes import (
    Intersection,
    Ray,
    RayState,
    SceneGeometry,
    SurfaceKind,
    TraceCounters,
    TraceResult,
)
from .intersection import find_nearest_intersection
from .random_source import RandomSource
from .scattering import scatter_direction


def _surface_law(scene: SceneGeometry, hit: Intersection) -> Tuple[int, float]:
    """Return the (composition, parameter) of the element that was struck."""
    kind = hit.surface.kind
    if kind is SurfaceKind.MESH:
        for surface in scene.surfaces:
            if surface.surface_id == hit.surface:
                return int(surface.compositions[hit.element]), float(surface.parameters[hit.element])
        raise ValueError(f"Intersection refers to unknown surface {hit.surface}")
    if kind is SurfaceKind.SPHERE:
        return scene.sphere.composition, scene.sphere.parameter
    if kind is SurfaceKind.PLATE:
        return scene.back_wall.composition, scene.back_wall.parameter
    raise ValueError("Cannot scatter off a ray that hit nothing")


def trace_step(
    ray: Ray,
    scene: SceneGeometry,
    max_scatters: int,
    rng: RandomSource,
) -> Tuple[RayState, Intersection]:
    """Advance an in-flight ray by one intersection.

    Returns the new state and the intersection that caused it. The ray is
    updated in place.
    """
    hit = find_nearest_intersection(ray, scene)

    if not hit.hit:
        return RayState.ESCAPED, hit

    ray.position = hit.position.copy()
    if hit.detected:
        return RayState.DETECTED, hit

    # Killed rays stay at the point of the scattering event they were denied
    if ray.n_scatters + 1 > max_scatters:
        return RayState.KILLED, hit

    composition, parameter = _surface_law(scene, hit)
    ray.direction = scatter_direction(ray.direction, hit.normal, composition, parameter, rng)
    ray.on_surface = hit.surface
    ray.on_element = hit.element
    ray.n_scatters += 1

    if DEBUG:
        print(f"[debug] Scatter {ray.n_scatters} off {hit.surface} element {hit.element} "
              f"at {hit.position}, new direction {ray.direction}")
    return RayState.IN_FLIGHT, hit


def trace_ray(
    ray: Ray,
    scene: SceneGeometry,
    max_scatters: int,
    rng: RandomSource,
    counters: Optional[TraceCounters] = None,
    record_path: bool = False,
) -> TraceResult:
    """Trace a ray until it reaches a terminal state.

    Parameters
    ----------
    ray : Ray
        Ray in flight, modified in place.
    scene : SceneGeometry
        Surfaces, optional sphere and back wall.
    max_scatters : int
        Maximum number of scattering events before the ray is killed.
    rng : RandomSource
        Random source for the scattering draws.
    counters : TraceCounters, optional
        Running totals updated with the outcome.
    record_path : bool
        Whether to keep every visited position.

    Returns
    -------
    TraceResult
        Terminal state, final position and direction, scatter count and the
        aperture entered (1-based, 0 if not detected).
    """
    if max_scatters < 0:
        raise ValueError(f"max_scatters must be non-negative, got {max_scatters}")

    path = [ray.position.copy()] if record_path else None
    state = RayState.IN_FLIGHT
    hit = None

    # Terminates: every IN_FLIGHT step increments n_scatters, bounded by max_scatters
    while state is RayState.IN_FLIGHT:
        state, hit = trace_step(ray, scene, max_scatters, rng)
        if record_path and hit.hit:
            path.append(ray.position.copy())

    aperture = hit.aperture if state is RayState.DETECTED else 0

    if counters is not None:
        if state is RayState.DETECTED:
            counters.detected += 1
            counters.per_aperture[aperture - 1] += 1
        elif state is RayState.KILLED:
            counters.killed += 1
        else:
            counters.escaped += 1

    return TraceResult(
        state=state,
        position=ray.position.copy(),
        direction=ray.direction.copy(),
        n_scatters=ray.n_scatters,
        aperture=aperture,
        path=path,
    )
