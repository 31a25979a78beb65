"""
Random sampling utilities for generating rays from the beam source.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from .constants import NO_ELEMENT
from .data_classes import NO_SURFACE, Ray
from .geometry import build_orthonormal_frame, normalise
from .random_source import RandomSource


class SourceModel(Enum):
    """Angular distribution of the rays leaving the source pinhole."""

    UNIFORM = "uniform"
    GAUSSIAN = "gaussian"


@dataclass(frozen=True)
class BeamSource:
    """Source pinhole producing the incident beam.

    Attributes
    ----------
    position : np.ndarray
        Centre of the source pinhole (mm).
    direction : np.ndarray
        Central beam direction.
    pinhole_radius : float
        Radius of the pinhole disc, perpendicular to the beam (mm). Zero
        gives a point source.
    model : SourceModel
        Angular distribution model.
    theta_max_deg : float
        Half angle of the cone for the uniform model (degrees).
    sigma_deg : float
        Standard deviation of the angular spread for the Gaussian model
        (degrees).
    """

    position: np.ndarray
    direction: np.ndarray
    pinhole_radius: float = 0.0
    model: SourceModel = SourceModel.UNIFORM
    theta_max_deg: float = 0.0
    sigma_deg: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "position", np.asarray(self.position, dtype=float))
        direction = np.asarray(self.direction, dtype=float)
        if direction.shape != (3,) or np.linalg.norm(direction) == 0.0:
            raise ValueError("Beam direction must be a non-zero 3-vector")
        object.__setattr__(self, "direction", normalise(direction))
        if self.pinhole_radius < 0.0:
            raise ValueError(f"Pinhole radius must be non-negative, got {self.pinhole_radius}")
        if not 0.0 <= self.theta_max_deg < 90.0:
            raise ValueError(f"Cone half angle must lie in [0, 90), got {self.theta_max_deg}")
        if self.sigma_deg < 0.0:
            raise ValueError(f"Angular spread must be non-negative, got {self.sigma_deg}")


def create_ray(position: np.ndarray, direction: np.ndarray) -> Ray:
    """Create a ray in flight at ``position`` travelling along ``direction``."""
    position = np.array(position, dtype=float)
    direction = np.array(direction, dtype=float)
    if position.shape != (3,) or direction.shape != (3,):
        raise ValueError("Ray position and direction must be 3-vectors")
    norm = np.linalg.norm(direction)
    if norm == 0.0:
        raise ValueError("Ray direction must be non-zero")
    return Ray(
        position=position,
        direction=direction / norm,
        on_surface=NO_SURFACE,
        on_element=NO_ELEMENT,
        n_scatters=0,
    )


def sample_point_in_disc(radius: float, rng: RandomSource) -> Tuple[float, float]:
    """Sample a point uniformly over a disc of the given radius."""
    r = radius * math.sqrt(rng.uniform())
    phi = 2.0 * math.pi * rng.uniform()
    return r * math.cos(phi), r * math.sin(phi)


def sample_direction_in_cone(
    axis: np.ndarray,
    half_angle_deg: float,
    rng: RandomSource,
) -> np.ndarray:
    """Sample a unit vector within a cone of half-angle ``half_angle_deg``."""
    axis, u, v = build_orthonormal_frame(axis)
    half_angle_rad = math.radians(half_angle_deg)
    cos_min = math.cos(half_angle_rad)
    cos_theta = (1.0 - cos_min) * rng.uniform() + cos_min
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    phi = 2.0 * math.pi * rng.uniform()
    local_dir = np.array(
        [
            sin_theta * math.cos(phi),
            sin_theta * math.sin(phi),
            cos_theta,
        ],
        dtype=float,
    )

    return normalise(local_dir[0] * u + local_dir[1] * v + local_dir[2] * axis)


def sample_direction_gaussian(
    axis: np.ndarray,
    sigma_deg: float,
    rng: RandomSource,
) -> np.ndarray:
    """Sample a direction deflected from ``axis`` by Gaussian angles."""
    axis, u, v = build_orthonormal_frame(axis)
    g1, g2 = rng.gaussian_pair(sigma=math.radians(sigma_deg))
    tilt = math.hypot(g1, g2)
    if tilt == 0.0:
        return axis
    phi = math.atan2(g2, g1)
    return normalise(math.cos(tilt) * axis + math.sin(tilt) * (math.cos(phi) * u + math.sin(phi) * v))


def create_ray_source(source: BeamSource, rng: RandomSource) -> Ray:
    """Generate a ray leaving the source pinhole.

    The start point is uniform over the pinhole disc (two draws) and the
    direction follows the source model (two draws).
    """
    _, u, v = build_orthonormal_frame(source.direction)
    du, dv = sample_point_in_disc(source.pinhole_radius, rng)
    position = source.position + du * u + dv * v

    if source.model is SourceModel.UNIFORM:
        direction = sample_direction_in_cone(source.direction, source.theta_max_deg, rng)
    else:
        direction = sample_direction_gaussian(source.direction, source.sigma_deg, rng)

    return create_ray(position, direction)
