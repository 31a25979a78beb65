"""
Random outgoing directions for the scattering laws.

Each sampler returns a unit vector with a non-negative component along the
surface normal. The number of uniform draws taken from the random source is
fixed per law, so a given seed always advances the stream the same way:

- specular: 0
- cosine, uniform: 2
- broad specular: 2 (one Gaussian pair)
- cosine/specular mixture: 1, plus the draws of the chosen law
"""

from __future__ import annotations

import math

import numpy as np

from .data_classes import ScatteringLaw
from .geometry import build_orthonormal_frame, normalise
from .random_source import RandomSource


def _to_world(local: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Rotate ``local`` (z along the normal) into world coordinates."""
    axis, u, v = build_orthonormal_frame(normal)
    return local[0] * u + local[1] * v + local[2] * axis


def _outward(direction: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror ``direction`` through the tangent plane if it points inwards."""
    along = float(np.dot(direction, normal))
    if along < 0.0:
        direction = direction - 2.0 * along * normal
    return normalise(direction)


def specular_direction(incoming: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror reflection of ``incoming`` about ``normal``."""
    reflected = incoming - 2.0 * float(np.dot(incoming, normal)) * normal
    return _outward(reflected, normal)


def cosine_direction(normal: np.ndarray, rng: RandomSource) -> np.ndarray:
    """Cosine-weighted direction in the hemisphere about ``normal``."""
    sin_theta = math.sqrt(rng.uniform())
    phi = 2.0 * math.pi * rng.uniform()
    cos_theta = math.sqrt(max(0.0, 1.0 - sin_theta * sin_theta))
    local = np.array([sin_theta * math.cos(phi), sin_theta * math.sin(phi), cos_theta])
    return normalise(_to_world(local, normal))


def uniform_direction(normal: np.ndarray, rng: RandomSource) -> np.ndarray:
    """Direction uniformly distributed over the hemisphere about ``normal``."""
    cos_theta = rng.uniform()
    phi = 2.0 * math.pi * rng.uniform()
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    local = np.array([sin_theta * math.cos(phi), sin_theta * math.sin(phi), cos_theta])
    return normalise(_to_world(local, normal))


def broad_specular_direction(
    incoming: np.ndarray,
    normal: np.ndarray,
    sigma: float,
    rng: RandomSource,
) -> np.ndarray:
    """Gaussian lobe of angular width ``sigma`` (radians) about the specular direction.

    The two transverse deflections come from one Gaussian pair. Samples that
    end up below the surface are mirrored back out.
    """
    g1, g2 = rng.gaussian_pair()
    specular = specular_direction(incoming, normal)
    _, u, v = build_orthonormal_frame(specular)

    tilt = sigma * math.hypot(g1, g2)
    if tilt == 0.0:
        return specular
    phi = math.atan2(g2, g1)
    deflected = (math.cos(tilt) * specular
                 + math.sin(tilt) * (math.cos(phi) * u + math.sin(phi) * v))
    return _outward(deflected, normal)


def scatter_direction(
    incoming: np.ndarray,
    normal: np.ndarray,
    composition: int,
    parameter: float,
    rng: RandomSource,
) -> np.ndarray:
    """Sample the outgoing direction for the law ``composition``.

    Parameters
    ----------
    incoming : np.ndarray
        Unit direction of the incident ray.
    normal : np.ndarray
        Outward unit normal at the point of incidence.
    composition : int
        :class:`ScatteringLaw` index of the struck element.
    parameter : float
        Law parameter (width for broad specular, cosine fraction for the
        mixture, ignored otherwise).
    rng : RandomSource
        Random source to draw from.
    """
    law = ScatteringLaw(int(composition))

    if law is ScatteringLaw.SPECULAR:
        return specular_direction(incoming, normal)
    if law is ScatteringLaw.COSINE:
        return cosine_direction(normal, rng)
    if law is ScatteringLaw.UNIFORM:
        return uniform_direction(normal, rng)
    if law is ScatteringLaw.BROAD_SPECULAR:
        return broad_specular_direction(incoming, normal, parameter, rng)

    # COSINE_SPECULAR
    if rng.uniform() < parameter:
        return cosine_direction(normal, rng)
    return specular_direction(incoming, normal)
