"""
Tests for the scattering-law samplers.
"""

import numpy as np
import pytest

from shem_simulation import RandomSource, ScatteringLaw, scatter_direction
from shem_simulation.core.constants import UNIT_TOLERANCE
from shem_simulation.core.geometry import normalise
from shem_simulation.core.scattering import (
    broad_specular_direction,
    cosine_direction,
    specular_direction,
    uniform_direction,
)

NORMALS = [
    np.array([0.0, 1.0, 0.0]),
    np.array([0.0, -1.0, 0.0]),
    np.array([0.0, 0.0, 1.0]),
    normalise(np.array([1.0, 1.0, 1.0])),
    normalise(np.array([0.3, 0.8, -0.5])),
]


def incoming_for(normal):
    """A direction arriving at the surface obliquely."""
    tangent = normalise(np.cross(normal, [0.3, 0.5, 0.7]))
    return normalise(tangent - normal)


class TestSpecular:
    """Mirror reflection"""

    def test_45_degrees(self):
        incoming = normalise([1.0, -1.0, 0.0])
        out = specular_direction(incoming, np.array([0.0, 1.0, 0.0]))
        np.testing.assert_allclose(out, normalise([1.0, 1.0, 0.0]))

    def test_normal_incidence(self):
        out = specular_direction(np.array([0.0, -1.0, 0.0]), np.array([0.0, 1.0, 0.0]))
        np.testing.assert_allclose(out, [0.0, 1.0, 0.0])

    def test_no_draws(self, rng):
        scatter_direction(normalise([1.0, -1.0, 0.0]), np.array([0.0, 1.0, 0.0]), 0, 0.0, rng)
        assert rng.n_draws == 0


class TestAllLaws:
    """Properties shared by every law"""

    @pytest.mark.parametrize("law, parameter", [
        (ScatteringLaw.SPECULAR, 0.0),
        (ScatteringLaw.COSINE, 0.0),
        (ScatteringLaw.UNIFORM, 0.0),
        (ScatteringLaw.BROAD_SPECULAR, 0.3),
        (ScatteringLaw.BROAD_SPECULAR, 3.0),
        (ScatteringLaw.COSINE_SPECULAR, 0.5),
    ])
    def test_unit_and_outward(self, law, parameter):
        rng = RandomSource(99)
        for normal in NORMALS:
            incoming = incoming_for(normal)
            for _ in range(200):
                out = scatter_direction(incoming, normal, law, parameter, rng)
                assert np.linalg.norm(out) == pytest.approx(1.0, abs=UNIT_TOLERANCE)
                assert np.dot(out, normal) >= -1e-12

    @pytest.mark.parametrize("law, parameter, draws", [
        (ScatteringLaw.SPECULAR, 0.0, 0),
        (ScatteringLaw.COSINE, 0.0, 2),
        (ScatteringLaw.UNIFORM, 0.0, 2),
        (ScatteringLaw.BROAD_SPECULAR, 0.1, 2),
        (ScatteringLaw.BROAD_SPECULAR, 0.0, 2),
        (ScatteringLaw.COSINE_SPECULAR, 1.0, 3),
        (ScatteringLaw.COSINE_SPECULAR, 0.0, 1),
    ])
    def test_draw_counts(self, law, parameter, draws):
        rng = RandomSource(5)
        normal = np.array([0.0, 1.0, 0.0])
        scatter_direction(incoming_for(normal), normal, law, parameter, rng)
        assert rng.n_draws == draws

    def test_unknown_law(self, rng):
        with pytest.raises(ValueError):
            scatter_direction(np.array([0.0, -1.0, 0.0]), np.array([0.0, 1.0, 0.0]), 7, 0.0, rng)

    def test_same_seed_same_direction(self):
        normal = NORMALS[3]
        first = scatter_direction(incoming_for(normal), normal, 1, 0.0, RandomSource(8))
        second = scatter_direction(incoming_for(normal), normal, 1, 0.0, RandomSource(8))
        np.testing.assert_array_equal(first, second)


class TestDistributions:
    """Statistics of the diffuse laws"""

    def test_cosine_mean(self):
        rng = RandomSource(2024)
        normal = np.array([0.0, 1.0, 0.0])
        cosines = [cosine_direction(normal, rng)[1] for _ in range(20000)]
        assert np.mean(cosines) == pytest.approx(2.0 / 3.0, abs=0.01)

    def test_uniform_mean(self):
        rng = RandomSource(2024)
        normal = np.array([0.0, 0.0, 1.0])
        cosines = [uniform_direction(normal, rng)[2] for _ in range(20000)]
        assert np.mean(cosines) == pytest.approx(0.5, abs=0.01)

    def test_broad_specular_zero_width_is_specular(self, rng):
        incoming = normalise([1.0, -1.0, 0.0])
        normal = np.array([0.0, 1.0, 0.0])
        out = broad_specular_direction(incoming, normal, 0.0, rng)
        np.testing.assert_allclose(out, specular_direction(incoming, normal))

    def test_broad_specular_centred_on_specular(self):
        rng = RandomSource(17)
        incoming = np.array([0.0, -1.0, 0.0])
        normal = np.array([0.0, 1.0, 0.0])
        samples = np.array([broad_specular_direction(incoming, normal, 0.05, rng) for _ in range(2000)])
        angles = np.arccos(np.clip(samples[:, 1], -1.0, 1.0))
        assert np.all(angles < 0.05 * 6)
        np.testing.assert_allclose(samples.mean(axis=0), [0.0, 1.0, 0.0], atol=0.01)

    def test_mixture_fraction(self):
        rng = RandomSource(31)
        incoming = normalise([1.0, -1.0, 0.0])
        normal = np.array([0.0, 1.0, 0.0])
        specular = specular_direction(incoming, normal)
        n_specular = 0
        for _ in range(4000):
            out = scatter_direction(incoming, normal, ScatteringLaw.COSINE_SPECULAR, 0.25, rng)
            n_specular += np.allclose(out, specular)
        assert n_specular / 4000 == pytest.approx(0.75, abs=0.03)
