"""
Tests for the geometry primitives and surface preparation.
"""

import numpy as np
import pytest

from shem_simulation import build_orthonormal_frame, prepare_surface, translate_surface
from shem_simulation.core.geometry import (
    get_element,
    normalise,
    solve_3x3,
    solve_3x3_batch,
    surface_bounds,
)
from shem_simulation.testing import create_flat_sample


class TestSolve:
    """Cramer's rule solves"""

    def test_matches_numpy(self):
        matrix = np.array([[2.0, 1.0, 0.5], [0.0, 3.0, 1.0], [1.0, -1.0, 4.0]])
        rhs = np.array([1.0, 2.0, 3.0])
        np.testing.assert_allclose(solve_3x3(matrix, rhs), np.linalg.solve(matrix, rhs))

    def test_singular_returns_none(self):
        matrix = np.array([[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [0.0, 1.0, 1.0]]).T
        assert solve_3x3(matrix, np.ones(3)) is None

    def test_batch_with_shared_column(self):
        rng = np.random.default_rng(3)
        col0 = rng.normal(size=(5, 3))
        col1 = rng.normal(size=(5, 3))
        col2 = np.array([0.0, -1.0, 0.0])
        rhs = rng.normal(size=(5, 3))
        u, ok = solve_3x3_batch(col0, col1, col2, rhs)
        assert ok.all()
        for i in range(5):
            matrix = np.column_stack([col0[i], col1[i], col2])
            np.testing.assert_allclose(u[i], np.linalg.solve(matrix, rhs[i]))

    def test_batch_flags_failures(self):
        col0 = np.array([[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        col1 = np.array([[0.0, 1.0, 0.0], [2.0, 0.0, 0.0]])
        u, ok = solve_3x3_batch(col0, col1, np.array([0.0, 0.0, 1.0]), np.ones((2, 3)))
        np.testing.assert_array_equal(ok, [True, False])
        np.testing.assert_array_equal(u[1], [0.0, 0.0, 0.0])


class TestFrames:
    """Vector helpers"""

    @pytest.mark.parametrize("axis", [
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
        (0.0, 0.0, -2.0),
        (1.0, 1.0, 1.0),
        (0.3, -0.7, 0.2),
    ])
    def test_orthonormal(self, axis):
        w, u, v = build_orthonormal_frame(axis)
        basis = np.stack([w, u, v])
        np.testing.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-12)
        np.testing.assert_allclose(w, normalise(axis))

    def test_zero_axis(self):
        with pytest.raises(ValueError):
            build_orthonormal_frame([0.0, 0.0, 0.0])

    def test_normalise(self):
        np.testing.assert_allclose(normalise([3.0, 0.0, 4.0]), [0.6, 0.0, 0.8])
        np.testing.assert_array_equal(normalise([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0])


class TestPrepareSurface:
    """Building surfaces from facet arrays"""

    def test_vertices_only(self):
        mesh = np.array([[(0.0, -1.0, 0.0), (0.0, -1.0, 1.0), (1.0, -1.0, 0.0)]])
        surface = prepare_surface(mesh)
        np.testing.assert_allclose(surface.normals[0], [0.0, 1.0, 0.0])

    def test_zero_normal_recomputed(self):
        mesh = create_flat_sample(height=-1.0)
        mesh[:, 0, :] = 0.0
        surface = prepare_surface(mesh)
        np.testing.assert_allclose(surface.normals, [[0.0, 1.0, 0.0]] * 2)

    def test_stored_normal_renormalised(self):
        mesh = create_flat_sample(height=-1.0)
        mesh[:, 0, :] = [0.0, 2.0, 0.0]
        surface = prepare_surface(mesh)
        np.testing.assert_allclose(np.linalg.norm(surface.normals, axis=1), 1.0)

    def test_compositions_broadcast(self):
        surface = prepare_surface(create_flat_sample(), composition=3, parameter=0.1)
        np.testing.assert_array_equal(surface.compositions, [3, 3])
        np.testing.assert_allclose(surface.parameters, [0.1, 0.1])

    def test_per_facet_compositions(self):
        surface = prepare_surface(create_flat_sample(), composition=[0, 4], parameter=[0.0, 0.5])
        np.testing.assert_array_equal(surface.compositions, [0, 4])

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            prepare_surface(np.zeros((2, 5, 3)))

    def test_surface_id(self):
        surface = prepare_surface(create_flat_sample(), surface_index=4, name="plate")
        assert surface.surface_id.index == 4
        assert surface.name == "plate"

    def test_get_element(self):
        surface = prepare_surface(create_flat_sample(height=-1.0))
        a, b, c, normal = get_element(surface, 1)
        np.testing.assert_array_equal(a, surface.v0[1])
        np.testing.assert_array_equal(c, surface.v2[1])
        np.testing.assert_allclose(normal, [0.0, 1.0, 0.0])


class TestTranslate:
    """Moving surfaces for the scan"""

    def test_translate(self):
        surface = prepare_surface(create_flat_sample(height=-1.0, size=2.0))
        moved = translate_surface(surface, [0.5, 0.0, -0.25])
        np.testing.assert_allclose(moved.v0 - surface.v0, [[0.5, 0.0, -0.25]] * 2)
        np.testing.assert_array_equal(moved.normals, surface.normals)
        assert moved.surface_id == surface.surface_id

    def test_bounds(self):
        surface = prepare_surface(create_flat_sample(height=-1.0, size=2.0))
        low, high = surface_bounds(surface)
        np.testing.assert_allclose(low, [-1.0, -1.0, -1.0])
        np.testing.assert_allclose(high, [1.0, -1.0, 1.0])
