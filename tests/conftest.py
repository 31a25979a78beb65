"""Shared fixtures for the shem_simulation test suite."""

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from shem_simulation import Aperture, BackWall, RandomSource, prepare_surface


def _single_triangle(height=-1.0, composition=1, surface_index=0):
    mesh = np.array([[(-1.0, height, -1.0), (0.0, height, 1.0), (1.0, height, -1.0)]])
    return prepare_surface(mesh, surface_index=surface_index, composition=composition, name="triangle")


@pytest.fixture
def make_triangle():
    """Factory for one triangle in the plane y = height facing +y, covering (0, 0) in x-z."""
    return _single_triangle


@pytest.fixture
def triangle():
    return _single_triangle()


@pytest.fixture
def rng():
    return RandomSource(1234)


@pytest.fixture
def centre_wall():
    """Back wall with one 1 mm aperture at the origin."""
    return BackWall(apertures=(Aperture(centre=(0.0, 0.0), axes=(1.0, 1.0)),))


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
