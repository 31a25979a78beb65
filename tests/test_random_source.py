"""
Tests for the seeded random source.
"""

import numpy as np
import pytest

from shem_simulation import RandomSource


class TestRandomSource:
    """Reproducible streams"""

    def test_same_seed_same_stream(self):
        a, b = RandomSource(42), RandomSource(42)
        assert [a.uniform() for _ in range(10)] == [b.uniform() for _ in range(10)]

    def test_different_seeds(self):
        a, b = RandomSource(1), RandomSource(2)
        assert [a.uniform() for _ in range(5)] != [b.uniform() for _ in range(5)]

    def test_uniform_range(self, rng):
        values = np.array([rng.uniform() for _ in range(1000)])
        assert np.all(values >= 0.0)
        assert np.all(values < 1.0)

    def test_draw_counting(self, rng):
        rng.uniform()
        rng.gaussian_pair()
        assert rng.n_draws == 3

    def test_gaussian_moments(self):
        rng = RandomSource(7)
        values = np.array([rng.gaussian_pair(mu=1.0, sigma=2.0) for _ in range(10000)]).ravel()
        assert values.mean() == pytest.approx(1.0, abs=0.06)
        assert values.std() == pytest.approx(2.0, abs=0.06)

    def test_spawn_reproducible(self):
        first = RandomSource(5).spawn(3)
        second = RandomSource(5).spawn(3)
        assert len(first) == 3
        for a, b in zip(first, second):
            assert a.uniform() == b.uniform()

    def test_spawn_children_differ(self):
        children = RandomSource(5).spawn(3)
        values = [child.uniform() for child in children]
        assert len(set(values)) == 3

    def test_seed_sequence_accepted(self):
        seq = np.random.SeedSequence(11)
        assert RandomSource(seq).uniform() == RandomSource(np.random.SeedSequence(11)).uniform()
