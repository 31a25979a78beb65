"""
Seeded random number source passed explicitly to everything that draws.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple, Union

import numpy as np


class RandomSource:
    """Wrapper around a numpy ``Generator`` with the draws the tracer needs.

    Two sources built from the same seed produce the same stream, so a ray
    traced with the same sequence of draws follows the same path.
    """

    def __init__(self, seed: Optional[Union[int, np.random.SeedSequence]] = None):
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._generator = np.random.Generator(np.random.PCG64(self._seed_seq))
        self.n_draws = 0

    def uniform(self) -> float:
        """Draw a single number uniformly distributed in [0, 1)."""
        self.n_draws += 1
        return float(self._generator.random())

    def gaussian_pair(self, mu: float = 0.0, sigma: float = 1.0) -> Tuple[float, float]:
        """Draw two independent normal deviates using exactly two uniforms.

        Box-Muller transform; ``1 - u`` keeps the logarithm finite.
        """
        u1 = 1.0 - self.uniform()
        u2 = self.uniform()
        radius = math.sqrt(-2.0 * math.log(u1))
        angle = 2.0 * math.pi * u2
        return mu + sigma * radius * math.cos(angle), mu + sigma * radius * math.sin(angle)

    def spawn(self, n_children: int) -> List["RandomSource"]:
        """Create independent child sources, e.g. one per pixel or worker."""
        return [RandomSource(child) for child in self._seed_seq.spawn(n_children)]
