"""Random number generation utilities for exploration and layout generation."""

import random
from typing import Optional


class SeededRNG:
    """Seeded random number generator for reproducible results.

    Each instance owns its own generator, so agents and factories can be
    given independent, reproducible streams.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return self._random.random()

    def randrange(self, stop: int) -> int:
        """Generate random integer in [0, stop)."""
        return self._random.randrange(stop)

    def choice(self, seq):
        """Choose random element from sequence."""
        return self._random.choice(seq)

    def sample(self, population, k: int):
        """Sample k elements from population without replacement."""
        return self._random.sample(population, k)


# Default RNG instance
default_rng = SeededRNG()
