"""Seedable random source shared by the probabilistic parts of an experiment."""
import logging
from typing import Optional

import numpy as np


class RandomSource:
    """
    Uniform and boolean sampler backed by a numpy PCG64 generator.

    Every probabilistic decision of an experiment (coin flips, Stern-Gerlach branches,
    detector collapse, laser beam offsets) draws from the experiment's own RandomSource,
    so a fixed seed reproduces a full run exactly.
    """
    def __init__(self, seed: Optional[int] = None):
        """Initializes the random source with an optional seed."""
        self._seed = seed
        self._draws = 0
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        if self._seed is not None:
            self._rng = np.random.default_rng(self._seed)
            self.logger.info(f"Random source initialized with seed {self._seed}.")
        else:
            self._rng = np.random.default_rng()
            self.logger.info("Random source initialized with random seed.")

    def set_seed(self, seed: int):
        """Reseed for deterministic replay."""
        if not isinstance(seed, (int, np.integer)) or isinstance(seed, bool):
            raise ValueError("Seed must be an integer.")
        self._seed = int(seed)
        self._rng = np.random.default_rng(self._seed)
        self._draws = 0
        self.logger.info(f"Random source seed set to {self._seed}.")

    def set_random_seed(self):
        """Drop the seed and continue from fresh OS entropy."""
        self._seed = None
        self._rng = np.random.default_rng()
        self.logger.info("Random source seed reset to random value.")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def next_double(self) -> float:
        """Uniform float in [0, 1)."""
        self._draws += 1
        return float(self._rng.random())

    def next_double_between(self, low: float, high: float) -> float:
        """Uniform float in [low, high)."""
        if high < low:
            raise ValueError("Upper bound must not be smaller than lower bound.")
        return low + (high - low) * self.next_double()

    def next_boolean(self, probability: float = 0.5) -> bool:
        """
        Returns True with the given probability.

        A single uniform draw u is compared as u < probability, so probability 1 is
        always True and probability 0 is always False.
        """
        if not (0 <= probability <= 1):
            raise ValueError("Probability must be between 0 and 1.")
        return self.next_double() < probability

    def get_draws(self) -> int:
        """Returns the number of uniform numbers drawn since the last (re)seed."""
        return self._draws

    def reset(self):
        """Restart the sequence: same seed gives the same numbers again."""
        self._draws = 0
        if self._seed is not None:
            self._rng = np.random.default_rng(self._seed)
            self.logger.info(f"Random source reinitialized with seed {self._seed}.")
        else:
            self._rng = np.random.default_rng()
            self.logger.info("Random source reinitialized with random seed.")
