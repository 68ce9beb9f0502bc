"""Random number utilities."""

import numpy as np
from typing import Optional, Union


class RandomSource:
    """
    Explicit random generator handle for thermal noise and Monte Carlo.

    Wraps a numpy ``Generator`` so that every consumer receives its
    randomness through an object it was handed, and reproducible runs only
    need a seed.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random source.

        Args:
            seed: Seed for the underlying generator (entropy from the OS if None)
        """
        self.seed = seed
        self.generator = np.random.default_rng(seed)

    def single_random(self) -> float:
        """Uniform random scalar in [0, 1)."""
        return float(self.generator.random())

    def uniform(self, n: int) -> np.ndarray:
        """Array of ``n`` uniform draws in [0, 1)."""
        return self.generator.random(n)

    def gauss_random_vec(self, n: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Fill a buffer with independent standard normal samples.

        Args:
            n: Number of samples (ignored when ``out`` is given)
            out: Optional float64 buffer of any shape or memory order,
                filled in place

        Returns:
            The filled buffer
        """
        if out is None:
            return self.generator.standard_normal(n)
        # reshape(-1) would copy a non-C-contiguous buffer, so assign by index
        out[...] = self.generator.standard_normal(out.shape)
        return out

    def random_spin_uniform(self, n: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Unit vectors uniformly distributed on the sphere.

        Args:
            n: Number of vectors
            out: Optional (N, 3) or flat (3N) float64 buffer of any memory
                order, filled in place

        Returns:
            Array of shape (n, 3), or ``out``
        """
        # Uniform azimuth and uniform cos(theta) give a uniform density on the sphere
        phi = self.generator.uniform(0, 2*np.pi, n)
        cos_theta = self.generator.uniform(-1, 1, n)
        sin_theta = np.sqrt(1 - cos_theta**2)

        vectors = np.column_stack((sin_theta * np.cos(phi),
                                   sin_theta * np.sin(phi),
                                   cos_theta))
        if out is None:
            return vectors
        out[...] = vectors.reshape(out.shape)
        return out

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"


def as_random_source(rng: Union[None, int, RandomSource]) -> RandomSource:
    """Accept a RandomSource, a seed, or None and return a RandomSource."""
    if isinstance(rng, RandomSource):
        return rng
    return RandomSource(rng)
