"""Shared fixtures for the kernel tests."""

import numpy as np
import pytest

from spinfield.core.lattice import cubic_neighbours
from spinfield.utils.random import RandomSource


@pytest.fixture
def rng():
    """Seeded random source."""
    return RandomSource(1234)


@pytest.fixture
def random_spins(rng):
    """Factory for random unit spin fields of shape (n, 3)."""
    def make(n):
        return rng.random_spin_uniform(n)
    return make


@pytest.fixture
def periodic_grid():
    """5 x 4 x 3 grid, periodic in x and y."""
    nx, ny, nz = 5, 4, 3
    return nx, ny, nz, cubic_neighbours(nx, ny, nz, pbc="xy")


@pytest.fixture
def open_grid():
    """5 x 4 x 3 grid with free boundaries."""
    nx, ny, nz = 5, 4, 3
    return nx, ny, nz, cubic_neighbours(nx, ny, nz)


def skyrmion_texture(nx, ny, cx, cy, radius, width, winding=1):
    """
    Neel skyrmion (core down, background up) centred at (cx, cy).

    Returns spins of shape (nx*ny, 3) in grid order.
    """
    j, i = np.meshgrid(np.arange(ny), np.arange(nx), indexing="ij")
    x = i.ravel() - cx
    y = j.ravel() - cy
    r = np.sqrt(x**2 + y**2)
    theta = 2 * np.arctan(np.exp(-(r - radius) / width))
    phi = winding * np.arctan2(y, x)
    return np.column_stack((np.sin(theta) * np.cos(phi),
                            np.sin(theta) * np.sin(phi),
                            np.cos(theta)))


@pytest.fixture
def skyrmion():
    """Factory for Neel skyrmion textures, see ``skyrmion_texture``."""
    return skyrmion_texture
