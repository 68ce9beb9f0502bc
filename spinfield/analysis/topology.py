"""
Topological diagnostics of two-dimensional spin textures.

The skyrmion number density at site i is the finite spin chirality of two
triangles,

    q_i = [S_i . (S_{-x} x S_{-y}) + S_i . (S_{+x} x S_{+y})] / (8 pi)

The two triangles of neighbouring sites tile each unit square exactly once
with counter-clockwise orientation, so the sum of q_i over the layer is the
discrete skyrmion number (+-1 for an isolated skyrmion). Missing neighbours
contribute a zero vector, i.e. the triangle is dropped.

Unlike the older chirality code, which skipped any neighbour index <= 0
and so never used site 0, a neighbour counts as missing only when its
index is negative; pass ``zero_index_absent=True`` for the old rule.

See PRL 108, 017601 (2012) for the chirality expression and Papanicolaou &
Tomaras, Nucl. Phys. B 360, 425 (1991) for the guiding centre.
"""

import warnings
import numpy as np
from numba import njit, prange
from typing import Optional, Tuple

from ..core.lattice import as_vectors, as_neighbours, output_buffer


@njit
def _volume(s, a, b):
    """Scalar triple product s . (a x b)."""
    return (s[0] * (a[1] * b[2] - a[2] * b[1])
            + s[1] * (a[2] * b[0] - a[0] * b[2])
            + s[2] * (a[0] * b[1] - a[1] * b[0]))


@njit(parallel=True)
def _skyrmion_density(spins, ngbs, n_layer, first_valid, charge):
    for i in prange(n_layer):
        si = np.zeros(3)
        sj = np.zeros(3)

        # -x / -y triangle
        if ngbs[i, 0] >= first_valid:
            si[:] = spins[ngbs[i, 0]]
        if ngbs[i, 2] >= first_valid:
            sj[:] = spins[ngbs[i, 2]]
        q = _volume(spins[i], si, sj)

        # +x / +y triangle
        si[:] = 0.0
        sj[:] = 0.0
        if ngbs[i, 1] >= first_valid:
            si[:] = spins[ngbs[i, 1]]
        if ngbs[i, 3] >= first_valid:
            sj[:] = spins[ngbs[i, 3]]
        q += _volume(spins[i], si, sj)

        charge[i] = q / (8.0 * np.pi)


@njit(parallel=True)
def _px_py(grid, px, py):
    nz, ny, nx = grid.shape[0], grid.shape[1], grid.shape[2]

    for k in prange(nz):
        for j in range(ny):
            for i in range(nx):
                # periodic in both x and y
                im = (i - 1) % nx
                ip = (i + 1) % nx
                jm = (j - 1) % ny
                jp = (j + 1) % ny
                for c in range(3):
                    px[k, j, i, c] = 0.5 * (grid[k, j, ip, c] - grid[k, j, im, c])
                    py[k, j, i, c] = 0.5 * (grid[k, jp, i, c] - grid[k, jm, i, c])


@njit(parallel=True)
def _guiding_center_terms(layer, weights):
    ny, nx = layer.shape[0], layer.shape[1]

    for j in prange(ny):
        si = np.zeros(3)
        sj = np.zeros(3)
        for i in range(nx):
            s = layer[j, i]

            # lower triangle, no wrap at the edges
            si[:] = 0.0
            sj[:] = 0.0
            if i > 0:
                si[:] = layer[j, i - 1]
            if j > 0:
                sj[:] = layer[j - 1, i]
            charge = _volume(s, si, sj)

            # upper triangle
            si[:] = 0.0
            sj[:] = 0.0
            if i < nx - 1:
                si[:] = layer[j, i + 1]
            if j < ny - 1:
                sj[:] = layer[j + 1, i]
            charge += _volume(s, si, sj)

            weights[j, i, 0] = charge
            weights[j, i, 1] = i * charge
            weights[j, i, 2] = j * charge


def skyrmion_number(
    spin: np.ndarray,
    ngbs: np.ndarray,
    nx: int,
    ny: int,
    charge: Optional[np.ndarray] = None,
    zero_index_absent: bool = False
) -> Tuple[float, np.ndarray]:
    """
    Skyrmion number and its density on the first ``nx*ny`` sites.

    Only meaningful for a single layer in the x-y plane; pass a slice of a
    thicker sample together with its neighbour rows.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        ngbs: Neighbour table, ``[-x, +x, -y, +y, ...]`` order
        nx, ny: Layer dimensions
        charge: Optional output buffer of length ``nx*ny``
        zero_index_absent: Treat neighbour index 0 as absent as well as
            negative indices. Reproduces the older chirality code, which
            tested ``index > 0``; off by default so that site 0 is an
            ordinary neighbour like in every other kernel.

    Returns:
        (total charge, per-site density)
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    n_layer = nx * ny
    if n_layer > n:
        raise ValueError(f"Layer of {nx}x{ny} sites exceeds the {n} sites given")
    if table.shape[1] < 4:
        raise ValueError("Skyrmion number needs the -x, +x, -y, +y neighbours")

    charge = output_buffer(charge, n_layer)
    _skyrmion_density(spins, table, n_layer, 1 if zero_index_absent else 0, charge)
    return float(np.sum(charge)), charge


def compute_px_py(
    spin: np.ndarray,
    nx: int,
    ny: int,
    nz: int = 1
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Central-difference derivatives of the spin field along x and y.

    Works on the dense grid (order ``i + nx*j + nx*ny*k``) and wraps
    periodically at both edges in x and y regardless of the neighbour
    table. Derivatives are per lattice spacing.

    Returns:
        (px, py), each shaped like the flattened spin field
    """
    grid = as_vectors(spin, nx * ny * nz).reshape(nz, ny, nx, 3)
    px = np.zeros_like(grid)
    py = np.zeros_like(grid)
    _px_py(grid, px, py)
    shape = np.shape(spin)
    return px.reshape(shape), py.reshape(shape)


def compute_guiding_center(
    spin: np.ndarray,
    nx: int,
    ny: int,
    nz: int = 1
) -> np.ndarray:
    """
    Chirality-weighted centroid (Rx, Ry) of the first layer, in grid units.

        R = sum_i r_i q_i / sum_i q_i

    Triangles crossing the edge are dropped, there is no periodic wrap.
    A texture with zero total charge has no guiding centre: a
    ``RuntimeWarning`` is issued and NaN returned, so callers should
    check the charge first.

    Returns:
        Array [Rx, Ry]
    """
    layer = as_vectors(spin, nx * ny * nz)[:nx * ny].reshape(ny, nx, 3)
    weights = np.zeros((ny, nx, 3))
    _guiding_center_terms(np.ascontiguousarray(layer), weights)

    total, rx, ry = weights.reshape(-1, 3).sum(axis=0)
    if total == 0:
        warnings.warn("Total topological charge is zero; guiding centre is undefined",
                      RuntimeWarning)
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.array([rx, ry]) / total
