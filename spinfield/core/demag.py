"""
Dense dipolar (demagnetising) field.

Every site interacts with every other site, so the cost is O(N^2). This
kernel is kept separate from the neighbour-local ones so that a Fourier
accelerated version can replace it without touching their signatures.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Tuple, Union

from .lattice import as_vectors, site_array, output_buffer
from ..utils.constants import PHYSICAL_CONSTANTS


@njit(parallel=True, error_model="numpy")
def _demag_full(spins, coords, mu_s, mu_s_scale, field, energy):
    n_spins = spins.shape[0]

    for i in prange(n_spins):
        fx = 0.0
        fy = 0.0
        fz = 0.0

        for j in range(n_spins):
            if j == i:
                continue

            rx = coords[i, 0] - coords[j, 0]
            ry = coords[i, 1] - coords[j, 1]
            rz = coords[i, 2] - coords[j, 2]
            r = np.sqrt(rx * rx + ry * ry + rz * rz)
            rx /= r
            ry /= r
            rz /= r
            r3 = r * r * r

            m_dot_r = spins[j, 0] * rx + spins[j, 1] * ry + spins[j, 2] * rz
            c = mu_s_scale[j] / r3
            fx += c * (3.0 * rx * m_dot_r - spins[j, 0])
            fy += c * (3.0 * ry * m_dot_r - spins[j, 1])
            fz += c * (3.0 * rz * m_dot_r - spins[j, 2])

        field[i, 0] = fx
        field[i, 1] = fy
        field[i, 2] = fz
        energy[i] = -0.5 * mu_s[i] * (fx * spins[i, 0] + fy * spins[i, 1] + fz * spins[i, 2])


def demag_full(
    spin: np.ndarray,
    coords: np.ndarray,
    mu_s: Union[float, np.ndarray],
    mu_s_scale: Optional[Union[float, np.ndarray]] = None,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Dipolar field by direct summation over all pairs.

        H_i = sum_{j != i} c_j (3 r_ij (S_j . r_ij) - S_j) / |r_ij|^3

    with ``r_ij`` the unit separation and ``c_j = mu_0 mu_s_j / 4 pi``.
    Per-site energy is ``-1/2 mu_s_i H_i . S_i``. Coincident sites give
    infinities rather than an error.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        coords: Site positions (N, 3), in metres
        mu_s: Magnetic moment per site (scalar or length N)
        mu_s_scale: Source strength ``c_j``; derived from ``mu_s`` if None
        field: Optional output buffer shaped like ``spin``
        energy: Optional output buffer of length N

    Returns:
        (field, energy) tuple
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    positions = as_vectors(coords, n)
    moments = site_array(mu_s, n)
    if mu_s_scale is None:
        scale = moments * PHYSICAL_CONSTANTS['mu_0'] / (4 * np.pi)
    else:
        scale = site_array(mu_s_scale, n)

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _demag_full(spins, positions, moments, scale, field.reshape(n, 3), energy.reshape(n))
    return field, energy
