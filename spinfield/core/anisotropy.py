"""
Uniaxial single-ion anisotropy.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Tuple, Union

from .lattice import as_vectors, site_array, site_vectors, output_buffer


@njit(parallel=True)
def _anisotropy_field(spins, Ku, axis, field, energy):
    n_spins = spins.shape[0]

    for i in prange(n_spins):
        m_u = spins[i, 0] * axis[i, 0] + spins[i, 1] * axis[i, 1] + spins[i, 2] * axis[i, 2]

        field[i, 0] = 2.0 * Ku[i] * m_u * axis[i, 0]
        field[i, 1] = 2.0 * Ku[i] * m_u * axis[i, 1]
        field[i, 2] = 2.0 * Ku[i] * m_u * axis[i, 2]
        energy[i] = -Ku[i] * m_u * m_u


def compute_anis(
    spin: np.ndarray,
    Ku: Union[float, np.ndarray],
    axis: np.ndarray,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Uniaxial anisotropy field ``2 Ku (S.u) u`` and energy ``-Ku (S.u)^2``.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        Ku: Anisotropy constant, scalar or one per site
        axis: Unit easy axis, a single 3-vector or one per site
        field: Optional output buffer shaped like ``spin``
        energy: Optional output buffer of length N

    Returns:
        (field, energy) tuple
    """
    spins = as_vectors(spin)
    n = spins.shape[0]

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _anisotropy_field(spins, site_array(Ku, n), site_vectors(axis, n),
                      field.reshape(n, 3), energy.reshape(n))
    return field, energy
