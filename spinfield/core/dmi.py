"""
Dzyaloshinskii-Moriya interaction.

Both flavours use the Hamiltonian

    H = sum_<i,j> D_ij . (S_i x S_j)

which gives the site field ``H_i = sum_j D_ij x S_j``. They only differ in
how the DMI vector of a bond is obtained:

- bulk: ``D_ij = D r_ij`` with ``r_ij`` the unit bond vector,
- interfacial: ``D_ij = D (r_ij x z)``, one scalar strength combined with a
  geometry-dependent unit vector per neighbour direction.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Tuple, Union

from .lattice import (
    BULK_DMI_VECTORS, as_vectors, as_neighbours, bond_coupling,
    interfacial_dmi_vectors, output_buffer
)


@njit(parallel=True)
def _dmi_field(spins, ngbs, D, dmi_vec, field, energy):
    """Field of per-bond DMI vectors ``D[i, j] * dmi_vec[j]``."""
    n_spins = spins.shape[0]
    arity = ngbs.shape[1]

    for i in prange(n_spins):
        fx = 0.0
        fy = 0.0
        fz = 0.0

        for j_idx in range(arity):
            j = ngbs[i, j_idx]
            if j >= 0:
                d = D[i, j_idx]
                dx = dmi_vec[j_idx, 0]
                dy = dmi_vec[j_idx, 1]
                dz = dmi_vec[j_idx, 2]
                # D_ij x S_j
                fx += d * (dy * spins[j, 2] - dz * spins[j, 1])
                fy += d * (dz * spins[j, 0] - dx * spins[j, 2])
                fz += d * (dx * spins[j, 1] - dy * spins[j, 0])

        field[i, 0] = fx
        field[i, 1] = fy
        field[i, 2] = fz
        energy[i] = -0.5 * (fx * spins[i, 0] + fy * spins[i, 1] + fz * spins[i, 2])


@njit(parallel=True)
def _dmi_energy_grid(spins, D, nx, ny, nz, xperiodic, yperiodic):
    n_spins = nx * ny * nz
    nxy = nx * ny
    site_energy = np.zeros(n_spins)

    for index in prange(n_spins):
        i = index % nx
        j = (index // nx) % ny
        k = index // nxy
        Sx = spins[index, 0]
        Sy = spins[index, 1]
        Sz = spins[index, 2]
        e = 0.0

        # r_ij = +x: D (S_i x S_j)_x
        if i < nx - 1 or xperiodic:
            id = index + 1
            if i == nx - 1:
                id -= nx
            e += D * (Sy * spins[id, 2] - Sz * spins[id, 1])

        # r_ij = +y: D (S_i x S_j)_y
        if j < ny - 1 or yperiodic:
            id = index + nx
            if j == ny - 1:
                id -= nxy
            e += D * (Sz * spins[id, 0] - Sx * spins[id, 2])

        # r_ij = +z: D (S_i x S_j)_z
        if k < nz - 1:
            id = index + nxy
            e += D * (Sx * spins[id, 1] - Sy * spins[id, 0])

        site_energy[index] = e

    return site_energy


def dmi_field_bulk(
    spin: np.ndarray,
    D: Union[float, np.ndarray],
    ngbs: np.ndarray,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Bulk DMI field on a cubic neighbour table.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        D: DMI strength; scalar, per site, or per (site, direction)
        ngbs: Neighbour table in ``[-x, +x, -y, +y, -z, +z]`` order
        field: Optional output buffer shaped like ``spin``
        energy: Optional output buffer of length N

    Returns:
        (field, energy) tuple
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    arity = table.shape[1]
    if arity > BULK_DMI_VECTORS.shape[0]:
        raise ValueError(f"Bulk DMI needs a cubic table (arity <= 6), got {arity}")

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _dmi_field(spins, table, bond_coupling(D, n, arity),
               np.ascontiguousarray(BULK_DMI_VECTORS[:arity]),
               field.reshape(n, 3), energy.reshape(n))
    return field, energy


def dmi_field_interfacial_atomistic(
    spin: np.ndarray,
    D: float,
    ngbs: np.ndarray,
    dmi_vec: Optional[np.ndarray] = None,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Interfacial DMI field.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        D: Scalar DMI strength
        ngbs: Neighbour table, flat or (N, arity)
        dmi_vec: (arity, 3) unit DMI vector per neighbour direction;
            defaults to ``r_ij x z`` for the cubic table
        field: Optional output buffer shaped like ``spin``
        energy: Optional output buffer of length N

    Returns:
        (field, energy) tuple
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    arity = table.shape[1]

    if dmi_vec is None:
        dmi_vec = interfacial_dmi_vectors(arity)
    dmi_vec = np.ascontiguousarray(dmi_vec, dtype=np.float64).reshape(-1, 3)
    if dmi_vec.shape[0] != arity:
        raise ValueError(f"Need one DMI vector per neighbour direction ({arity}), "
                         f"got {dmi_vec.shape[0]}")

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _dmi_field(spins, table, bond_coupling(D, n, arity), dmi_vec,
               field.reshape(n, 3), energy.reshape(n))
    return field, energy


def dmi_energy(
    spin: np.ndarray,
    D: float,
    nx: int,
    ny: int,
    nz: int,
    xperiodic: bool = False,
    yperiodic: bool = False
) -> float:
    """
    Total bulk DMI energy of a dense grid, without a neighbour table.

    Counts each +x, +y, +z bond once as ``D r_ij . (S_i x S_j)``, with the
    same periodicity rules as ``compute_exch_energy``. Matches the sum of
    the per-site energies of ``dmi_field_bulk`` on the equivalent table.
    """
    spins = as_vectors(spin, nx * ny * nz)
    site_energy = _dmi_energy_grid(spins, float(D), nx, ny, nz,
                                   bool(xperiodic), bool(yperiodic))
    return float(np.sum(site_energy))
