"""
Nearest-neighbour exchange field and energy.

The Hamiltonian is

    H = - sum_<i,j> J_ij S_i . S_j

with every pair counted once, which gives the site field

    H_i = sum_j J_ij S_j

Per-site energies carry a factor 1/2 so that summing them over all sites
counts each bond once.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Tuple

from .lattice import as_vectors, as_neighbours, bond_coupling, output_buffer


@njit(parallel=True)
def _exchange_field_uniform(spins, ngbs, Jx, Jy, Jz, field, energy):
    n_spins = spins.shape[0]
    arity = ngbs.shape[1]

    for i in prange(n_spins):
        fx = 0.0
        fy = 0.0
        fz = 0.0

        for j_idx in range(arity):
            j = ngbs[i, j_idx]
            if j >= 0:
                fx += Jx * spins[j, 0]
                fy += Jy * spins[j, 1]
                fz += Jz * spins[j, 2]

        field[i, 0] = fx
        field[i, 1] = fy
        field[i, 2] = fz
        energy[i] = -0.5 * (fx * spins[i, 0] + fy * spins[i, 1] + fz * spins[i, 2])


@njit(parallel=True)
def _exchange_field_spatial(spins, ngbs, J, field, energy):
    n_spins = spins.shape[0]
    arity = ngbs.shape[1]

    for i in prange(n_spins):
        fx = 0.0
        fy = 0.0
        fz = 0.0

        for j_idx in range(arity):
            j = ngbs[i, j_idx]
            if j >= 0:
                # J is index-aligned with the neighbour table
                fx += J[i, j_idx] * spins[j, 0]
                fy += J[i, j_idx] * spins[j, 1]
                fz += J[i, j_idx] * spins[j, 2]

        field[i, 0] = fx
        field[i, 1] = fy
        field[i, 2] = fz
        energy[i] = -0.5 * (fx * spins[i, 0] + fy * spins[i, 1] + fz * spins[i, 2])


@njit(parallel=True)
def _exchange_energy_grid(spins, Jx, Jy, Jz, nx, ny, nz, xperiodic, yperiodic):
    n_spins = nx * ny * nz
    nxy = nx * ny
    site_energy = np.zeros(n_spins)

    for index in prange(n_spins):
        i = index % nx
        j = (index // nx) % ny
        k = index // nxy
        e = 0.0

        if i < nx - 1 or xperiodic:
            id = index + 1
            if i == nx - 1:
                id -= nx
            e += Jx * spins[index, 0] * spins[id, 0]
            e += Jy * spins[index, 1] * spins[id, 1]
            e += Jz * spins[index, 2] * spins[id, 2]

        if j < ny - 1 or yperiodic:
            id = index + nx
            if j == ny - 1:
                id -= nxy
            e += Jx * spins[index, 0] * spins[id, 0]
            e += Jy * spins[index, 1] * spins[id, 1]
            e += Jz * spins[index, 2] * spins[id, 2]

        # z is never periodic here
        if k < nz - 1:
            id = index + nxy
            e += Jx * spins[index, 0] * spins[id, 0]
            e += Jy * spins[index, 1] * spins[id, 1]
            e += Jz * spins[index, 2] * spins[id, 2]

        site_energy[index] = e

    return site_energy


def compute_exch_field(
    spin: np.ndarray,
    ngbs: np.ndarray,
    Jx: float,
    Jy: Optional[float] = None,
    Jz: Optional[float] = None,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Exchange field with one coupling constant per Cartesian component.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        ngbs: Neighbour table, flat or (N, arity)
        Jx, Jy, Jz: Couplings applied to the x, y, z spin components
            (Jy and Jz default to Jx)
        field: Optional output buffer shaped like ``spin``
        energy: Optional output buffer of length N

    Returns:
        (field, energy) tuple
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    Jy = Jx if Jy is None else Jy
    Jz = Jx if Jz is None else Jz

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _exchange_field_uniform(spins, table, float(Jx), float(Jy), float(Jz),
                            field.reshape(n, 3), energy.reshape(n))
    return field, energy


def compute_exch_field_spatial(
    spin: np.ndarray,
    ngbs: np.ndarray,
    J: np.ndarray,
    field: Optional[np.ndarray] = None,
    energy: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Exchange field with a coupling per (site, neighbour direction).

    ``J`` has the shape of the neighbour table (a scalar or per-site array
    is expanded to it). The coupling of a bond is read from the site being
    evaluated, so asymmetric tables give asymmetric fields.
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    couplings = bond_coupling(J, n, table.shape[1])

    field = output_buffer(field, 3 * n, like=spin)
    energy = output_buffer(energy, n)
    _exchange_field_spatial(spins, table, couplings, field.reshape(n, 3), energy.reshape(n))
    return field, energy


def compute_exch_energy(
    spin: np.ndarray,
    Jx: float,
    Jy: float,
    Jz: float,
    nx: int,
    ny: int,
    nz: int,
    xperiodic: bool = False,
    yperiodic: bool = False
) -> float:
    """
    Total exchange energy of a dense grid, without a neighbour table.

    Walks the +x, +y and +z bond of every site, wrapping in x and y only
    when the corresponding flag is set and never in z. Each bond is counted
    once:

        E = - sum_bonds (Jx Sx_i Sx_j + Jy Sy_i Sy_j + Jz Sz_i Sz_j)

    Args:
        spin: Spin field in grid order ``i + nx*j + nx*ny*k``
        Jx, Jy, Jz: Component couplings
        nx, ny, nz: Grid dimensions
        xperiodic, yperiodic: Periodicity flags

    Returns:
        Total energy
    """
    spins = as_vectors(spin, nx * ny * nz)
    site_energy = _exchange_energy_grid(spins, float(Jx), float(Jy), float(Jz),
                                        nx, ny, nz, bool(xperiodic), bool(yperiodic))
    return -float(np.sum(site_energy))
