"""
Single-site Metropolis sweep for classical Heisenberg spins.

The local energy of site i with spin S is

    E_i(S) = -S . (J sum_j S_j + D sum_j r_ij x S_j + h_i)

covering isotropic exchange, bulk DMI on the cubic table and a Zeeman
term. Trial spins are drawn uniformly on the sphere.

Sites are updated one after another because each accepted trial changes
the environment of its neighbours; concurrent sweeps over neighbouring
sites would need a checkerboard split.
"""

import numpy as np
from numba import njit
from typing import Optional, Union

from ..core.lattice import BULK_DMI_VECTORS, as_vectors, as_neighbours, site_vectors
from ..utils.constants import PHYSICAL_CONSTANTS
from ..utils.random import RandomSource, as_random_source


@njit
def _local_field(spins, ngbs, i, J, D, dmi_vec, h):
    """Field felt by site i from its neighbours plus the external field."""
    fx = h[i, 0]
    fy = h[i, 1]
    fz = h[i, 2]
    for j_idx in range(ngbs.shape[1]):
        j = ngbs[i, j_idx]
        if j >= 0:
            sx = spins[j, 0]
            sy = spins[j, 1]
            sz = spins[j, 2]
            fx += J * sx + D * (dmi_vec[j_idx, 1] * sz - dmi_vec[j_idx, 2] * sy)
            fy += J * sy + D * (dmi_vec[j_idx, 2] * sx - dmi_vec[j_idx, 0] * sz)
            fz += J * sz + D * (dmi_vec[j_idx, 0] * sy - dmi_vec[j_idx, 1] * sx)
    return fx, fy, fz


@njit
def _metropolis_sweep(spins, new_spins, ngbs, J, D, dmi_vec, h, thermal_energy, draws):
    n_spins = spins.shape[0]
    n_accepted = 0

    for i in range(n_spins):
        fx, fy, fz = _local_field(spins, ngbs, i, J, D, dmi_vec, h)

        delta = -((new_spins[i, 0] - spins[i, 0]) * fx
                  + (new_spins[i, 1] - spins[i, 1]) * fy
                  + (new_spins[i, 2] - spins[i, 2]) * fz)

        if delta <= 0:
            accept = True
        elif thermal_energy <= 0:
            accept = False
        else:
            accept = np.exp(-delta / thermal_energy) > draws[i]

        if accept:
            spins[i, 0] = new_spins[i, 0]
            spins[i, 1] = new_spins[i, 1]
            spins[i, 2] = new_spins[i, 2]
            n_accepted += 1

    return n_accepted


def run_step_mc(
    spin: np.ndarray,
    ngbs: np.ndarray,
    J: float,
    D: float,
    h: np.ndarray,
    T: float,
    rng: Union[None, int, RandomSource] = None,
    kb: float = PHYSICAL_CONSTANTS['kB_SI'],
    new_spin: Optional[np.ndarray] = None
) -> int:
    """
    One Metropolis sweep over all sites, updating ``spin`` in place.

    Each site gets one trial: a uniformly random unit spin, accepted if
    it lowers the energy and otherwise with probability
    ``exp(-dE / (kb T))``. At ``T <= 0`` only non-increasing moves are
    accepted.

    Args:
        spin: Spin field, C-contiguous float64, flat (3N) or (N, 3)
        ngbs: Neighbour table in ``[-x, +x, -y, +y, -z, +z]`` order
        J: Exchange constant (same units as ``kb * T``)
        D: Bulk DMI constant
        h: Zeeman field in energy units, one vector or one per site
        T: Temperature
        rng: RandomSource, seed, or None
        kb: Boltzmann constant
        new_spin: Optional scratch buffer for the trial spins

    Returns:
        Number of accepted trials
    """
    if spin.dtype != np.float64 or not spin.flags.c_contiguous:
        raise ValueError("Monte Carlo updates spin in place: pass a C-contiguous float64 array")
    spins = spin.reshape(-1, 3)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    if table.shape[1] > BULK_DMI_VECTORS.shape[0]:
        raise ValueError(f"Monte Carlo step needs a cubic table, got arity {table.shape[1]}")

    rng = as_random_source(rng)
    if new_spin is None:
        new_spin = np.empty((n, 3))
    trial = as_vectors(rng.random_spin_uniform(n, out=new_spin), n)
    draws = rng.uniform(n)

    return int(_metropolis_sweep(
        spins, trial, table, float(J), float(D),
        np.ascontiguousarray(BULK_DMI_VECTORS[:table.shape[1]]),
        site_vectors(h, n), float(kb * T), draws
    ))
