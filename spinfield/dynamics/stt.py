"""
Spin-transfer-torque extensions of the LLG equation.

Two current geometries are supported:

- current in plane (Zhang-Li): the torque is built from the spatial
  derivative ``g = (j . grad) S`` computed by ``compute_stt_field``,
- current perpendicular to plane (Slonczewski): the torque is built from a
  fixed polarisation direction ``p``.

Both share the structure

    T = k/(1+alpha^2) [(1 + alpha beta) S x (S x v) + (beta - alpha) S x v]

and are added on top of the standard precession and damping terms.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Tuple, Union

from ..core.lattice import (
    as_vectors, as_neighbours, site_array, site_vectors, pin_mask, output_buffer
)
from ..utils.constants import PHYSICAL_CONSTANTS


@njit(parallel=True)
def _stt_field(spins, ngbs, jx, jy, dx, dy, field):
    n_spins = spins.shape[0]

    for i in prange(n_spins):
        field[i, 0] = 0.0
        field[i, 1] = 0.0
        field[i, 2] = 0.0

        # (-x, +x) then (-y, +y) slots of the neighbour row
        for axis in range(2):
            lo = ngbs[i, 2 * axis]
            hi = ngbs[i, 2 * axis + 1]
            if axis == 0:
                scale = jx[i] / dx
            else:
                scale = jy[i] / dy

            if lo >= 0 and hi >= 0:
                for c in range(3):
                    field[i, c] += scale * 0.5 * (spins[hi, c] - spins[lo, c])
            elif hi >= 0:
                for c in range(3):
                    field[i, c] += scale * (spins[hi, c] - spins[i, c])
            elif lo >= 0:
                for c in range(3):
                    field[i, c] += scale * (spins[i, c] - spins[lo, c])


@njit
def _torque_terms(m, v, mm):
    """Return (S x (S x v), S x v) for one site."""
    mv = m[0] * v[0] + m[1] * v[1] + m[2] * v[2]
    dbl = np.empty(3)
    crs = np.empty(3)
    # S x (S x v) = S (S.v) - v (S.S)
    for c in range(3):
        dbl[c] = mv * m[c] - mm * v[c]
    crs[0] = m[1] * v[2] - m[2] * v[1]
    crs[1] = m[2] * v[0] - m[0] * v[2]
    crs[2] = m[0] * v[1] - m[1] * v[0]
    return dbl, crs


@njit(parallel=True)
def _llg_stt_rhs(dm_dt, m, h, h_stt, alpha, pins, beta, u0, gamma):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            dm_dt[i, 0] = 0.0
            dm_dt[i, 1] = 0.0
            dm_dt[i, 2] = 0.0
            continue

        a = alpha[i]
        coeff = -gamma / (1.0 + a * a)
        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]

        dbl, crs = _torque_terms(m[i], h[i], mm)
        d = np.empty(3)
        for c in range(3):
            d[c] = coeff * (crs[c] + a * dbl[c])

        # Zhang-Li torque, g = (j . grad) m
        coeff_stt = u0 / (1.0 + a * a)
        dbl, crs = _torque_terms(m[i], h_stt[i], mm)
        for c in range(3):
            d[c] += coeff_stt * ((1.0 + a * beta) * dbl[c] + (beta - a) * crs[c])

        norm = 6.0 * np.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
        for c in range(3):
            dm_dt[i, c] = d[c] + norm * (1.0 - mm) * m[i, c]


@njit(parallel=True)
def _llg_stt_cpp(dm_dt, m, h, p, alpha, pins, a_J, beta, gamma):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            dm_dt[i, 0] = 0.0
            dm_dt[i, 1] = 0.0
            dm_dt[i, 2] = 0.0
            continue

        a = alpha[i]
        coeff = -gamma / (1.0 + a * a)
        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]

        dbl, crs = _torque_terms(m[i], h[i], mm)
        d = np.empty(3)
        for c in range(3):
            d[c] = coeff * (crs[c] + a * dbl[c])

        # Slonczewski torque with field-like part beta * a_J
        dbl, crs = _torque_terms(m[i], p[i], mm)
        for c in range(3):
            d[c] += coeff * a_J[i] * ((1.0 + a * beta) * dbl[c] + (beta - a) * crs[c])

        norm = 6.0 * np.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
        for c in range(3):
            dm_dt[i, c] = d[c] + norm * (1.0 - mm) * m[i, c]


def compute_stt_field(
    spin: np.ndarray,
    jx: Union[float, np.ndarray],
    jy: Union[float, np.ndarray],
    dx: float,
    dy: float,
    ngbs: np.ndarray,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Spatial derivative ``(j . grad) S`` from the neighbour table.

    Uses the -x/+x and -y/+y entries: a central difference when both
    neighbours exist, a one-sided difference when only one does and zero
    along an axis with no neighbours.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        jx, jy: Current density components, scalar or per site
        dx, dy: Lattice spacings
        ngbs: Neighbour table in ``[-x, +x, -y, +y, ...]`` order
        out: Optional output buffer shaped like ``spin``

    Returns:
        The derivative field
    """
    spins = as_vectors(spin)
    n = spins.shape[0]
    table = as_neighbours(ngbs, n)
    if table.shape[1] < 4:
        raise ValueError("Spin-torque field needs the -x, +x, -y, +y neighbours")

    out = output_buffer(out, 3 * n, like=spin)
    _stt_field(spins, table, site_array(jx, n), site_array(jy, n),
               float(dx), float(dy), out.reshape(n, 3))
    return out


def llg_stt_rhs(
    spin: np.ndarray,
    field: np.ndarray,
    h_stt: np.ndarray,
    alpha: Union[float, np.ndarray],
    beta: float,
    u0: float,
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    LLG with the Zhang-Li current-in-plane torque.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        field: Effective field
        h_stt: ``(j . grad) S`` from ``compute_stt_field``
        alpha: Gilbert damping, scalar or per site
        beta: Non-adiabaticity
        u0: Torque prefactor (spin-drift velocity scale)
        gamma: Gyromagnetic ratio
        pins: Optional pinning mask
        out: Optional output buffer shaped like ``spin``

    Returns:
        dS/dt
    """
    m = as_vectors(spin)
    n = m.shape[0]

    out = output_buffer(out, 3 * n, like=spin)
    _llg_stt_rhs(out.reshape(n, 3), m, as_vectors(field, n), as_vectors(h_stt, n),
                 site_array(alpha, n), pin_mask(pins, n),
                 float(beta), float(u0), float(gamma))
    return out


def llg_stt_cpp(
    spin: np.ndarray,
    field: np.ndarray,
    p: np.ndarray,
    alpha: Union[float, np.ndarray],
    a_J: Union[float, np.ndarray],
    beta: float,
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    LLG with the Slonczewski current-perpendicular-to-plane torque.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        field: Effective field
        p: Polarisation direction, one 3-vector or one per site
        alpha: Gilbert damping, scalar or per site
        a_J: Torque amplitude (field units), scalar or per site
        beta: Ratio of field-like to damping-like torque
        gamma: Gyromagnetic ratio
        pins: Optional pinning mask
        out: Optional output buffer shaped like ``spin``

    Returns:
        dS/dt
    """
    m = as_vectors(spin)
    n = m.shape[0]

    out = output_buffer(out, 3 * n, like=spin)
    _llg_stt_cpp(out.reshape(n, 3), m, as_vectors(field, n), site_vectors(p, n),
                 site_array(alpha, n), pin_mask(pins, n), site_array(a_J, n),
                 float(beta), float(gamma))
    return out
