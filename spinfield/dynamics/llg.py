"""
Landau-Lifshitz-Gilbert right-hand sides.

All functions take an already-summed effective field and return dS/dt in
the Landau-Lifshitz form

    dS/dt = -gamma/(1+alpha^2) [S x H + alpha S x (S x H)]

Pinned sites always get a zero derivative.
"""

import numpy as np
from numba import njit, prange
from typing import Optional, Union

from ..core.lattice import as_vectors, site_array, pin_mask, output_buffer
from ..utils.constants import PHYSICAL_CONSTANTS


@njit(parallel=True)
def _llg_rhs(dm_dt, m, h, alpha, pins, gamma, do_precession, default_c):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            dm_dt[i, 0] = 0.0
            dm_dt[i, 1] = 0.0
            dm_dt[i, 2] = 0.0
            continue

        coeff = -gamma / (1.0 + alpha[i] * alpha[i])

        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]
        mh = m[i, 0] * h[i, 0] + m[i, 1] * h[i, 1] + m[i, 2] * h[i, 2]

        # hp = mm*h - mh*m = -m x (m x h)
        hp0 = mm * h[i, 0] - mh * m[i, 0]
        hp1 = mm * h[i, 1] - mh * m[i, 1]
        hp2 = mm * h[i, 2] - mh * m[i, 2]

        dx = -alpha[i] * hp0 * coeff
        dy = -alpha[i] * hp1 * coeff
        dz = -alpha[i] * hp2 * coeff

        if do_precession:
            dx += coeff * (m[i, 1] * h[i, 2] - m[i, 2] * h[i, 1])
            dy += coeff * (m[i, 2] * h[i, 0] - m[i, 0] * h[i, 2])
            dz += coeff * (m[i, 0] * h[i, 1] - m[i, 1] * h[i, 0])

        # pull |m| back towards 1
        c = default_c
        if c <= 0:
            c = 6.0 * np.sqrt(dx * dx + dy * dy + dz * dz)
        dm_dt[i, 0] = dx + c * (1.0 - mm) * m[i, 0]
        dm_dt[i, 1] = dy + c * (1.0 - mm) * m[i, 1]
        dm_dt[i, 2] = dz + c * (1.0 - mm) * m[i, 2]


@njit(parallel=True)
def _llg_rhs_jtimes(jtn, m, h, mp, hp, alpha, pins, gamma, do_precession, default_c):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            jtn[i, 0] = 0.0
            jtn[i, 1] = 0.0
            jtn[i, 2] = 0.0
            continue

        coeff = -gamma / (1.0 + alpha[i] * alpha[i])

        jx = 0.0
        jy = 0.0
        jz = 0.0
        if do_precession:
            # d(m x h) = mp x h + m x hp
            jx = coeff * (mp[i, 1] * h[i, 2] - mp[i, 2] * h[i, 1]
                          + m[i, 1] * hp[i, 2] - m[i, 2] * hp[i, 1])
            jy = coeff * (mp[i, 2] * h[i, 0] - mp[i, 0] * h[i, 2]
                          + m[i, 2] * hp[i, 0] - m[i, 0] * hp[i, 2])
            jz = coeff * (mp[i, 0] * h[i, 1] - mp[i, 1] * h[i, 0]
                          + m[i, 0] * hp[i, 1] - m[i, 1] * hp[i, 0])

        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]
        mh = m[i, 0] * h[i, 0] + m[i, 1] * h[i, 1] + m[i, 2] * h[i, 2]
        mhp = m[i, 0] * hp[i, 0] + m[i, 1] * hp[i, 1] + m[i, 2] * hp[i, 2]
        mph = mp[i, 0] * h[i, 0] + mp[i, 1] * h[i, 1] + mp[i, 2] * h[i, 2]
        mmp = m[i, 0] * mp[i, 0] + m[i, 1] * mp[i, 1] + m[i, 2] * mp[i, 2]

        # d[m (m.h) - h (m.m)]
        a = alpha[i] * coeff
        jx += a * ((mph + mhp) * m[i, 0] + mh * mp[i, 0] - 2.0 * mmp * h[i, 0] - mm * hp[i, 0])
        jy += a * ((mph + mhp) * m[i, 1] + mh * mp[i, 1] - 2.0 * mmp * h[i, 1] - mm * hp[i, 1])
        jz += a * ((mph + mhp) * m[i, 2] + mh * mp[i, 2] - 2.0 * mmp * h[i, 2] - mm * hp[i, 2])

        if default_c > 0:
            jx += default_c * ((1.0 - mm) * mp[i, 0] - 2.0 * mmp * m[i, 0])
            jy += default_c * ((1.0 - mm) * mp[i, 1] - 2.0 * mmp * m[i, 1])
            jz += default_c * ((1.0 - mm) * mp[i, 2] - 2.0 * mmp * m[i, 2])

        jtn[i, 0] = jx
        jtn[i, 1] = jy
        jtn[i, 2] = jz


@njit(parallel=True)
def _llg_rhs_dw(dm_dt, m, h, eta, T, alpha, mu_s_inv, pins, gamma, dt, kB):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            dm_dt[i, 0] = 0.0
            dm_dt[i, 1] = 0.0
            dm_dt[i, 2] = 0.0
            continue

        coeff = -gamma / (1.0 + alpha[i] * alpha[i])
        sigma = np.sqrt(2.0 * alpha[i] * kB * T[i] * mu_s_inv[i] / (gamma * dt))

        hx = h[i, 0] + sigma * eta[i, 0]
        hy = h[i, 1] + sigma * eta[i, 1]
        hz = h[i, 2] + sigma * eta[i, 2]

        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]
        mh = m[i, 0] * hx + m[i, 1] * hy + m[i, 2] * hz

        dx = coeff * (m[i, 1] * hz - m[i, 2] * hy - alpha[i] * (mm * hx - mh * m[i, 0]))
        dy = coeff * (m[i, 2] * hx - m[i, 0] * hz - alpha[i] * (mm * hy - mh * m[i, 1]))
        dz = coeff * (m[i, 0] * hy - m[i, 1] * hx - alpha[i] * (mm * hz - mh * m[i, 2]))

        c = 6.0 * np.sqrt(dx * dx + dy * dy + dz * dz)
        dm_dt[i, 0] = dx + c * (1.0 - mm) * m[i, 0]
        dm_dt[i, 1] = dy + c * (1.0 - mm) * m[i, 1]
        dm_dt[i, 2] = dz + c * (1.0 - mm) * m[i, 2]


@njit(parallel=True)
def _llg_s_rhs(dm_dt, m, h, alpha, chi, pins, gamma):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            dm_dt[i, 0] = 0.0
            dm_dt[i, 1] = 0.0
            dm_dt[i, 2] = 0.0
            continue

        coeff = -gamma / (1.0 + alpha[i] * alpha[i])
        mm = m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2]

        # longitudinal field (1 - |m|^2) / (2 chi) m
        hl = (1.0 - mm) / (2.0 * chi[i])
        hx = h[i, 0] + hl * m[i, 0]
        hy = h[i, 1] + hl * m[i, 1]
        hz = h[i, 2] + hl * m[i, 2]

        dm_dt[i, 0] = coeff * (m[i, 1] * h[i, 2] - m[i, 2] * h[i, 1] - alpha[i] * hx)
        dm_dt[i, 1] = coeff * (m[i, 2] * h[i, 0] - m[i, 0] * h[i, 2] - alpha[i] * hy)
        dm_dt[i, 2] = coeff * (m[i, 0] * h[i, 1] - m[i, 1] * h[i, 0] - alpha[i] * hz)


@njit(parallel=True, error_model="numpy")
def _normalise(m, pins):
    n_spins = m.shape[0]

    for i in prange(n_spins):
        if pins[i] != 0:
            continue
        norm = np.sqrt(m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2])
        m[i, 0] /= norm
        m[i, 1] /= norm
        m[i, 2] /= norm


def llg_rhs(
    spin: np.ndarray,
    field: np.ndarray,
    alpha: Union[float, np.ndarray],
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    do_precession: bool = True,
    default_c: float = -1.0,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    LLG time derivative for a given effective field.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        field: Effective field, same layout as ``spin``
        alpha: Gilbert damping, scalar or one per site
        gamma: Gyromagnetic ratio
        pins: Optional pinning mask (nonzero = pinned)
        do_precession: If False the ``S x H`` term is dropped (pure relaxation)
        default_c: Rate of the norm correction ``c (1 - |S|^2) S``;
            values <= 0 use ``6 |dS/dt|``
        out: Optional output buffer shaped like ``spin``

    Returns:
        dS/dt
    """
    m = as_vectors(spin)
    n = m.shape[0]
    h = as_vectors(field, n)

    out = output_buffer(out, 3 * n, like=spin)
    _llg_rhs(out.reshape(n, 3), m, h, site_array(alpha, n), pin_mask(pins, n),
             float(gamma), bool(do_precession), float(default_c))
    return out


def llg_rhs_jtimes(
    spin: np.ndarray,
    field: np.ndarray,
    spin_perturbation: np.ndarray,
    field_perturbation: np.ndarray,
    alpha: Union[float, np.ndarray],
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    do_precession: bool = True,
    default_c: float = -1.0,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Jacobian-vector product of ``llg_rhs``.

    Given a direction ``mp`` and the field perturbation ``hp`` it induces,
    returns the directional derivative of the right-hand side, as needed
    by Newton-Krylov steps of implicit integrators. The norm correction is
    linearised only for a fixed rate (``default_c > 0``); the adaptive rate
    ``6 |dS/dt|`` is treated as having no derivative.
    """
    m = as_vectors(spin)
    n = m.shape[0]

    out = output_buffer(out, 3 * n, like=spin)
    _llg_rhs_jtimes(out.reshape(n, 3), m, as_vectors(field, n),
                    as_vectors(spin_perturbation, n), as_vectors(field_perturbation, n),
                    site_array(alpha, n), pin_mask(pins, n),
                    float(gamma), bool(do_precession), float(default_c))
    return out


def llg_rhs_dw(
    spin: np.ndarray,
    field: np.ndarray,
    eta: np.ndarray,
    T: Union[float, np.ndarray],
    alpha: Union[float, np.ndarray],
    mu_s_inv: Union[float, np.ndarray],
    dt: float,
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    kB: float = PHYSICAL_CONSTANTS['kB_SI'],
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Stochastic LLG right-hand side with a thermal field.

    The thermal field is ``sqrt(2 alpha kB T mu_s_inv / (gamma dt)) eta``
    where ``eta`` is a caller-supplied buffer of standard normal samples
    (see ``RandomSource.gauss_random_vec``), drawn once per step.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        field: Deterministic effective field
        eta: Gaussian noise, same layout as ``spin``
        T: Temperature, scalar or per site
        alpha: Gilbert damping, scalar or per site
        mu_s_inv: Inverse magnetic moment, scalar or per site
        dt: Integration step size
        gamma: Gyromagnetic ratio
        pins: Optional pinning mask
        kB: Boltzmann constant in the units of ``mu_s * field``
        out: Optional output buffer shaped like ``spin``

    Returns:
        dS/dt
    """
    m = as_vectors(spin)
    n = m.shape[0]

    out = output_buffer(out, 3 * n, like=spin)
    _llg_rhs_dw(out.reshape(n, 3), m, as_vectors(field, n), as_vectors(eta, n),
                site_array(T, n), site_array(alpha, n), site_array(mu_s_inv, n),
                pin_mask(pins, n), float(gamma), float(dt), float(kB))
    return out


def llg_s_rhs(
    spin: np.ndarray,
    field: np.ndarray,
    alpha: Union[float, np.ndarray],
    chi: Union[float, np.ndarray],
    gamma: float = PHYSICAL_CONSTANTS['gamma_e'],
    pins: Optional[np.ndarray] = None,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    LLG right-hand side for spins whose length may change.

    Precession is driven by ``H`` alone, while damping acts on the full
    field ``H + (1 - |S|^2)/(2 chi) S`` without projecting out the
    longitudinal part:

        dS/dt = -gamma/(1+alpha^2) [S x H - alpha (H + (1 - |S|^2)/(2 chi) S)]

    so the spin length relaxes towards 1 at a rate set by the
    susceptibility ``chi``. No norm correction is applied.

    Args:
        spin: Spin field, flat (3N) or (N, 3)
        field: Effective field
        alpha: Damping, scalar or per site
        chi: Longitudinal susceptibility, scalar or per site
        gamma: Gyromagnetic ratio
        pins: Optional pinning mask
        out: Optional output buffer shaped like ``spin``

    Returns:
        dS/dt
    """
    m = as_vectors(spin)
    n = m.shape[0]

    out = output_buffer(out, 3 * n, like=spin)
    _llg_s_rhs(out.reshape(n, 3), m, as_vectors(field, n), site_array(alpha, n),
               site_array(chi, n), pin_mask(pins, n), float(gamma))
    return out


def normalise(spin: np.ndarray, pins: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Rescale every unpinned spin to unit length, in place.

    ``spin`` must be a C-contiguous float64 buffer. A zero-length spin
    becomes NaN.
    """
    m = output_buffer(spin, spin.size)
    n = m.size // 3
    _normalise(m.reshape(n, 3), pin_mask(pins, n))
    return spin
