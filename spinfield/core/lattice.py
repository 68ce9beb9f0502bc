"""
Neighbour-table conventions shared by every kernel.

Each site owns a fixed-arity row of neighbour indices ordered
``[-x, +x, -y, +y, -z, +z]``. A negative entry (``NO_NEIGHBOUR``) means the
direction carries no interaction: vacuum, a free surface or a non-periodic
edge. Periodic wrap is encoded once, when the table is built, so kernels
never special-case boundaries.

Dense grids are ordered ``index = i + nx*j + nx*ny*k``.
"""

import numpy as np
from typing import Optional, Tuple, Union


NO_NEIGHBOUR = -1

# Unit bond vectors r_ij for the canonical direction order
BULK_DMI_VECTORS = np.array([
    [-1.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [0.0, -1.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, -1.0],
    [0.0, 0.0, 1.0],
])


def as_vectors(array: np.ndarray, n: Optional[int] = None) -> np.ndarray:
    """
    View a flat ``[x0, y0, z0, x1, ...]`` buffer as an ``(N, 3)`` array.

    The view shares memory with ``array`` whenever it is already a
    contiguous float64 buffer, so kernels writing into the view write
    into the caller's buffer.

    Args:
        array: Flat (3N) or (N, 3) array
        n: Expected number of sites (checked if given)

    Returns:
        (N, 3) float64 array
    """
    vectors = np.ascontiguousarray(array, dtype=np.float64).reshape(-1, 3)
    if n is not None and vectors.shape[0] != n:
        raise ValueError(f"Expected {n} vectors, got {vectors.shape[0]}")
    return vectors


def output_buffer(buffer: Optional[np.ndarray], size: int,
                  like: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Validate or allocate an output buffer of ``size`` float64 entries.

    A caller-supplied buffer must be C-contiguous float64 so that the
    kernel writes reach it; it is returned unchanged. Otherwise a new
    buffer is allocated, shaped like ``like`` when given.
    """
    if buffer is None:
        shape = np.shape(like) if like is not None and np.size(like) == size else (size,)
        return np.zeros(shape, dtype=np.float64)
    if buffer.dtype != np.float64 or not buffer.flags.c_contiguous:
        raise ValueError("Output buffers must be C-contiguous float64 arrays")
    if buffer.size != size:
        raise ValueError(f"Output buffer has {buffer.size} entries, expected {size}")
    return buffer


def as_neighbours(ngbs: np.ndarray, n: int) -> np.ndarray:
    """
    View a neighbour table as an ``(N, arity)`` int64 array.

    Entries other than the negative sentinel must be valid site indices;
    this is asserted so it vanishes under ``python -O``.
    """
    table = np.ascontiguousarray(ngbs, dtype=np.int64)
    if n == 0:
        if table.size != 0:
            raise ValueError(f"Neighbour table of size {table.size} given for an empty lattice")
        return table.reshape(0, table.shape[-1] if table.ndim == 2 else 0)
    if table.size % n != 0:
        raise ValueError(f"Neighbour table of size {table.size} does not "
                         f"match {n} sites")
    table = table.reshape(n, -1)
    assert table.size == 0 or table.max() < n, "neighbour index out of range"
    return table


def site_array(value: Union[float, np.ndarray], n: int) -> np.ndarray:
    """Broadcast a scalar or per-site parameter to a length-N float64 array."""
    values = np.asarray(value, dtype=np.float64)
    if values.ndim == 0:
        return np.full(n, float(values))
    values = np.ascontiguousarray(values).reshape(-1)
    if values.shape[0] != n:
        raise ValueError(f"Expected {n} per-site values, got {values.shape[0]}")
    return values


def site_vectors(value: np.ndarray, n: int) -> np.ndarray:
    """Broadcast a single 3-vector or one vector per site to ``(N, 3)``."""
    values = np.asarray(value, dtype=np.float64)
    if values.size == 3:
        return np.ascontiguousarray(np.broadcast_to(values.reshape(3), (n, 3)))
    return as_vectors(values, n)


def bond_coupling(value: Union[float, np.ndarray], n: int, arity: int) -> np.ndarray:
    """
    Expand a coupling to one scalar per (site, direction) pair.

    Accepts a scalar, a per-site array of length N (same strength on
    every bond of the site) or an array index-aligned with the
    neighbour table.
    """
    values = np.asarray(value, dtype=np.float64)
    if values.ndim == 0:
        return np.full((n, arity), float(values))
    if values.size == n * arity:
        return np.ascontiguousarray(values).reshape(n, arity)
    if values.size == n:
        return np.ascontiguousarray(np.repeat(values.reshape(n, 1), arity, axis=1))
    raise ValueError(f"Coupling of size {values.size} matches neither {n} "
                     f"sites nor {n}x{arity} bonds")


def pin_mask(pins: Optional[np.ndarray], n: int) -> np.ndarray:
    """Return the pinning mask as int32 (nonzero = pinned), zeros if None."""
    if pins is None:
        return np.zeros(n, dtype=np.int32)
    mask = np.ascontiguousarray(pins, dtype=np.int32).reshape(-1)
    if mask.shape[0] != n:
        raise ValueError(f"Pinning mask has {mask.shape[0]} entries, expected {n}")
    return mask


def grid_index(i: int, j: int, k: int, nx: int, ny: int) -> int:
    """Flat site index of grid point (i, j, k)."""
    return i + nx * j + nx * ny * k


def cubic_neighbours(nx: int, ny: int, nz: int, pbc: str = "") -> np.ndarray:
    """
    Build the canonical neighbour table of a regular ``nx x ny x nz`` grid.

    Args:
        nx, ny, nz: Grid dimensions
        pbc: Periodic axes, any combination of "x", "y", "z"

    Returns:
        (nx*ny*nz, 6) int64 array, ``NO_NEIGHBOUR`` at open edges
    """
    pbc = pbc.lower()
    k, j, i = np.meshgrid(np.arange(nz), np.arange(ny), np.arange(nx), indexing="ij")
    i, j, k = i.ravel(), j.ravel(), k.ravel()

    def shifted(coord, size, step, periodic):
        target = coord + step
        if periodic:
            return target % size, np.ones_like(target, dtype=bool)
        return target, (target >= 0) & (target < size)

    table = np.full((nx * ny * nz, 6), NO_NEIGHBOUR, dtype=np.int64)
    for col, (axis, step) in enumerate([("x", -1), ("x", 1), ("y", -1),
                                        ("y", 1), ("z", -1), ("z", 1)]):
        ii, jj, kk = i, j, k
        if axis == "x":
            ii, valid = shifted(i, nx, step, "x" in pbc)
        elif axis == "y":
            jj, valid = shifted(j, ny, step, "y" in pbc)
        else:
            kk, valid = shifted(k, nz, step, "z" in pbc)
        index = ii + nx * jj + nx * ny * kk
        table[valid, col] = index[valid]

    return table


def cubic_coordinates(nx: int, ny: int, nz: int,
                      spacing: Union[float, Tuple[float, float, float]] = 1.0) -> np.ndarray:
    """Site coordinates of a regular grid, ordered like ``cubic_neighbours``."""
    dx, dy, dz = np.broadcast_to(np.asarray(spacing, dtype=np.float64), (3,))
    k, j, i = np.meshgrid(np.arange(nz), np.arange(ny), np.arange(nx), indexing="ij")
    return np.column_stack((i.ravel() * dx, j.ravel() * dy, k.ravel() * dz))


def interfacial_dmi_vectors(arity: int = 6) -> np.ndarray:
    """
    Unit DMI vectors ``r_ij x z`` for each neighbour direction.

    In-plane bonds get a vector perpendicular to both the bond and the
    interface normal; the out-of-plane neighbours get zero.
    """
    bonds = BULK_DMI_VECTORS[:arity]
    return np.cross(bonds, np.array([0.0, 0.0, 1.0]))
