"""
Tests for the per-site field kernels and the closed-form energy aggregators.
"""

import numpy as np
import pytest

from spinfield.core.lattice import cubic_neighbours, grid_index
from spinfield.core.exchange import (
    compute_exch_field, compute_exch_field_spatial, compute_exch_energy
)
from spinfield.core.anisotropy import compute_anis
from spinfield.core.dmi import dmi_field_bulk, dmi_field_interfacial_atomistic, dmi_energy
from spinfield.core.demag import demag_full


class TestExchange:
    """Test the neighbour-list exchange kernels."""

    def test_uniform_state_interior_field(self, open_grid):
        """Interior sites see arity * (Jx Sx, Jy Sy, Jz Sz)."""
        nx, ny, nz, ngbs = open_grid
        n = nx * ny * nz
        s = np.array([1.0, 1.0, 1.0]) / np.sqrt(3)
        spin = np.tile(s, (n, 1))
        Jx, Jy, Jz = 1.0, 0.5, 2.0

        field, energy = compute_exch_field(spin, ngbs, Jx, Jy, Jz)

        expected = 6 * np.array([Jx, Jy, Jz]) * s
        for i in range(1, nx - 1):
            for j in range(1, ny - 1):
                site = grid_index(i, j, 1, nx, ny)
                assert np.allclose(field[site], expected)
                assert np.isclose(energy[site], -0.5 * np.dot(expected, s))

    def test_boundary_sites_skip_missing_neighbours(self):
        """The sentinel never aliases site 0."""
        ngbs = cubic_neighbours(3, 1, 1)
        spin = np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        field, _ = compute_exch_field(spin, ngbs, 1.0)
        assert np.allclose(field[0], spin[1])
        assert np.allclose(field[1], spin[0] + spin[2])
        assert np.allclose(field[2], spin[1])

    def test_flat_layout_round_trip(self, periodic_grid, random_spins):
        """Flat input gives flat output with the same values."""
        nx, ny, nz, ngbs = periodic_grid
        spin = random_spins(nx * ny * nz)
        field_2d, energy_2d = compute_exch_field(spin, ngbs, 1.0)
        field_flat, energy_flat = compute_exch_field(spin.ravel(), ngbs.ravel(), 1.0)
        assert field_flat.shape == (3 * nx * ny * nz,)
        assert np.allclose(field_flat, field_2d.ravel())
        assert np.allclose(energy_flat, energy_2d)

    def test_writes_into_buffers(self, periodic_grid, random_spins):
        """Supplied buffers are overwritten, not accumulated into."""
        nx, ny, nz, ngbs = periodic_grid
        n = nx * ny * nz
        spin = random_spins(n)
        field = np.full((n, 3), 99.0)
        energy = np.full(n, 99.0)

        out_field, out_energy = compute_exch_field(spin, ngbs, 1.0, field=field, energy=energy)
        expected, _ = compute_exch_field(spin, ngbs, 1.0)

        assert out_field is field
        assert out_energy is energy
        assert np.allclose(field, expected)

    def test_empty_lattice(self):
        field, energy = compute_exch_field(np.zeros((0, 3)), np.zeros((0, 6), dtype=int), 1.0)
        assert field.shape == (0, 3)
        assert energy.shape == (0,)

    def test_spatial_matches_uniform_for_constant_coupling(self, periodic_grid, random_spins):
        nx, ny, nz, ngbs = periodic_grid
        n = nx * ny * nz
        spin = random_spins(n)
        J = np.full(ngbs.shape, 0.7)

        field_u, energy_u = compute_exch_field(spin, ngbs, 0.7)
        field_s, energy_s = compute_exch_field_spatial(spin, ngbs, J)

        assert np.allclose(field_u, field_s)
        assert np.allclose(energy_u, energy_s)

    def test_spatial_coupling_is_per_bond(self):
        """Only the bond carrying a coupling contributes."""
        ngbs = cubic_neighbours(3, 1, 1)
        spin = np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        J = np.zeros(ngbs.shape)
        J[1, 1] = 2.0  # site 1, +x bond

        field, energy = compute_exch_field_spatial(spin, ngbs, J)

        assert np.allclose(field[1], 2.0 * spin[2])
        assert np.allclose(field[0], 0.0)
        assert np.isclose(energy[1], -0.5 * np.dot(field[1], spin[1]))

    @pytest.mark.parametrize("pbc", ["xy", "x", "y", ""])
    def test_closed_form_matches_neighbour_sum(self, pbc, random_spins):
        """Dense-grid energy equals the summed per-site energies."""
        nx, ny, nz = 5, 4, 3
        ngbs = cubic_neighbours(nx, ny, nz, pbc=pbc)
        spin = random_spins(nx * ny * nz)
        Jx, Jy, Jz = 1.0, 0.5, -0.3

        _, energy = compute_exch_field(spin, ngbs, Jx, Jy, Jz)
        total = compute_exch_energy(spin, Jx, Jy, Jz, nx, ny, nz,
                                    xperiodic="x" in pbc, yperiodic="y" in pbc)

        assert np.isclose(total, energy.sum(), rtol=1e-12, atol=1e-12)

    def test_closed_form_ferromagnet(self):
        """Fully aligned periodic film: -J per bond, 2 bonds per site in plane."""
        nx, ny, nz = 4, 4, 1
        spin = np.tile([0.0, 0.0, 1.0], (nx * ny, 1))
        total = compute_exch_energy(spin, 1.0, 1.0, 1.0, nx, ny, nz, True, True)
        assert np.isclose(total, -2.0 * nx * ny)


class TestAnisotropy:
    """Test uniaxial anisotropy."""

    def test_field_and_energy(self):
        spin = np.array([[0.6, 0.0, 0.8], [1.0, 0.0, 0.0]])
        field, energy = compute_anis(spin, 2.0, [0.0, 0.0, 1.0])

        assert np.allclose(field[0], [0.0, 0.0, 3.2])
        assert np.isclose(energy[0], -1.28)
        assert np.allclose(field[1], 0.0)
        assert energy[1] == 0.0

    def test_per_site_axis(self):
        spin = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        axis = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        field, energy = compute_anis(spin, np.array([1.0, 3.0]), axis)
        assert np.allclose(field, [[2.0, 0.0, 0.0], [0.0, 6.0, 0.0]])
        assert np.allclose(energy, [-1.0, -3.0])


class TestDMI:
    """Test bulk and interfacial DMI."""

    @pytest.mark.parametrize("pbc", ["xy", ""])
    def test_bulk_matches_closed_form(self, pbc, random_spins):
        nx, ny, nz = 5, 4, 3
        ngbs = cubic_neighbours(nx, ny, nz, pbc=pbc)
        spin = random_spins(nx * ny * nz)

        _, energy = dmi_field_bulk(spin, 0.4, ngbs)
        total = dmi_energy(spin, 0.4, nx, ny, nz,
                           xperiodic="x" in pbc, yperiodic="y" in pbc)

        assert np.isclose(total, energy.sum(), rtol=1e-12, atol=1e-12)

    def test_bulk_single_bond(self):
        """Two sites along x: H_0 = D (+x) x S_1."""
        ngbs = cubic_neighbours(2, 1, 1)
        spin = np.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0]])
        field, _ = dmi_field_bulk(spin, 1.5, ngbs)
        assert np.allclose(field[0], 1.5 * np.cross([1.0, 0.0, 0.0], spin[1]))
        assert np.allclose(field[1], 1.5 * np.cross([-1.0, 0.0, 0.0], spin[0]))

    def test_bulk_rejects_non_cubic_table(self):
        with pytest.raises(ValueError):
            dmi_field_bulk(np.zeros((2, 3)), 1.0, -np.ones((2, 8), dtype=int))

    def test_interfacial_chain(self):
        """Middle site of a chain along x."""
        ngbs = cubic_neighbours(3, 1, 1)
        spin = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])
        field, energy = dmi_field_interfacial_atomistic(spin, 1.0, ngbs)
        assert np.allclose(field[1], [-1.0, 0.0, -1.0])
        assert np.isclose(energy[1], 0.5)

    def test_interfacial_prefers_cycloid(self):
        """Energy of a cycloid changes sign with its rotation sense."""
        nx = 8
        ngbs = cubic_neighbours(nx, 1, 1, pbc="x")
        angles = 2 * np.pi * np.arange(nx) / nx
        cycloid = np.column_stack((np.sin(angles), np.zeros(nx), np.cos(angles)))
        reversed_cycloid = cycloid * np.array([-1.0, 1.0, 1.0])

        _, e1 = dmi_field_interfacial_atomistic(cycloid, 1.0, ngbs)
        _, e2 = dmi_field_interfacial_atomistic(reversed_cycloid, 1.0, ngbs)

        assert np.isclose(e1.sum(), -e2.sum())
        assert abs(e1.sum()) > 1.0

    def test_interfacial_custom_vectors(self):
        ngbs = cubic_neighbours(2, 1, 1)
        spin = np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]])
        dmi_vec = np.zeros((6, 3))
        dmi_vec[1] = [0.0, 0.0, 1.0]
        field, _ = dmi_field_interfacial_atomistic(spin, 2.0, ngbs, dmi_vec=dmi_vec)
        assert np.allclose(field[0], 2.0 * np.cross([0.0, 0.0, 1.0], spin[1]))
        assert np.allclose(field[1], 0.0)

    def test_interfacial_checks_vector_count(self):
        ngbs = cubic_neighbours(2, 1, 1)
        with pytest.raises(ValueError):
            dmi_field_interfacial_atomistic(np.zeros((2, 3)), 1.0, ngbs, dmi_vec=np.zeros((4, 3)))


class TestDemag:
    """Test the dense dipolar kernel."""

    def test_side_by_side_dipoles(self):
        d = 2.0
        coords = np.array([[0.0, 0.0, 0.0], [d, 0.0, 0.0]])
        spin = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])

        field, energy = demag_full(spin, coords, 1.0, mu_s_scale=1.0)

        assert np.allclose(field, [[0.0, 0.0, -1.0 / d**3]] * 2)
        assert np.allclose(energy, 0.5 / d**3)

    def test_head_to_tail_dipoles(self):
        d = 1.5
        coords = np.array([[0.0, 0.0, 0.0], [d, 0.0, 0.0]])
        spin = np.array([[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])

        field, energy = demag_full(spin, coords, 2.0, mu_s_scale=1.0)

        assert np.allclose(field, [[2.0 / d**3, 0.0, 0.0]] * 2)
        assert np.allclose(energy, -0.5 * 2.0 * 2.0 / d**3)

    def test_default_scale_uses_mu0(self):
        d = 1e-9
        mu_s = 2e-23
        coords = np.array([[0.0, 0.0, 0.0], [0.0, d, 0.0]])
        spin = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])

        field, _ = demag_full(spin, coords, mu_s)

        assert np.isclose(field[0, 2], -1e-7 * mu_s / d**3)

    def test_energy_is_symmetric_pair_sum(self, rng, random_spins):
        """Total energy equals the pairwise dipolar energy counted once."""
        n = 6
        coords = rng.generator.uniform(0.0, 5.0, (n, 3))
        spin = random_spins(n)

        _, energy = demag_full(spin, coords, 1.0, mu_s_scale=1.0)

        expected = 0.0
        for i in range(n):
            for j in range(i + 1, n):
                r = coords[i] - coords[j]
                dist = np.linalg.norm(r)
                u = r / dist
                expected -= (3 * np.dot(spin[i], u) * np.dot(spin[j], u)
                             - np.dot(spin[i], spin[j])) / dist**3
        assert np.isclose(energy.sum(), expected)

    def test_coincident_sites_are_not_finite(self):
        """Two sites at the same position give inf/NaN, not an exception."""
        coords = np.zeros((2, 3))
        spin = np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]])

        field, energy = demag_full(spin, coords, 1.0, mu_s_scale=1.0)

        assert not np.all(np.isfinite(field))
        assert not np.all(np.isfinite(energy))
