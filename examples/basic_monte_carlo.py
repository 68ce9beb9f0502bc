#!/usr/bin/env python3
"""
Basic Monte Carlo simulation example using spinfield.

Anneals a Heisenberg film with bulk DMI in an applied field using
Metropolis sweeps and reports the magnetisation, acceptance rate and
skyrmion number at each temperature.
"""

import numpy as np
from tqdm import tqdm

from spinfield import cubic_neighbours, run_step_mc, skyrmion_number, RandomSource


def main():
    """Run a simple temperature ramp."""

    print("spinfield: Basic Monte Carlo Example")
    print("=" * 40)

    nx, ny = 30, 30
    J, D = 1.0, 0.5
    h = np.array([0.0, 0.0, 0.2])

    ngbs = cubic_neighbours(nx, ny, 1, pbc="xy")
    rng = RandomSource(42)
    spin = rng.random_spin_uniform(nx * ny)
    scratch = np.empty_like(spin)

    # Energies are in units of J, so kb = 1
    temperatures = [2.0, 1.0, 0.5, 0.2, 0.1, 0.05]
    n_sweeps = 500

    for T in temperatures:
        accepted = 0
        for _ in tqdm(range(n_sweeps), desc=f"T = {T}", leave=False):
            accepted += run_step_mc(spin, ngbs, J, D, h, T, rng, kb=1.0, new_spin=scratch)

        mz = np.mean(spin[:, 2])
        Q, _ = skyrmion_number(spin, ngbs, nx, ny)
        rate = accepted / (n_sweeps * len(spin))
        print(f"T = {T:5.2f}: <Sz> = {mz:+.4f}, acceptance = {rate:.3f}, Q = {Q:+.3f}")

    print("\nSimulation completed successfully!")


if __name__ == "__main__":
    main()
