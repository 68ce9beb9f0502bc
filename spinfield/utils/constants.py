"""Physical constants used as kernel defaults."""

import numpy as np

# Physical constants
PHYSICAL_CONSTANTS = {
    # Boltzmann constant
    'kB': 8.617333e-5,  # eV/K
    'kB_SI': 1.380649e-23,  # J/K

    # Bohr magneton
    'mu_B': 5.78838e-5,  # eV/T
    'mu_B_SI': 9.274010e-24,  # J/T

    # Gyromagnetic ratio for electron
    'gamma_e': 1.76085963e11,  # rad/(s·T)

    # Vacuum permeability
    'mu_0': 4*np.pi*1e-7,  # H/m
}
