"""
spinfield: atomistic spin-field kernels.

Per-site effective fields and energies (exchange, anisotropy, DMI, dipolar),
Landau-Lifshitz-Gilbert right-hand sides with spin-transfer torques,
topological diagnostics and a Metropolis sweep, all operating on flat
spin buffers and a shared neighbour table.
"""

__version__ = "0.1.0"

from . import core
from . import dynamics
from . import analysis
from . import monte_carlo
from . import utils

from .core import (
    NO_NEIGHBOUR, cubic_neighbours, cubic_coordinates,
    compute_exch_field, compute_exch_field_spatial, compute_exch_energy,
    compute_anis, dmi_field_bulk, dmi_field_interfacial_atomistic, dmi_energy,
    demag_full
)
from .dynamics import (
    llg_rhs, llg_rhs_jtimes, llg_rhs_dw, llg_s_rhs, normalise,
    compute_stt_field, llg_stt_rhs, llg_stt_cpp
)
from .analysis import skyrmion_number, compute_px_py, compute_guiding_center
from .monte_carlo import run_step_mc
from .utils import RandomSource, PHYSICAL_CONSTANTS

# Performance utilities
from .utils.performance import check_numba_availability, benchmark_kernels

__all__ = [
    "NO_NEIGHBOUR",
    "cubic_neighbours",
    "cubic_coordinates",
    "compute_exch_field",
    "compute_exch_field_spatial",
    "compute_exch_energy",
    "compute_anis",
    "dmi_field_bulk",
    "dmi_field_interfacial_atomistic",
    "dmi_energy",
    "demag_full",
    "llg_rhs",
    "llg_rhs_jtimes",
    "llg_rhs_dw",
    "llg_s_rhs",
    "normalise",
    "compute_stt_field",
    "llg_stt_rhs",
    "llg_stt_cpp",
    "skyrmion_number",
    "compute_px_py",
    "compute_guiding_center",
    "run_step_mc",
    "RandomSource",
    "PHYSICAL_CONSTANTS",
    "check_numba_availability",
    "benchmark_kernels",
    "core",
    "dynamics",
    "analysis",
    "monte_carlo",
    "utils"
]
