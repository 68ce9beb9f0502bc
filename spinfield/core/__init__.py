"""Neighbour conventions and per-site field kernels."""

from .lattice import (
    NO_NEIGHBOUR, BULK_DMI_VECTORS, cubic_neighbours, cubic_coordinates,
    interfacial_dmi_vectors
)
from .exchange import compute_exch_field, compute_exch_field_spatial, compute_exch_energy
from .anisotropy import compute_anis
from .dmi import dmi_field_bulk, dmi_field_interfacial_atomistic, dmi_energy
from .demag import demag_full

__all__ = [
    "NO_NEIGHBOUR", "BULK_DMI_VECTORS", "cubic_neighbours", "cubic_coordinates",
    "interfacial_dmi_vectors", "compute_exch_field", "compute_exch_field_spatial",
    "compute_exch_energy", "compute_anis", "dmi_field_bulk",
    "dmi_field_interfacial_atomistic", "dmi_energy", "demag_full"
]
