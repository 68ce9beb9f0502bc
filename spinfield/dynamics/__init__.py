"""Spin dynamics right-hand sides."""

from .llg import llg_rhs, llg_rhs_jtimes, llg_rhs_dw, llg_s_rhs, normalise
from .stt import compute_stt_field, llg_stt_rhs, llg_stt_cpp

__all__ = ["llg_rhs", "llg_rhs_jtimes", "llg_rhs_dw", "llg_s_rhs", "normalise",
           "compute_stt_field", "llg_stt_rhs", "llg_stt_cpp"]
