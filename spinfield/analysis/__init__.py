"""Topological analysis tools."""

from .topology import skyrmion_number, compute_px_py, compute_guiding_center

__all__ = ["skyrmion_number", "compute_px_py", "compute_guiding_center"]
