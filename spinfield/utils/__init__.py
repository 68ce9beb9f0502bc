"""Utility functions and helpers."""

from .random import RandomSource, as_random_source
from .constants import PHYSICAL_CONSTANTS

# Benchmarking lives in utils.performance, which imports the kernels

__all__ = [
    "RandomSource",
    "as_random_source",
    "PHYSICAL_CONSTANTS"
]
