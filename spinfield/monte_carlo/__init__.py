"""
Monte Carlo update rules for spin systems.

The sweep mutates the spin array in place; callers must not run it
concurrently with an integrator on the same array.
"""

from .metropolis import run_step_mc

__all__ = ["run_step_mc"]
