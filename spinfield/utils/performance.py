"""
Performance testing and benchmarking utilities.
"""

import time
import numpy as np
from typing import Dict, List, Any, Tuple
from tqdm import tqdm
from numba import njit, config

from ..core.lattice import cubic_neighbours
from ..core.exchange import compute_exch_field
from ..core.dmi import dmi_field_bulk
from ..dynamics.llg import llg_rhs
from ..analysis.topology import skyrmion_number
from ..monte_carlo.metropolis import run_step_mc
from .random import RandomSource


def check_numba_availability() -> Tuple[bool, str]:
    """Check if Numba compiles and runs correctly."""
    try:
        @njit
        def test_func(x):
            return x * 2

        test_func(5.0)
        return True, f"Numba available and working ({config.NUMBA_NUM_THREADS} threads)"

    except Exception as e:
        return False, f"Numba installation issue: {e}"


def _time_call(func, n_iterations: int) -> float:
    """Average wall time of ``func()``; the first call is a warm-up (JIT)."""
    func()
    start_time = time.perf_counter()
    for _ in range(n_iterations):
        func()
    return (time.perf_counter() - start_time) / n_iterations


def benchmark_kernels(
    system_sizes: List[int] = [10, 20, 40],
    n_iterations: int = 20,
    verbose: bool = True
) -> Dict[str, Any]:
    """
    Time the main kernels on periodic cubic grids.

    Args:
        system_sizes: Linear dimensions L of L x L x L grids
        n_iterations: Calls averaged per kernel
        verbose: Whether to show a progress bar

    Returns:
        Dictionary with seconds per call for each kernel and size
    """
    numba_available, message = check_numba_availability()
    results = {
        'numba_available': numba_available,
        'numba_message': message,
        'system_sizes': list(system_sizes),
        'benchmarks': {}
    }

    rng = RandomSource(42)
    for size in tqdm(system_sizes, desc="Benchmark sizes", disable=not verbose):
        n = size ** 3
        ngbs = cubic_neighbours(size, size, size, pbc="xyz")
        spin = rng.random_spin_uniform(n)
        field = np.zeros((n, 3))
        energy = np.zeros(n)
        h = np.zeros(3)

        size_results = {
            'exchange_field': _time_call(
                lambda: compute_exch_field(spin, ngbs, 1.0, field=field, energy=energy),
                n_iterations),
            'dmi_field': _time_call(
                lambda: dmi_field_bulk(spin, 0.1, ngbs, field=field, energy=energy),
                n_iterations),
            'llg_rhs': _time_call(
                lambda: llg_rhs(spin, field, 0.1, gamma=1.0),
                n_iterations),
            'skyrmion_number': _time_call(
                lambda: skyrmion_number(spin, ngbs, size, size),
                n_iterations),
            'mc_sweep': _time_call(
                lambda: run_step_mc(spin, ngbs, 1.0, 0.1, h, 1.0, rng, kb=1.0),
                max(1, n_iterations // 10)),
        }
        results['benchmarks'][size] = size_results

    return results


def print_benchmark_summary(results: Dict[str, Any]):
    """Print a summary table of ``benchmark_kernels`` results."""

    print("\n" + "=" * 72)
    print("KERNEL BENCHMARK SUMMARY (ms per call)")
    print("=" * 72)
    print(f"Numba status: {results['numba_message']}")
    print()

    operations = ['exchange_field', 'dmi_field', 'llg_rhs', 'skyrmion_number', 'mc_sweep']
    op_names = ['Exchange', 'DMI', 'LLG RHS', 'Skyrmion Q', 'MC Sweep']

    print(f"{'Spins':<12}", end="")
    for name in op_names:
        print(f"{name:>12}", end="")
    print()
    print("-" * (12 + 12 * len(op_names)))

    for size in results['system_sizes']:
        if size not in results['benchmarks']:
            continue
        print(f"{size**3:<12}", end="")
        for op in operations:
            print(f"{results['benchmarks'][size][op] * 1e3:>12.3f}", end="")
        print()
