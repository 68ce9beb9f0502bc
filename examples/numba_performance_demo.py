#!/usr/bin/env python3
"""
Numba performance demonstration for spinfield.

Times the main kernels on periodic cubic grids of increasing size.
"""

from spinfield.utils.performance import (
    check_numba_availability, benchmark_kernels, print_benchmark_summary
)


def main():
    """Run the kernel benchmark."""

    print("spinfield: Numba Performance Demonstration")
    print("=" * 50)

    numba_available, message = check_numba_availability()
    print(f"Numba status: {message}")
    if not numba_available:
        return

    results = benchmark_kernels(system_sizes=[10, 20, 40], n_iterations=20)
    print_benchmark_summary(results)


if __name__ == "__main__":
    main()
