"""
Smoke tests for the benchmarking helpers.
"""

from spinfield.utils.performance import (
    check_numba_availability, benchmark_kernels, print_benchmark_summary
)


def test_numba_available():
    available, message = check_numba_availability()
    assert available is True
    assert "threads" in message


def test_benchmark_kernels(capsys):
    results = benchmark_kernels([3], n_iterations=1, verbose=False)

    assert results['numba_available'] is True
    assert results['system_sizes'] == [3]
    timings = results['benchmarks'][3]
    assert set(timings) == {'exchange_field', 'dmi_field', 'llg_rhs',
                            'skyrmion_number', 'mc_sweep'}
    assert all(t >= 0 for t in timings.values())

    print_benchmark_summary(results)
    out = capsys.readouterr().out
    assert "KERNEL BENCHMARK SUMMARY" in out
    assert "27" in out
