"""
Benchmark suite for the 64-bit factorization library.

Benchmarks:
1. Primality Testing: deterministic Miller-Rabin, fresh and memoized
2. Modular Arithmetic: wide-product vs double-and-add vs NumPy uint64 kernels
3. Pollard Rho: single splits of semiprimes of increasing size
4. Complete Factorization: mixed inputs up to 2^64
5. Stress Test: random 64-bit semiprimes
"""

import time
import sys
import random
import statistics
from typing import List, Callable

import numpy as np

from factorization import (
    is_prime, factor, clear_caches, FactorizationEngine,
)
from modular_arithmetic import (
    MAX_UINT64, mul_mod, mul_mod_double_add, mul_mod_array,
)


# ============================================================================
# BENCHMARK UTILITIES
# ============================================================================

class BenchmarkResult:
    """Store benchmark results with statistics."""

    def __init__(self, name: str, times: List[float]):
        self.name = name
        self.times = sorted(times)
        self.min = min(times)
        self.max = max(times)
        self.mean = statistics.mean(times)
        self.median = statistics.median(times)
        self.stdev = statistics.stdev(times) if len(times) > 1 else 0

    def __str__(self):
        return (f"{self.name:40} | "
                f"Mean: {self.mean*1000:8.3f}ms | "
                f"Median: {self.median*1000:8.3f}ms | "
                f"StdDev: {self.stdev*1000:8.3f}ms | "
                f"Min: {self.min*1000:8.3f}ms | "
                f"Max: {self.max*1000:8.3f}ms")


def benchmark(func: Callable, *args, iterations: int = 5, **kwargs) -> BenchmarkResult:
    """
    Benchmark a function and return statistics.

    Args:
        func: Function to benchmark
        *args: Positional arguments to function
        iterations: Number of iterations to run
        **kwargs: Keyword arguments to function

    Returns:
        BenchmarkResult with timing statistics
    """
    times = []

    # Warm up
    func(*args, **kwargs)

    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        times.append(time.perf_counter() - start)

    return BenchmarkResult(func.__name__, times)


def _header(title: str):
    print("\n" + "="*100)
    print(title)
    print("="*100)


# ============================================================================
# 1. PRIMALITY TESTING BENCHMARKS
# ============================================================================

def benchmark_primality():
    """Benchmark Miller-Rabin primality testing."""
    _header("PRIMALITY TESTING BENCHMARKS")

    test_values = [
        (1_000_000_007, "Prime below 2^32"),
        (2305843009213693951, "Mersenne prime 2^61 - 1"),
        (18446744073709551557, "Largest prime below 2^64"),
        (3825123056546413051, "Strong pseudoprime (bases 2..23)"),
    ]

    for n, description in test_values:
        times = []
        for _ in range(20):
            clear_caches()
            start = time.perf_counter()
            is_prime(n)
            times.append(time.perf_counter() - start)
        result_fresh = BenchmarkResult(f"{description:32} (no cache)", times)
        print(result_fresh)

        times = []
        for _ in range(100):
            start = time.perf_counter()
            is_prime(n)
            times.append(time.perf_counter() - start)
        result_cached = BenchmarkResult(f"{description:32} (cached)", times)
        print(result_cached)

        print(f"  → Cache speedup: {result_fresh.mean / result_cached.mean:.1f}x\n")


# ============================================================================
# 2. MODULAR ARITHMETIC BENCHMARKS
# ============================================================================

def benchmark_modular_arithmetic():
    """Compare the three (a * b) mod m kernels near 2^64."""
    _header("MODULAR MULTIPLICATION BENCHMARKS (m near 2^64)")

    rnd = random.Random(0)
    m = MAX_UINT64 - 58
    pairs = [(rnd.randrange(m), rnd.randrange(m)) for _ in range(1000)]

    def run_wide():
        for a, b in pairs:
            mul_mod(a, b, m)

    def run_double_add():
        for a, b in pairs:
            mul_mod_double_add(a, b, m)

    a_arr = np.array([a for a, _ in pairs], dtype=np.uint64)
    b_arr = np.array([b for _, b in pairs], dtype=np.uint64)

    def run_vectorized():
        mul_mod_array(a_arr, b_arr, m)

    for func, description in [
        (run_wide, "Wide product (1000 ops)"),
        (run_double_add, "Double-and-add (1000 ops)"),
        (run_vectorized, "NumPy uint64 batch (1000 lanes)"),
    ]:
        result = benchmark(func, iterations=5)
        result.name = description
        print(result)


# ============================================================================
# 3. POLLARD RHO BENCHMARKS
# ============================================================================

def benchmark_pollard_rho():
    """Benchmark single Pollard Rho splits."""
    _header("POLLARD RHO (FLOYD) BENCHMARKS")

    test_cases = [
        (1073, "Small semiprime (29 * 37)"),
        (10403, "Medium semiprime (101 * 103)"),
        (1000003 * 1000033, "Semiprime (~10^12)"),
        (1_000_000_007 * 1_000_000_009, "Semiprime (~10^18)"),
        (4294967279 * 4294967291, "Semiprime just below 2^64"),
    ]

    engine = FactorizationEngine(seed=0)
    for n, description in test_cases:
        result = benchmark(engine.split, n, iterations=3)
        result.name = description
        print(result)


# ============================================================================
# 4. COMPLETE FACTORIZATION BENCHMARKS
# ============================================================================

def benchmark_complete_factorization():
    """Benchmark complete factorization."""
    _header("COMPLETE FACTORIZATION BENCHMARKS")

    test_cases = [
        (360, "Small composite"),
        (600851475143, "71 * 839 * 1471 * 6857"),
        (4_294_967_297, "Fermat F5 (641 * 6700417)"),
        (MAX_UINT64, "2^64 - 1"),
        (4294967291 ** 2, "Square of prime below 2^32"),
    ]

    for n, description in test_cases:
        clear_caches()
        result = benchmark(factor, n, seed=0, iterations=3)
        result.name = description
        print(result)


# ============================================================================
# 5. STRESS TEST
# ============================================================================

def _random_prime(rnd: random.Random, bits: int) -> int:
    while True:
        candidate = rnd.getrandbits(bits) | (1 << (bits - 1)) | 1
        if is_prime(candidate):
            return candidate


def benchmark_stress_test():
    """Factor random 64-bit semiprimes."""
    _header("STRESS TEST (20 Random 64-bit Semiprimes)")

    rnd = random.Random(1)
    engine = FactorizationEngine(seed=1)
    times = []
    successful = 0

    start_total = time.perf_counter()
    for _ in range(20):
        p = _random_prime(rnd, 32)
        q = _random_prime(rnd, 32)
        n = p * q

        start = time.perf_counter()
        factors = engine.factorize(n)
        elapsed = time.perf_counter() - start

        if sorted([p, q]) == factors:
            successful += 1
            times.append(elapsed)
    total_time = time.perf_counter() - start_total

    if times:
        print(BenchmarkResult("Semiprime factorizations", times))
    print(f"Successful: {successful}/20")
    print(f"Total time: {total_time:.3f}s")


# ============================================================================
# MAIN BENCHMARK SUITE
# ============================================================================

def run_all_benchmarks():
    """Run all benchmarks."""
    print("\n")
    print("╔" + "="*98 + "╗")
    print("║" + " "*25 + "64-BIT FACTORIZATION BENCHMARK SUITE" + " "*37 + "║")
    print("╚" + "="*98 + "╝")

    try:
        benchmark_primality()
        benchmark_modular_arithmetic()
        benchmark_pollard_rho()
        benchmark_complete_factorization()
        benchmark_stress_test()

        print("\n" + "="*100)
        print("BENCHMARK COMPLETE")
        print("="*100 + "\n")

    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run_all_benchmarks()
