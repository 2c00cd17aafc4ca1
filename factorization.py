"""
Integer factorization over the unsigned 64-bit range using a deterministic
Miller-Rabin test and Pollard's Rho (Floyd cycle detection).

COMPONENTS:
1. is_prime: Miller-Rabin with the witness set {2, 3, ..., 37}
   - Deterministic (no probabilistic error) for every n < 2**64
   - Memoized with an LRU cache since it is a pure function
2. FactorizationEngine.split: Pollard's Rho on f(x) = x^2 + c (mod n)
   - Degenerate cycles (gcd == n) are retried silently with fresh (c, x)
   - Retries are unbounded unless max_retries is set explicitly
3. FactorizationEngine.factorize: strips witness primes, then splits
   composites from a work list until only primes remain

RANDOMNESS:
- Each engine owns a numpy.random.Generator. Pass seed= for reproducible
  runs, rng= to inject a generator, or call spawn() to hand independent
  engines to concurrent callers. Nothing random is shared at module level.

DEPENDENCIES:
- NumPy: random source, batch primality results
"""
import logging
import math
import operator
from collections import Counter
from functools import lru_cache

import numpy as np

from factor_errors import DomainError, InvalidInput, RetryLimitExceeded
from modular_arithmetic import MAX_UINT64, add_mod, _mul_mod, _power_mod

logger = logging.getLogger(__name__)

# Deterministic Miller-Rabin witnesses for all n < 2**64
WITNESSES: tuple[int, ...] = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

_PRIME_CACHE_SIZE = 1024


def clear_caches():
    """Clear the primality memoization cache."""
    _is_prime_cached.cache_clear()


# Miller-Rabin primality test
def is_prime(n: int) -> bool:
    """
    Decide primality of n exactly.

    Args:
        n: Integer below 2**64 (values below 2, negatives included, are not prime)

    Returns:
        True if n is prime

    Raises:
        DomainError: if n >= 2**64, where the witness set is not proven
    """
    n = operator.index(n)
    if n < 2:
        return False
    if n > MAX_UINT64:
        raise DomainError(f"{n} is outside the deterministic 64-bit range")
    return _is_prime_cached(n)


@lru_cache(maxsize=_PRIME_CACHE_SIZE)
def _is_prime_cached(n: int) -> bool:
    # trial division by the witnesses themselves
    for p in WITNESSES:
        if n == p:
            return True
        if n % p == 0:
            return False

    # write n-1 as d * 2^s
    d: int = n - 1
    s: int = 0
    while (d & 1) == 0:
        d >>= 1
        s += 1

    def check(a: int) -> bool:
        x: int = _power_mod(a, d, n)
        if x == 1 or x == n - 1:
            return True
        for _ in range(s - 1):
            x = _mul_mod(x, x, n)
            if x == n - 1:
                return True
        return False

    for a in WITNESSES:
        if a % n == 0:
            continue
        if not check(a):
            return False
    return True


def is_prime_array(values) -> np.ndarray:
    """Apply is_prime to every value; returns a boolean NumPy array."""
    return np.fromiter((is_prime(v) for v in values), dtype=bool)


def _check_target(n) -> int:
    if isinstance(n, (bool, np.bool_)):
        raise InvalidInput(f"cannot factor boolean {n!r}")
    try:
        n = operator.index(n)
    except TypeError as exc:
        raise InvalidInput(f"cannot factor non-integer {n!r}") from exc
    if n <= 0:
        raise InvalidInput(f"cannot factor non-positive integer {n}")
    if n > MAX_UINT64:
        raise InvalidInput(f"{n} does not fit in 64 bits")
    return n


def _strip_witness_primes(n: int) -> tuple[list[int], int]:
    """Divide out every witness prime; returns (factors found, remaining cofactor)."""
    factors: list[int] = []
    while (n & 1) == 0:
        factors.append(2)
        n >>= 1
    for p in WITNESSES[1:]:
        if n == 1:
            break
        while n % p == 0:
            factors.append(p)
            n //= p
    return factors, n


def _rho_cycle(n: int, c: int, x: int) -> int:
    """
    One Floyd tortoise-and-hare run on f(v) = v^2 + c (mod n).

    Returns gcd(|x - y|, n) at the first collision; n means the cycle was degenerate.
    """
    y: int = x
    d: int = 1
    while d == 1:
        x = add_mod(_mul_mod(x, x, n), c, n)
        y = add_mod(_mul_mod(y, y, n), c, n)
        y = add_mod(_mul_mod(y, y, n), c, n)
        d = math.gcd(x - y if x > y else y - x, n)
    return d


class FactorizationEngine:
    """
    Splits and factorizes 64-bit integers with a privately owned random source.

    An engine is not thread-safe; give each thread its own (see spawn()).
    """

    def __init__(self, seed: int | None = None, rng: np.random.Generator | None = None,
                 max_retries: int | None = None):
        """
        Args:
            seed: Seed for a fresh numpy Generator (ignored when rng is given)
            rng: Generator to own exclusively; mutually exclusive with seed
            max_retries: Optional ceiling on degenerate rho cycles per split.
                         None (default) retries forever, which never fails on
                         valid input; any ceiling makes split() incomplete.
        """
        if seed is not None and rng is not None:
            raise ValueError("pass either seed or rng, not both")
        if max_retries is not None and max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self._rng: np.random.Generator = rng if rng is not None else np.random.default_rng(seed)
        self.max_retries = max_retries

    def spawn(self) -> "FactorizationEngine":
        """Create an engine with an independent child random stream."""
        child = self._rng.spawn(1)[0]
        return FactorizationEngine(rng=child, max_retries=self.max_retries)

    def _draw(self, low: int, high: int) -> int:
        """Uniform integer in [low, high)."""
        return int(self._rng.integers(low, high, dtype=np.uint64))

    def split(self, n: int) -> int:
        """
        Find one non-trivial divisor of a composite n.

        Args:
            n: Composite integer below 2**64

        Returns:
            d with 1 < d < n and n % d == 0

        Raises:
            InvalidInput: if n is prime or has no non-trivial divisor
            RetryLimitExceeded: only when max_retries is set and exhausted
        """
        n = _check_target(n)
        if n < 4 or is_prime(n):
            raise InvalidInput(f"{n} has no non-trivial divisor")
        if (n & 1) == 0:
            return 2

        attempts = 0
        while True:
            c = self._draw(1, n)
            x = self._draw(0, n)
            d = _rho_cycle(n, c, x)
            if d != n:
                return d
            attempts += 1
            logger.debug("degenerate rho cycle for n=%d (c=%d, x0=%d), retry %d", n, c, x, attempts)
            if self.max_retries is not None and attempts >= self.max_retries:
                raise RetryLimitExceeded(n, attempts)

    def factorize(self, n: int) -> list[int]:
        """
        Factorize n into primes.

        Args:
            n: Integer with 1 <= n < 2**64

        Returns:
            Prime factors with multiplicity, sorted ascending (empty for n == 1)

        Raises:
            InvalidInput: if n is not a positive 64-bit integer
        """
        n = _check_target(n)
        factors, rest = _strip_witness_primes(n)

        pending: list[int] = [rest] if rest > 1 else []
        while pending:
            m = pending.pop()
            if is_prime(m):
                factors.append(m)
                continue
            d = self.split(m)
            logger.debug("split %d = %d * %d", m, d, m // d)
            pending.append(d)
            pending.append(m // d)

        factors.sort()
        return factors


def pollard_rho(n: int, seed: int | None = None, rng: np.random.Generator | None = None,
                max_retries: int | None = None) -> int:
    """Return a non-trivial divisor of composite n using a fresh engine."""
    return FactorizationEngine(seed=seed, rng=rng, max_retries=max_retries).split(n)


def factor(n: int, seed: int | None = None, rng: np.random.Generator | None = None,
           max_retries: int | None = None) -> list[int]:
    """
    Factorize n into a sorted list of primes (with multiplicity).

    A new engine is built per call, so concurrent calls share no random state.
    """
    return FactorizationEngine(seed=seed, rng=rng, max_retries=max_retries).factorize(n)


def factor_counts(n: int, **kwargs) -> Counter:
    """Prime factorization as {prime: exponent}."""
    return Counter(factor(n, **kwargs))


def divisor_count(n: int, **kwargs) -> int:
    """Number of positive divisors of n."""
    return math.prod(e + 1 for e in factor_counts(n, **kwargs).values())


def divisor_sum(n: int, **kwargs) -> int:
    """Sum of positive divisors of n."""
    return math.prod((p ** (e + 1) - 1) // (p - 1) for p, e in factor_counts(n, **kwargs).items())


# Example usage
if __name__ == "__main__":
    n = 600851475143
    print("Factors of", n, ":", factor(n))
