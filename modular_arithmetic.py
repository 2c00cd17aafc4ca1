"""
Overflow-safe modular arithmetic over the unsigned 64-bit domain.

Every modulus handled here lies in [1, 2**64 - 1]. Two renditions of the
same primitives are provided:

1. Scalar: mul_mod / power_mod on Python ints. Residues are reduced first,
   so the product of two residues is an exact integer of at most 128 bits
   and is never truncated. mul_mod_double_add is the portable variant that
   never holds a value wider than the modulus.
2. Vectorized: mul_mod_array / power_mod_array on NumPy uint64 arrays.
   NumPy uint64 arithmetic wraps silently, so these kernels use
   double-and-add with wraparound-free modular addition. They double as the
   independent reference for the scalar kernels in the test suite.
"""

import operator
from typing import List

import numpy as np

from factor_errors import DomainError

MAX_UINT64: int = (1 << 64) - 1


def _check_modulus(m) -> int:
    m = operator.index(m)
    if m <= 0:
        raise DomainError(f"modulus must be positive, got {m}")
    if m > MAX_UINT64:
        raise DomainError(f"modulus {m} does not fit in 64 bits")
    return m


# ============================================================================
# PART 1: SCALAR KERNELS
# ============================================================================

def add_mod(a: int, b: int, m: int) -> int:
    """(a + b) mod m for residues 0 <= a, b < m without forming a + b >= 2**64."""
    gap = m - b
    if a >= gap:
        return a - gap
    return a + b


def mul_mod(a: int, b: int, m: int) -> int:
    """
    Compute (a * b) mod m exactly.

    Args:
        a, b: Operands (reduced modulo m first, so any integer is accepted)
        m: Modulus, 1 <= m < 2**64

    Returns:
        The residue r with 0 <= r < m

    Raises:
        DomainError: if m is not a positive 64-bit modulus
    """
    m = _check_modulus(m)
    return _mul_mod(operator.index(a) % m, operator.index(b) % m, m)


def _mul_mod(a: int, b: int, m: int) -> int:
    # a, b < m < 2**64, so a * b < 2**128
    return (a * b) % m


def mul_mod_double_add(a: int, b: int, m: int) -> int:
    """Double-and-add (a * b) mod m; no intermediate ever reaches m."""
    m = _check_modulus(m)
    a = operator.index(a) % m
    b = operator.index(b) % m
    result: int = 0
    while b:
        if b & 1:
            result = add_mod(result, a, m)
        a = add_mod(a, a, m)
        b >>= 1
    return result


def power_mod(a: int, e: int, m: int) -> int:
    """
    Compute a**e mod m by binary exponentiation over mul_mod.

    power_mod(a, 0, m) is 1 % m, including a == 0.

    Raises:
        DomainError: if m is not a positive 64-bit modulus or e < 0
    """
    m = _check_modulus(m)
    e = operator.index(e)
    if e < 0:
        raise DomainError(f"exponent must be non-negative, got {e}")
    return _power_mod(operator.index(a) % m, e, m)


def _power_mod(base: int, e: int, m: int) -> int:
    result: int = 1 % m
    while e:
        if e & 1:
            result = _mul_mod(result, base, m)
        base = _mul_mod(base, base, m)
        e >>= 1
    return result


# ============================================================================
# PART 2: VECTORIZED KERNELS (NumPy uint64)
# ============================================================================

_ONE = np.uint64(1)


def _to_uint64(values, name: str) -> np.ndarray:
    """Convert to uint64, rejecting negatives instead of letting them wrap."""
    try:
        arr = np.asarray(values)
        if arr.dtype.kind in 'ifO' and np.any(arr < 0):
            raise DomainError(f"{name} must be non-negative")
        return arr.astype(np.uint64)
    except OverflowError as exc:
        raise DomainError(f"{name} must fit in 64 unsigned bits") from exc


def _add_mod_vec(x: np.ndarray, y: np.ndarray, m: np.ndarray) -> np.ndarray:
    """Vectorized add_mod; the branch not taken may wrap and is discarded."""
    gap = m - y
    return np.where(x >= gap, x - gap, x + y)


def _mul_mod_vec(a: np.ndarray, b: np.ndarray, m: np.ndarray) -> np.ndarray:
    result = np.zeros(np.shape(a), dtype=np.uint64)
    while np.any(b):
        odd = (b & _ONE) == _ONE
        result = np.where(odd, _add_mod_vec(result, a, m), result)
        a = _add_mod_vec(a, a, m)
        b = b >> _ONE
    return result


def mul_mod_array(a, b, m) -> np.ndarray:
    """
    Element-wise (a * b) mod m over broadcast uint64 arrays.

    Args:
        a, b: Array-likes of non-negative integers below 2**64
        m: Array-like of moduli (broadcast against a and b)

    Returns:
        uint64 array of residues with the broadcast shape

    Raises:
        DomainError: if any modulus is zero or any input is negative
    """
    a, b, m = np.broadcast_arrays(_to_uint64(a, "operand"), _to_uint64(b, "operand"), _to_uint64(m, "modulus"))
    if np.any(m == 0):
        raise DomainError("modulus must be positive")
    with np.errstate(over='ignore'):
        return _mul_mod_vec(a % m, b % m, m)


def power_mod_array(a, e, m) -> np.ndarray:
    """Element-wise a**e mod m over broadcast uint64 arrays."""
    a, e, m = np.broadcast_arrays(_to_uint64(a, "base"), _to_uint64(e, "exponent"), _to_uint64(m, "modulus"))
    if np.any(m == 0):
        raise DomainError("modulus must be positive")
    with np.errstate(over='ignore'):
        result = np.ones(np.shape(a), dtype=np.uint64) % m
        base = a % m
        while np.any(e):
            odd = (e & _ONE) == _ONE
            result = np.where(odd, _mul_mod_vec(result, base, m), result)
            base = _mul_mod_vec(base, base, m)
            e = e >> _ONE
    return result


__all__: List[str] = [
    'MAX_UINT64',
    'add_mod',
    'mul_mod',
    'mul_mod_double_add',
    'power_mod',
    'mul_mod_array',
    'power_mod_array',
]
