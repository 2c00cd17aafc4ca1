"""
Exception hierarchy for the factorization library.

All errors are raised synchronously at the boundary of a public operation.
Degenerate Pollard rho cycles are retried internally and never show up here.
"""


class FactorizationError(Exception):
    """Base class for every error raised by this library."""


class DomainError(FactorizationError, ValueError):
    """An arithmetic precondition was violated (zero modulus, negative exponent, ...)."""


class InvalidInput(FactorizationError, ValueError):
    """Factorization or splitting was requested for an unsupported value."""


class RetryLimitExceeded(FactorizationError, RuntimeError):
    """Raised only when an explicit ``max_retries`` ceiling is configured and hit."""

    def __init__(self, n: int, attempts: int):
        super().__init__(f"Pollard rho gave up on {n} after {attempts} degenerate cycles")
        self.n = n
        self.attempts = attempts


__all__ = [
    'FactorizationError',
    'DomainError',
    'InvalidInput',
    'RetryLimitExceeded',
]
