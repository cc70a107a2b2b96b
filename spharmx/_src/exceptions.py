"""
spharmx Exception Classes
==========================

Errors raised by the grid descriptor and the spherical harmonic engine.
All of them are caller-visible and never recovered from internally.
"""

from typing import Optional, Sequence


class SpharmxError(ValueError):
    """Base exception class for all spharmx errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = f"{message}\nDetails: {details}" if details else message
        super().__init__(full_message)


class InvalidTruncationError(SpharmxError):
    """Truncation order outside [MIN_TRUNCATION, X // 2]."""

    def __init__(self, truncation: int, lower: int, upper: int):
        super().__init__(
            f"Invalid triangular truncation M={truncation}",
            f"M must satisfy {lower} <= M <= {upper} (X // 2)",
        )
        self.truncation = truncation
        self.lower = lower
        self.upper = upper


class TruncationNotSetError(SpharmxError):
    """A transform was requested before the truncation order was chosen."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: triangular truncation M has not been set",
            "call set_truncation(M) first and use the engine it returns",
        )
        self.operation = operation


class DimensionMismatchError(SpharmxError):
    """Input array extents do not match what the engine expects."""

    def __init__(self, item: str, expected: Sequence, actual: Sequence):
        super().__init__(
            f"Dimension mismatch for {item}: got {tuple(actual)}",
            f"Expected {tuple(expected)}",
        )
        self.item = item
        self.expected = tuple(expected)
        self.actual = tuple(actual)


class NonGlobalDomainError(SpharmxError):
    """The grid does not cover the whole sphere with a periodic longitude."""

    def __init__(self, reason: str):
        super().__init__("Not a global, zonally periodic grid", reason)
        self.reason = reason
