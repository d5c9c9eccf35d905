"""
counter_program.types.ints — bounded unsigned integer helpers.

Python ints are unbounded, so every quantity persisted in a fixed-width field
(counter value, lamports) is validated against an explicit cap. Addition is
*checked*: exceeding the cap raises `OverflowError`, never wraps.

Exports
-------
* Constants: `U8_MAX`, `U64_MAX`
* `to_u64(n)`
* `checked_add_u64(a, b)` → raises OverflowError above U64_MAX
"""

from __future__ import annotations

U8_MAX: int = (1 << 8) - 1
U64_MAX: int = (1 << 64) - 1
"""Maximum 64-bit unsigned integer."""


def to_u64(n: int, *, name: str = "value") -> int:
    """Validate `n` as a u64 and return it unchanged."""
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError(f"{name} must be int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"{name} must be non-negative")
    if n > U64_MAX:
        raise OverflowError(f"{name} exceeds u64")
    return n


def checked_add_u64(a: int, b: int) -> int:
    """
    Checked addition. Raises OverflowError if the sum exceeds U64_MAX.
    """
    to_u64(a, name="lhs")
    to_u64(b, name="rhs")
    s = a + b
    if s > U64_MAX:
        raise OverflowError(f"addition overflow: {a} + {b} > u64 max")
    return s


__all__ = ["U8_MAX", "U64_MAX", "to_u64", "checked_add_u64"]
