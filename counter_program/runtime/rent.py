"""
counter_program.runtime.rent — rent-exemption calculator.

An account stays alive indefinitely when it holds at least
`minimum_balance(data_len)` lamports:

    (ACCOUNT_STORAGE_OVERHEAD + data_len) * lamports_per_byte_year * exemption_threshold

With the defaults the 10-byte counter record needs 960_480 lamports.
"""

from __future__ import annotations

from dataclasses import dataclass

ACCOUNT_STORAGE_OVERHEAD: int = 128
DEFAULT_LAMPORTS_PER_BYTE_YEAR: int = 3480
DEFAULT_EXEMPTION_THRESHOLD: float = 2.0


@dataclass(frozen=True)
class Rent:
    lamports_per_byte_year: int = DEFAULT_LAMPORTS_PER_BYTE_YEAR
    exemption_threshold: float = DEFAULT_EXEMPTION_THRESHOLD

    def __post_init__(self) -> None:
        if self.lamports_per_byte_year < 0:
            raise ValueError("lamports_per_byte_year must be >= 0")
        if self.exemption_threshold < 0:
            raise ValueError("exemption_threshold must be >= 0")

    def minimum_balance(self, data_len: int) -> int:
        """Minimum lamports for an account of `data_len` bytes to be rent exempt."""
        if data_len < 0:
            raise ValueError("data_len must be >= 0")
        per_year = (ACCOUNT_STORAGE_OVERHEAD + data_len) * self.lamports_per_byte_year
        return int(per_year * self.exemption_threshold)

    def is_exempt(self, lamports: int, data_len: int) -> bool:
        return lamports >= self.minimum_balance(data_len)


__all__ = [
    "ACCOUNT_STORAGE_OVERHEAD",
    "DEFAULT_LAMPORTS_PER_BYTE_YEAR",
    "DEFAULT_EXEMPTION_THRESHOLD",
    "Rent",
]
