"""
Command-line entrypoints for the counter program.

- demo   : initialize → increment → close against an in-memory ledger
- derive : counter address and bump for an owner
- decode : decode an instruction payload
- rent   : rent-exempt minimum for a data length

Usage:
  python -m counter_program.cli demo --increment-by 101
  counter-program derive 0x<owner-hex>
"""

from .main import app

__all__ = ["app"]
