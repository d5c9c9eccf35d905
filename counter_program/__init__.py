"""
Counter program — a minimal on-ledger state machine with an in-memory host.

This package exposes only lightweight metadata at import time. The processor,
host runtime and CLI should be imported explicitly from their modules.
"""

from .version import __version__, git_describe

__all__ = ["__version__", "git_describe"]
