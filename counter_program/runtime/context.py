"""
counter_program.runtime.context — per-invocation context threaded to handlers.

Holds what a program may read from its host besides the account handles:
the rent parameters and a sink for program log lines. One context is created
per top-level instruction and shared with nested (cross-program) invocations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..logging import get_logger
from .rent import Rent

log = get_logger(__name__)

MAX_INVOKE_DEPTH: int = 4


@dataclass
class InvokeContext:
    rent: Rent = field(default_factory=Rent)
    logs: List[str] = field(default_factory=list)
    depth: int = 1

    def msg(self, text: str) -> None:
        """Record a program log line (kept in the result and mirrored to DEBUG)."""
        self.logs.append(f"Program log: {text}")
        log.debug(text)


__all__ = ["InvokeContext", "MAX_INVOKE_DEPTH"]
