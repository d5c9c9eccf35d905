"""
counter_program.types.status — outcome of processing a request.

String forms:
  - str(ResultStatus.SUCCESS) -> "success"
  - ResultStatus.SUCCESS.code -> "SUCCESS"
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ResultStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def code(self) -> str:
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is ResultStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str, *, default: Optional["ResultStatus"] = None) -> "ResultStatus":
        """
        Parse a status leniently ("ok"/"success", "failed"/"fail"/"error").

        Raises:
            ValueError if parsing fails and no default is provided.
        """
        norm = (s or "").strip().lower()
        if norm in {"success", "ok", "passed"}:
            return cls.SUCCESS
        if norm in {"failed", "fail", "error", "rejected"}:
            return cls.FAILED
        if default is not None:
            return default
        raise ValueError(f"unknown ResultStatus: {s!r}")


__all__ = ["ResultStatus"]
