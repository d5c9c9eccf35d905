"""
counter_program.types.result — ProcessResult container.

`ProcessResult` is what the entrypoint hands back to its caller for a single
instruction: a status, the error (if any) and the program log lines emitted
while processing. It serializes to a JSON-friendly mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from ..errors import ProgramError, error_to_result_fields
from .status import ResultStatus


@dataclass(frozen=True)
class ProcessResult:
    status: ResultStatus
    error: Optional[ProgramError] = None
    logs: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, logs: Sequence[str] = ()) -> "ProcessResult":
        return cls(status=ResultStatus.SUCCESS, logs=tuple(logs))

    @classmethod
    def failed(cls, err: ProgramError, logs: Sequence[str] = ()) -> "ProcessResult":
        return cls(status=ResultStatus.FAILED, error=err, logs=tuple(logs))

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            out = error_to_result_fields(self.error)
        else:
            out = {"status": str(self.status)}
        out["logs"] = list(self.logs)
        return out


__all__ = ["ProcessResult"]
