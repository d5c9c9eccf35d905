"""Small value types shared by the processor, entrypoint and host runtime."""

from .ints import U8_MAX, U64_MAX, checked_add_u64, to_u64
from .result import ProcessResult
from .status import ResultStatus

__all__ = [
    "U8_MAX",
    "U64_MAX",
    "checked_add_u64",
    "to_u64",
    "ProcessResult",
    "ResultStatus",
]
