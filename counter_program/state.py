"""
counter_program.state — fixed-layout binary codec for the counter record.

Layout (10 bytes, little-endian)
--------------------------------
    offset 0..7   value           u64
    offset 8      is_initialized  u8 (0/1; any non-zero byte decodes as true)
    offset 9      bump            u8

The record is written into the raw data buffer of the counter account. Hot
paths (increment) read `bump` and `value` straight from their offsets with
`read_bump` / `read_value` / `write_value` instead of decoding the whole record.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from .errors import InvalidAccountData
from .types.ints import U8_MAX, to_u64

# Domain tag for counter address derivation.
COUNTER_SEED: bytes = b"counter"

VALUE_OFFSET: int = 0
IS_INITIALIZED_OFFSET: int = 8
BUMP_OFFSET: int = 9

_U64 = struct.Struct("<Q")

Buffer = Union[bytes, bytearray, memoryview]


def _require_len(buf: Buffer, n: int) -> None:
    if len(buf) < n:
        raise InvalidAccountData(
            "account data too small for counter record",
            data={"len": len(buf), "required": n},
        )


@dataclass(frozen=True)
class CounterState:
    """
    Decoded counter record.

    Invariants:
    - value is a u64
    - bump is a u8
    """
    value: int
    is_initialized: bool
    bump: int

    LEN = 10

    def __post_init__(self) -> None:
        to_u64(self.value, name="value")
        if not isinstance(self.bump, int) or not 0 <= self.bump <= U8_MAX:
            raise ValueError("bump must be a u8")

    @classmethod
    def new(cls, value: int, bump: int) -> "CounterState":
        """A freshly initialized record."""
        return cls(value=value, is_initialized=True, bump=bump)

    def pack(self) -> bytes:
        out = bytearray(self.LEN)
        self.pack_into(out)
        return bytes(out)

    def pack_into(self, dst: bytearray | memoryview) -> None:
        """Write the record into the first LEN bytes of `dst`."""
        _require_len(dst, self.LEN)
        _U64.pack_into(dst, VALUE_OFFSET, self.value)
        dst[IS_INITIALIZED_OFFSET] = 1 if self.is_initialized else 0
        dst[BUMP_OFFSET] = self.bump

    @classmethod
    def unpack(cls, src: Buffer) -> "CounterState":
        """Decode the first LEN bytes of `src`."""
        _require_len(src, cls.LEN)
        (value,) = _U64.unpack_from(src, VALUE_OFFSET)
        return cls(
            value=value,
            is_initialized=src[IS_INITIALIZED_OFFSET] != 0,
            bump=src[BUMP_OFFSET],
        )


# --------------------------------------------------------------------------- #
# Field accessors
# --------------------------------------------------------------------------- #


def read_bump(src: Buffer) -> int:
    _require_len(src, CounterState.LEN)
    return src[BUMP_OFFSET]


def read_value(src: Buffer) -> int:
    _require_len(src, CounterState.LEN)
    return _U64.unpack_from(src, VALUE_OFFSET)[0]


def write_value(dst: bytearray | memoryview, value: int) -> None:
    """Overwrite only bytes 0..7."""
    _require_len(dst, CounterState.LEN)
    _U64.pack_into(dst, VALUE_OFFSET, to_u64(value))


__all__ = [
    "COUNTER_SEED",
    "VALUE_OFFSET",
    "IS_INITIALIZED_OFFSET",
    "BUMP_OFFSET",
    "CounterState",
    "read_bump",
    "read_value",
    "write_value",
]
