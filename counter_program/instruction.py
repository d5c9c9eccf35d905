"""
counter_program.instruction — request payload decoding.

Payload layout
--------------
    byte 0      opcode: 0 = InitializeCounter, 1 = IncrementCounter, 2 = CloseCounter
    bytes 1..8  increment_by (u64 LE), IncrementCounter only, exact length

Account order per opcode
------------------------
    InitializeCounter  [payer (signer, writable), counter (writable), system program]
    IncrementCounter   [payer (signer), counter (writable)]
    CloseCounter       [payer (signer), counter (writable), recipient (writable)]

`CounterInstruction.unpack` is pure; `pack()` is the inverse used by clients.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar, Union

from .errors import InvalidInstructionData
from .types.ints import to_u64

_U64 = struct.Struct("<Q")


class CounterInstruction:
    """Base for the three counter operations."""

    OPCODE: ClassVar[int]

    def pack(self) -> bytes:
        return bytes([self.OPCODE])

    @staticmethod
    def unpack(data: Union[bytes, bytearray, memoryview]) -> "CounterInstruction":
        if len(data) == 0:
            raise InvalidInstructionData("empty instruction data")
        opcode, rest = data[0], bytes(data[1:])

        if opcode == InitializeCounter.OPCODE:
            return InitializeCounter()
        if opcode == IncrementCounter.OPCODE:
            if len(rest) != _U64.size:
                raise InvalidInstructionData(
                    "increment_by must be exactly 8 bytes",
                    data={"len": len(rest)},
                )
            (increment_by,) = _U64.unpack(rest)
            return IncrementCounter(increment_by=increment_by)
        if opcode == CloseCounter.OPCODE:
            return CloseCounter()
        raise InvalidInstructionData("unknown opcode", data={"opcode": opcode})


@dataclass(frozen=True)
class InitializeCounter(CounterInstruction):
    OPCODE: ClassVar[int] = 0


@dataclass(frozen=True)
class IncrementCounter(CounterInstruction):
    OPCODE: ClassVar[int] = 1

    increment_by: int

    def __post_init__(self) -> None:
        to_u64(self.increment_by, name="increment_by")

    def pack(self) -> bytes:
        return bytes([self.OPCODE]) + _U64.pack(self.increment_by)


@dataclass(frozen=True)
class CloseCounter(CounterInstruction):
    OPCODE: ClassVar[int] = 2


__all__ = [
    "CounterInstruction",
    "InitializeCounter",
    "IncrementCounter",
    "CloseCounter",
]
