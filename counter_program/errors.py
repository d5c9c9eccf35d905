"""
counter_program.errors — typed failures for the counter program and its host.

Every rejected request surfaces as exactly one of these exceptions. They are
converted into result fields at the entrypoint (see `error_to_result_fields`)
and never retried internally.

Hierarchy
---------
ProgramError (base)
 ├─ InvalidInstructionData   : unknown opcode / bad payload length
 ├─ NotEnoughAccountKeys     : fewer account handles than the operation needs
 ├─ InvalidAccountData       : stored bytes too short / malformed
 ├─ InvalidArgument          : argument rejected by a handler or the allocator
 ├─ MissingRequiredSignature : a required signer flag is absent
 ├─ IncorrectProgramId       : account not owned by / not the expected program
 ├─ InvalidSeeds             : derived address mismatch or on-curve result
 ├─ MaxSeedLengthExceeded    : too many seeds or a seed longer than 32 bytes
 ├─ ArithmeticOverflow       : value or balance addition out of u64 range
 ├─ AllocationError
 │   ├─ InsufficientFunds    : payer cannot fund the new account
 │   └─ AccountAlreadyInUse  : target address already holds an account
 ├─ InvalidRealloc           : data resize outside permitted bounds
 ├─ UnsupportedProgramId     : invocation of a program the host does not know
 ├─ UnbalancedInstruction    : lamports created or destroyed by an instruction
 └─ ReadonlyAccountModified  : a read-only handle was changed

These classes import nothing from the rest of the package so that the codec,
deriver and host runtime can all raise them without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ProgramError(Exception):
    """
    Base program error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_SEEDS').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "program error"
    code: str = "PROGRAM_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


# -------- malformed input ----------------------------------------------------


class InvalidInstructionData(ProgramError):
    def __init__(self, message: str = "invalid instruction data", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_INSTRUCTION_DATA", data=data)


class NotEnoughAccountKeys(ProgramError):
    def __init__(self, message: str = "not enough account keys", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_ENOUGH_ACCOUNT_KEYS", data=data)


class InvalidAccountData(ProgramError):
    def __init__(self, message: str = "invalid account data", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_ACCOUNT_DATA", data=data)


class InvalidArgument(ProgramError):
    def __init__(self, message: str = "invalid argument", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_ARGUMENT", data=data)


# -------- authorization / ownership / addressing -----------------------------


class MissingRequiredSignature(ProgramError):
    """
    A handle that must be a signer was not.

    Raised by handlers reading the payer's signer flag, by the allocation
    service when the new account is neither signed nor authorized by derived
    seeds, and by the ledger when a transaction signature is absent or bad.
    """
    def __init__(
        self,
        message: str = "missing required signature",
        *,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if address is not None:
            d.setdefault("address", address)
        super().__init__(message=message, code="MISSING_REQUIRED_SIGNATURE", data=d or None)


class IncorrectProgramId(ProgramError):
    def __init__(
        self,
        message: str = "incorrect program id",
        *,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if expected is not None:
            d.setdefault("expected", expected)
        if actual is not None:
            d.setdefault("actual", actual)
        super().__init__(message=message, code="INCORRECT_PROGRAM_ID", data=d or None)


class InvalidSeeds(ProgramError):
    def __init__(self, message: str = "invalid seeds", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_SEEDS", data=data)


class MaxSeedLengthExceeded(ProgramError):
    def __init__(self, message: str = "max seed length exceeded", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="MAX_SEED_LENGTH_EXCEEDED", data=data)


# -------- arithmetic ---------------------------------------------------------


class ArithmeticOverflow(ProgramError):
    def __init__(self, message: str = "arithmetic overflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ARITHMETIC_OVERFLOW", data=data)


# -------- allocation service -------------------------------------------------


class AllocationError(ProgramError):
    """Failure surfaced unchanged from the account allocation service."""


class InsufficientFunds(AllocationError):
    def __init__(
        self,
        message: str = "insufficient funds",
        *,
        needed: Optional[int] = None,
        available: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if needed is not None:
            d.setdefault("needed", needed)
        if available is not None:
            d.setdefault("available", available)
        super().__init__(message=message, code="INSUFFICIENT_FUNDS", data=d or None)


class AccountAlreadyInUse(AllocationError):
    def __init__(
        self,
        message: str = "account already in use",
        *,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if address is not None:
            d.setdefault("address", address)
        super().__init__(message=message, code="ACCOUNT_ALREADY_IN_USE", data=d or None)


# -------- host rules ---------------------------------------------------------


class InvalidRealloc(ProgramError):
    def __init__(self, message: str = "invalid realloc", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_REALLOC", data=data)


class UnsupportedProgramId(ProgramError):
    def __init__(self, message: str = "unsupported program id", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNSUPPORTED_PROGRAM_ID", data=data)


class UnbalancedInstruction(ProgramError):
    def __init__(
        self,
        message: str = "sum of account balances before and after instruction do not match",
        *,
        before: Optional[int] = None,
        after: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if before is not None:
            d.setdefault("before", before)
        if after is not None:
            d.setdefault("after", after)
        super().__init__(message=message, code="UNBALANCED_INSTRUCTION", data=d or None)


class ReadonlyAccountModified(ProgramError):
    def __init__(
        self,
        message: str = "instruction modified a read-only account",
        *,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if address is not None:
            d.setdefault("address", address)
        super().__init__(message=message, code="READONLY_ACCOUNT_MODIFIED", data=d or None)


# -------- helper utilities ---------------------------------------------------

_CATEGORIES = (
    ((InvalidInstructionData, NotEnoughAccountKeys, InvalidAccountData, InvalidArgument), "malformed_input"),
    ((MissingRequiredSignature,), "authorization"),
    ((IncorrectProgramId,), "ownership"),
    ((InvalidSeeds, MaxSeedLengthExceeded), "address"),
    ((ArithmeticOverflow,), "overflow"),
    ((AllocationError,), "allocation"),
)


def error_category(err: ProgramError) -> str:
    """Classify an error into its taxonomy bucket ('host' when none applies)."""
    for types_, name in _CATEGORIES:
        if isinstance(err, types_):
            return name
    return "host"


def error_to_result_fields(err: ProgramError) -> Dict[str, Any]:
    """
    Map a ProgramError to canonical result fields.

    Returns:
        {"status": "failed", "category": "...", "error": {code, message, data?}}
    """
    return {"status": "failed", "category": error_category(err), "error": err.to_dict()}


__all__ = [
    "ProgramError",
    "InvalidInstructionData",
    "NotEnoughAccountKeys",
    "InvalidAccountData",
    "InvalidArgument",
    "MissingRequiredSignature",
    "IncorrectProgramId",
    "InvalidSeeds",
    "MaxSeedLengthExceeded",
    "ArithmeticOverflow",
    "AllocationError",
    "InsufficientFunds",
    "AccountAlreadyInUse",
    "InvalidRealloc",
    "UnsupportedProgramId",
    "UnbalancedInstruction",
    "ReadonlyAccountModified",
    "error_category",
    "error_to_result_fields",
]
