"""
counter_program.runtime.system — the built-in system program (allocation service).

Only one system instruction is needed by the counter program:

    CreateAccount { lamports: u64, space: u64, owner: [u8; 32] }

Payload (52 bytes, little-endian): u32 tag (0) | u64 lamports | u64 space | owner.
Accounts: [funding account (signer, writable), new account (signer, writable)].

The new account "signs" either with a real signature or, when created by a
program, through derived seeds presented to `runtime.cpi.invoke_signed`.

Failure modes are surfaced unchanged to the calling program:
  - funding / new account not a signer → MissingRequiredSignature
  - new account already funded, holding data, or owned by a program → AccountAlreadyInUse
  - funding account cannot cover `lamports` → InsufficientFunds
  - space above the permitted maximum → InvalidArgument
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from ..errors import (
    AccountAlreadyInUse,
    InsufficientFunds,
    InvalidArgument,
    InvalidInstructionData,
    MissingRequiredSignature,
    NotEnoughAccountKeys,
)
from ..logging import get_logger
from .accounts import (
    MAX_PERMITTED_DATA_LENGTH,
    SYSTEM_PROGRAM_ID,
    AccountInfo,
    ensure_address,
    to_hex,
)
from .context import InvokeContext
from .message import AccountMeta, Instruction

log = get_logger(__name__)

CREATE_ACCOUNT_TAG: int = 0
_CREATE_ACCOUNT = struct.Struct("<IQQ32s")


@dataclass(frozen=True)
class CreateAccount:
    lamports: int
    space: int
    owner: bytes

    def pack(self) -> bytes:
        return _CREATE_ACCOUNT.pack(CREATE_ACCOUNT_TAG, self.lamports, self.space, self.owner)

    @classmethod
    def unpack(cls, data: bytes) -> "CreateAccount":
        if len(data) != _CREATE_ACCOUNT.size:
            raise InvalidInstructionData("bad system instruction length", data={"len": len(data)})
        tag, lamports, space, owner = _CREATE_ACCOUNT.unpack(data)
        if tag != CREATE_ACCOUNT_TAG:
            raise InvalidInstructionData("unsupported system instruction", data={"tag": tag})
        return cls(lamports=lamports, space=space, owner=owner)


def create_account(
    from_pubkey: bytes, to_pubkey: bytes, lamports: int, space: int, owner: bytes
) -> Instruction:
    """Build a CreateAccount instruction for the system program."""
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=[
            AccountMeta.writable(from_pubkey, signer=True),
            AccountMeta.writable(to_pubkey, signer=True),
        ],
        data=CreateAccount(lamports, space, ensure_address(owner, name="owner")).pack(),
    )


def _create_account(funder: AccountInfo, new: AccountInfo, ix: CreateAccount, ctx: InvokeContext) -> None:
    if not funder.is_signer:
        raise MissingRequiredSignature("funding account must sign", address=to_hex(funder.key))
    if not new.is_signer:
        raise MissingRequiredSignature("new account must sign", address=to_hex(new.key))
    if new.lamports > 0 or not new.data_is_empty() or new.owner != SYSTEM_PROGRAM_ID:
        raise AccountAlreadyInUse(address=to_hex(new.key))
    if ix.space > MAX_PERMITTED_DATA_LENGTH:
        raise InvalidArgument("requested space too large", data={"space": ix.space})
    if not funder.data_is_empty():
        raise InvalidArgument("funding account must not carry data")
    if funder.lamports < ix.lamports:
        raise InsufficientFunds(needed=ix.lamports, available=funder.lamports)

    new.realloc(ix.space)
    new.assign(ix.owner)
    funder.lamports -= ix.lamports
    new.lamports += ix.lamports
    ctx.logs.append(f"Program log: created account {to_hex(new.key)} space={ix.space}")


def process_instruction(
    program_id: bytes,
    accounts: Sequence[AccountInfo],
    data: bytes,
    *,
    ctx: InvokeContext,
) -> None:
    """Execute one system instruction against `accounts`."""
    ix = CreateAccount.unpack(data)
    if len(accounts) < 2:
        raise NotEnoughAccountKeys()
    _create_account(accounts[0], accounts[1], ix, ctx)
    log.debug(
        "system create_account",
        extra={"funder": to_hex(accounts[0].key), "new": to_hex(accounts[1].key), "lamports": ix.lamports},
    )


__all__ = ["CREATE_ACCOUNT_TAG", "CreateAccount", "create_account", "process_instruction"]
