"""
counter_program.runtime.cpi — cross-program invocation with derived signers.

`invoke_signed(instruction, account_infos, signers_seeds, ...)` lets a program
call a built-in program (currently the system program) on behalf of accounts
it controls. Each entry in `signers_seeds` is re-derived in direct mode with
the *caller's* program id; the resulting addresses count as signers for the
callee. Everything else is checked against the caller's own handles:

- every account named by the instruction must be among `account_infos`
  (the callee program's account too) → NotEnoughAccountKeys
- a signer meta needs either a signing handle or a derived signer
  → MissingRequiredSignature
- a writable meta needs a writable handle → ReadonlyAccountModified
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Sequence

from ..errors import (
    MissingRequiredSignature,
    NotEnoughAccountKeys,
    ReadonlyAccountModified,
    UnsupportedProgramId,
)
from ..pda import Seed, create_program_address
from . import system
from .accounts import SYSTEM_PROGRAM_ID, AccountInfo, to_hex
from .context import MAX_INVOKE_DEPTH, InvokeContext
from .message import Instruction

Builtin = Callable[..., None]

BUILTIN_PROGRAMS: Dict[bytes, Builtin] = {
    SYSTEM_PROGRAM_ID: system.process_instruction,
}


@contextmanager
def _signed_as(infos: Sequence[AccountInfo], keys: set[bytes]) -> Iterator[None]:
    """Temporarily raise the signer flag on handles authorized by derived seeds."""
    raised = [info for info in infos if info.key in keys and not info.is_signer]
    for info in raised:
        info.is_signer = True
    try:
        yield
    finally:
        for info in raised:
            info.is_signer = False


def invoke_signed(
    instruction: Instruction,
    account_infos: Sequence[AccountInfo],
    signers_seeds: Sequence[Sequence[Seed]],
    *,
    caller_program_id: bytes,
    ctx: InvokeContext,
) -> None:
    callee = BUILTIN_PROGRAMS.get(instruction.program_id)
    if callee is None:
        raise UnsupportedProgramId(data={"program_id": to_hex(instruction.program_id)})
    if ctx.depth >= MAX_INVOKE_DEPTH:
        raise UnsupportedProgramId("max invoke depth reached", data={"depth": ctx.depth})

    by_key = {info.key: info for info in account_infos}
    if instruction.program_id not in by_key:
        raise NotEnoughAccountKeys(
            "callee program account not supplied",
            data={"program_id": to_hex(instruction.program_id)},
        )

    derived = {create_program_address(seeds, caller_program_id) for seeds in signers_seeds}

    callee_infos: List[AccountInfo] = []
    for meta in instruction.accounts:
        info = by_key.get(meta.pubkey)
        if info is None:
            raise NotEnoughAccountKeys(data={"missing": to_hex(meta.pubkey)})
        if meta.is_signer and not (info.is_signer or info.key in derived):
            raise MissingRequiredSignature(address=to_hex(info.key))
        if meta.is_writable and not info.is_writable:
            raise ReadonlyAccountModified(address=to_hex(info.key))
        callee_infos.append(info)

    ctx.logs.append(f"Program {to_hex(instruction.program_id)} invoke [{ctx.depth + 1}]")
    ctx.depth += 1
    try:
        with _signed_as(callee_infos, derived):
            callee(instruction.program_id, callee_infos, instruction.data, ctx=ctx)
    finally:
        ctx.depth -= 1
    ctx.logs.append(f"Program {to_hex(instruction.program_id)} success")


__all__ = ["BUILTIN_PROGRAMS", "invoke_signed"]
