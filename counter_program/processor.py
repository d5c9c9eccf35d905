"""
counter_program.processor — validate and apply counter instructions.

`Processor.process(program_id, accounts, data, ctx=...)` decodes the payload
and routes it to one handler:

  - InitializeCounter → create the counter account at the payer's derived address
  - IncrementCounter  → checked in-place addition to the stored value
  - CloseCounter      → drain the account to a recipient and hand it back to the system program

Handlers raise the first `ProgramError` they hit and perform all validation
before their first write, except where a failing callee (the allocator) rejects
the request itself. Rolling back partial writes is the entrypoint's job.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .errors import (
    ArithmeticOverflow,
    IncorrectProgramId,
    InvalidArgument,
    InvalidSeeds,
    MissingRequiredSignature,
)
from .instruction import CloseCounter, CounterInstruction, IncrementCounter, InitializeCounter
from .logging import get_logger
from .pda import counter_address, counter_seeds, create_program_address
from .runtime import system
from .runtime.accounts import SYSTEM_PROGRAM_ID, AccountInfo, next_account_info, to_hex
from .runtime.context import InvokeContext
from .runtime.cpi import invoke_signed
from .state import COUNTER_SEED, CounterState, read_bump, read_value, write_value
from .types.ints import checked_add_u64

log = get_logger(__name__)


def _require_signer(info: AccountInfo) -> None:
    if not info.is_signer:
        raise MissingRequiredSignature("payer must sign", address=to_hex(info.key))


def _require_owned(info: AccountInfo, program_id: bytes) -> None:
    if info.owner != program_id:
        raise IncorrectProgramId(
            "counter account not owned by this program",
            expected=to_hex(program_id),
            actual=to_hex(info.owner),
        )


class Processor:
    COUNTER_ACCOUNT_SPACE = CounterState.LEN

    @classmethod
    def process(
        cls,
        program_id: bytes,
        accounts: Sequence[AccountInfo],
        data: bytes,
        ctx: Optional[InvokeContext] = None,
    ) -> None:
        ctx = ctx or InvokeContext()
        instruction = CounterInstruction.unpack(data)

        if isinstance(instruction, InitializeCounter):
            cls.process_initialize_counter(program_id, accounts, ctx)
        elif isinstance(instruction, IncrementCounter):
            cls.process_increment_counter(program_id, accounts, instruction.increment_by, ctx)
        elif isinstance(instruction, CloseCounter):
            cls.process_close_counter(program_id, accounts, ctx)

    @classmethod
    def process_initialize_counter(
        cls, program_id: bytes, accounts: Sequence[AccountInfo], ctx: InvokeContext
    ) -> None:
        accounts_iter = iter(accounts)
        payer = next_account_info(accounts_iter)
        counter = next_account_info(accounts_iter)
        system_account = next_account_info(accounts_iter)

        _require_signer(payer)
        if system_account.key != SYSTEM_PROGRAM_ID:
            raise IncorrectProgramId(
                "expected the system program",
                expected=to_hex(SYSTEM_PROGRAM_ID),
                actual=to_hex(system_account.key),
            )

        lamports = ctx.rent.minimum_balance(cls.COUNTER_ACCOUNT_SPACE)
        _, bump = counter_address(payer.key, program_id)

        # The allocator rejects `counter` unless it is exactly the derived address.
        invoke_signed(
            system.create_account(
                payer.key, counter.key, lamports, cls.COUNTER_ACCOUNT_SPACE, program_id
            ),
            [payer, counter, system_account],
            [counter_seeds(payer.key, bump)],
            caller_program_id=program_id,
            ctx=ctx,
        )
        ctx.msg("Create Counter Account - success")

        CounterState.new(0, bump).pack_into(counter.data)
        ctx.msg("Initialize Account's State - success")
        log.debug(
            "counter initialized",
            extra={"counter": to_hex(counter.key), "bump": bump, "lamports": lamports},
        )

    @classmethod
    def process_increment_counter(
        cls,
        program_id: bytes,
        accounts: Sequence[AccountInfo],
        increment_by: int,
        ctx: InvokeContext,
    ) -> None:
        accounts_iter = iter(accounts)
        payer = next_account_info(accounts_iter)
        counter = next_account_info(accounts_iter)

        _require_signer(payer)
        _require_owned(counter, program_id)

        # Stored bump: one hash instead of a bump search.
        bump = read_bump(counter.data)
        expected = create_program_address([COUNTER_SEED, payer.key, bytes([bump])], program_id)
        if counter.key != expected:
            raise InvalidSeeds(
                "counter address does not match payer seeds",
                data={"expected": to_hex(expected), "actual": to_hex(counter.key)},
            )

        value = read_value(counter.data)
        try:
            new_value = checked_add_u64(value, increment_by)
        except OverflowError:
            raise ArithmeticOverflow(data={"value": value, "increment_by": increment_by}) from None

        write_value(counter.data, new_value)
        ctx.msg(f"Counter incremented: {value} -> {new_value}")

    @classmethod
    def process_close_counter(
        cls, program_id: bytes, accounts: Sequence[AccountInfo], ctx: InvokeContext
    ) -> None:
        accounts_iter = iter(accounts)
        payer = next_account_info(accounts_iter)
        counter = next_account_info(accounts_iter)

        _require_signer(payer)
        _require_owned(counter, program_id)

        recipient = next_account_info(accounts_iter)
        if recipient is counter or recipient.key == counter.key:
            raise InvalidArgument("recipient must differ from the counter account")

        try:
            recipient_balance = checked_add_u64(recipient.lamports, counter.lamports)
        except OverflowError:
            raise ArithmeticOverflow(
                data={"recipient": recipient.lamports, "counter": counter.lamports}
            ) from None

        reclaimed = counter.lamports
        counter.realloc(0)
        recipient.lamports = recipient_balance
        counter.lamports = 0
        counter.assign(SYSTEM_PROGRAM_ID)
        ctx.msg(f"Counter closed, {reclaimed} lamports reclaimed")


__all__ = ["Processor"]
