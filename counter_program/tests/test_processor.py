"""
Processor and entrypoint tests against hand-built account handles.

These run without a ledger: each test wires AccountInfo handles the way a host
would and inspects them after the call.
"""

from __future__ import annotations

from typing import List, Tuple

import pytest

from counter_program import processor as processor_mod
from counter_program.entrypoint import process_instruction
from counter_program.errors import (
    AccountAlreadyInUse,
    ArithmeticOverflow,
    IncorrectProgramId,
    InsufficientFunds,
    InvalidAccountData,
    InvalidArgument,
    InvalidInstructionData,
    InvalidSeeds,
    MissingRequiredSignature,
    NotEnoughAccountKeys,
)
from counter_program.instruction import CloseCounter, IncrementCounter, InitializeCounter
from counter_program.pda import counter_address
from counter_program.processor import Processor
from counter_program.runtime.accounts import LAMPORTS_PER_SOL, SYSTEM_PROGRAM_ID, AccountInfo
from counter_program.runtime.context import InvokeContext
from counter_program.state import CounterState
from counter_program.types.ints import U64_MAX
from counter_program.types.status import ResultStatus

PROGRAM_ID = b"\x5a" * 32
PAYER = b"\xa1" * 32
OTHER = b"\xb2" * 32
RENT_10 = 960_480


def _payer(lamports: int = 5 * LAMPORTS_PER_SOL, *, signer: bool = True) -> AccountInfo:
    return AccountInfo(PAYER, is_signer=signer, is_writable=True, lamports=lamports)


def _system() -> AccountInfo:
    return AccountInfo(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False, lamports=1, executable=True)


def _empty_slot(owner_key: bytes = PAYER) -> AccountInfo:
    pda, _ = counter_address(owner_key, PROGRAM_ID)
    return AccountInfo(pda, is_signer=False, is_writable=True)


def _live_counter(value: int = 0, *, owner_key: bytes = PAYER) -> AccountInfo:
    pda, bump = counter_address(owner_key, PROGRAM_ID)
    return AccountInfo(
        pda,
        is_signer=False,
        is_writable=True,
        lamports=RENT_10,
        data=bytearray(CounterState.new(value, bump).pack()),
        owner=PROGRAM_ID,
    )


def _state(info: AccountInfo) -> Tuple[int, bytes, bytes]:
    return info.lamports, bytes(info.data), info.owner


# ---------------------------------------------------------------------------
# Initialize
# ---------------------------------------------------------------------------


def test_initialize_creates_rent_exempt_record():
    payer, slot, system = _payer(), _empty_slot(), _system()
    ctx = InvokeContext()
    Processor.process(PROGRAM_ID, [payer, slot, system], InitializeCounter().pack(), ctx)

    _, bump = counter_address(PAYER, PROGRAM_ID)
    assert slot.owner == PROGRAM_ID
    assert slot.lamports == RENT_10
    assert bytes(slot.data) == CounterState.new(0, bump).pack()
    assert payer.lamports == 5 * LAMPORTS_PER_SOL - RENT_10
    assert "Program log: Create Counter Account - success" in ctx.logs
    assert "Program log: Initialize Account's State - success" in ctx.logs
    # derived signer flag is dropped again after the nested call
    assert slot.is_signer is False


def test_initialize_requires_payer_signature():
    with pytest.raises(MissingRequiredSignature):
        Processor.process(PROGRAM_ID, [_payer(signer=False), _empty_slot(), _system()], b"\x00")


def test_initialize_rejects_non_system_third_account():
    bogus = AccountInfo(b"\x09" * 32, is_signer=False, is_writable=False)
    with pytest.raises(IncorrectProgramId):
        Processor.process(PROGRAM_ID, [_payer(), _empty_slot(), bogus], b"\x00")


def test_initialize_rejects_slot_not_derived_from_payer():
    slot = _empty_slot(owner_key=OTHER)
    with pytest.raises(MissingRequiredSignature):
        Processor.process(PROGRAM_ID, [_payer(), slot, _system()], b"\x00")


def test_initialize_twice_is_rejected():
    slot = _live_counter(3)
    with pytest.raises(AccountAlreadyInUse):
        Processor.process(PROGRAM_ID, [_payer(), slot, _system()], b"\x00")


def test_initialize_underfunded_payer():
    with pytest.raises(InsufficientFunds) as ei:
        Processor.process(PROGRAM_ID, [_payer(RENT_10 - 1), _empty_slot(), _system()], b"\x00")
    assert ei.value.data == {"needed": RENT_10, "available": RENT_10 - 1}


@pytest.mark.parametrize("n", [0, 1, 2])
def test_initialize_not_enough_accounts(n: int):
    handles: List[AccountInfo] = [_payer(), _empty_slot(), _system()][:n]
    with pytest.raises(NotEnoughAccountKeys):
        Processor.process(PROGRAM_ID, handles, b"\x00")


def test_bad_payload_rejected_before_accounts_are_read():
    with pytest.raises(InvalidInstructionData):
        Processor.process(PROGRAM_ID, [], b"\x07")


# ---------------------------------------------------------------------------
# Increment
# ---------------------------------------------------------------------------


def test_increment_by_101():
    payer, counter = _payer(), _live_counter(0)
    before = counter.lamports
    Processor.process(PROGRAM_ID, [payer, counter], IncrementCounter(101).pack())
    assert CounterState.unpack(counter.data).value == 101
    assert counter.lamports == before
    assert len(counter.data) == CounterState.LEN


def test_increment_accumulates():
    payer, counter = _payer(), _live_counter(0)
    for n in (5, 7, 0):
        Processor.process(PROGRAM_ID, [payer, counter], IncrementCounter(n).pack())
    decoded = CounterState.unpack(counter.data)
    assert decoded.value == 12
    assert decoded.is_initialized


def test_increment_overflow_leaves_value_unchanged():
    payer, counter = _payer(), _live_counter(U64_MAX - 1)
    snapshot = _state(counter)
    with pytest.raises(ArithmeticOverflow):
        Processor.process(PROGRAM_ID, [payer, counter], IncrementCounter(2).pack())
    assert _state(counter) == snapshot

    Processor.process(PROGRAM_ID, [payer, counter], IncrementCounter(1).pack())
    assert CounterState.unpack(counter.data).value == U64_MAX


def test_increment_rejects_foreign_owner():
    counter = _live_counter(9)
    counter.owner = b"\x33" * 32
    snapshot = _state(counter)
    with pytest.raises(IncorrectProgramId):
        Processor.process(PROGRAM_ID, [_payer(), counter], IncrementCounter(1).pack())
    assert _state(counter) == snapshot


def test_increment_rejects_someone_elses_counter():
    counter = _live_counter(4, owner_key=OTHER)
    with pytest.raises(InvalidSeeds):
        Processor.process(PROGRAM_ID, [_payer(), counter], IncrementCounter(1).pack())
    assert CounterState.unpack(counter.data).value == 4


def test_increment_requires_payer_signature():
    with pytest.raises(MissingRequiredSignature):
        Processor.process(PROGRAM_ID, [_payer(signer=False), _live_counter()], IncrementCounter(1).pack())


def test_increment_short_record():
    counter = _live_counter()
    del counter.data[9:]
    with pytest.raises(InvalidAccountData):
        Processor.process(PROGRAM_ID, [_payer(), counter], IncrementCounter(1).pack())


# ---------------------------------------------------------------------------
# Close
# ---------------------------------------------------------------------------


def test_close_moves_lamports_and_releases_account():
    payer, counter = _payer(), _live_counter(101)
    recipient = AccountInfo(OTHER, is_signer=False, is_writable=True, lamports=7)
    Processor.process(PROGRAM_ID, [payer, counter, recipient], CloseCounter().pack())

    assert recipient.lamports == 7 + RENT_10
    assert counter.lamports == 0
    assert counter.data_is_empty()
    assert counter.owner == SYSTEM_PROGRAM_ID


def test_close_recipient_may_be_payer():
    payer, counter = _payer(), _live_counter()
    start = payer.lamports
    Processor.process(PROGRAM_ID, [payer, counter, payer], CloseCounter().pack())
    assert payer.lamports == start + RENT_10


def test_close_rejects_counter_as_recipient():
    counter = _live_counter()
    snapshot = _state(counter)
    with pytest.raises(InvalidArgument):
        Processor.process(PROGRAM_ID, [_payer(), counter, counter], CloseCounter().pack())
    assert _state(counter) == snapshot


def test_close_recipient_overflow_checked_before_mutation():
    counter = _live_counter()
    recipient = AccountInfo(OTHER, is_signer=False, is_writable=True, lamports=U64_MAX)
    snapshot = _state(counter)
    with pytest.raises(ArithmeticOverflow):
        Processor.process(PROGRAM_ID, [_payer(), counter, recipient], CloseCounter().pack())
    assert _state(counter) == snapshot
    assert recipient.lamports == U64_MAX


def test_close_rejects_foreign_owner():
    counter = _live_counter()
    counter.owner = SYSTEM_PROGRAM_ID
    recipient = AccountInfo(OTHER, is_signer=False, is_writable=True)
    with pytest.raises(IncorrectProgramId):
        Processor.process(PROGRAM_ID, [_payer(), counter, recipient], CloseCounter().pack())
    assert recipient.lamports == 0


def test_close_missing_recipient():
    with pytest.raises(NotEnoughAccountKeys):
        Processor.process(PROGRAM_ID, [_payer(), _live_counter()], CloseCounter().pack())


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def test_entrypoint_success_result_carries_logs():
    result = process_instruction(PROGRAM_ID, [_payer(), _live_counter(1)], IncrementCounter(2).pack())
    assert result.status is ResultStatus.SUCCESS
    assert result.error is None
    assert result.logs == ("Program log: Counter incremented: 1 -> 3",)


def test_entrypoint_reports_failure_reason():
    result = process_instruction(PROGRAM_ID, [_payer()], IncrementCounter(1).pack())
    assert result.status is ResultStatus.FAILED
    assert isinstance(result.error, NotEnoughAccountKeys)
    assert result.to_dict()["category"] == "malformed_input"
    assert result.logs[-1].endswith("NOT_ENOUGH_ACCOUNT_KEYS: not enough account keys")


def test_entrypoint_rolls_back_partial_writes(monkeypatch):
    class _BrokenState:
        @staticmethod
        def new(value: int, bump: int):
            raise InvalidAccountData("record encoder unavailable")

    monkeypatch.setattr(processor_mod, "CounterState", _BrokenState)

    payer, slot, system = _payer(), _empty_slot(), _system()
    before = [_state(h) for h in (payer, slot, system)]
    result = process_instruction(PROGRAM_ID, [payer, slot, system], InitializeCounter().pack())

    assert not result.is_success
    assert isinstance(result.error, InvalidAccountData)
    # the allocation had already moved lamports; all of it is undone
    assert [_state(h) for h in (payer, slot, system)] == before
