"""
counter_program.client — instruction builders and state readers.

These helpers build requests exactly the way a wallet-side client would: they
derive the counter address from the payer, encode the payload, and order the
account metas the processor expects.

    ix = increment_counter(program_id, payer.pubkey, 101)
    tx = Transaction([ix], fee_payer=payer.pubkey).sign(payer)
"""

from __future__ import annotations

from typing import Optional

from .instruction import CloseCounter, IncrementCounter, InitializeCounter
from .pda import counter_address
from .runtime.accounts import SYSTEM_PROGRAM_ID
from .runtime.ledger import Ledger
from .runtime.message import AccountMeta, Instruction
from .state import CounterState


def initialize_counter(program_id: bytes, payer: bytes) -> Instruction:
    pda, _ = counter_address(payer, program_id)
    return Instruction(
        program_id,
        [
            AccountMeta.writable(payer, signer=True),
            AccountMeta.writable(pda),
            AccountMeta.readonly(SYSTEM_PROGRAM_ID),
        ],
        InitializeCounter().pack(),
    )


def increment_counter(program_id: bytes, payer: bytes, increment_by: int) -> Instruction:
    pda, _ = counter_address(payer, program_id)
    return Instruction(
        program_id,
        [AccountMeta.writable(payer, signer=True), AccountMeta.writable(pda)],
        IncrementCounter(increment_by).pack(),
    )


def close_counter(program_id: bytes, payer: bytes, recipient: bytes) -> Instruction:
    pda, _ = counter_address(payer, program_id)
    return Instruction(
        program_id,
        [
            AccountMeta.writable(payer, signer=True),
            AccountMeta.writable(pda),
            AccountMeta.writable(recipient),
        ],
        CloseCounter().pack(),
    )


def fetch_counter(ledger: Ledger, address: bytes) -> Optional[CounterState]:
    """Decode the counter stored at `address`, or None if it is absent or not ours."""
    acc = ledger.get_account(address)
    if acc is None or acc.owner != ledger.program_id or len(acc.data) < CounterState.LEN:
        return None
    return CounterState.unpack(acc.data)


__all__ = ["initialize_counter", "increment_counter", "close_counter", "fetch_counter"]
