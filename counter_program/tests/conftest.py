from __future__ import annotations

from typing import Callable, List

import pytest

from counter_program.config import DEFAULT_PROGRAM_ID
from counter_program.runtime.accounts import LAMPORTS_PER_SOL
from counter_program.runtime.keys import Keypair
from counter_program.runtime.ledger import Ledger
from counter_program.runtime.message import Instruction, Transaction
from counter_program.types.result import ProcessResult


@pytest.fixture
def program_id() -> bytes:
    return DEFAULT_PROGRAM_ID


@pytest.fixture
def ledger(program_id: bytes) -> Ledger:
    return Ledger(program_id=program_id)


@pytest.fixture
def payer(ledger: Ledger) -> Keypair:
    kp = Keypair.from_seed(b"\x01" * 32)
    ledger.airdrop(kp.pubkey, 5 * LAMPORTS_PER_SOL)
    return kp


@pytest.fixture
def send(ledger: Ledger) -> Callable[..., ProcessResult]:
    """Sign `instructions` with `signers` (first is fee payer) and execute them."""

    def _send(instructions: List[Instruction], *signers: Keypair) -> ProcessResult:
        tx = Transaction(list(instructions), fee_payer=signers[0].pubkey)
        return ledger.process_transaction(tx.sign(*signers))

    return _send
