"""
counter_program.runtime.ledger — in-memory ledger executing signed transactions.

The ledger plays the host role around the counter program:

- persists `Account` records keyed by 32-byte address;
- verifies ed25519 signatures for the fee payer and every signer meta;
- materializes one `AccountInfo` handle per distinct address per instruction
  (signer/writable flags are the union over that instruction's metas);
- calls the program's entrypoint, then checks host rules:
    * the lamport total over the handles is unchanged   → UnbalancedInstruction
    * read-only handles were not modified                → ReadonlyAccountModified
- commits only when every instruction of the transaction succeeded; accounts
  left with zero lamports (and not executable) are purged at commit.

Usage
-----
    ledger = Ledger()
    payer = Keypair.generate()
    ledger.airdrop(payer.pubkey, 5 * LAMPORTS_PER_SOL)
    tx = Transaction([initialize_counter(ledger.program_id, payer.pubkey)], fee_payer=payer.pubkey)
    result = ledger.process_transaction(tx.sign(payer))
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from ..config import DEFAULT_PROGRAM_ID, CounterConfig
from ..entrypoint import process_instruction as counter_entrypoint
from ..errors import (
    MissingRequiredSignature,
    ProgramError,
    ReadonlyAccountModified,
    UnbalancedInstruction,
    UnsupportedProgramId,
)
from ..logging import get_logger, trace_scope
from ..metrics import time_transaction
from ..types.ints import checked_add_u64
from ..types.result import ProcessResult
from . import system
from .accounts import SYSTEM_PROGRAM_ID, Account, AccountInfo, ensure_address, to_hex
from .context import InvokeContext
from .keys import verify_signature
from .message import Instruction, Transaction
from .rent import Rent

log = get_logger(__name__)

ProgramEntrypoint = Callable[..., ProcessResult]


def _system_entrypoint(
    program_id: bytes, accounts: Sequence[AccountInfo], data: bytes, *, ctx: InvokeContext
) -> ProcessResult:
    try:
        system.process_instruction(program_id, accounts, data, ctx=ctx)
    except ProgramError as err:
        return ProcessResult.failed(err, ctx.logs)
    return ProcessResult.ok(ctx.logs)


class Ledger:
    def __init__(
        self,
        *,
        program_id: bytes = DEFAULT_PROGRAM_ID,
        rent: Optional[Rent] = None,
        verify_signatures: bool = True,
    ):
        self.program_id = ensure_address(program_id, name="program_id")
        self.rent = rent or Rent()
        self.verify_signatures = verify_signatures
        self._accounts: Dict[bytes, Account] = {}
        self._programs: Dict[bytes, ProgramEntrypoint] = {}
        self.add_program(SYSTEM_PROGRAM_ID, _system_entrypoint)
        self.add_program(self.program_id, counter_entrypoint)

    @classmethod
    def from_config(cls, cfg: CounterConfig) -> "Ledger":
        return cls(
            program_id=cfg.program_id,
            rent=cfg.rent.to_rent(),
            verify_signatures=cfg.verify_signatures,
        )

    # ----------------------------- accounts ------------------------------- #

    def add_program(self, program_id: bytes, entrypoint: ProgramEntrypoint) -> None:
        """Register an entrypoint and its executable account."""
        pid = ensure_address(program_id, name="program_id")
        self._programs[pid] = entrypoint
        self._accounts[pid] = Account(lamports=1, owner=SYSTEM_PROGRAM_ID, executable=True)

    def airdrop(self, address: bytes, lamports: int) -> int:
        """Mint `lamports` into `address`; returns the new balance."""
        addr = ensure_address(address)
        acc = self._accounts.get(addr) or Account()
        acc.lamports = checked_add_u64(acc.lamports, lamports)
        self._accounts[addr] = acc
        return acc.lamports

    def get_account(self, address: bytes) -> Optional[Account]:
        acc = self._accounts.get(ensure_address(address))
        return None if acc is None else acc.copy()

    def get_balance(self, address: bytes) -> int:
        acc = self._accounts.get(ensure_address(address))
        return 0 if acc is None else acc.lamports

    def total_lamports(self) -> int:
        return sum(acc.lamports for acc in self._accounts.values())

    # ---------------------------- execution ------------------------------- #

    def process_transaction(self, tx: Transaction) -> ProcessResult:
        """
        Execute every instruction of `tx` atomically.

        Returns a SUCCESS result after commit, or a FAILED result (with the
        first error) leaving the ledger untouched.
        """
        logs: List[str] = []
        working: Dict[bytes, Account] = {}
        scope = trace_scope(component="ledger", signature=tx.signature.hex()[:16] or None)
        with scope, time_transaction() as timer:
            try:
                if self.verify_signatures:
                    self._verify_signatures(tx)
                for ix in tx.instructions:
                    self._execute(ix, working, logs)
            except ProgramError as err:
                timer.fail()
                log.warning("transaction failed", extra={"code": err.code, "reason": err.message})
                return ProcessResult.failed(err, logs)

            self._commit(working)
            log.info("transaction committed", extra={"instructions": len(tx.instructions)})
        return ProcessResult.ok(logs)

    def _verify_signatures(self, tx: Transaction) -> None:
        msg = tx.message_bytes()
        for key in tx.required_signers():
            sig = tx.signatures.get(key, b"")
            if not verify_signature(key, sig, msg):
                raise MissingRequiredSignature("missing or invalid transaction signature", address=to_hex(key))

    def _load(self, key: bytes, working: Dict[bytes, Account]) -> Account:
        if key not in working:
            stored = self._accounts.get(key)
            working[key] = stored.copy() if stored is not None else Account()
        return working[key]

    def _execute(self, ix: Instruction, working: Dict[bytes, Account], logs: List[str]) -> None:
        entry = self._programs.get(ix.program_id)
        if entry is None:
            raise UnsupportedProgramId(data={"program_id": to_hex(ix.program_id)})

        infos: Dict[bytes, AccountInfo] = {}
        for meta in ix.accounts:
            info = infos.get(meta.pubkey)
            if info is None:
                infos[meta.pubkey] = AccountInfo.from_account(
                    meta.pubkey,
                    self._load(meta.pubkey, working),
                    is_signer=meta.is_signer,
                    is_writable=meta.is_writable,
                )
            else:
                info.is_signer = info.is_signer or meta.is_signer
                info.is_writable = info.is_writable or meta.is_writable
        handles = [infos[meta.pubkey] for meta in ix.accounts]

        before = {key: info.to_account() for key, info in infos.items()}

        logs.append(f"Program {to_hex(ix.program_id)} invoke [1]")
        ctx = InvokeContext(rent=self.rent)
        result = entry(ix.program_id, handles, ix.data, ctx=ctx)
        logs.extend(ctx.logs)
        if not result.is_success:
            raise result.error or ProgramError("program failed without an error")
        logs.append(f"Program {to_hex(ix.program_id)} success")

        self._verify_host_rules(infos, before)
        for key, info in infos.items():
            working[key] = info.to_account()

    @staticmethod
    def _verify_host_rules(infos: Dict[bytes, AccountInfo], before: Dict[bytes, Account]) -> None:
        pre = sum(acc.lamports for acc in before.values())
        post = sum(info.lamports for info in infos.values())
        if pre != post:
            raise UnbalancedInstruction(before=pre, after=post)
        for key, info in infos.items():
            if info.is_writable:
                continue
            if info.to_account() != before[key]:
                raise ReadonlyAccountModified(address=to_hex(key))

    def _commit(self, working: Dict[bytes, Account]) -> None:
        for key, acc in working.items():
            if acc.lamports == 0 and not acc.executable:
                self._accounts.pop(key, None)
            else:
                self._accounts[key] = acc


__all__ = ["Ledger", "ProgramEntrypoint"]
