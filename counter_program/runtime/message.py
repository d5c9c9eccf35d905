"""
counter_program.runtime.message — instructions and signed transactions.

- `AccountMeta`  : (pubkey, is_signer, is_writable) for one positional account.
- `Instruction`  : program id + ordered account metas + opaque payload.
- `Transaction`  : one or more instructions, a fee payer, and ed25519
                   signatures over `message_bytes()`.

Message encoding (deterministic)
--------------------------------
    fee_payer (32)
    u8 instruction count
    per instruction:
        program_id (32) | u8 account count |
        per account: pubkey (32) | u8 flags (bit0 signer, bit1 writable) |
        u32 LE data length | data
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .accounts import ensure_address, to_hex
from .keys import Keypair

_FLAG_SIGNER = 0x01
_FLAG_WRITABLE = 0x02


@dataclass(frozen=True)
class AccountMeta:
    pubkey: bytes
    is_signer: bool
    is_writable: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "pubkey", ensure_address(self.pubkey, name="pubkey"))

    @classmethod
    def writable(cls, pubkey: bytes, *, signer: bool = False) -> "AccountMeta":
        return cls(pubkey, signer, True)

    @classmethod
    def readonly(cls, pubkey: bytes, *, signer: bool = False) -> "AccountMeta":
        return cls(pubkey, signer, False)

    def __str__(self) -> str:  # pragma: no cover - cosmetic
        flags = [n for n, on in (("signer", self.is_signer), ("writable", self.is_writable)) if on]
        return f"{to_hex(self.pubkey)[:10]}…({', '.join(flags) or 'readonly'})"


@dataclass(frozen=True)
class Instruction:
    program_id: bytes
    accounts: Sequence[AccountMeta]
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "program_id", ensure_address(self.program_id, name="program_id"))
        object.__setattr__(self, "accounts", tuple(self.accounts))
        object.__setattr__(self, "data", bytes(self.data))

    def encode(self) -> bytes:
        if len(self.accounts) > 255:
            raise ValueError("too many accounts in instruction")
        out = bytearray(self.program_id)
        out.append(len(self.accounts))
        for meta in self.accounts:
            out += meta.pubkey
            out.append((_FLAG_SIGNER if meta.is_signer else 0) | (_FLAG_WRITABLE if meta.is_writable else 0))
        out += struct.pack("<I", len(self.data))
        out += self.data
        return bytes(out)


@dataclass
class Transaction:
    """
    A batch of instructions executed atomically by the ledger.

    Usage:
        tx = Transaction([ix], fee_payer=payer.pubkey)
        tx.sign(payer)
    """
    instructions: List[Instruction]
    fee_payer: bytes
    signatures: Dict[bytes, bytes] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.instructions:
            raise ValueError("transaction needs at least one instruction")
        self.fee_payer = ensure_address(self.fee_payer, name="fee_payer")

    def message_bytes(self) -> bytes:
        if len(self.instructions) > 255:
            raise ValueError("too many instructions in transaction")
        out = bytearray(self.fee_payer)
        out.append(len(self.instructions))
        for ix in self.instructions:
            out += ix.encode()
        return bytes(out)

    def required_signers(self) -> List[bytes]:
        """Fee payer first, then every signer meta in order of appearance."""
        keys = [self.fee_payer]
        for ix in self.instructions:
            for meta in ix.accounts:
                if meta.is_signer and meta.pubkey not in keys:
                    keys.append(meta.pubkey)
        return keys

    def sign(self, *keypairs: Keypair) -> "Transaction":
        """Add signatures; keypairs that are not required signers are rejected."""
        required = self.required_signers()
        msg = self.message_bytes()
        for kp in keypairs:
            if kp.pubkey not in required:
                raise ValueError(f"keypair {to_hex(kp.pubkey)} is not a required signer")
            self.signatures[kp.pubkey] = kp.sign(msg)
        return self

    @property
    def signature(self) -> bytes:
        """The fee payer's signature (identifies the transaction)."""
        return self.signatures.get(self.fee_payer, b"")


__all__ = ["AccountMeta", "Instruction", "Transaction"]
