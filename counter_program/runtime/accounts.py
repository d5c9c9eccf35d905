"""
counter_program.runtime.accounts — stored accounts and per-request handles.

Two views of the same thing:

- `Account`     : what the ledger persists between requests
                  (lamports, data, owner, executable).
- `AccountInfo` : the mutable handle a program sees while processing one
                  instruction. It adds the request-scoped `is_signer` and
                  `is_writable` flags and holds `data` as a bytearray the
                  program writes in place.

The handle list passed to a program is the entire universe of state for that
call. Snapshots (`snapshot_accounts` / `restore_accounts`) let the entrypoint
undo every write when a handler fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

from ..errors import InvalidRealloc, NotEnoughAccountKeys
from ..types.ints import to_u64

ADDRESS_SIZE: int = 32

# The system program is the all-zero identity.
SYSTEM_PROGRAM_ID: bytes = b"\x00" * ADDRESS_SIZE

LAMPORTS_PER_SOL: int = 1_000_000_000
MAX_PERMITTED_DATA_LENGTH: int = 10 * 1024 * 1024


def ensure_address(addr: bytes, *, name: str = "address") -> bytes:
    """Validate that `addr` is exactly ADDRESS_SIZE bytes."""
    if not isinstance(addr, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes, got {type(addr).__name__}")
    b = bytes(addr)
    if len(b) != ADDRESS_SIZE:
        raise ValueError(f"{name} must be {ADDRESS_SIZE} bytes, got {len(b)}")
    return b


def to_hex(addr: bytes) -> str:
    """Hex-encode a raw address for logs and errors (0x-prefixed)."""
    return "0x" + bytes(addr).hex()


def parse_hex_address(value: str | bytes, *, name: str = "address") -> bytes:
    """Parse an address from hex (with or without '0x') or pass-through bytes."""
    if isinstance(value, (bytes, bytearray)):
        return ensure_address(value, name=name)
    s = value.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    try:
        b = bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"{name}: invalid hex string") from e
    return ensure_address(b, name=name)


# --------------------------------------------------------------------------- #
# Stored account
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class Account:
    """
    A persisted account record.

    Invariants:
    - lamports is a u64
    - owner is exactly 32 bytes
    """
    lamports: int = 0
    data: bytes = b""
    owner: bytes = SYSTEM_PROGRAM_ID
    executable: bool = False

    def __post_init__(self) -> None:
        self.lamports = to_u64(int(self.lamports), name="lamports")
        self.data = bytes(self.data)
        self.owner = ensure_address(self.owner, name="owner")

    def copy(self) -> "Account":
        return Account(
            lamports=self.lamports,
            data=self.data,
            owner=self.owner,
            executable=self.executable,
        )

    def to_dict(self) -> dict:
        return {
            "lamports": self.lamports,
            "data": self.data.hex(),
            "owner": to_hex(self.owner),
            "executable": self.executable,
        }


# --------------------------------------------------------------------------- #
# Request-scoped handle
# --------------------------------------------------------------------------- #


@dataclass(eq=False)
class AccountInfo:
    """
    Mutable handle onto one account for the duration of one instruction.

    Handles compare by identity: when the same address appears twice in a
    request, both positions refer to the same handle object.
    """
    key: bytes
    is_signer: bool
    is_writable: bool
    lamports: int = 0
    data: bytearray = field(default_factory=bytearray)
    owner: bytes = SYSTEM_PROGRAM_ID
    executable: bool = False

    def __post_init__(self) -> None:
        self.key = ensure_address(self.key, name="key")
        self.owner = ensure_address(self.owner, name="owner")
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

    @classmethod
    def from_account(
        cls, key: bytes, account: Account, *, is_signer: bool, is_writable: bool
    ) -> "AccountInfo":
        return cls(
            key=key,
            is_signer=is_signer,
            is_writable=is_writable,
            lamports=account.lamports,
            data=bytearray(account.data),
            owner=account.owner,
            executable=account.executable,
        )

    def to_account(self) -> Account:
        return Account(
            lamports=self.lamports,
            data=bytes(self.data),
            owner=self.owner,
            executable=self.executable,
        )

    def data_len(self) -> int:
        return len(self.data)

    def data_is_empty(self) -> bool:
        return len(self.data) == 0

    def realloc(self, new_len: int) -> None:
        """
        Resize the data buffer in place. Growth is zero-filled.
        """
        if not isinstance(new_len, int) or new_len < 0 or new_len > MAX_PERMITTED_DATA_LENGTH:
            raise InvalidRealloc(data={"new_len": new_len})
        cur = len(self.data)
        if new_len < cur:
            del self.data[new_len:]
        elif new_len > cur:
            self.data.extend(b"\x00" * (new_len - cur))

    def assign(self, owner: bytes) -> None:
        self.owner = ensure_address(owner, name="owner")


def next_account_info(accounts_iter: Iterator[AccountInfo]) -> AccountInfo:
    """Take the next positional handle or fail with NotEnoughAccountKeys."""
    try:
        return next(accounts_iter)
    except StopIteration:
        raise NotEnoughAccountKeys() from None


# --------------------------------------------------------------------------- #
# Snapshots
# --------------------------------------------------------------------------- #

_Snapshot = List[Tuple[AccountInfo, int, bytes, bytes]]


def _unique(accounts: Sequence[AccountInfo]) -> List[AccountInfo]:
    seen: Dict[int, AccountInfo] = {}
    for info in accounts:
        seen.setdefault(id(info), info)
    return list(seen.values())


def snapshot_accounts(accounts: Sequence[AccountInfo]) -> _Snapshot:
    """Capture lamports, data and owner of every distinct handle."""
    return [(info, info.lamports, bytes(info.data), info.owner) for info in _unique(accounts)]


def restore_accounts(snapshot: _Snapshot) -> None:
    """Put every captured handle back exactly as it was."""
    for info, lamports, data, owner in snapshot:
        info.lamports = lamports
        info.data[:] = data
        info.owner = owner


__all__ = [
    "ADDRESS_SIZE",
    "SYSTEM_PROGRAM_ID",
    "LAMPORTS_PER_SOL",
    "MAX_PERMITTED_DATA_LENGTH",
    "ensure_address",
    "to_hex",
    "parse_hex_address",
    "Account",
    "AccountInfo",
    "next_account_info",
    "snapshot_accounts",
    "restore_accounts",
]
