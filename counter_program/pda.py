"""
counter_program.pda — program-derived addresses.

A program-derived address (PDA) is a 32-byte identity that a program controls
without holding a private key:

    candidate = sha256(seed_0 || ... || seed_n || program_id || b"ProgramDerivedAddress")

A candidate is accepted only if it is *not* a valid ed25519 point, so no
keypair can ever sign for it. The runtime lets the owning program "sign" for
the address by presenting the same seeds (see runtime.cpi.invoke_signed).

Two modes
---------
* `find_program_address` (search): append a bump byte, trying 255 down to 0,
  and return the first off-curve candidate with its bump. Used once, at
  creation, when the bump is not yet known.
* `create_program_address` (direct): hash the given seeds once. Used when the
  bump is already stored next to the record.

For the counter, seeds are (b"counter", owner) plus the bump.
"""

from __future__ import annotations

import hashlib
from typing import Sequence, Tuple, Union

from .errors import InvalidSeeds, MaxSeedLengthExceeded
from .state import COUNTER_SEED

ADDRESS_SIZE: int = 32
MAX_SEEDS: int = 16
MAX_SEED_LEN: int = 32
PDA_MARKER: bytes = b"ProgramDerivedAddress"

Seed = Union[bytes, bytearray, memoryview]

# ed25519 (twisted Edwards form of curve25519)
_P: int = 2**255 - 19
_D: int = (-121665 * pow(121666, _P - 2, _P)) % _P


def is_on_curve(address: bytes) -> bool:
    """
    True iff `address` decompresses to a point on the ed25519 curve.

    The top bit is the x sign and is ignored; y is reduced mod p. The point
    exists iff x^2 = (y^2 - 1) / (d*y^2 + 1) has a solution mod p.
    """
    if len(address) != ADDRESS_SIZE:
        raise ValueError(f"address must be {ADDRESS_SIZE} bytes, got {len(address)}")
    y = (int.from_bytes(address, "little") & ((1 << 255) - 1)) % _P
    yy = y * y % _P
    u = (yy - 1) % _P
    v = (_D * yy + 1) % _P
    x2 = u * pow(v, _P - 2, _P) % _P
    if x2 == 0:
        return True
    # Euler's criterion
    return pow(x2, (_P - 1) // 2, _P) == 1


def _check_seeds(seeds: Sequence[Seed]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise MaxSeedLengthExceeded(data={"seeds": len(seeds), "max": MAX_SEEDS})
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LEN:
            raise MaxSeedLengthExceeded(data={"index": i, "len": len(seed), "max": MAX_SEED_LEN})


def create_program_address(seeds: Sequence[Seed], program_id: bytes) -> bytes:
    """
    Direct mode: derive the address for exactly these seeds.

    Raises:
        MaxSeedLengthExceeded if the seed limits are violated.
        InvalidSeeds if the hash lands on the curve.
    """
    _check_seeds(seeds)
    h = hashlib.sha256()
    for seed in seeds:
        h.update(bytes(seed))
    h.update(bytes(program_id))
    h.update(PDA_MARKER)
    candidate = h.digest()
    if is_on_curve(candidate):
        raise InvalidSeeds("derived address lies on the ed25519 curve")
    return candidate


def find_program_address(seeds: Sequence[Seed], program_id: bytes) -> Tuple[bytes, int]:
    """
    Search mode: return (address, bump) for the highest bump giving an
    off-curve address.
    """
    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except InvalidSeeds:
            continue
    raise InvalidSeeds("unable to find a viable program address bump seed")


# --------------------------------------------------------------------------- #
# Counter helpers
# --------------------------------------------------------------------------- #


def counter_seeds(owner: bytes, bump: int) -> list[bytes]:
    """Signer seeds for the counter owned by `owner`."""
    return [COUNTER_SEED, bytes(owner), bytes([bump])]


def counter_address(owner: bytes, program_id: bytes) -> Tuple[bytes, int]:
    """Search-mode derivation of the counter address for `owner`."""
    return find_program_address([COUNTER_SEED, bytes(owner)], program_id)


__all__ = [
    "ADDRESS_SIZE",
    "MAX_SEEDS",
    "MAX_SEED_LEN",
    "PDA_MARKER",
    "is_on_curve",
    "create_program_address",
    "find_program_address",
    "counter_seeds",
    "counter_address",
]
