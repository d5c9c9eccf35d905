"""
counter_program.runtime.keys — ed25519 keypairs for signing transactions.

Identities are raw 32-byte ed25519 public keys. Keys live only in memory;
there is no keystore.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

SEED_SIZE: int = 32
SIGNATURE_SIZE: int = 64


@dataclass(frozen=True)
class Keypair:
    _private: Ed25519PrivateKey = field(repr=False)
    pubkey: bytes = b""

    @classmethod
    def generate(cls) -> "Keypair":
        return cls._from_private(Ed25519PrivateKey.generate())

    @classmethod
    def from_seed(cls, seed: bytes) -> "Keypair":
        """Deterministic keypair from a 32-byte secret seed (useful in tests)."""
        if len(seed) != SEED_SIZE:
            raise ValueError(f"seed must be {SEED_SIZE} bytes")
        return cls._from_private(Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    @classmethod
    def _from_private(cls, sk: Ed25519PrivateKey) -> "Keypair":
        pk = sk.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return cls(sk, pk)

    def sign(self, message: bytes) -> bytes:
        return self._private.sign(message)


def verify_signature(pubkey: bytes, signature: bytes, message: bytes) -> bool:
    """True iff `signature` is a valid ed25519 signature of `message` by `pubkey`."""
    if len(signature) != SIGNATURE_SIZE:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(bytes(pubkey)).verify(signature, message)
    except (InvalidSignature, ValueError):
        return False
    return True


__all__ = ["Keypair", "verify_signature", "SEED_SIZE", "SIGNATURE_SIZE"]
