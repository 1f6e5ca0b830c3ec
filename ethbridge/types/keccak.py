"""
ethbridge.types.keccak
======================

Keccak-256 digests as used by Ethereum.

Keccak-256 is the *original* Keccak submission (multi-rate padding 0x01),
not NIST SHA3-256 (padding 0x06); the two disagree on every input, so
`hashlib.sha3_256` must never be substituted here. The primitive comes from
pycryptodome (`Crypto.Hash.keccak`).

Textual form
------------
A digest is exchanged as exactly 64 hex characters with no `0x` marker.
Parsing accepts either case; formatting is always lowercase, so
`str(KeccakHash.from_hex(s)) == s` holds for every lowercase `s`. Upper and
mixed case inputs parse to the same digest but format back lowercase.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Union

from Crypto.Hash import keccak as _keccak

from ethbridge.errors import KeccakHashError
from ethbridge.utils.bytes import BytesLike

HASH_LEN = 32
HEX_LEN = 2 * HASH_LEN

_HEXDIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True, order=True)
class KeccakHash:
    """A 32-byte Keccak-256 digest. Ordering and equality follow the raw bytes."""

    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, (bytes, bytearray, memoryview)):
            raise KeccakHashError(
                f"digest must be bytes, got {type(self.digest).__name__}"
            )
        d = bytes(self.digest)
        if len(d) != HASH_LEN:
            raise KeccakHashError(
                f"digest must be {HASH_LEN} bytes, got {len(d)}", length=len(d)
            )
        object.__setattr__(self, "digest", d)

    # ---- hex conversions ----

    @classmethod
    def from_hex(cls, s: str) -> "KeccakHash":
        """Parse exactly 64 hex characters (either case, no prefix)."""
        if not isinstance(s, str):
            raise KeccakHashError(f"expected str, got {type(s).__name__}")
        if len(s) != HEX_LEN:
            raise KeccakHashError(
                f"keccak hash must be {HEX_LEN} hex characters, got {len(s)}",
                length=len(s),
            )
        bad = [c for c in s if c not in _HEXDIGITS]
        if bad:
            raise KeccakHashError(
                f"invalid hex character {bad[0]!r} in keccak hash", value=s
            )
        return cls(bytes.fromhex(s))

    @classmethod
    def try_from(cls, value: Union[str, BytesLike]) -> "KeccakHash":
        """Build from either the 64-char textual form or 32 raw bytes."""
        if isinstance(value, str):
            return cls.from_hex(value)
        return cls(value)

    def to_hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.digest.hex()

    def __repr__(self) -> str:
        return f"KeccakHash({self.digest.hex()})"

    def __bytes__(self) -> bytes:
        return self.digest

    def __len__(self) -> int:
        return HASH_LEN


def keccak_hash(data: BytesLike) -> KeccakHash:
    """Keccak-256 of `data`."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"keccak_hash expects bytes-like input, got {type(data).__name__}")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return KeccakHash(h.digest())


def keccak256(data: BytesLike) -> bytes:
    """Raw-bytes convenience wrapper around `keccak_hash`."""
    return keccak_hash(data).digest


__all__ = [
    "HASH_LEN",
    "HEX_LEN",
    "KeccakHash",
    "keccak_hash",
    "keccak256",
]
