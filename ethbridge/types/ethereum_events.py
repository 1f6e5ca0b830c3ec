"""
ethbridge.types.ethereum_events
===============================

Ethereum-side value types shared by bridge payloads.

- EthAddress : 20-byte account/contract address. Parsed from `0x…` hex in
               any case; displayed with the EIP-55 mixed-case checksum.
- uint256    : validated `Uint` token constructor for amounts, powers, epochs.
"""

from __future__ import annotations

from dataclasses import dataclass

from ethbridge.abi.token import ADDRESS_LEN, UINT256_MAX, Address, Uint
from ethbridge.types.keccak import keccak256
from ethbridge.utils.bytes import BytesLike, expect_len


@dataclass(frozen=True, order=True)
class EthAddress:
    """An Ethereum address (raw 20 bytes)."""

    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", expect_len(self.raw, ADDRESS_LEN, name="EthAddress"))

    @classmethod
    def from_str(cls, s: str) -> "EthAddress":
        """
        Parse `0x` + 40 hex chars. Checksum casing is not enforced; callers
        that need it can compare `str(addr)` with their input.
        """
        if not isinstance(s, str):
            raise TypeError("EthAddress.from_str expects str")
        h = s.strip()
        if not h.startswith(("0x", "0X")):
            raise ValueError(f"Ethereum address must start with 0x: {s!r}")
        h = h[2:]
        if len(h) != 2 * ADDRESS_LEN:
            raise ValueError(f"Ethereum address must be {2 * ADDRESS_LEN} hex chars, got {len(h)}")
        try:
            return cls(bytes.fromhex(h))
        except ValueError as e:
            raise ValueError(f"invalid Ethereum address {s!r}: {e}") from e

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "EthAddress":
        return cls(bytes(data))

    def to_checksum(self) -> str:
        """EIP-55 mixed-case checksum encoding."""
        lower = self.raw.hex()
        digest = keccak256(lower.encode("ascii")).hex()
        return "0x" + "".join(
            c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
            for i, c in enumerate(lower)
        )

    def to_token(self) -> Address:
        return Address(self.raw)

    def __str__(self) -> str:
        return self.to_checksum()

    def __bytes__(self) -> bytes:
        return self.raw


def uint256(value: int, *, name: str = "value") -> Uint:
    """A `Uint` token, with a friendlier error than the token's own check."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int")
    if not (0 <= value <= UINT256_MAX):
        raise ValueError(f"{name} must fit in uint256, got {value}")
    return Uint(value)


__all__ = [
    "EthAddress",
    "uint256",
]
