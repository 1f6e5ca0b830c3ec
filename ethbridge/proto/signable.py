"""
ethbridge.proto.signable
========================

Domain separation for digests handed to Ethereum signing keys.

A validator never signs a raw content digest. It signs

    keccak256(b"\\x19Ethereum Signed Message:\\n" || decimal(len(digest)) || digest)

the `personal_sign` / `eth_sign` envelope, so a signature produced for the
bridge can never be replayed as a signature over a raw transaction hash or
any other 32-byte message. Contracts recover the signer with
`ECDSA.toEthSignedMessageHash(hash)`, which builds the same envelope.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from ethbridge.types.keccak import HASH_LEN, KeccakHash, keccak_hash

SIGNED_MESSAGE_TAG = b"\x19Ethereum Signed Message:\n"

M = TypeVar("M")
S = TypeVar("S")


def signable_message_prefix(length: int = HASH_LEN) -> bytes:
    """The envelope prefix for a message of `length` bytes (`length` in decimal ASCII)."""
    if length < 0:
        raise ValueError("message length must be non-negative")
    return SIGNED_MESSAGE_TAG + str(length).encode("ascii")


ETH_MESSAGE_PREFIX = signable_message_prefix(HASH_LEN)


@runtime_checkable
class Signable(Protocol[M, S]):
    """Turns a message of type M into the value S that is actually signed."""

    @staticmethod
    def as_signable(message: M) -> S: ...


class SignableEthMessage:
    """`Signable` for 32-byte keccak digests wrapped in the Ethereum envelope."""

    @staticmethod
    def as_signable(message: KeccakHash) -> KeccakHash:
        return keccak_hash(ETH_MESSAGE_PREFIX + bytes(message))


__all__ = [
    "SIGNED_MESSAGE_TAG",
    "ETH_MESSAGE_PREFIX",
    "signable_message_prefix",
    "Signable",
    "SignableEthMessage",
]
