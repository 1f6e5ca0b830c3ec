"""
ethbridge.types.eth_abi
=======================

Encoding of bridge data in a format Ethereum smart contracts accept.

Tokenization contract
---------------------
A type takes part in bridge encoding by implementing `Encode`:

    class ValidatorSetArgs(EncodeMixin):
        ARITY = 1
        def tokenize(self) -> tuple[Token, ...]: ...

`tokenize` must be pure, total and deterministic, and always return exactly
`ARITY` tokens. Everything else is derived from it by free functions that
work for any implementer:

    encode(value)              -> EncodeCell[T]   abi.encode(tokenize(value))
    keccak256(value)           -> KeccakHash      keccak of the encoding
    signable_keccak256(value)  -> KeccakHash      Ethereum signed-message digest

`EncodeMixin` exposes the same three operations as methods.

EncodeCell
----------
`EncodeCell[T]` holds the ABI encoding of a value of type `T`. The type
parameter exists only for static checkers; at runtime the cell is a single
immutable byte buffer, and equality, hashing and ordering look at nothing
else. `EncodeCell.new_from(tokens)` skips tokenization and lets the caller
assert `T`; nothing checks that the tokens really describe a `T`.
"""

from __future__ import annotations

from typing import (
    Any,
    ClassVar,
    Generic,
    Iterable,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
    runtime_checkable,
)

from ethbridge.abi.encoding import encode as abi_encode
from ethbridge.abi.token import Token, is_token
from ethbridge.errors import ArityMismatch, TokenError
from ethbridge.logging import get_logger
from ethbridge.proto.signable import SignableEthMessage
from ethbridge.types.keccak import KeccakHash, keccak_hash

log = get_logger(__name__)

T = TypeVar("T")


# ──────────────────────────────────────────────────────────────────────────────
# Tokenization contract
# ──────────────────────────────────────────────────────────────────────────────

@runtime_checkable
class Encode(Protocol):
    """A value that decomposes into exactly `ARITY` ABI tokens."""

    ARITY: int

    def tokenize(self) -> Sequence[Token]: ...


def tokenize(value: Encode) -> Tuple[Token, ...]:
    """Tokenize `value`, checking the declared arity."""
    tokens = tuple(value.tokenize())
    if len(tokens) != value.ARITY:
        raise ArityMismatch(type(value).__name__, value.ARITY, len(tokens))
    return tokens


# ──────────────────────────────────────────────────────────────────────────────
# Typed container
# ──────────────────────────────────────────────────────────────────────────────

class EncodeCell(Generic[T]):
    """ABI-encoded value of type `T`."""

    __slots__ = ("_data",)

    _data: bytes

    def __init__(self, *_: Any, **__: Any) -> None:
        raise TypeError("use EncodeCell.new(value) or EncodeCell.new_from(tokens)")

    @classmethod
    def _wrap(cls, data: bytes) -> "EncodeCell[T]":
        cell = object.__new__(cls)
        object.__setattr__(cell, "_data", data)
        return cell

    @classmethod
    def new(cls, value: T) -> "EncodeCell[T]":
        """Return the ABI encoding of `value`, tagged with its type."""
        tokens = tokenize(value)  # type: ignore[arg-type]
        data = abi_encode(tokens)
        log.debug(
            "abi-encoded %s",
            type(value).__name__,
            extra={"tokens": len(tokens), "size": len(data)},
        )
        return cls._wrap(data)

    @classmethod
    def new_from(cls, tokens: Iterable[Token]) -> "EncodeCell[T]":
        """
        Encode raw `tokens` under a caller-asserted tag:

            EncodeCell[ValidatorSetArgs].new_from([Tuple(...)])

        The tag is not derived from the tokens, so proceed with caution.
        """
        return cls._wrap(abi_encode(tuple(tokens)))

    # ---- byte access ----

    def as_bytes(self) -> bytes:
        return self._data

    def into_inner(self) -> bytes:
        """Return the underlying ABI encoded bytes."""
        return self._data

    def hex(self) -> str:
        return self._data.hex()

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    # ---- immutability ----

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("EncodeCell is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("EncodeCell is immutable")

    # ---- comparisons (buffer only) ----

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EncodeCell):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __lt__(self, other: "EncodeCell[Any]") -> bool:
        if not isinstance(other, EncodeCell):
            return NotImplemented
        return self._data < other._data

    def __le__(self, other: "EncodeCell[Any]") -> bool:
        if not isinstance(other, EncodeCell):
            return NotImplemented
        return self._data <= other._data

    def __gt__(self, other: "EncodeCell[Any]") -> bool:
        if not isinstance(other, EncodeCell):
            return NotImplemented
        return self._data > other._data

    def __ge__(self, other: "EncodeCell[Any]") -> bool:
        if not isinstance(other, EncodeCell):
            return NotImplemented
        return self._data >= other._data

    def __repr__(self) -> str:
        return f"EncodeCell({len(self._data)} bytes)"


# ──────────────────────────────────────────────────────────────────────────────
# Derived operations
# ──────────────────────────────────────────────────────────────────────────────

def encode(value: T) -> EncodeCell[T]:
    """Return the encoded tokens of `value` in a type-safe enclosure."""
    return EncodeCell.new(value)


def keccak256(value: Encode) -> KeccakHash:
    """Keccak hash of the ABI encoding of `value`."""
    return keccak_hash(encode(value).into_inner())


def signable_keccak256(value: Encode) -> KeccakHash:
    """
    Keccak hash of the encoding wrapped in the Ethereum signed-message
    envelope. This is the digest validators sign.
    """
    return SignableEthMessage.as_signable(keccak256(value))


class EncodeMixin:
    """Method-style access to the derived operations for `Encode` implementers."""

    ARITY: ClassVar[int]

    def tokenize(self) -> Sequence[Token]:
        raise NotImplementedError

    def encode(self) -> EncodeCell[Any]:
        return encode(self)

    def keccak256(self) -> KeccakHash:
        return keccak256(self)  # type: ignore[arg-type]

    def signable_keccak256(self) -> KeccakHash:
        return signable_keccak256(self)  # type: ignore[arg-type]


# ──────────────────────────────────────────────────────────────────────────────
# abi.encode over a raw token sequence
# ──────────────────────────────────────────────────────────────────────────────

class AbiEncode(tuple, EncodeMixin):
    """
    A raw token sequence with identity tokenization, the Python spelling of
    Solidity's `abi.encode(t1, ..., tN)`:

        AbiEncode(Uint(42), String("test")).encode()

    Use `AbiEncode(*tokens)` to wrap an existing sequence.
    """

    def __new__(cls, *tokens: Token) -> "AbiEncode":
        for i, t in enumerate(tokens):
            if not is_token(t):
                raise TokenError(
                    f"AbiEncode[{i}] is not an ABI token ({type(t).__name__})", index=i
                )
        return super().__new__(cls, tokens)

    @property
    def ARITY(self) -> int:  # type: ignore[override]
        return len(self)

    def tokenize(self) -> Tuple[Token, ...]:
        return tuple(self)


__all__ = [
    "Encode",
    "EncodeCell",
    "EncodeMixin",
    "AbiEncode",
    "tokenize",
    "encode",
    "keccak256",
    "signable_keccak256",
]
