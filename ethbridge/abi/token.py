"""
ethbridge.abi.token
===================

The Ethereum contract ABI value model: a closed set of frozen dataclasses,
one per ABI kind. Every token validates its payload at construction so the
encoder never has to fail.

    Uint(n)            uint256, 0 <= n < 2**256
    Int(n)             int256, -2**255 <= n < 2**255
    Bool(v)
    FixedBytes(b)      bytes1..bytes32
    Address(b)         20 raw bytes
    Bytes(b)           dynamic bytes
    String(s)          dynamic UTF-8 string
    Array(items)       T[]   (dynamic length)
    FixedArray(items)  T[k]  (static length)
    Tuple(items)       (T1, T2, ...)

Composite tokens take any iterable of tokens and store an immutable tuple.
Static/dynamic classification follows the ABI: strings, bytes and dynamic
arrays are always dynamic; tuples and fixed arrays are dynamic iff one of
their members is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple as _Tuple, Union

from ethbridge.errors import TokenError

UINT256_MAX = (1 << 256) - 1
INT256_MIN = -(1 << 255)
INT256_MAX = (1 << 255) - 1
ADDRESS_LEN = 20


def _check_int(value: object, name: str) -> int:
    # bool is an int subclass; reject it so Bool and Uint never alias.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TokenError(f"{name} expects int, got {type(value).__name__}", kind=name)
    return value


def _check_bytes(value: object, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TokenError(f"{name} expects bytes, got {type(value).__name__}", kind=name)


def _check_members(
    items: Iterable[object], name: str, *, homogeneous: bool = False
) -> _Tuple["Token", ...]:
    members = tuple(items)
    for i, m in enumerate(members):
        if not isinstance(m, _TOKEN_TYPES):
            raise TokenError(
                f"{name}[{i}] is not an ABI token ({type(m).__name__})", kind=name, index=i
            )
    if homogeneous:
        _element_signature(members, name)
    return members


# A signature is the ABI type a token denotes: ("uint",), ("bytes", 4),
# ("tuple", (sig, ...)), ("array", sig) or ("fixed", k, sig). `None` stands
# for the unknown element type of an empty array and unifies with anything.
Signature = Optional[_Tuple[object, ...]]


class _Mismatch(Exception):
    pass


def _unify(a: Signature, b: Signature) -> Signature:
    if a is None:
        return b
    if b is None:
        return a
    if a[0] != b[0] or len(a) != len(b):
        raise _Mismatch
    kind = a[0]
    if kind == "tuple":
        if len(a[1]) != len(b[1]):
            raise _Mismatch
        return ("tuple", tuple(_unify(x, y) for x, y in zip(a[1], b[1])))
    if kind == "array":
        return ("array", _unify(a[1], b[1]))
    if kind == "fixed":
        if a[1] != b[1]:
            raise _Mismatch
        return ("fixed", a[1], _unify(a[2], b[2]))
    if a != b:
        raise _Mismatch
    return a


def _element_signature(members: _Tuple["Token", ...], name: str) -> Signature:
    sig: Signature = None
    for i, m in enumerate(members):
        try:
            sig = _unify(sig, signature(m))
        except _Mismatch:
            raise TokenError(
                f"{name}[{i}] does not match the element type of its siblings", kind=name, index=i
            ) from None
    return sig


def signature(token: "Token") -> Signature:
    """The ABI type `token` denotes; empty arrays leave their element type open."""
    if isinstance(token, FixedBytes):
        return ("bytes", len(token.value))
    if isinstance(token, Tuple):
        return ("tuple", tuple(signature(m) for m in token.items))
    if isinstance(token, Array):
        return ("array", _element_signature(token.items, "Array"))
    if isinstance(token, FixedArray):
        return ("fixed", len(token.items), _element_signature(token.items, "FixedArray"))
    return (_LEAF_KINDS[type(token)],)


@dataclass(frozen=True)
class Uint:
    value: int

    def __post_init__(self) -> None:
        v = _check_int(self.value, "Uint")
        if not (0 <= v <= UINT256_MAX):
            raise TokenError("Uint out of uint256 range", kind="Uint", value=v)


@dataclass(frozen=True)
class Int:
    value: int

    def __post_init__(self) -> None:
        v = _check_int(self.value, "Int")
        if not (INT256_MIN <= v <= INT256_MAX):
            raise TokenError("Int out of int256 range", kind="Int", value=v)


@dataclass(frozen=True)
class Bool:
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TokenError(f"Bool expects bool, got {type(self.value).__name__}", kind="Bool")


@dataclass(frozen=True)
class FixedBytes:
    value: bytes

    def __post_init__(self) -> None:
        v = _check_bytes(self.value, "FixedBytes")
        if not (1 <= len(v) <= 32):
            raise TokenError("FixedBytes must be 1..32 bytes", kind="FixedBytes", length=len(v))
        object.__setattr__(self, "value", v)


@dataclass(frozen=True)
class Address:
    value: bytes

    def __post_init__(self) -> None:
        v = _check_bytes(self.value, "Address")
        if len(v) != ADDRESS_LEN:
            raise TokenError(
                f"Address must be {ADDRESS_LEN} bytes", kind="Address", length=len(v)
            )
        object.__setattr__(self, "value", v)


@dataclass(frozen=True)
class Bytes:
    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _check_bytes(self.value, "Bytes"))


@dataclass(frozen=True)
class String:
    value: str
    utf8: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TokenError(f"String expects str, got {type(self.value).__name__}", kind="String")
        try:
            encoded = self.value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise TokenError(
                "String is not encodable as UTF-8", kind="String", position=e.start
            ).with_cause(e) from e
        object.__setattr__(self, "utf8", encoded)


@dataclass(frozen=True)
class Array:
    items: _Tuple["Token", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _check_members(self.items, "Array", homogeneous=True))


@dataclass(frozen=True)
class FixedArray:
    items: _Tuple["Token", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _check_members(self.items, "FixedArray", homogeneous=True))


@dataclass(frozen=True)
class Tuple:
    items: _Tuple["Token", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _check_members(self.items, "Tuple"))


Token = Union[Uint, Int, Bool, FixedBytes, Address, Bytes, String, Array, FixedArray, Tuple]

_TOKEN_TYPES = (Uint, Int, Bool, FixedBytes, Address, Bytes, String, Array, FixedArray, Tuple)

_LEAF_KINDS = {
    Uint: "uint",
    Int: "int",
    Bool: "bool",
    Address: "address",
    Bytes: "dynbytes",
    String: "string",
}


def is_token(x: object) -> bool:
    return isinstance(x, _TOKEN_TYPES)


def is_dynamic(token: Token) -> bool:
    """True if `token` is encoded out-of-line (offset in head, payload in tail)."""
    if isinstance(token, (Bytes, String, Array)):
        return True
    if isinstance(token, (Tuple, FixedArray)):
        return any(is_dynamic(m) for m in token.items)
    return False


__all__ = [
    "UINT256_MAX",
    "INT256_MIN",
    "INT256_MAX",
    "ADDRESS_LEN",
    "Token",
    "Uint",
    "Int",
    "Bool",
    "FixedBytes",
    "Address",
    "Bytes",
    "String",
    "Array",
    "FixedArray",
    "Tuple",
    "is_token",
    "is_dynamic",
    "signature",
]
