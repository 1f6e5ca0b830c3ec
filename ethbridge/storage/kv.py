from __future__ import annotations

"""
KV interface & key-building DSL
===============================

Backend-agnostic Key–Value interface used by the bridge storage helpers.
Values are opaque byte blobs (ABI encodings, digests); this layer never
interprets them.

Key building
------------
`Prefix(ns)` produces a namespace; `.key(*parts)` appends length-prefixed
parts so that keys never need delimiter escaping and sort stably:

>>> from ethbridge.storage.kv import Prefix
>>> k = Prefix(b"eb").key("pool", b"\\x01\\x02")
>>> k.startswith(Prefix(b"eb").raw)
True

Batching
--------
`KV.batch()` returns a context manager that commits on success and rolls
back if an exception escapes:

>>> with kv.batch() as b:          # doctest: +SKIP
...     b.put(k, b"1")
...     b.delete(other)
"""

from typing import (Iterable, Iterator, Optional, Protocol, Tuple, Union,
                    runtime_checkable)

KeyPart = Union[bytes, bytearray, memoryview, str, int]

NS_SEP = b":"


class Prefix:
    """
    A logical namespace prefix (e.g., b"eb:" for the Ethereum bridge).

    .raw gives the raw bytes prefix.
    .key(*parts) builds a composite key: prefix + ∑ (uvarlen | part_bytes).
    """

    __slots__ = ("_raw",)

    def __init__(self, ns: Union[bytes, bytearray, memoryview, str]) -> None:
        ns_b = ns.encode("ascii") if isinstance(ns, str) else bytes(ns)
        if len(ns_b) == 0:
            raise ValueError("namespace must be non-empty")
        self._raw = ns_b.rstrip(NS_SEP) + NS_SEP

    @property
    def raw(self) -> bytes:
        return self._raw

    def key(self, *parts: KeyPart) -> bytes:
        """Build a composite key under this prefix."""
        out = bytearray(self._raw)
        for p in parts:
            pb = _part_to_bytes(p)
            out.extend(_uvarint_len(len(pb)))
            out.extend(pb)
        return bytes(out)

    def __repr__(self) -> str:
        return f"Prefix({self._raw!r})"


def _part_to_bytes(p: KeyPart) -> bytes:
    if isinstance(p, (bytes, bytearray, memoryview)):
        return bytes(p)
    if isinstance(p, str):
        return p.encode("utf-8")
    if isinstance(p, int):
        if p < 0:
            raise ValueError("negative ints not supported in key parts")
        return p.to_bytes(max(1, (p.bit_length() + 7) // 8), "big")
    raise TypeError(f"unsupported key part type: {type(p)!r}")


def _uvarint_len(n: int) -> bytes:
    """LEB128 unsigned length prefix."""
    if n < 0:
        raise ValueError("length must be non-negative")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(0x80 | b)
        else:
            out.append(b)
            break
    return bytes(out)


def be_u64(n: int) -> bytes:
    if not (0 <= n < (1 << 64)):
        raise ValueError("be_u64 out of range")
    return n.to_bytes(8, "big")


# ---------------------------------------------------------------------------
# KV protocols & Batch
# ---------------------------------------------------------------------------


@runtime_checkable
class ReadOnlyKV(Protocol):
    """Minimal read-only KV surface."""

    def get(self, key: bytes) -> Optional[bytes]:
        """Fetch value or None if missing."""
        ...

    def has(self, key: bytes) -> bool:
        ...

    def iter_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """(key, value) pairs whose key begins with `prefix`, in key byte-order."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Batch(Protocol):
    """Atomic write batch; commits on clean exit, rolls back otherwise."""

    def put(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...

    def __enter__(self) -> "Batch": ...
    def __exit__(self, exc_type, exc, tb) -> Optional[bool]: ...


@runtime_checkable
class KV(ReadOnlyKV, Protocol):
    """Full RW KV surface."""

    def put(self, key: bytes, value: bytes) -> None:
        """Persist (key,value). Overwrites if exists."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove key if present (idempotent)."""
        ...

    def batch(self) -> Batch:
        ...


# ---------------------------------------------------------------------------
# Portable helpers built atop the interface
# ---------------------------------------------------------------------------


def get_or_raise(kv: ReadOnlyKV, key: bytes, err: Exception) -> bytes:
    v = kv.get(key)
    if v is None:
        raise err
    return v


def put_many(kv: KV, items: Iterable[Tuple[bytes, bytes]]) -> None:
    """Write many keys using a single batch."""
    with kv.batch() as b:
        for k, v in items:
            b.put(k, v)


__all__ = [
    "KeyPart",
    "ReadOnlyKV",
    "KV",
    "Batch",
    "Prefix",
    "get_or_raise",
    "put_many",
    "be_u64",
]
