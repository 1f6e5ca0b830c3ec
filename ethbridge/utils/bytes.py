"""
ethbridge.utils.bytes
=====================

Lightweight, dependency-free helpers around byte handling:

- Hex helpers: to_hex/from_hex, 0x-prefix management
- Length guard: expect_len
- 32-byte word helpers used by the ABI encoder: pad_left / pad_right / ceil32
- Bytes-like normalization: b()

Examples
--------
>>> to_hex(b"\\x01\\x02")
'0x0102'
>>> from_hex('0xdeadbeef')
b'\\xde\\xad\\xbe\\xef'
>>> pad_left(b"\\x2a")[-2:]
b'\\x00*'
>>> ceil32(33)
64
"""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

WORD = 32


# -----------------------
# Basic bytes/hex helpers
# -----------------------


def strip0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_hex(data: BytesLike, *, prefix: bool = True) -> str:
    """Return lowercase hex string of data."""
    if isinstance(data, memoryview):
        data = data.tobytes()
    elif isinstance(data, bytearray):
        data = bytes(data)
    if not isinstance(data, bytes):
        raise TypeError("to_hex expects bytes-like")
    h = data.hex()
    return f"0x{h}" if prefix else h


def from_hex(h: str) -> bytes:
    """Parse hex string with or without 0x prefix; ignores surrounding whitespace."""
    if not isinstance(h, str):
        raise TypeError("from_hex expects str")
    h = strip0x(h.strip())
    if len(h) % 2 == 1:
        raise ValueError(f"hex string has odd length {len(h)}")
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def b(x: Union[BytesLike, str]) -> bytes:
    """
    Normalize input to bytes:
    - bytes/bytearray/memoryview → bytes
    - str → if startswith '0x' parse hex, else utf-8 encode
    """
    if isinstance(x, bytes):
        return x
    if isinstance(x, bytearray):
        return bytes(x)
    if isinstance(x, memoryview):
        return x.tobytes()
    if isinstance(x, str):
        return from_hex(x) if x.startswith(("0x", "0X")) else x.encode("utf-8")
    raise TypeError(f"unsupported type for b(): {type(x)!r}")


# ---------------------
# Length/shape guarding
# ---------------------

def expect_len(data: BytesLike, n: int, *, name: str = "bytes") -> bytes:
    """Return ``data`` as immutable bytes after validating exact length ``n``."""
    data_b = b(data)
    if len(data_b) != n:
        raise ValueError(f"{name} must be length {n}, got {len(data_b)}")
    return data_b


# -------------------------
# 32-byte word helpers
# -------------------------

def ceil32(n: int) -> int:
    """Round ``n`` up to the next multiple of 32."""
    return n if n % WORD == 0 else n + WORD - (n % WORD)


def pad_left(data: bytes, *, fill: int = 0x00, width: int = WORD) -> bytes:
    if len(data) > width:
        raise ValueError(f"cannot left-pad {len(data)} bytes into {width}")
    return bytes([fill]) * (width - len(data)) + data


def pad_right(data: bytes) -> bytes:
    """Right-zero-pad ``data`` to a multiple of 32 bytes (empty stays empty)."""
    return data + b"\x00" * (ceil32(len(data)) - len(data))


def u256_word(n: int) -> bytes:
    if not (0 <= n < (1 << 256)):
        raise ValueError("u256_word out of range")
    return n.to_bytes(WORD, "big")


__all__ = [
    "BytesLike",
    "WORD",
    "strip0x",
    "to_hex",
    "from_hex",
    "b",
    "expect_len",
    "ceil32",
    "pad_left",
    "pad_right",
    "u256_word",
]
