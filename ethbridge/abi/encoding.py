"""
Canonical Ethereum ABI encoding (`abi.encode`) for bridge payloads.

Layout
------
A token sequence is encoded as a *head* region followed by a *tail* region:

    head_1 || head_2 || ... || head_N || tail_1 || ... || tail_M

- static tokens are written in place in their head slot;
- dynamic tokens write a 32-byte big-endian offset into their head slot,
  counted from the first byte of the enclosing head region, and append their
  payload to the tail in head order.

Static words (32 bytes each):
- uint256  : big-endian, left-zero-padded
- int256   : two's complement, sign-extended
- bool     : 0 or 1 in the low byte
- address  : 20 bytes left-zero-padded
- bytesN   : N bytes right-zero-padded

Static tuples and fixed arrays occupy the concatenation of their members'
heads (no indirection). Tails:
- bytes / string : len word || content right-padded to a multiple of 32
- T[]            : count word || encode(items)   (offsets relative to items)
- dynamic tuple / T[k] : encode(items)           (no length word)

Sizes are computed in a pre-pass so every offset is known before anything is
written; the output buffer is allocated once at its final length.

This module is pure: no I/O, no shared state, no configuration.
"""

from __future__ import annotations

from typing import Sequence

from ethbridge.utils.bytes import WORD, ceil32, pad_left, pad_right, u256_word

from .token import (
    Address,
    Array,
    Bool,
    Bytes,
    FixedArray,
    FixedBytes,
    Int,
    String,
    Token,
    Tuple,
    Uint,
    is_dynamic,
)

__all__ = [
    "head_size",
    "encoded_size",
    "encode_word",
    "encode",
]

_MASK_256 = (1 << 256) - 1


# ──────────────────────────────────────────────────────────────────────────────
# Size pre-pass
# ──────────────────────────────────────────────────────────────────────────────

def head_size(token: Token) -> int:
    """Bytes `token` occupies in its enclosing head region."""
    if isinstance(token, (Tuple, FixedArray)) and not is_dynamic(token):
        return sum(head_size(m) for m in token.items)
    return WORD


def _payload(token: Bytes | String) -> bytes:
    return token.utf8 if isinstance(token, String) else token.value


def _tail_size(token: Token) -> int:
    if isinstance(token, (Bytes, String)):
        return WORD + ceil32(len(_payload(token)))
    if isinstance(token, Array):
        return WORD + encoded_size(token.items)
    if isinstance(token, (Tuple, FixedArray)):
        return encoded_size(token.items)
    return 0


def encoded_size(tokens: Sequence[Token]) -> int:
    """Exact length of `encode(tokens)` without encoding anything."""
    return sum(head_size(t) for t in tokens) + sum(
        _tail_size(t) for t in tokens if is_dynamic(t)
    )


# ──────────────────────────────────────────────────────────────────────────────
# Static words
# ──────────────────────────────────────────────────────────────────────────────

def encode_word(token: Token) -> bytes:
    """
    Encode a static token in place. For static tuples / fixed arrays this is
    the concatenation of their members' words.
    """
    if isinstance(token, Uint):
        return u256_word(token.value)
    if isinstance(token, Int):
        return (token.value & _MASK_256).to_bytes(WORD, "big")
    if isinstance(token, Bool):
        return u256_word(1 if token.value else 0)
    if isinstance(token, Address):
        return pad_left(token.value)
    if isinstance(token, FixedBytes):
        return token.value.ljust(WORD, b"\x00")
    if isinstance(token, (Tuple, FixedArray)) and not is_dynamic(token):
        return b"".join(encode_word(m) for m in token.items)
    raise TypeError(f"{type(token).__name__} is not a static token")


# ──────────────────────────────────────────────────────────────────────────────
# Head/tail assembly
# ──────────────────────────────────────────────────────────────────────────────

def _write_sequence(out: bytearray, pos: int, tokens: Sequence[Token]) -> int:
    """Write the head/tail encoding of `tokens` at `out[pos:]`; return end position."""
    head_pos = pos
    tail_pos = pos + sum(head_size(t) for t in tokens)
    for t in tokens:
        if is_dynamic(t):
            # Offsets are relative to the start of this block's head region.
            out[head_pos:head_pos + WORD] = u256_word(tail_pos - pos)
            head_pos += WORD
            tail_pos = _write_tail(out, tail_pos, t)
        else:
            word = encode_word(t)
            out[head_pos:head_pos + len(word)] = word
            head_pos += len(word)
    return tail_pos


def _write_tail(out: bytearray, pos: int, token: Token) -> int:
    if isinstance(token, (Bytes, String)):
        data = _payload(token)
        chunk = u256_word(len(data)) + pad_right(data)
        out[pos:pos + len(chunk)] = chunk
        return pos + len(chunk)
    if isinstance(token, Array):
        out[pos:pos + WORD] = u256_word(len(token.items))
        return _write_sequence(out, pos + WORD, token.items)
    if isinstance(token, (Tuple, FixedArray)):
        return _write_sequence(out, pos, token.items)
    raise TypeError(f"{type(token).__name__} has no tail encoding")


def encode(tokens: Sequence[Token]) -> bytes:
    """
    ABI-encode `tokens` exactly as Solidity's `abi.encode(t1, ..., tN)`.

    Never fails for well-formed tokens (payloads are validated when tokens
    are constructed).
    """
    tokens = tuple(tokens)
    out = bytearray(encoded_size(tokens))
    end = _write_sequence(out, 0, tokens)
    assert end == len(out), "size pre-pass disagrees with encoder"
    return bytes(out)
