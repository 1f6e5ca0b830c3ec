"""
ethbridge.storage.bridge_pool
=============================

Pending transfers to Ethereum, persisted as opaque ABI blobs.

Each entry is keyed by the lowercase hex keccak of the transfer's encoding,
so identical transfers collapse onto one key and iteration order (key
byte-order) is the same on every node. Blobs are never decoded here; callers
that need the transfer back keep their own copy.
"""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

from ethbridge.errors import NotFound
from ethbridge.logging import get_logger
from ethbridge.types.eth_abi import encode
from ethbridge.types.eth_bridge_pool import PendingTransfer
from ethbridge.types.keccak import KeccakHash

from .kv import KV, Prefix, ReadOnlyKV

log = get_logger(__name__)

BRIDGE_POOL_ADDRESS = "ethbridge_pool"

POOL = Prefix(BRIDGE_POOL_ADDRESS)


def _digest_key(digest: KeccakHash) -> bytes:
    return POOL.key(digest.to_hex())


def pending_key(transfer: PendingTransfer) -> bytes:
    """Storage key of `transfer` inside the pool."""
    return _digest_key(transfer.keccak256())


def is_bridge_pool_key(key: bytes) -> bool:
    return bytes(key).startswith(POOL.raw)


def put_pending(kv: KV, transfer: PendingTransfer) -> bytes:
    """Store the encoding of `transfer`; returns the key it was written under."""
    cell = encode(transfer)
    key = pending_key(transfer)
    kv.put(key, cell.into_inner())
    log.debug("bridge pool put", extra={"key": key.hex(), "size": len(cell)})
    return key


def get_pending_encoded(kv: ReadOnlyKV, transfer: PendingTransfer) -> Optional[bytes]:
    return kv.get(pending_key(transfer))


def remove_pending(kv: KV, transfer: PendingTransfer, *, missing_ok: bool = True) -> None:
    key = pending_key(transfer)
    if not missing_ok and not kv.has(key):
        raise NotFound(key.hex(), space="bridge_pool")
    kv.delete(key)
    log.debug("bridge pool remove", extra={"key": key.hex()})


def iter_pending(kv: ReadOnlyKV) -> Iterator[Tuple[bytes, bytes]]:
    """(key, encoded transfer) pairs in key order."""
    yield from kv.iter_prefix(POOL.raw)


__all__ = [
    "BRIDGE_POOL_ADDRESS",
    "POOL",
    "pending_key",
    "is_bridge_pool_key",
    "put_pending",
    "get_pending_encoded",
    "remove_pending",
    "iter_pending",
]
