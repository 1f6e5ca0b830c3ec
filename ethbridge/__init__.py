"""
ethbridge: Ethereum ABI encoding and keccak digests for the bridge.

Bridge payloads (validator set updates, pending transfers) are tokenized,
ABI-encoded exactly as Solidity's `abi.encode` would, and hashed with
Keccak-256; validators sign the Ethereum signed-message form of that digest.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
