"""
ethbridge.types
===============

Canonical bridge types and the Ethereum ABI encoding contract:

- keccak:                KeccakHash, keccak_hash
- eth_abi:               Encode (tokenization contract), EncodeCell, AbiEncode,
                         encode / keccak256 / signable_keccak256
- ethereum_events:       EthAddress, uint256
- validator_set_update:  ValidatorSetArgs
- eth_bridge_pool:       TransferToEthereum, GasFee, PendingTransfer

To keep import order flexible and avoid circulars (proto.signable depends on
types.keccak, types.eth_abi depends on proto.signable), this module exposes
**lazy re-exports**: attributes resolve on first access.

Example
-------
>>> from ethbridge.types import EncodeCell, ValidatorSetArgs
>>> from ethbridge.types import keccak  # submodules available lazily too
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

__all__ = [
    # submodules
    "keccak",
    "eth_abi",
    "ethereum_events",
    "validator_set_update",
    "eth_bridge_pool",
    # common re-exported symbols
    "KeccakHash",
    "keccak_hash",
    "Encode",
    "EncodeCell",
    "AbiEncode",
    "EthAddress",
    "ValidatorSetArgs",
    "TransferToEthereum",
    "GasFee",
    "PendingTransfer",
]

_SUBMODULES = {
    "keccak": "ethbridge.types.keccak",
    "eth_abi": "ethbridge.types.eth_abi",
    "ethereum_events": "ethbridge.types.ethereum_events",
    "validator_set_update": "ethbridge.types.validator_set_update",
    "eth_bridge_pool": "ethbridge.types.eth_bridge_pool",
}

_SYMBOLS = {
    "KeccakHash": ("ethbridge.types.keccak", "KeccakHash"),
    "keccak_hash": ("ethbridge.types.keccak", "keccak_hash"),
    "Encode": ("ethbridge.types.eth_abi", "Encode"),
    "EncodeCell": ("ethbridge.types.eth_abi", "EncodeCell"),
    "AbiEncode": ("ethbridge.types.eth_abi", "AbiEncode"),
    "EthAddress": ("ethbridge.types.ethereum_events", "EthAddress"),
    "ValidatorSetArgs": ("ethbridge.types.validator_set_update", "ValidatorSetArgs"),
    "TransferToEthereum": ("ethbridge.types.eth_bridge_pool", "TransferToEthereum"),
    "GasFee": ("ethbridge.types.eth_bridge_pool", "GasFee"),
    "PendingTransfer": ("ethbridge.types.eth_bridge_pool", "PendingTransfer"),
}


def __getattr__(name: str):
    if name in _SUBMODULES:
        return importlib.import_module(_SUBMODULES[name])
    target = _SYMBOLS.get(name)
    if target:
        mod = importlib.import_module(target[0])
        return getattr(mod, target[1])
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    base = set(globals().keys())
    return sorted(base | set(_SUBMODULES.keys()) | set(_SYMBOLS.keys()))


if TYPE_CHECKING:
    from .eth_abi import AbiEncode, Encode, EncodeCell  # noqa: F401
    from .eth_bridge_pool import GasFee, PendingTransfer, TransferToEthereum  # noqa: F401
    from .ethereum_events import EthAddress  # noqa: F401
    from .keccak import KeccakHash, keccak_hash  # noqa: F401
    from .validator_set_update import ValidatorSetArgs  # noqa: F401
