"""
Key namespace of the Ethereum bridge.

Bridge-owned state lives under the `ethbridge:` prefix; bridge parameters
live in the shared `params:` space, and the escrowed native balance lives in
the shared `balance:` space keyed by (token, owner).
"""

from __future__ import annotations

from .kv import Prefix

ETH_BRIDGE_ADDRESS = "ethbridge"

BRIDGE = Prefix(ETH_BRIDGE_ADDRESS)
PARAMS = Prefix("params")
BALANCE = Prefix("balance")


def prefix() -> bytes:
    """Prefix of every key owned by the bridge account."""
    return BRIDGE.raw


def escrow_key(native_token: str) -> bytes:
    """Balance key of `native_token` held in escrow by the bridge."""
    if not native_token:
        raise ValueError("native_token must be non-empty")
    return BALANCE.key(native_token, ETH_BRIDGE_ADDRESS)


def is_eth_bridge_key(native_token: str, key: bytes) -> bool:
    """True for the escrow key and for anything under the bridge prefix."""
    key = bytes(key)
    return key == escrow_key(native_token) or key.startswith(BRIDGE.raw)


# Parameters

def eth_start_height_key() -> bytes:
    return PARAMS.key("eth_start_height")


def active_key() -> bytes:
    return PARAMS.key("active_status")


def min_confirmations_key() -> bytes:
    return PARAMS.key("min_confirmations")


def native_erc20_key() -> bytes:
    return PARAMS.key("native_erc20")


def bridge_contract_key() -> bytes:
    return PARAMS.key("bridge_contract_address")


def governance_contract_key() -> bytes:
    return PARAMS.key("governance_contract_address")


__all__ = [
    "ETH_BRIDGE_ADDRESS",
    "BRIDGE",
    "PARAMS",
    "BALANCE",
    "prefix",
    "escrow_key",
    "is_eth_bridge_key",
    "eth_start_height_key",
    "active_key",
    "min_confirmations_key",
    "native_erc20_key",
    "bridge_contract_key",
    "governance_contract_key",
]
