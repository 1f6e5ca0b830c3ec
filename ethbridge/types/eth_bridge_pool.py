"""
ethbridge.types.eth_bridge_pool
===============================

Transfers waiting in the bridge pool to be relayed to Ethereum.

A `PendingTransfer` is what validators attest to: its keccak digest keys the
pool entry in storage, and the digest of the whole pool is what gets signed.
Native-chain addresses (`sender`, `payer`) travel as their textual (bech32m)
form; the contract never interprets them beyond hashing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ethbridge.abi.token import String, Token, Tuple as TupleToken
from ethbridge.types.eth_abi import EncodeMixin
from ethbridge.types.ethereum_events import EthAddress, uint256


def _check_native_address(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty address string")
    # Raises TokenError (a ValueError) for text that has no UTF-8 form.
    return String(value.strip()).value


@dataclass(frozen=True)
class TransferToEthereum:
    """Move `amount` of ERC20 `asset` from native `sender` to Ethereum `recipient`."""

    asset: EthAddress
    recipient: EthAddress
    sender: str
    amount: int

    def __post_init__(self) -> None:
        for name in ("asset", "recipient"):
            if not isinstance(getattr(self, name), EthAddress):
                raise TypeError(f"TransferToEthereum.{name} must be an EthAddress")
        object.__setattr__(self, "sender", _check_native_address(self.sender, "sender"))
        uint256(self.amount, name="amount")


@dataclass(frozen=True)
class GasFee:
    """Fee paid to the relayer, in native tokens, by `payer`."""

    amount: int
    payer: str

    def __post_init__(self) -> None:
        uint256(self.amount, name="gas_fee.amount")
        object.__setattr__(self, "payer", _check_native_address(self.payer, "payer"))


@dataclass(frozen=True)
class PendingTransfer(EncodeMixin):
    """A transfer plus its relayer fee, as stored in the bridge pool."""

    ARITY = 1

    transfer: TransferToEthereum
    gas_fee: GasFee

    def __post_init__(self) -> None:
        if not isinstance(self.transfer, TransferToEthereum):
            raise TypeError("PendingTransfer.transfer must be a TransferToEthereum")
        if not isinstance(self.gas_fee, GasFee):
            raise TypeError("PendingTransfer.gas_fee must be a GasFee")

    def tokenize(self) -> Tuple[Token, ...]:
        t, fee = self.transfer, self.gas_fee
        return (
            TupleToken(
                (
                    t.asset.to_token(),
                    t.recipient.to_token(),
                    String(t.sender),
                    uint256(t.amount),
                    uint256(fee.amount),
                    String(fee.payer),
                )
            ),
        )


__all__ = [
    "TransferToEthereum",
    "GasFee",
    "PendingTransfer",
]
