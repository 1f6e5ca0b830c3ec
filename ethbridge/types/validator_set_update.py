"""
ethbridge.types.validator_set_update
====================================

Arguments of a validator set update as consumed by the bridge contracts.

The contract expects the ABI encoding of a single struct

    struct ValidatorSetArgs {
        address[] validators;
        uint256[] powers;
        uint256   nonce;      // the epoch
    }

so `ValidatorSetArgs` tokenizes into one dynamic tuple. Shape problems
(mismatched lengths, out-of-range powers) are rejected at construction so
that tokenization is total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

from ethbridge.abi.token import Array, Token, Tuple as TupleToken
from ethbridge.types.eth_abi import EncodeMixin
from ethbridge.types.ethereum_events import EthAddress, uint256


@dataclass(frozen=True)
class ValidatorSetArgs(EncodeMixin):
    """Validators, their normalized voting powers, and the epoch they apply to."""

    ARITY = 1

    validators: Tuple[EthAddress, ...] = field(default_factory=tuple)
    voting_powers: Tuple[int, ...] = field(default_factory=tuple)
    epoch: int = 0

    def __post_init__(self) -> None:
        validators = tuple(self.validators)
        powers = tuple(self.voting_powers)
        for i, v in enumerate(validators):
            if not isinstance(v, EthAddress):
                raise TypeError(f"validators[{i}] must be an EthAddress")
        if len(validators) != len(powers):
            raise ValueError(
                f"{len(validators)} validators but {len(powers)} voting powers"
            )
        for i, p in enumerate(powers):
            uint256(p, name=f"voting_powers[{i}]")
        uint256(self.epoch, name="epoch")
        object.__setattr__(self, "validators", validators)
        object.__setattr__(self, "voting_powers", powers)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[EthAddress, int]], epoch: int) -> "ValidatorSetArgs":
        pairs = list(pairs)
        return cls(
            validators=tuple(a for a, _ in pairs),
            voting_powers=tuple(p for _, p in pairs),
            epoch=epoch,
        )

    def tokenize(self) -> Tuple[Token, ...]:
        addrs = Array(v.to_token() for v in self.validators)
        powers = Array(uint256(p) for p in self.voting_powers)
        return (TupleToken((addrs, powers, uint256(self.epoch))),)


__all__ = ["ValidatorSetArgs"]
