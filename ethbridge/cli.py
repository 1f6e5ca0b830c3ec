"""
ethbridge - command-line helpers for bridge encodings and digests.

Commands:
  - keccak <data>           Keccak-256 of UTF-8 text or 0x-prefixed hex bytes
  - signable <digest>       Ethereum signed-message digest of a 64-hex digest
  - encode-valset           ABI encoding + digests of a validator set update
  - config                  Print the resolved configuration as JSON

Global options:
  --home PATH        Node home directory (settings.toml is read from here)
  --config PATH      Explicit TOML/JSON config file
  --json             Output JSON instead of human-readable text

Examples:
  ethbridge keccak hello
  ethbridge signable 1c8aff950685c2ed4bc3174f3472287b56d9517b9c948127319a09a7a36deac8
  ethbridge encode-valset --validator 0x241D37B7Cf5233b3b0b204321420A86e8f7bfdb5 \\
      --power 8828299 --epoch 0
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, NoReturn, Optional

import typer

from ethbridge import config as config_mod
from ethbridge.errors import BridgeError
from ethbridge.logging import configure_from_config, get_logger
from ethbridge.proto.signable import SignableEthMessage
from ethbridge.types.ethereum_events import EthAddress
from ethbridge.types.keccak import KeccakHash, keccak_hash
from ethbridge.types.validator_set_update import ValidatorSetArgs
from ethbridge.utils.bytes import b, strip0x, to_hex

log = get_logger(__name__)

app = typer.Typer(
    name="ethbridge",
    help="Ethereum bridge ABI encoding and keccak digests",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.home: Optional[str] = None
        self.config_path: Optional[str] = None
        self.json_output: bool = False


_ctx = GlobalContext()


def _fail(err: Exception) -> NoReturn:
    msg = err.message if isinstance(err, BridgeError) else str(err)
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(2)


def _emit(human: str, data: Dict[str, Any]) -> None:
    typer.echo(json.dumps(data, sort_keys=True) if _ctx.json_output else human)


@app.callback()
def main_callback(
    home: Optional[str] = typer.Option(
        None,
        "--home",
        help="Node home directory",
        envvar="ETHBRIDGE_HOME",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to config file",
        envvar="ETHBRIDGE_CONFIG",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output JSON instead of human-readable text",
    ),
) -> None:
    """
    Configuration is resolved in this order (highest to lowest priority):
      1. Environment variables (ETHBRIDGE_*)
      2. Config file (--config, or <home>/settings.toml)
      3. Built-in defaults
    """
    _ctx.home = home
    _ctx.config_path = config
    _ctx.json_output = json_output


def _load_config() -> config_mod.Config:
    try:
        cfg = config_mod.load(home=_ctx.home, config_file=_ctx.config_path)
    except BridgeError as e:
        _fail(e)
    configure_from_config(cfg)
    return cfg


@app.command()
def keccak(
    data: str = typer.Argument(..., help="UTF-8 text, or bytes as 0x-prefixed hex"),
) -> None:
    """Keccak-256 of DATA."""
    try:
        digest = keccak_hash(b(data))
    except ValueError as e:
        _fail(e)
    _emit(str(digest), {"keccak256": str(digest)})


@app.command()
def signable(
    digest: str = typer.Argument(..., help="Keccak digest as 64 hex characters"),
) -> None:
    """Digest that validators sign for DIGEST (Ethereum signed-message form)."""
    try:
        h = KeccakHash.from_hex(strip0x(digest.strip()))
    except BridgeError as e:
        _fail(e)
    out = SignableEthMessage.as_signable(h)
    _emit(str(out), {"digest": str(h), "signable": str(out)})


@app.command("encode-valset")
def encode_valset(
    validator: Optional[List[str]] = typer.Option(
        None, "--validator", help="Validator Ethereum address (repeatable)"
    ),
    power: Optional[List[int]] = typer.Option(
        None, "--power", help="Voting power, one per --validator (repeatable)"
    ),
    epoch: int = typer.Option(0, "--epoch", help="Epoch of the validator set"),
) -> None:
    """ABI-encode a validator set update and print its digests."""
    _load_config()
    try:
        args = ValidatorSetArgs(
            validators=tuple(EthAddress.from_str(v) for v in (validator or [])),
            voting_powers=tuple(power or []),
            epoch=epoch,
        )
        cell = args.encode()
    except (BridgeError, ValueError, TypeError) as e:
        _fail(e)
    keccak_digest = args.keccak256()
    signable_digest = args.signable_keccak256()
    log.debug("encoded validator set", extra={"validators": len(args.validators), "size": len(cell)})
    data = {
        "encoded": to_hex(cell.into_inner()),
        "keccak256": str(keccak_digest),
        "signable_keccak256": str(signable_digest),
    }
    human = "\n".join(f"{k}: {v}" for k, v in data.items())
    _emit(human, data)


@app.command("config")
def show_config() -> None:
    """Print the resolved configuration as JSON."""
    cfg = _load_config()
    typer.echo(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))


def main() -> None:
    """Entry point for the ethbridge CLI."""
    app()


if __name__ == "__main__":
    main()
