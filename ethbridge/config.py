"""
ethbridge configuration loader.

Goals
-----
- Stdlib only (tomllib / json).
- Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (ETHBRIDGE_*)
    3) Config file (TOML or JSON); `<home>/settings.toml` when present
    4) Built-in defaults (lowest)
- Typed dataclasses with validation; failures raise `ConfigError`.

Sections: node paths, the tendermint ABCI endpoint, the gossip (p2p) layer
and logging.
"""

from __future__ import annotations

import json
import os
import platform
import sys
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ethbridge.errors import ConfigError

# ------------------------------
# Defaults & helpers
# ------------------------------

SETTINGS_FILENAME = "settings.toml"

DEFAULT_TENDERMINT_HOST = "127.0.0.1"
DEFAULT_TENDERMINT_PORT = 26658
DEFAULT_NETWORK = "mainnet"

DEFAULT_P2P_HOST = "127.0.0.1"
DEFAULT_P2P_PORT = 20201

TOPIC_ORDERBOOK = "orderbook"
TOPIC_DKG = "dkg"
KNOWN_TOPICS = (TOPIC_ORDERBOOK, TOPIC_DKG)

LOG_FORMATS = ("", "json", "text")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _os_default_data_root() -> Path:
    system = platform.system()
    if system == "Darwin":
        return _expand("~/Library/Application Support")
    if system == "Windows":
        appdata = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        if appdata:
            return _expand(appdata)
        return _expand("~\\AppData\\Roaming")
    xdg = os.environ.get("XDG_DATA_HOME")
    return _expand(xdg) if xdg else _expand("~/.local/share")


def default_home() -> Path:
    override = os.environ.get("ETHBRIDGE_HOME")
    if override:
        return _expand(override)
    return _os_default_data_root() / "ethbridge"


def _parse_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _split_list(v: str) -> List[str]:
    return [s.strip() for s in v.split(",") if s.strip()]


def _env_int(name: str) -> int:
    v = os.environ[name]
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int", value=v).with_cause(e) from e


def _check_port(port: Any, name: str) -> int:
    try:
        p = int(port)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be int", value=port).with_cause(e) from e
    if not (1 <= p <= 65535):
        raise ConfigError(f"invalid {name}", value=p)
    return p


def _check_host(host: Any, name: str) -> str:
    if not isinstance(host, str) or not host.strip():
        raise ConfigError(f"{name} must be a non-empty string", value=host)
    return host.strip()


# ------------------------------
# Typed configuration model
# ------------------------------

@dataclass
class NodeConfig:
    home: Path
    db_path: str = "db"
    libp2p_path: str = "libp2p"
    tendermint_path: str = "tendermint"


@dataclass
class TendermintConfig:
    host: str = DEFAULT_TENDERMINT_HOST
    port: int = DEFAULT_TENDERMINT_PORT
    network: str = DEFAULT_NETWORK

    def validate(self) -> None:
        self.host = _check_host(self.host, "tendermint.host")
        self.port = _check_port(self.port, "tendermint.port")
        if not self.network:
            raise ConfigError("tendermint.network must be non-empty")


@dataclass
class GossipConfig:
    host: str = DEFAULT_P2P_HOST
    port: int = DEFAULT_P2P_PORT
    peers: List[str] = field(default_factory=list)  # multiaddrs like /ip4/1.2.3.4/tcp/20201
    topics: List[str] = field(default_factory=lambda: [TOPIC_ORDERBOOK])
    rpc: bool = True
    matchmaker: str = ""
    ledger_host: str = DEFAULT_TENDERMINT_HOST
    ledger_port: int = DEFAULT_TENDERMINT_PORT

    # Only ip4+tcp listen addresses are produced.
    def address(self) -> str:
        return f"/ip4/{self.host}/tcp/{self.port}"

    def ledger_address(self) -> str:
        return f"tcp://{self.ledger_host}:{self.ledger_port}"

    def set_address(self, address: Optional[Tuple[str, int]]) -> None:
        if address is not None:
            self.host, self.port = address[0], _check_port(address[1], "p2p.port")

    def set_ledger_address(self, address: Optional[Tuple[str, int]]) -> None:
        if address is not None:
            self.ledger_host, self.ledger_port = address[0], _check_port(address[1], "p2p.ledger_port")

    def set_peers(self, peers: List[str]) -> None:
        self.peers = list(peers)

    def set_matchmaker(self, matchmaker: Optional[str]) -> None:
        if matchmaker is not None:
            self.matchmaker = matchmaker

    def set_rpc(self, enable: bool) -> None:
        self.rpc = bool(enable)

    def enable_topic(self, topic: str, enable: bool = True) -> None:
        """Subscribe to `topic` when `enable`; already-enabled topics are kept once."""
        if topic not in KNOWN_TOPICS:
            raise ConfigError("unknown gossip topic", topic=topic, known=list(KNOWN_TOPICS))
        if enable and topic not in self.topics:
            self.topics.append(topic)

    def validate(self) -> None:
        self.host = _check_host(self.host, "p2p.host")
        self.port = _check_port(self.port, "p2p.port")
        self.ledger_host = _check_host(self.ledger_host, "p2p.ledger_host")
        self.ledger_port = _check_port(self.ledger_port, "p2p.ledger_port")
        unknown = [t for t in self.topics if t not in KNOWN_TOPICS]
        if unknown:
            raise ConfigError("unknown gossip topic", topics=unknown, known=list(KNOWN_TOPICS))


@dataclass
class LogConfig:
    level: str = "INFO"
    format: str = ""  # "" → decide from TTY

    def validate(self) -> None:
        self.level = str(self.level).upper()
        if self.level not in LOG_LEVELS:
            raise ConfigError("invalid log.level", value=self.level)
        self.format = str(self.format).lower()
        if self.format not in LOG_FORMATS:
            raise ConfigError("invalid log.format", value=self.format)


@dataclass
class Config:
    node: NodeConfig
    tendermint: TendermintConfig
    p2p: GossipConfig
    log: LogConfig

    def tendermint_home_dir(self) -> Path:
        return self.node.home / self.node.tendermint_path

    def gossip_home_dir(self) -> Path:
        return self.node.home / self.node.libp2p_path

    def db_home_dir(self) -> Path:
        return self.node.home / self.node.db_path

    def ensure_dirs(self) -> None:
        for d in (self.db_home_dir(), self.gossip_home_dir(), self.tendermint_home_dir()):
            d.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        # Path → str for JSON friendliness
        def _normalize(obj: Any) -> Any:
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, list):
                return [_normalize(i) for i in obj]
            if isinstance(obj, dict):
                return {k: _normalize(v) for k, v in obj.items()}
            return obj

        return _normalize(asdict(self))


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------

def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    if suffix not in {".toml", ".tml", ".json"}:
        raise ConfigError("unsupported config format, use .toml or .json", path=str(path))
    try:
        with path.open("rb") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, ValueError) as e:
        raise ConfigError("malformed config file", path=str(path)).with_cause(e) from e
    if not isinstance(data, dict):
        raise ConfigError("config file must hold a table", path=str(path))
    return data


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow + nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)  # type: ignore[arg-type]
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env: Dict[str, Dict[str, Any]] = {"tendermint": {}, "p2p": {}, "log": {}}
    # Tendermint
    if "ETHBRIDGE_TENDERMINT_HOST" in os.environ:
        env["tendermint"]["host"] = os.environ["ETHBRIDGE_TENDERMINT_HOST"].strip()
    if "ETHBRIDGE_TENDERMINT_PORT" in os.environ:
        env["tendermint"]["port"] = _env_int("ETHBRIDGE_TENDERMINT_PORT")
    if "ETHBRIDGE_NETWORK" in os.environ:
        env["tendermint"]["network"] = os.environ["ETHBRIDGE_NETWORK"].strip()
    # P2P
    if "ETHBRIDGE_P2P_HOST" in os.environ:
        env["p2p"]["host"] = os.environ["ETHBRIDGE_P2P_HOST"].strip()
    if "ETHBRIDGE_P2P_PORT" in os.environ:
        env["p2p"]["port"] = _env_int("ETHBRIDGE_P2P_PORT")
    if "ETHBRIDGE_P2P_PEERS" in os.environ:
        env["p2p"]["peers"] = _split_list(os.environ["ETHBRIDGE_P2P_PEERS"])
    if "ETHBRIDGE_P2P_TOPICS" in os.environ:
        env["p2p"]["topics"] = _split_list(os.environ["ETHBRIDGE_P2P_TOPICS"])
    if "ETHBRIDGE_P2P_RPC" in os.environ:
        env["p2p"]["rpc"] = _parse_bool(os.environ["ETHBRIDGE_P2P_RPC"])
    if "ETHBRIDGE_P2P_MATCHMAKER" in os.environ:
        env["p2p"]["matchmaker"] = os.environ["ETHBRIDGE_P2P_MATCHMAKER"].strip()
    if "ETHBRIDGE_LEDGER_HOST" in os.environ:
        env["p2p"]["ledger_host"] = os.environ["ETHBRIDGE_LEDGER_HOST"].strip()
    if "ETHBRIDGE_LEDGER_PORT" in os.environ:
        env["p2p"]["ledger_port"] = _env_int("ETHBRIDGE_LEDGER_PORT")
    # Logging
    if "ETHBRIDGE_LOG_LEVEL" in os.environ:
        env["log"]["level"] = os.environ["ETHBRIDGE_LOG_LEVEL"].strip()
    if "ETHBRIDGE_LOG_FORMAT" in os.environ:
        env["log"]["format"] = os.environ["ETHBRIDGE_LOG_FORMAT"].strip()
    return {k: v for k, v in env.items() if v}


def _section(base: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = base.get(name) or {}
    if not isinstance(sec, dict):
        raise ConfigError(f"[{name}] must be a table")
    return sec


# ------------------------------
# Main loader
# ------------------------------

def load(
    home: Optional[str | Path] = None,
    config_file: Optional[str | Path] = None,
    **overrides: Any,
) -> Config:
    """
    Load the bridge configuration.

    Precedence: overrides > env > file > defaults.

    Parameters
    ----------
    home : str | Path | None
        Node home directory. Defaults to $ETHBRIDGE_HOME or the OS data dir.
    config_file : str | Path | None
        TOML or JSON file with `node`, `tendermint`, `p2p` and `log` tables.
        When omitted, `<home>/settings.toml` is read if it exists.
    overrides : Any
        Keyword overrides, e.g. load(p2p={"port": 9000}, log={"level": "DEBUG"})
    """
    home_path = _expand(home) if home is not None else default_home()

    # 1) Defaults
    base: Dict[str, Any] = {
        "node": asdict(NodeConfig(home=home_path)),
        "tendermint": asdict(TendermintConfig()),
        "p2p": asdict(GossipConfig()),
        "log": asdict(LogConfig()),
    }

    # 2) File
    if config_file is not None:
        base = _merge_dict(base, _load_file(_expand(config_file)))
    else:
        default_file = home_path / SETTINGS_FILENAME
        if default_file.exists():
            base = _merge_dict(base, _load_file(default_file))

    # 3) Env
    base = _merge_dict(base, _env_layer())

    # 4) Overrides (highest)
    if overrides:
        base = _merge_dict(base, overrides)

    try:
        node = _section(base, "node")
        p2p = _section(base, "p2p")
        cfg = Config(
            node=NodeConfig(
                home=_expand(node["home"]),
                db_path=str(node["db_path"]),
                libp2p_path=str(node["libp2p_path"]),
                tendermint_path=str(node["tendermint_path"]),
            ),
            tendermint=TendermintConfig(**_section(base, "tendermint")),
            p2p=GossipConfig(
                host=p2p["host"],
                port=p2p["port"],
                peers=list(p2p["peers"] or []),
                topics=list(p2p["topics"] or []),
                rpc=bool(p2p["rpc"]),
                matchmaker=str(p2p["matchmaker"] or ""),
                ledger_host=p2p["ledger_host"],
                ledger_port=p2p["ledger_port"],
            ),
            log=LogConfig(**_section(base, "log")),
        )
    except (KeyError, TypeError) as e:
        raise ConfigError("invalid configuration layout", error=str(e)).with_cause(e) from e

    cfg.tendermint.validate()
    cfg.p2p.validate()
    cfg.log.validate()
    return cfg


# ------------------------------
# CLI helper
# ------------------------------

def main(argv: List[str] | None = None) -> int:
    """
    CLI usage:

        python -m ethbridge.config                      # defaults/env; print JSON
        python -m ethbridge.config path/to/config.toml  # load file; print JSON
    """
    argv = list(argv or sys.argv[1:])
    path = argv[0] if argv else None
    try:
        cfg = load(config_file=path)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
