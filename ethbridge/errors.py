"""
ethbridge.errors
----------------

A small, consistent error system for the bridge encoding layer.

Design goals
------------
- One root `BridgeError` with machine-friendly `code` and optional `data`.
- Concrete subclasses for the few things that can go wrong here: malformed
  tokens, broken tokenization contracts, digest hex parsing, config, storage.
- Safe JSON representation (`to_dict`) suitable for logs and RPC bridges.

Only hex-to-digest parsing is an *expected* runtime failure of the core;
`EncodingError` / `TokenError` flag defects in upstream domain types.

This module uses only stdlib to avoid import cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Optional severity hint for operators/metrics."""

    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class BridgeErrorCode(str, Enum):
    INTERNAL = "BRIDGE/INTERNAL"

    # Encoding contract
    ENCODING = "BRIDGE/ENCODING"
    ARITY_MISMATCH = "BRIDGE/ARITY_MISMATCH"
    TOKEN = "BRIDGE/TOKEN"

    # Digests
    DIGEST_HEX = "BRIDGE/DIGEST_HEX"

    # Config / storage collaborators
    CONFIG = "BRIDGE/CONFIG"
    STORAGE = "BRIDGE/STORAGE"
    NOT_FOUND = "BRIDGE/NOT_FOUND"


@dataclass(eq=False)
class BridgeError(Exception):
    """
    Root error for ethbridge components.

    Attributes
    ----------
    code: str
        Machine-stable error code (see BridgeErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional machine data (lengths, arities, keys). JSON-serializable.
    severity: Severity
        Optional severity hint (default ERROR).
    retryable: bool
        Whether the operation may succeed on retry without changing inputs.
    cause: Optional[BaseException]
        Wrapped original exception; not included in equality comparison.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    retryable: bool = False
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        super().__init__(f"{_code_str(self.code)}: {self.message}")

    def with_context(self, **ctx: Any) -> "BridgeError":
        """Return a *new* error with extra context merged (does not mutate)."""
        d = dict(self.data)
        for k, v in ctx.items():
            d[k] = _coerce_json(v)
        return _rebuild(self, data=d, cause=self.cause)

    def with_cause(self, exc: BaseException) -> "BridgeError":
        """Attach/replace the causal exception (returns a new instance)."""
        return _rebuild(self, data=dict(self.data), cause=exc)

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs/RPC bridges."""
        out = {
            "code": _code_str(self.code),
            "message": self.message,
            "data": _coerce_json(self.data),
            "severity": int(self.severity),
            "retryable": self.retryable,
        }
        if include_cause and self.cause is not None:
            out["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return out

    def __str__(self) -> str:  # pragma: no cover - human formatting
        parts = [f"{_code_str(self.code)}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


class InternalError(BridgeError):
    def __init__(self, message="internal error", **data: Any) -> None:
        super().__init__(
            code=BridgeErrorCode.INTERNAL, message=message, data=_jsonmap(data)
        )


class EncodingError(BridgeError):
    def __init__(self, message="encoding contract violated", **data: Any) -> None:
        super().__init__(
            code=BridgeErrorCode.ENCODING,
            message=message,
            data=_jsonmap(data),
            severity=Severity.CRITICAL,
        )


class ArityMismatch(EncodingError):
    def __init__(self, type_name: str, expected: int, got: int) -> None:
        super().__init__(
            message=f"{type_name} tokenized into {got} tokens, declared arity is {expected}",
            type=type_name,
            expected=expected,
            got=got,
        )
        self.code = BridgeErrorCode.ARITY_MISMATCH


class TokenError(BridgeError, ValueError):
    def __init__(self, message="invalid ABI token", **data: Any) -> None:
        super().__init__(
            code=BridgeErrorCode.TOKEN, message=message, data=_jsonmap(data)
        )


class KeccakHashError(BridgeError, ValueError):
    """Raised when a string or buffer is not a valid 32-byte keccak digest."""

    def __init__(self, message="invalid keccak hash", **data: Any) -> None:
        super().__init__(
            code=BridgeErrorCode.DIGEST_HEX, message=message, data=_jsonmap(data)
        )


class ConfigError(BridgeError):
    def __init__(self, message="invalid configuration", **data: Any) -> None:
        super().__init__(
            code=BridgeErrorCode.CONFIG, message=message, data=_jsonmap(data)
        )


class StorageError(BridgeError):
    def __init__(
        self, message="storage error", retryable: bool = True, **data: Any
    ) -> None:
        super().__init__(
            code=BridgeErrorCode.STORAGE,
            message=message,
            data=_jsonmap(data),
            retryable=retryable,
        )


class NotFound(StorageError):
    def __init__(self, key: str, space: str = "kv") -> None:
        super().__init__(message="not found", retryable=False, key=key, space=space)
        self.code = BridgeErrorCode.NOT_FOUND


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T = TypeVar("T", bound=BridgeError)


def wrap(exc: BaseException, *, as_: Type[T] = InternalError, **ctx: Any) -> T:
    """
    Wrap any exception into a BridgeError subclass, attaching context.
    If `exc` is already a BridgeError, returns a context-enriched copy.
    """
    if isinstance(exc, BridgeError):
        return exc.with_context(**ctx)  # type: ignore[return-value]
    err = as_("wrapped exception", **ctx)  # type: ignore[call-arg]
    return err.with_cause(exc)  # type: ignore[return-value]


def ensure_bridge_error(exc: BaseException) -> BridgeError:
    """Coerce unknown exceptions to InternalError with cause attached."""
    return exc if isinstance(exc, BridgeError) else InternalError().with_cause(exc)


def _rebuild(err: BridgeError, *, data: Dict[str, Any], cause: Optional[BaseException]) -> BridgeError:
    # Subclasses have bespoke __init__ signatures; copy fields onto a bare instance.
    new = Exception.__new__(type(err))
    BridgeError.__init__(
        new,
        code=err.code,
        message=err.message,
        data=data,
        severity=err.severity,
        retryable=err.retryable,
        cause=cause,
    )
    return new


def _code_str(code: Any) -> str:
    return code.value if isinstance(code, Enum) else str(code)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; stringify the rest; hex-encode bytes.
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, list):
        return [_coerce_json(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (bytes, bytearray)):
        return bytes(v).hex()
    try:
        return str(v)
    except Exception:
        return "<unprintable>"


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "Severity",
    "BridgeErrorCode",
    "BridgeError",
    "InternalError",
    "EncodingError",
    "ArityMismatch",
    "TokenError",
    "KeccakHashError",
    "ConfigError",
    "StorageError",
    "NotFound",
    "wrap",
    "ensure_bridge_error",
]
