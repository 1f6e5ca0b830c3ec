"""Error model and structured logging."""

from __future__ import annotations

import io
import json
import logging

import pytest

from ethbridge import logging as blog
from ethbridge.errors import (
    ArityMismatch,
    BridgeError,
    BridgeErrorCode,
    ConfigError,
    InternalError,
    KeccakHashError,
    NotFound,
    Severity,
    StorageError,
    TokenError,
    ensure_bridge_error,
    wrap,
)

# -- Errors ---------------------------------------------------------------------------


def test_to_dict_shape() -> None:
    err = ArityMismatch("ValidatorSetArgs", 1, 3)
    d = err.to_dict()
    assert d["code"] == "BRIDGE/ARITY_MISMATCH"
    assert d["severity"] == int(Severity.CRITICAL)
    assert d["retryable"] is False
    assert d["data"] == {"type": "ValidatorSetArgs", "expected": 1, "got": 3}
    json.dumps(d)


def test_data_is_json_coerced() -> None:
    err = StorageError("write failed", key=b"\x01\x02", parts=[b"\xff"])
    assert err.data == {"key": "0102", "parts": ["ff"]}
    assert err.retryable is True


def test_with_context_returns_new_instance() -> None:
    err = KeccakHashError("bad hex", length=3)
    richer = err.with_context(source="cli")
    assert richer is not err
    assert isinstance(richer, KeccakHashError)
    assert richer.data == {"length": 3, "source": "cli"}
    assert err.data == {"length": 3}
    assert richer.code == BridgeErrorCode.DIGEST_HEX


def test_with_cause_keeps_class_and_code() -> None:
    cause = ValueError("inner")
    err = ConfigError("bad").with_cause(cause)
    assert isinstance(err, ConfigError)
    assert err.cause is cause
    assert err.to_dict(include_cause=True)["cause"] == {"type": "ValueError", "message": "inner"}


def test_not_found_code() -> None:
    err = NotFound("abcd", space="bridge_pool")
    assert isinstance(err, StorageError)
    assert err.code == BridgeErrorCode.NOT_FOUND
    assert err.data == {"key": "abcd", "space": "bridge_pool"}


def test_wrap_and_ensure() -> None:
    wrapped = wrap(RuntimeError("x"), op="encode")
    assert isinstance(wrapped, InternalError)
    assert isinstance(wrapped.cause, RuntimeError)
    assert wrapped.data == {"op": "encode"}

    as_token = wrap(RuntimeError("x"), as_=TokenError)
    assert isinstance(as_token, TokenError)

    original = ConfigError("c")
    assert wrap(original, extra=1).data == {"extra": 1}
    assert ensure_bridge_error(original) is original
    assert isinstance(ensure_bridge_error(KeyError("k")), InternalError)


def test_errors_raise_and_catch_as_exceptions() -> None:
    with pytest.raises(BridgeError):
        raise TokenError("nope")
    with pytest.raises(ValueError):
        raise KeccakHashError("nope")


# -- Logging --------------------------------------------------------------------------


@pytest.fixture
def stream():
    buf = io.StringIO()
    yield buf
    logger = logging.getLogger("ethbridge")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


def test_json_logs_carry_context_and_extras(stream: io.StringIO) -> None:
    blog.configure(json=True, level="DEBUG", stream=stream)
    log = blog.get_logger("ethbridge.test")
    with blog.trace_scope("t-1") as tid:
        blog.bind(component="valset", epoch=7)
        log.debug("encoded", extra={"size": 320, "digest": b"\xab"})
    assert tid == "t-1"
    record = json.loads(stream.getvalue().strip())
    assert record["msg"] == "encoded"
    assert record["level"] == "DEBUG"
    assert record["trace_id"] == "t-1"
    assert record["component"] == "valset"
    assert record["epoch"] == 7
    assert record["size"] == 320
    assert record["digest"] == "ab"


def test_trace_scope_restores_context() -> None:
    blog.bind(component="outer")
    with blog.trace_scope():
        assert "trace_id" in blog.context()
    assert blog.context() == {"component": "outer"}
    blog.unbind("component")
    assert blog.context() == {}


def test_text_format(stream: io.StringIO) -> None:
    blog.configure(json=False, level="INFO", stream=stream)
    blog.get_logger("ethbridge.test").info("hello", extra={"size": 1})
    line = stream.getvalue().strip()
    assert line.endswith("| hello")
    assert "size=1" in line
    assert "ethbridge.test" in line


def test_level_filters(stream: io.StringIO) -> None:
    blog.configure(json=True, level="WARNING", stream=stream)
    blog.get_logger("ethbridge.test").info("quiet")
    assert stream.getvalue() == ""


def test_env_selects_format_and_level(stream: io.StringIO, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(blog.ENV_FORMAT, "json")
    monkeypatch.setenv(blog.ENV_LEVEL, "ERROR")
    blog.configure(stream=stream)
    log = blog.get_logger("ethbridge.test")
    log.warning("dropped")
    log.error("kept")
    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["msg"] == "kept"
