"""
Shared pytest fixtures for the ethbridge test-suite.

- Logging and config are isolated from the developer's environment: every
  test runs with ETHBRIDGE_* variables cleared and a temporary home.
- A fresh in-memory SQLite KV per test.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from ethbridge.logging import clear_context
from ethbridge.storage.sqlite import SQLiteKV, open_sqlite_kv


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    for key in list(os.environ):
        if key.startswith("ETHBRIDGE_"):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "home"
    monkeypatch.setenv("ETHBRIDGE_HOME", str(home))
    yield home
    clear_context()


@pytest.fixture
def bridge_home(_isolated_env: Path) -> Path:
    """Node home directory used by config/CLI tests (not created eagerly)."""
    return _isolated_env


@pytest.fixture
def kv() -> Iterator[SQLiteKV]:
    store = open_sqlite_kv(":memory:")
    try:
        yield store
    finally:
        store.close()
