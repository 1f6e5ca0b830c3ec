from __future__ import annotations

"""
SQLite-backed KV store
======================

Embedded KV using SQLite (BLOB keys & values), implementing the `KV` /
`ReadOnlyKV` / `Batch` protocols from `ethbridge.storage.kv`.

- Table schema: kv(k BLOB PRIMARY KEY, v BLOB NOT NULL)
- Ordering is lexicographic (memcmp), so prefix scans return keys in the
  same order on every node.
- `open_sqlite_kv(":memory:")` gives a throwaway store for tests and CLIs.
"""

import os
import sqlite3
from typing import Iterator, Optional, Tuple, Union

from ethbridge.errors import StorageError
from ethbridge.logging import get_logger

from .kv import KV, Batch

log = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_PRAGMAS = {
    "journal_mode": "WAL",
    "synchronous": "NORMAL",
    "temp_store": "MEMORY",
    "foreign_keys": "OFF",
}


def _apply_pragmas(conn: sqlite3.Connection, pragmas: Optional[dict] = None) -> None:
    p = dict(DEFAULT_PRAGMAS)
    if pragmas:
        p.update(pragmas)
    cur = conn.cursor()
    for name, value in p.items():
        cur.execute(f"PRAGMA {name}={value}")
    cur.close()


def _migrate(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            k BLOB PRIMARY KEY,
            v BLOB NOT NULL
        )
        """
    )


def _prefix_hi(prefix: bytes) -> Optional[bytes]:
    """
    Smallest byte string greater than every key starting with `prefix`, or
    None if no such bound exists (empty or all-0xFF prefix).

    Example: b"ab\\x01" -> b"ab\\x02"; b"\\xff\\xff" -> None
    """
    p = bytearray(prefix)
    for i in range(len(p) - 1, -1, -1):
        if p[i] != 0xFF:
            p[i] += 1
            del p[i + 1:]
            return bytes(p)
    return None


class SQLiteBatch(Batch):
    __slots__ = ("_conn", "_open")

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._open = False

    def __enter__(self) -> "SQLiteBatch":
        if self._open:
            raise StorageError("batch already open (nested batches not supported)", retryable=False)
        self._conn.execute("BEGIN IMMEDIATE")
        self._open = True
        return self

    def put(self, key: bytes, value: bytes) -> None:
        if not self._open:
            raise StorageError("batch not open", retryable=False)
        self._conn.execute(
            "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
            (bytes(key), bytes(value)),
        )

    def delete(self, key: bytes) -> None:
        if not self._open:
            raise StorageError("batch not open", retryable=False)
        self._conn.execute("DELETE FROM kv WHERE k = ?", (bytes(key),))

    def commit(self) -> None:
        if not self._open:
            return
        self._conn.execute("COMMIT")
        self._open = False

    def rollback(self) -> None:
        if not self._open:
            return
        self._conn.execute("ROLLBACK")
        self._open = False

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        try:
            if exc_type is None:
                self.commit()
            else:
                log.debug("rolling back batch", extra={"error": repr(exc)})
                self.rollback()
        finally:
            self._open = False
        return None


class SQLiteKV(KV):
    """SQLite-backed KV. Use `open_sqlite_kv(path)` to construct."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- ReadOnlyKV ---

    def get(self, key: bytes) -> Optional[bytes]:
        cur = self._conn.execute("SELECT v FROM kv WHERE k = ?", (bytes(key),))
        row = cur.fetchone()
        cur.close()
        return bytes(row[0]) if row is not None else None

    def has(self, key: bytes) -> bool:
        cur = self._conn.execute("SELECT 1 FROM kv WHERE k = ? LIMIT 1", (bytes(key),))
        row = cur.fetchone()
        cur.close()
        return row is not None

    def iter_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        hi = _prefix_hi(prefix)
        if hi is not None:
            sql = "SELECT k, v FROM kv WHERE k >= ? AND k < ? ORDER BY k"
            args: tuple = (bytes(prefix), hi)
        else:
            sql = "SELECT k, v FROM kv WHERE substr(k, 1, ?) = ? ORDER BY k"
            args = (len(prefix), bytes(prefix))
        cur = self._conn.execute(sql, args)
        try:
            for k, v in cur:
                yield bytes(k), bytes(v)
        finally:
            cur.close()

    def close(self) -> None:
        self._conn.close()

    # --- KV ---

    def put(self, key: bytes, value: bytes) -> None:
        self._conn.execute(
            "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
            (bytes(key), bytes(value)),
        )

    def delete(self, key: bytes) -> None:
        self._conn.execute("DELETE FROM kv WHERE k = ?", (bytes(key),))

    def batch(self) -> Batch:
        return SQLiteBatch(self._conn)


def open_sqlite_kv(
    path: PathLike,
    *,
    pragmas: Optional[dict] = None,
    create: bool = True,
) -> SQLiteKV:
    """
    Open (or create) a SQLite KV at `path` (":memory:" for an in-memory store).

    `create=False` raises `StorageError` if the database file does not exist.
    """
    path_str = os.fspath(path)
    if path_str != ":memory:":
        if not create and not os.path.exists(path_str):
            raise StorageError("SQLite KV not found", retryable=False, path=path_str)
        parent = os.path.dirname(os.path.abspath(path_str))
        os.makedirs(parent, exist_ok=True)
    try:
        conn = sqlite3.connect(
            path_str,
            isolation_level=None,  # autocommit; batches BEGIN explicitly
            check_same_thread=False,
        )
        _apply_pragmas(conn, pragmas)
        _migrate(conn)
    except sqlite3.Error as e:
        raise StorageError("failed to open SQLite KV", path=path_str).with_cause(e) from e
    log.debug("opened sqlite kv", extra={"path": path_str})
    return SQLiteKV(conn)


__all__ = [
    "SQLiteKV",
    "SQLiteBatch",
    "open_sqlite_kv",
]
