"""
Storage collaborators of the bridge: the KV interface, a SQLite backend, the
bridge key namespace and the bridge pool.
"""

from .kv import KV, Batch, Prefix, ReadOnlyKV
from .sqlite import SQLiteKV, open_sqlite_kv

__all__ = [
    "KV",
    "Batch",
    "Prefix",
    "ReadOnlyKV",
    "SQLiteKV",
    "open_sqlite_kv",
]
