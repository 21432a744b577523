"""Key-value store backed by a local SQLite database."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterable

from core.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key BLOB PRIMARY KEY,
    value BLOB NOT NULL
);
"""


class SQLiteStore(KeyValueStore):
    """KeyValueStore implementation using SQLite with WAL mode.

    A batch runs inside a single transaction, so metadata and snapshot
    records written together are committed together.
    """

    def __init__(self, db_path: str | Path = "hashpath.db") -> None:
        path = Path(db_path)
        if str(db_path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(db_path)
        # isolation_level=None => autocommit mode, giving us manual
        # transaction control for batches.
        self._conn = sqlite3.connect(
            self.db_path,
            isolation_level=None,
            timeout=5,
            check_same_thread=False,
        )
        # One connection is shared by every caller; a transaction must not
        # interleave with statements from another thread.
        self._lock = threading.Lock()
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug(f"Opened SQLite store at {self.db_path}")

    def get(self, key: bytes) -> bytes | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (bytes(key),)
            ).fetchone()
        return bytes(row[0]) if row is not None else None

    def put(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (bytes(key), bytes(value)),
            )

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (bytes(key),))

    def write_batch(self, items: Iterable[tuple[bytes, bytes]]) -> None:
        staged = [(bytes(key), bytes(value)) for key, value in items]
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE")
            try:
                self._conn.executemany(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    staged,
                )
                self._conn.execute("COMMIT")
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise

    def close(self) -> None:
        with self._lock:
            self._conn.close()
