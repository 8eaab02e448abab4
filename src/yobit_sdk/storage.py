"""
storage.py – Durable key-value storage backed by SQLite.

Holds the small amount of state the SDK must keep across restarts:

  nonce:<api_key>     decimal text of the next nonce to issue
  cookies:<origin>    JSON snapshot of the session cookie jar

Every put() is committed before it returns, so a value that has been
handed out is never lost on crash.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from .errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/yobit.db")


class LocalStorage:
    """
    Minimal get/put/delete store on a single SQLite table.

    One connection is shared between threads; a lock serializes access to it.

    Usage
    -----
        with LocalStorage("data/yobit.db") as store:
            store.put("nonce:my-key", b"42")
            store.get("nonce:my-key")      # b"42"
    """

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_DB_PATH
        self._lock = threading.Lock()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
                str(self._path), check_same_thread=False,
            )
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value BLOB NOT NULL)"
                )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot open storage at {self._path}: {exc}") from exc
        logger.info("Opened local storage at %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._conn is None

    def __enter__(self) -> "LocalStorage":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"storage at {self._path} is closed")
        return self._conn

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for key, or None when absent."""
        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT value FROM kv WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"read of {key!r} failed: {exc}") from exc
        if row is None:
            return None
        value = row[0]
        return value.encode() if isinstance(value, str) else bytes(value)

    def put(self, key: str, value: bytes) -> None:
        """Insert or replace key and commit.  A failed write raises StorageError."""
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                        (key, sqlite3.Binary(value)),
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"write of {key!r} failed: {exc}") from exc

    def delete(self, key: str) -> None:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            except sqlite3.Error as exc:
                raise StorageError(f"delete of {key!r} failed: {exc}") from exc

    def close(self) -> None:
        """Release the database handle.  Safe to call more than once."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Closed local storage at %s", self._path)
