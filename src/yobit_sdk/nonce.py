"""
nonce.py – Durable, strictly increasing nonce counter.

YoBit rejects any private request whose nonce is not greater than the last
one it accepted for the same key.  The counter therefore has to survive
restarts: it lives in LocalStorage as decimal text holding the *next* value
to hand out.

One NonceStore per credential.  Two credentials sharing one counter would
each see gaps but, worse, a second process using the same key with its own
counter would replay values, so the storage key embeds the API key.

    store = NonceStore(storage, key=NonceStore.key_for(credential.key))
    store.next()   # 1 on a fresh database
    store.next()   # 2
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading

from .errors import ConfigurationError, NonceCorruptError, NonceWriteError, StorageError
from .storage import LocalStorage

logger = logging.getLogger(__name__)

_INITIAL_NONCE = 1
_UINT64_MAX    = 2 ** 64 - 1

# (database file, counter key) -> lock shared by every NonceStore in the process
_COUNTER_LOCKS: dict[tuple[str, str], threading.Lock] = {}
_COUNTER_LOCKS_GUARD = threading.Lock()


def _counter_lock(storage: LocalStorage, key: str) -> threading.Lock:
    ident = (str(storage.path.resolve()), key)
    with _COUNTER_LOCKS_GUARD:
        return _COUNTER_LOCKS.setdefault(ident, threading.Lock())


class NonceStore:
    """
    Issues nonces from a counter persisted in LocalStorage.

    Parameters
    ----------
    storage : opened LocalStorage; not closed by the store
    key     : storage key of the counter

    Thread / async safety
    ---------------------
    next() holds a threading.Lock across read-increment-write, so concurrent
    threads never observe the same value.  The lock belongs to the counter
    (database file + key), not the instance: two NonceStores, or two
    YobitClients, opened on the same data_dir and API key in one process
    still serialize.  async_next() runs next() on a worker thread and shares
    the same lock.  Separate processes are not coordinated.
    """

    def __init__(self, storage: LocalStorage, key: str = "nonce") -> None:
        self._storage = storage
        self._key     = key
        self._lock    = _counter_lock(storage, key)

    @staticmethod
    def key_for(api_key: str) -> str:
        return f"nonce:{api_key}"

    @property
    def key(self) -> str:
        return self._key

    def next(self) -> int:
        """Return the next nonce and persist its successor before returning."""
        with self._lock:
            value = self._read()
            self._write(value + 1)
        logger.debug("Issued nonce %d from %s", value, self._key)
        return value

    def peek(self) -> int:
        """Value the next call to next() will return."""
        with self._lock:
            return self._read()

    async def async_next(self) -> int:
        return await asyncio.to_thread(self.next)

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _read(self) -> int:
        try:
            raw = self._storage.get(self._key)
        except StorageError as exc:
            raise ConfigurationError(f"nonce at {self._key!r} unreadable: {exc}") from exc

        if raw is None:
            logger.info("No nonce at %s, starting from %d", self._key, _INITIAL_NONCE)
            self._write(_INITIAL_NONCE)
            return _INITIAL_NONCE

        text = raw.decode("ascii", errors="replace").strip()
        if not text.isdigit():
            raise NonceCorruptError(self._key, raw)
        value = int(text)
        # value + 1 must still fit, the exchange treats nonces as uint64
        if value < _INITIAL_NONCE or value >= _UINT64_MAX:
            raise NonceCorruptError(self._key, raw)
        return value

    def _write(self, value: int) -> None:
        try:
            self._storage.put(self._key, str(value).encode("ascii"))
        except (StorageError, sqlite3.Error, OSError) as exc:
            raise NonceWriteError(self._key, value) from exc
