"""
tests/test_storage.py – LocalStorage and CookieStore.

All tests use a throwaway SQLite file under tmp_path.
"""

from __future__ import annotations

import json

import pytest
from requests.cookies import RequestsCookieJar

from yobit_sdk import CookieStore, LocalStorage, StorageError


class TestLocalStorage:
    def test_missing_key_is_none(self, storage: LocalStorage) -> None:
        assert storage.get("absent") is None

    def test_put_then_get(self, storage: LocalStorage) -> None:
        storage.put("k", b"v")
        assert storage.get("k") == b"v"

    def test_put_replaces(self, storage: LocalStorage) -> None:
        storage.put("k", b"1")
        storage.put("k", b"2")
        assert storage.get("k") == b"2"

    def test_delete(self, storage: LocalStorage) -> None:
        storage.put("k", b"1")
        storage.delete("k")
        assert storage.get("k") is None

    def test_values_survive_reopen(self, tmp_path) -> None:
        path = tmp_path / "state.db"
        with LocalStorage(path) as s:
            s.put("k", b"persisted")
        with LocalStorage(path) as s:
            assert s.get("k") == b"persisted"

    def test_creates_parent_directory(self, tmp_path) -> None:
        path = tmp_path / "nested" / "dir" / "state.db"
        with LocalStorage(path):
            pass
        assert path.exists()

    def test_close_is_idempotent(self, tmp_path) -> None:
        s = LocalStorage(tmp_path / "state.db")
        s.close()
        s.close()
        assert s.closed

    def test_use_after_close_raises(self, tmp_path) -> None:
        s = LocalStorage(tmp_path / "state.db")
        s.close()
        with pytest.raises(StorageError, match="closed"):
            s.get("k")
        with pytest.raises(StorageError, match="closed"):
            s.put("k", b"v")

    def test_failed_write_raises_storage_error(self, storage: LocalStorage) -> None:
        storage.put("k", b"1")
        storage._conn.execute("PRAGMA query_only=ON")
        with pytest.raises(StorageError, match="write of 'k' failed"):
            storage.put("k", b"2")
        with pytest.raises(StorageError, match="delete of 'k' failed"):
            storage.delete("k")
        assert storage.get("k") == b"1"

    def test_unopenable_path_raises(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageError):
            LocalStorage(blocker / "state.db")


def _jar(*cookies: tuple[str, str, str]) -> RequestsCookieJar:
    jar = RequestsCookieJar()
    for name, value, domain in cookies:
        jar.set(name, value, domain=domain, path="/")
    return jar


class TestCookieStore:
    def test_key_includes_origin(self, storage: LocalStorage) -> None:
        assert CookieStore(storage, "https://yobit.net/").key == "cookies:https://yobit.net"

    def test_save_and_load(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        assert store.save(_jar(("cf_clearance", "abc", "yobit.net"))) == 1

        restored = RequestsCookieJar()
        assert store.load(restored) == 1
        assert restored.get("cf_clearance", domain="yobit.net") == "abc"

    def test_save_keeps_only_origin_cookies(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        jar = _jar(
            ("a", "1", "yobit.net"),
            ("b", "2", ".yobit.net"),
            ("c", "3", "example.com"),
        )
        assert store.save(jar) == 2
        assert set(store.as_dict()) == {"a", "b"}

    def test_load_without_snapshot(self, storage: LocalStorage) -> None:
        jar = RequestsCookieJar()
        assert CookieStore(storage, "https://yobit.net").load(jar) == 0
        assert len(jar) == 0

    def test_undecodable_snapshot_is_ignored(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        storage.put(store.key, b"\x00not json")
        assert store.snapshot() == []

    def test_non_list_snapshot_is_ignored(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        storage.put(store.key, json.dumps({"a": 1}).encode())
        assert store.as_dict() == {}

    def test_malformed_entries_are_skipped(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        snapshot = [
            "not-a-dict",
            {"value": "no-name"},
            {"name": "cf_clearance", "value": "ok", "domain": "yobit.net", "path": "/", "extra": 1},
        ]
        storage.put(store.key, json.dumps(snapshot).encode())

        assert store.as_dict() == {"cf_clearance": "ok"}
        jar = RequestsCookieJar()
        assert store.load(jar) == 1
        assert jar.get("cf_clearance", domain="yobit.net") == "ok"

    def test_as_dict(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        store.save(_jar(("__ddg1", "x", "yobit.net"), ("cf_clearance", "y", "yobit.net")))
        assert store.as_dict() == {"__ddg1": "x", "cf_clearance": "y"}

    def test_save_to_read_only_storage_raises(self, storage: LocalStorage) -> None:
        store = CookieStore(storage, "https://yobit.net")
        storage._conn.execute("PRAGMA query_only=ON")
        with pytest.raises(StorageError):
            store.save(_jar(("cf_clearance", "abc", "yobit.net")))

    def test_shares_storage_with_nonce(self, storage: LocalStorage) -> None:
        storage.put("nonce:k", b"5")
        CookieStore(storage, "https://yobit.net").save(_jar(("a", "1", "yobit.net")))
        assert storage.get("nonce:k") == b"5"
