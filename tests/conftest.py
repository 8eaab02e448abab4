"""
tests/conftest.py – Shared fixtures and the --integration switch.

All unit tests run offline.  The sync REST client is driven through
FakeSession, a requests.Session whose request() is answered from a route
table; the async client is mocked with aioresponses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import pytest
import requests

from yobit_sdk import ApiCredential, LocalStorage, NonceStore

# ---------------------------------------------------------------------------
# pytest plugin: --integration flag + skip logic
# ---------------------------------------------------------------------------

def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="Run integration tests against yobit.net",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as a live-network integration test (use --integration to run)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--integration"):
        return
    skip_integration = pytest.mark.skip(reason="pass --integration to run against yobit.net")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------

Body = Union[bytes, dict, list, Exception]


@dataclass
class RecordedCall:
    method:  str
    url:     str
    data:    Optional[bytes]
    headers: Optional[dict[str, str]]
    timeout: Optional[float]


class FakeSession(requests.Session):
    """requests.Session answering from a (method, url) route table."""

    def __init__(self) -> None:
        super().__init__()
        self.routes: dict[tuple[str, str], tuple[int, Body]] = {}
        self.calls: list[RecordedCall] = []
        # cookies the "server" hands out on every response
        self.server_cookies: dict[str, str] = {}

    def route(self, method: str, url: str, body: Body, status: int = 200) -> None:
        self.routes[(method.upper(), url)] = (status, body)

    def request(self, method: str, url: str, data: Any = None, headers: Any = None,  # type: ignore[override]
                timeout: Any = None, **_: Any) -> requests.Response:
        self.calls.append(RecordedCall(method.upper(), url, data, headers, timeout))
        for name, value in self.server_cookies.items():
            self.cookies.set(name, value, domain="yobit.net", path="/")

        status, body = self.routes[(method.upper(), url)]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode()

        resp = requests.Response()
        resp.status_code = status
        resp._content    = body
        resp.encoding    = "utf-8"
        resp.url         = url
        return resp


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_session() -> Callable[[], FakeSession]:
    return FakeSession


@pytest.fixture
def credential() -> ApiCredential:
    return ApiCredential(key="test-key", secret="test-secret")


@pytest.fixture
def storage(tmp_path):
    store = LocalStorage(tmp_path / "yobit.db")
    yield store
    store.close()


@pytest.fixture
def nonce_store(storage: LocalStorage, credential: ApiCredential) -> NonceStore:
    return NonceStore(storage, key=NonceStore.key_for(credential.key))
