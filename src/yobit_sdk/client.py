"""
client.py – Unified YobitClient façade.

Owns the durable storage, the credential's NonceStore, the cookie snapshot
and both REST clients, so one object is all a caller has to construct and
close.

Usage
-----
    from yobit_sdk import YobitClient, TradeType

    with YobitClient(api_key="...", api_secret="...") as client:
        client.handshake()                       # reuse / refresh cookies
        client.rest.get_info()
        client.rest.trade("ltc_btc", TradeType.BUY, rate="0.0123", amount=1)

    # or, configured from YOBIT_* environment variables
    client = YobitClient.from_env()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import requests

from .cookies import CookieStore
from .errors import ConfigurationError
from .nonce import NonceStore
from .rest import BASE_URL, DEFAULT_TIMEOUT_S, AsyncYobitRestClient, YobitRestClient
from .storage import LocalStorage
from .types import ApiCredential, InfoResponse

logger = logging.getLogger(__name__)

_DB_FILENAME = "yobit.db"


class YobitClient:
    """
    Façade over the YoBit SDK.

    Parameters
    ----------
    api_key      : YoBit API key
    api_secret   : matching secret; used only to sign, never stored
    data_dir     : directory holding the SQLite state (nonce, cookies)
    session      : requests.Session-compatible transport; pass a
                   challenge-solving session here when the site demands it
    base_url     : site origin
    rest_timeout : HTTP timeout in seconds for REST requests
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        data_dir: Union[str, Path] = "data",
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        rest_timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._credential = ApiCredential(key=api_key, secret=api_secret)
        self._storage    = LocalStorage(Path(data_dir) / _DB_FILENAME)
        self._nonces     = NonceStore(self._storage, key=NonceStore.key_for(api_key))
        self._cookies    = CookieStore(self._storage, base_url)
        self.rest = YobitRestClient(
            self._credential, self._nonces,
            session=session, base_url=base_url, timeout=rest_timeout,
        )
        self.aio = AsyncYobitRestClient(
            self._credential, self._nonces,
            base_url=base_url, timeout=rest_timeout, cookies=self._cookies.as_dict(),
        )

    @classmethod
    def from_env(cls, session: Optional[requests.Session] = None) -> "YobitClient":
        """
        Build a client from YOBIT_API_KEY, YOBIT_API_SECRET, YOBIT_DATA_DIR
        (default "data") and YOBIT_TIMEOUT (default 10 s).
        """
        try:
            api_key    = os.environ["YOBIT_API_KEY"]
            api_secret = os.environ["YOBIT_API_SECRET"]
        except KeyError as exc:
            raise ConfigurationError(f"environment variable {exc.args[0]} is not set") from exc
        return cls(
            api_key,
            api_secret,
            data_dir=os.environ.get("YOBIT_DATA_DIR", "data"),
            session=session,
            rest_timeout=float(os.environ.get("YOBIT_TIMEOUT", DEFAULT_TIMEOUT_S)),
        )

    # ------------------------------------------------------------------
    # Context managers
    # ------------------------------------------------------------------

    def __enter__(self) -> "YobitClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    async def __aenter__(self) -> "YobitClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    def close(self) -> None:
        """Close the sync session and release the storage handle."""
        self.rest.close()
        self._storage.close()

    async def aclose(self) -> None:
        await self.aio.close()
        self.close()

    # ------------------------------------------------------------------
    # Startup handshake
    # ------------------------------------------------------------------

    def handshake(self) -> InfoResponse:
        """
        Restore saved cookies, make one public call so the transport can
        clear any challenge, then persist the resulting cookies.
        """
        self._cookies.load(self.rest.session.cookies)
        info = self.rest.info()
        self._cookies.save(self.rest.session.cookies)
        self.aio.update_cookies(self._cookies.as_dict())
        logger.info("YoBit handshake done, %d markets listed", len(info.pairs))
        return info

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def credential(self) -> ApiCredential:
        return self._credential

    @property
    def nonces(self) -> NonceStore:
        return self._nonces

    @property
    def cookies(self) -> CookieStore:
        return self._cookies

    @property
    def storage(self) -> LocalStorage:
        return self._storage
