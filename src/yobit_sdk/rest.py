"""
rest.py – REST clients (sync and async) for the YoBit exchange.

Public market data is served by API v3 (``GET /api/3/<op>/<pairs>``);
private calls go to ``POST /tapi/`` as signed form bodies.

Errors never end the process; every failure is raised to the caller:

  YobitHTTPError   – network failure or non-200 status (carries the URL)
  YobitAPIError    – exchange answered ``{"success": 0, "error": "..."}``
  YobitDecodeError – body matched neither the success nor the error shape

Nothing is retried.  A retried private call would need a fresh nonce anyway.

The anti-bot challenge in front of yobit.net is not handled here.  Pass a
``requests.Session``-compatible object that solves it transparently (for
example one from ``cloudscraper.create_scraper()``) as ``session=``.

Usage – sync
------------
    client = YobitRestClient(credential, nonce_store)
    client.tickers(["ltc_btc", "eth_btc"])
    client.trade("ltc_btc", TradeType.BUY, rate="0.0123", amount=1)

Usage – async
-------------
    async with AsyncYobitRestClient(credential, nonce_store) as client:
        book = await client.depth("ltc_btc", limit=20)
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Iterable, Optional, TypeVar

import requests
from pydantic import TypeAdapter, ValidationError

from .errors import ConfigurationError, YobitAPIError, YobitDecodeError, YobitHTTPError
from .nonce import NonceStore
from .signing import (
    Amount,
    Param,
    SignedRequest,
    async_build_authenticated_call,
    build_authenticated_call,
    format_amount,
)
from .types import (
    ActiveOrdersResponse,
    ApiCredential,
    CancelOrderResponse,
    DepthResponse,
    ErrorResponse,
    GetInfoResponse,
    InfoResponse,
    OrderInfoResponse,
    PairInfo,
    TickersResponse,
    TradeHistoryResponse,
    TradeResponse,
    TradesResponse,
    TradeType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

BASE_URL              = "https://yobit.net"
API_VERSION           = "3"
DEFAULT_DEPTH_LIMIT   = 150
DEFAULT_HISTORY_COUNT = 1000
DEFAULT_TIMEOUT_S     = 10.0


# ---------------------------------------------------------------------------
# Response deserializer
# ---------------------------------------------------------------------------

@functools.lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def parse_response(data: bytes, model: Any, operation: str = "") -> Any:
    """
    Validate raw JSON bytes into model (a pydantic model or a typing alias).

    When the body does not fit model, fall back to the ``{success, error}``
    shape and raise YobitAPIError with the server's own message.
    """
    try:
        return _adapter(model).validate_json(data)
    except ValidationError as exc:
        try:
            err = ErrorResponse.model_validate_json(data)
        except ValidationError:
            raise YobitDecodeError(data, str(exc), operation) from exc
        raise YobitAPIError(err.error, operation) from exc


def _check_success(result: Any, operation: str) -> Any:
    if result.success == 0:
        raise YobitAPIError(result.error or "unknown error", operation)
    return result


# ---------------------------------------------------------------------------
# Request building (shared by sync and async clients)
# ---------------------------------------------------------------------------

def _api_url(base_url: str, path: str) -> str:
    return f"{base_url}/api/{API_VERSION}/{path}"


def _trade_url(base_url: str) -> str:
    return f"{base_url}/tapi/"


def _pairs_path(pairs: Iterable[str]) -> str:
    pairs = list(pairs)
    if not pairs:
        raise ValueError("Tickers: pair list is empty")
    return "-".join(pairs)


def _trade_params(pair: str, trade_type: TradeType | str, rate: Amount, amount: Amount) -> list[Param]:
    return [
        ("pair",   pair),
        ("type",   TradeType(trade_type).value),
        ("rate",   format_amount(rate)),
        ("amount", format_amount(amount)),
    ]


class _PairCache:
    """Market list captured by the last info() call."""

    def __init__(self) -> None:
        self._pairs: dict[str, PairInfo] = {}

    def _remember(self, info: InfoResponse) -> InfoResponse:
        self._pairs = dict(info.pairs)
        return info

    def is_market_exists(self, pair: str) -> bool:
        return pair in self._pairs

    def fee(self, pair: str) -> float:
        """Fee percentage for pair; KeyError if info() has not listed it."""
        return float(self._pairs[pair].fee)

    @property
    def pairs(self) -> dict[str, PairInfo]:
        return dict(self._pairs)


# ---------------------------------------------------------------------------
# Synchronous client
# ---------------------------------------------------------------------------

class YobitRestClient(_PairCache):
    """
    Synchronous REST client for YoBit.

    Parameters
    ----------
    credential  : API key pair; required only for private calls
    nonce_store : durable nonce counter for that credential
    session     : requests.Session-compatible transport.  A plain
                  requests.Session is created (and owned) when omitted.
    base_url    : site origin
    timeout     : HTTP timeout in seconds
    """

    def __init__(
        self,
        credential: Optional[ApiCredential] = None,
        nonce_store: Optional[NonceStore] = None,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        super().__init__()
        self._credential  = credential
        self._nonce_store = nonce_store
        self._owns_session = session is None
        self._session     = session if session is not None else requests.Session()
        self._base_url    = base_url.rstrip("/")
        self._timeout     = timeout

    def __enter__(self) -> "YobitRestClient":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Internal request helpers
    # ------------------------------------------------------------------

    def _query(
        self,
        method: str,
        url: str,
        *,
        data: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> bytes:
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(
                method, url, data=data, headers=headers, timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise YobitHTTPError(url, method=method) from exc

        if resp.status_code != 200:
            raise YobitHTTPError(url, resp.status_code, resp.text, method=method)
        return resp.content

    def _call_public(self, operation: str, path: str, model: Any) -> Any:
        start = time.monotonic()
        raw   = self._query("GET", _api_url(self._base_url, path))
        logger.debug("Yobit.%s took %.3f s", operation, time.monotonic() - start)
        return parse_response(raw, model, operation)

    def _sign(self, method: str, params: Iterable[Param]) -> SignedRequest:
        if self._credential is None or self._nonce_store is None:
            raise ConfigurationError(f"{method}: private calls need a credential and a nonce store")
        return build_authenticated_call(self._credential, self._nonce_store, method, params)

    def _call_private(self, method: str, model: type[T], params: Iterable[Param] = ()) -> T:
        call  = self._sign(method, params)
        start = time.monotonic()
        raw   = self._query("POST", _trade_url(self._base_url), data=call.body, headers=call.headers)
        logger.debug("Yobit.%s took %.3f s", method, time.monotonic() - start)
        return _check_success(parse_response(raw, model, method), method)

    # ------------------------------------------------------------------
    # Public market data
    # ------------------------------------------------------------------

    def info(self) -> InfoResponse:
        """Server time and the full market list (also cached for fee lookups)."""
        return self._remember(self._call_public("Info", "info", InfoResponse))

    def tickers(self, pairs: Iterable[str]) -> TickersResponse:
        """24h ticker statistics for one or more pairs."""
        return self._call_public("Tickers24", f"ticker/{_pairs_path(pairs)}", TickersResponse)

    def depth(self, pair: str, limit: int = DEFAULT_DEPTH_LIMIT) -> DepthResponse:
        """Order book asks and bids, at most ``limit`` levels per side."""
        return self._call_public("Depth", f"depth/{pair}?limit={limit}", DepthResponse)

    def trades(self, pair: str, limit: int = DEFAULT_DEPTH_LIMIT) -> TradesResponse:
        """Most recent public trades."""
        return self._call_public("Trades", f"trades/{pair}?limit={limit}", TradesResponse)

    # ------------------------------------------------------------------
    # Private trade API
    # ------------------------------------------------------------------

    def get_info(self) -> GetInfoResponse:
        """Balances, key rights and open order count."""
        return self._call_private("getInfo", GetInfoResponse)

    def active_orders(self, pair: str) -> ActiveOrdersResponse:
        return self._call_private("ActiveOrders", ActiveOrdersResponse, [("pair", pair)])

    def order_info(self, order_id: int | str) -> OrderInfoResponse:
        return self._call_private("OrderInfo", OrderInfoResponse, [("order_id", str(order_id))])

    def trade(
        self,
        pair: str,
        trade_type: TradeType | str,
        rate: Amount,
        amount: Amount,
    ) -> TradeResponse:
        """Place a limit order.  rate and amount are sent with 8 decimals."""
        return self._call_private("Trade", TradeResponse, _trade_params(pair, trade_type, rate, amount))

    def cancel_order(self, order_id: int | str) -> CancelOrderResponse:
        return self._call_private("CancelOrder", CancelOrderResponse, [("order_id", str(order_id))])

    def trade_history(self, pair: str, count: int = DEFAULT_HISTORY_COUNT) -> TradeHistoryResponse:
        return self._call_private(
            "TradeHistory", TradeHistoryResponse, [("pair", pair), ("count", str(count))],
        )


# ---------------------------------------------------------------------------
# Async client
# ---------------------------------------------------------------------------

class AsyncYobitRestClient(_PairCache):
    """
    Async REST client for YoBit (aiohttp-based).

    Shares the NonceStore with a sync client when both are used against the
    same credential; nonces stay strictly increasing across the two.

    Parameters
    ----------
    cookies : initial cookies for the aiohttp session, typically
              CookieStore.as_dict() so a solved challenge is reused
    """

    def __init__(
        self,
        credential: Optional[ApiCredential] = None,
        nonce_store: Optional[NonceStore] = None,
        *,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        cookies: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__()
        self._credential  = credential
        self._nonce_store = nonce_store
        self._base_url    = base_url.rstrip("/")
        self._timeout     = timeout
        self._cookies     = dict(cookies or {})
        self._session: Any = None   # aiohttp.ClientSession, created on first use

    async def __aenter__(self) -> "AsyncYobitRestClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def update_cookies(self, cookies: dict[str, str]) -> None:
        """Merge cookies into the ones sent with every request."""
        self._cookies.update(cookies)
        if self._session is not None and not self._session.closed:
            self._session.cookie_jar.update_cookies(cookies)

    # ------------------------------------------------------------------
    # Internal async request helpers
    # ------------------------------------------------------------------

    async def _query(
        self,
        method: str,
        url: str,
        *,
        data: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> bytes:
        import aiohttp

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(cookies=self._cookies)

        logger.debug("%s %s", method, url)
        try:
            async with self._session.request(
                method, url,
                data=data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise YobitHTTPError(url, resp.status, body, method=method)
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise YobitHTTPError(url, method=method) from exc

    async def _call_public(self, operation: str, path: str, model: Any) -> Any:
        start = time.monotonic()
        raw   = await self._query("GET", _api_url(self._base_url, path))
        logger.debug("Yobit.%s took %.3f s", operation, time.monotonic() - start)
        return parse_response(raw, model, operation)

    async def _call_private(self, method: str, model: type[T], params: Iterable[Param] = ()) -> T:
        if self._credential is None or self._nonce_store is None:
            raise ConfigurationError(f"{method}: private calls need a credential and a nonce store")
        call  = await async_build_authenticated_call(self._credential, self._nonce_store, method, params)
        start = time.monotonic()
        raw   = await self._query("POST", _trade_url(self._base_url), data=call.body, headers=call.headers)
        logger.debug("Yobit.%s took %.3f s", method, time.monotonic() - start)
        return _check_success(parse_response(raw, model, method), method)

    # ------------------------------------------------------------------
    # Public market data
    # ------------------------------------------------------------------

    async def info(self) -> InfoResponse:
        return self._remember(await self._call_public("Info", "info", InfoResponse))

    async def tickers(self, pairs: Iterable[str]) -> TickersResponse:
        return await self._call_public("Tickers24", f"ticker/{_pairs_path(pairs)}", TickersResponse)

    async def depth(self, pair: str, limit: int = DEFAULT_DEPTH_LIMIT) -> DepthResponse:
        return await self._call_public("Depth", f"depth/{pair}?limit={limit}", DepthResponse)

    async def trades(self, pair: str, limit: int = DEFAULT_DEPTH_LIMIT) -> TradesResponse:
        return await self._call_public("Trades", f"trades/{pair}?limit={limit}", TradesResponse)

    # ------------------------------------------------------------------
    # Private trade API
    # ------------------------------------------------------------------

    async def get_info(self) -> GetInfoResponse:
        return await self._call_private("getInfo", GetInfoResponse)

    async def active_orders(self, pair: str) -> ActiveOrdersResponse:
        return await self._call_private("ActiveOrders", ActiveOrdersResponse, [("pair", pair)])

    async def order_info(self, order_id: int | str) -> OrderInfoResponse:
        return await self._call_private("OrderInfo", OrderInfoResponse, [("order_id", str(order_id))])

    async def trade(
        self,
        pair: str,
        trade_type: TradeType | str,
        rate: Amount,
        amount: Amount,
    ) -> TradeResponse:
        return await self._call_private("Trade", TradeResponse, _trade_params(pair, trade_type, rate, amount))

    async def cancel_order(self, order_id: int | str) -> CancelOrderResponse:
        return await self._call_private("CancelOrder", CancelOrderResponse, [("order_id", str(order_id))])

    async def trade_history(self, pair: str, count: int = DEFAULT_HISTORY_COUNT) -> TradeHistoryResponse:
        return await self._call_private(
            "TradeHistory", TradeHistoryResponse, [("pair", pair), ("count", str(count))],
        )
