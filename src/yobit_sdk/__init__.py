"""
YoBit SDK – Python SDK for the YoBit exchange HTTP API.

Provides:
  - Unified façade                     (client.py  → YobitClient)
  - HMAC-SHA512 request signing        (signing.py → sign, build_authenticated_call)
  - Durable nonce counter              (nonce.py   → NonceStore)
  - SQLite key-value storage           (storage.py → LocalStorage)
  - Cookie jar persistence             (cookies.py → CookieStore)
  - Typed Pydantic v2 models           (types.py)
  - Synchronous REST client            (rest.py    → YobitRestClient)
  - Async REST client                  (rest.py    → AsyncYobitRestClient)

Quickstart
----------
    from yobit_sdk import YobitClient, TradeType

    with YobitClient(api_key="...", api_secret="...") as client:
        client.handshake()
        print(client.rest.tickers(["ltc_btc"]))
        client.rest.trade("ltc_btc", TradeType.BUY, rate="0.0123", amount="1")
"""

from .types import (
    # Credential
    ApiCredential,
    # Enums
    TradeType,
    # Public market data
    ErrorResponse,
    Ticker,
    PairInfo,
    InfoResponse,
    Offer,
    Offers,
    Trade,
    TickersResponse,
    DepthResponse,
    TradesResponse,
    # Private trade API
    GetInfoReturn,
    GetInfoResponse,
    ActiveOrder,
    ActiveOrdersResponse,
    OrderInfo,
    OrderInfoResponse,
    HistoricOrder,
    TradeHistoryResponse,
    TradeResult,
    TradeResponse,
    CancelResult,
    CancelOrderResponse,
)
from .errors import (
    YobitError,
    StorageError,
    ConfigurationError,
    NonceCorruptError,
    DurabilityError,
    NonceWriteError,
    YobitHTTPError,
    YobitAPIError,
    YobitDecodeError,
)
from .storage import LocalStorage
from .nonce import NonceStore
from .signing import (
    SignedRequest,
    sign,
    format_amount,
    encode_body,
    build_authenticated_call,
    async_build_authenticated_call,
)
from .cookies import CookieStore
from .rest import YobitRestClient, AsyncYobitRestClient, parse_response
from .client import YobitClient

__all__ = [
    # Credential
    "ApiCredential",
    # Enums
    "TradeType",
    # Public market data
    "ErrorResponse",
    "Ticker",
    "PairInfo",
    "InfoResponse",
    "Offer",
    "Offers",
    "Trade",
    "TickersResponse",
    "DepthResponse",
    "TradesResponse",
    # Private trade API
    "GetInfoReturn",
    "GetInfoResponse",
    "ActiveOrder",
    "ActiveOrdersResponse",
    "OrderInfo",
    "OrderInfoResponse",
    "HistoricOrder",
    "TradeHistoryResponse",
    "TradeResult",
    "TradeResponse",
    "CancelResult",
    "CancelOrderResponse",
    # Errors
    "YobitError",
    "StorageError",
    "ConfigurationError",
    "NonceCorruptError",
    "DurabilityError",
    "NonceWriteError",
    "YobitHTTPError",
    "YobitAPIError",
    "YobitDecodeError",
    # Storage / nonce
    "LocalStorage",
    "NonceStore",
    # Signing
    "SignedRequest",
    "sign",
    "format_amount",
    "encode_body",
    "build_authenticated_call",
    "async_build_authenticated_call",
    # Cookies
    "CookieStore",
    # REST
    "YobitRestClient",
    "AsyncYobitRestClient",
    "parse_response",
    # Unified façade
    "YobitClient",
]

__version__ = "0.1.0"
