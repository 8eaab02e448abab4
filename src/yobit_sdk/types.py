"""
types.py – Pydantic v2 models for the YoBit API schema.

Public API v3 responses are bare JSON maps keyed by pair name
(``{"ltc_btc": {...}}``); private ``/tapi/`` responses share an envelope:

    {"success": 1, "return": {...}}
    {"success": 0, "error": "invalid nonce"}

Monetary values arrive as JSON numbers.  They are validated into Decimal so
no precision is lost between the exchange and arithmetic in user code.

Deserialisation
---------------
Use rest.parse_response(raw_bytes, Model) rather than calling
Model.model_validate_json directly; it also handles the error fallback.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, unique
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Credential
# ---------------------------------------------------------------------------

class ApiCredential(BaseModel):
    """
    API key pair issued by YoBit.

    key    : public key identifier, sent in the ``Key`` header
    secret : signing secret, never transmitted and never persisted
    """
    model_config = ConfigDict(frozen=True)

    key:    str
    secret: str = Field(repr=False)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

@unique
class TradeType(str, Enum):
    BUY  = "buy"
    SELL = "sell"


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    """Minimal shape YoBit uses for every failure, public or private."""
    success: int
    error:   str


# ---------------------------------------------------------------------------
# Public market data
# ---------------------------------------------------------------------------

class Ticker(BaseModel):
    high:    Decimal
    low:     Decimal
    avg:     Decimal
    vol:     Decimal
    vol_cur: Decimal
    buy:     Decimal
    sell:    Decimal
    last:    Decimal
    updated: int


class PairInfo(BaseModel):
    decimal_places: int
    min_price:      Decimal
    max_price:      Decimal
    min_amount:     Decimal
    hidden:         int     = 0
    fee:            Decimal = Decimal("0")


class InfoResponse(BaseModel):
    server_time: int
    pairs:       dict[str, PairInfo]


class Offer(BaseModel):
    """One order-book level.  YoBit sends it as a ``[price, quantity]`` pair."""
    price:    Decimal
    quantity: Decimal

    @model_validator(mode="before")
    @classmethod
    def from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"wrong number of fields in Offer: {len(data)} != 2")
            return {"price": data[0], "quantity": data[1]}
        return data


class Offers(BaseModel):
    asks: list[Offer] = []
    bids: list[Offer] = []


class Trade(BaseModel):
    """A single public trade from /api/3/trades."""
    type:      str
    price:     Decimal
    amount:    Decimal
    tid:       int
    timestamp: int


# Public responses are maps keyed by pair name
TickersResponse = dict[str, Ticker]
DepthResponse   = dict[str, Offers]
TradesResponse  = dict[str, list[Trade]]


# ---------------------------------------------------------------------------
# Private trade API
# ---------------------------------------------------------------------------

class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: int
    error:   str = ""


class GetInfoReturn(BaseModel):
    rights:             dict[str, int]     = {}
    funds:              dict[str, Decimal] = {}
    funds_incl_orders:  dict[str, Decimal] = {}
    transaction_count:  int = 0
    open_orders:        int = 0
    server_time:        int = 0


class GetInfoResponse(_Envelope):
    data: GetInfoReturn = Field(default_factory=GetInfoReturn, alias="return")


class ActiveOrder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pair:    str
    type:    str
    amount:  Decimal
    rate:    Decimal
    created: int = Field(alias="timestamp_created")
    status:  int


class ActiveOrdersResponse(_Envelope):
    orders: dict[str, ActiveOrder] = Field(default_factory=dict, alias="return")


class OrderInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pair:         str
    type:         str
    start_amount: Decimal
    amount:       Decimal
    rate:         Decimal
    created:      int = Field(alias="timestamp_created")
    status:       int


class OrderInfoResponse(_Envelope):
    orders: dict[str, OrderInfo] = Field(default_factory=dict, alias="return")


class HistoricOrder(BaseModel):
    pair:          str
    type:          str
    amount:        Decimal
    rate:          Decimal
    order_id:      int
    is_your_order: int
    timestamp:     int


class TradeHistoryResponse(_Envelope):
    orders: dict[str, HistoricOrder] = Field(default_factory=dict, alias="return")


class TradeResult(BaseModel):
    received: Decimal = Decimal("0")
    remains:  Decimal = Decimal("0")
    order_id: int     = 0
    funds:    dict[str, Decimal] = {}


class TradeResponse(_Envelope):
    result: TradeResult = Field(default_factory=TradeResult, alias="return")


class CancelResult(BaseModel):
    order_id: int = 0
    funds:    dict[str, Decimal] = {}


class CancelOrderResponse(_Envelope):
    result: CancelResult = Field(default_factory=CancelResult, alias="return")
