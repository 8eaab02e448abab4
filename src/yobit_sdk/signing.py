"""
signing.py – HMAC-SHA512 request signing for YoBit's trade API.

How it works
------------
1. Take the next nonce from the credential's NonceStore.
2. URL-encode ``method``, ``nonce`` and the call parameters, in that order,
   into the form body.
3. HMAC-SHA512 the exact body bytes with the API secret; the lowercase hex
   digest goes into the ``Sign`` header, the API key into ``Key``.

Because the nonce is part of the signed bytes it cannot be swapped after
signing without invalidating the signature.

    call = build_authenticated_call(credential, nonce_store, "Trade", [
        ("pair", "ltc_btc"), ("type", "buy"),
        ("rate", format_amount("0.0123")), ("amount", format_amount(1)),
    ])
    session.post(TRADE_URL, data=call.body, headers=call.headers)
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Iterable, Union
from urllib.parse import urlencode

from .nonce import NonceStore
from .types import ApiCredential

# 8 fractional digits is what the trade API accepts for rate / amount
_AMOUNT_QUANTUM = Decimal("0.00000001")

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Param  = tuple[str, str]
Amount = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class SignedRequest:
    """A form body together with the signature computed over it."""
    method:    str
    nonce:     int
    params:    tuple[Param, ...]
    body:      bytes
    signature: str
    key:       str

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": _FORM_CONTENT_TYPE,
            "Key":          self.key,
            "Sign":         self.signature,
        }


def sign(secret: Union[bytes, str], body: Union[bytes, str]) -> str:
    """Lowercase hex HMAC-SHA512 of body keyed by secret (str is UTF-8 encoded)."""
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hmac.new(secret, body, hashlib.sha512).hexdigest()


def format_amount(value: Amount) -> str:
    """
    Render a monetary value with exactly 8 fractional digits.

    Floats go through str() first so 0.1 becomes "0.10000000" rather than
    the binary expansion.  Output is always fixed-point, never "5E-7".

    Raises ValueError for text that is not a number and for NaN / infinity.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        number = Decimal(value)
        if not number.is_finite():
            raise ValueError(f"amount must be finite, got {value!r}")
        quantized = number.quantize(_AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as exc:
        raise ValueError(f"not a monetary amount: {value!r}") from exc
    return format(quantized, "f")


def encode_body(method: str, nonce: int, params: Iterable[Param] = ()) -> bytes:
    """Canonical form body: method, nonce, then params in caller order."""
    fields = [("method", method), ("nonce", str(nonce)), *params]
    return urlencode(fields).encode("ascii")


def build_authenticated_call(
    credential: ApiCredential,
    nonce_store: NonceStore,
    method: str,
    params: Iterable[Param] = (),
) -> SignedRequest:
    """
    Assemble and sign one private API call.

    Raises whatever NonceStore.next() raises; nothing is sent in that case.
    """
    params = tuple(params)
    nonce  = nonce_store.next()
    return _signed(credential, method, nonce, params)


async def async_build_authenticated_call(
    credential: ApiCredential,
    nonce_store: NonceStore,
    method: str,
    params: Iterable[Param] = (),
) -> SignedRequest:
    """Async variant: the nonce is taken without blocking the event loop."""
    params = tuple(params)
    nonce  = await nonce_store.async_next()
    return _signed(credential, method, nonce, params)


def _signed(credential: ApiCredential, method: str, nonce: int, params: tuple[Param, ...]) -> SignedRequest:
    body = encode_body(method, nonce, params)
    return SignedRequest(
        method=method,
        nonce=nonce,
        params=params,
        body=body,
        signature=sign(credential.secret, body),
        key=credential.key,
    )
