"""
errors.py – Exception hierarchy for the YoBit SDK.

Every failure surfaces as a subclass of YobitError so a host service can
catch one type and keep running.  Nothing in this package ends the process.

    YobitError
    ├── StorageError            durable storage could not be opened / read
    ├── ConfigurationError
    │   └── NonceCorruptError   persisted nonce is not a valid uint64
    ├── DurabilityError
    │   └── NonceWriteError     advanced nonce could not be persisted
    ├── YobitHTTPError          transport failure or non-200 status
    ├── YobitAPIError           exchange answered with success == 0
    └── YobitDecodeError        body matched neither success nor error shape
"""

from __future__ import annotations

from typing import Optional


class YobitError(Exception):
    """Base class for all SDK errors."""


class StorageError(YobitError):
    """Raised when the local key-value store cannot be opened or read."""


class ConfigurationError(YobitError):
    """Local state needed for authenticated calls is unusable."""


class NonceCorruptError(ConfigurationError):
    def __init__(self, key: str, raw: Optional[bytes]) -> None:
        self.key = key
        self.raw = raw
        super().__init__(f"nonce at {key!r} is not a valid uint64: {raw!r}")


class DurabilityError(YobitError):
    """State could not be written back to durable storage."""


class NonceWriteError(DurabilityError):
    def __init__(self, key: str, value: int) -> None:
        self.key   = key
        self.value = value
        super().__init__(f"failed to persist nonce {value} at {key!r}")


class YobitHTTPError(YobitError):
    """
    Transport-level failure.

    status_code is None when the request never produced a response
    (DNS, connect, timeout); the underlying exception is chained.
    """

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        body: str = "",
        method: str = "GET",
    ) -> None:
        self.url         = url
        self.status_code = status_code
        self.body        = body
        self.method      = method.upper()
        if status_code is None:
            msg = f"YoBit request failed: {self.method} {url}"
        else:
            msg = f"YoBit HTTP {status_code}: {self.method} {url}"
            if body:
                msg += f": {body[:200]}"
        super().__init__(msg)


class YobitAPIError(YobitError):
    """The exchange rejected the call and returned an error message."""

    def __init__(self, message: str, operation: str = "") -> None:
        self.message   = message
        self.operation = operation
        super().__init__(f"{operation}: {message}" if operation else message)


class YobitDecodeError(YobitError):
    """Response body could not be decoded into the expected shape."""

    def __init__(self, body: bytes, reason: str, operation: str = "") -> None:
        self.body      = body
        self.reason    = reason
        self.operation = operation
        prefix = f"{operation}: " if operation else ""
        super().__init__(
            f"{prefix}unmarshaling failed. {body[:200]!r} {reason}"
        )
