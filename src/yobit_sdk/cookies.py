"""
cookies.py – Persist the session cookie jar between runs.

YoBit sits behind an anti-bot challenge.  Once a challenge-solving session
has obtained clearance cookies they stay valid for a while, so reusing them
on the next start avoids solving the challenge again.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlsplit

from requests.cookies import RequestsCookieJar, create_cookie

from .storage import LocalStorage

logger = logging.getLogger(__name__)

# keys save() writes; anything else is dropped before create_cookie()
_COOKIE_FIELDS = frozenset({"name", "value", "domain", "path", "secure", "expires"})


class CookieStore:
    """
    Snapshot of the cookies belonging to one site origin.

    Parameters
    ----------
    storage : opened LocalStorage shared with the nonce counter
    origin  : site origin, e.g. "https://yobit.net"
    """

    def __init__(self, storage: LocalStorage, origin: str) -> None:
        self._storage = storage
        self._origin  = origin.rstrip("/")
        self._domain  = urlsplit(self._origin).hostname or ""

    @property
    def key(self) -> str:
        return f"cookies:{self._origin}"

    def _matches(self, domain: str) -> bool:
        domain = domain.lstrip(".")
        return domain == self._domain or self._domain.endswith("." + domain)

    def load(self, jar: RequestsCookieJar) -> int:
        """Copy persisted cookies into jar; returns how many were restored."""
        cookies = self.snapshot()
        for c in cookies:
            jar.set_cookie(create_cookie(**c))
        if cookies:
            logger.info("Restored %d cookies for %s", len(cookies), self._origin)
        return len(cookies)

    def save(self, jar: RequestsCookieJar) -> int:
        """Persist cookies in jar that belong to this origin's domain."""
        cookies = [
            {
                "name":    c.name,
                "value":   c.value,
                "domain":  c.domain,
                "path":    c.path,
                "secure":  c.secure,
                "expires": c.expires,
            }
            for c in jar
            if self._matches(c.domain)
        ]
        self._storage.put(self.key, json.dumps(cookies).encode("utf-8"))
        logger.info("Saved %d cookies for %s", len(cookies), self._origin)
        return len(cookies)

    def snapshot(self) -> list[dict[str, Any]]:
        """Persisted cookies as plain dicts (empty when none or unreadable)."""
        raw = self._storage.get(self.key)
        if raw is None:
            return []
        try:
            cookies = json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cookie snapshot for %s", self._origin)
            return []
        if not isinstance(cookies, list):
            logger.warning("Discarding malformed cookie snapshot for %s", self._origin)
            return []
        valid = [
            {k: v for k, v in c.items() if k in _COOKIE_FIELDS}
            for c in cookies
            if isinstance(c, dict) and isinstance(c.get("name"), str) and isinstance(c.get("value"), str)
        ]
        if len(valid) != len(cookies):
            logger.warning(
                "Skipped %d malformed cookie entries for %s", len(cookies) - len(valid), self._origin,
            )
        return valid

    def as_dict(self) -> dict[str, str]:
        """name -> value mapping, suitable for aiohttp.ClientSession(cookies=...)."""
        return {c["name"]: c["value"] for c in self.snapshot()}
