from __future__ import annotations

import logging
from typing import Mapping, Optional, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from ..core.ports.rate_limiter_port import RateLimiterPort

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "sentinel-dashboard",
}


class HttpClient:
    """JSON-over-HTTP wrapper used for outbound AI requests.

    Each call waits on the optional rate limiter first. Non-2xx answers raise
    httpx.HTTPStatusError; a body that is not a JSON object raises TypeError.
    """

    def __init__(
        self,
        base_headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 60.0,
        rate_limiter: Optional["RateLimiterPort"] = None
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers={**DEFAULT_HEADERS, **dict(base_headers or {})},
            follow_redirects=True,
            max_redirects=10
        )
        self._rate_limiter = rate_limiter

    def post_json(self, url: str, payload: dict, headers: Optional[Mapping[str, str]] = None) -> dict:
        """POST `payload` as JSON with per-request `headers` (e.g. an API key) and return the decoded object."""
        if self._rate_limiter:
            self._rate_limiter.acquire()
        resp = self._client.post(url, json=payload, headers=dict(headers or {}))
        logger.debug(f"POST {url} -> {resp.status_code}")
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object from {url}, got {type(data).__name__}")
        return data

    def close(self) -> None:
        self._client.close()
