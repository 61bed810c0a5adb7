"""Small HTTP helpers: GET and POST with millisecond timeouts, URL building."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote_plus, urljoin

import requests

HTTP_OK = 200


class HTTPRequestError(RuntimeError):
    """Raised when a server answers with a status other than 200."""

    def __init__(self, message: str, status_code: int, body: bytes = b"") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _timeout(timeout_ms: float) -> float | None:
    return timeout_ms / 1000 if timeout_ms > 0 else None


def request_get(url: str, timeout_ms: float) -> bytes:
    """GET ``url`` and return the body; a non-200 answer raises HTTPRequestError."""
    with requests.get(url, timeout=_timeout(timeout_ms)) as resp:
        body = resp.content
        if resp.status_code != HTTP_OK:
            raise HTTPRequestError(
                f"request fail: errorcode: {resp.status_code}, "
                f"errormsg:{body.decode('utf-8', errors='replace')}",
                resp.status_code,
                body,
            )
        return body


def request_post(
    url: str,
    timeout_ms: float,
    body: bytes,
    headers: Mapping[str, str] | None = None,
) -> bytes:
    """POST ``body`` to ``url`` and return the reply body.

    A non-200 answer raises HTTPRequestError carrying the reply body.
    """
    with requests.post(
        url, data=body, headers=dict(headers or {}), timeout=_timeout(timeout_ms)
    ) as resp:
        result = resp.content
        if resp.status_code != HTTP_OK:
            if result:
                message = (
                    f"request fail: errorcode: {resp.status_code}, "
                    f"errormsg:{result.decode('utf-8', errors='replace')}"
                )
            else:
                message = f"request fail: errorcode: {resp.status_code}"
            raise HTTPRequestError(message, resp.status_code, result)
        return result


def join_url(base: str, relative: str) -> str:
    """Resolve ``relative`` against ``base``."""
    return urljoin(base, relative)


def build_url(base: str, params: Mapping[str, str]) -> str:
    """Append ``params`` as a query string with escaped values."""
    if not params:
        return base
    query = "&".join(f"{key}={quote_plus(str(value))}" for key, value in params.items())
    return f"{base}?{query}"