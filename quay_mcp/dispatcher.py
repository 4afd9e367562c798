"""Issue the outbound GET for a resolved endpoint."""

from __future__ import annotations

import json

import httpx
from loguru import logger

from .errors import CallError
from .loader import DEFAULT_TIMEOUT
from .models import Endpoint

USER_AGENT = "quay-mcp-server/1.0.0"


class Dispatcher:
    """Send one request per call; never retry.

    A fresh httpx.Client is opened per call so concurrent invocations
    share no request or response state.
    """

    def __init__(
        self,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._token = token or None
        self._timeout = timeout
        self._transport = transport

    def headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def call(self, endpoint: Endpoint, url: str) -> bytes:
        """GET the URL and return the raw body, or raise CallError."""
        logger.debug(f"{endpoint.method} {url} ({endpoint.key})")

        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            try:
                response = client.request("GET", url, headers=self.headers())
            except httpx.RequestError as e:
                logger.warning(f"GET {url} failed: {e}")
                raise CallError.network_failure(url, e) from e

        if not response.is_success:
            logger.warning(f"GET {url} returned {response.status_code}")
            raise CallError.upstream_status(url, response.status_code, response.text)
        return response.content


def ensure_json(data: bytes, uri: str) -> str:
    """Return the body as text, wrapping it when it is not valid JSON."""
    text = data.decode("utf-8", errors="replace")
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return json.dumps({
            "uri": uri,
            "response": text,
            "note": "Response was not valid JSON, wrapped as string",
        }, indent=2)
    return text
