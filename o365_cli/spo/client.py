"""
Async SharePoint Online HTTP client.
Covers the three calls commands need: OData GETs, request digests and
ProcessQuery POSTs. Every request is checked by the RequestGuard first.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import (
    BACKOFF_MULTIPLIER,
    CONTEXT_INFO_PATH,
    ODATA_NOMETADATA,
    PROCESS_QUERY_PATH,
    HttpConfig,
)
from ..errors import TransportError
from ..safety.guardian import RequestGuard

logger = logging.getLogger("o365_cli.spo")


@dataclass
class FormDigest:
    """Anti-forgery token returned by /_api/contextinfo."""
    value: str
    timeout_seconds: int = 0


def _error_message(response: httpx.Response) -> str:
    """Extract the OData error message, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        err = body.get("odata.error") or body.get("error") or {}
        msg = err.get("message") if isinstance(err, dict) else None
        if isinstance(msg, dict):
            msg = msg.get("value")
        if msg:
            return str(msg)
    return response.text[:200]


def _retry_after_seconds(response: httpx.Response, default: float) -> float:
    # Only the delta-seconds form is honoured; HTTP-dates fall back to backoff
    try:
        return float(response.headers.get("Retry-After", default))
    except (TypeError, ValueError):
        return default


class SpoClient:
    """
    Async SharePoint REST/CSOM client.
    Features:
      - Guarded requests (only known write endpoints may be POSTed)
      - Exponential backoff on 429/503/504 for GETs
      - Single-shot ProcessQuery POSTs, never retried
    """

    def __init__(
        self,
        access_token: str,
        guard: Optional[RequestGuard] = None,
        http: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.guard = guard or RequestGuard()
        self.http = http or HttpConfig()
        self._transport = transport
        self._request_count = 0
        self._throttle_count = 0
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.http.timeout_seconds, connect=self.http.connect_timeout_seconds
            ),
            headers={
                "Authorization": f"Bearer {self.access_token}",
                "Accept": ODATA_NOMETADATA,
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(self, url: str) -> dict:
        """Execute a GET with throttle handling and return the JSON body."""
        self.guard.validate_request("GET", url)
        backoff = self.http.initial_backoff_seconds
        attempt = 0

        while True:
            response = await self._send("GET", url)

            if response.status_code in (429, 503, 504) and attempt < self.http.max_retries:
                attempt += 1
                self._throttle_count += 1
                retry_after = _retry_after_seconds(response, backoff)
                wait_time = max(retry_after, backoff)
                logger.warning(
                    f"Throttled ({response.status_code}) on {url}. "
                    f"Retry {attempt}/{self.http.max_retries} in {wait_time:.1f}s"
                )
                await asyncio.sleep(wait_time)
                backoff = min(backoff * BACKOFF_MULTIPLIER, self.http.max_backoff_seconds)
                continue

            return self._json_or_raise(response, url)

    async def get_request_digest(self, web_url: str) -> FormDigest:
        """POST to /_api/contextinfo and return the form digest."""
        url = web_url.rstrip("/") + CONTEXT_INFO_PATH
        self.guard.validate_request("POST", url)
        response = await self._send("POST", url)
        data = self._json_or_raise(response, url)

        # verbose OData wraps the payload in d.GetContextWebInformation
        info = data.get("d", {}).get("GetContextWebInformation", data)
        value = info.get("FormDigestValue")
        if not value:
            raise TransportError(f"No FormDigestValue in response from {url}", url=url)
        return FormDigest(
            value=str(value),
            timeout_seconds=int(info.get("FormDigestTimeoutSeconds") or 0),
        )

    async def process_query(self, web_url: str, body: str, digest: FormDigest) -> str:
        """POST a CSOM envelope to ProcessQuery and return the raw response text."""
        url = web_url.rstrip("/") + PROCESS_QUERY_PATH
        self.guard.validate_request("POST", url)
        response = await self._send(
            "POST",
            url,
            content=body.encode("utf-8"),
            headers={
                "X-RequestDigest": digest.value,
                "Content-Type": "text/xml",
            },
        )
        if not response.is_success:
            raise TransportError(
                f"ProcessQuery failed ({response.status_code}): {_error_message(response)}",
                status_code=response.status_code,
                url=url,
            )
        return response.text

    def _json_or_raise(self, response: httpx.Response, url: str) -> dict:
        if not response.is_success:
            raise TransportError(
                _error_message(response), status_code=response.status_code, url=url
            )
        try:
            data = response.json()
        except ValueError:
            raise TransportError(f"Non-JSON response from {url}", response.status_code, url)
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response shape from {url}", response.status_code, url)
        return data

    async def _send(
        self,
        method: str,
        url: str,
        content: Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """Execute a raw request, mapping httpx failures to TransportError."""
        if not self._client:
            raise RuntimeError("SpoClient not initialized. Use 'async with' context.")
        try:
            response = await self._client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__} on {method} {url}: {e}", url=url) from e
        self._request_count += 1
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def get_stats(self) -> dict:
        """Return client statistics."""
        return {
            "total_requests": self._request_count,
            "throttle_events": self._throttle_count,
        }
