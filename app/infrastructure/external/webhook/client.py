"""Outbound webhook calls for the workflow ``webhook`` action.

Timeouts and non-2xx responses raise WebhookError; the action dispatcher
turns that into a failed ActionResult with the status or error in detail.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx

from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class WebhookError(Exception):
    """Webhook call failed (timeout, transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpWebhookClient:
    """IWebhookClient implementation on httpx.AsyncClient."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        default_timeout: float = 10.0,
        user_agent: str = "campaign-automation-webhook/1.0",
    ) -> None:
        self._shared_http = http_client
        self._default_timeout = default_timeout
        self._user_agent = user_agent

    @asynccontextmanager
    async def _http_cm(self):
        """Yield shared HTTP client or a short-lived one (connection reuse when shared)."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def post(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> int:
        """Send payload as JSON; return the status code of a 2xx response."""
        request_headers = {"User-Agent": self._user_agent, **(headers or {})}
        async with self._http_cm() as client:
            try:
                response = await client.request(
                    method,
                    url,
                    json=payload,
                    headers=request_headers,
                    timeout=timeout or self._default_timeout,
                )
            except httpx.TimeoutException as e:
                raise WebhookError(f"Webhook timed out: {url}") from e
            except httpx.HTTPError as e:
                raise WebhookError(f"Webhook request failed: {e}") from e
        if not response.is_success:
            logger.debug("Webhook %s returned %s", url, response.status_code)
            raise WebhookError(
                f"Webhook returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.status_code
