"""HTTP channel gateway: POST {gateway}/{channel} with a bearer token."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx

from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class HttpChannelGateway:
    """Delivers messages through the messaging gateway. No retries; 2xx means accepted."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._shared_http = http_client
        self._timeout = timeout

    @asynccontextmanager
    async def _http_cm(self):
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def _deliver(self, channel: str, contact_id: str, config: dict[str, Any]) -> bool:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        async with self._http_cm() as client:
            response = await client.post(
                f"{self._base_url}/{channel}",
                json={"contact_id": contact_id, **config},
                headers=headers,
                timeout=self._timeout,
            )
        if not response.is_success:
            logger.warning(
                "Channel gateway rejected %s for contact %s: HTTP %s",
                channel,
                contact_id,
                response.status_code,
            )
        return response.is_success

    async def send_email(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._deliver("email", contact_id, config)

    async def send_sms(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._deliver("sms", contact_id, config)

    async def send_whatsapp(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._deliver("whatsapp", contact_id, config)
