"""Log-only channel sender used when no gateway is configured (development)."""

from __future__ import annotations

from typing import Any

from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LoggingChannelSender:
    """Logs each send and reports it accepted."""

    async def _log(self, channel: str, contact_id: str, config: dict[str, Any]) -> bool:
        logger.info(
            "[%s] would send to contact %s (template=%s)",
            channel,
            contact_id,
            config.get("template_id") or config.get("templateId"),
        )
        return True

    async def send_email(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._log("email", contact_id, config)

    async def send_sms(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._log("sms", contact_id, config)

    async def send_whatsapp(self, contact_id: str, config: dict[str, Any]) -> bool:
        return await self._log("whatsapp", contact_id, config)
