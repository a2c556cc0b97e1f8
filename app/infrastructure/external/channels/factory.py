"""Pick the channel sender from settings."""

import httpx

from app.application.interfaces.services import IChannelSender
from app.core.config import Settings
from app.infrastructure.external.channels.gateway import HttpChannelGateway
from app.infrastructure.external.channels.logging_sender import LoggingChannelSender


def create_channel_sender(
    settings: Settings, *, http_client: httpx.AsyncClient | None = None
) -> IChannelSender:
    """HttpChannelGateway when CHANNEL_GATEWAY_URL is set, otherwise LoggingChannelSender."""
    if not settings.channel_gateway_url:
        return LoggingChannelSender()
    token = (
        settings.channel_gateway_token.get_secret_value()
        if settings.channel_gateway_token
        else None
    )
    return HttpChannelGateway(
        settings.channel_gateway_url,
        token,
        http_client=http_client,
        timeout=settings.channel_gateway_timeout_seconds,
    )
