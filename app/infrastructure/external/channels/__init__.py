"""Channel senders (email / SMS / WhatsApp) implementing IChannelSender."""

from app.infrastructure.external.channels.factory import create_channel_sender
from app.infrastructure.external.channels.gateway import HttpChannelGateway
from app.infrastructure.external.channels.logging_sender import LoggingChannelSender

__all__ = ["HttpChannelGateway", "LoggingChannelSender", "create_channel_sender"]
