"""Outbound webhook client (IWebhookClient over httpx)."""

from app.infrastructure.external.webhook.client import HttpWebhookClient, WebhookError

__all__ = ["HttpWebhookClient", "WebhookError"]
