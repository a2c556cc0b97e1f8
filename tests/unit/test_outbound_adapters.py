"""Tests for the webhook client and channel gateway over httpx.MockTransport."""

import json

import httpx
import pytest
from pydantic import SecretStr

from app.core.config import Settings
from app.infrastructure.external.channels import (
    HttpChannelGateway,
    LoggingChannelSender,
    create_channel_sender,
)
from app.infrastructure.external.webhook import HttpWebhookClient, WebhookError


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_webhook_posts_json_with_user_agent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    async with _client(handler) as http:
        webhook = HttpWebhookClient(http_client=http, user_agent="test-agent")
        status = await webhook.post(
            "https://hooks.example.com/in",
            {"contact_id": "C1"},
            method="PUT",
            headers={"X-Signature": "abc"},
        )

    assert status == 202
    request = seen[0]
    assert request.method == "PUT"
    assert request.headers["user-agent"] == "test-agent"
    assert request.headers["x-signature"] == "abc"
    assert json.loads(request.content) == {"contact_id": "C1"}


async def test_webhook_non_2xx_raises_with_status() -> None:
    async with _client(lambda request: httpx.Response(503)) as http:
        with pytest.raises(WebhookError) as exc_info:
            await HttpWebhookClient(http_client=http).post("https://x.io/h", {})
    assert exc_info.value.status_code == 503


async def test_webhook_timeout_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as http:
        with pytest.raises(WebhookError, match="timed out"):
            await HttpWebhookClient(http_client=http).post("https://x.io/h", {})


async def test_webhook_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(WebhookError) as exc_info:
            await HttpWebhookClient(http_client=http).post("https://x.io/h", {})
    assert exc_info.value.status_code is None


async def test_gateway_posts_to_channel_path_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    async with _client(handler) as http:
        gateway = HttpChannelGateway("https://gw.example.com/v1/", "secret", http_client=http)
        accepted = await gateway.send_sms("C1", {"templateId": "T1"})

    assert accepted is True
    request = seen[0]
    assert str(request.url) == "https://gw.example.com/v1/sms"
    assert request.headers["authorization"] == "Bearer secret"
    assert json.loads(request.content) == {"contact_id": "C1", "templateId": "T1"}


async def test_gateway_rejection_returns_false() -> None:
    async with _client(lambda request: httpx.Response(422)) as http:
        gateway = HttpChannelGateway("https://gw.example.com", http_client=http)
        assert await gateway.send_email("C1", {}) is False


async def test_logging_sender_accepts_everything() -> None:
    sender = LoggingChannelSender()
    assert await sender.send_whatsapp("C1", {"template_id": "T1"}) is True


def test_factory_picks_sender_from_settings(monkeypatch) -> None:
    monkeypatch.delenv("CHANNEL_GATEWAY_URL", raising=False)
    assert isinstance(create_channel_sender(Settings(_env_file=None)), LoggingChannelSender)
    configured = Settings(
        _env_file=None,
        channel_gateway_url="https://gw.example.com",
        channel_gateway_token=SecretStr("t"),
    )
    assert isinstance(create_channel_sender(configured), HttpChannelGateway)
