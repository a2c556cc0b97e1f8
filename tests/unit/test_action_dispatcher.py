"""Tests for ActionDispatcher (collaborators are AsyncMocks or recording fakes)."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.workflow import ActionResult
from app.application.services.action_dispatcher import ActionDispatcher
from app.domain.entities.workflow import Action
from app.domain.exceptions import UnknownActionTypeException
from app.infrastructure.external.webhook import WebhookError
from app.shared.enums import ActionResultStatus
from tests.fakes import FIXED_NOW, RecordingChannelSender, RecordingWebhookClient


def _dispatcher(
    *,
    channels=None,
    lists=None,
    contacts=None,
    webhooks=None,
) -> ActionDispatcher:
    return ActionDispatcher(
        channel_sender=channels or RecordingChannelSender(),
        list_service=lists or AsyncMock(),
        contact_mutator=contacts or AsyncMock(),
        webhook_client=webhooks or RecordingWebhookClient(),
        webhook_timeout_seconds=5.0,
        clock=lambda: FIXED_NOW,
    )


async def test_send_email_passes_config_to_channel() -> None:
    channels = RecordingChannelSender()
    result = await _dispatcher(channels=channels).execute(
        Action(type="send_email", config={"templateId": "T1", "subject": "Hi"}), "C1"
    )
    assert result.status is ActionResultStatus.COMPLETED
    assert result.type == "send_email"
    assert result.started_at == FIXED_NOW
    assert result.detail == {"contact_id": "C1", "channel": "email", "template_id": "T1"}
    assert channels.sent == [("email", "C1", {"templateId": "T1", "subject": "Hi"})]


@pytest.mark.parametrize("action_type,channel", [("send_sms", "sms"), ("send_whatsapp", "whatsapp")])
async def test_other_channels_route_to_matching_sender(action_type: str, channel: str) -> None:
    channels = RecordingChannelSender()
    result = await _dispatcher(channels=channels).execute(Action(type=action_type), "C1")
    assert result.succeeded
    assert channels.sent[0][0] == channel


async def test_rejected_send_is_a_failed_result() -> None:
    result = await _dispatcher(channels=RecordingChannelSender(accepted=False)).execute(
        Action(type="send_email", config={"templateId": "T1"}), "C1"
    )
    assert result.status is ActionResultStatus.FAILED
    assert result.detail["error_type"] == "ActionRejectedError"
    assert "email" in result.detail["error"]


async def test_sender_exception_is_captured_not_raised() -> None:
    channels = RecordingChannelSender(error=ConnectionError("gateway down"))
    result = await _dispatcher(channels=channels).execute(Action(type="send_sms"), "C1")
    assert result.status is ActionResultStatus.FAILED
    assert result.detail == {
        "contact_id": "C1",
        "error": "gateway down",
        "error_type": "ConnectionError",
    }


async def test_list_membership_actions() -> None:
    lists = AsyncMock()
    dispatcher = _dispatcher(lists=lists)
    added = await dispatcher.execute(Action(type="add_to_list", config={"listId": "L1"}), "C1")
    removed = await dispatcher.execute(
        Action(type="remove_from_list", config={"list_id": "L2"}), "C1"
    )
    lists.add_member.assert_awaited_once_with("C1", "L1")
    lists.remove_member.assert_awaited_once_with("C1", "L2")
    assert added.detail["list_id"] == "L1"
    assert removed.detail["list_id"] == "L2"


async def test_update_contact_action() -> None:
    contacts = AsyncMock()
    result = await _dispatcher(contacts=contacts).execute(
        Action(type="update_contact", config={"fields": {"status": "vip", "score": 9}}),
        "C1",
    )
    contacts.update.assert_awaited_once_with("C1", {"status": "vip", "score": 9})
    assert result.detail["updated_fields"] == ["score", "status"]


async def test_invalid_stored_config_is_a_failed_result() -> None:
    lists = AsyncMock()
    result = await _dispatcher(lists=lists).execute(Action(type="add_to_list"), "C1")
    assert result.status is ActionResultStatus.FAILED
    assert result.detail["error_type"] == "ValidationException"
    lists.add_member.assert_not_awaited()


async def test_wait_resolves_immediately() -> None:
    result = await _dispatcher().execute(
        Action(type="wait", config={"duration_seconds": 3600}), "C1"
    )
    assert result.succeeded
    assert result.detail["duration_seconds"] == 3600.0
    assert result.detail["deferred"] is False


async def test_webhook_posts_trigger_data_and_uses_default_timeout() -> None:
    webhooks = RecordingWebhookClient(status_code=202)
    result = await _dispatcher(webhooks=webhooks).execute(
        Action(
            type="webhook",
            config={"url": "https://hooks.example.com/in", "data": {"campaign": "spring"}},
        ),
        "C1",
        {"eventType": "signup"},
    )
    assert result.succeeded
    assert result.detail["status_code"] == 202
    call = webhooks.calls[0]
    assert call["url"] == "https://hooks.example.com/in"
    assert call["method"] == "POST"
    assert call["timeout"] == 5.0
    assert call["payload"] == {
        "workflow_action": "webhook",
        "contact_id": "C1",
        "trigger_data": {"eventType": "signup"},
        "data": {"campaign": "spring"},
    }


async def test_webhook_error_is_a_failed_result() -> None:
    webhooks = RecordingWebhookClient(error=WebhookError("Webhook returned HTTP 500", 500))
    result = await _dispatcher(webhooks=webhooks).execute(
        Action(type="webhook", config={"url": "https://hooks.example.com/in"}), "C1"
    )
    assert result.status is ActionResultStatus.FAILED
    assert result.detail["error"] == "Webhook returned HTTP 500"
    assert result.detail["error_type"] == "WebhookError"


async def test_unknown_action_type_raises() -> None:
    with pytest.raises(UnknownActionTypeException) as exc_info:
        await _dispatcher().execute(Action(type="unknown_action"), "C1")
    assert exc_info.value.details == {"action_type": "unknown_action"}


def test_result_to_dict_serializes_status_and_timestamp() -> None:
    result = ActionResult(
        type="wait",
        status=ActionResultStatus.COMPLETED,
        detail={"deferred": False},
        started_at=FIXED_NOW,
    )
    assert result.to_dict() == {
        "type": "wait",
        "status": "completed",
        "detail": {"deferred": False},
        "started_at": FIXED_NOW.isoformat(),
    }
