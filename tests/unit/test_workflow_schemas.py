"""Tests for workflow request schemas (tagged unions and the legacy shape)."""

import pytest
from pydantic import ValidationError

from app.schemas.workflow import (
    EventBasedTriggerIn,
    ManualTriggerIn,
    WorkflowCreateRequest,
    WorkflowUpdateRequest,
    trigger_config_of,
)


def test_tagged_trigger_is_parsed_by_type() -> None:
    body = WorkflowCreateRequest.model_validate(
        {
            "name": "Welcome",
            "trigger": {"trigger_type": "EVENT_BASED", "eventType": "a", "eventSource": "b"},
        }
    )
    assert isinstance(body.trigger, EventBasedTriggerIn)
    assert trigger_config_of(body.trigger) == {"event_type": "a", "event_source": "b"}


def test_legacy_fields_fold_into_trigger() -> None:
    body = WorkflowCreateRequest.model_validate(
        {"name": "Manual", "trigger_type": "MANUAL", "trigger_config": "{}"}
    )
    assert isinstance(body.trigger, ManualTriggerIn)
    assert trigger_config_of(body.trigger) == {}


def test_in_condition_requires_list() -> None:
    with pytest.raises(ValidationError):
        WorkflowCreateRequest.model_validate(
            {
                "name": "x",
                "trigger": {"triggerType": "MANUAL"},
                "conditions": [{"field": "country", "operator": "in", "value": "NG"}],
            }
        )


def test_missing_event_source_is_rejected() -> None:
    with pytest.raises(ValidationError):
        WorkflowCreateRequest.model_validate(
            {"name": "x", "trigger": {"triggerType": "EVENT_BASED", "eventType": "a"}}
        )


def test_webhook_action_requires_http_url() -> None:
    with pytest.raises(ValidationError):
        WorkflowCreateRequest.model_validate(
            {
                "name": "x",
                "trigger": {"triggerType": "MANUAL"},
                "actions": [{"type": "webhook", "config": {"url": "mailto:a@b.c"}}],
            }
        )


def test_update_without_trigger_leaves_it_unset() -> None:
    body = WorkflowUpdateRequest.model_validate({"name": "Renamed"})
    assert body.trigger is None
    assert trigger_config_of(body.trigger) is None
    assert body.allow_while_running is False
