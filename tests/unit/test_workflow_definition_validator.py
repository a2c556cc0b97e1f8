"""Tests for workflow definition parsing and validation at write time."""

import pytest

from app.application.services.workflow_definition_validator import (
    WorkflowDefinitionValidator,
    parse_action_config,
    parse_actions,
    parse_conditions,
    parse_trigger,
)
from app.domain.entities.workflow import (
    ApiTrigger,
    ConditionBasedTrigger,
    EventBasedTrigger,
    ManualTrigger,
    TimeBasedTrigger,
    WaitConfig,
    WebhookConfig,
)
from app.domain.exceptions import ValidationException
from app.schemas.workflow import WorkflowCreateRequest
from app.shared.enums import ActionFailurePolicy, ActionType, TriggerType, WorkflowStatus


def test_parse_event_trigger_accepts_camel_case_and_json_string() -> None:
    trigger = parse_trigger(
        "EVENT_BASED", '{"eventType": "signup", "eventSource": "web"}'
    )
    assert trigger == EventBasedTrigger(event_type="signup", event_source="web")


def test_parse_time_trigger_validates_schedule_and_timezone() -> None:
    trigger = parse_trigger(
        TriggerType.TIME_BASED, {"schedule": "0 9 * * 1", "timezone": "Africa/Lagos"}
    )
    assert trigger == TimeBasedTrigger(schedule="0 9 * * 1", timezone="Africa/Lagos")

    with pytest.raises(ValidationException) as exc_info:
        parse_trigger("TIME_BASED", {"schedule": "every day", "timezone": "UTC"})
    assert exc_info.value.details["field"] == "trigger_config.schedule"

    with pytest.raises(ValidationException) as exc_info:
        parse_trigger("TIME_BASED", {"schedule": "0 9 * * *", "timezone": "Nowhere/City"})
    assert exc_info.value.details["field"] == "trigger_config.timezone"


def test_parse_condition_trigger_requires_conditions_array() -> None:
    trigger = parse_trigger(
        "CONDITION_BASED",
        {"conditions": [{"field": "score", "operator": "greater_than", "value": 5}]},
    )
    assert isinstance(trigger, ConditionBasedTrigger)
    assert trigger.conditions[0].operator == "greater_than"

    with pytest.raises(ValidationException):
        parse_trigger("CONDITION_BASED", {})


def test_parse_api_trigger_normalizes_method() -> None:
    assert parse_trigger("API_TRIGGER", {"endpoint": "/x", "method": "post"}) == ApiTrigger(
        endpoint="/x", method="POST"
    )
    with pytest.raises(ValidationException):
        parse_trigger("API_TRIGGER", {"endpoint": "/x", "method": "TRACE"})


def test_parse_manual_trigger_ignores_config() -> None:
    assert parse_trigger("MANUAL", None) == ManualTrigger()


@pytest.mark.parametrize(
    "trigger_type,config",
    [
        ("EVENT_BASED", {"eventType": "signup"}),
        ("TIME_BASED", {"schedule": "* * * * *"}),
        ("API_TRIGGER", {"method": "POST"}),
        ("NOT_A_TRIGGER", {}),
        ("MANUAL", "not json"),
        ("MANUAL", ["a", "list"]),
    ],
)
def test_parse_trigger_rejects_incomplete_configs(trigger_type, config) -> None:
    with pytest.raises(ValidationException):
        parse_trigger(trigger_type, config)


def test_parse_conditions_rejects_unknown_operator_and_non_list_in() -> None:
    with pytest.raises(ValidationException) as exc_info:
        parse_conditions([{"field": "a", "operator": "like", "value": "x"}])
    assert exc_info.value.details["field"] == "conditions[0].operator"

    with pytest.raises(ValidationException) as exc_info:
        parse_conditions([{"field": "a", "operator": "in", "value": "x"}])
    assert exc_info.value.details["field"] == "conditions[0].value"


def test_parse_conditions_none_is_empty() -> None:
    assert parse_conditions(None) == []
    assert parse_conditions("[]") == []


def test_parse_actions_validates_each_config() -> None:
    actions = parse_actions(
        [
            {"type": "add_to_list", "config": {"listId": "L1"}},
            {"type": "send_email", "config": {"templateId": "T1"}},
        ]
    )
    assert [a.type for a in actions] == ["add_to_list", "send_email"]
    assert actions[0].config == {"listId": "L1"}

    with pytest.raises(ValidationException) as exc_info:
        parse_actions([{"type": "add_to_list", "config": {}}])
    assert exc_info.value.details["field"] == "actions[0].config.list_id"

    with pytest.raises(ValidationException) as exc_info:
        parse_actions([{"type": "teleport", "config": {}}])
    assert exc_info.value.details["field"] == "actions[0].type"


def test_parse_webhook_config() -> None:
    config = parse_action_config(
        ActionType.WEBHOOK,
        {"url": "https://hooks.example.com/a", "method": "put", "timeoutSeconds": 3},
    )
    assert config == WebhookConfig(
        url="https://hooks.example.com/a", method="PUT", timeout_seconds=3.0
    )
    with pytest.raises(ValidationException):
        parse_action_config(ActionType.WEBHOOK, {"url": "ftp://example.com"})
    with pytest.raises(ValidationException):
        parse_action_config(ActionType.WEBHOOK, {"url": "https://x.io", "method": "GET"})


def test_parse_wait_and_update_contact_configs() -> None:
    assert parse_action_config(ActionType.WAIT, {}) == WaitConfig()
    assert parse_action_config(ActionType.WAIT, {"durationSeconds": 60}) == WaitConfig(60.0)
    with pytest.raises(ValidationException):
        parse_action_config(ActionType.WAIT, {"duration_seconds": -1})
    with pytest.raises(ValidationException):
        parse_action_config(ActionType.UPDATE_CONTACT, {"fields": {}})


def test_webhook_url_rule_matches_request_schema() -> None:
    config = parse_action_config(ActionType.WEBHOOK, {"url": "http://a"})
    assert config == WebhookConfig(url="http://a")

    request = WorkflowCreateRequest.model_validate(
        {
            "name": "Hook",
            "trigger": {"triggerType": "MANUAL"},
            "actions": [{"type": "webhook", "config": {"url": "http://a"}}],
        }
    )
    assert request.actions[0].config.url == "http://a"


def test_webhook_payload_key_is_accepted_as_data() -> None:
    config = parse_action_config(
        ActionType.WEBHOOK, {"url": "https://x.io/in", "payload": {"plan": "pro"}}
    )
    assert config.data == {"plan": "pro"}


@pytest.mark.parametrize(
    ("trigger_type", "config", "field"),
    [
        (
            "CONDITION_BASED",
            {"conditions": [{"field": "a", "operator": "like", "value": 1}]},
            "trigger_config.conditions[0].operator",
        ),
        ("TIME_BASED", {"schedule": "0 9 * * *"}, "trigger_config.timezone"),
        ("EVENT_BASED", {"eventType": "signup"}, "trigger_config.event_source"),
    ],
)
def test_trigger_errors_report_snake_case_field_path(trigger_type, config, field) -> None:
    with pytest.raises(ValidationException) as exc_info:
        parse_trigger(trigger_type, config)
    assert exc_info.value.details["field"] == field


def test_build_draft_defaults() -> None:
    draft = WorkflowDefinitionValidator().build_draft(
        name="  ",
        trigger_type="MANUAL",
        trigger_config=None,
    )
    assert draft.name == "Untitled Workflow"
    assert draft.status is WorkflowStatus.INACTIVE
    assert draft.conditions == []
    assert draft.actions == []
    assert draft.failure_policy is None


def test_build_draft_rejects_unknown_failure_policy() -> None:
    with pytest.raises(ValidationException) as exc_info:
        WorkflowDefinitionValidator().build_draft(
            name="x",
            trigger_type="MANUAL",
            trigger_config={},
            failure_policy="retry",
        )
    assert exc_info.value.details["field"] == "failure_policy"


def test_build_changes_reuses_current_trigger_type() -> None:
    changes = WorkflowDefinitionValidator().build_changes(
        current_trigger_type=TriggerType.EVENT_BASED,
        trigger_config={"event_type": "purchase", "event_source": "shop"},
        failure_policy="abort",
    )
    assert changes.trigger == EventBasedTrigger(event_type="purchase", event_source="shop")
    assert changes.failure_policy is ActionFailurePolicy.ABORT
    assert changes.touches_definition


def test_build_changes_without_definition_fields() -> None:
    changes = WorkflowDefinitionValidator().build_changes(
        current_trigger_type=TriggerType.MANUAL, name=" Renamed ", status="ARCHIVED"
    )
    assert changes.name == "Renamed"
    assert changes.status is WorkflowStatus.ARCHIVED
    assert not changes.touches_definition
