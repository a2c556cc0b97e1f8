"""Validates and parses workflow definitions at write time.

Turns loosely-typed input (dicts, or JSON strings from older clients)
into the typed trigger / condition / action values of
app.domain.entities.workflow, using the pydantic models in
app.schemas.workflow_config. Runs once when a definition is created or
updated; a definition that fails here is never persisted. The action
dispatcher parses each action's config the same way.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from app.application.dtos.workflow import WorkflowChanges, WorkflowDraft
from app.domain.entities.workflow import (
    Action,
    ActionConfig,
    Condition,
    TriggerConfig,
)
from app.domain.exceptions import ValidationException
from app.schemas.workflow_config import (
    ApiTriggerConfig,
    ConditionBasedTriggerConfig,
    ConditionIn,
    EventBasedTriggerConfig,
    ListConfigIn,
    ManualTriggerConfig,
    SendMessageConfigIn,
    TimeBasedTriggerConfig,
    UpdateContactConfigIn,
    WaitConfigIn,
    WebhookConfigIn,
)
from app.shared.enums import (
    ActionFailurePolicy,
    ActionType,
    TriggerType,
    WorkflowStatus,
)

T = TypeVar("T")

_TRIGGER_MODELS: dict[TriggerType, type[BaseModel]] = {
    TriggerType.TIME_BASED: TimeBasedTriggerConfig,
    TriggerType.EVENT_BASED: EventBasedTriggerConfig,
    TriggerType.CONDITION_BASED: ConditionBasedTriggerConfig,
    TriggerType.MANUAL: ManualTriggerConfig,
    TriggerType.API_TRIGGER: ApiTriggerConfig,
}

_ACTION_CONFIG_MODELS: dict[ActionType, type[BaseModel]] = {
    ActionType.SEND_EMAIL: SendMessageConfigIn,
    ActionType.SEND_SMS: SendMessageConfigIn,
    ActionType.SEND_WHATSAPP: SendMessageConfigIn,
    ActionType.ADD_TO_LIST: ListConfigIn,
    ActionType.REMOVE_FROM_LIST: ListConfigIn,
    ActionType.UPDATE_CONTACT: UpdateContactConfigIn,
    ActionType.WAIT: WaitConfigIn,
    ActionType.WEBHOOK: WebhookConfigIn,
}

_CONDITIONS = TypeAdapter(list[ConditionIn])


def _field_path(prefix: str, loc: tuple[int | str, ...]) -> str:
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path = f"{path}[{part}]"
        else:
            name = to_snake(part)
            path = f"{path}.{name}" if path else name
    return path


def _validated(validate: Callable[[Any], T], data: Any, field: str) -> T:
    """Run a pydantic validator; report the first error as a ValidationException."""
    try:
        return validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationException(
            error["msg"], field=_field_path(field, error["loc"])
        ) from e


def _load_json(value: Any, field: str, what: str) -> Any:
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationException(f"Invalid {what} JSON", field=field) from e
    return value


def _require_mapping(value: Any, field: str, what: str) -> Mapping[str, Any]:
    value = _load_json(value, field, what)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationException(f"{what} must be an object", field=field)
    return value


# ---- triggers ----


def parse_trigger(trigger_type: TriggerType | str, raw: Any) -> TriggerConfig:
    """Build the typed trigger config; raise ValidationException when keys are missing or invalid."""
    try:
        kind = TriggerType(trigger_type)
    except ValueError as e:
        raise ValidationException(
            f"Unknown trigger type: {trigger_type}", field="trigger_type"
        ) from e
    config = _require_mapping(raw, "trigger_config", "trigger configuration")
    model = _validated(_TRIGGER_MODELS[kind].model_validate, dict(config), "trigger_config")
    return model.to_trigger()


# ---- conditions ----


def parse_conditions(raw: Any, field: str = "conditions") -> list[Condition]:
    """Parse a condition list (or its JSON string); None means no conditions."""
    items = _load_json(raw, field, "conditions")
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationException("Conditions must be an array", field=field)
    return [c.to_condition() for c in _validated(_CONDITIONS.validate_python, items, field)]


# ---- actions ----


def parse_action_config(
    action_type: ActionType, raw: Mapping[str, Any], field: str = "config"
) -> ActionConfig:
    """Build the typed config for one action type; raise ValidationException when invalid."""
    model_type = _ACTION_CONFIG_MODELS.get(action_type)
    if model_type is None:
        raise ValidationException(f"Unknown action type: {action_type}", field=field)
    model = _validated(model_type.model_validate, dict(raw), field)
    return model.to_config(dict(raw))


def parse_action(raw: Any, field: str) -> Action:
    if not isinstance(raw, Mapping):
        raise ValidationException("Action must be an object", field=field)
    try:
        action_type = ActionType(raw.get("type"))
    except ValueError as e:
        raise ValidationException(
            f"Unknown action type: {raw.get('type')}", field=f"{field}.type"
        ) from e
    config = _require_mapping(raw.get("config"), f"{field}.config", "action config")
    parse_action_config(action_type, config, f"{field}.config")
    return Action(type=action_type.value, config=dict(config))


def parse_actions(raw: Any, field: str = "actions") -> list[Action]:
    """Parse an action list (or its JSON string); None means no actions."""
    items = _load_json(raw, field, "actions")
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationException("Actions must be an array", field=field)
    return [parse_action(item, f"{field}[{i}]") for i, item in enumerate(items)]


class WorkflowDefinitionValidator:
    """Builds validated drafts and change sets for the workflow management use case."""

    def build_draft(
        self,
        *,
        name: str | None,
        trigger_type: TriggerType | str,
        trigger_config: Any,
        conditions: Any = None,
        actions: Any = None,
        description: str | None = None,
        campaign_id: str | None = None,
        is_active: bool = False,
        failure_policy: ActionFailurePolicy | str | None = None,
    ) -> WorkflowDraft:
        return WorkflowDraft(
            name=(name or "").strip() or "Untitled Workflow",
            trigger=parse_trigger(trigger_type, trigger_config),
            conditions=parse_conditions(conditions),
            actions=parse_actions(actions),
            description=description,
            campaign_id=campaign_id,
            is_active=is_active,
            failure_policy=self._policy(failure_policy),
        )

    def build_changes(
        self,
        *,
        current_trigger_type: TriggerType,
        name: str | None = None,
        description: str | None = None,
        trigger_type: TriggerType | str | None = None,
        trigger_config: Any = None,
        conditions: Any = None,
        actions: Any = None,
        status: WorkflowStatus | str | None = None,
        failure_policy: ActionFailurePolicy | str | None = None,
    ) -> WorkflowChanges:
        """Validate a partial update. A new trigger_type requires a matching trigger_config."""
        trigger = None
        if trigger_type is not None or trigger_config is not None:
            trigger = parse_trigger(trigger_type or current_trigger_type, trigger_config)
        new_status = None
        if status is not None:
            try:
                new_status = WorkflowStatus(status)
            except ValueError as e:
                raise ValidationException(f"Unknown status: {status}", field="status") from e
        return WorkflowChanges(
            name=name.strip() if name else None,
            description=description,
            trigger=trigger,
            conditions=parse_conditions(conditions) if conditions is not None else None,
            actions=parse_actions(actions) if actions is not None else None,
            status=new_status,
            failure_policy=self._policy(failure_policy),
        )

    @staticmethod
    def _policy(value: ActionFailurePolicy | str | None) -> ActionFailurePolicy | None:
        if value is None:
            return None
        try:
            return ActionFailurePolicy(value)
        except ValueError as e:
            raise ValidationException(
                f"Unknown failure policy: {value}", field="failure_policy"
            ) from e
