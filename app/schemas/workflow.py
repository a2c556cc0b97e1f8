"""Workflow API schemas.

Trigger configs and actions are discriminated unions (by ``trigger_type``
and ``type``) over the config models in app.schemas.workflow_config, so a
malformed definition is rejected when it is written. Older clients send
``trigger_type`` + ``trigger_config`` side by side (sometimes as JSON
strings, sometimes camelCase); both forms are accepted.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.application.dtos.workflow import (
    ActionResult,
    ExecutionPage,
    ExecutionResult,
    WorkflowAnalyticsResult,
)
from app.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
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
    WorkflowExecutionStatus,
    WorkflowStatus,
)


def _maybe_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e.msg}") from e
    return value


# ---- Triggers ----


class TimeBasedTriggerIn(TimeBasedTriggerConfig):
    trigger_type: Literal["TIME_BASED"]


class EventBasedTriggerIn(EventBasedTriggerConfig):
    trigger_type: Literal["EVENT_BASED"]


class ConditionBasedTriggerIn(ConditionBasedTriggerConfig):
    trigger_type: Literal["CONDITION_BASED"]


class ManualTriggerIn(ManualTriggerConfig):
    trigger_type: Literal["MANUAL"]


class ApiTriggerIn(ApiTriggerConfig):
    trigger_type: Literal["API_TRIGGER"]


TriggerIn = Annotated[
    TimeBasedTriggerIn
    | EventBasedTriggerIn
    | ConditionBasedTriggerIn
    | ManualTriggerIn
    | ApiTriggerIn,
    Field(discriminator="trigger_type"),
]


# ---- Actions ----


class SendEmailAction(BaseModel):
    type: Literal["send_email"]
    config: SendMessageConfigIn = Field(default_factory=SendMessageConfigIn)


class SendSmsAction(BaseModel):
    type: Literal["send_sms"]
    config: SendMessageConfigIn = Field(default_factory=SendMessageConfigIn)


class SendWhatsappAction(BaseModel):
    type: Literal["send_whatsapp"]
    config: SendMessageConfigIn = Field(default_factory=SendMessageConfigIn)


class AddToListAction(BaseModel):
    type: Literal["add_to_list"]
    config: ListConfigIn


class RemoveFromListAction(BaseModel):
    type: Literal["remove_from_list"]
    config: ListConfigIn


class UpdateContactAction(BaseModel):
    type: Literal["update_contact"]
    config: UpdateContactConfigIn


class WaitAction(BaseModel):
    type: Literal["wait"]
    config: WaitConfigIn = Field(default_factory=WaitConfigIn)


class WebhookAction(BaseModel):
    type: Literal["webhook"]
    config: WebhookConfigIn


ActionIn = Annotated[
    SendEmailAction
    | SendSmsAction
    | SendWhatsappAction
    | AddToListAction
    | RemoveFromListAction
    | UpdateContactAction
    | WaitAction
    | WebhookAction,
    Field(discriminator="type"),
]


def _fold_legacy_fields(data: Any) -> Any:
    """Turn trigger_type + trigger_config (or their JSON strings) into a tagged trigger."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    trigger_type = data.pop("trigger_type", None) or data.pop("triggerType", None)
    trigger_config = data.pop("trigger_config", None)
    if trigger_config is None:
        trigger_config = data.pop("triggerConfig", None)
    if data.get("trigger") is None and trigger_type is not None:
        config = _maybe_json(trigger_config) or {}
        if not isinstance(config, dict):
            raise ValueError("trigger_config must be an object")
        data["trigger"] = {**config, "trigger_type": trigger_type}
    for key in ("conditions", "actions"):
        if key in data:
            data[key] = _maybe_json(data[key])
    return data


def trigger_config_of(trigger: BaseModel | None) -> dict[str, Any] | None:
    """Return a parsed trigger as the plain config dict the validator expects."""
    if trigger is None:
        return None
    return trigger.model_dump(exclude={"trigger_type"})


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    campaign_id: str | None = None
    trigger: TriggerIn
    conditions: list[ConditionIn] = Field(default_factory=list)
    actions: list[ActionIn] = Field(default_factory=list)
    is_active: bool = False
    failure_policy: ActionFailurePolicy | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        return _fold_legacy_fields(data)


class WorkflowUpdateRequest(BaseModel):
    """Request body for updating a workflow (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger: TriggerIn | None = None
    conditions: list[ConditionIn] | None = None
    actions: list[ActionIn] | None = None
    status: WorkflowStatus | None = None
    failure_policy: ActionFailurePolicy | None = None
    allow_while_running: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        return _fold_legacy_fields(data)


class ExecuteWorkflowRequest(BaseModel):
    """Request body for POST /workflows/{id}/execute."""

    contact_id: str = Field(..., min_length=1)
    trigger_data: dict[str, Any] | None = None


# ---- Responses ----


class WorkflowResponse(BaseModel):
    """Workflow definition response."""

    id: str
    tenant_id: str
    name: str
    description: str | None
    campaign_id: str | None
    trigger_type: str
    trigger_config: dict[str, Any]
    conditions: list[dict[str, Any]]
    actions: list[dict[str, Any]]
    is_active: bool
    status: WorkflowStatus
    failure_policy: ActionFailurePolicy | None
    created_by: str | None = None

    @classmethod
    def from_entity(cls, d: WorkflowDefinition) -> WorkflowResponse:
        return cls(
            id=d.id,
            tenant_id=d.tenant_id,
            name=d.name,
            description=d.description,
            campaign_id=d.campaign_id,
            trigger_type=d.trigger_type.value,
            trigger_config=d.trigger.to_dict(),
            conditions=[c.to_dict() for c in d.conditions],
            actions=[a.to_dict() for a in d.actions],
            is_active=d.is_active,
            status=d.status,
            failure_policy=d.failure_policy,
            created_by=d.created_by,
        )


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution (run record) response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    workflow_id: str
    contact_id: str
    status: WorkflowExecutionStatus
    context: dict[str, Any]
    started_at: datetime | None
    completed_at: datetime | None
    error_message: str | None

    @classmethod
    def from_entity(cls, e: WorkflowExecution) -> WorkflowExecutionResponse:
        return cls.model_validate(e)


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class WorkflowExecutionListResponse(BaseModel):
    """One page of executions."""

    items: list[WorkflowExecutionResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: ExecutionPage) -> WorkflowExecutionListResponse:
        return cls(
            items=[WorkflowExecutionResponse.from_entity(e) for e in page.items],
            pagination=PaginationResponse(
                page=page.page, limit=page.limit, total=page.total, pages=page.pages
            ),
        )


class ActionResultResponse(BaseModel):
    type: str
    status: str
    detail: dict[str, Any]
    started_at: datetime | None = None

    @classmethod
    def from_result(cls, r: ActionResult) -> ActionResultResponse:
        return cls(
            type=r.type, status=r.status.value, detail=r.detail, started_at=r.started_at
        )


class ExecutionResultResponse(BaseModel):
    """Outcome of a run: skipped (with reason) or the finished execution."""

    status: str
    reason: str | None = None
    execution_id: str | None = None
    execution: WorkflowExecutionResponse | None = None
    results: list[ActionResultResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, r: ExecutionResult) -> ExecutionResultResponse:
        return cls(
            status=r.status.value,
            reason=r.reason.value if r.reason else None,
            execution_id=r.execution_id,
            execution=(
                WorkflowExecutionResponse.from_entity(r.execution) if r.execution else None
            ),
            results=[ActionResultResponse.from_result(a) for a in r.results],
        )


class WorkflowAnalyticsResponse(BaseModel):
    """Execution counts per status plus success / failure rates (fractions 0-1)."""

    workflow_id: str
    name: str
    status: WorkflowStatus
    total_executions: int
    completed: int
    failed: int
    running: int
    paused: int
    cancelled: int
    success_rate: float
    failure_rate: float

    @classmethod
    def from_result(cls, r: WorkflowAnalyticsResult) -> WorkflowAnalyticsResponse:
        a = r.analytics
        return cls(
            workflow_id=r.workflow_id,
            name=r.name,
            status=r.status,
            total_executions=a.total_executions,
            completed=a.completed,
            failed=a.failed,
            running=a.running,
            paused=a.paused,
            cancelled=a.cancelled,
            success_rate=a.success_rate,
            failure_rate=a.failure_rate,
        )
