"""Workflow domain entities.

A workflow is a definition: a trigger (one of five typed configurations),
guard conditions, and an ordered list of actions. An execution is one
timestamped attempt to run a workflow for one contact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from app.shared.enums import (
    ActionFailurePolicy,
    ActionType,
    TriggerType,
    WorkflowExecutionStatus,
    WorkflowStatus,
)


@dataclass(frozen=True)
class Condition:
    """Single field/operator/value predicate. Operator is kept as stored so unknown ones fail closed."""

    field: str
    operator: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            field=data.get("field", ""),
            operator=data.get("operator", ""),
            value=data.get("value"),
        )


# ---- Trigger configurations (tagged by trigger_type) ----


@dataclass(frozen=True)
class TimeBasedTrigger:
    """Fires when the current minute matches a cron schedule in the given timezone."""

    trigger_type: ClassVar[TriggerType] = TriggerType.TIME_BASED

    schedule: str
    timezone: str

    def to_dict(self) -> dict[str, Any]:
        return {"schedule": self.schedule, "timezone": self.timezone}


@dataclass(frozen=True)
class EventBasedTrigger:
    """Fires for events whose type and source both match."""

    trigger_type: ClassVar[TriggerType] = TriggerType.EVENT_BASED

    event_type: str
    event_source: str

    def to_dict(self) -> dict[str, Any]:
        return {"event_type": self.event_type, "event_source": self.event_source}


@dataclass(frozen=True)
class ConditionBasedTrigger:
    """Fires when every condition holds against the event payload."""

    trigger_type: ClassVar[TriggerType] = TriggerType.CONDITION_BASED

    conditions: tuple[Condition, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"conditions": [c.to_dict() for c in self.conditions]}


@dataclass(frozen=True)
class ManualTrigger:
    """Always eligible; the caller already decided to fire."""

    trigger_type: ClassVar[TriggerType] = TriggerType.MANUAL

    def to_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class ApiTrigger:
    """Eligible whenever invoked through the API path; endpoint/method checked at write time."""

    trigger_type: ClassVar[TriggerType] = TriggerType.API_TRIGGER

    endpoint: str
    method: str

    def to_dict(self) -> dict[str, Any]:
        return {"endpoint": self.endpoint, "method": self.method}


TriggerConfig = (
    TimeBasedTrigger
    | EventBasedTrigger
    | ConditionBasedTrigger
    | ManualTrigger
    | ApiTrigger
)


def trigger_from_dict(
    trigger_type: TriggerType | str, data: dict[str, Any] | None
) -> TriggerConfig:
    """Rebuild a stored trigger from its to_dict() form.

    Stored configs were validated when written and are not checked again;
    a schedule or timezone that no longer resolves makes the trigger
    ineligible at run time instead.
    """
    data = data or {}
    kind = TriggerType(trigger_type)
    if kind is TriggerType.TIME_BASED:
        return TimeBasedTrigger(
            schedule=str(data.get("schedule", "")),
            timezone=str(data.get("timezone", "")),
        )
    if kind is TriggerType.EVENT_BASED:
        return EventBasedTrigger(
            event_type=str(data.get("event_type", "")),
            event_source=str(data.get("event_source", "")),
        )
    if kind is TriggerType.CONDITION_BASED:
        return ConditionBasedTrigger(
            conditions=tuple(
                Condition.from_dict(c) for c in data.get("conditions") or []
            )
        )
    if kind is TriggerType.API_TRIGGER:
        return ApiTrigger(
            endpoint=str(data.get("endpoint", "")),
            method=str(data.get("method", "")),
        )
    return ManualTrigger()


# ---- Action configurations (tagged by action type) ----


@dataclass(frozen=True)
class SendMessageConfig:
    """Channel send (email/SMS/WhatsApp). params is passed to the sender unchanged."""

    template_id: str | None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ListMembershipConfig:
    list_id: str


@dataclass(frozen=True)
class UpdateContactConfig:
    fields: dict[str, Any]


@dataclass(frozen=True)
class WaitConfig:
    """Placeholder delay; resolves immediately (no suspension)."""

    duration_seconds: float = 0.0


@dataclass(frozen=True)
class WebhookConfig:
    url: str
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    timeout_seconds: float | None = None


ActionConfig = (
    SendMessageConfig
    | ListMembershipConfig
    | UpdateContactConfig
    | WaitConfig
    | WebhookConfig
)


@dataclass(frozen=True)
class Action:
    """One configured action. type stays a raw string so a corrupt definition is detectable at dispatch."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "config": dict(self.config)}

    @property
    def known_type(self) -> ActionType | None:
        """Return the ActionType, or None when the stored type is not recognized."""
        try:
            return ActionType(self.type)
        except ValueError:
            return None


@dataclass
class WorkflowDefinition:
    """Domain entity for a workflow definition (trigger + conditions + actions)."""

    id: str
    tenant_id: str
    name: str
    trigger: TriggerConfig
    conditions: list[Condition] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    is_active: bool = False
    status: WorkflowStatus = WorkflowStatus.INACTIVE
    description: str | None = None
    campaign_id: str | None = None
    failure_policy: ActionFailurePolicy | None = None
    created_by: str | None = None

    @property
    def trigger_type(self) -> TriggerType:
        return self.trigger.trigger_type

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Return whether this workflow belongs to the given tenant."""
        return self.tenant_id == tenant_id


@dataclass
class WorkflowExecution:
    """One run of a workflow for one contact (run record)."""

    id: str
    tenant_id: str
    workflow_id: str
    contact_id: str
    status: WorkflowExecutionStatus
    context: dict[str, Any] = field(default_factory=dict)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class ExecutionAnalytics:
    """Derived counts and rates over all executions of one workflow."""

    total_executions: int = 0
    completed: int = 0
    failed: int = 0
    running: int = 0
    paused: int = 0
    cancelled: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.completed / self.total_executions

    @property
    def failure_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.failed / self.total_executions

    @classmethod
    def from_status_counts(
        cls, counts: dict[WorkflowExecutionStatus | str, int]
    ) -> ExecutionAnalytics:
        """Build from a status -> count mapping (e.g. a GROUP BY result)."""
        by_status = {WorkflowExecutionStatus(k): v for k, v in counts.items()}
        return cls(
            total_executions=sum(by_status.values()),
            completed=by_status.get(WorkflowExecutionStatus.COMPLETED, 0),
            failed=by_status.get(WorkflowExecutionStatus.FAILED, 0),
            running=by_status.get(WorkflowExecutionStatus.RUNNING, 0),
            paused=by_status.get(WorkflowExecutionStatus.PAUSED, 0),
            cancelled=by_status.get(WorkflowExecutionStatus.CANCELLED, 0),
        )
