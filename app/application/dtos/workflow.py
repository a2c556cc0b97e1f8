"""DTOs for workflow use cases (no dependency on ORM or presentation schemas)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.entities.workflow import (
    Action,
    Condition,
    ExecutionAnalytics,
    TriggerConfig,
    WorkflowExecution,
)
from app.shared.enums import (
    ActionFailurePolicy,
    ActionResultStatus,
    RunOutcome,
    SkipReason,
    WorkflowExecutionStatus,
    WorkflowStatus,
)


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one dispatched action, stored in execution context['result']."""

    type: str
    status: ActionResultStatus
    detail: dict[str, Any] = field(default_factory=dict)
    started_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ActionResultStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status.value,
            "detail": self.detail,
            "started_at": self.started_at.isoformat() if self.started_at else None,
        }


@dataclass
class ExecutionResult:
    """Result of WorkflowRunController.run: skipped (no record) or a finished execution."""

    status: RunOutcome
    reason: SkipReason | None = None
    execution: WorkflowExecution | None = None
    results: list[ActionResult] = field(default_factory=list)

    @classmethod
    def skipped(cls, reason: SkipReason) -> ExecutionResult:
        return cls(status=RunOutcome.SKIPPED, reason=reason)

    @property
    def execution_id(self) -> str | None:
        return self.execution.id if self.execution else None


@dataclass(frozen=True)
class ExecutionUpdate:
    """Patch applied to an execution row (terminal write or operator status change)."""

    status: WorkflowExecutionStatus
    completed_at: datetime | None = None
    context: dict[str, Any] | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class ExecutionPage:
    """One page of executions plus pagination totals."""

    items: list[WorkflowExecution]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class WorkflowDraft:
    """Validated input for creating a workflow definition."""

    name: str
    trigger: TriggerConfig
    conditions: list[Condition] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    description: str | None = None
    campaign_id: str | None = None
    is_active: bool = False
    failure_policy: ActionFailurePolicy | None = None

    @property
    def status(self) -> WorkflowStatus:
        return WorkflowStatus.ACTIVE if self.is_active else WorkflowStatus.INACTIVE


@dataclass(frozen=True)
class WorkflowChanges:
    """Validated partial update. None means 'leave unchanged'."""

    name: str | None = None
    description: str | None = None
    trigger: TriggerConfig | None = None
    conditions: list[Condition] | None = None
    actions: list[Action] | None = None
    status: WorkflowStatus | None = None
    is_active: bool | None = None
    failure_policy: ActionFailurePolicy | None = None

    @property
    def touches_definition(self) -> bool:
        """Whether trigger, conditions or actions change (guarded while runs are in progress)."""
        return (
            self.trigger is not None
            or self.conditions is not None
            or self.actions is not None
        )


@dataclass(frozen=True)
class WorkflowAnalyticsResult:
    """Analytics aggregate for one workflow, with the workflow's identity."""

    workflow_id: str
    name: str
    status: WorkflowStatus
    analytics: ExecutionAnalytics
