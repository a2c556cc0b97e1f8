"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import (
    ActionFailurePolicy,
    ActionResultStatus,
    ActionType,
    ConditionOperator,
    RunOutcome,
    SkipReason,
    TriggerType,
    WorkflowExecutionStatus,
    WorkflowStatus,
)
from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "ActionFailurePolicy",
    "ActionResultStatus",
    "ActionType",
    "ConditionOperator",
    "RunOutcome",
    "SkipReason",
    "TriggerType",
    "WorkflowExecutionStatus",
    "WorkflowStatus",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
