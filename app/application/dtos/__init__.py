"""Application DTOs (no ORM dependency)."""

from app.application.dtos.workflow import (
    ActionResult,
    ExecutionPage,
    ExecutionResult,
    ExecutionUpdate,
    WorkflowAnalyticsResult,
    WorkflowChanges,
    WorkflowDraft,
)

__all__ = [
    "ActionResult",
    "ExecutionPage",
    "ExecutionResult",
    "ExecutionUpdate",
    "WorkflowAnalyticsResult",
    "WorkflowChanges",
    "WorkflowDraft",
]
