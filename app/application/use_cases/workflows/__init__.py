"""Workflow use cases: run controller, definition management, execution queries."""

from app.application.use_cases.workflows.executions import WorkflowExecutionsUseCase
from app.application.use_cases.workflows.manage_workflows import (
    WorkflowManagementUseCase,
)
from app.application.use_cases.workflows.run_workflow import WorkflowRunController

__all__ = [
    "WorkflowExecutionsUseCase",
    "WorkflowManagementUseCase",
    "WorkflowRunController",
]
