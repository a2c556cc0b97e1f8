"""Application use cases: one entry point per workflow."""

from app.application.use_cases.workflows import (
    WorkflowExecutionsUseCase,
    WorkflowManagementUseCase,
    WorkflowRunController,
)

__all__ = [
    "WorkflowExecutionsUseCase",
    "WorkflowManagementUseCase",
    "WorkflowRunController",
]
