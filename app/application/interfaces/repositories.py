"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import WorkflowExecutionStatus

if TYPE_CHECKING:
    from app.application.dtos.workflow import (
        ExecutionPage,
        ExecutionUpdate,
        WorkflowChanges,
        WorkflowDraft,
    )
    from app.domain.entities.workflow import WorkflowDefinition, WorkflowExecution


# Workflow definition store
class IWorkflowRepository(Protocol):
    """Protocol for the workflow definition store (read contract used by runs, CRUD by management)."""

    async def get_definition(
        self, workflow_id: str, tenant_id: str | None = None
    ) -> WorkflowDefinition | None:
        """Return the definition by id (scoped to tenant when given), or None."""

    async def list_definitions(
        self,
        tenant_id: str,
        campaign_id: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        """Return non-deleted definitions for tenant, optionally for one campaign."""

    async def create_definition(
        self, tenant_id: str, draft: WorkflowDraft, created_by: str | None = None
    ) -> WorkflowDefinition:
        """Persist a validated draft and return the stored definition."""

    async def update_definition(
        self, workflow_id: str, tenant_id: str, changes: WorkflowChanges
    ) -> WorkflowDefinition | None:
        """Apply validated changes; return updated definition or None when not found."""

    async def soft_delete(self, workflow_id: str, tenant_id: str) -> bool:
        """Mark the definition deleted; return False when not found."""


# Workflow execution store
class IWorkflowExecutionRepository(Protocol):
    """Protocol for execution records: create once, then a single terminal update."""

    async def create_execution(self, execution: WorkflowExecution) -> WorkflowExecution:
        """Persist a new execution row (status RUNNING) and return it."""

    async def update_execution(
        self,
        execution_id: str,
        update: ExecutionUpdate,
        *,
        expected: tuple[WorkflowExecutionStatus, ...],
    ) -> bool:
        """Apply update only if current status is in expected; return whether a row changed."""

    async def get_execution(
        self, execution_id: str, tenant_id: str | None = None
    ) -> WorkflowExecution | None:
        """Return execution by id (tenant-scoped when given), or None."""

    async def list_executions(
        self,
        workflow_id: str,
        *,
        status: WorkflowExecutionStatus | None = None,
        contact_id: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ExecutionPage:
        """Return one page of executions, newest first."""

    async def count_by_status(self, workflow_id: str) -> dict[str, int]:
        """Return execution counts grouped by status for one workflow."""

    async def has_running(self, workflow_id: str) -> bool:
        """Return whether any execution of the workflow is RUNNING."""


# CRM / contact store
class IContactRepository(Protocol):
    """Protocol for reading a contact as a flat/nested record for condition evaluation."""

    async def get_contact(self, contact_id: str) -> dict[str, Any] | None:
        """Return the contact record, or None when the contact does not exist."""
