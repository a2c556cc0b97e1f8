"""Execution queries, operator status changes and per-workflow analytics."""

from __future__ import annotations

from app.application.dtos.workflow import (
    ExecutionPage,
    ExecutionUpdate,
    WorkflowAnalyticsResult,
)
from app.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.domain.entities.workflow import ExecutionAnalytics, WorkflowExecution
from app.domain.exceptions import ResourceNotFoundException, WorkflowStateException
from app.shared.enums import WorkflowExecutionStatus
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

# target status -> statuses it may be reached from
_OPERATOR_TRANSITIONS: dict[WorkflowExecutionStatus, tuple[WorkflowExecutionStatus, ...]] = {
    WorkflowExecutionStatus.PAUSED: (WorkflowExecutionStatus.RUNNING,),
    WorkflowExecutionStatus.RUNNING: (WorkflowExecutionStatus.PAUSED,),
    WorkflowExecutionStatus.CANCELLED: (
        WorkflowExecutionStatus.RUNNING,
        WorkflowExecutionStatus.PAUSED,
    ),
}


class WorkflowExecutionsUseCase:
    """Read side of executions plus the PAUSED / CANCELLED operator tooling."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        execution_repo: IWorkflowExecutionRepository,
    ) -> None:
        self._workflows = workflow_repo
        self._executions = execution_repo

    async def list_executions(
        self,
        tenant_id: str,
        workflow_id: str,
        *,
        status: WorkflowExecutionStatus | None = None,
        contact_id: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ExecutionPage:
        """Return one page of a workflow's executions, newest first."""
        await self._require_workflow(tenant_id, workflow_id)
        return await self._executions.list_executions(
            workflow_id,
            status=status,
            contact_id=contact_id,
            page=page,
            limit=limit,
        )

    async def get_execution(self, tenant_id: str, execution_id: str) -> WorkflowExecution:
        execution = await self._executions.get_execution(execution_id, tenant_id)
        if execution is None:
            raise ResourceNotFoundException("workflow_execution", execution_id)
        return execution

    async def pause_execution(self, tenant_id: str, execution_id: str) -> WorkflowExecution:
        return await self._transition(
            tenant_id, execution_id, WorkflowExecutionStatus.PAUSED
        )

    async def resume_execution(
        self, tenant_id: str, execution_id: str
    ) -> WorkflowExecution:
        return await self._transition(
            tenant_id, execution_id, WorkflowExecutionStatus.RUNNING
        )

    async def cancel_execution(
        self, tenant_id: str, execution_id: str
    ) -> WorkflowExecution:
        return await self._transition(
            tenant_id, execution_id, WorkflowExecutionStatus.CANCELLED
        )

    async def get_analytics(
        self, tenant_id: str, workflow_id: str
    ) -> WorkflowAnalyticsResult:
        """Counts per status plus success/failure rates (0 when there are no executions)."""
        definition = await self._require_workflow(tenant_id, workflow_id)
        counts = await self._executions.count_by_status(workflow_id)
        return WorkflowAnalyticsResult(
            workflow_id=definition.id,
            name=definition.name,
            status=definition.status,
            analytics=ExecutionAnalytics.from_status_counts(counts),
        )

    async def _require_workflow(self, tenant_id: str, workflow_id: str):
        definition = await self._workflows.get_definition(workflow_id, tenant_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return definition

    async def _transition(
        self,
        tenant_id: str,
        execution_id: str,
        target: WorkflowExecutionStatus,
    ) -> WorkflowExecution:
        execution = await self.get_execution(tenant_id, execution_id)
        allowed = _OPERATOR_TRANSITIONS[target]
        if execution.status not in allowed:
            raise WorkflowStateException(
                f"Cannot move execution from {execution.status.value} to {target.value}",
                execution_id=execution_id,
                status=execution.status.value,
            )
        update = ExecutionUpdate(
            status=target,
            completed_at=utc_now() if target.is_terminal else None,
        )
        if not await self._executions.update_execution(
            execution_id, update, expected=allowed
        ):
            # Lost a race with the run controller's terminal write.
            current = await self.get_execution(tenant_id, execution_id)
            raise WorkflowStateException(
                f"Cannot move execution from {current.status.value} to {target.value}",
                execution_id=execution_id,
                status=current.status.value,
            )
        logger.info("Execution %s moved to %s by operator", execution_id, target.value)
        return await self.get_execution(tenant_id, execution_id)
