"""Workflow and WorkflowExecution repositories.

Implement IWorkflowRepository and IWorkflowExecutionRepository. ORM rows
are mapped to domain entities here; stored trigger configs are rebuilt
into their typed form on load without being validated again.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.workflow import (
    ExecutionPage,
    ExecutionUpdate,
    WorkflowChanges,
    WorkflowDraft,
)
from app.domain.entities.workflow import (
    Action,
    Condition,
    WorkflowDefinition,
    WorkflowExecution as WorkflowExecutionEntity,
    trigger_from_dict,
)
from app.infrastructure.persistence.models.workflow import Workflow, WorkflowExecution
from app.shared.enums import (
    ActionFailurePolicy,
    WorkflowExecutionStatus,
    WorkflowStatus,
)
from app.shared.utils.datetime import ensure_utc, utc_now


def _to_definition(w: Workflow) -> WorkflowDefinition:
    """Map Workflow ORM to the domain definition (stored configs are not re-validated)."""
    return WorkflowDefinition(
        id=w.id,
        tenant_id=w.tenant_id,
        name=w.name,
        description=w.description,
        campaign_id=w.campaign_id,
        trigger=trigger_from_dict(w.trigger_type, w.trigger_config),
        conditions=[Condition.from_dict(c) for c in (w.conditions or [])],
        actions=[
            Action(type=a.get("type", ""), config=dict(a.get("config") or {}))
            for a in (w.actions or [])
        ],
        is_active=w.is_active,
        status=WorkflowStatus(w.status),
        failure_policy=ActionFailurePolicy(w.failure_policy) if w.failure_policy else None,
        created_by=w.created_by,
    )


def _to_execution(e: WorkflowExecution) -> WorkflowExecutionEntity:
    """Map WorkflowExecution ORM to the domain run record."""
    return WorkflowExecutionEntity(
        id=e.id,
        tenant_id=e.tenant_id,
        workflow_id=e.workflow_id,
        contact_id=e.contact_id,
        status=WorkflowExecutionStatus(e.status),
        context=dict(e.context or {}),
        started_at=ensure_utc(e.started_at),
        completed_at=ensure_utc(e.completed_at),
        error_message=e.error_message,
    )


class WorkflowRepository:
    """Workflow definition store. Implements IWorkflowRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_row(self, workflow_id: str, tenant_id: str | None) -> Workflow | None:
        q = select(Workflow).where(
            Workflow.id == workflow_id,
            Workflow.deleted_at.is_(None),
        )
        if tenant_id is not None:
            q = q.where(Workflow.tenant_id == tenant_id)
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def get_definition(
        self, workflow_id: str, tenant_id: str | None = None
    ) -> WorkflowDefinition | None:
        row = await self._get_row(workflow_id, tenant_id)
        return _to_definition(row) if row else None

    async def list_definitions(
        self,
        tenant_id: str,
        campaign_id: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        q = select(Workflow).where(
            Workflow.tenant_id == tenant_id,
            Workflow.deleted_at.is_(None),
        )
        if campaign_id is not None:
            q = q.where(Workflow.campaign_id == campaign_id)
        q = q.order_by(Workflow.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_to_definition(w) for w in result.scalars().all()]

    async def create_definition(
        self, tenant_id: str, draft: WorkflowDraft, created_by: str | None = None
    ) -> WorkflowDefinition:
        """Persist a validated draft and return the stored definition."""
        workflow = Workflow(
            tenant_id=tenant_id,
            name=draft.name,
            description=draft.description,
            campaign_id=draft.campaign_id,
            trigger_type=draft.trigger.trigger_type.value,
            trigger_config=draft.trigger.to_dict(),
            conditions=[c.to_dict() for c in draft.conditions],
            actions=[a.to_dict() for a in draft.actions],
            failure_policy=draft.failure_policy.value if draft.failure_policy else None,
            status=draft.status.value,
            is_active=draft.is_active,
            created_by=created_by,
        )
        self.db.add(workflow)
        await self.db.flush()
        await self.db.refresh(workflow)
        return _to_definition(workflow)

    async def update_definition(
        self, workflow_id: str, tenant_id: str, changes: WorkflowChanges
    ) -> WorkflowDefinition | None:
        workflow = await self._get_row(workflow_id, tenant_id)
        if workflow is None:
            return None
        if changes.name is not None:
            workflow.name = changes.name
        if changes.description is not None:
            workflow.description = changes.description
        if changes.trigger is not None:
            workflow.trigger_type = changes.trigger.trigger_type.value
            workflow.trigger_config = changes.trigger.to_dict()
        if changes.conditions is not None:
            workflow.conditions = [c.to_dict() for c in changes.conditions]
        if changes.actions is not None:
            workflow.actions = [a.to_dict() for a in changes.actions]
        if changes.status is not None:
            workflow.status = changes.status.value
        if changes.is_active is not None:
            workflow.is_active = changes.is_active
        if changes.failure_policy is not None:
            workflow.failure_policy = changes.failure_policy.value
        await self.db.flush()
        await self.db.refresh(workflow)
        return _to_definition(workflow)

    async def soft_delete(self, workflow_id: str, tenant_id: str) -> bool:
        workflow = await self._get_row(workflow_id, tenant_id)
        if workflow is None:
            return False
        workflow.deleted_at = utc_now()
        await self.db.flush()
        return True


class WorkflowExecutionRepository:
    """Execution records. Implements IWorkflowExecutionRepository.

    With autocommit=True every write is committed immediately, so a run's
    RUNNING row and its terminal status survive an exception raised later
    in the same request.
    """

    def __init__(self, db: AsyncSession, *, autocommit: bool = False) -> None:
        self.db = db
        self._autocommit = autocommit

    async def _persist(self) -> None:
        if self._autocommit:
            await self.db.commit()
        else:
            await self.db.flush()

    async def create_execution(
        self, execution: WorkflowExecutionEntity
    ) -> WorkflowExecutionEntity:
        row = WorkflowExecution(
            id=execution.id,
            tenant_id=execution.tenant_id,
            workflow_id=execution.workflow_id,
            contact_id=execution.contact_id,
            status=execution.status.value,
            context=execution.context,
            started_at=execution.started_at,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        created = _to_execution(row)
        await self._persist()
        return created

    async def update_execution(
        self,
        execution_id: str,
        update: ExecutionUpdate,
        *,
        expected: tuple[WorkflowExecutionStatus, ...],
    ) -> bool:
        """Conditional UPDATE: applies only while status is one of expected."""
        values: dict[str, Any] = {"status": update.status.value}
        if update.completed_at is not None:
            values["completed_at"] = update.completed_at
        if update.context is not None:
            values["context"] = update.context
        if update.error_message is not None:
            values["error_message"] = update.error_message
        result = await self.db.execute(
            sql_update(WorkflowExecution)
            .where(
                WorkflowExecution.id == execution_id,
                WorkflowExecution.status.in_([s.value for s in expected]),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        changed = result.rowcount == 1
        await self._persist()
        return changed

    async def get_execution(
        self, execution_id: str, tenant_id: str | None = None
    ) -> WorkflowExecutionEntity | None:
        q = select(WorkflowExecution).where(WorkflowExecution.id == execution_id)
        if tenant_id is not None:
            q = q.where(WorkflowExecution.tenant_id == tenant_id)
        # Conditional UPDATEs bypass the identity map; always reload.
        result = await self.db.execute(q.execution_options(populate_existing=True))
        row = result.scalar_one_or_none()
        return _to_execution(row) if row else None

    async def list_executions(
        self,
        workflow_id: str,
        *,
        status: WorkflowExecutionStatus | None = None,
        contact_id: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ExecutionPage:
        filters = [WorkflowExecution.workflow_id == workflow_id]
        if status is not None:
            filters.append(WorkflowExecution.status == status.value)
        if contact_id is not None:
            filters.append(WorkflowExecution.contact_id == contact_id)

        total = (
            await self.db.execute(
                select(func.count()).select_from(WorkflowExecution).where(*filters)
            )
        ).scalar_one()
        result = await self.db.execute(
            select(WorkflowExecution)
            .where(*filters)
            .order_by(
                WorkflowExecution.started_at.desc(),
                WorkflowExecution.created_at.desc(),
            )
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return ExecutionPage(
            items=[_to_execution(e) for e in result.scalars().all()],
            page=page,
            limit=limit,
            total=total,
        )

    async def count_by_status(self, workflow_id: str) -> dict[str, int]:
        result = await self.db.execute(
            select(WorkflowExecution.status, func.count())
            .where(WorkflowExecution.workflow_id == workflow_id)
            .group_by(WorkflowExecution.status)
        )
        return {status: count for status, count in result.all()}

    async def has_running(self, workflow_id: str) -> bool:
        result = await self.db.execute(
            select(WorkflowExecution.id)
            .where(
                WorkflowExecution.workflow_id == workflow_id,
                WorkflowExecution.status == WorkflowExecutionStatus.RUNNING.value,
            )
            .limit(1)
        )
        return result.first() is not None
