"""Workflow definition management: create, update, lifecycle toggles, delete.

Every operation is tenant-scoped. Definitions are validated once here
(WorkflowDefinitionValidator) before they reach the store, so runs never
see a malformed trigger, condition or action.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from app.application.dtos.workflow import WorkflowChanges
from app.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.application.services.workflow_definition_validator import (
    WorkflowDefinitionValidator,
)
from app.domain.entities.workflow import WorkflowDefinition
from app.domain.exceptions import ResourceNotFoundException, WorkflowStateException
from app.shared.enums import ActionFailurePolicy, TriggerType, WorkflowStatus
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class WorkflowManagementUseCase:
    """Operator-facing CRUD and lifecycle rules for workflow definitions."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        execution_repo: IWorkflowExecutionRepository,
        validator: WorkflowDefinitionValidator | None = None,
    ) -> None:
        self._workflows = workflow_repo
        self._executions = execution_repo
        self._validator = validator or WorkflowDefinitionValidator()

    async def create_workflow(
        self,
        tenant_id: str,
        *,
        name: str | None,
        trigger_type: TriggerType | str,
        trigger_config: Any,
        conditions: Any = None,
        actions: Any = None,
        description: str | None = None,
        campaign_id: str | None = None,
        is_active: bool = False,
        failure_policy: ActionFailurePolicy | str | None = None,
        created_by: str | None = None,
    ) -> WorkflowDefinition:
        """Validate and persist a new definition.

        Raises:
            ValidationException: Trigger config, conditions or actions are malformed.
        """
        draft = self._validator.build_draft(
            name=name,
            trigger_type=trigger_type,
            trigger_config=trigger_config,
            conditions=conditions,
            actions=actions,
            description=description,
            campaign_id=campaign_id,
            is_active=is_active,
            failure_policy=failure_policy,
        )
        definition = await self._workflows.create_definition(
            tenant_id, draft, created_by=created_by
        )
        logger.info(
            "Workflow %s created (trigger=%s, actions=%d, active=%s)",
            definition.id,
            definition.trigger_type.value,
            len(definition.actions),
            definition.is_active,
        )
        return definition

    async def get_workflow(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        definition = await self._workflows.get_definition(workflow_id, tenant_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return definition

    async def list_workflows(
        self,
        tenant_id: str,
        campaign_id: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        """List definitions, optionally only those linked to campaign_id."""
        return await self._workflows.list_definitions(
            tenant_id, campaign_id=campaign_id, skip=skip, limit=limit
        )

    async def update_workflow(
        self,
        tenant_id: str,
        workflow_id: str,
        *,
        allow_while_running: bool = False,
        **fields: Any,
    ) -> WorkflowDefinition:
        """Apply a partial update after re-validating it.

        Raises:
            ResourceNotFoundException: Workflow does not exist for tenant.
            ValidationException: New trigger/conditions/actions are malformed.
            WorkflowStateException: Archiving an active workflow, or changing
                trigger/conditions/actions while executions are RUNNING.
        """
        current = await self.get_workflow(tenant_id, workflow_id)
        changes = self._validator.build_changes(
            current_trigger_type=current.trigger_type, **fields
        )

        if changes.status is not None:
            changes = self._apply_status_rules(current, changes)

        if (
            changes.touches_definition
            and not allow_while_running
            and await self._executions.has_running(workflow_id)
        ):
            raise WorkflowStateException(
                "Workflow has running executions; pass allow_while_running to edit it",
                workflow_id=workflow_id,
            )

        updated = await self._workflows.update_definition(workflow_id, tenant_id, changes)
        if updated is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return updated

    async def activate_workflow(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        """INACTIVE -> ACTIVE."""
        current = await self.get_workflow(tenant_id, workflow_id)
        if current.status is not WorkflowStatus.INACTIVE:
            raise WorkflowStateException(
                f"Only inactive workflows can be activated (status is {current.status.value})",
                workflow_id=workflow_id,
                status=current.status.value,
            )
        return await self._set_status(tenant_id, workflow_id, WorkflowStatus.ACTIVE)

    async def deactivate_workflow(
        self, tenant_id: str, workflow_id: str
    ) -> WorkflowDefinition:
        """ACTIVE -> INACTIVE."""
        current = await self.get_workflow(tenant_id, workflow_id)
        if current.status is not WorkflowStatus.ACTIVE:
            raise WorkflowStateException(
                f"Only active workflows can be deactivated (status is {current.status.value})",
                workflow_id=workflow_id,
                status=current.status.value,
            )
        return await self._set_status(tenant_id, workflow_id, WorkflowStatus.INACTIVE)

    async def delete_workflow(self, tenant_id: str, workflow_id: str) -> None:
        """Soft-delete an inactive workflow."""
        current = await self.get_workflow(tenant_id, workflow_id)
        if current.is_active:
            raise WorkflowStateException(
                "Cannot delete an active workflow; deactivate it first",
                workflow_id=workflow_id,
            )
        if not await self._workflows.soft_delete(workflow_id, tenant_id):
            raise ResourceNotFoundException("workflow", workflow_id)
        logger.info("Workflow %s deleted", workflow_id)

    async def _set_status(
        self, tenant_id: str, workflow_id: str, status: WorkflowStatus
    ) -> WorkflowDefinition:
        updated = await self._workflows.update_definition(
            workflow_id,
            tenant_id,
            WorkflowChanges(status=status, is_active=status is WorkflowStatus.ACTIVE),
        )
        if updated is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        logger.info("Workflow %s is now %s", workflow_id, status.value)
        return updated

    @staticmethod
    def _apply_status_rules(
        current: WorkflowDefinition, changes: WorkflowChanges
    ) -> WorkflowChanges:
        """Check a status change requested through update and keep is_active in step."""
        target = changes.status
        if target is WorkflowStatus.ARCHIVED and current.is_active:
            raise WorkflowStateException(
                "Cannot archive an active workflow; deactivate it first",
                workflow_id=current.id,
            )
        if (
            target is WorkflowStatus.ACTIVE
            and current.status is WorkflowStatus.ARCHIVED
        ):
            raise WorkflowStateException(
                "Archived workflows cannot be activated",
                workflow_id=current.id,
            )
        return replace(changes, is_active=target is WorkflowStatus.ACTIVE)
