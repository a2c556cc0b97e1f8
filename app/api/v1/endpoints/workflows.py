"""Workflow API: thin routes delegating to the workflow use cases and run controller."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_run_controller,
    get_tenant_id,
    get_workflow_executions,
    get_workflow_management,
)
from app.application.use_cases.workflows import (
    WorkflowExecutionsUseCase,
    WorkflowManagementUseCase,
    WorkflowRunController,
)
from app.schemas.workflow import (
    ExecuteWorkflowRequest,
    ExecutionResultResponse,
    WorkflowAnalyticsResponse,
    WorkflowCreateRequest,
    WorkflowExecutionListResponse,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowUpdateRequest,
    trigger_config_of,
)
from app.shared.enums import WorkflowExecutionStatus

router = APIRouter()


@router.post("", response_model=WorkflowResponse, status_code=201)
async def create_workflow(
    body: WorkflowCreateRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """Create a workflow (tenant-scoped). Starts INACTIVE unless is_active is set."""
    definition = await workflows.create_workflow(
        tenant_id,
        name=body.name,
        trigger_type=body.trigger.trigger_type,
        trigger_config=trigger_config_of(body.trigger),
        conditions=[c.model_dump() for c in body.conditions],
        actions=[a.model_dump() for a in body.actions],
        description=body.description,
        campaign_id=body.campaign_id,
        is_active=body.is_active,
        failure_policy=body.failure_policy,
    )
    return WorkflowResponse.from_entity(definition)


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
    campaign_id: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List workflows for tenant, optionally for one campaign."""
    definitions = await workflows.list_workflows(
        tenant_id, campaign_id=campaign_id, skip=skip, limit=limit
    )
    return [WorkflowResponse.from_entity(d) for d in definitions]


@router.get("/executions/{execution_id}", response_model=WorkflowExecutionResponse)
async def get_execution(
    execution_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
):
    """Get workflow execution by id. Tenant-scoped."""
    execution = await executions.get_execution(tenant_id, execution_id)
    return WorkflowExecutionResponse.from_entity(execution)


@router.post(
    "/executions/{execution_id}/pause", response_model=WorkflowExecutionResponse
)
async def pause_execution(
    execution_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
):
    """RUNNING -> PAUSED."""
    execution = await executions.pause_execution(tenant_id, execution_id)
    return WorkflowExecutionResponse.from_entity(execution)


@router.post(
    "/executions/{execution_id}/resume", response_model=WorkflowExecutionResponse
)
async def resume_execution(
    execution_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
):
    """PAUSED -> RUNNING."""
    execution = await executions.resume_execution(tenant_id, execution_id)
    return WorkflowExecutionResponse.from_entity(execution)


@router.post(
    "/executions/{execution_id}/cancel", response_model=WorkflowExecutionResponse
)
async def cancel_execution(
    execution_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
):
    """RUNNING or PAUSED -> CANCELLED."""
    execution = await executions.cancel_execution(tenant_id, execution_id)
    return WorkflowExecutionResponse.from_entity(execution)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """Get workflow by id (tenant-scoped)."""
    definition = await workflows.get_workflow(tenant_id, workflow_id)
    return WorkflowResponse.from_entity(definition)


@router.put("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    body: WorkflowUpdateRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """Partial update; re-validated. Definition edits are refused while runs are in progress."""
    definition = await workflows.update_workflow(
        tenant_id,
        workflow_id,
        allow_while_running=body.allow_while_running,
        name=body.name,
        description=body.description,
        trigger_type=body.trigger.trigger_type if body.trigger else None,
        trigger_config=trigger_config_of(body.trigger),
        conditions=(
            [c.model_dump() for c in body.conditions]
            if body.conditions is not None
            else None
        ),
        actions=(
            [a.model_dump() for a in body.actions] if body.actions is not None else None
        ),
        status=body.status,
        failure_policy=body.failure_policy,
    )
    return WorkflowResponse.from_entity(definition)


@router.delete("/{workflow_id}", status_code=204)
async def delete_workflow(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """Soft-delete an inactive workflow. Tenant-scoped."""
    await workflows.delete_workflow(tenant_id, workflow_id)


@router.post("/{workflow_id}/activate", response_model=WorkflowResponse)
async def activate_workflow(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """INACTIVE -> ACTIVE."""
    definition = await workflows.activate_workflow(tenant_id, workflow_id)
    return WorkflowResponse.from_entity(definition)


@router.post("/{workflow_id}/deactivate", response_model=WorkflowResponse)
async def deactivate_workflow(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflows: Annotated[WorkflowManagementUseCase, Depends(get_workflow_management)],
):
    """ACTIVE -> INACTIVE."""
    definition = await workflows.deactivate_workflow(tenant_id, workflow_id)
    return WorkflowResponse.from_entity(definition)


@router.post("/{workflow_id}/execute", response_model=ExecutionResultResponse)
async def execute_workflow(
    workflow_id: str,
    body: ExecuteWorkflowRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    controller: Annotated[WorkflowRunController, Depends(get_run_controller)],
):
    """Run the workflow for one contact. Skips return 200 with status=skipped."""
    result = await controller.run(
        workflow_id,
        body.contact_id,
        body.trigger_data,
        tenant_id=tenant_id,
    )
    return ExecutionResultResponse.from_result(result)


@router.get(
    "/{workflow_id}/executions", response_model=WorkflowExecutionListResponse
)
async def list_workflow_executions(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
    status: WorkflowExecutionStatus | None = None,
    contact_id: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Execution history for a workflow, newest first. Tenant-scoped."""
    result = await executions.list_executions(
        tenant_id,
        workflow_id,
        status=status,
        contact_id=contact_id,
        page=page,
        limit=limit,
    )
    return WorkflowExecutionListResponse.from_page(result)


@router.get("/{workflow_id}/analytics", response_model=WorkflowAnalyticsResponse)
async def get_workflow_analytics(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    executions: Annotated[WorkflowExecutionsUseCase, Depends(get_workflow_executions)],
):
    """Counts per status and success / failure rates."""
    result = await executions.get_analytics(tenant_id, workflow_id)
    return WorkflowAnalyticsResponse.from_result(result)
