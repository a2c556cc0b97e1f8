"""Tests for WorkflowManagementUseCase (validation, lifecycle rules, tenant scope)."""

import pytest

from app.application.use_cases.workflows import WorkflowManagementUseCase
from app.domain.entities.workflow import EventBasedTrigger, WorkflowExecution
from app.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowStateException,
)
from app.shared.enums import TriggerType, WorkflowExecutionStatus, WorkflowStatus
from tests.fakes import (
    FIXED_NOW,
    TENANT_ID,
    InMemoryExecutionRepository,
    InMemoryWorkflowRepository,
    make_definition,
)


@pytest.fixture
def repos():
    return InMemoryWorkflowRepository(), InMemoryExecutionRepository()


@pytest.fixture
def use_case(repos) -> WorkflowManagementUseCase:
    workflows, executions = repos
    return WorkflowManagementUseCase(workflows, executions)


def _running_execution(workflow_id: str = "wf-1") -> WorkflowExecution:
    return WorkflowExecution(
        id="ex-running",
        tenant_id=TENANT_ID,
        workflow_id=workflow_id,
        contact_id="C1",
        status=WorkflowExecutionStatus.RUNNING,
        started_at=FIXED_NOW,
    )


async def test_create_validates_and_starts_inactive(use_case) -> None:
    created = await use_case.create_workflow(
        TENANT_ID,
        name="Welcome series",
        trigger_type="EVENT_BASED",
        trigger_config={"eventType": "signup", "eventSource": "web"},
        conditions=[{"field": "country", "operator": "in", "value": ["NG"]}],
        actions=[{"type": "send_email", "config": {"templateId": "T1"}}],
        campaign_id="camp-1",
    )
    assert created.tenant_id == TENANT_ID
    assert created.status is WorkflowStatus.INACTIVE
    assert created.is_active is False
    assert created.trigger == EventBasedTrigger(event_type="signup", event_source="web")
    assert created.campaign_id == "camp-1"
    assert [a.type for a in created.actions] == ["send_email"]


async def test_create_rejects_malformed_definition(use_case, repos) -> None:
    with pytest.raises(ValidationException):
        await use_case.create_workflow(
            TENANT_ID,
            name="Broken",
            trigger_type="EVENT_BASED",
            trigger_config={"eventType": "signup"},
        )
    assert repos[0].definitions == {}


async def test_create_active_sets_status(use_case) -> None:
    created = await use_case.create_workflow(
        TENANT_ID, name="Now", trigger_type="MANUAL", trigger_config={}, is_active=True
    )
    assert created.status is WorkflowStatus.ACTIVE
    assert created.is_active is True


async def test_get_scoped_to_tenant(use_case, repos) -> None:
    repos[0].add(make_definition(tenant_id="other"))
    with pytest.raises(ResourceNotFoundException):
        await use_case.get_workflow(TENANT_ID, "wf-1")


async def test_list_filters_by_campaign(use_case, repos) -> None:
    repos[0].add(make_definition(id="a", campaign_id="camp-1"))
    repos[0].add(make_definition(id="b", campaign_id="camp-2"))
    repos[0].add(make_definition(id="c", tenant_id="other", campaign_id="camp-1"))

    found = await use_case.list_workflows(TENANT_ID, campaign_id="camp-1")

    assert [d.id for d in found] == ["a"]
    assert len(await use_case.list_workflows(TENANT_ID)) == 2


async def test_activate_and_deactivate(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=False))

    activated = await use_case.activate_workflow(TENANT_ID, "wf-1")
    assert activated.status is WorkflowStatus.ACTIVE
    assert activated.is_active

    with pytest.raises(WorkflowStateException):
        await use_case.activate_workflow(TENANT_ID, "wf-1")

    deactivated = await use_case.deactivate_workflow(TENANT_ID, "wf-1")
    assert deactivated.status is WorkflowStatus.INACTIVE
    assert not deactivated.is_active


async def test_archived_workflow_cannot_be_activated(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=False, status=WorkflowStatus.ARCHIVED))
    with pytest.raises(WorkflowStateException):
        await use_case.activate_workflow(TENANT_ID, "wf-1")
    with pytest.raises(WorkflowStateException):
        await use_case.update_workflow(TENANT_ID, "wf-1", status="ACTIVE")


async def test_active_workflow_cannot_be_archived_or_deleted(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=True))
    with pytest.raises(WorkflowStateException):
        await use_case.update_workflow(TENANT_ID, "wf-1", status="ARCHIVED")
    with pytest.raises(WorkflowStateException):
        await use_case.delete_workflow(TENANT_ID, "wf-1")


async def test_update_status_keeps_is_active_in_step(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=False))
    updated = await use_case.update_workflow(TENANT_ID, "wf-1", status="ACTIVE")
    assert updated.is_active is True
    updated = await use_case.update_workflow(TENANT_ID, "wf-1", status="INACTIVE")
    assert updated.is_active is False


async def test_update_replaces_trigger_and_actions(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=False))
    updated = await use_case.update_workflow(
        TENANT_ID,
        "wf-1",
        name="Renamed",
        trigger_type=TriggerType.EVENT_BASED,
        trigger_config={"event_type": "purchase", "event_source": "shop"},
        actions=[{"type": "wait", "config": {}}],
    )
    assert updated.name == "Renamed"
    assert updated.trigger_type is TriggerType.EVENT_BASED
    assert [a.type for a in updated.actions] == ["wait"]


async def test_update_refused_while_runs_in_progress(use_case, repos) -> None:
    workflows, executions = repos
    workflows.add(make_definition())
    executions.add(_running_execution())

    with pytest.raises(WorkflowStateException):
        await use_case.update_workflow(
            TENANT_ID, "wf-1", actions=[{"type": "wait", "config": {}}]
        )

    # Metadata edits are always allowed; definition edits need the override.
    renamed = await use_case.update_workflow(TENANT_ID, "wf-1", name="Still running")
    assert renamed.name == "Still running"
    forced = await use_case.update_workflow(
        TENANT_ID,
        "wf-1",
        allow_while_running=True,
        actions=[{"type": "wait", "config": {}}],
    )
    assert [a.type for a in forced.actions] == ["wait"]


async def test_delete_soft_deletes_inactive_workflow(use_case, repos) -> None:
    repos[0].add(make_definition(is_active=False))
    await use_case.delete_workflow(TENANT_ID, "wf-1")
    with pytest.raises(ResourceNotFoundException):
        await use_case.get_workflow(TENANT_ID, "wf-1")


async def test_update_missing_workflow_raises(use_case) -> None:
    with pytest.raises(ResourceNotFoundException):
        await use_case.update_workflow(TENANT_ID, "missing", name="x")
