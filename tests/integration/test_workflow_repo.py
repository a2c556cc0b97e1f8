"""Workflow, execution and contact repository integration tests.

Require Postgres with migrations applied; the session is rolled back after each test.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from app.application.dtos.workflow import ExecutionUpdate, WorkflowChanges, WorkflowDraft
from app.application.services.action_dispatcher import ActionDispatcher
from app.application.use_cases.workflows import WorkflowRunController
from app.domain.entities.workflow import (
    Action,
    Condition,
    EventBasedTrigger,
    ManualTrigger,
    WorkflowExecution,
)
from app.infrastructure.persistence.models import Contact
from app.infrastructure.persistence.repositories import (
    ContactRepository,
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from app.shared.enums import (
    ActionResultStatus,
    RunOutcome,
    WorkflowExecutionStatus,
    WorkflowStatus,
)
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid
from tests.fakes import RecordingChannelSender, RecordingWebhookClient

TENANT = "repo-test-tenant"


def _draft(**overrides) -> WorkflowDraft:
    fields = {
        "name": "Repo workflow",
        "trigger": EventBasedTrigger(event_type="signup", event_source="web"),
        "conditions": [Condition("country", "in", ["NG"])],
        "actions": [Action(type="send_email", config={"templateId": "T1"})],
        "campaign_id": "camp-1",
    }
    fields.update(overrides)
    return WorkflowDraft(**fields)


@pytest.mark.requires_db
async def test_create_and_get_definition(db_session) -> None:
    repo = WorkflowRepository(db_session)
    created = await repo.create_definition(TENANT, _draft(), created_by="user-1")

    found = await repo.get_definition(created.id, TENANT)

    assert found is not None
    assert found.trigger == EventBasedTrigger(event_type="signup", event_source="web")
    assert found.conditions[0].value == ["NG"]
    assert found.actions[0].type == "send_email"
    assert found.status is WorkflowStatus.INACTIVE
    assert await repo.get_definition(created.id, "other-tenant") is None


@pytest.mark.requires_db
async def test_list_by_campaign_and_soft_delete(db_session) -> None:
    repo = WorkflowRepository(db_session)
    a = await repo.create_definition(TENANT, _draft(campaign_id="camp-list"))
    await repo.create_definition(TENANT, _draft(campaign_id="camp-other"))

    listed = await repo.list_definitions(TENANT, campaign_id="camp-list")
    assert [d.id for d in listed] == [a.id]

    assert await repo.soft_delete(a.id, TENANT) is True
    assert await repo.get_definition(a.id, TENANT) is None


@pytest.mark.requires_db
async def test_update_definition(db_session) -> None:
    repo = WorkflowRepository(db_session)
    created = await repo.create_definition(TENANT, _draft())

    updated = await repo.update_definition(
        created.id,
        TENANT,
        WorkflowChanges(name="Renamed", status=WorkflowStatus.ACTIVE, is_active=True),
    )

    assert updated.name == "Renamed"
    assert updated.is_active is True
    assert updated.actions == created.actions


@pytest.mark.requires_db
async def test_conditional_execution_update(db_session) -> None:
    workflow = await WorkflowRepository(db_session).create_definition(TENANT, _draft())
    repo = WorkflowExecutionRepository(db_session)
    execution = await repo.create_execution(
        WorkflowExecution(
            id=generate_cuid(),
            tenant_id=TENANT,
            workflow_id=workflow.id,
            contact_id="C1",
            status=WorkflowExecutionStatus.RUNNING,
            context={"contact_id": "C1"},
            started_at=utc_now(),
        )
    )

    running = (WorkflowExecutionStatus.RUNNING, WorkflowExecutionStatus.PAUSED)
    assert await repo.has_running(workflow.id) is True
    assert await repo.update_execution(
        execution.id,
        ExecutionUpdate(status=WorkflowExecutionStatus.CANCELLED, completed_at=utc_now()),
        expected=running,
    )
    # Terminal rows are not overwritten.
    assert not await repo.update_execution(
        execution.id,
        ExecutionUpdate(status=WorkflowExecutionStatus.COMPLETED, completed_at=utc_now()),
        expected=running,
    )

    stored = await repo.get_execution(execution.id, TENANT)
    assert stored.status is WorkflowExecutionStatus.CANCELLED
    assert await repo.count_by_status(workflow.id) == {"CANCELLED": 1}
    page = await repo.list_executions(workflow.id, status=WorkflowExecutionStatus.CANCELLED)
    assert page.total == 1
    assert page.items[0].id == execution.id


@pytest.mark.requires_db
async def test_contact_repository_lists_and_updates(db_session) -> None:
    contact = Contact(tenant_id=TENANT, email="ada@example.com", attributes={"plan": "free"})
    db_session.add(contact)
    await db_session.flush()
    repo = ContactRepository(db_session, TENANT)

    await repo.add_member(contact.id, "L1")
    await repo.add_member(contact.id, "L1")
    await repo.update(contact.id, {"first_name": "Ada", "plan": "pro"})

    record = await repo.get_contact(contact.id)
    assert record["lists"] == ["L1"]
    assert record["first_name"] == "Ada"
    assert record["plan"] == "pro"
    assert record["attributes"] == {"plan": "pro"}

    await repo.remove_member(contact.id, "L1")
    assert await repo.list_ids_for(contact.id) == []
    assert await ContactRepository(db_session, "other-tenant").get_contact(contact.id) is None


@pytest.mark.requires_db
async def test_rejected_contact_update_leaves_session_usable(db_session) -> None:
    contact = Contact(tenant_id=TENANT, email="ada@example.com", attributes={})
    db_session.add(contact)
    await db_session.flush()
    repo = ContactRepository(db_session, TENANT)

    with pytest.raises(IntegrityError):
        await repo.update(contact.id, {"status": None})

    await repo.update(contact.id, {"first_name": "Ada"})
    record = await repo.get_contact(contact.id)
    assert record["status"] == "active"
    assert record["first_name"] == "Ada"


@pytest.mark.requires_db
async def test_failed_update_contact_action_does_not_strand_execution(db_session) -> None:
    contact = Contact(tenant_id=TENANT, email="ada@example.com", attributes={})
    db_session.add(contact)
    await db_session.flush()
    workflows = WorkflowRepository(db_session)
    executions = WorkflowExecutionRepository(db_session)
    contacts = ContactRepository(db_session, TENANT)
    definition = await workflows.create_definition(
        TENANT,
        _draft(
            trigger=ManualTrigger(),
            conditions=[],
            actions=[
                Action(type="update_contact", config={"fields": {"status": None}}),
                Action(type="send_email", config={"templateId": "T1"}),
            ],
            is_active=True,
        ),
    )
    channels = RecordingChannelSender()
    controller = WorkflowRunController(
        workflows,
        executions,
        contacts,
        ActionDispatcher(channels, contacts, contacts, RecordingWebhookClient()),
    )

    result = await controller.run(definition.id, contact.id)

    assert result.status is RunOutcome.COMPLETED
    assert [r.status for r in result.results] == [
        ActionResultStatus.FAILED,
        ActionResultStatus.COMPLETED,
    ]
    assert result.results[0].detail["error_type"] == "IntegrityError"
    assert channels.sent == [("email", contact.id, {"templateId": "T1"})]
    stored = await executions.get_execution(result.execution_id)
    assert stored.status is WorkflowExecutionStatus.COMPLETED
    assert stored.completed_at is not None
