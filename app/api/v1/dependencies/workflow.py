"""Workflow dependencies (composition root).

Builds repositories, adapters and use cases for the workflow routes.
Routes depend only on these providers, never on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.action_dispatcher import ActionDispatcher
from app.application.use_cases.workflows import (
    WorkflowExecutionsUseCase,
    WorkflowManagementUseCase,
    WorkflowRunController,
)
from app.core.config import get_settings
from app.infrastructure.external.channels import create_channel_sender
from app.infrastructure.external.webhook import HttpWebhookClient
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    ContactRepository,
    WorkflowExecutionRepository,
    WorkflowRepository,
)

from .tenant import get_tenant_id


def _shared_http_client(request: Request) -> httpx.AsyncClient | None:
    """Outbound client created in lifespan (None outside the app, e.g. in some tests)."""
    return getattr(request.app.state, "http_client", None)


async def get_workflow_management(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> WorkflowManagementUseCase:
    """Definition CRUD and lifecycle (transactional)."""
    return WorkflowManagementUseCase(
        workflow_repo=WorkflowRepository(db),
        execution_repo=WorkflowExecutionRepository(db),
    )


async def get_workflow_executions(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> WorkflowExecutionsUseCase:
    """Execution queries, analytics and operator status changes."""
    return WorkflowExecutionsUseCase(
        workflow_repo=WorkflowRepository(db),
        execution_repo=WorkflowExecutionRepository(db),
    )


async def get_run_controller(
    request: Request,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowRunController:
    """Run controller whose writes commit as they happen.

    The RUNNING row, each CRM side effect and the terminal status are
    committed immediately so a FAILED execution is durable before the
    error reaches the caller.
    """
    settings = get_settings()
    http_client = _shared_http_client(request)
    contacts = ContactRepository(db, tenant_id, autocommit=True)
    dispatcher = ActionDispatcher(
        channel_sender=create_channel_sender(settings, http_client=http_client),
        list_service=contacts,
        contact_mutator=contacts,
        webhook_client=HttpWebhookClient(
            http_client=http_client,
            default_timeout=settings.webhook_timeout_seconds,
            user_agent=settings.webhook_user_agent,
        ),
        webhook_timeout_seconds=settings.webhook_timeout_seconds,
    )
    return WorkflowRunController(
        workflow_repo=WorkflowRepository(db),
        execution_repo=WorkflowExecutionRepository(db, autocommit=True),
        contact_repo=contacts,
        dispatcher=dispatcher,
        default_failure_policy=settings.action_failure_policy,
    )
