"""Workflow and WorkflowExecution ORM models. Campaign automation."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    SoftDeleteMultiTenantModel,
)
from app.shared.enums import (
    ActionFailurePolicy,
    TriggerType,
    WorkflowExecutionStatus,
    WorkflowStatus,
)


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Workflow(SoftDeleteMultiTenantModel, Base):
    """Workflow definition. Table: workflow. Trigger, conditions and actions as JSON."""

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Explicit owning campaign (no substring matching over serialized blobs).
    campaign_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    failure_policy: Mapped[str | None] = mapped_column(String(16), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowStatus.INACTIVE.value,
        server_default=WorkflowStatus.INACTIVE.value,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_workflow_tenant_campaign", "tenant_id", "campaign_id"),
        CheckConstraint(
            _in_check("trigger_type", TriggerType.values()),
            name="workflow_trigger_type_check",
        ),
        CheckConstraint(
            _in_check("status", WorkflowStatus.values()),
            name="workflow_status_check",
        ),
        CheckConstraint(
            "failure_policy IS NULL OR "
            + _in_check("failure_policy", ActionFailurePolicy.values()),
            name="workflow_failure_policy_check",
        ),
    )


class WorkflowExecution(MultiTenantModel, Base):
    """One run of a workflow for one contact. Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    contact_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowExecutionStatus.RUNNING.value,
        index=True,
    )
    context: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "ix_workflow_execution_workflow_started",
            "workflow_id",
            "started_at",
        ),
        Index(
            "ix_workflow_execution_tenant_workflow",
            "tenant_id",
            "workflow_id",
        ),
        CheckConstraint(
            _in_check("status", WorkflowExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
    )
