"""initial_workflow_and_contact_tables

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-17 09:12:44.301925

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("campaign_id", sa.String(), nullable=True),
        sa.Column("trigger_type", sa.String(length=32), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("failure_policy", sa.String(length=16), nullable=True),
        sa.Column(
            "status",
            sa.String(length=16),
            server_default="INACTIVE",
            nullable=False,
        ),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "trigger_type IN ('TIME_BASED', 'EVENT_BASED', 'CONDITION_BASED', "
            "'MANUAL', 'API_TRIGGER')",
            name="workflow_trigger_type_check",
        ),
        sa.CheckConstraint(
            "status IN ('INACTIVE', 'ACTIVE', 'ARCHIVED')",
            name="workflow_status_check",
        ),
        sa.CheckConstraint(
            "failure_policy IS NULL OR failure_policy IN ('continue', 'abort')",
            name="workflow_failure_policy_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_tenant_id", "workflow", ["tenant_id"])
    op.create_index("ix_workflow_campaign_id", "workflow", ["campaign_id"])
    op.create_index("ix_workflow_status", "workflow", ["status"])
    op.create_index("ix_workflow_deleted_at", "workflow", ["deleted_at"])
    op.create_index(
        "ix_workflow_tenant_campaign", "workflow", ["tenant_id", "campaign_id"]
    )

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("contact_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("context", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('RUNNING', 'PAUSED', 'COMPLETED', 'FAILED', 'CANCELLED')",
            name="workflow_execution_status_check",
        ),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_execution_tenant_id", "workflow_execution", ["tenant_id"]
    )
    op.create_index(
        "ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"]
    )
    op.create_index(
        "ix_workflow_execution_contact_id", "workflow_execution", ["contact_id"]
    )
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    op.create_index(
        "ix_workflow_execution_workflow_started",
        "workflow_execution",
        ["workflow_id", "started_at"],
    )
    op.create_index(
        "ix_workflow_execution_tenant_workflow",
        "workflow_execution",
        ["tenant_id", "workflow_id"],
    )

    op.create_table(
        "contact",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column(
            "status", sa.String(length=32), server_default="active", nullable=False
        ),
        sa.Column("attributes", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contact_tenant_id", "contact", ["tenant_id"])
    op.create_index("ix_contact_email", "contact", ["email"])
    op.create_index("ix_contact_deleted_at", "contact", ["deleted_at"])

    op.create_table(
        "contact_list_member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("list_id", sa.String(), nullable=False),
        sa.Column("contact_id", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contact_id"], ["contact.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("list_id", "contact_id", name="uq_contact_list_member"),
    )
    op.create_index(
        "ix_contact_list_member_tenant_id", "contact_list_member", ["tenant_id"]
    )
    op.create_index(
        "ix_contact_list_member_list_id", "contact_list_member", ["list_id"]
    )
    op.create_index(
        "ix_contact_list_member_contact_id", "contact_list_member", ["contact_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("contact_list_member")
    op.drop_table("contact")
    op.drop_table("workflow_execution")
    op.drop_table("workflow")
