"""SQLAlchemy ORM models. Import here so Alembic autogenerate sees every table."""

from app.infrastructure.persistence.models.contact import Contact, ContactListMember
from app.infrastructure.persistence.models.workflow import Workflow, WorkflowExecution

__all__ = [
    "Contact",
    "ContactListMember",
    "Workflow",
    "WorkflowExecution",
]
