"""SQLAlchemy repositories (implement the application-layer ports)."""

from app.infrastructure.persistence.repositories.contact_repo import ContactRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)

__all__ = [
    "ContactRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
]
