"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the tenant header and workflow use cases.
All use cases are built from infrastructure implementations here; routes
depend only on these dependencies, not on infra directly.
"""

from app.api.v1.dependencies.tenant import get_tenant_id
from app.api.v1.dependencies.workflow import (
    get_run_controller,
    get_workflow_executions,
    get_workflow_management,
)

__all__ = [
    "get_run_controller",
    "get_tenant_id",
    "get_workflow_executions",
    "get_workflow_management",
]
