"""Domain layer: entities and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    Action,
    Condition,
    ExecutionAnalytics,
    TriggerConfig,
    WorkflowDefinition,
    WorkflowExecution,
)
from app.domain.exceptions import (
    AutomationException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownActionTypeException,
    ValidationException,
    WorkflowStateException,
)

__all__ = [
    # Entities
    "Action",
    "Condition",
    "ExecutionAnalytics",
    "TriggerConfig",
    "WorkflowDefinition",
    "WorkflowExecution",
    # Exceptions
    "AutomationException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "UnknownActionTypeException",
    "ValidationException",
    "WorkflowStateException",
]
