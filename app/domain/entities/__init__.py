"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.workflow import (
    Action,
    ActionConfig,
    ApiTrigger,
    Condition,
    ConditionBasedTrigger,
    EventBasedTrigger,
    ExecutionAnalytics,
    ListMembershipConfig,
    ManualTrigger,
    SendMessageConfig,
    TimeBasedTrigger,
    TriggerConfig,
    UpdateContactConfig,
    WaitConfig,
    WebhookConfig,
    WorkflowDefinition,
    WorkflowExecution,
    trigger_from_dict,
)

__all__ = [
    "Action",
    "ActionConfig",
    "ApiTrigger",
    "Condition",
    "ConditionBasedTrigger",
    "EventBasedTrigger",
    "ExecutionAnalytics",
    "ListMembershipConfig",
    "ManualTrigger",
    "SendMessageConfig",
    "TimeBasedTrigger",
    "TriggerConfig",
    "UpdateContactConfig",
    "WaitConfig",
    "WebhookConfig",
    "WorkflowDefinition",
    "WorkflowExecution",
    "trigger_from_dict",
]
