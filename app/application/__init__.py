"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, channel senders, webhooks).
"""

from app.application.interfaces import (
    IChannelSender,
    IContactMutator,
    IContactRepository,
    IListService,
    IWebhookClient,
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.application.services import (
    ActionDispatcher,
    ConditionEvaluator,
    TriggerClassifier,
    WorkflowDefinitionValidator,
)
from app.application.use_cases.workflows import (
    WorkflowExecutionsUseCase,
    WorkflowManagementUseCase,
    WorkflowRunController,
)

__all__ = [
    "ActionDispatcher",
    "ConditionEvaluator",
    "IChannelSender",
    "IContactMutator",
    "IContactRepository",
    "IListService",
    "IWebhookClient",
    "IWorkflowExecutionRepository",
    "IWorkflowRepository",
    "TriggerClassifier",
    "WorkflowDefinitionValidator",
    "WorkflowExecutionsUseCase",
    "WorkflowManagementUseCase",
    "WorkflowRunController",
]
