"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IContactRepository,
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.application.interfaces.services import (
    IChannelSender,
    IContactMutator,
    IListService,
    IWebhookClient,
)

__all__ = [
    "IChannelSender",
    "IContactMutator",
    "IContactRepository",
    "IListService",
    "IWebhookClient",
    "IWorkflowExecutionRepository",
    "IWorkflowRepository",
]
