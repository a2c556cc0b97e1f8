"""Application services: condition evaluation, trigger classification, action dispatch, definition validation."""

from app.application.services.action_dispatcher import ActionDispatcher
from app.application.services.condition_evaluator import ConditionEvaluator
from app.application.services.trigger_classifier import TriggerClassifier
from app.application.services.workflow_definition_validator import (
    WorkflowDefinitionValidator,
)

__all__ = [
    "ActionDispatcher",
    "ConditionEvaluator",
    "TriggerClassifier",
    "WorkflowDefinitionValidator",
]
