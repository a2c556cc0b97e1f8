"""Shared enumerations for the campaign automation engine.

Cross-cutting enums used by domain, application and infrastructure
(trigger types, operators, action types, lifecycle statuses).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TriggerType(_ValuesMixin, str, Enum):
    """Gating rule kind that decides whether a workflow may run."""

    TIME_BASED = "TIME_BASED"
    EVENT_BASED = "EVENT_BASED"
    CONDITION_BASED = "CONDITION_BASED"
    MANUAL = "MANUAL"
    API_TRIGGER = "API_TRIGGER"


class ConditionOperator(_ValuesMixin, str, Enum):
    """Comparison operator of a single condition."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IN = "in"
    NOT_IN = "not_in"


class ActionType(_ValuesMixin, str, Enum):
    """Side effect performed by one workflow action."""

    SEND_EMAIL = "send_email"
    SEND_SMS = "send_sms"
    SEND_WHATSAPP = "send_whatsapp"
    ADD_TO_LIST = "add_to_list"
    REMOVE_FROM_LIST = "remove_from_list"
    UPDATE_CONTACT = "update_contact"
    WAIT = "wait"
    WEBHOOK = "webhook"


class ActionResultStatus(_ValuesMixin, str, Enum):
    """Outcome of one dispatched action."""

    COMPLETED = "completed"
    FAILED = "failed"


class ActionFailurePolicy(_ValuesMixin, str, Enum):
    """What the run controller does after an action fails."""

    CONTINUE = "continue"
    ABORT = "abort"


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow definition lifecycle status."""

    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class WorkflowExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution lifecycle status."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PAUSED = "PAUSED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further status change is allowed."""
        return self in _TERMINAL_EXECUTION_STATUSES


_TERMINAL_EXECUTION_STATUSES = frozenset(
    {
        WorkflowExecutionStatus.COMPLETED,
        WorkflowExecutionStatus.FAILED,
        WorkflowExecutionStatus.CANCELLED,
    }
)


class RunOutcome(_ValuesMixin, str, Enum):
    """Overall outcome returned by a run() call."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SkipReason(_ValuesMixin, str, Enum):
    """Why a run was skipped without creating an execution record."""

    INACTIVE = "inactive"
    TRIGGER_NOT_MET = "trigger_not_met"
    CONDITIONS_NOT_MET = "conditions_not_met"
