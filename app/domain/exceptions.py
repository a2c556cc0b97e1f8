"""Domain exceptions for the campaign automation engine.

Only configuration-corruption-class problems and lookups of missing
resources are raised. Expected business outcomes (a skipped run, a
failed action) are returned as data by the engine. The presentation
layer maps these exceptions to HTTP responses in exception handlers.
"""

from typing import Any


class AutomationException(Exception):
    """Base exception for all automation engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AutomationException):
    """Raised when a workflow definition is malformed (trigger, condition or action config).

    Detected when a definition is written, never while a run is in progress.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field path.

        Args:
            message: Description of the validation failure.
            field: Optional path of the offending field (e.g. 'actions[1].config.url').
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(AutomationException):
    """Raised when a referenced workflow, contact or execution does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'contact').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class WorkflowStateException(AutomationException):
    """Raised when a lifecycle rule forbids the requested change.

    Examples: deleting or archiving an active workflow, activating an
    archived one, moving an execution out of a terminal status.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "WORKFLOW_STATE_CONFLICT", details)


class UnknownActionTypeException(AutomationException):
    """Raised by the dispatcher for an action type it cannot execute.

    Indicates a corrupt stored definition. The run controller records the
    execution as FAILED and re-raises to the caller.
    """

    def __init__(self, action_type: Any) -> None:
        super().__init__(
            f"Unknown action type: {action_type}",
            "UNKNOWN_ACTION_TYPE",
            {"action_type": str(action_type)},
        )


class SqlNotConfiguredException(AutomationException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
