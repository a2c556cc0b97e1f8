"""Decides whether a workflow's trigger admits an incoming event.

Stateless apart from the injected clock: the only persisted state is
the definition itself. TIME_BASED triggers answer "is now a fire time";
the scheduler that keeps asking lives outside the engine.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from app.application.services.condition_evaluator import ConditionEvaluator
from app.domain.entities.workflow import (
    ApiTrigger,
    ConditionBasedTrigger,
    EventBasedTrigger,
    ManualTrigger,
    TimeBasedTrigger,
    WorkflowDefinition,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.cron import is_due
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def _payload_value(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


class TriggerClassifier:
    """Evaluates trigger eligibility per trigger type."""

    def __init__(
        self,
        condition_evaluator: ConditionEvaluator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._conditions = condition_evaluator or ConditionEvaluator()
        self._clock = clock

    def is_eligible(
        self,
        definition: WorkflowDefinition,
        event_payload: Mapping[str, Any] | None,
    ) -> bool:
        """Return whether definition may run for event_payload."""
        match definition.trigger:
            case ManualTrigger() | ApiTrigger():
                return True
            case EventBasedTrigger(event_type=event_type, event_source=event_source):
                if not event_payload:
                    return False
                return (
                    _payload_value(event_payload, "event_type", "eventType") == event_type
                    and _payload_value(event_payload, "event_source", "eventSource")
                    == event_source
                )
            case ConditionBasedTrigger(conditions=conditions):
                if event_payload is None:
                    return False
                return self._conditions.evaluate_all(conditions, event_payload)
            case TimeBasedTrigger(schedule=schedule, timezone=timezone):
                try:
                    return is_due(schedule, timezone, self._clock())
                except ValueError:
                    logger.warning(
                        "Workflow %s has an unusable schedule %r (%s); not eligible",
                        definition.id,
                        schedule,
                        timezone,
                    )
                    return False
        return False
