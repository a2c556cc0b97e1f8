"""Evaluates workflow conditions against a contact/event record.

Pure and stateless: no I/O, no mutation of the record, safe to share
across concurrent runs. Every failure mode evaluates to False (fail
closed); nothing here raises on bad operands or unknown operators.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from numbers import Real
from typing import Any

from app.domain.entities.workflow import Condition
from app.shared.enums import ConditionOperator
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()


def resolve_field(record: Mapping[str, Any] | None, path: str) -> Any:
    """Follow a dot-separated path into nested mappings.

    Any missing key or non-mapping intermediate yields None.
    """
    current: Any = record
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return None
    return current


def _is_number(value: Any) -> bool:
    return isinstance(value, (Real, Decimal)) and not isinstance(value, bool)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _same(left: Any, right: Any) -> bool:
    # True == 1 in Python; a boolean only equals another boolean.
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _member_of(value: Any, candidates: Sequence[Any]) -> bool:
    return any(_same(value, c) for c in candidates)


class ConditionEvaluator:
    """Evaluates single conditions and AND-ed condition lists."""

    def evaluate(self, condition: Condition, record: Mapping[str, Any] | None) -> bool:
        """Return whether condition holds for record.

        A missing field is None: it satisfies only not_equals and not_in.
        """
        try:
            operator = ConditionOperator(condition.operator)
        except ValueError:
            logger.warning(
                "Unknown condition operator %r on field %r; failing closed",
                condition.operator,
                condition.field,
            )
            return False

        actual = resolve_field(record, condition.field)
        expected = condition.value

        if operator is ConditionOperator.EQUALS:
            return _same(actual, expected)
        if operator is ConditionOperator.NOT_EQUALS:
            return not _same(actual, expected)
        if operator in (ConditionOperator.IN, ConditionOperator.NOT_IN):
            if not isinstance(expected, (list, tuple)):
                return False
            found = _member_of(actual, expected)
            return found if operator is ConditionOperator.IN else not found
        if operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
            if not (_is_number(actual) and _is_number(expected)):
                return False
            if operator is ConditionOperator.GREATER_THAN:
                return actual > expected
            return actual < expected
        # contains / not_contains: substring test on string forms
        if actual is None:
            return False
        found = _as_text(expected) in _as_text(actual)
        return found if operator is ConditionOperator.CONTAINS else not found

    def evaluate_all(
        self,
        conditions: Iterable[Condition],
        record: Mapping[str, Any] | None,
    ) -> bool:
        """Logical AND over conditions; an empty list is True."""
        return all(self.evaluate(c, record) for c in conditions)
