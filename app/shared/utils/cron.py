"""Cron schedules for TIME_BASED triggers, backed by APScheduler's CronTrigger.

Answers "is this minute a fire time" for a five-field crontab expression
in a given IANA timezone. Repeated invocation (the actual scheduler)
lives outside the engine.

Crontab and APScheduler disagree in two places, both handled here:
weekday numbers (crontab: 0 and 7 are Sunday; APScheduler: 0 is Monday)
and restricted day fields (crontab matches if day-of-month OR
day-of-week matches; APScheduler requires both).
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger

_MACROS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

# Crontab weekday order; index 7 wraps to Sunday.
_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def load_timezone(name: str) -> ZoneInfo:
    """Return the IANA zone; raise ValueError for unknown names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone {name!r}") from e


def _weekday_number(token: str) -> int:
    lowered = token.lower()
    if lowered in _WEEKDAYS:
        return _WEEKDAYS.index(lowered)
    if lowered.isdigit() and int(lowered) <= 7:
        return int(lowered)
    raise ValueError(f"invalid day-of-week value {token!r}")


def _weekday_names(field: str) -> str:
    """Rewrite a crontab day-of-week field as explicit APScheduler weekday names."""
    if field == "*":
        return field
    days: list[str] = []
    for item in field.split(","):
        base, slash, step_text = item.partition("/")
        step = 1
        if slash:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"invalid step {step_text!r} in day-of-week field")
            step = int(step_text)
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            low, _, high = base.partition("-")
            first, last = _weekday_number(low), _weekday_number(high)
        else:
            first = _weekday_number(base)
            last = 6 if slash else first
        if first > last:
            raise ValueError(f"descending range {base!r} in day-of-week field")
        for number in range(first, last + 1, step):
            name = _WEEKDAYS[number % 7]
            if name not in days:
                days.append(name)
    return ",".join(days)


class CronSchedule:
    """Parsed cron expression bound to a timezone."""

    def __init__(self, expression: str, triggers: tuple[CronTrigger, ...]) -> None:
        self.expression = expression
        self._triggers = triggers

    @classmethod
    def parse(cls, expression: str, timezone: str = "UTC") -> CronSchedule:
        """Parse an expression or macro; raise ValueError when malformed."""
        tz = load_timezone(timezone)
        text = _MACROS.get(expression.strip().lower(), expression.strip())
        parts = text.split()
        if len(parts) != 5:
            raise ValueError(f"cron expression must have 5 fields, got {len(parts)}")
        minute, hour, day, month, weekday = parts
        weekday = _weekday_names(weekday)
        if day != "*" and weekday != "*":
            crontabs = (
                f"{minute} {hour} {day} {month} *",
                f"{minute} {hour} * {month} {weekday}",
            )
        else:
            crontabs = (f"{minute} {hour} {day} {month} {weekday}",)
        return cls(
            expression,
            tuple(CronTrigger.from_crontab(c, timezone=tz) for c in crontabs),
        )

    def matches(self, moment: datetime) -> bool:
        """Return whether the minute containing moment (aware) is a fire time."""
        minute = moment.replace(second=0, microsecond=0)
        return any(
            trigger.get_next_fire_time(None, minute) == minute
            for trigger in self._triggers
        )


def is_due(schedule: str, timezone: str, now: datetime) -> bool:
    """Return whether now (aware, any zone) falls on a fire minute of schedule in timezone."""
    return CronSchedule.parse(schedule, timezone).matches(now)
