"""Tests for crontab schedule matching (APScheduler CronTrigger underneath)."""

from datetime import UTC, datetime

import pytest

from app.shared.utils.cron import CronSchedule, is_due, load_timezone

# 2026-03-02 is a Monday; 2026-03-01 a Sunday.
MONDAY_0900 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
SUNDAY_MIDNIGHT = datetime(2026, 3, 1, 0, 0, tzinfo=UTC)


def test_ranges_steps_lists_and_names() -> None:
    schedule = CronSchedule.parse("*/15 9-17 * jan,jul mon-fri")
    monday_jan = datetime(2026, 1, 5, 9, 15, tzinfo=UTC)

    assert schedule.matches(monday_jan)
    assert not schedule.matches(monday_jan.replace(minute=10))
    assert not schedule.matches(monday_jan.replace(hour=18))
    # Saturday
    assert not schedule.matches(datetime(2026, 1, 10, 9, 15, tzinfo=UTC))
    assert not schedule.matches(MONDAY_0900.replace(minute=15))


def test_weekday_numbers_follow_crontab() -> None:
    assert is_due("0 9 * * 1", "UTC", MONDAY_0900)
    assert not is_due("0 9 * * 0", "UTC", MONDAY_0900)
    assert is_due("0 0 * * 0", "UTC", SUNDAY_MIDNIGHT)
    assert is_due("0 0 * * 7", "UTC", SUNDAY_MIDNIGHT)
    assert is_due("0 0 * * 0-2", "UTC", SUNDAY_MIDNIGHT)
    assert not is_due("0 0 * * 1-5", "UTC", SUNDAY_MIDNIGHT)


def test_any_second_within_the_fire_minute_matches() -> None:
    assert is_due("0 9 * * *", "UTC", MONDAY_0900.replace(second=42, microsecond=7))


def test_macros() -> None:
    assert is_due("@daily", "UTC", SUNDAY_MIDNIGHT)
    assert not is_due("@daily", "UTC", SUNDAY_MIDNIGHT.replace(minute=1))
    assert is_due("@hourly", "UTC", MONDAY_0900.replace(hour=13))
    assert is_due("@weekly", "UTC", SUNDAY_MIDNIGHT)


def test_schedule_is_evaluated_in_its_timezone() -> None:
    # 09:00 in Lagos (UTC+1) is 08:00 UTC.
    assert is_due("0 9 * * *", "Africa/Lagos", MONDAY_0900.replace(hour=8))
    assert not is_due("0 9 * * *", "Africa/Lagos", MONDAY_0900)


def test_day_fields_are_ored_when_both_restricted() -> None:
    monday_midnight = datetime(2026, 3, 2, 0, 0, tzinfo=UTC)
    assert is_due("0 0 15 * 1", "UTC", monday_midnight)
    assert not is_due("0 0 15 * *", "UTC", monday_midnight)
    assert is_due("0 0 2 * 5", "UTC", monday_midnight)


@pytest.mark.parametrize(
    "expression",
    [
        "",
        "* * * *",
        "60 * * * *",
        "* 24 * * *",
        "*/0 * * * *",
        "5-1 * * * *",
        "a * * * *",
        "* * * * 8",
        "* * * * 5-1",
    ],
)
def test_rejects_malformed_expressions(expression: str) -> None:
    with pytest.raises(ValueError):
        CronSchedule.parse(expression)


def test_load_timezone_rejects_unknown_zone() -> None:
    with pytest.raises(ValueError):
        load_timezone("Not/AZone")
    with pytest.raises(ValueError):
        CronSchedule.parse("* * * * *", "Not/AZone")
