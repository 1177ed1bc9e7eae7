"""Decide whether a recurring definition is due on a calendar date."""
from __future__ import annotations

from datetime import date, datetime, timezone

from app.api.schemas.planner import RecurrenceRule, RecurringTask


def utc_calendar_date(moment: datetime) -> date:
    """Truncate ``moment`` to its UTC calendar date; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def matches_recurrence(rule: RecurrenceRule, created_at: datetime, target: date) -> bool:
    """
    Both sides are compared as UTC calendar dates, so the time of day a
    definition was created never shifts which dates it lands on.
    """
    day_diff = (target - utc_calendar_date(created_at)).days
    if day_diff < 0:
        return False
    if rule.type == "daily":
        return day_diff % rule.interval == 0
    if target.isoweekday() not in (rule.weekdays or ()):
        return False
    return (day_diff // 7) % rule.interval == 0


def is_due(recurring: RecurringTask, target: date) -> bool:
    return not recurring.archived and matches_recurrence(recurring.recurrence, recurring.created_at, target)
