"""Merge a stored planner day with virtual instances of due recurring definitions."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Mapping

from app.api.schemas.planner import PlannerDay, PlannerTask, RecurringTask
from app.services.recurrence import is_due

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class WeekColumn:
    date: date
    label: str
    tasks: List[PlannerTask]


def virtual_task_id(recurring_id: str, target: date) -> str:
    return f"vrt_{recurring_id}_{target.isoformat()}"


def build_virtual_task(recurring: RecurringTask, target: date) -> PlannerTask:
    schedule = recurring.default_schedule
    return PlannerTask(
        id=virtual_task_id(recurring.id, target),
        title=recurring.title,
        priority=recurring.priority,
        note=recurring.note,
        completed=False,
        start_min=schedule.start_min if schedule else None,
        end_min=schedule.end_min if schedule else None,
        source_recurring_id=recurring.id,
    )


def expand_planner_day(target: date, day: PlannerDay, recurring: Iterable[RecurringTask]) -> PlannerDay:
    """
    Return the visible task list for ``target``.

    Stored tasks come first (tombstones dropped), followed by one virtual task
    for every active definition due that day that has no stored instance yet.
    A tombstoned instance suppresses its definition for this date only.
    Nothing is written; callers persist a virtual task (keeping its
    ``source_recurring_id``) once the user acts on it.
    """
    present = {task.source_recurring_id for task in day.tasks if task.source_recurring_id}
    suppressed = {task.source_recurring_id for task in day.tasks if task.deleted and task.source_recurring_id}

    virtual = [
        build_virtual_task(definition, target)
        for definition in recurring
        if definition.id not in present and definition.id not in suppressed and is_due(definition, target)
    ]
    visible = [task for task in day.tasks if not task.deleted]
    return PlannerDay(
        tasks=visible + virtual,
        generated_from_recurring=day.generated_from_recurring or bool(virtual),
    )


def week_bounds(anchor: date) -> tuple[date, date]:
    """Monday-first week containing ``anchor``."""
    start = anchor - timedelta(days=anchor.weekday())
    return start, start + timedelta(days=6)


def expand_planner_week(
    anchor: date,
    days: Mapping[date, PlannerDay],
    recurring: Iterable[RecurringTask],
) -> List[WeekColumn]:
    definitions = list(recurring)
    start, _ = week_bounds(anchor)
    columns: List[WeekColumn] = []
    for offset in range(7):
        current = start + timedelta(days=offset)
        expanded = expand_planner_day(current, days.get(current) or PlannerDay(), definitions)
        columns.append(WeekColumn(date=current, label=WEEKDAY_LABELS[offset], tasks=expanded.tasks))
    return columns
