from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone

import pytest

from app.api.schemas.planner import PlannerDay, PlannerTask, RecurrenceRule, RecurringTask, ScheduleWindow
from app.services.planner_expander import (
    expand_planner_day,
    expand_planner_week,
    virtual_task_id,
    week_bounds,
)

CREATED = datetime(2024, 1, 4, 12, 0, tzinfo=timezone.utc)  # a Thursday


def _weekly(recurring_id: str = "R1", **extra) -> RecurringTask:
    return RecurringTask(
        id=recurring_id,
        title="Weekly review",
        priority="high",
        note="Look back",
        recurrence=RecurrenceRule(type="weekly", weekdays=[4]),
        default_schedule=ScheduleWindow(start_min=540, end_min=600),
        created_at=CREATED,
        **extra,
    )


def test_due_definition_becomes_virtual_task() -> None:
    expanded = expand_planner_day(date(2024, 2, 1), PlannerDay(), [_weekly()])

    assert len(expanded.tasks) == 1
    task = expanded.tasks[0]
    assert task.id == virtual_task_id("R1", date(2024, 2, 1)) == "vrt_R1_2024-02-01"
    assert task.source_recurring_id == "R1"
    assert (task.title, task.priority, task.note) == ("Weekly review", "high", "Look back")
    assert (task.start_min, task.end_min) == (540, 600)
    assert task.completed is False
    assert expanded.generated_from_recurring is True


def test_tombstone_suppresses_only_that_date() -> None:
    recurring = [_weekly()]
    first = expand_planner_day(date(2024, 2, 1), PlannerDay(), recurring)
    saved = PlannerDay(tasks=[first.tasks[0].model_copy(update={"deleted": True})])

    again = expand_planner_day(date(2024, 2, 1), saved, recurring)
    next_week = expand_planner_day(date(2024, 2, 8), PlannerDay(), recurring)

    assert again.tasks == []
    assert [task.source_recurring_id for task in next_week.tasks] == ["R1"]


def test_persisted_instance_replaces_virtual_one() -> None:
    stored = PlannerTask(id="task_1", title="Weekly review (moved)", source_recurring_id="R1", completed=True)

    expanded = expand_planner_day(date(2024, 2, 1), PlannerDay(tasks=[stored]), [_weekly()])

    assert expanded.tasks == [stored]


def test_stored_tasks_come_before_virtual_ones() -> None:
    manual = PlannerTask(id="task_1", title="Write CV")
    hidden = PlannerTask(id="task_2", title="Dropped", deleted=True)

    expanded = expand_planner_day(date(2024, 2, 1), PlannerDay(tasks=[manual, hidden]), [_weekly()])

    assert [task.id for task in expanded.tasks] == ["task_1", "vrt_R1_2024-02-01"]


def test_archived_and_not_due_definitions_are_skipped() -> None:
    recurring = [_weekly("R1", archived=True), _weekly("R2")]

    assert expand_planner_day(date(2024, 2, 1), PlannerDay(), recurring).tasks[0].source_recurring_id == "R2"
    assert expand_planner_day(date(2024, 2, 2), PlannerDay(), recurring).tasks == []
    assert expand_planner_day(date(2024, 2, 2), PlannerDay(), recurring).generated_from_recurring is False


def test_week_is_monday_first_and_expanded_per_day() -> None:
    start, end = week_bounds(date(2024, 2, 4))  # a Sunday
    daily = RecurringTask(id="D1", title="Stretch", recurrence=RecurrenceRule(type="daily"), created_at=CREATED)
    days = {date(2024, 1, 31): PlannerDay(tasks=[PlannerTask(id="task_1", title="Dentist")])}

    columns = expand_planner_week(date(2024, 2, 4), days, [daily, _weekly()])

    assert (start, end) == (date(2024, 1, 29), date(2024, 2, 4))
    assert [column.label for column in columns] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert [column.date for column in columns][0] == date(2024, 1, 29)
    assert [len(column.tasks) for column in columns] == [1, 1, 2, 2, 1, 1, 1]
    assert columns[3].tasks[1].id == "vrt_R1_2024-02-01"


def _random_setup(rng):
    definitions = [
        RecurringTask(
            id=f"R{i}",
            title=f"Routine {i}",
            recurrence=(
                RecurrenceRule(type="daily", interval=rng.randint(1, 3))
                if rng.random() < 0.5
                else RecurrenceRule(type="weekly", weekdays=rng.sample(range(1, 8), rng.randint(1, 3)))
            ),
            created_at=CREATED,
            archived=rng.random() < 0.2,
        )
        for i in range(rng.randint(0, 5))
    ]
    sources = rng.sample([d.id for d in definitions], rng.randint(0, len(definitions)))
    tasks = [
        PlannerTask(id=f"task_{source}", title="Stored", source_recurring_id=source, deleted=rng.random() < 0.5)
        for source in sources
    ]
    tasks += [PlannerTask(id=f"task_manual_{i}", title="Manual") for i in range(rng.randint(0, 3))]
    return PlannerDay(tasks=tasks), definitions


@pytest.mark.parametrize("seed", range(30))
def test_expansion_is_idempotent_and_respects_tombstones(seed) -> None:
    rng = random.Random(seed)
    day, definitions = _random_setup(rng)
    target = date(2024, 2, 1) + timedelta(days=rng.randint(0, 30))

    first = expand_planner_day(target, day, definitions)
    second = expand_planner_day(target, day, definitions)

    assert first == second
    tombstoned = {task.source_recurring_id for task in day.tasks if task.deleted}
    visible_sources = [task.source_recurring_id for task in first.tasks if task.source_recurring_id]
    assert not tombstoned & set(visible_sources)
    assert len(visible_sources) == len(set(visible_sources))
    assert all(not task.deleted for task in first.tasks)
