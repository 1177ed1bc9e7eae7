"""Convert between time-blocking templates and planner days."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable
from uuid import uuid4

from app.api.schemas.planner import PlannerDay, PlannerTask, TemplateBlock, TimeBlockingTemplate


def new_task_id() -> str:
    return f"task_{uuid4()}"


def new_template_id() -> str:
    return f"tpl_{uuid4()}"


def apply_template(
    day: PlannerDay,
    template: TimeBlockingTemplate,
    *,
    id_factory: Callable[[], str] = new_task_id,
) -> PlannerDay:
    """Append one fresh concrete task per template block to ``day``."""
    added = [
        PlannerTask(
            id=id_factory(),
            title=block.title,
            priority=block.priority,
            start_min=block.start_min,
            end_min=block.end_min,
        )
        for block in template.blocks
    ]
    return day.model_copy(update={"tasks": [*day.tasks, *added]})


def template_from_tasks(
    name: str,
    tasks: Iterable[PlannerTask],
    *,
    created_at: datetime,
    template_id: str | None = None,
) -> TimeBlockingTemplate:
    """Capture the scheduled, visible tasks of a day as a reusable template."""
    blocks = [
        TemplateBlock(title=task.title, start_min=task.start_min, end_min=task.end_min, priority=task.priority)
        for task in tasks
        if not task.deleted and task.start_min is not None and task.end_min is not None
    ]
    blocks.sort(key=lambda block: (block.start_min, block.end_min))
    return TimeBlockingTemplate(
        id=template_id or new_template_id(),
        name=name,
        blocks=blocks,
        created_at=created_at,
    )
