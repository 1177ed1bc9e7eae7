"""Day planner, recurring definitions and time-blocking templates."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import List, Tuple

from app.api.schemas.common import duplicate_ids
from app.api.schemas.planner import PlannerDay, RecurringTask, TimeBlockingTemplate
from app.core.errors import NotFoundError, ValidationError
from app.services.collections import RECURRING, TEMPLATES, load_planner_day, planner_key
from app.services.document_store import DocumentStore, DocumentTransaction
from app.services.planner_expander import WeekColumn, expand_planner_day, expand_planner_week, week_bounds
from app.services.time_blocking import apply_template, template_from_tasks

logger = logging.getLogger(__name__)


def get_planner_day(store: DocumentStore, target: date) -> PlannerDay:
    key = planner_key(target)
    documents = store.snapshot([key, RECURRING.key])
    return expand_planner_day(
        target,
        load_planner_day(documents.get(key), key),
        RECURRING.load_from(documents),
    )


def get_planner_week(store: DocumentStore, anchor: date) -> Tuple[date, date, List[WeekColumn]]:
    start, end = week_bounds(anchor)
    keys = {start + timedelta(days=offset): planner_key(start + timedelta(days=offset)) for offset in range(7)}
    documents = store.snapshot([*keys.values(), RECURRING.key])
    days = {day: load_planner_day(documents[key], key) for day, key in keys.items() if key in documents}
    return start, end, expand_planner_week(anchor, days, RECURRING.load_from(documents))


def save_planner_day(store: DocumentStore, target: date, day: PlannerDay) -> PlannerDay:
    """Persist exactly the given tasks (tombstones included) for ``target``."""
    key = planner_key(target)

    def action(tx: DocumentTransaction) -> PlannerDay:
        tx.put(key, day.model_dump(mode="json"))
        return expand_planner_day(target, day, RECURRING.load(tx.get(RECURRING.key)))

    saved = store.write(action)
    logger.info("Planner day %s saved with %d stored tasks", target, len(day.tasks))
    return saved


def list_recurring(store: DocumentStore) -> List[RecurringTask]:
    return RECURRING.load(store.read(RECURRING.key))


def replace_recurring(store: DocumentStore, definitions: List[RecurringTask]) -> List[RecurringTask]:
    _reject_duplicates(definitions, "recurring task")

    def action(tx: DocumentTransaction) -> List[RecurringTask]:
        tx.put(RECURRING.key, RECURRING.dump(definitions))
        return definitions

    return store.write(action)


def list_templates(store: DocumentStore) -> List[TimeBlockingTemplate]:
    return TEMPLATES.load(store.read(TEMPLATES.key))


def replace_templates(store: DocumentStore, templates: List[TimeBlockingTemplate]) -> List[TimeBlockingTemplate]:
    _reject_duplicates(templates, "template")

    def action(tx: DocumentTransaction) -> List[TimeBlockingTemplate]:
        tx.put(TEMPLATES.key, TEMPLATES.dump(templates))
        return templates

    return store.write(action)


def create_template_from_day(store: DocumentStore, target: date, name: str, *, now: datetime) -> TimeBlockingTemplate:
    key = planner_key(target)

    def action(tx: DocumentTransaction) -> TimeBlockingTemplate:
        expanded = expand_planner_day(
            target,
            load_planner_day(tx.get(key), key),
            RECURRING.load(tx.get(RECURRING.key)),
        )
        template = template_from_tasks(name, expanded.tasks, created_at=now)
        templates = TEMPLATES.load(tx.get(TEMPLATES.key))
        tx.put(TEMPLATES.key, TEMPLATES.dump([*templates, template]))
        return template

    template = store.write(action)
    logger.info("Template %s captured from %s with %d blocks", template.id, target, len(template.blocks))
    return template


def apply_template_to_day(store: DocumentStore, target: date, template_id: str) -> PlannerDay:
    key = planner_key(target)

    def action(tx: DocumentTransaction) -> PlannerDay:
        template = next((t for t in TEMPLATES.load(tx.get(TEMPLATES.key)) if t.id == template_id), None)
        if template is None:
            raise NotFoundError("Template not found")
        updated = apply_template(load_planner_day(tx.get(key), key), template)
        tx.put(key, updated.model_dump(mode="json"))
        return expand_planner_day(target, updated, RECURRING.load(tx.get(RECURRING.key)))

    return store.write(action)


def _reject_duplicates(items, label: str) -> None:
    duplicates = duplicate_ids(items)
    if duplicates:
        raise ValidationError(f"duplicate {label} ids: {', '.join(duplicates)}")
