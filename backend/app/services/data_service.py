"""Whole-data-set operations: first-run seeding, hierarchy repair, import and export."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from app.api.schemas.hierarchy import Goal, Project, Topic
from app.api.schemas.settings import TimerSettings
from app.api.schemas.transfer import ExportPayload
from app.core.config import settings
from app.core.errors import SchemaError
from app.services.collections import (
    GOALS,
    HIERARCHY_KEYS,
    PLANNER_PREFIX,
    PROJECTS,
    RECURRING,
    SETTINGS_KEY,
    TEMPLATES,
    TOPICS,
    dump_hierarchy,
    load_hierarchy,
    load_planner_day,
    load_settings,
    planner_date,
    planner_key,
)
from app.services.document_store import DocumentStore, DocumentTransaction
from app.services.hierarchy_migrator import HierarchyData, MigrationReport, migrate_hierarchy

logger = logging.getLogger(__name__)

SEED_GOAL_ID = "g-career"
SEED_PROJECT_ID = "p-ai-job-seekers"


@dataclass(frozen=True)
class ImportResult:
    payload: ExportPayload
    report: MigrationReport


def seed_documents(now: datetime) -> Dict[str, List[dict]]:
    """Starter hierarchy written when a collection has never been stored."""
    goal = Goal(id=SEED_GOAL_ID, name="Career", created_at=now)
    project = Project(
        id=SEED_PROJECT_ID,
        goal_id=goal.id,
        name="AI for Job Seekers",
        color="#38bdf8",
        created_at=now,
    )
    topics = [
        Topic(id="topic-cv", project_id=project.id, name="CV", color="#f97316", created_at=now),
        Topic(id="topic-linkedin", project_id=project.id, name="LinkedIn", color="#22c55e", created_at=now),
        Topic(id="topic-interviews", project_id=project.id, name="Interviews", color="#3b82f6", created_at=now),
    ]
    return {
        GOALS.key: GOALS.dump([goal]),
        PROJECTS.key: PROJECTS.dump([project]),
        TOPICS.key: TOPICS.dump(topics),
    }


def initialize_data(store: DocumentStore, *, now: datetime) -> MigrationReport:
    """Seed missing documents, then heal the stored hierarchy."""

    def action(tx: DocumentTransaction) -> MigrationReport:
        if not tx.has(SETTINGS_KEY):
            tx.put(SETTINGS_KEY, TimerSettings().model_dump(mode="json"))
        if settings.seed_on_first_run:
            for key, payload in seed_documents(now).items():
                if not tx.has(key):
                    logger.info("Seeding '%s' with starter data", key)
                    tx.put(key, payload)
        return _repair(tx, now)

    report = store.write(action)
    logger.info("Data initialized (repairs=%s)", report.as_dict() if report.changed else "none")
    return report


def repair_hierarchy(store: DocumentStore, *, now: datetime) -> MigrationReport:
    """Run the hierarchy repair pass and persist the result if anything changed."""
    return store.write(lambda tx: _repair(tx, now))


def _repair(tx: DocumentTransaction, now: datetime) -> MigrationReport:
    data = load_hierarchy({key: tx.get(key) for key in HIERARCHY_KEYS})
    result = migrate_hierarchy(data, now=now)
    if result.report.changed:
        for key, payload in dump_hierarchy(result.data).items():
            tx.put(key, payload)
    return result.report


def export_all(store: DocumentStore) -> ExportPayload:
    documents = store.snapshot([SETTINGS_KEY, *HIERARCHY_KEYS, RECURRING.key, TEMPLATES.key])
    planner_documents = store.snapshot_prefix(PLANNER_PREFIX)
    hierarchy = load_hierarchy(documents)
    return ExportPayload(
        settings=load_settings(documents.get(SETTINGS_KEY)),
        goals=hierarchy.goals,
        projects=hierarchy.projects,
        topics=hierarchy.topics,
        sessions=hierarchy.sessions,
        planner={planner_date(key): load_planner_day(payload, key) for key, payload in planner_documents.items()},
        recurring=RECURRING.load_from(documents),
        templates=TEMPLATES.load_from(documents),
    )


def parse_import_payload(raw: Any) -> ExportPayload:
    try:
        return ExportPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise SchemaError("Invalid import payload") from exc


def import_all(store: DocumentStore, raw: Any, *, now: datetime) -> ImportResult:
    """
    Replace the entire data set with ``raw``.

    The payload is validated up front and the hierarchy repaired before
    anything is written, so a stored data set is always consistent. Planner
    days absent from the payload are removed.
    """
    payload = parse_import_payload(raw)
    migrated = migrate_hierarchy(
        HierarchyData(
            goals=payload.goals,
            projects=payload.projects,
            topics=payload.topics,
            sessions=payload.sessions,
        ),
        now=now,
    )
    healed = payload.model_copy(
        update={
            "goals": migrated.data.goals,
            "projects": migrated.data.projects,
            "topics": migrated.data.topics,
            "sessions": migrated.data.sessions,
        }
    )

    def action(tx: DocumentTransaction) -> None:
        tx.put(SETTINGS_KEY, healed.settings.model_dump(mode="json"))
        for key, documents in dump_hierarchy(migrated.data).items():
            tx.put(key, documents)
        tx.put(RECURRING.key, RECURRING.dump(healed.recurring))
        tx.put(TEMPLATES.key, TEMPLATES.dump(healed.templates))
        incoming = {planner_key(day): planner for day, planner in healed.planner.items()}
        for key in tx.keys(PLANNER_PREFIX):
            if key not in incoming:
                tx.delete(key)
        for key, planner in incoming.items():
            tx.put(key, planner.model_dump(mode="json"))

    store.write(action)
    logger.info(
        "Imported data set (goals=%d projects=%d topics=%d sessions=%d planner_days=%d repairs=%s)",
        len(healed.goals),
        len(healed.projects),
        len(healed.topics),
        len(healed.sessions),
        len(healed.planner),
        migrated.report.as_dict() if migrated.report.changed else "none",
    )
    return ImportResult(payload=healed, report=migrated.report)


def load_timer_settings(store: DocumentStore) -> TimerSettings:
    return load_settings(store.read(SETTINGS_KEY))


def save_timer_settings(store: DocumentStore, timer_settings: TimerSettings) -> TimerSettings:
    def action(tx: DocumentTransaction) -> TimerSettings:
        tx.put(SETTINGS_KEY, timer_settings.model_dump(mode="json"))
        return timer_settings

    return store.write(action)
