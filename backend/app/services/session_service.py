"""Session history: filtered listing and hierarchy-checked writes."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from app.api.schemas.hierarchy import SessionCreateRequest, SessionRecord, SessionType, SessionUpdateRequest
from app.core.errors import NotFoundError
from app.services.collections import PROJECTS, SESSIONS, TOPICS
from app.services.document_store import DocumentStore, DocumentTransaction
from app.services.session_hierarchy import HierarchyRequest, resolve_session_hierarchy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionFilters:
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    type: Optional[SessionType] = None
    topic_id: Optional[str] = None
    project_id: Optional[str] = None
    goal_id: Optional[str] = None

    def matches(self, session: SessionRecord) -> bool:
        start = _as_utc(session.start_time)
        if self.start_from and start < _as_utc(self.start_from):
            return False
        if self.start_to and start > _as_utc(self.start_to):
            return False
        if self.type and session.type != self.type:
            return False
        if self.topic_id and session.topic_id != self.topic_id:
            return False
        if self.project_id and session.project_id != self.project_id:
            return False
        if self.goal_id and session.goal_id != self.goal_id:
            return False
        return True


def list_sessions(store: DocumentStore, filters: SessionFilters | None = None) -> List[SessionRecord]:
    sessions = SESSIONS.load(store.read(SESSIONS.key))
    if filters is None:
        return sessions
    return [session for session in sessions if filters.matches(session)]


def create_session(store: DocumentStore, payload: SessionCreateRequest, *, now: datetime) -> SessionRecord:
    def action(tx: DocumentTransaction) -> SessionRecord:
        resolved = _resolve(
            tx,
            HierarchyRequest(
                type=payload.type,
                topic_id=payload.topic_id,
                project_id=payload.project_id,
                goal_id=payload.goal_id,
                topic_name=payload.topic_name,
            ),
        )
        record = SessionRecord(
            id=f"s_{uuid4()}",
            created_at=now,
            **{**payload.model_dump(), **resolved.as_update()},
        )
        sessions = SESSIONS.load(tx.get(SESSIONS.key))
        tx.put(SESSIONS.key, SESSIONS.dump([*sessions, record]))
        return record

    created = store.write(action)
    logger.info("Session %s recorded (type=%s topic=%s)", created.id, created.type, created.topic_id)
    return created


def update_session(store: DocumentStore, session_id: str, payload: SessionUpdateRequest) -> SessionRecord:
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("type") is None:
        changes.pop("type", None)

    def action(tx: DocumentTransaction) -> SessionRecord:
        sessions = SESSIONS.load(tx.get(SESSIONS.key))
        index = next((i for i, session in enumerate(sessions) if session.id == session_id), None)
        if index is None:
            raise NotFoundError("Session not found")
        merged = {**sessions[index].model_dump(), **changes}
        resolved = _resolve(
            tx,
            HierarchyRequest(
                type=merged["type"],
                topic_id=merged.get("topic_id"),
                project_id=merged.get("project_id"),
                goal_id=merged.get("goal_id"),
                topic_name=merged.get("topic_name"),
            ),
        )
        sessions[index] = SessionRecord.model_validate({**merged, **resolved.as_update()})
        tx.put(SESSIONS.key, SESSIONS.dump(sessions))
        return sessions[index]

    return store.write(action)


def delete_session(store: DocumentStore, session_id: str) -> bool:
    """Remove a session; deleting an unknown id is a no-op."""

    def action(tx: DocumentTransaction) -> bool:
        sessions = SESSIONS.load(tx.get(SESSIONS.key))
        remaining = [session for session in sessions if session.id != session_id]
        if len(remaining) == len(sessions):
            return False
        tx.put(SESSIONS.key, SESSIONS.dump(remaining))
        return True

    removed = store.write(action)
    if removed:
        logger.info("Session %s deleted", session_id)
    return removed


def _resolve(tx: DocumentTransaction, request: HierarchyRequest):
    return resolve_session_hierarchy(
        request,
        TOPICS.load(tx.get(TOPICS.key)),
        PROJECTS.load(tx.get(PROJECTS.key)),
    )


def _as_utc(moment: datetime) -> datetime:
    """Naive timestamps are taken as UTC so mixed inputs stay comparable."""
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment
