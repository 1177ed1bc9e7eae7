from __future__ import annotations

import os
from datetime import datetime, timezone

# Tests seed explicitly; keep startup from touching the configured database.
os.environ.setdefault("BOOTSTRAP_ON_STARTUP", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.deps import get_store
from app.db.session import build_session_factory
from app.main import app
from app.services.data_service import initialize_data
from app.services.document_store import DocumentStore

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_store() -> DocumentStore:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return DocumentStore(build_session_factory(engine), write_timeout=5)


@pytest.fixture()
def store():
    document_store = make_store()
    yield document_store
    document_store.close()


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def seeded_client(client, store):
    """Client over a store holding the starter data and the Unassigned placeholders."""
    initialize_data(store, now=NOW)
    return client
