"""Shared test fixtures."""

import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STRICT_RESULT_VALIDATION"] = "false"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.dependencies import get_now
from app.main import app

FIXED_NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    """Test client on a fresh in-memory database with a pinned clock."""
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    yield TestClient(app)
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(client):
    """Direct session on the same database the client uses."""
    session = SessionLocal()
    yield session
    session.close()
