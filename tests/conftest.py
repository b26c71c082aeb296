"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of taskquest.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskquest.config import TaskQuestConfig  # noqa: E402
from taskquest.database.models import Base  # noqa: E402
from taskquest.services.store import SqlAlchemyStore  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all TaskQuest tables.

    Uses StaticPool so every thread shares the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def store(db_engine: Engine) -> SqlAlchemyStore:
    return SqlAlchemyStore(db_engine)


@pytest.fixture
def config() -> TaskQuestConfig:
    return TaskQuestConfig()


@pytest.fixture
def client(db_engine: Engine, config: TaskQuestConfig):
    """FastAPI TestClient wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from taskquest.api.deps import get_config, get_engine
    from taskquest.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
