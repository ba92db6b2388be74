"""
Portfolio API — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── temp_storage:   Upload directory under tmp_path, patched into settings
    ├── database:       Database handle backed by mongomock-motor (no server needed)
    ├── clock:          Deterministic clock installed on every service
    ├── sample_png:     1 KB of bytes starting with the PNG signature
    ├── mock_db:        MagicMock database for driver-failure paths
    └── test_client:    HTTPX AsyncClient talking to create_app(database=...)
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

# Must be set before the application is imported
os.environ["DATABASE_URL"] = "mongodb://localhost:27017/portfolio_test"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="portfolio_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from portfolio_api.config import settings
from portfolio_api.database import Database
from portfolio_api.services.feedback_service import feedback_service
from portfolio_api.services.hire_request_service import hire_request_service
from portfolio_api.services.project_service import project_service


class StepClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def temp_storage(tmp_path, monkeypatch):
    """Fresh upload directory per test, wired into settings.storage_root."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    monkeypatch.setattr(settings, "storage_root", str(storage_dir))
    return storage_dir


@pytest_asyncio.fixture
async def database():
    """In-memory MongoDB with the same indexes the application creates at startup."""
    db = Database(client=AsyncMongoMockClient(), name="portfolio_test")
    await db.ensure_indexes()
    return db


@pytest.fixture
def clock(monkeypatch):
    step_clock = StepClock()
    for service in (project_service, feedback_service, hire_request_service):
        monkeypatch.setattr(service, "clock", step_clock)
    return step_clock


@pytest.fixture
def sample_png():
    """PNG signature padded to 1 KB; content is never decoded, only its declared type matters."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 1016


@pytest.fixture
def mock_db():
    """Database stand-in whose collections are MagicMocks configured per test."""
    db = MagicMock()
    db.projects = MagicMock()
    db.feedback = MagicMock()
    db.hire_requests = MagicMock()
    return db


@pytest_asyncio.fixture
async def test_client(database, temp_storage, clock):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not run the lifespan, so the database fixture has
    already created the indexes.
    """
    from portfolio_api.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
