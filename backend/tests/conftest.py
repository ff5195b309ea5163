"""
RoadRater Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_database:   AsyncMock gateway; `.tx` is the transaction executor
    ├── app:             create_app() wired to mock_database
    ├── test_client:     HTTPX AsyncClient over ASGITransport
    ├── auth_header:     factory for `Authorization: Bearer <token>` headers
    ├── sqlite_database: real gateway over in-memory SQLite with the schema
    └── sqlite_client:   HTTP client for an app backed by sqlite_database
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any roadrater imports.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-value"
os.environ["CORS_ORIGIN"] = "http://localhost:3000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from roadrater.config import get_settings
from roadrater.database import Database
from roadrater.security import create_access_token

TEST_SECRET = "test-secret-value"


@pytest.fixture
def mock_database():
    """
    A gateway double with no real database behind it.

    Usage:
        mock_database.fetch_one.return_value = {"id": 8, "name": "Main St"}
        mock_database.tx.fetch_one.side_effect = [segment_row, rating_row]
        mock_database.transaction.assert_not_called()
    """
    tx = MagicMock()
    tx.fetch_one = AsyncMock()
    tx.fetch_all = AsyncMock(return_value=[])
    tx.fetch_value = AsyncMock()

    @asynccontextmanager
    async def transaction():
        yield tx

    db = MagicMock()
    db.fetch_one = AsyncMock()
    db.fetch_all = AsyncMock(return_value=[])
    db.fetch_value = AsyncMock()
    db.dispose = AsyncMock()
    db.transaction = MagicMock(side_effect=transaction)
    db.tx = tx
    return db


@pytest.fixture
def app(mock_database):
    from roadrater.main import create_app
    return create_app(settings=get_settings(), database=mock_database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client talking straight to the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_header():
    """Factory: auth_header(77) → {"Authorization": "Bearer <token for user 77>"}."""
    def _make(user_id: int = 77) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, TEST_SECRET)}"}
    return _make


@pytest_asyncio.fixture
async def sqlite_database():
    """
    The real persistence gateway over a private in-memory SQLite database.

    StaticPool keeps a single connection so every statement sees the same
    in-memory database. Foreign keys are enforced, as on PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    database = Database(engine)
    await database.create_schema()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def sqlite_client(sqlite_database):
    """HTTP client for an app backed by the SQLite gateway."""
    from roadrater.main import create_app

    app = create_app(settings=get_settings(), database=sqlite_database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
