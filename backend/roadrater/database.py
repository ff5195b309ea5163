"""
RoadRater Backend — Persistence Gateway
=========================================

What:  An explicitly constructed gateway over a pooled async SQLAlchemy engine.
How:   `Database` runs single parameterized statements, each on its own
       short-lived connection, and exposes `transaction()` for all-or-nothing
       multi-statement work. Driver errors are translated into the
       application's error taxonomy at the point of the query.
Who:   Created by the application factory, stored on `app.state.database`
       and injected into services through `dependencies.get_database`.

Connection discipline:
    Every connection is acquired through `engine.begin()`, an async context
    manager that commits on a clean exit, rolls back when the block raises,
    and always returns the connection to the pool.

Pooling (PostgreSQL):
    pool_size / max_overflow come from settings; pool_pre_ping validates
    connections before use; pool_recycle=3600 retires long-lived ones.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable

from roadrater.config import Settings
from roadrater.exceptions import ConflictError, DatabaseError, RoadRaterError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy table definitions."""
    pass


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: SQLAlchemyError) -> bool:
    """
    True only for duplicate-key errors.

    PostgreSQL reports SQLSTATE 23505 (the asyncpg adapter exposes it as
    `sqlstate`); SQLite has no SQLSTATE, only the message text. Foreign key,
    CHECK and NOT NULL violations are integrity errors too but return False.
    """
    if not isinstance(exc, IntegrityError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


def _translate(exc: SQLAlchemyError, statement: Optional[Executable] = None) -> RoadRaterError:
    """Map a SQLAlchemy failure onto the error taxonomy."""
    context: Dict[str, Any] = {"original_error": type(exc).__name__}
    if statement is not None:
        context["statement"] = str(statement).split("\n", 1)[0]
    if is_unique_violation(exc):
        return ConflictError(message="Conflicting record", context=context)
    context["detail"] = str(getattr(exc, "orig", None) or exc)
    return DatabaseError(context=context)


class Transaction:
    """
    Statement executor bound to one open connection.

    Obtained from `Database.transaction()`; all statements run through it
    commit or roll back together.
    """

    def __init__(self, connection: AsyncConnection):
        self._connection = connection

    async def _execute(self, statement: Executable):
        start = time.perf_counter()
        try:
            result = await self._connection.execute(statement)
        except SQLAlchemyError as exc:
            logger.error("Database query error: %s", type(exc).__name__)
            raise _translate(exc, statement) from exc
        logger.debug(
            "Executed query in %.1fms",
            (time.perf_counter() - start) * 1000,
            extra={"statement": str(statement)},
        )
        return result

    async def fetch_one(self, statement: Executable) -> Optional[Dict[str, Any]]:
        """First row as a dict, or None."""
        result = await self._execute(statement)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def fetch_all(self, statement: Executable) -> List[Dict[str, Any]]:
        result = await self._execute(statement)
        rows = [dict(row) for row in result.mappings().all()]
        logger.debug("Query returned %d rows", len(rows))
        return rows

    async def fetch_value(self, statement: Executable) -> Any:
        """First column of the first row, or None."""
        result = await self._execute(statement)
        return result.scalar()


class Database:
    """
    Persistence gateway.

    Usage:
        db = Database(engine)
        row = await db.fetch_one(select(RoadSegment).where(RoadSegment.id == 8))

        async with db.transaction() as tx:
            await tx.fetch_one(...)
            await tx.fetch_one(...)

    Raises (from every method):
        ConflictError: duplicate key (unique constraint) violation
        DatabaseError: any other database-layer failure
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """
        Open an all-or-nothing unit of work.

        Commits when the block exits cleanly. Any exception raised inside the
        block (application errors included) rolls back every statement and
        propagates unchanged.
        """
        try:
            async with self.engine.begin() as connection:
                yield Transaction(connection)
        except SQLAlchemyError as exc:
            # Failures raised by begin/commit themselves, outside any statement.
            logger.error("Transaction failed: %s", type(exc).__name__)
            raise _translate(exc) from exc

    async def fetch_one(self, statement: Executable) -> Optional[Dict[str, Any]]:
        async with self.transaction() as tx:
            return await tx.fetch_one(statement)

    async def fetch_all(self, statement: Executable) -> List[Dict[str, Any]]:
        async with self.transaction() as tx:
            return await tx.fetch_all(statement)

    async def fetch_value(self, statement: Executable) -> Any:
        async with self.transaction() as tx:
            return await tx.fetch_value(statement)

    async def create_schema(self) -> None:
        """Create any missing tables. Used for local bootstrap and tests."""
        # Registers every table on Base.metadata.
        import roadrater.models  # noqa: F401

        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection. Called on application shutdown."""
        await self.engine.dispose()


def create_database(settings: Settings) -> Database:
    """
    Build the gateway for the configured database URL.

    No connection is opened here; the pool connects lazily on first use.
    """
    url = settings.sqlalchemy_url
    options: Dict[str, Any] = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    # SQLite (tests, local runs) picks its own pool class.
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return Database(create_async_engine(url, **options))
