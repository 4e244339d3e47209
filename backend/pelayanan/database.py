"""
Pelayanan Backend — Database Handle & Session Management
==========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependencies.
How:   A `Database` object owns one engine (connection pool) and one session
       factory. It is created once at application startup, stored on
       `app.state.database`, and handed to request handlers through
       dependency injection. Nothing here is initialised lazily on first
       request.
Who:   Created by the lifespan in main.py (or by tests); used by routes,
       services, and the admin scripts.

Connection Pooling Strategy (PostgreSQL):
    pool_size=10, max_overflow=5, pool_pre_ping, pool_recycle=3600.
    SQLite URLs (tests) fall back to SQLAlchemy's default pool.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from pelayanan.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by `create_tables()` and by
    Alembic autogenerate.
    """
    pass


def _engine_options(config: Settings) -> dict:
    options = {"echo": config.log_level == "DEBUG"}
    if not config.is_sqlite:
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


class Database:
    """
    Immutable handle bundling the engine and its session factory.

    Usage:
        database = Database.from_settings(settings)
        await database.connect()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, engine: AsyncEngine, config: Optional[Settings] = None):
        self.engine = engine
        self.config = config or default_settings
        # expire_on_commit=False: rows stay readable after their transaction commits
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        config = config or default_settings
        engine = create_async_engine(config.database_url, **_engine_options(config))
        return cls(engine, config)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Unit-of-work session: commits on success, rolls back on any error.

        Used wherever a write must be committed independently of the
        request-scoped session (status update, per-channel audit rows).
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self) -> None:
        """
        Verify connectivity, retrying transient failures.

        Retries `db_connect_retries` times with a fixed `db_connect_retry_wait`
        pause; the last error is re-raised so startup fails loudly.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.db_connect_retries),
            wait=wait_fixed(self.config.db_connect_retry_wait),
            retry=retry_if_exception_type((OSError, SQLAlchemyError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                logger.info(
                    "Connecting to database (attempt %d/%d)",
                    attempt.retry_state.attempt_number,
                    self.config.db_connect_retries,
                )
                await self.ping()
        logger.info("Database connection established")

    async def create_tables(self) -> None:
        """Idempotent table sync: creates missing tables, never alters or drops."""
        # Registers every model with Base.metadata
        import pelayanan.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables synchronized")

    async def drop_tables(self) -> None:
        import pelayanan.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("All tables dropped")

    async def dispose(self) -> None:
        """Closes all pooled connections."""
        await self.engine.dispose()


# ── FastAPI Dependencies ──────────────────────────────────────────────────

def get_database(request: Request) -> Database:
    """Returns the handle created at startup."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the startup-created factory
        2. Yields it to the route handler
        3. On success: commits; on error: rolls back and re-raises
        4. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
