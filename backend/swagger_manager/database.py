"""
Swagger Manager Backend - Database Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A `Database` object owns one engine and its session factory. The app
       factory creates it (or receives one from tests) and stores it on
       `app.state.database`; the request dependency opens a session per request
       that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and by
       Alembic (for `Base.metadata`).

Connection Pooling (PostgreSQL):
    pool_size / max_overflow / pool_pre_ping come from settings.
    SQLite URLs (tests, local experiments) use SQLAlchemy's default pool.
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from swagger_manager.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and `Database.create_all`.
    """
    pass


class Database:
    """
    Owns the engine and session factory for one database.

    Lifecycle:
        1. Created by create_app() from settings (or injected by tests)
        2. Sessions opened per request through get_db_session()
        3. dispose() called on application shutdown
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: attributes stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a Database with pool options suited to the configured backend."""
        engine_kwargs: Dict[str, Any] = {
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return cls(settings.database_url, **engine_kwargs)

    async def create_all(self) -> None:
        """Create all tables known to Base.metadata (development and tests)."""
        # Models must be imported so their tables register with the metadata
        from swagger_manager.models import endpoint, project  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Execute SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the app's Database
        2. Yields it to the route handler
        3. On success: commits whatever the services left uncommitted
        4. On error: rolls back and re-raises for the global error handlers

    Services that regenerate artifacts commit earlier themselves; the final
    commit here is then a no-op.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
