"""
Database Configuration and Session Management

Provides async SQLAlchemy engine and session factory.
PostgreSQL (asyncpg) is the production target; SQLite (aiosqlite) is
supported for local use and tests.
"""

import ssl
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from helpdesk.config import Settings, get_settings
from helpdesk.models.orm.base import Base


_SSL_VERIFY_MODES = {
    "require": ssl.CERT_NONE,
    "verify-ca": ssl.CERT_REQUIRED,
    "verify-full": ssl.CERT_REQUIRED,
}


def _asyncpg_ssl_args(url: str) -> tuple[str, dict]:
    """
    Move a libpq-style ``sslmode`` query parameter into asyncpg connect args.

    asyncpg rejects ``sslmode`` in the URL, so it is stripped and turned
    into an SSL context (or the ``"prefer"`` flag).

    Args:
        url: PostgreSQL database URL

    Returns:
        Tuple of (URL without sslmode, connect_args)
    """
    parsed = make_url(url)
    mode = parsed.query.get("sslmode")
    if mode is None:
        return url, {}
    if isinstance(mode, tuple):
        mode = mode[0]

    stripped = parsed.difference_update_query(["sslmode"]).render_as_string(hide_password=False)
    if mode == "prefer":
        return stripped, {"ssl": "prefer"}
    if mode not in _SSL_VERIFY_MODES:
        return stripped, {}

    context = ssl.create_default_context()
    # Only verify-full checks the host name
    context.check_hostname = mode == "verify-full"
    context.verify_mode = _SSL_VERIFY_MODES[mode]
    return stripped, {"ssl": context}


def _engine_options(settings: Settings) -> tuple[str, dict[str, Any]]:
    """
    Build the URL and engine keyword arguments for the configured backend.

    Both backends get a bounded timeout on connect and on each statement.
    """
    timeout = settings.database_timeout_seconds

    if settings.is_sqlite:
        return settings.database_url, {
            "poolclass": NullPool,
            "connect_args": {"timeout": timeout},
        }

    db_url, connect_args = _asyncpg_ssl_args(settings.database_url)
    connect_args["timeout"] = timeout
    connect_args["command_timeout"] = timeout
    return db_url, {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_timeout": timeout,
        "pool_pre_ping": True,
        "connect_args": connect_args,
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Global engine and session factory (initialized on startup)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """
    Get or create the async SQLAlchemy engine.

    Args:
        settings: Optional settings override (for testing)

    Returns:
        AsyncEngine instance
    """
    global _engine

    if _engine is None:
        if settings is None:
            settings = get_settings()

        db_url, options = _engine_options(settings)
        _engine = create_async_engine(db_url, echo=settings.debug, **options)

        if settings.is_sqlite:
            event.listen(_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return _engine


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Get or create the async session factory.

    Args:
        settings: Optional settings override (for testing)

    Returns:
        async_sessionmaker instance
    """
    global _async_session_factory

    if _async_session_factory is None:
        engine = get_engine(settings)
        _async_session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions in FastAPI routes.

    Yields:
        AsyncSession committed after the request, rolled back on error
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for getting database sessions outside of FastAPI routes.

    Used by admission control (which commits independently of the request
    transaction), the CLI, and tests.

    Usage:
        async with get_db_context() as db:
            result = await db.execute(select(User))
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Initialize database connection and verify connectivity.

    Called on application startup.
    """
    engine = get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(lambda _: None)


async def create_all() -> None:
    """Create every table that does not exist yet."""
    import helpdesk.models.orm  # noqa: F401 - registers all tables on Base.metadata

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all() -> None:
    """Drop every helpdesk table and the data in it."""
    import helpdesk.models.orm  # noqa: F401 - registers all tables on Base.metadata

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db() -> None:
    """
    Close database connections.

    Called on application shutdown.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None


def reset_db_state() -> None:
    """
    Reset database state (for testing).

    Clears the engine and session factory so they are recreated
    with fresh settings on next access.
    """
    global _engine, _async_session_factory
    _engine = None
    _async_session_factory = None
