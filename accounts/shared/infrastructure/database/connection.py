# 📄 File: accounts/shared/infrastructure/database/connection.py
#
# 🧭 Purpose (Layman Explanation):
# Opens the shared set of database connections the account store uses, checks that the
# database actually answers, and closes everything cleanly on shutdown.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy engine construction with connection pooling sized from settings,
# a connectivity check, the declarative Base for table mappings, and session factory
# creation. Failures surface as ConnectionError.
#
# 🔗 Dependencies:
# - sqlalchemy.ext.asyncio (async engine and sessions)
# - asyncpg (PostgreSQL async driver) / aiosqlite (local and test driver)
# - accounts/shared/config/settings.py (database configuration)
#
# 🔄 Connected Modules / Calls From:
# - Application startup (connect / dispose)
# - accounts.modules.user_management.infrastructure.database.models (Base)
# - Test fixtures (schema creation)

import logging
from typing import Any, Dict

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from accounts.shared.config.settings import Settings
from accounts.shared.core.exceptions import ConnectionError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all table mappings."""


def _build_engine_kwargs(settings: Settings) -> Dict[str, Any]:
    """Build SQLAlchemy engine parameters from settings."""
    url = make_url(settings.database_url)
    kwargs: Dict[str, Any] = {
        "echo": settings.DEBUG,
        "pool_pre_ping": True,  # Validate connections before use
    }

    if url.get_backend_name() == "sqlite":
        # aiosqlite runs on its own pool class; sizing does not apply
        return kwargs

    kwargs.update({
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    })
    if url.get_driver_name() == "asyncpg":
        kwargs["connect_args"] = {
            "server_settings": {
                "application_name": settings.APP_NAME,
                "jit": "off",
            },
            "command_timeout": 60,
        }
    return kwargs


def _register_connection_events(engine: AsyncEngine) -> None:
    """Register SQLAlchemy connection event listeners."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """SQLite only enforces foreign keys when asked to."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def connect(settings: Settings) -> AsyncEngine:
    """
    Create the pooled engine and verify the database answers.

    Args:
        settings: Application settings (URL and pool sizing)

    Returns:
        AsyncEngine: Ready-to-use engine

    Raises:
        ConnectionError: If the URL is invalid or the database is unreachable
    """
    try:
        engine = create_async_engine(settings.database_url, **_build_engine_kwargs(settings))
    except (SQLAlchemyError, ImportError, ValueError) as e:
        logger.error(f"Invalid database configuration: {type(e).__name__}")
        raise ConnectionError("Invalid database configuration", operation="connect") from e

    _register_connection_events(engine)

    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.scalar()
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        logger.error(f"Database connectivity check failed: {e}")
        raise ConnectionError(operation="connect") from e

    logger.info(
        f"Database connection pool initialized. "
        f"Min size: {settings.DB_POOL_MIN_SIZE}, max size: {settings.DB_POOL_MAX_SIZE}"
    )
    return engine


async def dispose(engine: AsyncEngine) -> None:
    """Close the engine and all pooled connections."""
    await engine.dispose()
    logger.info("Database connection pool closed")


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by repositories; one session per operation."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Keep objects accessible after commit
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create all mapped tables that do not exist yet.

    Intended for development and tests; production schemas are managed
    by migrations.
    """
    # Register the mappings with Base.metadata
    from accounts.modules.user_management.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    """Drop all mapped tables. Tests only."""
    from accounts.modules.user_management.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


__all__ = [
    "Base",
    "connect",
    "create_schema",
    "create_session_factory",
    "dispose",
    "drop_schema",
]
