"""
Database Connection Module
Handles the local SQLite order store using the SQLAlchemy async engine (aiosqlite).
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from orderpad.core.config import get_settings

logger = logging.getLogger(__name__)

# SQL name of the Unicode-aware lower() registered on every SQLite connection
UNICODE_LOWER = "unicode_lower"


def _unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII
    dbapi_connection.create_function(UNICODE_LOWER, 1, _unicode_lower, deterministic=True)


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """
    Create an async engine for the given URL (defaults to settings.database_url).

    Creating the engine does not touch the disk; the database file is only
    opened on first connect. SQLite connections get ``unicode_lower()``.
    """
    settings = get_settings()
    bind = create_async_engine(
        url or settings.database_url,
        echo=settings.database_echo if echo is None else echo,
    )
    if bind.dialect.name == "sqlite":
        event.listen(bind.sync_engine, "connect", _register_sqlite_functions)
    return bind


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for an engine."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


def ensure_database_directory(bind: AsyncEngine) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = bind.url
    if not url.get_backend_name().startswith("sqlite"):
        return
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    parent = Path(database).parent
    if not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created database directory: {parent}")


async def ping(bind: AsyncEngine) -> bool:
    """Run a trivial statement to check that the database answers."""
    async with bind.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


# Shared engine - one local database per process
engine = build_engine()


# Base class for all our models
class Base(DeclarativeBase):
    pass
