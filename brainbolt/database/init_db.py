"""
Database initialization and connection management.

This module provides:
1. The ``Database`` wrapper around the shared async engine and session factory
2. Transaction scopes built on the driver's native BEGIN/COMMIT/ROLLBACK
3. Dialect-aware helpers for ``INSERT ... ON CONFLICT`` upserts
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from sqlalchemy import func, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from brainbolt.common.exceptions import DatabaseError
from brainbolt.common.logger import app_logger
from brainbolt.database.base import metadata

logger = app_logger.getChild("database.init_db")


def get_engine_kwargs(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30
) -> Dict[str, Any]:
    """
    Get engine keyword arguments based on database type.

    Only PostgreSQL gets pool sizing; SQLite uses SQLAlchemy's defaults.
    """
    kwargs: Dict[str, Any] = {"echo": echo}

    if database_url.startswith("postgresql"):
        kwargs.update({
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_pre_ping": True,
            "pool_recycle": 300,
        })

    return kwargs


class Database:
    """
    Process-wide handle on the durable store.

    Holds the async engine (and its connection pool) and hands out sessions.
    ``transaction()`` is the only way the engine performs multi-statement
    atomic writes.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, **engine_options: Any) -> "Database":
        """
        Create a database handle for a URL.

        Args:
            database_url: SQLAlchemy async URL (``postgresql+asyncpg://`` or ``sqlite+aiosqlite://``)
            **engine_options: ``echo``, ``pool_size``, ``max_overflow``, ``pool_timeout``

        Returns:
            Database instance
        """
        logger.info(f"Initializing database with URL: {database_url[:10]}...")
        engine = create_async_engine(database_url, **get_engine_kwargs(database_url, **engine_options))
        return cls(engine)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Read-only session scope. Driver errors surface as ``DatabaseError``."""
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                logger.error(f"Database error: {e}")
                raise DatabaseError("query failed", original_exception=e) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Transactional scope: commits when the block exits normally, rolls
        back on any exception and re-raises it. Driver errors surface as
        ``DatabaseError``; domain errors pass through unchanged.
        """
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error(f"Database transaction rolled back: {e}")
                raise DatabaseError("transaction failed", original_exception=e) from e

    def insert(self, model):
        """Dialect-specific INSERT supporting ``on_conflict_do_update/do_nothing``."""
        if self.dialect_name == "postgresql":
            return postgresql.insert(model)
        if self.dialect_name == "sqlite":
            return sqlite.insert(model)
        raise DatabaseError(f"upserts are not supported on dialect {self.dialect_name}")

    def greatest(self, *expressions):
        """SQL expression for the largest of ``expressions``."""
        if self.dialect_name == "sqlite":
            # SQLite's multi-argument max() is a scalar function
            return func.max(*expressions)
        return func.greatest(*expressions)

    async def create_schema(self) -> None:
        """Create any missing tables (development and tests; production uses Alembic)."""
        # Import models so they register on the shared metadata
        from brainbolt.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> bool:
        """Run ``SELECT 1``; False when the database cannot be reached."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database ping failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close the engine and all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine closed successfully")
