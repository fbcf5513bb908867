# backend/book_exchange/database.py

"""
Async database manager with schema-aware connections.
"""

import asyncio
import logging
from typing import Optional, AsyncGenerator, Dict, Any
from contextlib import asynccontextmanager

from sqlalchemy import text, event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from .models.base import Base

logger = logging.getLogger(__name__)


def _async_url(database_url: str) -> str:
    """Convert a sync postgres URL to its asyncpg variant."""
    if database_url.startswith("postgresql://") and "+asyncpg" not in database_url:
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    return database_url


class DatabaseManager:
    """Manages async SQLAlchemy engine and async session factory with schema support."""

    def __init__(self) -> None:
        self.engine: Optional[AsyncEngine] = None
        self.AsyncSessionLocal: Optional[async_sessionmaker] = None
        self.schema: str = "public"
        self._is_initialized = False
        self._loop = None

    async def initialize(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
        schema: str = "public",
        max_retries: int = 3,
        retry_delay: int = 1,
    ) -> None:
        """
        Initialize async engine and async session factory with schema support.
        Retries on failure.
        """
        current_loop = asyncio.get_running_loop()
        if self._is_initialized and self._loop == current_loop:
            logger.warning("Database already initialized")
            return

        if not database_url:
            raise ValueError("Database URL is required")

        db_url = _async_url(database_url)

        last_error = None
        for attempt in range(max_retries):
            try:
                self.engine = create_async_engine(
                    db_url,
                    echo=echo,
                    pool_size=pool_size,
                    max_overflow=max_overflow,
                    pool_timeout=pool_timeout,
                    pool_recycle=pool_recycle,
                    pool_pre_ping=True,
                    connect_args={
                        "server_settings": {"search_path": f"{schema},public"}
                    },
                )

                self.AsyncSessionLocal = async_sessionmaker(
                    bind=self.engine, expire_on_commit=False, class_=AsyncSession
                )
                self.schema = schema

                self._setup_event_listeners()
                await self._test_connection()

                self._is_initialized = True
                self._loop = current_loop
                logger.info(f"Async database initialized with schema: {schema}")
                return
            except Exception as e:
                last_error = e
                logger.error(
                    f"Database initialization attempt {attempt + 1}/{max_retries} failed: {e}"
                )
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay * (attempt + 1))

        raise RuntimeError(
            f"Failed to initialize async database after {max_retries} attempts"
        ) from last_error

    def _setup_event_listeners(self) -> None:
        """Attach pool listeners to the underlying sync engine."""
        if not self.engine:
            return

        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "checkout")
        def on_checkout(dbapi_connection, connection_record, connection_proxy):
            logger.debug("Connection checked out from pool")

        @event.listens_for(sync_engine, "checkin")
        def on_checkin(dbapi_connection, connection_record):
            logger.debug("Connection returned to pool")

    async def _test_connection(self) -> None:
        """Run a lightweight query to ensure connectivity."""
        if self.engine is None:
            raise RuntimeError("Engine not initialized")

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection test successful")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Async context manager returning an AsyncSession, rolled back on error."""
        if not self._is_initialized or not self.AsyncSessionLocal:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.AsyncSessionLocal() as session:
            try:
                yield session
            except Exception as e:
                logger.error(f"Async DB session error: {e}")
                await session.rollback()
                raise

    async def create_all_tables(self) -> None:
        """Create all mapped tables in the configured schema."""
        if self.engine is None:
            raise RuntimeError("Engine not initialized")

        async with self.engine.begin() as conn:
            if self.schema != "public":
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {self.schema}"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"All tables created successfully in schema: {self.schema}")

    async def get_connection_info(self) -> Dict[str, Any]:
        """Return pool information when available."""
        if not self.engine:
            return {"status": "Engine not initialized"}

        pool = self.engine.sync_engine.pool
        try:
            return {
                "pool_size": pool.size(),
                "checked_out": pool.checkedout(),
                "overflow": pool.overflow(),
            }
        except AttributeError:
            return {"status": "Pool info not available"}

    async def close(self) -> None:
        """Dispose the async engine."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self._is_initialized = False


db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    if not db_manager._is_initialized or not db_manager.AsyncSessionLocal:
        raise RuntimeError("Database not initialized. Call initialize() first.")

    async with db_manager.AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise


async def init_db(
    database_url: str,
    create_tables: bool = False,
    schema: str = "public",
    **engine_options: Any,
) -> None:
    """Initialize the async database, optionally creating tables."""
    await db_manager.initialize(database_url=database_url, schema=schema, **engine_options)

    if create_tables:
        await db_manager.create_all_tables()


async def check_db_health() -> Dict[str, Any]:
    """Async health check."""
    try:
        engine = db_manager.engine
        if engine is None:
            raise RuntimeError("Engine not initialized")

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        info = await db_manager.get_connection_info()
        return {
            "status": "healthy",
            "connection_pool": info,
            "message": "Database is accessible",
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "message": "Database connection failed",
        }


__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db",
    "init_db",
    "check_db_health",
]
