"""
Database Connection Module
Owns the SQLAlchemy async engine and session factory for the process.

The Database object is created by the application factory, connects lazily
on first use and is disposed when the application shuts down.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from restaurant_pos.core.config import Settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


class Database:
    """
    Process-wide connection pool with an explicit lifecycle.

    ``connect()`` is idempotent: concurrent first callers wait on one lock
    and share the single engine it creates. A failed attempt leaves the
    object unconnected so the next caller retries.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> dict:
        options = {"echo": self.settings.database_echo}
        if not self.settings.is_sqlite:
            options["pool_size"] = self.settings.database_pool_size
            options["max_overflow"] = self.settings.database_max_overflow
        return options

    async def connect(self) -> AsyncEngine:
        """Create the engine and verify connectivity, once."""
        if self._engine is not None:
            return self._engine

        async with self._lock:
            if self._engine is None:
                logger.info("Creating new database connection")
                engine = create_async_engine(
                    self.settings.database_url, **self._engine_options()
                )
                try:
                    async with engine.connect() as conn:
                        await conn.execute(text("SELECT 1"))
                except Exception:
                    logger.exception("Database connection failed")
                    await engine.dispose()
                    raise

                self._session_maker = async_sessionmaker(
                    bind=engine,
                    class_=AsyncSession,
                    expire_on_commit=False,  # Objects remain accessible after commit
                )
                self._engine = engine
                logger.info("Database connection successful")

        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a fresh session, connecting first if needed."""
        await self.connect()
        async with self._session_maker() as session:
            yield session

    async def create_all(self) -> None:
        """Create all tables. Called once at application startup."""
        engine = await self.connect()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables created")

    async def drop_all(self) -> None:
        engine = await self.connect()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Return True if the store answers a trivial query."""
        try:
            engine = await self.connect()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        async with self._lock:
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
                self._session_maker = None
                logger.info("Database connection closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a session from the application's Database and ensures cleanup.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
