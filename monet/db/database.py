"""
Database connection management.

The engine and session factory are owned by an explicitly constructed
Database object. The process entry point creates it and disposes it on
shutdown; nothing in the package holds a global engine.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from monet.models.base import Base


class Database:
    """Async engine plus session factory."""

    def __init__(self, url: str, echo: bool = False, **engine_kwargs) -> None:
        """
        Initialize database.

        Args:
            url: SQLAlchemy async database URL
            echo: Log SQL statements
            **engine_kwargs: Extra create_async_engine arguments
        """
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, **engine_kwargs
        )
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session for one unit of work.

        Rolls back on error; the caller commits.

        Yields:
            AsyncSession bound to this database
        """
        async with self.session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create all tables (development and tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created", extra={"url": self._safe_url})

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")

    @property
    def _safe_url(self) -> str:
        """URL with password masked."""
        return self.engine.url.render_as_string(hide_password=True)
