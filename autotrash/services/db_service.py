# autotrash/services/db_service.py
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional, AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker

from autotrash.database.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///autotrash.db"


class DBService:
    """
    Owns the async engine and hands out sessions for settings persistence.
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        self.database_url: str = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self._engine: AsyncEngine = create_async_engine(self.database_url, echo=echo)
        self._SessionLocal = sessionmaker(
            bind=self._engine,  # type: ignore [arg-type]
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(f"DBService initialized (URL: {self.database_url}).")

    async def initialize_database(self) -> None:
        """Creates any missing tables."""
        logger.info("Initializing database schema...")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialization complete.")

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Yields a session that is closed on exit.
        Transaction management is up to the caller.
        """
        session: AsyncSession = self._SessionLocal()
        try:
            yield session
        finally:
            await session.close()
            logger.debug("DBService.get_session: Session closed.")

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Database connection closed.")
