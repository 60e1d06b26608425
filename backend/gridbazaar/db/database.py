"""
GridBazaar - Database Connection
"""
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from loguru import logger

from gridbazaar.config import settings

# Base class for models
Base = declarative_base()


class Database:
    """
    Owns the async engine and session factory for one process.

    Created by the application factory and kept on ``app.state``;
    request handlers get sessions through the ``get_db`` dependency.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        engine_options = {"echo": settings.DEBUG if echo is None else echo, "pool_pre_ping": True}
        if not self.url.startswith("sqlite"):
            engine_options["pool_size"] = settings.DATABASE_POOL_SIZE
            engine_options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
        self.engine: AsyncEngine = create_async_engine(self.url, **engine_options)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    async def init_db(self):
        """Initialize database tables."""
        async with self.engine.begin() as conn:
            # Import all models here to ensure they're registered
            from gridbazaar.db import models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created/verified")

    async def ping(self) -> bool:
        """Run a trivial query to check connectivity."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back on error."""
        async with self.session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self):
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
