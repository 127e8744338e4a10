"""
Database configuration.
Owns the async engine, the session factory and the FastAPI session dependency.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import PendingRollbackError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from .config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine with pool settings suited to the driver."""
    if url.startswith("sqlite"):
        # SQLite has no server-side pool to tune
        return create_async_engine(url, echo=settings.database.echo, future=True)

    return create_async_engine(
        url,
        echo=settings.database.echo,
        future=True,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_timeout=settings.database.pool_timeout,
        pool_recycle=settings.database.pool_recycle,
        connect_args={
            "server_settings": {"application_name": settings.api.app_name},
            "command_timeout": settings.database.command_timeout,
        },
    )


engine = build_engine(settings.database.url)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Prevent additional queries after commit
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.
    Commits whatever the handler left pending, rolls back on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            if session.in_transaction():
                try:
                    await session.commit()
                except PendingRollbackError:
                    await session.rollback()
                    raise
        except Exception:
            await session.rollback()
            raise


async def check_database() -> bool:
    """Run a trivial query to confirm the database answers."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


async def init_db() -> None:
    """
    Initialize database tables.
    Called on application startup; create_all skips tables that already exist.
    """
    # Register table models on the metadata
    import db  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """
    Close database connections.
    Called on application shutdown.
    """
    await engine.dispose()
