"""
Database Engine Management
SQLAlchemy 2.0 Async Engine Configuration
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from siteindex.core.config import Settings
from siteindex.models.base import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async database engine

    Called once at startup; the engine is owned by the dependency
    container and disposed on shutdown.

    Args:
        settings: Application settings

    Returns:
        AsyncEngine instance
    """
    return create_async_engine(
        settings.async_database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,  # Verify connections before using
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database (create tables)
    Should only be used in development. Use Alembic in production.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """
    Close database connections
    Should be called on application shutdown
    """
    await engine.dispose()
