"""Async database setup using SQLAlchemy 2.0."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from task_manager.config import Settings


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide engine; its pool is shared by every request."""
    return create_async_engine(settings.sqlalchemy_url, echo=settings.debug)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections."""
    await engine.dispose()
