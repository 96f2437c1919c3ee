"""Database engine and session factory.

Thin wrapper around SQLAlchemy's async engine. Models share the declarative
``Base`` defined here; sessions come from ``create_session_factory`` and are
handed to a unit of work.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notification_service.core.config import DatabaseConfig
from notification_service.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def create_engine(config: DatabaseConfig, **overrides) -> AsyncEngine:
    """
    Create an async engine from database configuration.

    Args:
        config: Database configuration
        **overrides: Extra keyword arguments for ``create_async_engine``
    """
    kwargs = config.get_engine_kwargs()
    kwargs.update(overrides)
    engine = create_async_engine(config.url, **kwargs)

    logger.info("Database engine created", **config.to_dict())
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by units of work."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables known to ``Base``."""
    # Model modules register their tables on import.
    from notification_service.modules.notification.infrastructure import models  # noqa: F401

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    logger.info("Database schema created", tables=sorted(Base.metadata.tables))


__all__ = ["Base", "create_engine", "create_schema", "create_session_factory"]
