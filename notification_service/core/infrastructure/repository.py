"""Repository base for SQLAlchemy-backed aggregates.

Concrete repositories map between ORM models and domain objects and work
inside a session owned by a unit of work. They never commit; they only
stage changes and flush so constraint violations surface early.

Architecture:
- RepositoryError: persistence failures below the domain
- SqlAlchemyRepository: session handling, mapping hooks and tracking of the
  aggregates passed through the repository
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.domain.base import AggregateRoot, Entity
from notification_service.core.errors import InfrastructureError
from notification_service.core.logging import get_logger

logger = get_logger(__name__)

TEntity = TypeVar("TEntity", bound=Entity)
TModel = TypeVar("TModel")


class RepositoryError(InfrastructureError):
    """Base exception for repository operation failures."""

    default_code = "REPOSITORY_ERROR"


class SqlAlchemyRepository(ABC, Generic[TEntity, TModel]):
    """
    Base repository bound to one session and one ORM model.

    Usage Example:
        class TemplateRepository(SqlAlchemyRepository[Template, TemplateModel]):
            def __init__(self, session):
                super().__init__(session, TemplateModel)

            def _to_entity(self, model): ...
            def _to_model(self, entity): ...
    """

    def __init__(self, session: AsyncSession, model_class: type[TModel]):
        self.session = session
        self.model_class = model_class
        self._seen: dict[int, AggregateRoot] = {}

    @property
    def seen(self) -> list[AggregateRoot]:
        """Aggregates loaded or stored through this repository, in order."""
        return list(self._seen.values())

    def _track(self, entity: TEntity) -> TEntity:
        if isinstance(entity, AggregateRoot):
            self._seen.setdefault(id(entity), entity)
        return entity

    @abstractmethod
    def _to_entity(self, model: TModel) -> TEntity:
        """Convert database model to domain object."""

    @abstractmethod
    def _to_model(self, entity: TEntity) -> TModel:
        """Convert domain object to a new database model."""

    async def _get_model(self, entity_id: Any) -> TModel | None:
        return await self.session.get(self.model_class, entity_id)

    async def _find_entity(self, entity_id: Any) -> TEntity | None:
        model = await self._get_model(entity_id)
        if model is None:
            return None
        return self._track(self._to_entity(model))

    async def _find_entities(self, statement) -> list[TEntity]:
        result = await self.session.execute(statement)
        return [self._track(self._to_entity(model)) for model in result.scalars().all()]

    async def _add_entity(self, entity: TEntity) -> None:
        self.session.add(self._to_model(entity))
        await self._flush("add", entity)
        self._track(entity)

    async def _flush(self, operation: str, entity: TEntity) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception(
                "Repository flush failed",
                operation=operation,
                entity_type=type(entity).__name__,
                entity_id=str(entity.id),
                error=str(e),
            )
            raise RepositoryError(
                f"Failed to {operation} {type(entity).__name__} {entity.id}: {e}",
                cause=e,
            ) from e


__all__ = ["RepositoryError", "SqlAlchemyRepository"]
