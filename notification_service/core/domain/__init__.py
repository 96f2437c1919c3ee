"""Domain layer core classes."""

from notification_service.core.domain.base import AggregateRoot, Entity, ValueObject
from notification_service.core.domain.contracts import IEventPublisher, IUnitOfWork

__all__ = [
    "AggregateRoot",
    "Entity",
    "IEventPublisher",
    "IUnitOfWork",
    "ValueObject",
]
