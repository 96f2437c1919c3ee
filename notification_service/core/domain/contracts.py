"""Core domain contracts."""

from abc import ABC, abstractmethod

from notification_service.core.events.types import DomainEvent


class IUnitOfWork(ABC):
    """Unit of Work interface with post-commit event publishing."""

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """Enter context."""

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context; roll back when an exception escaped the block."""

    @abstractmethod
    async def commit(self) -> None:
        """Persist pending changes, then publish the collected domain events."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard pending changes."""


class IEventPublisher(ABC):
    """Publishes domain events to whoever consumes them."""

    @abstractmethod
    async def publish_all(self, events: list[DomainEvent]) -> None:
        """Publish domain events in order."""
