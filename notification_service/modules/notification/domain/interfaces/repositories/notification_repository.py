"""Notification Repository Interface.

Domain contract for notification data access operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.enums import NotificationStatus


class INotificationRepository(ABC):
    """Repository interface for Notification aggregate operations."""

    @abstractmethod
    async def get(self, notification_id: UUID) -> Notification | None:
        """Load a notification by id, or None when it does not exist."""

    @abstractmethod
    async def list_by_status(self, status: NotificationStatus) -> list[Notification]:
        """Notifications in ``status``, oldest first."""

    @abstractmethod
    async def list_pending(self) -> list[Notification]:
        """Pending notifications ordered by scheduled time, falling back to creation time."""

    @abstractmethod
    async def add(self, notification: Notification) -> None:
        """Stage a new notification."""

    @abstractmethod
    async def update(self, notification: Notification) -> None:
        """
        Stage changes to an existing notification.

        Raises:
            ConcurrencyConflictError: If the stored version moved on
            NotificationNotFoundError: If the notification is not stored
        """
