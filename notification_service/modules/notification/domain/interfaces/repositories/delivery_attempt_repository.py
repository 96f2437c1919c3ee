"""Delivery Attempt Repository Interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)


class IDeliveryAttemptRepository(ABC):
    """Repository interface for DeliveryAttempt entities."""

    @abstractmethod
    async def add(self, attempt: DeliveryAttempt) -> None:
        """Stage a new attempt."""

    @abstractmethod
    async def update(self, attempt: DeliveryAttempt) -> None:
        """Stage changes to an existing attempt."""

    @abstractmethod
    async def list_by_notification(self, notification_id: UUID) -> list[DeliveryAttempt]:
        """Attempts for one notification, ordered by attempt number."""
