"""Notification application DTOs.

Data Transfer Objects returned by query handlers. They flatten aggregates
into plain values so callers never hold a mutable domain object.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.enums import (
    DeliveryStatus,
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
)


@dataclass(frozen=True)
class NotificationDTO:
    """DTO for notification read models."""

    id: UUID
    recipient: str
    channel: NotificationChannel
    content: str
    subject: str | None
    status: NotificationStatus
    priority: NotificationPriority
    created_at: datetime
    scheduled_at: datetime | None
    sent_at: datetime | None

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationDTO":
        """Create DTO from notification aggregate."""
        return cls(
            id=notification.id,
            recipient=notification.recipient.value,
            channel=notification.channel,
            content=notification.content,
            subject=notification.subject,
            status=notification.status,
            priority=notification.priority,
            created_at=notification.created_at,
            scheduled_at=notification.scheduled_at,
            sent_at=notification.sent_at,
        )


@dataclass(frozen=True)
class DeliveryAttemptDTO:
    """DTO for delivery attempt history."""

    id: UUID
    notification_id: UUID
    attempt_number: int
    status: DeliveryStatus
    error_message: str | None
    attempted_at: datetime
    completed_at: datetime | None

    @property
    def duration(self) -> timedelta | None:
        if self.completed_at is None:
            return None
        return self.completed_at - self.attempted_at

    @classmethod
    def from_attempt(cls, attempt: DeliveryAttempt) -> "DeliveryAttemptDTO":
        """Create DTO from delivery attempt entity."""
        return cls(
            id=attempt.id,
            notification_id=attempt.notification_id,
            attempt_number=attempt.attempt_number,
            status=attempt.status,
            error_message=attempt.error_message,
            attempted_at=attempt.attempted_at,
            completed_at=attempt.completed_at,
        )


__all__ = ["DeliveryAttemptDTO", "NotificationDTO"]
