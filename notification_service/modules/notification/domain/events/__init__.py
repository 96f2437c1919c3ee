"""Events raised by ``Notification`` transitions.

Each carries the notification id and its recipient. They sit on the
aggregate until the unit of work commits.
"""

from datetime import datetime
from uuid import UUID

from notification_service.core.errors import ValidationError
from notification_service.core.events.types import DomainEvent, EventMetadata
from notification_service.modules.notification.domain.enums import NotificationChannel
from notification_service.modules.notification.domain.value_objects import Recipient


def _require_datetime(value, name: str) -> None:
    if not isinstance(value, datetime):
        raise ValidationError(f"{name} must be a datetime, got {value!r}")


class NotificationEvent(DomainEvent):
    """Base for events about a single notification."""

    aggregate_type = "Notification"

    def __init__(
        self,
        notification_id: UUID,
        recipient: Recipient,
        metadata: EventMetadata | None = None,
    ):
        self.notification_id = notification_id
        self.recipient = recipient
        if metadata is None:
            metadata = EventMetadata(
                aggregate_id=notification_id, aggregate_type=self.aggregate_type
            )
        super().__init__(metadata=metadata)

    @property
    def channel(self) -> NotificationChannel:
        return self.recipient.channel

    def validate_payload(self) -> None:
        if not isinstance(self.notification_id, UUID):
            raise ValidationError("notification_id is required")
        if not isinstance(self.recipient, Recipient):
            raise ValidationError("recipient must be a Recipient")


class NotificationScheduled(NotificationEvent):
    """The notification will not go out before ``scheduled_at``."""

    def __init__(
        self,
        notification_id: UUID,
        recipient: Recipient,
        scheduled_at: datetime,
        metadata: EventMetadata | None = None,
    ):
        self.scheduled_at = scheduled_at
        super().__init__(notification_id, recipient, metadata=metadata)

    def validate_payload(self) -> None:
        super().validate_payload()
        _require_datetime(self.scheduled_at, "scheduled_at")


class NotificationSent(NotificationEvent):
    """The notification left the service at ``sent_at``."""

    def __init__(
        self,
        notification_id: UUID,
        recipient: Recipient,
        sent_at: datetime,
        metadata: EventMetadata | None = None,
    ):
        self.sent_at = sent_at
        super().__init__(notification_id, recipient, metadata=metadata)

    def validate_payload(self) -> None:
        super().validate_payload()
        _require_datetime(self.sent_at, "sent_at")


class NotificationFailed(NotificationEvent):
    """A delivery try failed; ``error_message`` says why."""

    def __init__(
        self,
        notification_id: UUID,
        recipient: Recipient,
        error_message: str,
        failed_at: datetime,
        metadata: EventMetadata | None = None,
    ):
        self.error_message = error_message
        self.failed_at = failed_at
        super().__init__(notification_id, recipient, metadata=metadata)

    def validate_payload(self) -> None:
        super().validate_payload()
        if not self.error_message:
            raise ValidationError("A failure needs an error message", field="error_message")
        _require_datetime(self.failed_at, "failed_at")


class NotificationRetried(NotificationEvent):
    """A failed notification was put back to pending."""

    def __init__(
        self,
        notification_id: UUID,
        recipient: Recipient,
        previous_error: str | None,
        metadata: EventMetadata | None = None,
    ):
        self.previous_error = previous_error
        super().__init__(notification_id, recipient, metadata=metadata)


__all__ = [
    "NotificationEvent",
    "NotificationFailed",
    "NotificationRetried",
    "NotificationScheduled",
    "NotificationSent",
]
