"""Notification aggregate.

The notification lifecycle is a small state machine:

    PENDING --send--> SENT
    PENDING --fail--> FAILED --retry--> PENDING
    PENDING --cancel--> CANCELLED

Every transition checks its precondition before touching any field, so a
rejected call leaves the aggregate exactly as it was.
"""

from datetime import datetime
from uuid import UUID

from notification_service.core.domain.base import AggregateRoot
from notification_service.core.logging import get_logger
from notification_service.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
)
from notification_service.modules.notification.domain.errors import (
    EmptyContentError,
    EmptyReasonError,
    InvalidStateError,
    MissingSubjectError,
    NullRecipientError,
    PastScheduleError,
    UnknownPriorityError,
)
from notification_service.modules.notification.domain.events import (
    NotificationFailed,
    NotificationRetried,
    NotificationScheduled,
    NotificationSent,
)
from notification_service.modules.notification.domain.value_objects import Recipient
from notification_service.utils.date import ensure_utc, is_future, utc_now

logger = get_logger(__name__)


class Notification(AggregateRoot):
    """
    A message to deliver to one recipient over the recipient's channel.

    Usage Example:
        notification = Notification(
            Recipient.for_email("a@b.com"), "Hi", NotificationPriority.NORMAL, "Subj"
        )
        notification.send()
        events = notification.clear_events()  # [NotificationSent]
    """

    def __init__(
        self,
        recipient: Recipient,
        content: str,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        subject: str | None = None,
        entity_id: UUID | None = None,
    ):
        if recipient is None:
            raise NullRecipientError()

        if content is None or not content.strip():
            raise EmptyContentError()

        if recipient.channel.requires_subject() and (
            subject is None or not subject.strip()
        ):
            raise MissingSubjectError()

        if not isinstance(priority, NotificationPriority):
            raise UnknownPriorityError(priority)

        super().__init__(entity_id)

        self.recipient = recipient
        self.content = content
        self.subject = subject
        self.priority = priority
        self.status = NotificationStatus.PENDING
        self.scheduled_at: datetime | None = None
        self.sent_at: datetime | None = None
        self.failed_at: datetime | None = None
        self.error_message: str | None = None

    @property
    def channel(self) -> NotificationChannel:
        return self.recipient.channel

    # =================================================================================
    # STATE TRANSITIONS
    # =================================================================================

    def _require_status(self, expected: NotificationStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidStateError(
                f"Cannot {action} notification in status {self.status.value}. "
                f"Must be {expected.value}.",
                current_state=self.status,
            )

    def schedule(self, scheduled_at: datetime) -> None:
        """
        Schedule the notification for future delivery.

        Raises:
            InvalidStateError: If not pending
            PastScheduleError: If ``scheduled_at`` is not in the future
        """
        self._require_status(NotificationStatus.PENDING, "schedule")

        if scheduled_at is None or not is_future(scheduled_at):
            raise PastScheduleError(scheduled_at)

        scheduled_at = ensure_utc(scheduled_at)
        self.scheduled_at = scheduled_at
        self.add_event(
            NotificationScheduled(
                notification_id=self.id,
                recipient=self.recipient,
                scheduled_at=scheduled_at,
            )
        )
        logger.debug(
            "Notification scheduled",
            notification_id=str(self.id),
            scheduled_at=scheduled_at.isoformat(),
        )

    def send(self) -> None:
        """
        Mark the notification as sent.

        Raises:
            InvalidStateError: If not pending
        """
        self._require_status(NotificationStatus.PENDING, "send")

        self.status = NotificationStatus.SENT
        self.sent_at = utc_now()
        self.add_event(
            NotificationSent(
                notification_id=self.id, recipient=self.recipient, sent_at=self.sent_at
            )
        )
        logger.debug("Notification sent", notification_id=str(self.id))

    def fail(self, error_message: str) -> None:
        """
        Mark the notification as failed.

        Raises:
            InvalidStateError: If not pending
            EmptyReasonError: If ``error_message`` is blank
        """
        self._require_status(NotificationStatus.PENDING, "fail")

        if error_message is None or not error_message.strip():
            raise EmptyReasonError()

        self.status = NotificationStatus.FAILED
        self.failed_at = utc_now()
        self.error_message = error_message
        self.add_event(
            NotificationFailed(
                notification_id=self.id,
                recipient=self.recipient,
                error_message=error_message,
                failed_at=self.failed_at,
            )
        )
        logger.debug(
            "Notification failed", notification_id=str(self.id), reason=error_message
        )

    def cancel(self) -> None:
        """
        Cancel the notification. No event is raised.

        Raises:
            InvalidStateError: If not pending
        """
        self._require_status(NotificationStatus.PENDING, "cancel")

        self.status = NotificationStatus.CANCELLED
        self.mark_modified()
        logger.debug("Notification cancelled", notification_id=str(self.id))

    def retry(self) -> None:
        """
        Return a failed notification to pending.

        Raises:
            InvalidStateError: If not failed
        """
        self._require_status(NotificationStatus.FAILED, "retry")

        previous_error = self.error_message
        self.status = NotificationStatus.PENDING
        self.error_message = None
        self.failed_at = None
        self.add_event(
            NotificationRetried(
                notification_id=self.id,
                recipient=self.recipient,
                previous_error=previous_error,
            )
        )
        logger.debug("Notification retried", notification_id=str(self.id))

    # =================================================================================
    # QUERIES
    # =================================================================================

    def can_retry(self, attempt_number: int) -> bool:
        """
        Check whether another delivery attempt is allowed.

        Raises:
            UnknownPriorityError: If the priority has no retry policy
        """
        try:
            max_retries = self.priority.max_retries()
        except (AttributeError, KeyError) as e:
            raise UnknownPriorityError(self.priority) from e

        return attempt_number < max_retries

    def is_ready_to_send(self) -> bool:
        """Pending, and either unscheduled or scheduled at or before now."""
        if self.status != NotificationStatus.PENDING:
            return False

        if self.scheduled_at is None:
            return True

        return self.scheduled_at <= utc_now()

    # =================================================================================
    # RECONSTRUCTION
    # =================================================================================

    @classmethod
    def from_persisted_state(
        cls,
        *,
        entity_id: UUID,
        recipient: Recipient,
        content: str,
        subject: str | None,
        status: NotificationStatus,
        priority: NotificationPriority,
        created_at: datetime,
        scheduled_at: datetime | None = None,
        sent_at: datetime | None = None,
        failed_at: datetime | None = None,
        error_message: str | None = None,
        updated_at: datetime | None = None,
        version: int = 1,
    ) -> "Notification":
        """Rebuild a stored notification without validation or events."""
        notification = cls._rehydrate(entity_id, created_at, version)
        notification.recipient = recipient
        notification.content = content
        notification.subject = subject
        notification.status = status
        notification.priority = priority
        notification.updated_at = ensure_utc(updated_at) or notification.created_at
        notification.scheduled_at = ensure_utc(scheduled_at)
        notification.sent_at = ensure_utc(sent_at)
        notification.failed_at = ensure_utc(failed_at)
        notification.error_message = error_message
        return notification

    def __repr__(self) -> str:
        return (
            f"Notification(id={self.id}, channel={self.channel.value}, "
            f"status={self.status.value}, version={self._version})"
        )
