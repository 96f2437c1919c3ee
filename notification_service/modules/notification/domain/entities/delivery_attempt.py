"""Delivery attempt entity.

Records one try at delivering a notification. An attempt starts in progress
and completes exactly once, after which it no longer changes.
"""

from datetime import datetime, timedelta
from uuid import UUID

from notification_service.core.domain.base import Entity
from notification_service.modules.notification.domain.enums import DeliveryStatus
from notification_service.modules.notification.domain.errors import (
    EmptyNotificationIdError,
    EmptyReasonError,
    InvalidAttemptNumberError,
    InvalidStateError,
)
from notification_service.utils.date import ensure_utc, utc_now
from notification_service.utils.validation import is_missing_id


class DeliveryAttempt(Entity):
    """A single delivery try for a notification, numbered from 1."""

    def __init__(
        self,
        notification_id: UUID,
        attempt_number: int,
        entity_id: UUID | None = None,
    ):
        if is_missing_id(notification_id):
            raise EmptyNotificationIdError()

        if not isinstance(attempt_number, int) or attempt_number < 1:
            raise InvalidAttemptNumberError(attempt_number)

        super().__init__(entity_id)

        self.notification_id = notification_id
        self.attempt_number = attempt_number
        self.status = DeliveryStatus.IN_PROGRESS
        self.error_message: str | None = None
        self.attempted_at = self.created_at
        self.completed_at: datetime | None = None

    @property
    def is_in_progress(self) -> bool:
        return self.status == DeliveryStatus.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.status.is_final()

    def _require_in_progress(self, outcome: str) -> None:
        if not self.is_in_progress:
            raise InvalidStateError(
                f"Cannot mark attempt as {outcome} when status is "
                f"{self.status.value}. Must be in_progress.",
                current_state=self.status,
            )

    def mark_as_success(self) -> None:
        """
        Complete the attempt successfully.

        Raises:
            InvalidStateError: If the attempt already completed
        """
        self._require_in_progress("success")

        self.status = DeliveryStatus.SUCCESS
        self.completed_at = utc_now()
        self.updated_at = self.completed_at

    def mark_as_failed(self, error_message: str) -> None:
        """
        Complete the attempt as failed.

        Raises:
            InvalidStateError: If the attempt already completed
            EmptyReasonError: If ``error_message`` is blank
        """
        self._require_in_progress("failed")

        if error_message is None or not error_message.strip():
            raise EmptyReasonError()

        self.status = DeliveryStatus.FAILED
        self.error_message = error_message
        self.completed_at = utc_now()
        self.updated_at = self.completed_at

    def get_duration(self) -> timedelta | None:
        """Time from start to completion, or None while in progress."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.attempted_at

    @classmethod
    def from_persisted_state(
        cls,
        *,
        entity_id: UUID,
        notification_id: UUID,
        attempt_number: int,
        status: DeliveryStatus,
        error_message: str | None,
        attempted_at: datetime,
        completed_at: datetime | None,
    ) -> "DeliveryAttempt":
        """Rebuild a stored attempt without validation."""
        attempt = cls._rehydrate(entity_id, attempted_at)
        attempt.notification_id = notification_id
        attempt.attempt_number = attempt_number
        attempt.status = status
        attempt.error_message = error_message
        attempt.attempted_at = ensure_utc(attempted_at)
        attempt.completed_at = ensure_utc(completed_at)
        attempt.updated_at = attempt.completed_at or attempt.attempted_at
        return attempt

    def __repr__(self) -> str:
        return (
            f"DeliveryAttempt(id={self.id}, notification_id={self.notification_id}, "
            f"attempt_number={self.attempt_number}, status={self.status.value})"
        )
