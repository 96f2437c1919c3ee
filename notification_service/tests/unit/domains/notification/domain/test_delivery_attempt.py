"""Tests for the DeliveryAttempt entity."""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest

from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.enums import DeliveryStatus
from notification_service.modules.notification.domain.errors import (
    EmptyNotificationIdError,
    EmptyReasonError,
    InvalidAttemptNumberError,
    InvalidStateError,
)
from notification_service.utils.date import utc_now


@pytest.fixture
def attempt(sample_notification_id):
    return DeliveryAttempt(sample_notification_id, 1)


class TestDeliveryAttempt:
    """Test suite for DeliveryAttempt."""

    def test_starts_in_progress(self, attempt, sample_notification_id):
        """Test initial state."""
        assert attempt.notification_id == sample_notification_id
        assert attempt.status == DeliveryStatus.IN_PROGRESS
        assert attempt.is_in_progress is True
        assert attempt.is_completed is False
        assert attempt.attempted_at == attempt.created_at
        assert attempt.get_duration() is None

    @pytest.mark.parametrize("notification_id", [None, UUID(int=0)])
    def test_requires_notification_id(self, notification_id):
        """Test the owning notification is mandatory and not the nil UUID."""
        with pytest.raises(EmptyNotificationIdError):
            DeliveryAttempt(notification_id, 1)

    @pytest.mark.parametrize("number", [0, -1, "1", 1.5])
    def test_invalid_attempt_number(self, number):
        """Test attempt numbers start at one."""
        with pytest.raises(InvalidAttemptNumberError):
            DeliveryAttempt(uuid4(), number)

    def test_mark_as_success(self, attempt):
        """Test completing successfully."""
        attempt.mark_as_success()

        assert attempt.status == DeliveryStatus.SUCCESS
        assert attempt.is_completed is True
        assert attempt.completed_at is not None
        assert attempt.get_duration() >= timedelta(0)

    def test_mark_as_failed(self, attempt):
        """Test completing with an error."""
        attempt.mark_as_failed("Connection refused")

        assert attempt.status == DeliveryStatus.FAILED
        assert attempt.error_message == "Connection refused"
        assert attempt.completed_at is not None

    @pytest.mark.parametrize("reason", ["", "  ", None])
    def test_mark_as_failed_requires_reason(self, attempt, reason):
        """Test failures need an error message."""
        with pytest.raises(EmptyReasonError):
            attempt.mark_as_failed(reason)

        assert attempt.is_in_progress is True

    def test_completes_only_once(self, attempt):
        """Test a completed attempt cannot change."""
        attempt.mark_as_success()

        with pytest.raises(InvalidStateError):
            attempt.mark_as_success()
        with pytest.raises(InvalidStateError):
            attempt.mark_as_failed("late failure")

        assert attempt.status == DeliveryStatus.SUCCESS

    def test_from_persisted_state(self):
        """Test stored attempts are restored with UTC timestamps."""
        attempted_at = (utc_now() - timedelta(seconds=5)).replace(tzinfo=None)
        completed_at = utc_now().replace(tzinfo=None)

        attempt = DeliveryAttempt.from_persisted_state(
            entity_id=uuid4(),
            notification_id=uuid4(),
            attempt_number=2,
            status=DeliveryStatus.FAILED,
            error_message="timeout",
            attempted_at=attempted_at,
            completed_at=completed_at,
        )

        assert attempt.attempted_at.tzinfo is not None
        assert attempt.get_duration() >= timedelta(seconds=4)
        assert attempt.is_completed is True
