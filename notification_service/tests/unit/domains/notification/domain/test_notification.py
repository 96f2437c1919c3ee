"""Tests for the Notification aggregate.

Covers construction rules, every lifecycle transition, the events each
transition raises and the retry policy.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
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
from notification_service.tests.builders import future
from notification_service.utils.date import utc_now


class TestNotificationCreation:
    """Test suite for notification construction."""

    def test_new_notification_is_pending(self, email_notification):
        """Test initial state."""
        assert email_notification.status == NotificationStatus.PENDING
        assert email_notification.channel == NotificationChannel.EMAIL
        assert email_notification.priority == NotificationPriority.NORMAL
        assert email_notification.scheduled_at is None
        assert email_notification.sent_at is None
        assert email_notification.version == 1
        assert email_notification.has_events() is False

    def test_null_recipient(self):
        """Test a recipient is mandatory."""
        with pytest.raises(NullRecipientError):
            Notification(recipient=None, content="Hi")

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_empty_content(self, content):
        """Test content is mandatory."""
        with pytest.raises(EmptyContentError):
            Notification(recipient=Recipient.for_push("token"), content=content)

    @pytest.mark.parametrize("subject", [None, "", "  "])
    def test_email_requires_subject(self, subject):
        """Test email notifications need a subject."""
        with pytest.raises(MissingSubjectError):
            Notification(
                recipient=Recipient.for_email("a@example.com"),
                content="Hi",
                subject=subject,
            )

    def test_non_email_without_subject(self):
        """Test other channels do not need a subject."""
        notification = Notification(Recipient.for_sms("+391234567890"), "Hi")

        assert notification.subject is None

    def test_unknown_priority(self):
        """Test the priority must be a known level."""
        with pytest.raises(UnknownPriorityError):
            Notification(Recipient.for_push("token"), "Hi", priority="urgent")


class TestSchedule:
    """Test suite for scheduling."""

    def test_schedule_in_future(self, email_notification):
        """Test scheduling sets the time and raises an event."""
        at = future(days=1)

        email_notification.schedule(at)

        assert email_notification.scheduled_at == at
        assert email_notification.status == NotificationStatus.PENDING
        events = email_notification.get_events()
        assert len(events) == 1
        assert isinstance(events[0], NotificationScheduled)
        assert events[0].scheduled_at == at
        assert events[0].notification_id == email_notification.id

    def test_naive_time_is_treated_as_utc(self, email_notification):
        """Test naive datetimes are read as UTC."""
        at = future(hours=2).replace(tzinfo=None)

        email_notification.schedule(at)

        assert email_notification.scheduled_at.tzinfo is not None

    @pytest.mark.parametrize("delta", [timedelta(0), timedelta(minutes=-5)])
    def test_past_schedule(self, email_notification, delta):
        """Test scheduling in the past or at now is refused."""
        with pytest.raises(PastScheduleError):
            email_notification.schedule(utc_now() + delta)

        assert email_notification.scheduled_at is None
        assert email_notification.has_events() is False

    def test_schedule_requires_pending(self, email_notification):
        """Test only pending notifications can be scheduled."""
        email_notification.send()

        with pytest.raises(InvalidStateError):
            email_notification.schedule(future())


class TestSend:
    """Test suite for sending."""

    def test_send(self, email_notification):
        """Test sending marks the time and raises an event."""
        email_notification.send()

        assert email_notification.status == NotificationStatus.SENT
        assert email_notification.sent_at is not None
        (event,) = email_notification.get_events()
        assert isinstance(event, NotificationSent)
        assert event.sent_at == email_notification.sent_at
        assert event.channel == NotificationChannel.EMAIL

    def test_cannot_send_twice(self, email_notification):
        """Test sent notifications are terminal."""
        email_notification.send()
        sent_at = email_notification.sent_at

        with pytest.raises(InvalidStateError) as exc_info:
            email_notification.send()

        assert exc_info.value.details["current_state"] == "sent"
        assert email_notification.sent_at == sent_at
        assert len(email_notification.get_events()) == 1


class TestFail:
    """Test suite for failing."""

    def test_fail(self, email_notification):
        """Test failing records the reason and raises an event."""
        email_notification.fail("Mailbox full")

        assert email_notification.status == NotificationStatus.FAILED
        assert email_notification.error_message == "Mailbox full"
        assert email_notification.failed_at is not None
        (event,) = email_notification.get_events()
        assert isinstance(event, NotificationFailed)
        assert event.error_message == "Mailbox full"

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_fail_requires_reason(self, email_notification, reason):
        """Test a reason is mandatory and state is untouched."""
        with pytest.raises(EmptyReasonError):
            email_notification.fail(reason)

        assert email_notification.status == NotificationStatus.PENDING

    def test_fail_requires_pending(self, failed_notification):
        """Test failed notifications cannot fail again."""
        with pytest.raises(InvalidStateError):
            failed_notification.fail("again")


class TestCancel:
    """Test suite for cancelling."""

    def test_cancel(self, email_notification):
        """Test cancelling raises no event."""
        email_notification.cancel()

        assert email_notification.status == NotificationStatus.CANCELLED
        assert email_notification.has_events() is False

    def test_cancel_sent(self, email_notification):
        """Test sent notifications cannot be cancelled."""
        email_notification.send()

        with pytest.raises(InvalidStateError):
            email_notification.cancel()

        assert email_notification.status == NotificationStatus.SENT


class TestRetry:
    """Test suite for retrying."""

    def test_retry(self, failed_notification):
        """Test retry returns to pending and clears the failure."""
        failed_notification.retry()

        assert failed_notification.status == NotificationStatus.PENDING
        assert failed_notification.error_message is None
        assert failed_notification.failed_at is None
        (event,) = failed_notification.get_events()
        assert isinstance(event, NotificationRetried)
        assert event.previous_error == "Carrier rejected"

    def test_retry_requires_failed(self, email_notification):
        """Test only failed notifications can be retried."""
        with pytest.raises(InvalidStateError):
            email_notification.retry()

    def test_full_cycle(self, failed_notification):
        """Test a retried notification can be sent."""
        failed_notification.retry()
        failed_notification.send()

        assert failed_notification.status == NotificationStatus.SENT
        assert [type(e) for e in failed_notification.clear_events()] == [
            NotificationRetried,
            NotificationSent,
        ]


class TestRetryPolicy:
    """Test suite for retry allowance and readiness."""

    @pytest.mark.parametrize(
        ("priority", "attempt", "allowed"),
        [
            (NotificationPriority.LOW, 1, True),
            (NotificationPriority.LOW, 2, False),
            (NotificationPriority.NORMAL, 2, True),
            (NotificationPriority.NORMAL, 3, False),
            (NotificationPriority.HIGH, 4, True),
            (NotificationPriority.CRITICAL, 9, True),
            (NotificationPriority.CRITICAL, 10, False),
        ],
    )
    def test_can_retry(self, notification_builder, priority, attempt, allowed):
        """Test retries allowed per priority."""
        notification = notification_builder.with_priority(priority).build()

        assert notification.can_retry(attempt) is allowed

    def test_ready_when_unscheduled(self, email_notification):
        """Test unscheduled pending notifications are ready."""
        assert email_notification.is_ready_to_send() is True

    def test_not_ready_when_scheduled_later(self, email_notification):
        """Test future schedules are not ready yet."""
        email_notification.schedule(future(hours=3))

        assert email_notification.is_ready_to_send() is False

    def test_ready_when_schedule_has_passed(self, email_notification):
        """Test stored schedules in the past are ready."""
        restored = Notification.from_persisted_state(
            entity_id=email_notification.id,
            recipient=email_notification.recipient,
            content=email_notification.content,
            subject=email_notification.subject,
            status=NotificationStatus.PENDING,
            priority=NotificationPriority.NORMAL,
            created_at=utc_now() - timedelta(hours=2),
            scheduled_at=utc_now() - timedelta(minutes=1),
        )

        assert restored.is_ready_to_send() is True

    def test_not_ready_when_not_pending(self, failed_notification):
        """Test only pending notifications are ready."""
        assert failed_notification.is_ready_to_send() is False


class TestReconstruction:
    """Test suite for rebuilding stored notifications."""

    def test_from_persisted_state(self):
        """Test stored state is restored with version and no events."""
        notification_id = uuid4()
        created_at = utc_now().replace(tzinfo=None)

        notification = Notification.from_persisted_state(
            entity_id=notification_id,
            recipient=Recipient.from_persisted_state("token", "push"),
            content="Hi",
            subject=None,
            status=NotificationStatus.FAILED,
            priority=NotificationPriority.HIGH,
            created_at=created_at,
            error_message="boom",
            version=4,
        )

        assert notification.id == notification_id
        assert notification.version == 4
        assert notification.created_at.tzinfo is not None
        assert notification.updated_at == notification.created_at
        assert notification.error_message == "boom"
        assert notification.has_events() is False
