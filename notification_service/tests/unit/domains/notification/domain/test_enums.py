"""Tests for notification domain enums."""

import pytest

from notification_service.modules.notification.domain.enums import (
    DeliveryStatus,
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
)


class TestNotificationChannel:
    """Test suite for NotificationChannel enum."""

    def test_all_channels_exist(self):
        """Test that all expected channels are defined."""
        assert [channel.value for channel in NotificationChannel] == [
            "email",
            "sms",
            "push",
            "webhook",
        ]

    def test_only_email_requires_subject(self):
        """Test channels that require a subject line."""
        assert NotificationChannel.EMAIL.requires_subject() is True
        for channel in (
            NotificationChannel.SMS,
            NotificationChannel.PUSH,
            NotificationChannel.WEBHOOK,
        ):
            assert channel.requires_subject() is False


class TestNotificationStatus:
    """Test suite for NotificationStatus enum."""

    @pytest.mark.parametrize(
        ("status", "terminal"),
        [
            (NotificationStatus.PENDING, False),
            (NotificationStatus.FAILED, False),
            (NotificationStatus.SENT, True),
            (NotificationStatus.CANCELLED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        """Test terminal status identification."""
        assert status.is_terminal() is terminal

    def test_valid_transitions(self):
        """Test the lifecycle transition table."""
        assert NotificationStatus.PENDING.can_transition_to(NotificationStatus.SENT)
        assert NotificationStatus.PENDING.can_transition_to(NotificationStatus.FAILED)
        assert NotificationStatus.PENDING.can_transition_to(
            NotificationStatus.CANCELLED
        )
        assert NotificationStatus.FAILED.can_transition_to(NotificationStatus.PENDING)

    def test_invalid_transitions(self):
        """Test transitions out of terminal states are refused."""
        for target in NotificationStatus:
            assert not NotificationStatus.SENT.can_transition_to(target)
            assert not NotificationStatus.CANCELLED.can_transition_to(target)
        assert not NotificationStatus.FAILED.can_transition_to(NotificationStatus.SENT)


class TestNotificationPriority:
    """Test suite for NotificationPriority enum."""

    @pytest.mark.parametrize(
        ("priority", "attempts"),
        [
            (NotificationPriority.LOW, 2),
            (NotificationPriority.NORMAL, 3),
            (NotificationPriority.HIGH, 5),
            (NotificationPriority.CRITICAL, 10),
        ],
    )
    def test_max_retries(self, priority, attempts):
        """Test retry allowance per priority."""
        assert priority.max_retries() == attempts


class TestDeliveryStatus:
    """Test suite for DeliveryStatus enum."""

    def test_is_final(self):
        """Test completed attempt outcomes."""
        assert DeliveryStatus.IN_PROGRESS.is_final() is False
        assert DeliveryStatus.SUCCESS.is_final() is True
        assert DeliveryStatus.FAILED.is_final() is True
