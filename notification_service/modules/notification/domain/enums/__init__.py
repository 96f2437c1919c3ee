"""Notification domain enums.

Type-safe constants for delivery channels, notification lifecycle status,
priorities and delivery attempt outcomes.
"""

from enum import Enum


class NotificationChannel(Enum):
    """Available notification delivery channels."""

    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    WEBHOOK = "webhook"

    def requires_subject(self) -> bool:
        """Check if content on this channel must carry a subject line."""
        return self == NotificationChannel.EMAIL


class NotificationStatus(Enum):
    """Notification lifecycle status."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if no further transitions are possible from this status."""
        return self in [NotificationStatus.SENT, NotificationStatus.CANCELLED]

    def can_transition_to(self, new_status: "NotificationStatus") -> bool:
        """Check if transition to new status is valid."""
        valid_transitions: dict[NotificationStatus, list[NotificationStatus]] = {
            NotificationStatus.PENDING: [
                NotificationStatus.SENT,
                NotificationStatus.FAILED,
                NotificationStatus.CANCELLED,
            ],
            NotificationStatus.FAILED: [NotificationStatus.PENDING],
            NotificationStatus.SENT: [],
            NotificationStatus.CANCELLED: [],
        }
        return new_status in valid_transitions[self]


class NotificationPriority(Enum):
    """Notification priority levels."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"

    def max_retries(self) -> int:
        """Get the number of delivery attempts allowed for this priority."""
        attempts = {
            NotificationPriority.LOW: 2,
            NotificationPriority.NORMAL: 3,
            NotificationPriority.HIGH: 5,
            NotificationPriority.CRITICAL: 10,
        }
        return attempts[self]


class DeliveryStatus(Enum):
    """Outcome of a single delivery attempt."""

    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"

    def is_final(self) -> bool:
        """Check if the attempt has completed."""
        return self != DeliveryStatus.IN_PROGRESS


__all__ = [
    "DeliveryStatus",
    "NotificationChannel",
    "NotificationPriority",
    "NotificationStatus",
]
