"""Notification application commands.

Commands represent intents to modify notification state. Each command
checks the shape of its input when constructed and raises a
``ValidationError`` carrying per-field messages; business rules stay in the
domain.
"""

import re
from datetime import datetime
from uuid import UUID

import httpx

from notification_service.core.cqrs.base import Command
from notification_service.core.errors import ValidationError
from notification_service.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationPriority,
)
from notification_service.modules.notification.domain.value_objects import (
    EMAIL_PATTERN,
    WEBHOOK_SCHEMES,
)
from notification_service.utils.date import is_future
from notification_service.utils.validation import is_missing_id

# Constants
MAX_RECIPIENT_LENGTH = 255
MAX_CONTENT_LENGTH = 4000
MAX_SUBJECT_LENGTH = 255
MAX_TEMPLATE_NAME_LENGTH = 100
PHONE_INPUT_PATTERN = re.compile(r"^\+?[1-9]\d{6,14}$")


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _raise_for_errors(errors: dict[str, list[str]]) -> None:
    if errors:
        raise ValidationError.from_fields(errors)


def _is_webhook_url(value: str) -> bool:
    try:
        url = httpx.URL(value.strip())
    except httpx.InvalidURL:
        return False
    return url.is_absolute_url and url.scheme in WEBHOOK_SCHEMES and bool(url.host)


class ScheduleNotificationCommand(Command):
    """Command to create a notification and schedule it for later delivery."""

    def __init__(
        self,
        recipient: str,
        channel: NotificationChannel,
        content: str,
        scheduled_at: datetime,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        subject: str | None = None,
    ):
        super().__init__()

        self.recipient = recipient
        self.channel = channel
        self.content = content
        self.scheduled_at = scheduled_at
        self.priority = priority
        self.subject = subject

        self._freeze()

    def _validate_command(self) -> None:
        """Validate command state."""
        errors: dict[str, list[str]] = {}

        if _is_blank(self.recipient):
            errors.setdefault("recipient", []).append("Recipient is required")
        elif len(self.recipient) > MAX_RECIPIENT_LENGTH:
            errors.setdefault("recipient", []).append(
                f"Recipient must not exceed {MAX_RECIPIENT_LENGTH} characters"
            )

        if not isinstance(self.channel, NotificationChannel):
            errors.setdefault("channel", []).append("Invalid notification channel")

        if _is_blank(self.content):
            errors.setdefault("content", []).append("Content is required")
        elif len(self.content) > MAX_CONTENT_LENGTH:
            errors.setdefault("content", []).append(
                f"Content must not exceed {MAX_CONTENT_LENGTH} characters"
            )

        if not isinstance(self.scheduled_at, datetime) or not is_future(
            self.scheduled_at
        ):
            errors.setdefault("scheduled_at", []).append(
                "ScheduledAt must be in the future"
            )

        if not isinstance(self.priority, NotificationPriority):
            errors.setdefault("priority", []).append("Invalid priority")

        if self.subject is not None and len(self.subject) > MAX_SUBJECT_LENGTH:
            errors.setdefault("subject", []).append(
                f"Subject must not exceed {MAX_SUBJECT_LENGTH} characters"
            )

        if not _is_blank(self.recipient):
            self._validate_recipient_format(errors)

        if self.channel == NotificationChannel.EMAIL and _is_blank(self.subject):
            errors.setdefault("subject", []).append(
                "Subject is required for email notifications"
            )

        _raise_for_errors(errors)

    def _validate_recipient_format(self, errors: dict[str, list[str]]) -> None:
        recipient = self.recipient.strip()

        if self.channel == NotificationChannel.EMAIL and not EMAIL_PATTERN.match(
            recipient
        ):
            errors.setdefault("recipient", []).append("Invalid email format")
        elif self.channel == NotificationChannel.SMS and not PHONE_INPUT_PATTERN.match(
            recipient
        ):
            errors.setdefault("recipient", []).append("Invalid phone number format")
        elif self.channel == NotificationChannel.WEBHOOK and not _is_webhook_url(
            recipient
        ):
            errors.setdefault("recipient", []).append("Invalid webhook URL")


class CancelNotificationCommand(Command):
    """Command to cancel a pending notification."""

    def __init__(self, notification_id: UUID):
        super().__init__()
        self.notification_id = notification_id
        self._freeze()

    def _validate_command(self) -> None:
        if is_missing_id(self.notification_id):
            raise ValidationError.from_fields(
                {"notification_id": ["NotificationId is required"]}
            )


class RetryNotificationCommand(Command):
    """Command to return a failed notification to pending."""

    def __init__(self, notification_id: UUID):
        super().__init__()
        self.notification_id = notification_id
        self._freeze()

    def _validate_command(self) -> None:
        if is_missing_id(self.notification_id):
            raise ValidationError.from_fields(
                {"notification_id": ["NotificationId is required"]}
            )


class CreateTemplateCommand(Command):
    """Command to create a new template."""

    def __init__(
        self,
        name: str,
        channel: NotificationChannel,
        body: str,
        subject: str | None = None,
    ):
        super().__init__()
        self.name = name
        self.channel = channel
        self.body = body
        self.subject = subject
        self._freeze()

    def _validate_command(self) -> None:
        errors: dict[str, list[str]] = {}

        if _is_blank(self.name):
            errors.setdefault("name", []).append("Name is required")
        elif len(self.name.strip()) > MAX_TEMPLATE_NAME_LENGTH:
            errors.setdefault("name", []).append(
                f"Name must not exceed {MAX_TEMPLATE_NAME_LENGTH} characters"
            )

        if not isinstance(self.channel, NotificationChannel):
            errors.setdefault("channel", []).append("Invalid notification channel")

        if _is_blank(self.body):
            errors.setdefault("body", []).append("Body is required")

        if self.subject is not None and len(self.subject) > MAX_SUBJECT_LENGTH:
            errors.setdefault("subject", []).append(
                f"Subject must not exceed {MAX_SUBJECT_LENGTH} characters"
            )

        _raise_for_errors(errors)


class UpdateTemplateContentCommand(Command):
    """Command to replace a template's body and subject."""

    def __init__(self, template_id: UUID, body: str, subject: str | None = None):
        super().__init__()
        self.template_id = template_id
        self.body = body
        self.subject = subject
        self._freeze()

    def _validate_command(self) -> None:
        errors: dict[str, list[str]] = {}

        if is_missing_id(self.template_id):
            errors.setdefault("template_id", []).append("TemplateId is required")

        if _is_blank(self.body):
            errors.setdefault("body", []).append("Body is required")

        if self.subject is not None and len(self.subject) > MAX_SUBJECT_LENGTH:
            errors.setdefault("subject", []).append(
                f"Subject must not exceed {MAX_SUBJECT_LENGTH} characters"
            )

        _raise_for_errors(errors)


class SetTemplateActiveCommand(Command):
    """Command to activate or deactivate a template."""

    def __init__(self, template_id: UUID, active: bool):
        super().__init__()
        self.template_id = template_id
        self.active = active
        self._freeze()

    def _validate_command(self) -> None:
        errors: dict[str, list[str]] = {}

        if is_missing_id(self.template_id):
            errors.setdefault("template_id", []).append("TemplateId is required")

        if not isinstance(self.active, bool):
            errors.setdefault("active", []).append("Active must be a boolean")

        _raise_for_errors(errors)


class RecordDeliveryAttemptCommand(Command):
    """Command to record the outcome of a delivery try."""

    def __init__(
        self,
        notification_id: UUID,
        attempt_number: int,
        succeeded: bool,
        error_message: str | None = None,
    ):
        super().__init__()
        self.notification_id = notification_id
        self.attempt_number = attempt_number
        self.succeeded = succeeded
        self.error_message = error_message
        self._freeze()

    def _validate_command(self) -> None:
        errors: dict[str, list[str]] = {}

        if is_missing_id(self.notification_id):
            errors.setdefault("notification_id", []).append(
                "NotificationId is required"
            )

        if not isinstance(self.attempt_number, int) or self.attempt_number < 1:
            errors.setdefault("attempt_number", []).append(
                "AttemptNumber must be at least 1"
            )

        if not self.succeeded and _is_blank(self.error_message):
            errors.setdefault("error_message", []).append(
                "ErrorMessage is required for a failed attempt"
            )

        _raise_for_errors(errors)


__all__ = [
    "CancelNotificationCommand",
    "CreateTemplateCommand",
    "RecordDeliveryAttemptCommand",
    "RetryNotificationCommand",
    "ScheduleNotificationCommand",
    "SetTemplateActiveCommand",
    "UpdateTemplateContentCommand",
]
