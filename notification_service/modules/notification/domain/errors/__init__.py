"""Notification domain errors.

Three families of failures are raised by the notification domain:

- validation errors: malformed input at construction or call time; these
  subclass ``core.errors.ValidationError``
- state errors: an operation invoked in the wrong lifecycle state; these
  subclass ``InvalidStateError`` and leave the entity unchanged
- lookup errors: a missing placeholder, an unknown channel or priority
"""

from typing import Any
from uuid import UUID

from notification_service.core.errors import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)


class NotificationError(DomainError):
    """Base error for notification domain."""

    default_code = "NOTIFICATION_ERROR"


# =====================================================================================
# VALIDATION ERRORS
# =====================================================================================


class InvalidFormatError(ValidationError):
    """Raised when a value does not match the format its channel requires."""

    default_code = "INVALID_FORMAT"

    def __init__(self, value: Any, expected: str, field: str = "value", **kwargs):
        super().__init__(
            f"Invalid {expected} format: {value}",
            field=field,
            **kwargs,
        )
        self.details["expected"] = expected


class EmptyValueError(ValidationError):
    """Raised when a recipient value is blank."""

    default_code = "EMPTY_VALUE"

    def __init__(self, field: str = "value", **kwargs):
        super().__init__(f"{field} cannot be empty", field=field, **kwargs)


class UnsupportedSchemeError(ValidationError):
    """Raised when a webhook URL uses a scheme other than http or https."""

    default_code = "UNSUPPORTED_SCHEME"

    def __init__(self, scheme: str, **kwargs):
        super().__init__(
            f"Webhook URL must use HTTP or HTTPS, got '{scheme}'",
            field="webhook_url",
            **kwargs,
        )
        self.details["scheme"] = scheme


class EmptyFieldError(ValidationError):
    """Raised when a required text field is blank."""

    default_code = "EMPTY_FIELD"

    def __init__(self, field: str, **kwargs):
        super().__init__(f"{field} cannot be empty", field=field, **kwargs)


class EmptyContentError(EmptyFieldError):
    """Raised when notification content is blank."""

    default_code = "EMPTY_CONTENT"

    def __init__(self, **kwargs):
        super().__init__("content", **kwargs)


class MissingSubjectError(ValidationError):
    """Raised when email content has no subject."""

    default_code = "MISSING_SUBJECT"

    def __init__(self, **kwargs):
        super().__init__(
            "Subject is required for email notifications", field="subject", **kwargs
        )


class NullRecipientError(ValidationError):
    """Raised when a notification is created without a recipient."""

    default_code = "NULL_RECIPIENT"

    def __init__(self, **kwargs):
        super().__init__("Recipient cannot be empty", field="recipient", **kwargs)


class EmptyReasonError(ValidationError):
    """Raised when a failure is recorded without a reason."""

    default_code = "EMPTY_REASON"

    def __init__(self, **kwargs):
        super().__init__(
            "Error message cannot be empty", field="error_message", **kwargs
        )


class PastScheduleError(ValidationError):
    """Raised when a notification is scheduled at or before the current time."""

    default_code = "PAST_SCHEDULE"

    def __init__(self, scheduled_at: Any, **kwargs):
        super().__init__(
            f"Scheduled time must be in the future, got {scheduled_at}",
            field="scheduled_at",
            **kwargs,
        )


class EmptyNotificationIdError(ValidationError):
    """Raised when a delivery attempt is created without a notification id."""

    default_code = "EMPTY_NOTIFICATION_ID"

    def __init__(self, **kwargs):
        super().__init__(
            "Notification id cannot be empty", field="notification_id", **kwargs
        )


class InvalidAttemptNumberError(ValidationError):
    """Raised when an attempt number is below one."""

    default_code = "INVALID_ATTEMPT_NUMBER"

    def __init__(self, attempt_number: Any, **kwargs):
        super().__init__(
            f"Attempt number must be at least 1, got {attempt_number}",
            field="attempt_number",
            **kwargs,
        )


# =====================================================================================
# LOOKUP ERRORS
# =====================================================================================


class UnknownChannelError(NotificationError):
    """Raised when a channel value is not recognized."""

    default_code = "UNKNOWN_CHANNEL"

    def __init__(self, channel: Any, **kwargs):
        super().__init__(
            f"Unknown channel: {channel}", details={"channel": str(channel)}, **kwargs
        )


class UnknownPriorityError(NotificationError):
    """Raised when a priority has no retry policy."""

    default_code = "UNKNOWN_PRIORITY"

    def __init__(self, priority: Any, **kwargs):
        super().__init__(
            f"Unknown priority: {priority}", details={"priority": str(priority)}, **kwargs
        )


class MissingPlaceholderError(NotificationError):
    """Raised when template data lacks a value for a placeholder."""

    default_code = "MISSING_PLACEHOLDER"

    def __init__(self, placeholder: str, **kwargs):
        super().__init__(
            f"Missing required placeholder '{placeholder}' in template data",
            details={"placeholder": placeholder},
            **kwargs,
        )
        self.placeholder = placeholder


# =====================================================================================
# STATE ERRORS
# =====================================================================================


class InvalidStateError(NotificationError):
    """Raised when an operation is not allowed in the current state."""

    default_code = "INVALID_STATE"
    status_code = 409

    def __init__(self, message: str, current_state: Any = None, **kwargs):
        details = kwargs.pop("details", {})
        if current_state is not None:
            details["current_state"] = getattr(current_state, "value", current_state)
        super().__init__(message, details=details, **kwargs)


class InactiveTemplateError(InvalidStateError):
    """Raised when rendering a deactivated template."""

    default_code = "INACTIVE_TEMPLATE"

    def __init__(self, template_name: str, **kwargs):
        super().__init__(
            f"Cannot render inactive template '{template_name}'. Activate it first.",
            details={"template_name": template_name},
            **kwargs,
        )


# =====================================================================================
# PERSISTENCE-FACING ERRORS
# =====================================================================================


class NotificationNotFoundError(NotFoundError):
    """Raised when a notification is not found."""

    def __init__(self, notification_id: UUID, **kwargs):
        super().__init__(resource="Notification", identifier=notification_id, **kwargs)


class TemplateNotFoundError(NotFoundError):
    """Raised when a template is not found by id or name."""

    def __init__(self, identifier: UUID | str, **kwargs):
        super().__init__(resource="Template", identifier=identifier, **kwargs)


class TemplateNameConflictError(ConflictError):
    """Raised when a template name is already taken."""

    default_code = "TEMPLATE_NAME_CONFLICT"

    def __init__(self, name: str, **kwargs):
        super().__init__(
            f"Template with name '{name}' already exists",
            resource="Template",
            **kwargs,
        )
        self.details["name"] = name


class ConcurrencyConflictError(ConflictError):
    """Raised when a stored aggregate changed since it was loaded."""

    default_code = "CONCURRENCY_CONFLICT"
    retryable = True

    def __init__(self, resource: str, identifier: Any, expected_version: int, **kwargs):
        super().__init__(
            f"{resource} {identifier} was modified concurrently "
            f"(expected version {expected_version})",
            resource=resource,
            **kwargs,
        )
        self.details.update(
            {"identifier": str(identifier), "expected_version": expected_version}
        )


__all__ = [
    "ConcurrencyConflictError",
    "EmptyContentError",
    "EmptyFieldError",
    "EmptyNotificationIdError",
    "EmptyReasonError",
    "EmptyValueError",
    "InactiveTemplateError",
    "InvalidAttemptNumberError",
    "InvalidFormatError",
    "InvalidStateError",
    "MissingPlaceholderError",
    "MissingSubjectError",
    "NotificationError",
    "NotificationNotFoundError",
    "NullRecipientError",
    "PastScheduleError",
    "TemplateNameConflictError",
    "TemplateNotFoundError",
    "UnknownChannelError",
    "UnknownPriorityError",
]
