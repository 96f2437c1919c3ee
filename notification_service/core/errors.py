"""Error hierarchy shared by every layer of the notification service.

Layers raise the base class matching where the failure originates:

- ``DomainError``: a business rule refused the operation
- ``ApplicationError``: bad input or a missing resource at the use-case level
- ``InfrastructureError``: storage, transport or configuration trouble

Every error logs itself once on construction through the standard library
logger ``notification_service.errors.<ClassName>``.
"""

import logging
import time
import uuid
from enum import Enum
from typing import Any

REDACTED = "***REDACTED***"
_SENSITIVE_KEY_PARTS = ("password", "token", "secret", "key", "credential")


class ErrorSeverity(Enum):
    """How loudly an error is logged."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return _SEVERITY_LOG_LEVELS[self]


_SEVERITY_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    redacted: dict[str, Any] = {}
    for key, value in details.items():
        if any(part in key.lower() for part in _SENSITIVE_KEY_PARTS):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = _redact(value)
        else:
            redacted[key] = value
    return redacted


class ServiceError(Exception):
    """
    Base exception for all notification service errors.

    Class attributes give the defaults a subclass maps to: machine code,
    HTTP-style status, severity and whether the caller may retry.
    ``cause`` becomes the exception's ``__cause__``.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
        recovery_hint: str | None = None,
        context: dict[str, Any] | None = None,
        correlation_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details or {})
        self.user_message = user_message or message
        self.recovery_hint = recovery_hint
        self.context = dict(context or {})

        self.error_id = str(uuid.uuid4())
        self.correlation_id = correlation_id or self.error_id
        self.timestamp = time.time()

        if cause is not None:
            self.__cause__ = cause

        self._log_error()

    def _log_error(self) -> None:
        logging.getLogger(f"notification_service.errors.{type(self).__name__}").log(
            self.severity.log_level,
            "%s: %s",
            self.code,
            self.message,
            extra={
                "error_id": self.error_id,
                "correlation_id": self.correlation_id,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "status_code": self.status_code,
                "details": self._sanitize_details(self.details),
            },
        )

    def _sanitize_details(self, details: dict[str, Any]) -> dict[str, Any]:
        """Copy of ``details`` with credential-like keys redacted."""
        return _redact(details) if details else {}

    def to_dict(
        self, include_details: bool = True, include_internal: bool = False
    ) -> dict[str, Any]:
        """
        Serialize the error for API responses or logs.

        Args:
            include_details: Include public details (keys starting with ``_`` are hidden)
            include_internal: Include ids, severity, the internal message and context
        """
        data: dict[str, Any] = {
            "error": self.code,
            "message": self.user_message,
            "timestamp": self.timestamp,
        }

        public_details = {
            key: value for key, value in self.details.items() if not key.startswith("_")
        }
        if include_details and public_details:
            data["details"] = public_details
        if self.recovery_hint:
            data["recovery_hint"] = self.recovery_hint
        if self.retryable:
            data["retryable"] = True

        if include_internal:
            data["error_id"] = self.error_id
            data["correlation_id"] = self.correlation_id
            data["severity"] = self.severity.value
            data["internal_message"] = self.message
            data["context"] = self.context

        return data

    def with_context(self, **context: Any) -> "ServiceError":
        self.context.update(context)
        return self

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class DomainError(ServiceError):
    default_code = "DOMAIN_ERROR"
    status_code = 400


class ApplicationError(ServiceError):
    default_code = "APPLICATION_ERROR"
    status_code = 400


class InfrastructureError(ServiceError):
    """Failure below the domain; usually transient."""

    default_code = "INFRASTRUCTURE_ERROR"
    status_code = 500
    severity = ErrorSeverity.HIGH
    retryable = True


class ValidationError(ApplicationError):
    """
    Invalid input.

    Either names a single ``field`` or carries ``field_errors`` mapping each
    field to all of its messages.
    """

    default_code = "VALIDATION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        field: str | None = None,
        field_errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field
        if field_errors:
            self.details["field_errors"] = field_errors

    @property
    def field(self) -> str | None:
        return self.details.get("field")

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return self.details.get("field_errors", {})

    @classmethod
    def from_fields(
        cls, field_errors: dict[str, list[str]], **kwargs: Any
    ) -> "ValidationError":
        error_count = sum(map(len, field_errors.values()))
        return cls(
            f"Validation failed for {len(field_errors)} field(s) "
            f"with {error_count} error(s)",
            field_errors=field_errors,
            **kwargs,
        )


class NotFoundError(ApplicationError):
    default_code = "NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        kwargs.setdefault("user_message", f"The requested {resource.lower()} was not found")
        super().__init__(f"{resource} not found: {identifier}", **kwargs)
        self.details["resource"] = resource
        self.details["identifier"] = str(identifier)


class ConflictError(ApplicationError):
    """The operation clashes with the current state of a stored resource."""

    default_code = "CONFLICT"
    status_code = 409

    def __init__(
        self, message: str, resource: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        if resource:
            self.details["resource"] = resource


class ConfigurationError(InfrastructureError):
    """Invalid or missing configuration. Retrying will not help."""

    default_code = "CONFIGURATION_ERROR"
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(
        self, message: str, config_key: str | None = None, **kwargs: Any
    ) -> None:
        kwargs.setdefault("user_message", "Service configuration issue")
        super().__init__(message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ErrorSeverity",
    "InfrastructureError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
]
