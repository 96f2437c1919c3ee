# ruff: noqa: A005
"""Logging for the notification service.

Every module logs through ``get_logger(__name__)``. Records pass a chain of
filters before structlog renders them, so recipient addresses and
credentials never reach the output::

    logger = get_logger(__name__)
    logger.info("Notification sent", notification_id=str(notification.id))

``configure_logging`` installs the processor chain; the test suite calls it
with ``Environment.TESTING`` to get quiet plain-text output.
"""

import logging
import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

from notification_service.core.enums import Environment, LogFormat, LogLevel
from notification_service.core.errors import ConfigurationError

MIN_MESSAGE_LENGTH = 1000

# Silenced to WARNING in production.
_CHATTY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")


@dataclass
class LogConfig:
    """
    Settings for the logging pipeline.

    The environment overrides explicit values where it matters: tests log
    plain text at WARNING, production renders JSON and never logs at DEBUG.

    Usage Example:
        configure_logging(LogConfig(level=LogLevel.INFO, environment=Environment.PRODUCTION))
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    environment: Environment = Environment.DEVELOPMENT

    enable_timestamps: bool = True
    enable_caller_info: bool = False
    enable_exception_info: bool = True
    enable_sensitive_data_filtering: bool = True
    truncate_long_messages: bool = True
    max_message_length: int = 10000

    def __post_init__(self):
        self.validate()
        self.apply_environment_defaults()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: For an unknown level or format, or a message
                limit below ``MIN_MESSAGE_LENGTH``
        """
        if not isinstance(self.level, LogLevel):
            raise ConfigurationError(
                f"Unsupported log level {self.level!r}", config_key="LOG_LEVEL"
            )

        if not isinstance(self.format, LogFormat):
            raise ConfigurationError(
                f"Unsupported log format {self.format!r}", config_key="LOG_FORMAT"
            )

        if self.max_message_length < MIN_MESSAGE_LENGTH:
            raise ConfigurationError(
                f"max_message_length must be at least {MIN_MESSAGE_LENGTH}, "
                f"got {self.max_message_length}",
                config_key="LOG_MAX_MESSAGE_LENGTH",
            )

    def apply_environment_defaults(self) -> None:
        if self.environment.is_testing:
            self.level = LogLevel.WARNING
            self.format = LogFormat.PLAIN

        elif self.environment.is_production:
            self.format = LogFormat.JSON
            self.enable_caller_info = False
            self.enable_sensitive_data_filtering = True
            self.level = max(self.level, LogLevel.INFO, key=lambda lvl: lvl.priority)

        elif self.environment == Environment.DEVELOPMENT:
            self.format = LogFormat.CONSOLE
            self.enable_caller_info = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.level_name,
            "format": self.format.value,
            "environment": self.environment.value,
            "caller_info": self.enable_caller_info,
            "sensitive_data_filtering": self.enable_sensitive_data_filtering,
            "max_message_length": self.max_message_length,
        }


# =====================================================================================
# RECORD FILTERS
# =====================================================================================


class LogFilter(ABC):
    """A transformation applied to each record before it is rendered."""

    @abstractmethod
    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Return the record to pass on. ``record`` itself is left untouched."""

    def should_skip(self, record: dict[str, Any]) -> bool:
        return False


class SensitiveDataFilter(LogFilter):
    """
    Masks credentials and contact details.

    A field whose name looks like a credential is replaced as a whole. In
    every other string value, email addresses and E.164 phone numbers are
    masked in place. Nested dicts are walked recursively.
    """

    FIELD_NAME = re.compile(
        r"password|token|secret|credential|authorization|api_?key", re.IGNORECASE
    )
    CONTACT_VALUE = re.compile(
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b|\+[1-9]\d{6,14}\b"
    )

    def __init__(self, mask_char: str = "*", preserve_length: bool = False):
        self.mask_char = mask_char
        self.preserve_length = preserve_length

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        return {key: self._clean(key, value) for key, value in record.items()}

    def _clean(self, key: str, value: Any) -> Any:
        if self.FIELD_NAME.search(key):
            return self.mask(value)
        if isinstance(value, dict):
            return self.filter(value)
        if isinstance(value, str):
            return self.CONTACT_VALUE.sub(lambda match: self.mask(match.group()), value)
        return value

    def mask(self, value: Any) -> str | None:
        if value is None:
            return None
        if self.preserve_length:
            return self.mask_char * len(str(value))
        return f"{self.mask_char * 3}[MASKED]"


class MessageLengthFilter(LogFilter):
    """Cuts messages longer than ``max_length`` and records the original size."""

    def __init__(
        self, max_length: int = 10000, truncation_suffix: str = "... [TRUNCATED]"
    ):
        self.max_length = max_length
        self.truncation_suffix = truncation_suffix

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        message = record.get("message")
        if not isinstance(message, str) or len(message) <= self.max_length:
            return dict(record)

        keep = self.max_length - len(self.truncation_suffix)
        return {
            **record,
            "message": message[:keep] + self.truncation_suffix,
            "original_message_length": len(message),
            "message_truncated": True,
        }


# =====================================================================================
# LOGGERS
# =====================================================================================


class StructuredLogger:
    """
    Facade over a structlog logger.

    Fields are passed as keyword arguments. Records below the configured
    level are dropped before any filter runs.
    """

    def __init__(self, name: str, config: LogConfig):
        self.name = name
        self.config = config
        self.filters = self._build_filters(config)

        self._logger = structlog.get_logger(name)
        self._log_count = 0
        self._error_count = 0

    @staticmethod
    def _build_filters(config: LogConfig) -> list[LogFilter]:
        filters: list[LogFilter] = []
        if config.enable_sensitive_data_filtering:
            filters.append(SensitiveDataFilter())
        if config.truncate_long_messages:
            filters.append(MessageLengthFilter(config.max_message_length))
        return filters

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.ERROR, message, fields)

    def critical(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.CRITICAL, message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR with the traceback of the exception being handled."""
        self._emit(LogLevel.ERROR, message, {**fields, "exc_info": True})

    def _emit(self, level: LogLevel, message: str, fields: dict[str, Any]) -> None:
        if level.priority < self.config.level.priority:
            return

        record = {"message": message, **fields}
        for log_filter in self.filters:
            if log_filter.should_skip(record):
                return
            record = log_filter.filter(record)

        event = record.pop("message")
        getattr(self._logger, level.level_name.lower())(event, **record)

        self._log_count += 1
        if level.priority >= LogLevel.ERROR.priority:
            self._error_count += 1

    def get_stats(self) -> dict[str, Any]:
        return {
            "logger_name": self.name,
            "log_count": self._log_count,
            "error_count": self._error_count,
        }


class LoggerFactory:
    """Installs the structlog pipeline once and caches loggers by name."""

    def __init__(self, config: LogConfig):
        self.config = config
        self._loggers: dict[str, StructuredLogger] = {}
        self._configured = False

    def _renderer(self):
        if self.config.format.is_structured:
            return structlog.processors.JSONRenderer()
        if self.config.format == LogFormat.CONSOLE:
            return structlog.dev.ConsoleRenderer(colors=False)
        return structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"], drop_missing=True
        )

    def _processors(self) -> list:
        processors = [
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
        ]

        if self.config.enable_timestamps:
            processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

        if self.config.enable_caller_info:
            callsite = structlog.processors.CallsiteParameter
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    [callsite.FILENAME, callsite.LINENO, callsite.FUNC_NAME]
                )
            )

        if self.config.enable_exception_info:
            processors.append(structlog.processors.StackInfoRenderer())
            processors.append(structlog.processors.format_exc_info)

        processors.append(structlog.processors.UnicodeDecoder())
        processors.append(self._renderer())
        return processors

    def configure_logging(self) -> None:
        """Configure structlog and the stdlib root logger. Runs once per factory."""
        if self._configured:
            return

        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.config.level.to_logging_level(),
        )

        if self.config.environment.is_production:
            for name in _CHATTY_LOGGERS:
                logging.getLogger(name).setLevel(logging.WARNING)

        self._configured = True

    def get_logger(self, name: str) -> StructuredLogger:
        self.configure_logging()
        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, self.config)
        return self._loggers[name]


_logger_factory: LoggerFactory | None = None


def configure_logging(config: LogConfig | None = None) -> None:
    """Replace the process-wide logger factory (default: ``LogConfig()``)."""
    global _logger_factory  # noqa: PLW0603

    _logger_factory = LoggerFactory(config or LogConfig())
    _logger_factory.configure_logging()


def get_logger(name: str) -> StructuredLogger:
    if _logger_factory is None:
        configure_logging()
    return _logger_factory.get_logger(name)


def log_context(**fields: Any) -> None:
    """Bind fields to every record logged from the current context."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "LogConfig",
    "LogFilter",
    "LoggerFactory",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "StructuredLogger",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_context",
]
