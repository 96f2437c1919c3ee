"""Enums read from configuration: deployment environment and log output."""

import logging
from enum import Enum, IntEnum


class Environment(Enum):
    """Where the service runs. Values are the accepted ``ENVIRONMENT`` strings."""

    DEVELOPMENT = "dev"
    TESTING = "test"
    STAGING = "staging"
    PRODUCTION = "prod"

    @property
    def is_production(self) -> bool:
        return self is Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self is Environment.TESTING


class LogLevel(IntEnum):
    """Log severities, ordered and numbered like the stdlib ``logging`` levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @property
    def level_name(self) -> str:
        return self.name

    @property
    def priority(self) -> int:
        return int(self)

    def to_logging_level(self) -> int:
        return self.priority


class LogFormat(Enum):
    JSON = "json"
    CONSOLE = "console"
    PLAIN = "plain"

    @property
    def is_structured(self) -> bool:
        """Machine-readable output."""
        return self is LogFormat.JSON
