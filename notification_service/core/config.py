"""Configuration for the notification service.

Settings come from the process environment, optionally seeded from a dotenv
file. Variables already set in the environment win over the file::

    settings = get_settings()
    configure_logging(settings.log_config())
    engine = create_engine(settings.database)
"""

import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

from notification_service.core.enums import Environment, LogFormat, LogLevel
from notification_service.core.errors import ConfigurationError
from notification_service.core.logging import LogConfig

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

ASYNC_DRIVERS = ("postgresql+asyncpg://", "sqlite+aiosqlite://")
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./notifications.db"

_BOOLEANS = {
    "true": True, "1": True, "yes": True, "on": True,
    "false": False, "0": False, "no": False, "off": False,
}  # fmt: skip
_URL_PASSWORD = re.compile(r"(?P<head>://[^:/@]+):[^@]*@")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """``KEY=value`` pair from one dotenv line, or None for blanks and comments."""
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


class EnvironmentLoader:
    """
    Typed access to environment variables.

    Every getter returns ``default`` when the variable is unset, and raises
    ``ConfigurationError`` when it is required but unset or cannot be
    converted.
    """

    def __init__(self, env_file: str = ".env"):
        self.env_file = env_file
        self._load_env_file()

    def _load_env_file(self) -> None:
        if not self.env_file:
            return

        path = Path(self.env_file)
        if not path.is_file():
            return

        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

        for pair in filter(None, map(_parse_env_line, lines)):
            os.environ.setdefault(*pair)

    def _read(
        self,
        key: str,
        convert: Callable[[str], T],
        default: T | None,
        required: bool,
    ) -> T | None:
        raw = os.environ.get(key)
        if raw is None:
            if required:
                raise ConfigurationError(f"{key} is required", config_key=key)
            return default

        try:
            return convert(raw)
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"{key}: {e}", config_key=key) from e

    def get_string(
        self, key: str, default: str | None = None, required: bool = False
    ) -> str | None:
        return self._read(key, str, default, required)

    def get_integer(
        self,
        key: str,
        default: int | None = None,
        required: bool = False,
        min_value: int | None = None,
    ) -> int | None:
        def convert(raw: str) -> int:
            try:
                value = int(raw)
            except ValueError:
                raise ValueError(f"expected an integer, got {raw!r}") from None
            if min_value is not None and value < min_value:
                raise ValueError(f"must be >= {min_value}, got {value}")
            return value

        return self._read(key, convert, default, required)

    def get_boolean(
        self, key: str, default: bool | None = None, required: bool = False
    ) -> bool | None:
        def convert(raw: str) -> bool:
            try:
                return _BOOLEANS[raw.strip().lower()]
            except KeyError:
                raise ValueError(f"expected a boolean, got {raw!r}") from None

        return self._read(key, convert, default, required)

    def get_enum(
        self,
        key: str,
        enum_class: type[E],
        default: E | None = None,
        required: bool = False,
    ) -> E | None:
        """Match the variable against member values first, then member names."""

        def convert(raw: str) -> E:
            by_value = {str(member.value): member for member in enum_class}
            if raw in by_value:
                return by_value[raw]
            if raw.upper() in enum_class.__members__:
                return enum_class[raw.upper()]

            allowed = ", ".join(name.lower() for name in enum_class.__members__)
            raise ValueError(f"expected one of {allowed}, got {raw!r}")

        return self._read(key, convert, default, required)


@dataclass
class DatabaseConfig:
    """
    Connection settings for the async SQLAlchemy engine.

    Only async drivers are accepted. Pool sizing is ignored for SQLite,
    which does not use a queue pool.
    """

    url: str
    environment: Environment = Environment.DEVELOPMENT
    echo: bool = False
    pool_pre_ping: bool = True
    pool_size: int = 10
    max_overflow: int = 20

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: For a missing or synchronous URL, or invalid pool sizes
        """
        if not isinstance(self.url, str) or not self.url:
            raise ConfigurationError(
                "Database URL is required and must be a string",
                config_key="DATABASE_URL",
            )

        if not self.url.startswith(ASYNC_DRIVERS):
            raise ConfigurationError(
                f"Database URL must use an async driver ({', '.join(ASYNC_DRIVERS)})",
                config_key="DATABASE_URL",
            )

        if self.pool_size < 1:
            raise ConfigurationError(
                "Pool size must be at least 1", config_key="DATABASE_POOL_SIZE"
            )
        if self.max_overflow < 0:
            raise ConfigurationError(
                "Max overflow cannot be negative", config_key="DATABASE_MAX_OVERFLOW"
            )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def safe_url(self) -> str:
        """The URL with any password replaced by ``***``."""
        return _URL_PASSWORD.sub(r"\g<head>:***@", self.url, count=1)

    def get_engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"echo": self.echo, "pool_pre_ping": self.pool_pre_ping}
        if not self.is_sqlite:
            kwargs.update(pool_size=self.pool_size, max_overflow=self.max_overflow)
        return kwargs

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.safe_url,
            "environment": self.environment.value,
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
        }


class Settings:
    """
    Process-wide settings assembled from the environment.

    Production refuses ``DEBUG`` and ``LOG_LEVEL=debug``.
    """

    def __init__(self, env_file: str = ".env"):
        self.env_loader = EnvironmentLoader(env_file)
        env = self.env_loader

        self.app_name = env.get_string("APP_NAME", "Notification Service")
        self.environment = env.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.debug = env.get_boolean("DEBUG", False)
        self.log_level = env.get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO)
        self.log_format = env.get_enum("LOG_FORMAT", LogFormat, LogFormat.JSON)

        self.database = DatabaseConfig(
            url=env.get_string("DATABASE_URL", DEFAULT_DATABASE_URL),
            environment=self.environment,
            echo=env.get_boolean("DATABASE_ECHO", False),
            pool_pre_ping=env.get_boolean("DATABASE_POOL_PRE_PING", True),
            pool_size=env.get_integer("DATABASE_POOL_SIZE", 10, min_value=1),
            max_overflow=env.get_integer("DATABASE_MAX_OVERFLOW", 20, min_value=0),
        )

        self._check_production_safety()

    def _check_production_safety(self) -> None:
        if not self.environment.is_production:
            return

        if self.debug:
            raise ConfigurationError(
                "Debug mode must be off in production", config_key="DEBUG"
            )
        if self.log_level == LogLevel.DEBUG:
            raise ConfigurationError(
                "Debug logging must be off in production", config_key="LOG_LEVEL"
            )

    def log_config(self) -> LogConfig:
        return LogConfig(
            level=self.log_level, format=self.log_format, environment=self.environment
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "app_name": self.app_name,
            "environment": self.environment.value,
            "debug": self.debug,
            "log_level": self.log_level.level_name,
            "log_format": self.log_format.value,
            "database": self.database.to_dict(),
        }


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """Cached ``Settings``. Call ``get_settings.cache_clear()`` after changing the environment."""
    return Settings(env_file)


__all__ = [
    "DatabaseConfig",
    "EnvironmentLoader",
    "Settings",
    "get_settings",
]
