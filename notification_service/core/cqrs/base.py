"""Commands, queries, their handlers and the buses that route between them.

A message is built, validated and frozen in its constructor; after that only
tracking metadata (correlation id, acting user) may change. Each message type
has exactly one handler, registered on the matching bus::

    bus = CommandBus()
    bus.register(CancelNotificationCommandHandler(uow_factory))
    cancelled = await bus.execute(CancelNotificationCommand(notification_id))
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from notification_service.core.errors import ConfigurationError
from notification_service.core.logging import get_logger
from notification_service.utils.date import utc_now

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound="Command")
TQuery = TypeVar("TQuery", bound="Query")
TResult = TypeVar("TResult")


def _serialize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class _Message(ABC):
    """Immutability and tracking metadata shared by commands and queries."""

    _mutable_fields = frozenset({"correlation_id", "user_id"})

    def __init__(self):
        self._frozen = False
        self.message_id: UUID = uuid4()
        self.created_at: datetime = utc_now()
        self.correlation_id: str | None = None
        self.user_id: UUID | None = None

    def _validate(self) -> None:
        pass

    def _freeze(self) -> None:
        """Validate, then reject any further attribute changes."""
        self._validate()
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False) and name not in self._mutable_fields:
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def set_metadata(
        self, correlation_id: str | None = None, user_id: UUID | None = None
    ) -> None:
        if correlation_id is not None:
            self.correlation_id = correlation_id
        if user_id is not None:
            self.user_id = user_id

    def to_dict(self) -> dict[str, Any]:
        data = {
            key: _serialize(value)
            for key, value in vars(self).items()
            if not key.startswith("_")
        }
        data["message_type"] = type(self).__name__
        return data

    def __eq__(self, other: Any) -> bool:
        return type(other) is type(self) and other.message_id == self.message_id

    def __hash__(self) -> int:
        return hash(self.message_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.message_id})"


class Command(_Message):
    """
    An intent to change state.

    Subclasses assign their fields, then call ``self._freeze()``, which runs
    ``_validate_command``.
    """

    @property
    def command_id(self) -> UUID:
        return self.message_id

    def _validate(self) -> None:
        self._validate_command()

    def _validate_command(self) -> None:
        """
        Raises:
            ValidationError: If the command's fields are invalid
        """


class Query(_Message):
    """A request for information. Validated by ``_validate_query``."""

    @property
    def query_id(self) -> UUID:
        return self.message_id

    def _validate(self) -> None:
        self._validate_query()

    def _validate_query(self) -> None:
        pass


# =====================================================================================
# HANDLERS
# =====================================================================================


class _TrackedHandler(ABC):
    """Times every execution and counts successes and failures."""

    _kind = "message"

    def __init__(self):
        self._execution_count = 0
        self._error_count = 0
        self._total_execution_time = 0.0

    async def _run_tracked(self, message: _Message) -> Any:
        fields = {
            f"{self._kind}_type": type(message).__name__,
            f"{self._kind}_id": str(message.message_id),
        }
        logger.debug(f"Executing {self._kind}", handler=type(self).__name__, **fields)
        started = time.perf_counter()

        try:
            result = await self.handle(message)
        except Exception as e:
            self._error_count += 1
            self._total_execution_time += time.perf_counter() - started
            logger.exception(
                f"{self._kind.capitalize()} execution failed", error=str(e), **fields
            )
            raise

        elapsed = time.perf_counter() - started
        self._execution_count += 1
        self._total_execution_time += elapsed
        logger.info(
            f"{self._kind.capitalize()} executed successfully",
            execution_time=elapsed,
            **fields,
        )
        return result

    @abstractmethod
    async def handle(self, message: Any) -> Any:
        """Run the use case for ``message``."""


class CommandHandler(_TrackedHandler, Generic[TCommand, TResult]):
    """
    Handles one command type.

    Usage Example:
        class CancelNotificationCommandHandler(
            CommandHandler[CancelNotificationCommand, bool]
        ):
            async def handle(self, command): ...

            @property
            def command_type(self):
                return CancelNotificationCommand
    """

    _kind = "command"

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """
        Raises:
            ServiceError: If the use case refuses or fails
        """

    @property
    @abstractmethod
    def command_type(self) -> type[TCommand]:
        """The command class this handler accepts."""

    async def execute_with_tracking(self, command: TCommand) -> TResult:
        return await self._run_tracked(command)

    def get_performance_stats(self) -> dict[str, Any]:
        runs = self._execution_count + self._error_count
        return {
            "handler_class": type(self).__name__,
            "command_type": self.command_type.__name__,
            "execution_count": self._execution_count,
            "error_count": self._error_count,
            "average_execution_time": self._total_execution_time / max(runs, 1),
        }


class QueryHandler(_TrackedHandler, Generic[TQuery, TResult]):
    """Handles one query type. Query handlers never change state."""

    _kind = "query"

    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        pass

    @property
    @abstractmethod
    def query_type(self) -> type[TQuery]:
        """The query class this handler accepts."""

    async def execute_with_tracking(self, query: TQuery) -> TResult:
        return await self._run_tracked(query)


# =====================================================================================
# BUSES
# =====================================================================================


class _Bus:
    _kind = "message"

    def __init__(self):
        self._handlers: dict[type, Any] = {}

    def _handled_type(self, handler: Any) -> type:
        raise NotImplementedError

    def register(self, handler: Any) -> None:
        """
        Raises:
            ConfigurationError: If the message type already has a handler
        """
        message_type = self._handled_type(handler)
        if message_type in self._handlers:
            raise ConfigurationError(
                f"Handler already registered for {self._kind} type "
                f"{message_type.__name__}"
            )

        self._handlers[message_type] = handler
        logger.debug(
            f"{self._kind.capitalize()} handler registered",
            message_type=message_type.__name__,
            handler=type(handler).__name__,
        )

    async def execute(self, message: _Message) -> Any:
        """
        Raises:
            ConfigurationError: If no handler is registered for the message type
        """
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ConfigurationError(
                f"No handler registered for {self._kind} type {type(message).__name__}"
            )
        return await handler.execute_with_tracking(message)


class CommandBus(_Bus):
    """Routes each command to its registered handler."""

    _kind = "command"

    def _handled_type(self, handler: CommandHandler) -> type[Command]:
        return handler.command_type


class QueryBus(_Bus):
    """Routes each query to its registered handler."""

    _kind = "query"

    def _handled_type(self, handler: QueryHandler) -> type[Query]:
        return handler.query_type


__all__ = [
    "Command",
    "CommandBus",
    "CommandHandler",
    "Query",
    "QueryBus",
    "QueryHandler",
]
