"""In-process event bus.

Delivers domain events to subscribed handlers in subscription order.
A handler is any callable taking the event as its only argument; when it
returns an awaitable the bus awaits it. Subscribing to a base event class
also covers its subclasses::

    bus = InMemoryEventBus()
    bus.subscribe(NotificationEvent, audit_handler)
    await bus.publish_all(notification.clear_events())
"""

import inspect
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from notification_service.core.domain.contracts import IEventPublisher
from notification_service.core.errors import ValidationError
from notification_service.core.events.types import DomainEvent
from notification_service.core.logging import get_logger

logger = get_logger(__name__)

EventHandlerType = Callable[[DomainEvent], Any | Awaitable[Any]]


def _handler_name(handler: EventHandlerType) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus(IEventPublisher, ABC):
    """Publisher that also manages its own subscriptions."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        pass

    @abstractmethod
    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        pass

    @abstractmethod
    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        pass

    async def publish_all(self, events: list[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)


class InMemoryEventBus(EventBus):
    """
    Event bus living in the current process.

    By default a failing handler is logged and skipped so the remaining
    handlers still run. With ``raise_on_handler_error`` the first failure
    propagates to the publisher.
    """

    def __init__(self, raise_on_handler_error: bool = False):
        self._subscriptions: defaultdict[type[DomainEvent], list[EventHandlerType]] = (
            defaultdict(list)
        )
        self._raise_on_handler_error = raise_on_handler_error
        self._published_count = 0

    @property
    def published_count(self) -> int:
        return self._published_count

    @staticmethod
    def _check_subscription(
        event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """
        Raises:
            ValidationError: If ``event_type`` is not a DomainEvent class or
                ``handler`` cannot be called with a single event argument
        """
        if not (isinstance(event_type, type) and issubclass(event_type, DomainEvent)):
            raise ValidationError(
                f"Can only subscribe to DomainEvent subclasses, not {event_type!r}"
            )
        if not callable(handler):
            raise ValidationError(f"{handler!r} is not callable")

        try:
            parameters = inspect.signature(handler).parameters
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Cannot inspect handler {_handler_name(handler)}: {e}"
            ) from e

        if len(parameters) != 1:
            raise ValidationError(
                f"Handler {_handler_name(handler)} must take exactly one "
                f"argument (the event), it takes {len(parameters)}"
            )

    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Add ``handler`` for ``event_type``. Subscribing twice has no effect."""
        self._check_subscription(event_type, handler)

        handlers = self._subscriptions[event_type]
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(
                "Event handler subscribed",
                event_type=event_type.__name__,
                handler=_handler_name(handler),
            )

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        handlers = self._subscriptions.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            logger.debug(
                "Event handler unsubscribed",
                event_type=event_type.__name__,
                handler=_handler_name(handler),
            )

    def handlers_for(self, event: DomainEvent) -> list[EventHandlerType]:
        """Handlers for the event's class and its DomainEvent ancestors, deduplicated."""
        matched: list[EventHandlerType] = []
        for event_class in type(event).__mro__:
            if not issubclass(event_class, DomainEvent) or event_class is DomainEvent:
                continue
            matched.extend(
                handler
                for handler in self._subscriptions.get(event_class, ())
                if handler not in matched
            )
        return matched

    async def publish(self, event: DomainEvent) -> None:
        """
        Raises:
            ValidationError: If ``event`` is not a DomainEvent
        """
        if not isinstance(event, DomainEvent):
            raise ValidationError(f"Only domain events can be published, got {event!r}")

        self._published_count += 1
        handlers = self.handlers_for(event)
        logger.debug(
            "Publishing event",
            event_type=event.event_type,
            event_id=str(event.event_id),
            handlers=len(handlers),
        )

        for handler in handlers:
            await self._dispatch(handler, event)

    async def _dispatch(self, handler: EventHandlerType, event: DomainEvent) -> None:
        try:
            outcome = handler(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.exception(
                "Event handler failed",
                handler=_handler_name(handler),
                event_type=event.event_type,
                event_id=str(event.event_id),
                error=str(e),
            )
            if self._raise_on_handler_error:
                raise


__all__ = ["EventBus", "EventHandlerType", "InMemoryEventBus"]
