"""Notification module dependency configuration.

Wires the command and query handlers to a unit of work factory and
registers them on fresh buses.
"""

from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notification_service.core.cqrs.base import CommandBus, QueryBus
from notification_service.core.domain.contracts import IEventPublisher
from notification_service.core.logging import get_logger
from notification_service.modules.notification.application.commands.handlers import (
    CancelNotificationCommandHandler,
    CreateTemplateCommandHandler,
    RecordDeliveryAttemptCommandHandler,
    RetryNotificationCommandHandler,
    ScheduleNotificationCommandHandler,
    SetTemplateActiveCommandHandler,
    UnitOfWorkFactory,
    UpdateTemplateContentCommandHandler,
)
from notification_service.modules.notification.application.queries.handlers import (
    GetDeliveryAttemptsQueryHandler,
    GetNotificationByIdQueryHandler,
    GetNotificationsByStatusQueryHandler,
    GetPendingNotificationsQueryHandler,
    RenderTemplateQueryHandler,
)
from notification_service.modules.notification.infrastructure.unit_of_work import (
    SqlAlchemyUnitOfWork,
)

logger = get_logger(__name__)


def sqlalchemy_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
    event_publisher: IEventPublisher | None = None,
) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Build a factory producing a fresh unit of work per call."""

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory, event_publisher)

    return factory


def build_command_bus(uow_factory: UnitOfWorkFactory) -> CommandBus:
    """Create a command bus with every notification command handler."""
    bus = CommandBus()
    for handler_class in (
        ScheduleNotificationCommandHandler,
        CancelNotificationCommandHandler,
        RetryNotificationCommandHandler,
        CreateTemplateCommandHandler,
        UpdateTemplateContentCommandHandler,
        SetTemplateActiveCommandHandler,
        RecordDeliveryAttemptCommandHandler,
    ):
        bus.register(handler_class(uow_factory))

    logger.debug("Notification command handlers registered")
    return bus


def build_query_bus(uow_factory: UnitOfWorkFactory) -> QueryBus:
    """Create a query bus with every notification query handler."""
    bus = QueryBus()
    for handler_class in (
        GetNotificationByIdQueryHandler,
        GetNotificationsByStatusQueryHandler,
        GetPendingNotificationsQueryHandler,
        RenderTemplateQueryHandler,
        GetDeliveryAttemptsQueryHandler,
    ):
        bus.register(handler_class(uow_factory))

    logger.debug("Notification query handlers registered")
    return bus


__all__ = ["build_command_bus", "build_query_bus", "sqlalchemy_uow_factory"]
