"""SQLAlchemy unit of work for the notification module."""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.domain.base import AggregateRoot
from notification_service.core.infrastructure.unit_of_work import BaseUnitOfWork
from notification_service.modules.notification.domain.interfaces.unit_of_work import (
    INotificationUnitOfWork,
)
from notification_service.modules.notification.infrastructure.repositories import (
    DeliveryAttemptRepository,
    NotificationRepository,
    TemplateRepository,
)


class SqlAlchemyUnitOfWork(BaseUnitOfWork, INotificationUnitOfWork):
    """
    Unit of work exposing notification, template and delivery attempt stores.

    Usage Example:
        uow = SqlAlchemyUnitOfWork(session_factory, event_bus)
        async with uow:
            await uow.notifications.add(notification)
            await uow.commit()
    """

    def _init_repositories(self, session: AsyncSession) -> None:
        self.notifications = NotificationRepository(session)
        self.templates = TemplateRepository(session)
        self.delivery_attempts = DeliveryAttemptRepository(session)

    def _seen_aggregates(self) -> Iterable[AggregateRoot]:
        yield from self.notifications.seen
        yield from self.templates.seen

    def _after_commit(self) -> None:
        self.notifications.apply_committed_versions()
