"""Notification query handlers."""

from notification_service.core.cqrs.base import QueryHandler
from notification_service.core.logging import get_logger
from notification_service.modules.notification.application.commands.handlers import (
    UnitOfWorkFactory,
)
from notification_service.modules.notification.application.dto import (
    DeliveryAttemptDTO,
    NotificationDTO,
)
from notification_service.modules.notification.application.queries import (
    GetDeliveryAttemptsQuery,
    GetNotificationByIdQuery,
    GetNotificationsByStatusQuery,
    GetPendingNotificationsQuery,
    RenderTemplateQuery,
)
from notification_service.modules.notification.domain.aggregates.template import (
    RenderedContent,
)
from notification_service.modules.notification.domain.errors import (
    TemplateNotFoundError,
)
from notification_service.modules.notification.domain.value_objects import (
    TemplateData,
)

logger = get_logger(__name__)


class GetNotificationByIdQueryHandler(
    QueryHandler[GetNotificationByIdQuery, NotificationDTO | None]
):
    """Handler for loading a single notification."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, query: GetNotificationByIdQuery) -> NotificationDTO | None:
        async with self.uow_factory() as uow:
            notification = await uow.notifications.get(query.notification_id)

        if notification is None:
            return None
        return NotificationDTO.from_notification(notification)

    @property
    def query_type(self):
        """Get query type."""
        return GetNotificationByIdQuery


class GetNotificationsByStatusQueryHandler(
    QueryHandler[GetNotificationsByStatusQuery, list[NotificationDTO]]
):
    """Handler for listing notifications by status."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, query: GetNotificationsByStatusQuery) -> list[NotificationDTO]:
        async with self.uow_factory() as uow:
            notifications = await uow.notifications.list_by_status(query.status)

        return [NotificationDTO.from_notification(n) for n in notifications]

    @property
    def query_type(self):
        """Get query type."""
        return GetNotificationsByStatusQuery


class GetPendingNotificationsQueryHandler(
    QueryHandler[GetPendingNotificationsQuery, list[NotificationDTO]]
):
    """Handler for listing notifications that are ready to send.

    Scheduled notifications whose time has not come yet are left out.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory):
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, query: GetPendingNotificationsQuery) -> list[NotificationDTO]:
        async with self.uow_factory() as uow:
            notifications = await uow.notifications.list_pending()

        ready = [n for n in notifications if n.is_ready_to_send()]

        logger.debug(
            "Pending notifications loaded",
            pending=len(notifications),
            ready=len(ready),
        )
        return [NotificationDTO.from_notification(n) for n in ready]

    @property
    def query_type(self):
        """Get query type."""
        return GetPendingNotificationsQuery


class RenderTemplateQueryHandler(QueryHandler[RenderTemplateQuery, RenderedContent]):
    """Handler for rendering a template by name."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, query: RenderTemplateQuery) -> RenderedContent:
        """
        Render the named template.

        Raises:
            TemplateNotFoundError: If no template has that name
            InactiveTemplateError: If the template is deactivated
            MissingPlaceholderError: If the data lacks a placeholder value
        """
        async with self.uow_factory() as uow:
            template = await uow.templates.get_by_name(query.template_name)

        if template is None:
            raise TemplateNotFoundError(query.template_name)

        return template.render(TemplateData(query.data))

    @property
    def query_type(self):
        """Get query type."""
        return RenderTemplateQuery


class GetDeliveryAttemptsQueryHandler(
    QueryHandler[GetDeliveryAttemptsQuery, list[DeliveryAttemptDTO]]
):
    """Handler for listing delivery attempts of a notification."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, query: GetDeliveryAttemptsQuery) -> list[DeliveryAttemptDTO]:
        async with self.uow_factory() as uow:
            attempts = await uow.delivery_attempts.list_by_notification(
                query.notification_id
            )

        return [DeliveryAttemptDTO.from_attempt(a) for a in attempts]

    @property
    def query_type(self):
        """Get query type."""
        return GetDeliveryAttemptsQuery


__all__ = [
    "GetDeliveryAttemptsQueryHandler",
    "GetNotificationByIdQueryHandler",
    "GetNotificationsByStatusQueryHandler",
    "GetPendingNotificationsQueryHandler",
    "RenderTemplateQueryHandler",
]
