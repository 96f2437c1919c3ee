"""Notification command handlers.

Each handler opens a unit of work, loads or creates aggregates, applies the
domain transition and commits. Domain events raised by the transition are
published by the unit of work after the commit.
"""

from collections.abc import Callable
from uuid import UUID

from notification_service.core.cqrs.base import CommandHandler
from notification_service.core.logging import get_logger
from notification_service.modules.notification.application.commands import (
    CancelNotificationCommand,
    CreateTemplateCommand,
    RecordDeliveryAttemptCommand,
    RetryNotificationCommand,
    ScheduleNotificationCommand,
    SetTemplateActiveCommand,
    UpdateTemplateContentCommand,
)
from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.aggregates.template import (
    Template,
)
from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.errors import (
    NotificationNotFoundError,
    TemplateNameConflictError,
    TemplateNotFoundError,
)
from notification_service.modules.notification.domain.interfaces.unit_of_work import (
    INotificationUnitOfWork,
)
from notification_service.modules.notification.domain.value_objects import Recipient

logger = get_logger(__name__)

UnitOfWorkFactory = Callable[[], INotificationUnitOfWork]


class ScheduleNotificationCommandHandler(
    CommandHandler[ScheduleNotificationCommand, UUID]
):
    """Handler for scheduling new notifications."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: ScheduleNotificationCommand) -> UUID:
        """Create the notification, schedule it and return its id."""
        recipient = Recipient.create(command.recipient, command.channel)
        notification = Notification(
            recipient=recipient,
            content=command.content,
            priority=command.priority,
            subject=command.subject,
        )
        notification.schedule(command.scheduled_at)

        async with self.uow_factory() as uow:
            await uow.notifications.add(notification)
            await uow.commit()

        logger.info(
            "Notification scheduled",
            notification_id=str(notification.id),
            channel=notification.channel.value,
            scheduled_at=notification.scheduled_at.isoformat(),
        )
        return notification.id

    @property
    def command_type(self):
        """Get command type."""
        return ScheduleNotificationCommand


class CancelNotificationCommandHandler(CommandHandler[CancelNotificationCommand, bool]):
    """Handler for cancelling pending notifications."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: CancelNotificationCommand) -> bool:
        """Cancel the notification; False when it does not exist."""
        async with self.uow_factory() as uow:
            notification = await uow.notifications.get(command.notification_id)
            if notification is None:
                logger.warning(
                    "Notification to cancel not found",
                    notification_id=str(command.notification_id),
                )
                return False

            notification.cancel()
            await uow.notifications.update(notification)
            await uow.commit()

        logger.info("Notification cancelled", notification_id=str(notification.id))
        return True

    @property
    def command_type(self):
        """Get command type."""
        return CancelNotificationCommand


class RetryNotificationCommandHandler(CommandHandler[RetryNotificationCommand, bool]):
    """Handler for retrying failed notifications."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: RetryNotificationCommand) -> bool:
        """Return the notification to pending; False when it does not exist."""
        async with self.uow_factory() as uow:
            notification = await uow.notifications.get(command.notification_id)
            if notification is None:
                logger.warning(
                    "Notification to retry not found",
                    notification_id=str(command.notification_id),
                )
                return False

            notification.retry()
            await uow.notifications.update(notification)
            await uow.commit()

        logger.info("Notification retried", notification_id=str(notification.id))
        return True

    @property
    def command_type(self):
        """Get command type."""
        return RetryNotificationCommand


class CreateTemplateCommandHandler(CommandHandler[CreateTemplateCommand, UUID]):
    """Handler for creating templates."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: CreateTemplateCommand) -> UUID:
        """Create the template and return its id."""
        template = Template(
            name=command.name,
            channel=command.channel,
            body=command.body,
            subject=command.subject,
        )

        async with self.uow_factory() as uow:
            if await uow.templates.get_by_name(template.name) is not None:
                raise TemplateNameConflictError(template.name)

            await uow.templates.add(template)
            await uow.commit()

        logger.info(
            "Template created",
            template_id=str(template.id),
            name=template.name,
            channel=template.channel.value,
        )
        return template.id

    @property
    def command_type(self):
        """Get command type."""
        return CreateTemplateCommand


class UpdateTemplateContentCommandHandler(
    CommandHandler[UpdateTemplateContentCommand, None]
):
    """Handler for replacing template content."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: UpdateTemplateContentCommand) -> None:
        async with self.uow_factory() as uow:
            template = await uow.templates.get(command.template_id)
            if template is None:
                raise TemplateNotFoundError(command.template_id)

            template.update_content(command.body, command.subject)
            await uow.templates.update(template)
            await uow.commit()

        logger.info("Template content updated", template_id=str(template.id))

    @property
    def command_type(self):
        """Get command type."""
        return UpdateTemplateContentCommand


class SetTemplateActiveCommandHandler(CommandHandler[SetTemplateActiveCommand, None]):
    """Handler for activating and deactivating templates."""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: SetTemplateActiveCommand) -> None:
        async with self.uow_factory() as uow:
            template = await uow.templates.get(command.template_id)
            if template is None:
                raise TemplateNotFoundError(command.template_id)

            if command.active:
                template.activate()
            else:
                template.deactivate()

            await uow.templates.update(template)
            await uow.commit()

        logger.info(
            "Template activation changed",
            template_id=str(template.id),
            is_active=template.is_active,
        )

    @property
    def command_type(self):
        """Get command type."""
        return SetTemplateActiveCommand


class RecordDeliveryAttemptCommandHandler(
    CommandHandler[RecordDeliveryAttemptCommand, UUID]
):
    """Handler for recording delivery outcomes.

    A successful attempt sends the notification; a failed one fails it.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory):
        """Initialize handler with dependencies."""
        super().__init__()
        self.uow_factory = uow_factory

    async def handle(self, command: RecordDeliveryAttemptCommand) -> UUID:
        """Record the attempt and return its id."""
        async with self.uow_factory() as uow:
            notification = await uow.notifications.get(command.notification_id)
            if notification is None:
                raise NotificationNotFoundError(command.notification_id)

            attempt = DeliveryAttempt(notification.id, command.attempt_number)

            if command.succeeded:
                notification.send()
                attempt.mark_as_success()
            else:
                notification.fail(command.error_message)
                attempt.mark_as_failed(command.error_message)

            await uow.delivery_attempts.add(attempt)
            await uow.notifications.update(notification)
            await uow.commit()

        logger.info(
            "Delivery attempt recorded",
            notification_id=str(notification.id),
            attempt_number=attempt.attempt_number,
            status=attempt.status.value,
            retry_allowed=notification.can_retry(attempt.attempt_number),
        )
        return attempt.id

    @property
    def command_type(self):
        """Get command type."""
        return RecordDeliveryAttemptCommand


__all__ = [
    "CancelNotificationCommandHandler",
    "CreateTemplateCommandHandler",
    "RecordDeliveryAttemptCommandHandler",
    "RetryNotificationCommandHandler",
    "ScheduleNotificationCommandHandler",
    "SetTemplateActiveCommandHandler",
    "UnitOfWorkFactory",
    "UpdateTemplateContentCommandHandler",
]
