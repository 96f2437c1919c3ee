"""Tests for notification queries and their handlers."""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest

from notification_service.core.errors import ValidationError
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
from notification_service.modules.notification.application.queries.handlers import (
    GetDeliveryAttemptsQueryHandler,
    GetNotificationByIdQueryHandler,
    GetNotificationsByStatusQueryHandler,
    GetPendingNotificationsQueryHandler,
    RenderTemplateQueryHandler,
)
from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.enums import (
    DeliveryStatus,
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
)
from notification_service.modules.notification.domain.errors import (
    InactiveTemplateError,
    MissingPlaceholderError,
    TemplateNotFoundError,
)
from notification_service.tests.builders import future
from notification_service.utils.date import utc_now


class TestQueries:
    """Test suite for query validation."""

    def test_status_must_be_enum(self):
        """Test the status filter is type-checked."""
        with pytest.raises(ValidationError):
            GetNotificationsByStatusQuery("pending")

    def test_render_requires_template_name(self):
        """Test the template name is mandatory."""
        with pytest.raises(ValidationError):
            RenderTemplateQuery("  ")

    def test_render_copies_data(self):
        """Test later changes to the caller's data are not seen."""
        data = {"name": "Jane"}
        query = RenderTemplateQuery("welcome", data)
        data["name"] = "John"

        assert query.data == {"name": "Jane"}

    @pytest.mark.parametrize(
        "query_class", [GetNotificationByIdQuery, GetDeliveryAttemptsQuery]
    )
    def test_requires_notification_id(self, query_class):
        """Test notification id is mandatory."""
        with pytest.raises(ValidationError):
            query_class(None)
        with pytest.raises(ValidationError):
            query_class(UUID(int=0))


class TestGetNotificationByIdQueryHandler:
    """Test suite for loading one notification."""

    async def test_found(self, uow_factory, stores, email_notification):
        """Test the notification is returned as a DTO."""
        stores["notifications"][email_notification.id] = email_notification
        handler = GetNotificationByIdQueryHandler(uow_factory)

        dto = await handler.handle(GetNotificationByIdQuery(email_notification.id))

        assert isinstance(dto, NotificationDTO)
        assert dto.id == email_notification.id
        assert dto.recipient == email_notification.recipient.value
        assert dto.channel == NotificationChannel.EMAIL
        assert dto.status == NotificationStatus.PENDING

    async def test_missing(self, uow_factory):
        """Test unknown ids return None."""
        handler = GetNotificationByIdQueryHandler(uow_factory)

        assert await handler.handle(GetNotificationByIdQuery(uuid4())) is None


class TestListingQueryHandlers:
    """Test suite for listing notifications."""

    async def test_by_status(
        self, uow_factory, stores, email_notification, failed_notification
    ):
        """Test filtering by status."""
        for notification in (email_notification, failed_notification):
            stores["notifications"][notification.id] = notification
        handler = GetNotificationsByStatusQueryHandler(uow_factory)

        failed = await handler.handle(
            GetNotificationsByStatusQuery(NotificationStatus.FAILED)
        )

        assert [dto.id for dto in failed] == [failed_notification.id]

    async def test_pending_excludes_future_schedules(
        self, uow_factory, stores, notification_builder
    ):
        """Test only notifications due now are listed, oldest due first."""
        unscheduled = notification_builder.build()
        later = notification_builder.build()
        later.schedule(future(hours=1))
        overdue = Notification.from_persisted_state(
            entity_id=uuid4(),
            recipient=unscheduled.recipient,
            content="Overdue",
            subject="Reminder",
            status=NotificationStatus.PENDING,
            priority=NotificationPriority.NORMAL,
            created_at=utc_now() - timedelta(days=1),
            scheduled_at=utc_now() - timedelta(hours=1),
        )
        for notification in (unscheduled, later, overdue):
            stores["notifications"][notification.id] = notification
        handler = GetPendingNotificationsQueryHandler(uow_factory)

        pending = await handler.handle(GetPendingNotificationsQuery())

        assert [dto.id for dto in pending] == [overdue.id, unscheduled.id]


class TestRenderTemplateQueryHandler:
    """Test suite for rendering templates by name."""

    async def test_render(self, uow_factory, stores, welcome_template):
        """Test rendering looks the template up case-insensitively."""
        stores["templates"][welcome_template.id] = welcome_template
        handler = RenderTemplateQueryHandler(uow_factory)

        rendered = await handler.handle(
            RenderTemplateQuery("WELCOME", {"name": "Jane", "code": 42})
        )

        assert rendered.subject == "Hello Jane"
        assert rendered.body == "Dear Jane, your code is 42."

    async def test_unknown_template(self, uow_factory):
        """Test rendering an unknown template."""
        handler = RenderTemplateQueryHandler(uow_factory)

        with pytest.raises(TemplateNotFoundError):
            await handler.handle(RenderTemplateQuery("missing"))

    async def test_missing_placeholder(self, uow_factory, stores, welcome_template):
        """Test rendering with incomplete data."""
        stores["templates"][welcome_template.id] = welcome_template
        handler = RenderTemplateQueryHandler(uow_factory)

        with pytest.raises(MissingPlaceholderError):
            await handler.handle(RenderTemplateQuery("welcome", {"name": "Jane"}))

    async def test_inactive_template(self, uow_factory, stores, welcome_template):
        """Test deactivated templates are not rendered."""
        welcome_template.deactivate()
        stores["templates"][welcome_template.id] = welcome_template
        handler = RenderTemplateQueryHandler(uow_factory)

        with pytest.raises(InactiveTemplateError):
            await handler.handle(
                RenderTemplateQuery("welcome", {"name": "Jane", "code": "1"})
            )


class TestGetDeliveryAttemptsQueryHandler:
    """Test suite for delivery attempt history."""

    async def test_attempts_in_order(self, uow_factory, stores, sample_notification_id):
        """Test attempts are listed by attempt number."""
        second = DeliveryAttempt(sample_notification_id, 2)
        second.mark_as_success()
        first = DeliveryAttempt(sample_notification_id, 1)
        first.mark_as_failed("timeout")
        other = DeliveryAttempt(uuid4(), 1)
        for attempt in (second, first, other):
            stores["delivery_attempts"][attempt.id] = attempt
        handler = GetDeliveryAttemptsQueryHandler(uow_factory)

        attempts = await handler.handle(GetDeliveryAttemptsQuery(sample_notification_id))

        assert [dto.attempt_number for dto in attempts] == [1, 2]
        assert isinstance(attempts[0], DeliveryAttemptDTO)
        assert attempts[0].status == DeliveryStatus.FAILED
        assert attempts[0].error_message == "timeout"
        assert attempts[1].duration is not None
