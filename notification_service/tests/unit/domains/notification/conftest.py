"""Pytest configuration and fixtures for notification module tests.

Provides in-memory repositories and a unit of work that honour the
notification module's contracts, so application handlers can be exercised
without a database.
"""

from unittest.mock import AsyncMock
from uuid import UUID

import pytest

from notification_service.core.domain.contracts import IEventPublisher
from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.aggregates.template import (
    Template,
)
from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationStatus,
)
from notification_service.modules.notification.domain.interfaces.repositories import (
    IDeliveryAttemptRepository,
    INotificationRepository,
    ITemplateRepository,
)
from notification_service.modules.notification.domain.interfaces.unit_of_work import (
    INotificationUnitOfWork,
)

# ============================================================================
# In-memory repositories
# ============================================================================


class InMemoryNotificationRepository(INotificationRepository):
    def __init__(self, store: dict[UUID, Notification]):
        self.store = store
        self.seen: list[Notification] = []

    def _track(self, notification):
        if notification is not None and notification not in self.seen:
            self.seen.append(notification)
        return notification

    async def get(self, notification_id: UUID) -> Notification | None:
        return self._track(self.store.get(notification_id))

    async def list_by_status(self, status: NotificationStatus) -> list[Notification]:
        return [self._track(n) for n in self.store.values() if n.status == status]

    async def list_pending(self) -> list[Notification]:
        pending = [n for n in self.store.values() if n.status == NotificationStatus.PENDING]
        pending.sort(key=lambda n: n.scheduled_at or n.created_at)
        return [self._track(n) for n in pending]

    async def add(self, notification: Notification) -> None:
        self.store[notification.id] = notification
        self._track(notification)

    async def update(self, notification: Notification) -> None:
        self.store[notification.id] = notification
        notification.increment_version()
        self._track(notification)


class InMemoryTemplateRepository(ITemplateRepository):
    def __init__(self, store: dict[UUID, Template]):
        self.store = store
        self.seen: list[Template] = []

    async def get(self, template_id: UUID) -> Template | None:
        return self.store.get(template_id)

    async def get_by_name(self, name: str) -> Template | None:
        normalized = Template.normalize_name(name)
        for template in self.store.values():
            if template.name == normalized:
                return template
        return None

    async def list_by_channel(self, channel: NotificationChannel) -> list[Template]:
        return [t for t in self.store.values() if t.channel == channel]

    async def list_active_by_channel(
        self, channel: NotificationChannel
    ) -> list[Template]:
        return [t for t in self.store.values() if t.channel == channel and t.is_active]

    async def add(self, template: Template) -> None:
        self.store[template.id] = template
        self.seen.append(template)

    async def update(self, template: Template) -> None:
        self.store[template.id] = template


class InMemoryDeliveryAttemptRepository(IDeliveryAttemptRepository):
    def __init__(self, store: dict[UUID, DeliveryAttempt]):
        self.store = store

    async def add(self, attempt: DeliveryAttempt) -> None:
        self.store[attempt.id] = attempt

    async def update(self, attempt: DeliveryAttempt) -> None:
        self.store[attempt.id] = attempt

    async def list_by_notification(self, notification_id: UUID) -> list[DeliveryAttempt]:
        attempts = [a for a in self.store.values() if a.notification_id == notification_id]
        return sorted(attempts, key=lambda a: a.attempt_number)


class InMemoryUnitOfWork(INotificationUnitOfWork):
    """Unit of work over shared in-memory stores.

    Events are drained from the aggregates seen during the unit of work and
    published after ``commit``, as the database-backed implementation does.
    """

    def __init__(self, stores: dict, event_publisher: IEventPublisher):
        self.stores = stores
        self.event_publisher = event_publisher
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self.notifications = InMemoryNotificationRepository(self.stores["notifications"])
        self.templates = InMemoryTemplateRepository(self.stores["templates"])
        self.delivery_attempts = InMemoryDeliveryAttemptRepository(
            self.stores["delivery_attempts"]
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()

    async def commit(self) -> None:
        self.committed = True
        events = []
        for aggregate in [*self.notifications.seen, *self.templates.seen]:
            events.extend(aggregate.clear_events())
        if events:
            await self.event_publisher.publish_all(events)

    async def rollback(self) -> None:
        self.rolled_back = True


# ============================================================================
# Unit of work fixtures
# ============================================================================


@pytest.fixture
def stores():
    """Shared in-memory stores, surviving across units of work."""
    return {"notifications": {}, "templates": {}, "delivery_attempts": {}}


@pytest.fixture
def event_publisher():
    """Mock event publisher."""
    publisher = AsyncMock(spec=IEventPublisher)
    publisher.published = []

    async def publish_all(events):
        publisher.published.extend(events)

    publisher.publish_all.side_effect = publish_all
    return publisher


@pytest.fixture
def uow_factory(stores, event_publisher):
    """Factory producing a fresh in-memory unit of work per call."""
    created = []

    def factory() -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork(stores, event_publisher)
        created.append(uow)
        return uow

    factory.created = created
    return factory


# ============================================================================
# Aggregate fixtures
# ============================================================================


@pytest.fixture
def email_notification(notification_builder):
    """Pending email notification with no buffered events."""
    return notification_builder.build()


@pytest.fixture
def failed_notification(notification_builder):
    """Failed SMS notification with no buffered events."""
    return notification_builder.sms().build_failed("Carrier rejected")


@pytest.fixture
def welcome_template(template_builder):
    """Active email template named 'welcome'."""
    return template_builder.named("Welcome").build()
