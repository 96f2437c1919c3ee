"""Integration tests for the SQLAlchemy unit of work.

Covers the ordering between the database commit and event publishing.
"""

from unittest.mock import AsyncMock

import pytest

from notification_service.core.domain.contracts import IEventPublisher
from notification_service.core.infrastructure.unit_of_work import (
    EventPublishingError,
    UnitOfWorkError,
)
from notification_service.modules.notification.domain.enums import NotificationStatus
from notification_service.modules.notification.domain.events import (
    NotificationScheduled,
    NotificationSent,
)
from notification_service.modules.notification.infrastructure.unit_of_work import (
    SqlAlchemyUnitOfWork,
)
from notification_service.tests.builders import future

pytestmark = pytest.mark.integration


@pytest.fixture
def scheduled(notification_builder):
    notification = notification_builder.build()
    notification.schedule(future())
    return notification


async def load(uow_factory, notification_id):
    async with uow_factory() as uow:
        return await uow.notifications.get(notification_id)


class TestSqlAlchemyUnitOfWork:
    """Test suite for SqlAlchemyUnitOfWork."""

    async def test_commit_persists_then_publishes(
        self, uow_factory, scheduled, published_events
    ):
        """Test events reach subscribers once the data is stored."""
        async with uow_factory() as uow:
            await uow.notifications.add(scheduled)
            assert published_events == []
            await uow.commit()

        (event,) = published_events
        assert isinstance(event, NotificationScheduled)
        assert event.notification_id == scheduled.id
        assert scheduled.has_events() is False
        assert await load(uow_factory, scheduled.id) is not None

    async def test_events_from_loaded_aggregates(
        self, uow_factory, scheduled, published_events
    ):
        """Test events raised on loaded aggregates are published too."""
        async with uow_factory() as uow:
            await uow.notifications.add(scheduled)
            await uow.commit()
        published_events.clear()

        async with uow_factory() as uow:
            notification = await uow.notifications.get(scheduled.id)
            notification.send()
            await uow.notifications.update(notification)
            await uow.commit()

        assert [type(e) for e in published_events] == [NotificationSent]

    async def test_exit_without_commit_discards_changes(
        self, uow_factory, scheduled, published_events
    ):
        """Test leaving the context without committing stores nothing."""
        async with uow_factory() as uow:
            await uow.notifications.add(scheduled)

        assert await load(uow_factory, scheduled.id) is None
        assert published_events == []
        assert scheduled.has_events() is True

    async def test_exception_rolls_back_and_keeps_events(
        self, uow_factory, scheduled, published_events
    ):
        """Test an error inside the context rolls back and publishes nothing."""
        with pytest.raises(RuntimeError):
            async with uow_factory() as uow:
                await uow.notifications.add(scheduled)
                raise RuntimeError("boom")

        assert await load(uow_factory, scheduled.id) is None
        assert published_events == []
        assert [type(e) for e in scheduled.get_events()] == [NotificationScheduled]

    async def test_publisher_failure_after_commit(
        self, session_factory, uow_factory, scheduled
    ):
        """Test a failing publisher surfaces but the data stays committed."""
        publisher = AsyncMock(spec=IEventPublisher)
        publisher.publish_all.side_effect = ConnectionError("broker down")

        with pytest.raises(EventPublishingError) as exc_info:
            async with SqlAlchemyUnitOfWork(session_factory, publisher) as uow:
                await uow.notifications.add(scheduled)
                await uow.commit()

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        publisher.publish_all.assert_awaited_once()
        assert scheduled.has_events() is False
        stored = await load(uow_factory, scheduled.id)
        assert stored.status == NotificationStatus.PENDING

    async def test_without_publisher_events_are_drained(self, session_factory, scheduled):
        """Test committing without a publisher still clears the buffer."""
        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            await uow.notifications.add(scheduled)
            await uow.commit()

        assert scheduled.has_events() is False

    async def test_commit_outside_context(self, session_factory):
        """Test committing an inactive unit of work."""
        uow = SqlAlchemyUnitOfWork(session_factory)

        with pytest.raises(UnitOfWorkError):
            await uow.commit()

    async def test_nested_enter_rejected(self, session_factory):
        """Test a unit of work cannot be entered twice."""
        uow = SqlAlchemyUnitOfWork(session_factory)

        async with uow:
            with pytest.raises(UnitOfWorkError):
                await uow.__aenter__()
