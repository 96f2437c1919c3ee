"""Database fixtures for notification integration tests.

Each test gets its own SQLite file, created through the same engine, schema
and session factory helpers the service uses.
"""

import pytest

from notification_service.core.config import DatabaseConfig
from notification_service.core.enums import Environment
from notification_service.core.events.bus import InMemoryEventBus
from notification_service.core.infrastructure.database import (
    create_engine,
    create_schema,
    create_session_factory,
)
from notification_service.modules.notification.domain.events import NotificationEvent
from notification_service.modules.notification.infrastructure.dependencies import (
    build_command_bus,
    build_query_bus,
    sqlalchemy_uow_factory,
)


@pytest.fixture
async def engine(tmp_path):
    """Async SQLite engine with the notification schema."""
    config = DatabaseConfig(
        url=f"sqlite+aiosqlite:///{tmp_path / 'notifications.db'}",
        environment=Environment.TESTING,
    )
    engine = create_engine(config)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return create_session_factory(engine)


@pytest.fixture
def published_events():
    """Notification events delivered by the event bus, in order."""
    return []


@pytest.fixture
def event_bus(published_events):
    """In-memory event bus recording every notification event."""
    bus = InMemoryEventBus(raise_on_handler_error=True)
    bus.subscribe(NotificationEvent, published_events.append)
    return bus


@pytest.fixture
def uow_factory(session_factory, event_bus):
    """Factory producing database-backed units of work."""
    return sqlalchemy_uow_factory(session_factory, event_bus)


@pytest.fixture
def command_bus(uow_factory):
    return build_command_bus(uow_factory)


@pytest.fixture
def query_bus(uow_factory):
    return build_query_bus(uow_factory)
