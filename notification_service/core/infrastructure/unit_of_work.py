"""Session-scoped unit of work with post-commit event publishing.

Aggregates keep their events until the transaction is durable. ``commit``
writes first and only then drains the events of every aggregate the
repositories touched and hands them to the publisher::

    async with SqlAlchemyUnitOfWork(session_factory, event_bus) as uow:
        notification = await uow.notifications.get(notification_id)
        notification.send()
        await uow.notifications.update(notification)
        await uow.commit()

A failed commit rolls back and leaves the events on their aggregates. A
failed publish cannot undo the commit: the events are gone from the
aggregates and ``EventPublishingError`` tells the caller so.
"""

import time
from abc import abstractmethod
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notification_service.core.domain.base import AggregateRoot
from notification_service.core.domain.contracts import IEventPublisher, IUnitOfWork
from notification_service.core.errors import InfrastructureError
from notification_service.core.events.types import DomainEvent
from notification_service.core.logging import get_logger

logger = get_logger(__name__)


class UnitOfWorkError(InfrastructureError):
    """The unit of work was used outside its ``async with`` block or re-entered."""

    default_code = "UNIT_OF_WORK_ERROR"
    retryable = False


class TransactionError(UnitOfWorkError):
    default_code = "TRANSACTION_ERROR"
    retryable = True


class EventPublishingError(UnitOfWorkError):
    """Committed, but the publisher refused the drained events."""

    default_code = "EVENT_PUBLISHING_ERROR"


class BaseUnitOfWork(IUnitOfWork):
    """
    Unit of work over one ``AsyncSession`` per ``async with`` block.

    Subclasses bind their repositories to the session in
    ``_init_repositories`` and list the aggregates those repositories loaded
    or stored in ``_seen_aggregates``. Leaving the block without ``commit``
    rolls back.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        event_publisher: IEventPublisher | None = None,
    ):
        self._session_factory = session_factory
        self._event_publisher = event_publisher
        self.session: AsyncSession | None = None

        self._committed = False
        self._opened_at: float | None = None

    @abstractmethod
    def _init_repositories(self, session: AsyncSession) -> None:
        pass

    @abstractmethod
    def _seen_aggregates(self) -> Iterable[AggregateRoot]:
        pass

    def _after_commit(self) -> None:
        """Sync in-memory state with the rows that were just committed."""

    def _require_session(self) -> AsyncSession:
        if self.session is None:
            raise UnitOfWorkError("Unit of work is not active; use it in 'async with'")
        return self.session

    async def __aenter__(self) -> "BaseUnitOfWork":
        if self.session is not None:
            raise UnitOfWorkError("Unit of work is already active")

        self.session = self._session_factory()
        self._committed = False
        self._opened_at = time.perf_counter()
        self._init_repositories(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        session = self._require_session()
        try:
            if exc_type is not None:
                logger.info(
                    "Unit of work aborted, rolling back",
                    error_type=exc_type.__name__,
                    error=str(exc_val) if exc_val else None,
                )
                await self.rollback()
            elif not self._committed and session.in_transaction():
                logger.debug("Unit of work left without commit, rolling back")
                await self.rollback()
        finally:
            await session.close()
            self.session = None
            logger.debug(
                "Unit of work closed",
                committed=self._committed,
                duration_seconds=time.perf_counter() - self._opened_at,
            )

    async def commit(self) -> None:
        """
        Raises:
            UnitOfWorkError: Outside the ``async with`` block
            TransactionError: If the database refuses the commit
            EventPublishingError: If the publisher fails after the commit
        """
        session = self._require_session()

        try:
            await session.commit()
        except SQLAlchemyError as e:
            logger.exception("Commit failed", error=str(e))
            await self.rollback()
            raise TransactionError(f"Database commit failed: {e}", cause=e) from e

        self._committed = True
        self._after_commit()
        events = self._drain_events()
        logger.info("Unit of work committed", events=len(events))

        if events:
            await self._publish(events)

    def _drain_events(self) -> list[DomainEvent]:
        return [
            event
            for aggregate in self._seen_aggregates()
            for event in aggregate.clear_events()
        ]

    async def _publish(self, events: list[DomainEvent]) -> None:
        if self._event_publisher is None:
            logger.warning(
                "No event publisher configured, dropping events", events=len(events)
            )
            return

        try:
            await self._event_publisher.publish_all(events)
        except Exception as e:
            logger.exception("Publishing events failed", events=len(events), error=str(e))
            raise EventPublishingError(
                f"Committed, but publishing {len(events)} event(s) failed: {e}",
                cause=e,
            ) from e

        logger.debug("Events published", events=len(events))

    async def rollback(self) -> None:
        """Roll back the open transaction, if any. Buffered events are kept."""
        if self.session is None:
            return

        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            logger.exception("Rollback failed", error=str(e))
            raise TransactionError(f"Database rollback failed: {e}", cause=e) from e


__all__ = [
    "BaseUnitOfWork",
    "EventPublishingError",
    "TransactionError",
    "UnitOfWorkError",
]
