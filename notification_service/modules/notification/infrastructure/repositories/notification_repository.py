"""Repository implementation for Notification aggregate."""

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.infrastructure.repository import SqlAlchemyRepository
from notification_service.core.logging import get_logger
from notification_service.modules.notification.domain.aggregates.notification import (
    Notification,
)
from notification_service.modules.notification.domain.enums import (
    NotificationPriority,
    NotificationStatus,
)
from notification_service.modules.notification.domain.errors import (
    ConcurrencyConflictError,
    NotificationNotFoundError,
)
from notification_service.modules.notification.domain.interfaces.repositories import (
    INotificationRepository,
)
from notification_service.modules.notification.domain.value_objects import Recipient
from notification_service.modules.notification.infrastructure.models.notification import (
    NotificationModel,
)

logger = get_logger(__name__)


class NotificationRepository(
    SqlAlchemyRepository[Notification, NotificationModel], INotificationRepository
):
    """Repository for managing notification persistence.

    Updates are guarded by the ``version`` column: a write only lands when the
    stored version still matches the one the aggregate was loaded with. The
    aggregate itself only moves to the new version once the unit of work
    commits, so a rolled-back write leaves it reusable.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, NotificationModel)
        self._written_versions: dict[UUID, tuple[Notification, int]] = {}

    async def get(self, notification_id: UUID) -> Notification | None:
        return await self._find_entity(notification_id)

    async def list_by_status(self, status: NotificationStatus) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.status == status.value)
            .order_by(NotificationModel.created_at)
        )
        return await self._find_entities(stmt)

    async def list_pending(self) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.status == NotificationStatus.PENDING.value)
            .order_by(
                func.coalesce(
                    NotificationModel.scheduled_at, NotificationModel.created_at
                )
            )
        )
        return await self._find_entities(stmt)

    async def add(self, notification: Notification) -> None:
        await self._add_entity(notification)

    async def update(self, notification: Notification) -> None:
        """
        Write the aggregate's state and bump the stored version.

        Raises:
            NotificationNotFoundError: If the notification is not stored
            ConcurrencyConflictError: If another writer bumped the version first
        """
        expected_version = self._written_version(notification)
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.id == notification.id,
                NotificationModel.version == expected_version,
            )
            .values(**self._mutable_columns(notification), version=expected_version + 1)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            exists = await self.session.scalar(
                select(func.count())
                .select_from(NotificationModel)
                .where(NotificationModel.id == notification.id)
            )
            if not exists:
                raise NotificationNotFoundError(notification.id)

            logger.warning(
                "Notification version conflict",
                notification_id=str(notification.id),
                expected_version=expected_version,
            )
            raise ConcurrencyConflictError(
                "Notification", notification.id, expected_version
            )

        self._written_versions[notification.id] = (notification, expected_version + 1)
        self._track(notification)

    def _written_version(self, notification: Notification) -> int:
        written = self._written_versions.get(notification.id)
        return written[1] if written else notification.version

    def apply_committed_versions(self) -> None:
        """Move every updated aggregate to the version its row was committed with."""
        for notification, version in self._written_versions.values():
            while notification.version < version:
                notification.increment_version()
        self._written_versions.clear()

    @staticmethod
    def _mutable_columns(notification: Notification) -> dict:
        return {
            "status": notification.status.value,
            "subject": notification.subject,
            "content": notification.content,
            "error_message": notification.error_message,
            "updated_at": notification.updated_at,
            "scheduled_at": notification.scheduled_at,
            "sent_at": notification.sent_at,
            "failed_at": notification.failed_at,
        }

    def _to_entity(self, model: NotificationModel) -> Notification:
        """Convert database model to domain aggregate."""
        return Notification.from_persisted_state(
            entity_id=model.id,
            recipient=Recipient.from_persisted_state(model.recipient_value, model.channel),
            content=model.content,
            subject=model.subject,
            status=NotificationStatus(model.status),
            priority=NotificationPriority(model.priority),
            created_at=model.created_at,
            updated_at=model.updated_at,
            scheduled_at=model.scheduled_at,
            sent_at=model.sent_at,
            failed_at=model.failed_at,
            error_message=model.error_message,
            version=model.version,
        )

    def _to_model(self, notification: Notification) -> NotificationModel:
        """Convert domain aggregate to database model."""
        return NotificationModel(
            id=notification.id,
            recipient_value=notification.recipient.value,
            channel=notification.channel.value,
            priority=notification.priority.value,
            created_at=notification.created_at,
            version=notification.version,
            **self._mutable_columns(notification),
        )
