"""Repository implementation for DeliveryAttempt entity."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.errors import NotFoundError
from notification_service.core.infrastructure.repository import SqlAlchemyRepository
from notification_service.modules.notification.domain.entities.delivery_attempt import (
    DeliveryAttempt,
)
from notification_service.modules.notification.domain.enums import DeliveryStatus
from notification_service.modules.notification.domain.interfaces.repositories import (
    IDeliveryAttemptRepository,
)
from notification_service.modules.notification.infrastructure.models.delivery_attempt import (
    DeliveryAttemptModel,
)


class DeliveryAttemptRepository(
    SqlAlchemyRepository[DeliveryAttempt, DeliveryAttemptModel],
    IDeliveryAttemptRepository,
):
    """Repository for delivery attempt history."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        super().__init__(session, DeliveryAttemptModel)

    async def add(self, attempt: DeliveryAttempt) -> None:
        await self._add_entity(attempt)

    async def update(self, attempt: DeliveryAttempt) -> None:
        """
        Write the attempt's outcome.

        Raises:
            NotFoundError: If the attempt is not stored
        """
        model = await self._get_model(attempt.id)
        if model is None:
            raise NotFoundError("DeliveryAttempt", attempt.id)

        model.status = attempt.status.value
        model.error_message = attempt.error_message
        model.completed_at = attempt.completed_at

        await self._flush("update", attempt)

    async def list_by_notification(self, notification_id: UUID) -> list[DeliveryAttempt]:
        stmt = (
            select(DeliveryAttemptModel)
            .where(DeliveryAttemptModel.notification_id == notification_id)
            .order_by(DeliveryAttemptModel.attempt_number)
        )
        return await self._find_entities(stmt)

    def _to_entity(self, model: DeliveryAttemptModel) -> DeliveryAttempt:
        """Convert database model to domain entity."""
        return DeliveryAttempt.from_persisted_state(
            entity_id=model.id,
            notification_id=model.notification_id,
            attempt_number=model.attempt_number,
            status=DeliveryStatus(model.status),
            error_message=model.error_message,
            attempted_at=model.attempted_at,
            completed_at=model.completed_at,
        )

    def _to_model(self, attempt: DeliveryAttempt) -> DeliveryAttemptModel:
        """Convert domain entity to database model."""
        return DeliveryAttemptModel(
            id=attempt.id,
            notification_id=attempt.notification_id,
            attempt_number=attempt.attempt_number,
            status=attempt.status.value,
            error_message=attempt.error_message,
            attempted_at=attempt.attempted_at,
            completed_at=attempt.completed_at,
        )
