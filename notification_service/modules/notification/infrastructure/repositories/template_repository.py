"""Repository implementation for Template aggregate."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.infrastructure.repository import SqlAlchemyRepository
from notification_service.modules.notification.domain.aggregates.template import (
    Template,
)
from notification_service.modules.notification.domain.enums import NotificationChannel
from notification_service.modules.notification.domain.errors import (
    TemplateNotFoundError,
)
from notification_service.modules.notification.domain.interfaces.repositories import (
    ITemplateRepository,
)
from notification_service.modules.notification.infrastructure.models.template import (
    TemplateModel,
)


class TemplateRepository(SqlAlchemyRepository[Template, TemplateModel], ITemplateRepository):
    """Repository for managing template persistence."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        super().__init__(session, TemplateModel)

    async def get(self, template_id: UUID) -> Template | None:
        return await self._find_entity(template_id)

    async def get_by_name(self, name: str) -> Template | None:
        stmt = select(TemplateModel).where(
            TemplateModel.name == Template.normalize_name(name)
        )
        templates = await self._find_entities(stmt)
        return templates[0] if templates else None

    async def list_by_channel(self, channel: NotificationChannel) -> list[Template]:
        stmt = (
            select(TemplateModel)
            .where(TemplateModel.channel == channel.value)
            .order_by(TemplateModel.name)
        )
        return await self._find_entities(stmt)

    async def list_active_by_channel(
        self, channel: NotificationChannel
    ) -> list[Template]:
        stmt = (
            select(TemplateModel)
            .where(
                TemplateModel.channel == channel.value,
                TemplateModel.is_active.is_(True),
            )
            .order_by(TemplateModel.name)
        )
        return await self._find_entities(stmt)

    async def add(self, template: Template) -> None:
        await self._add_entity(template)

    async def update(self, template: Template) -> None:
        """
        Write the template's current state.

        Raises:
            TemplateNotFoundError: If the template is not stored
        """
        model = await self._get_model(template.id)
        if model is None:
            raise TemplateNotFoundError(template.id)

        model.subject = template.subject
        model.body = template.body
        model.is_active = template.is_active
        model.updated_at = template.updated_at

        await self._flush("update", template)
        self._track(template)

    def _to_entity(self, model: TemplateModel) -> Template:
        """Convert database model to domain aggregate."""
        return Template.from_persisted_state(
            entity_id=model.id,
            name=model.name,
            channel=NotificationChannel(model.channel),
            body=model.body,
            subject=model.subject,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, template: Template) -> TemplateModel:
        """Convert domain aggregate to database model."""
        return TemplateModel(
            id=template.id,
            name=template.name,
            channel=template.channel.value,
            subject=template.subject,
            body=template.body,
            is_active=template.is_active,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
