"""Template Repository Interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from notification_service.modules.notification.domain.aggregates.template import (
    Template,
)
from notification_service.modules.notification.domain.enums import NotificationChannel


class ITemplateRepository(ABC):
    """Repository interface for Template aggregate operations."""

    @abstractmethod
    async def get(self, template_id: UUID) -> Template | None:
        """Load a template by id."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Template | None:
        """Load a template by name; the name is normalized before lookup."""

    @abstractmethod
    async def list_by_channel(self, channel: NotificationChannel) -> list[Template]:
        """All templates for a channel, ordered by name."""

    @abstractmethod
    async def list_active_by_channel(
        self, channel: NotificationChannel
    ) -> list[Template]:
        """Active templates for a channel, ordered by name."""

    @abstractmethod
    async def add(self, template: Template) -> None:
        """Stage a new template."""

    @abstractmethod
    async def update(self, template: Template) -> None:
        """Stage changes to an existing template."""
