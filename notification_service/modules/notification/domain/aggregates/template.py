"""Template aggregate for reusable notification content.

A template holds a body (and, for email, a subject) with ``{{name}}``
placeholders. Rendering substitutes every placeholder in one left-to-right
pass and fails on the first placeholder the data does not supply.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, NamedTuple
from uuid import UUID

from notification_service.core.domain.base import AggregateRoot
from notification_service.core.logging import get_logger
from notification_service.modules.notification.domain.enums import NotificationChannel
from notification_service.modules.notification.domain.errors import (
    EmptyFieldError,
    InactiveTemplateError,
    MissingSubjectError,
)
from notification_service.modules.notification.domain.value_objects import (
    TemplateData,
)
from notification_service.utils.date import ensure_utc

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


class RenderedContent(NamedTuple):
    """Output of rendering a template."""

    subject: str | None
    body: str


class Template(AggregateRoot):
    """
    Named, channel-specific content template.

    Names are trimmed and lowercased; uniqueness is enforced by the store.
    ``updated_at`` stays None until the first change.
    """

    def __init__(
        self,
        name: str,
        channel: NotificationChannel,
        body: str,
        subject: str | None = None,
        entity_id: UUID | None = None,
    ):
        if name is None or not name.strip():
            raise EmptyFieldError("name")
        self._validate_content(channel, body, subject)

        super().__init__(entity_id)

        self.name = self.normalize_name(name)
        self.channel = channel
        self.body = body
        self.subject = subject.strip() if subject else None
        self.is_active = True
        self.updated_at: datetime | None = None

    @staticmethod
    def normalize_name(name: str) -> str:
        """Canonical form of a template name."""
        return name.strip().lower()

    @staticmethod
    def _validate_content(
        channel: NotificationChannel, body: str, subject: str | None
    ) -> None:
        if body is None or not body.strip():
            raise EmptyFieldError("body")

        if channel.requires_subject() and (subject is None or not subject.strip()):
            raise MissingSubjectError()

    # =================================================================================
    # BEHAVIOR
    # =================================================================================

    def render(self, data: TemplateData | Mapping[str, Any]) -> RenderedContent:
        """
        Render subject and body with the given placeholder values.

        Raises:
            InactiveTemplateError: If the template is deactivated
            MissingPlaceholderError: On the first placeholder without a value
        """
        if not self.is_active:
            raise InactiveTemplateError(self.name)

        if not isinstance(data, TemplateData):
            data = TemplateData(data)

        subject = self._substitute(self.subject, data) if self.subject else None
        body = self._substitute(self.body, data)

        return RenderedContent(subject=subject, body=body)

    @staticmethod
    def _substitute(text: str, data: TemplateData) -> str:
        return PLACEHOLDER_PATTERN.sub(lambda match: data.get_value(match.group(1)), text)

    def activate(self) -> None:
        """Make the template usable. No-op when already active."""
        if self.is_active:
            return

        self.is_active = True
        self.mark_modified()
        logger.debug("Template activated", template_id=str(self.id), name=self.name)

    def deactivate(self) -> None:
        """Prevent the template from being rendered. No-op when already inactive."""
        if not self.is_active:
            return

        self.is_active = False
        self.mark_modified()
        logger.debug("Template deactivated", template_id=str(self.id), name=self.name)

    def update_content(self, body: str, subject: str | None = None) -> None:
        """
        Replace body and subject.

        Raises:
            EmptyFieldError: If body is blank
            MissingSubjectError: If an email template loses its subject
        """
        self._validate_content(self.channel, body, subject)

        self.body = body
        self.subject = subject.strip() if subject else None
        self.mark_modified()

    def get_placeholders(self) -> set[str]:
        """Names of every placeholder used in subject and body."""
        placeholders = set(PLACEHOLDER_PATTERN.findall(self.body))
        if self.subject:
            placeholders.update(PLACEHOLDER_PATTERN.findall(self.subject))
        return placeholders

    # =================================================================================
    # RECONSTRUCTION
    # =================================================================================

    @classmethod
    def from_persisted_state(
        cls,
        *,
        entity_id: UUID,
        name: str,
        channel: NotificationChannel,
        body: str,
        subject: str | None,
        is_active: bool,
        created_at: datetime,
        updated_at: datetime | None,
    ) -> "Template":
        """Rebuild a stored template without validation."""
        template = cls._rehydrate(entity_id, created_at)
        template.name = name
        template.channel = channel
        template.body = body
        template.subject = subject
        template.is_active = is_active
        template.updated_at = ensure_utc(updated_at)
        return template

    def __repr__(self) -> str:
        return (
            f"Template(id={self.id}, name={self.name!r}, "
            f"channel={self.channel.value}, is_active={self.is_active})"
        )
