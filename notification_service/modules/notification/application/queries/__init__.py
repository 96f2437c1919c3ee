"""Notification application queries.

Queries request information without changing state.
"""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from notification_service.core.cqrs.base import Query
from notification_service.core.errors import ValidationError
from notification_service.modules.notification.domain.enums import NotificationStatus
from notification_service.utils.validation import is_missing_id


class GetNotificationByIdQuery(Query):
    """Query to load one notification."""

    def __init__(self, notification_id: UUID):
        super().__init__()
        self.notification_id = notification_id
        self._freeze()

    def _validate_query(self) -> None:
        if is_missing_id(self.notification_id):
            raise ValidationError("notification_id is required", field="notification_id")


class GetNotificationsByStatusQuery(Query):
    """Query to list notifications in one status."""

    def __init__(self, status: NotificationStatus):
        super().__init__()
        self.status = status
        self._freeze()

    def _validate_query(self) -> None:
        if not isinstance(self.status, NotificationStatus):
            raise ValidationError("Invalid notification status", field="status")


class GetPendingNotificationsQuery(Query):
    """Query to list pending notifications whose send time has arrived."""

    def __init__(self):
        super().__init__()
        self._freeze()


class RenderTemplateQuery(Query):
    """Query to render a named template with placeholder values."""

    def __init__(self, template_name: str, data: Mapping[str, Any] | None = None):
        super().__init__()
        self.template_name = template_name
        self.data = dict(data or {})
        self._freeze()

    def _validate_query(self) -> None:
        if self.template_name is None or not self.template_name.strip():
            raise ValidationError("template_name is required", field="template_name")


class GetDeliveryAttemptsQuery(Query):
    """Query to list the delivery attempts of a notification."""

    def __init__(self, notification_id: UUID):
        super().__init__()
        self.notification_id = notification_id
        self._freeze()

    def _validate_query(self) -> None:
        if is_missing_id(self.notification_id):
            raise ValidationError("notification_id is required", field="notification_id")


__all__ = [
    "GetDeliveryAttemptsQuery",
    "GetNotificationByIdQuery",
    "GetNotificationsByStatusQuery",
    "GetPendingNotificationsQuery",
    "RenderTemplateQuery",
]
