"""Notification repository implementations."""

from notification_service.modules.notification.infrastructure.repositories.delivery_attempt_repository import (
    DeliveryAttemptRepository,
)
from notification_service.modules.notification.infrastructure.repositories.notification_repository import (
    NotificationRepository,
)
from notification_service.modules.notification.infrastructure.repositories.template_repository import (
    TemplateRepository,
)

__all__ = [
    "DeliveryAttemptRepository",
    "NotificationRepository",
    "TemplateRepository",
]
