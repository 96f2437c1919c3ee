"""Notification repository interfaces."""

from notification_service.modules.notification.domain.interfaces.repositories.delivery_attempt_repository import (
    IDeliveryAttemptRepository,
)
from notification_service.modules.notification.domain.interfaces.repositories.notification_repository import (
    INotificationRepository,
)
from notification_service.modules.notification.domain.interfaces.repositories.template_repository import (
    ITemplateRepository,
)

__all__ = [
    "IDeliveryAttemptRepository",
    "INotificationRepository",
    "ITemplateRepository",
]
