"""Notification infrastructure database models.

SQLAlchemy models persisting the notification aggregates and delivery
attempts.
"""

from notification_service.modules.notification.infrastructure.models.delivery_attempt import (
    DeliveryAttemptModel,
)
from notification_service.modules.notification.infrastructure.models.notification import (
    NotificationModel,
)
from notification_service.modules.notification.infrastructure.models.template import (
    TemplateModel,
)

__all__ = [
    "DeliveryAttemptModel",
    "NotificationModel",
    "TemplateModel",
]
