"""Unit of work contract for the notification module."""

from abc import ABC

from notification_service.core.domain.contracts import IUnitOfWork
from notification_service.modules.notification.domain.interfaces.repositories import (
    IDeliveryAttemptRepository,
    INotificationRepository,
    ITemplateRepository,
)


class INotificationUnitOfWork(IUnitOfWork, ABC):
    """
    Transaction boundary exposing the notification module's repositories.

    Repositories are available between ``__aenter__`` and ``__aexit__``.
    """

    notifications: INotificationRepository
    templates: ITemplateRepository
    delivery_attempts: IDeliveryAttemptRepository
