"""Test data builders for the notification module."""

from notification_service.tests.builders.notification_builder import (
    NotificationBuilder,
    TemplateBuilder,
    future,
    unique_email,
)

__all__ = ["NotificationBuilder", "TemplateBuilder", "future", "unique_email"]
