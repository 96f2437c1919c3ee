"""Notification service.

Domain model, application handlers and persistence adapters for multi-channel
notifications (email, SMS, push, webhook) with scheduling, retry policy and
templated content rendering.
"""

__version__ = "1.0.0"
