"""
Global pytest configuration and fixtures for all tests.

Provides:
- Logging configured for the test environment
- Environment isolation for configuration tests
- Common test data
"""

import os
from uuid import uuid4

import pytest

from notification_service.core.enums import Environment
from notification_service.core.logging import LogConfig, configure_logging
from notification_service.tests.builders import NotificationBuilder, TemplateBuilder

configure_logging(LogConfig(environment=Environment.TESTING))


@pytest.fixture
def isolated_environ(monkeypatch):
    """Give the test a private copy of ``os.environ``."""
    monkeypatch.setattr(os, "environ", dict(os.environ))
    return os.environ


@pytest.fixture
def sample_notification_id():
    """Sample notification ID for testing."""
    return uuid4()


@pytest.fixture
def notification_builder():
    """Fresh notification builder."""
    return NotificationBuilder()


@pytest.fixture
def template_builder():
    """Fresh template builder."""
    return TemplateBuilder()
