"""Notification domain entities."""
