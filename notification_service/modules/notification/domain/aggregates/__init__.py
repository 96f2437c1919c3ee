"""Notification domain aggregates."""
