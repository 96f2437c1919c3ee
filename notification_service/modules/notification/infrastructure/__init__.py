"""Notification infrastructure: persistence adapters and wiring."""
