"""Notification domain interfaces."""
