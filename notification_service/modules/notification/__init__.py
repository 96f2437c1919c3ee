"""Notification module.

Models the lifecycle of notifications delivered over email, SMS, push and
webhook channels, together with reusable content templates.
"""
