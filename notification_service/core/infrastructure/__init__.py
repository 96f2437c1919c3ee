"""Persistence infrastructure shared by modules."""
