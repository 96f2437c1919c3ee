"""Domain event types and event bus."""
