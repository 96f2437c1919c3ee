"""Core building blocks shared by every module.

- domain: ValueObject, Entity, AggregateRoot and port contracts
- events: domain event types and the in-process event bus
- cqrs: command/query base classes, handlers and buses
- infrastructure: SQLAlchemy engine/session setup and the unit of work
- Cross-cutting: configuration, errors, structured logging
"""
