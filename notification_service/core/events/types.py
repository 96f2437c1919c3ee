"""Domain event types.

An event is a fact raised by an aggregate transition. The payload is the
event's public attributes; identity, timing and correlation live in an
``EventMetadata`` block::

    class NotificationArchived(DomainEvent):
        def __init__(self, notification_id: UUID, metadata: EventMetadata | None = None):
            self.notification_id = notification_id
            super().__init__(metadata=metadata)

        def validate_payload(self) -> None:
            if not isinstance(self.notification_id, UUID):
                raise ValidationError("notification_id is required")
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from notification_service.core.errors import ValidationError
from notification_service.utils.date import utc_now


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass
class EventMetadata:
    """Identity and routing data carried by every event."""

    event_id: UUID = field(default_factory=uuid4)
    event_type: str = ""
    aggregate_id: UUID | None = None
    aggregate_type: str | None = None
    correlation_id: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    version: int = 1

    def stamp(self, event_type: str) -> "EventMetadata":
        self.event_type = event_type
        return self

    def validate(self) -> None:
        """
        Raises:
            ValidationError: On a non-UUID id, a naive timestamp or a version below 1
        """
        problems = []
        if not isinstance(self.event_id, UUID):
            problems.append("event_id must be a UUID")
        if self.timestamp.tzinfo is None:
            problems.append("timestamp must be timezone-aware")
        if self.version < 1:
            problems.append(f"version must be at least 1, got {self.version}")

        if problems:
            raise ValidationError(f"Invalid event metadata: {'; '.join(problems)}")

    def to_dict(self) -> dict[str, Any]:
        return {item.name: _plain(getattr(self, item.name)) for item in fields(self)}


class DomainEvent(ABC):
    """
    Base class for domain events.

    Subclasses set their payload attributes first and then call
    ``super().__init__()``: the metadata is stamped with the class name and
    the whole event is validated before the constructor returns.
    """

    def __init__(self, metadata: EventMetadata | None = None):
        self.metadata = (metadata or EventMetadata()).stamp(type(self).__name__)
        self.validate()

    @property
    def event_type(self) -> str:
        return type(self).__name__

    @property
    def event_id(self) -> UUID:
        return self.metadata.event_id

    @property
    def occurred_at(self) -> datetime:
        return self.metadata.timestamp

    def validate(self) -> None:
        self.metadata.validate()
        self.validate_payload()

    @abstractmethod
    def validate_payload(self) -> None:
        """
        Raises:
            ValidationError: If the payload attributes are missing or malformed
        """

    def payload(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in vars(self).items()
            if key != "metadata" and not key.startswith("_")
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "payload": {key: _plain(value) for key, value in self.payload().items()},
        }

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, DomainEvent) and other.event_id == self.event_id

    def __hash__(self) -> int:
        return hash(self.event_id)

    def __repr__(self) -> str:
        return f"{self.event_type}(event_id={self.event_id})"


__all__ = ["DomainEvent", "EventMetadata"]
