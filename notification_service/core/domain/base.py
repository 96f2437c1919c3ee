"""Domain building blocks: value objects, entities and aggregate roots.

Nothing here performs I/O. Aggregates only buffer the events their
transitions raise; a unit of work drains them after the data is stored.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from notification_service.core.errors import ValidationError
from notification_service.core.events.types import DomainEvent
from notification_service.utils.date import ensure_utc, utc_now


class ValueObject(ABC):
    """
    Immutable object compared by value.

    Subclasses call ``super().__init__()``, assign their public attributes
    and finish with ``self._freeze()``. Equality and hashing use
    ``_equality_components``, which defaults to the public attributes.

    Usage Example:
        class Sender(ValueObject):
            def __init__(self, name: str):
                super().__init__()
                self.validate_not_empty(name, "name")
                self.name = name.strip()
                self._freeze()

            def __str__(self) -> str:
                return self.name
    """

    def __init__(self):
        self._frozen = False
        self._hash = None

    def _freeze(self) -> None:
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "_hash" and getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__delattr__(name)

    def _public_items(self) -> list[tuple[str, Any]]:
        return [(key, value) for key, value in vars(self).items() if key[0] != "_"]

    def _equality_components(self) -> tuple:
        return tuple(sorted(self._public_items()))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self._equality_components() == other._equality_components()

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((type(self).__name__, self._equality_components()))
        return self._hash

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self._public_items())
        return f"{type(self).__name__}({fields})"

    @abstractmethod
    def __str__(self) -> str:
        pass

    def to_dict(self) -> dict[str, Any]:
        """Public attributes as plain data. Enums become their values."""
        data: dict[str, Any] = {}
        for key, value in self._public_items():
            if isinstance(value, ValueObject):
                value = value.to_dict()
            elif isinstance(value, Enum):
                value = value.value
            elif isinstance(value, UUID | datetime):
                value = str(value)
            data[key] = value
        return data

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """
        Raises:
            ValidationError: If ``value`` is None or a blank string
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} cannot be empty", field=field_name)


class Entity(ABC):
    """
    Object with identity. Two entities are equal when their ids are.

    ``created_at`` and ``updated_at`` are aware UTC datetimes.
    """

    def __init__(self, entity_id: UUID | None = None):
        self.id = entity_id or uuid4()
        self.created_at = utc_now()
        self.updated_at = self.created_at

        self._validate_entity()

    @classmethod
    def _rehydrate(cls, entity_id: UUID, created_at: datetime):
        """Blank instance for a stored row; bypasses ``__init__`` validation."""
        entity = cls.__new__(cls)
        entity.id = entity_id
        entity.created_at = ensure_utc(created_at)
        entity.updated_at = entity.created_at
        return entity

    def _validate_entity(self) -> None:
        """
        Raises:
            ValidationError: If the id is not a UUID
        """
        if not isinstance(self.id, UUID):
            raise ValidationError(
                f"{type(self).__name__} id must be a UUID, got {self.id!r}"
            )

    def mark_modified(self) -> None:
        self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, type(self)) and other.id == self.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class AggregateRoot(Entity):
    """
    Consistency boundary that records domain events.

    Transitions call ``add_event``; the unit of work calls ``clear_events``
    once the changes are committed. ``version`` backs optimistic locking
    and is bumped by the repository on every successful update.
    """

    def __init__(self, entity_id: UUID | None = None):
        self._events: list[DomainEvent] = []
        self._version = 1
        super().__init__(entity_id)

    @classmethod
    def _rehydrate(cls, entity_id: UUID, created_at: datetime, version: int = 1):
        aggregate = super()._rehydrate(entity_id, created_at)
        aggregate._events = []
        aggregate._version = version
        return aggregate

    def add_event(self, event: DomainEvent) -> None:
        """
        Buffer ``event`` and touch ``updated_at``.

        Raises:
            ValidationError: If ``event`` is not a DomainEvent
        """
        if not isinstance(event, DomainEvent):
            raise ValidationError(f"Expected a DomainEvent, got {type(event).__name__}")

        self._events.append(event)
        self.mark_modified()

    def clear_events(self) -> list[DomainEvent]:
        """Remove and return the buffered events, oldest first."""
        drained, self._events = self._events, []
        return drained

    def get_events(self) -> list[DomainEvent]:
        return list(self._events)

    def has_events(self) -> bool:
        return bool(self._events)

    @property
    def version(self) -> int:
        return self._version

    def increment_version(self) -> None:
        self._version += 1

    def check_version(self, expected_version: int) -> bool:
        return self._version == expected_version

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id}, version={self._version}, "
            f"pending_events={len(self._events)})"
        )


__all__ = ["AggregateRoot", "Entity", "ValueObject"]
