"""
Base Domain Classes

Building blocks for the domain layer:
- Entity: Objects with unique identity
- ValueObject: Immutable objects compared by value
- Aggregate: Consistency boundary that records domain events
- DomainEvent: Something that happened, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import UUID, uuid4


def utcnow() -> datetime:
    """Timezone-aware current time used for all domain timestamps"""
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class Entity(ABC):
    """
    Base class for all entities

    Entities have unique identity and are mutable.
    Two entities are equal if they are of the same class and their IDs are equal.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        """Mark the entity as modified now"""
        self.updated_at = utcnow()


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    """
    pass


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Base class for aggregate roots

    Aggregates record domain events while they change state. The unit of
    work collects them and publishes them once the transaction commits.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False, compare=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of the recorded events"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Subclasses add their own payload fields; to_dict() serializes all of
    them so events can cross a process boundary (e.g. a Celery task).
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'event_type': self.event_type}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (UUID, datetime)):
                value = value.isoformat() if isinstance(value, datetime) else str(value)
            elif isinstance(value, ValueObject) and hasattr(value, 'to_dict'):
                value = value.to_dict()
            data[f.name] = value
        return data
