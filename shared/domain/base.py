"""
Base Domain Classes

Building blocks shared by every bounded context:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened and other contexts may react to
- EventRecorder: Mixin for aggregate roots (plain or Django models) that
  record domain events until the unit of work publishes them
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


def _serialize(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, ValueObject):
        return str(value)
    return value


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Events are collected by the unit of work and published to the message
    bus only after the surrounding transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: Any = None

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        """Convert event to a JSON friendly dictionary"""
        payload = {f.name: _serialize(getattr(self, f.name)) for f in fields(self)}
        payload['event_type'] = self.event_type
        return payload


class EventRecorder:
    """
    Mixin for aggregate roots

    Keeps recorded events on the instance. Works for Django models too,
    which cannot declare dataclass fields.
    """

    def _pending_events(self) -> List[DomainEvent]:
        pending = self.__dict__.get('_recorded_events')
        if pending is None:
            pending = []
            self.__dict__['_recorded_events'] = pending
        return pending

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        self._pending_events().append(event)

    def clear_events(self):
        """Clear all collected events (called after collection)"""
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._pending_events())
