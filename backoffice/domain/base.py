"""Base classes for domain layer.

Orders and returns are aggregate roots: every change goes through a
method on the root, which bumps ``version`` and records a domain event.
Services drain the events into the audit log after saving.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar
from uuid import uuid4


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new entity identifier."""
    return str(uuid4())


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable snapshot compared by value.

    Addresses, line items and allocations are value objects: an order
    keeps the copy taken at the time and never follows later edits.
    """


# ============================================================================
# Entity Base
# ============================================================================


@dataclass(eq=False)
class Entity(ABC):
    """Record with a stable string id; equality is by id only."""

    id: str

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))


# ============================================================================
# Aggregate Root Base
# ============================================================================


@dataclass(kw_only=True, eq=False)
class AggregateRoot(Entity):
    """Entity that owns its mutations and records events for them.

    Attributes:
        version: Incremented on every mutation. Persistence does not
            compare it, so concurrent writers of one record are
            last-writer-wins.
        created_at: Creation time.
        updated_at: Time of the last mutation.
    """

    version: int = field(default=1, compare=False)
    created_at: datetime = field(default_factory=utcnow, compare=False)
    updated_at: datetime = field(default_factory=utcnow, compare=False)
    _events: list["DomainEvent"] = field(
        default_factory=list,
        init=False,
        repr=False,
        compare=False,
    )

    def _record_event(self, event: "DomainEvent") -> None:
        self._events.append(event)

    def collect_events(self) -> list["DomainEvent"]:
        """Return pending events and forget them."""
        events, self._events = self._events, []
        return events

    def _touch(self, now: datetime | None = None) -> None:
        """Stamp ``updated_at`` and bump ``version``."""
        self.updated_at = now or utcnow()
        self.version += 1


# ============================================================================
# Domain Event Base
# ============================================================================


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Something that happened to an order or a return.

    Attributes:
        event_type: Dotted name such as ``order.delivered`` (set by subclass).
        occurred_at: When the change was applied.
        aggregate_id: Id of the order or return.
        aggregate_type: ``Order`` or ``Return``.
    """

    event_type: ClassVar[str]

    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: str = field(default="")
    aggregate_type: str = field(default="")

    def log_fields(self) -> dict[str, Any]:
        """Flat key/value pairs for a structured audit log line."""
        return {
            "event_type": self.event_type,
            "aggregate_type": self.aggregate_type,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
            **self._payload(),
        }

    @abstractmethod
    def _payload(self) -> dict[str, Any]:
        """Event-specific fields."""
