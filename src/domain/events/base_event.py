"""Base domain event class and the persisted event envelope.

Domain events represent "things that happened" and are always named in past
tense (UserRegistered, TokenRevoked). Aggregate events are the only source of
truth for aggregate state: the state of a user, client, authorization request,
token or session is the left-fold of its events.

Architecture:
    - Frozen dataclass (immutable after creation)
    - Auto-generated event_id (UUID) for event tracking
    - occurred_at timestamp (UTC) for event ordering; command handlers pass
      the injected clock's time explicitly
    - StoredEvent is the envelope the event store persists: the event payload
      plus the aggregate id, aggregate type and its 1-based version

Usage:
    >>> @dataclass(frozen=True, kw_only=True, slots=True)
    ... class UserRegistered(DomainEvent):
    ...     user_id: UUID
    ...     email: str
    >>>
    >>> event = UserRegistered(user_id=uuid7(), email="test@example.com")
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    All domain events MUST:
        1. Inherit from this base class
        2. Use past tense naming (UserRegistered, NOT RegisterUser)
        3. Be frozen dataclasses (immutable after creation)
        4. Use kw_only=True (force keyword arguments for clarity)

    Attributes:
        event_id: Unique identifier for this event instance. Auto-generated
            UUID v4 if not provided. Used for deduplication and audit linking.
        occurred_at: Timestamp when the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, kw_only=True, slots=True)
class StoredEvent:
    """An event as persisted in the append-only log.

    Immutable once appended. `version` is 1-based and gapless per aggregate.

    Attributes:
        aggregate_id: Stream identifier (user id, client id, jti, ...).
        aggregate_type: Stream kind ("identity", "client", ...).
        version: Position of the event in its stream.
        event_type: Registered event name (class name).
        payload: JSON-compatible event body.
        occurred_at: When the event happened (UTC).
        event_id: Unique event identifier.
    """

    aggregate_id: str
    aggregate_type: str
    version: int
    event_type: str
    payload: dict[str, Any]
    occurred_at: datetime
    event_id: UUID
