"""Event store protocol (port).

The event store is the only durable state in the system: a per-aggregate,
append-only, gapless log. Aggregate state is always a fold of `load()`.

Implementations:
    - InMemoryEventStore: src/infrastructure/event_store/in_memory_event_store.py
    - SQLAlchemyEventStore: src/infrastructure/event_store/sqlalchemy_event_store.py
"""

from collections.abc import Sequence
from typing import Protocol

from src.core.errors import ConflictError
from src.core.result import Result
from src.domain.events.base_event import DomainEvent, StoredEvent


class EventStoreProtocol(Protocol):
    """Append-only event log with optimistic concurrency.

    Contract:
        - `append` is atomic: all events commit contiguously or none do.
        - `append` returns Failure(ConflictError) when `expected_version`
          differs from the stored version; it never retries internally.
        - `load` returns events in ascending version order with no gaps.
        - Commands on different aggregates never block each other.
        - Cancellation while appending leaves nothing committed.

    Raises:
        EventStoreUnavailableError: The backing store cannot be reached.
    """

    async def append(
        self,
        aggregate_id: str,
        aggregate_type: str,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> Result[int, ConflictError]:
        """Append events after `expected_version`.

        Args:
            aggregate_id: Stream identifier.
            aggregate_type: Stream kind, recorded on every event.
            expected_version: Version the caller's decision was based on
                (0 for a new stream).
            events: Events to append, in order.

        Returns:
            Success(new_version) or Failure(ConflictError) on a stale version.
        """
        ...

    async def load(self, aggregate_id: str, after_version: int = 0) -> list[StoredEvent]:
        """Load the events of a stream with version > `after_version`."""
        ...

    async def current_version(self, aggregate_id: str) -> int:
        """Current version of a stream (0 when it does not exist)."""
        ...

    async def purge(self, aggregate_id: str) -> int:
        """Delete a whole stream. Retention sweeper only.

        Returns:
            Number of events removed.
        """
        ...
