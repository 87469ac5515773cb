"""In-memory event store adapter.

Implements EventStoreProtocol for development and tests. Streams live in a
dict; each stream has its own asyncio.Lock, so appends to different aggregates
never wait on each other.

Rules enforced:
    - Append-only: a stream only grows (except `purge`, retention only)
    - Optimistic concurrency: `expected_version` must equal the stream length
    - Atomic: events are encoded before the stream is touched, then added in
      one step; a failure or cancellation leaves the stream unchanged
"""

import asyncio
from collections import defaultdict
from collections.abc import Sequence

from src.core.enums import ErrorCode
from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.events.base_event import DomainEvent, StoredEvent
from src.infrastructure.event_store.codec import EventCodec


class InMemoryEventStore:
    """Dictionary-backed event log (single process).

    Attributes:
        _streams: aggregate_id -> stored events in version order.
        _locks: aggregate_id -> lock serialising appends to that stream.
    """

    def __init__(self, codec: EventCodec | None = None) -> None:
        self._codec = codec or EventCodec()
        self._streams: dict[str, list[StoredEvent]] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def append(
        self,
        aggregate_id: str,
        aggregate_type: str,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> Result[int, ConflictError]:
        async with self._locks[aggregate_id]:
            stream = self._streams.get(aggregate_id, [])
            current = len(stream)
            if expected_version != current:
                return Failure(
                    error=_conflict(aggregate_type, aggregate_id, expected_version, current)
                )
            if not events:
                return Success(value=current)

            stored = []
            for offset, event in enumerate(events, start=1):
                event_type, payload = self._codec.encode(event)
                stored.append(
                    StoredEvent(
                        aggregate_id=aggregate_id,
                        aggregate_type=aggregate_type,
                        version=current + offset,
                        event_type=event_type,
                        payload=payload,
                        occurred_at=event.occurred_at,
                        event_id=event.event_id,
                    )
                )
            self._streams[aggregate_id] = [*stream, *stored]
            return Success(value=current + len(stored))

    async def load(self, aggregate_id: str, after_version: int = 0) -> list[StoredEvent]:
        stream = self._streams.get(aggregate_id, [])
        return stream[after_version:]

    async def current_version(self, aggregate_id: str) -> int:
        return len(self._streams.get(aggregate_id, []))

    async def purge(self, aggregate_id: str) -> int:
        async with self._locks[aggregate_id]:
            removed = self._streams.pop(aggregate_id, [])
        self._locks.pop(aggregate_id, None)
        return len(removed)


def _conflict(
    aggregate_type: str, aggregate_id: str, expected: int, actual: int
) -> ConflictError:
    return ConflictError(
        code=ErrorCode.CONCURRENCY_CONFLICT,
        message=f"Stream {aggregate_id} is at version {actual}, expected {expected}",
        resource_type=aggregate_type,
        expected_version=expected,
        actual_version=actual,
    )
