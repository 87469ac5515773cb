"""Aggregate repository over the event store.

Loads aggregates by folding their event streams and saves decisions by
appending events with optimistic concurrency. After a successful append the
events are published to the event bus.

Consistency:
    - `load` always asks the event store for events newer than the cached
      version, so a read never misses a committed event (strong reads for
      revocation checks)
    - The cache only saves re-folding; it can be dropped at any time and is
      rebuilt from the log alone
    - Publishing happens after commit and is fail-open: a failing projection,
      audit or email handler never rolls back the command

Deadlines:
    Every event store call runs under `asyncio.timeout(timeout_seconds)`.
    Cancellation during `append` leaves nothing committed (append is atomic).
"""

import asyncio
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import Fold, rehydrate
from src.domain.enums import AggregateType
from src.domain.events.base_event import DomainEvent, StoredEvent
from src.domain.protocols.event_bus_protocol import EventBusProtocol
from src.domain.protocols.event_store_protocol import EventStoreProtocol

EventDecoder = Callable[[StoredEvent], DomainEvent]

DEFAULT_CACHE_SIZE = 10_000


@dataclass(frozen=True, slots=True)
class Loaded[S]:
    """Aggregate state plus the stream version it was folded from."""

    state: S
    version: int


class AggregateRepository[S]:
    """Load/save for one aggregate type.

    Attributes:
        aggregate_type: Stream kind handled by this repository.

    Example:
        >>> identities = AggregateRepository(
        ...     aggregate_type=AggregateType.IDENTITY,
        ...     fold=apply_identity_event,
        ...     event_store=store,
        ...     event_bus=bus,
        ...     decode=codec.decode,
        ... )
        >>> loaded = await identities.load(str(user_id))
        >>> events = authenticate(loaded.state, password_matches=True, occurred_at=now)
        >>> result = await identities.save(str(user_id), loaded.version, events)
    """

    def __init__(
        self,
        *,
        aggregate_type: AggregateType,
        fold: Fold[S],
        event_store: EventStoreProtocol,
        event_bus: EventBusProtocol,
        decode: EventDecoder,
        timeout_seconds: float = 5.0,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self.aggregate_type = aggregate_type
        self._fold = fold
        self._store = event_store
        self._bus = event_bus
        self._decode = decode
        self._timeout = timeout_seconds
        self._cache_size = cache_size
        self._cache: OrderedDict[str, Loaded[S]] = OrderedDict()

    async def load(self, aggregate_id: str) -> Loaded[S] | None:
        """Fold the stream (resuming from the cache) and return its state.

        Returns:
            Loaded state, or None when the stream does not exist.

        Raises:
            EventStoreUnavailableError: Store unreachable.
            UnknownEventTypeError: A stored event is not registered.
            TimeoutError: The store did not answer within the deadline.
        """
        cached = self._cache.get(aggregate_id)
        after_version = cached.version if cached else 0

        async with asyncio.timeout(self._timeout):
            stored = await self._store.load(aggregate_id, after_version=after_version)

        if not stored:
            return cached

        state = rehydrate(
            self._fold,
            (self._decode(event) for event in stored),
            cached.state if cached else None,
        )
        if state is None:
            return None
        loaded = Loaded(state=state, version=stored[-1].version)
        self._remember(aggregate_id, loaded)
        return loaded

    async def save(
        self,
        aggregate_id: str,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> Result[int, ConflictError]:
        """Append events after `expected_version`, then publish them.

        An empty decision is a no-op and succeeds with the unchanged version.

        Returns:
            Success(new_version) or Failure(ConflictError) on a stale version.
        """
        if not events:
            return Success(value=expected_version)

        async with asyncio.timeout(self._timeout):
            result = await self._store.append(
                aggregate_id,
                self.aggregate_type.value,
                expected_version,
                events,
            )

        if isinstance(result, Failure):
            self._cache.pop(aggregate_id, None)
            return result

        cached = self._cache.get(aggregate_id)
        if cached is not None and cached.version == expected_version:
            state = rehydrate(self._fold, events, cached.state)
            if state is not None:
                self._remember(aggregate_id, Loaded(state=state, version=result.value))
        else:
            self._cache.pop(aggregate_id, None)

        for event in events:
            await self._bus.publish(event)
        return result

    async def purge(self, aggregate_id: str) -> int:
        """Delete the stream (retention sweeper only)."""
        self._cache.pop(aggregate_id, None)
        async with asyncio.timeout(self._timeout):
            return await self._store.purge(aggregate_id)

    def forget(self, aggregate_id: str) -> None:
        """Drop the cached fold of one aggregate."""
        self._cache.pop(aggregate_id, None)

    def _remember(self, aggregate_id: str, loaded: Loaded[S]) -> None:
        self._cache[aggregate_id] = loaded
        self._cache.move_to_end(aggregate_id)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
