"""Event bus protocol (port) for domain events.

Committed aggregate events and security signals fan out through the bus to
logging, audit and email handlers. Projections fed by the bus may lag; the
command side never reads them.

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain layer defines the interface (port)
    - Infrastructure provides InMemoryEventBus
    - Container (src/core/container/events.py) wires subscriptions

Usage:
    >>> event_bus.subscribe(UserRegistered, email_handler.handle_user_registered)
    >>> await event_bus.publish(event)
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from src.domain.events.base_event import DomainEvent

# Type alias for event handler functions
EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async event handler: takes one event, returns None, side effects only."""


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Key Requirements:
        1. **Fail-open behavior**: One handler failure must NOT prevent other
           handlers from executing, and never reaches the publisher.
        2. **Async support**: All handlers are async.
        3. **Type-based routing**: Handlers registered for a type only receive
           events of exactly that type.
        4. **No ordering guarantees** between handlers of one event.
    """

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register event handler for specific event type.

        Args:
            event_type: Class of event to handle (no inheritance matching).
            handler: Async function called with each published event.
        """
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Publish event to all registered handlers.

        Publish only facts: call after the events were committed to the
        event store. No handlers registered is a no-op.
        """
        ...
