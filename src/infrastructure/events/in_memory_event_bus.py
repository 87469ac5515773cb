"""In-memory event bus implementation.

Implements EventBusProtocol with a dictionary-based registry. Committed
aggregate events and security signals are fanned out to the logging, audit and
email handlers. Handler failures are isolated: they are logged and never reach
the command that published the event.

Usage:
    >>> bus = InMemoryEventBus(logger=logger)
    >>> bus.subscribe(UserRegistered, email_handler.handle_user_registered)
    >>> await bus.publish(UserRegistered(user_id=uuid7(), email="a@b.c", password_hash=h))
"""

import asyncio
from collections import defaultdict

from src.domain.events.base_event import DomainEvent
from src.domain.protocols.event_bus_protocol import EventHandler
from src.domain.protocols.logger_protocol import LoggerProtocol


class InMemoryEventBus:
    """In-memory event bus with fail-open behavior.

    Thread Safety:
        NOT thread-safe (single event loop). For several processes, swap in a
        broker-backed adapter; the protocol is unchanged.

    Attributes:
        _handlers: Event class -> list of async handlers.
        _logger: Logger for handler failures and event publishing.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._logger = logger

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register event handler for an exact event type.

        Notes:
            - No duplicate detection (same handler can be registered twice)
            - Handlers should be idempotent
        """
        self._handlers[event_type].append(handler)

    def handler_count(self, event_type: type[DomainEvent]) -> int:
        """Number of handlers subscribed to `event_type`."""
        return len(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        """Publish event to all registered handlers.

        Flow:
            1. Look up handlers for type(event); none registered is a no-op
            2. Execute all handlers with asyncio.gather(return_exceptions=True)
            3. Log any handler exceptions (warning level)
            4. Return (never raise)
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            return

        self._logger.debug(
            "event_publishing",
            event_type=event_type.__name__,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        results = await asyncio.gather(
            *(handler(event) for handler in handlers),
            return_exceptions=True,
        )

        for handler, result in zip(handlers, results, strict=True):
            if isinstance(result, Exception):
                self._logger.warning(
                    "event_handler_failed",
                    event_type=event_type.__name__,
                    event_id=str(event.event_id),
                    handler_name=getattr(handler, "__qualname__", repr(handler)),
                    error_type=type(result).__name__,
                    error_message=str(result),
                )
