"""Infrastructure event implementations.

This module exports the in-memory event bus implementation. Handlers for
logging, audit and email live in `src.infrastructure.events.handlers`.

Event Bus:
    - InMemoryEventBus: Process-local event bus with fail-open behavior

Usage:
    >>> from src.infrastructure.events import InMemoryEventBus
    >>> from src.infrastructure.events.handlers import LoggingEventHandler
    >>>
    >>> event_bus = InMemoryEventBus(logger=logger)
    >>> logging_handler = LoggingEventHandler(logger=logger)
    >>> event_bus.subscribe(UserRegistered, logging_handler.handle_user_registered)
"""

from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus

__all__ = [
    "InMemoryEventBus",
]
