"""Event store adapters and the event codec."""

from src.infrastructure.event_store.codec import EventCodec
from src.infrastructure.event_store.in_memory_event_store import InMemoryEventStore
from src.infrastructure.event_store.sqlalchemy_event_store import SQLAlchemyEventStore

__all__ = [
    "EventCodec",
    "InMemoryEventStore",
    "SQLAlchemyEventStore",
]
