"""Event codec: domain event dataclasses <-> JSON payloads.

Every persisted event class in EVENT_REGISTRY gets a pydantic TypeAdapter.
Encoding dumps the dataclass in JSON mode (UUIDs, datetimes, enums and
frozensets become JSON values); decoding validates the payload back into the
frozen dataclass.

`event_id` and `occurred_at` travel on the StoredEvent envelope, not in the
payload.

Usage:
    >>> codec = EventCodec()
    >>> event_type, payload = codec.encode(event)
    >>> codec.decode(stored_event)
"""

from typing import Any

from pydantic import TypeAdapter

from src.domain.errors import UnknownEventTypeError
from src.domain.events.base_event import DomainEvent, StoredEvent
from src.domain.events.registry import get_persisted_events

_ENVELOPE_FIELDS = frozenset({"event_id", "occurred_at"})


class EventCodec:
    """Name -> class registry with one TypeAdapter per event class."""

    def __init__(self, event_classes: dict[str, type[DomainEvent]] | None = None) -> None:
        classes = event_classes if event_classes is not None else get_persisted_events()
        self._adapters: dict[str, TypeAdapter[Any]] = {
            name: TypeAdapter(cls) for name, cls in classes.items()
        }

    def event_type(self, event: DomainEvent) -> str:
        """Registered name of `event`.

        Raises:
            UnknownEventTypeError: The class is not a persisted event.
        """
        name = type(event).__name__
        if name not in self._adapters:
            raise UnknownEventTypeError(name)
        return name

    def encode(self, event: DomainEvent) -> tuple[str, dict[str, Any]]:
        """Serialize an event.

        Returns:
            (event_type, payload) where payload is JSON-compatible.
        """
        name = self.event_type(event)
        data = self._adapters[name].dump_python(event, mode="json")
        payload = {key: value for key, value in data.items() if key not in _ENVELOPE_FIELDS}
        return name, payload

    def decode(self, stored: StoredEvent) -> DomainEvent:
        """Rebuild the domain event carried by a stored envelope.

        Raises:
            UnknownEventTypeError: `stored.event_type` is not registered.
                Never skipped: the log and the code disagree on the schema.
        """
        adapter = self._adapters.get(stored.event_type)
        if adapter is None:
            raise UnknownEventTypeError(stored.event_type, stored.aggregate_type)
        return adapter.validate_python(
            {
                **stored.payload,
                "event_id": stored.event_id,
                "occurred_at": stored.occurred_at,
            }
        )
