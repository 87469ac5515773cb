"""Fatal event-log errors.

These are exceptions, not Result errors: a stream that cannot be folded means
the stored log and the running code disagree about the event schema. That is
never a business outcome and must never be skipped silently.
"""


class RehydrationError(Exception):
    """An aggregate could not be rebuilt from its events."""


class UnknownEventTypeError(RehydrationError):
    """A stored or folded event type is not part of the aggregate's union.

    Attributes:
        event_type: Name of the offending event type.
        aggregate_type: Stream kind being rebuilt, when known.
    """

    def __init__(self, event_type: str, aggregate_type: str | None = None) -> None:
        self.event_type = event_type
        self.aggregate_type = aggregate_type
        where = f" in {aggregate_type} stream" if aggregate_type else ""
        super().__init__(f"Unknown event type '{event_type}'{where}")
