"""Shared fold helpers for event-sourced aggregates.

An aggregate's state is never stored: it is the left-fold of its events through
a pure `apply` function. `rehydrate` runs that fold; an incremental cache can
resume it from a previously folded state.
"""

from collections.abc import Callable, Iterable

from src.domain.errors import RehydrationError, UnknownEventTypeError
from src.domain.events.base_event import DomainEvent

type Fold[S] = Callable[[S | None, DomainEvent], S]


def rehydrate[S](fold: Fold[S], events: Iterable[DomainEvent], initial: S | None = None) -> S | None:
    """Fold events left to right, starting from `initial`.

    Returns:
        Resulting state, or None when there were no events and no initial state.
    """
    state = initial
    for event in events:
        state = fold(state, event)
    return state


def require_state[S](state: S | None, event: DomainEvent, aggregate_type: str) -> S:
    """Guard for non-creation events: the stream must already exist."""
    if state is None:
        raise RehydrationError(
            f"{type(event).__name__} cannot open a {aggregate_type} stream"
        )
    return state


def require_new(state: object | None, event: DomainEvent, aggregate_type: str) -> None:
    """Guard for creation events: they may only open a stream."""
    if state is not None:
        raise RehydrationError(
            f"{type(event).__name__} appended to an existing {aggregate_type} stream"
        )


def unknown_event(event: DomainEvent, aggregate_type: str) -> UnknownEventTypeError:
    """Error for an event outside the aggregate's closed union."""
    return UnknownEventTypeError(type(event).__name__, aggregate_type)
