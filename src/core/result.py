"""Result types for railway-oriented programming.

Business failures (bad credentials, stale versions, replayed codes) travel
through the system as values instead of exceptions. Handlers return a
``Result`` and callers pattern-match on it.

Usage:
    def parse_scope(raw: str) -> Result[frozenset[str], ValidationError]:
        scopes = frozenset(raw.split())
        if not scopes:
            return Failure(error=ValidationError(...))
        return Success(value=scopes)

    match parse_scope("openid email"):
        case Success(value=scopes):
            ...
        case Failure(error=error):
            ...
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


# Type alias for Result union
type Result[T, E] = Success[T] | Failure[E]
