"""Bounded retry for load-decide-append operations.

Commands on one aggregate are serialized only by the event store's optimistic
append. When the append loses a race the whole operation is re-run against
freshly loaded state, a bounded number of times, and the conflict is then
surfaced to the caller (never an indefinite wait).
"""

from collections.abc import Awaitable, Callable

from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result


def is_concurrency_conflict(error: DomainError) -> bool:
    """Stale-version conflicts are retryable; uniqueness conflicts are not."""
    return isinstance(error, ConflictError) and error.code == ErrorCode.CONCURRENCY_CONFLICT


async def retry_on_conflict[T](
    operation: Callable[[], Awaitable[Result[T, DomainError]]],
    *,
    attempts: int,
) -> Result[T, DomainError]:
    """Run `operation` until it stops failing with a concurrency conflict.

    Args:
        operation: Loads current state, decides and appends. Must be safe to
            re-run (it re-reads everything it decides on).
        attempts: Total number of runs (at least 1).

    Returns:
        The first non-conflict result, or the last conflict.
    """
    result = await operation()
    for _ in range(max(attempts, 1) - 1):
        if not (isinstance(result, Failure) and is_concurrency_conflict(result.error)):
            break
        result = await operation()
    return result
