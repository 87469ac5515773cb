"""Index store protocol (port).

Strongly consistent secondary lookups for invariants that span aggregates:
email uniqueness, linked-identity uniqueness, authorization code lookup,
device-to-session and user-to-sessions. Unlike read-model projections these
are written synchronously by command handlers, so they are never stale.

Implementations:
    - InMemoryIndexStore: src/infrastructure/index/in_memory_index_store.py
    - RedisIndexStore: src/infrastructure/index/redis_index_store.py
"""

from __future__ import annotations

from typing import Protocol

from src.core.errors import ConflictError
from src.core.result import Result


class IndexNamespace:
    """Well-known index namespaces."""

    EMAIL = "email"
    LINKED_IDENTITY = "linked_identity"
    AUTHORIZATION_CODE = "authorization_code"
    DEVICE_SESSION = "device_session"
    USER_SESSIONS = "user_sessions"
    SESSION_HANDLE = "session_handle"
    EXPIRING = "expiring"


class ExpiryKey:
    """Keys in the `expiring` namespace (sets of streams the retention sweeper
    tracks)."""

    AUTHORIZATION = "authorization"
    TOKEN = "token"


class IndexStoreProtocol(Protocol):
    """Key -> value claims and key -> set-of-members indexes.

    Raises:
        IndexStoreUnavailableError: The backing store cannot be reached.
    """

    async def claim(self, namespace: str, key: str, value: str) -> Result[str, ConflictError]:
        """Atomically bind `key` to `value` if unbound.

        Idempotent: claiming a key already held by the same value succeeds.

        Returns:
            Success(value) or Failure(ConflictError) when held by another value.
        """
        ...

    async def set(self, namespace: str, key: str, value: str) -> None:
        """Bind `key` to `value`, replacing any previous binding."""
        ...

    async def get(self, namespace: str, key: str) -> str | None:
        """Value bound to `key`, or None."""
        ...

    async def release(self, namespace: str, key: str) -> None:
        """Remove the binding for `key` (no-op when unbound)."""
        ...

    async def add_member(self, namespace: str, key: str, member: str) -> None:
        """Add `member` to the set stored at `key`."""
        ...

    async def remove_member(self, namespace: str, key: str, member: str) -> None:
        """Remove `member` from the set stored at `key`."""
        ...

    async def members(self, namespace: str, key: str) -> set[str]:
        """All members of the set stored at `key`."""
        ...
