"""Redis implementation of IndexStoreProtocol.

Keys follow the pattern {prefix}:{namespace}:{key}.

Architecture:
- Implements IndexStoreProtocol without inheritance (structural typing)
- `claim` is a single `SET NX`, so it is atomic across processes
- Set indexes use SADD / SREM / SMEMBERS
- Redis exceptions are mapped to IndexStoreUnavailableError. Unlike a cache
  this index backs uniqueness and revocation lookups, so it fails closed.
"""

from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.errors import IndexStoreUnavailableError
from src.infrastructure.index.conflicts import claim_conflict


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisIndexStore:
    """Redis-backed claims and sets.

    Note: Does NOT inherit from IndexStoreProtocol (uses structural typing).

    Attributes:
        _redis: Async Redis client instance.
        _prefix: Key prefix shared by every index key.
    """

    def __init__(self, redis_client: Redis, prefix: str = "keyward:index") -> None:
        """Initialize Redis index store.

        Args:
            redis_client: Async Redis client instance.
            prefix: Key prefix.
        """
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, namespace: str, key: str) -> str:
        return f"{self._prefix}:{namespace}:{key}"

    async def claim(self, namespace: str, key: str, value: str) -> Result[str, ConflictError]:
        redis_key = self._key(namespace, key)
        try:
            if await self._redis.set(redis_key, value, nx=True):
                return Success(value=value)
            holder = await self._redis.get(redis_key)
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index claim failed: {type(e).__name__}") from e
        # Idempotent for the current holder
        if holder is not None and _decode(holder) == value:
            return Success(value=value)
        return Failure(error=claim_conflict(namespace))

    async def set(self, namespace: str, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(namespace, key), value)
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index set failed: {type(e).__name__}") from e

    async def get(self, namespace: str, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(namespace, key))
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index get failed: {type(e).__name__}") from e
        return None if value is None else _decode(value)

    async def release(self, namespace: str, key: str) -> None:
        try:
            await self._redis.delete(self._key(namespace, key))
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index release failed: {type(e).__name__}") from e

    async def add_member(self, namespace: str, key: str, member: str) -> None:
        try:
            await self._redis.sadd(self._key(namespace, key), member)
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index add failed: {type(e).__name__}") from e

    async def remove_member(self, namespace: str, key: str, member: str) -> None:
        try:
            await self._redis.srem(self._key(namespace, key), member)
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index remove failed: {type(e).__name__}") from e

    async def members(self, namespace: str, key: str) -> set[str]:
        try:
            values = await self._redis.smembers(self._key(namespace, key))
        except RedisError as e:
            raise IndexStoreUnavailableError(f"Index read failed: {type(e).__name__}") from e
        return {_decode(value) for value in values}

    async def close(self) -> None:
        """Close the client and its connection pool.

        Should be called when shutting down the application.
        """
        await self._redis.aclose()
