"""In-memory implementation of IndexStoreProtocol.

Single-process index for development and tests. One asyncio.Lock guards the
check-and-set in `claim`; every other operation is a single dict or set
operation with no await in between, so it is atomic on the event loop.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.infrastructure.index.conflicts import claim_conflict


class InMemoryIndexStore:
    """Dict-backed claims and sets.

    Attributes:
        _values: (namespace, key) -> value.
        _sets: (namespace, key) -> members.
    """

    def __init__(self) -> None:
        self._values: dict[tuple[str, str], str] = {}
        self._sets: defaultdict[tuple[str, str], set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def claim(self, namespace: str, key: str, value: str) -> Result[str, ConflictError]:
        async with self._lock:
            holder = self._values.setdefault((namespace, key), value)
        if holder != value:
            return Failure(error=claim_conflict(namespace))
        return Success(value=value)

    async def set(self, namespace: str, key: str, value: str) -> None:
        self._values[(namespace, key)] = value

    async def get(self, namespace: str, key: str) -> str | None:
        return self._values.get((namespace, key))

    async def release(self, namespace: str, key: str) -> None:
        self._values.pop((namespace, key), None)

    async def add_member(self, namespace: str, key: str, member: str) -> None:
        self._sets[(namespace, key)].add(member)

    async def remove_member(self, namespace: str, key: str, member: str) -> None:
        members = self._sets.get((namespace, key))
        if members is not None:
            members.discard(member)
            if not members:
                del self._sets[(namespace, key)]

    async def members(self, namespace: str, key: str) -> set[str]:
        return set(self._sets.get((namespace, key), ()))
