"""Index store adapters (strongly consistent secondary lookups)."""

from src.infrastructure.index.in_memory_index_store import InMemoryIndexStore
from src.infrastructure.index.redis_index_store import RedisIndexStore

__all__ = [
    "InMemoryIndexStore",
    "RedisIndexStore",
]
