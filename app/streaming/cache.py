"""Client-side query cache with explicit invalidation.

Entries are keyed by tuples such as ``("conversations",)`` or
``("conversations", 7)``. A mutation never clears the cache implicitly: it
computes the keys it affects (see the ``*_cache_keys`` helpers) and hands
them to ``QueryCache.invalidate``. Invalidating a key drops that entry and
every entry below it, so ``("conversations",)`` also drops
``("conversations", 7)``.
"""
from typing import Any, Dict, Hashable, List, Tuple

CacheKey = Tuple[Hashable, ...]

_MISSING = object()


class QueryCache:
    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}

    def get(self, key: CacheKey, default=None):
        return self._entries.get(tuple(key), default)

    def set(self, key: CacheKey, value: Any):
        self._entries[tuple(key)] = value

    def __contains__(self, key) -> bool:
        return self._entries.get(tuple(key), _MISSING) is not _MISSING

    def invalidate(self, *keys: CacheKey) -> List[CacheKey]:
        prefixes = [tuple(k) for k in keys]
        dropped = [
            entry for entry in self._entries
            if any(entry[:len(prefix)] == prefix for prefix in prefixes)
        ]
        for entry in dropped:
            del self._entries[entry]
        return dropped


def conversation_cache_keys(conversation_id: int) -> List[CacheKey]:
    return [("conversations", conversation_id), ("conversations",)]

