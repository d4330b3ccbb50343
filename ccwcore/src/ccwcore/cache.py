"""
Time-bounded in-memory cache.

Entries are never swept in the background; a stale entry is dropped the next
time it is looked up.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ccwcore.constants import METADATA_CACHE_TTL

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    key: str
    value: V
    inserted_at: float


class TTLCache(Generic[V]):
    def __init__(
        self,
        ttl: float = METADATA_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}

    def _is_fresh(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.inserted_at < self.ttl

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, inserted_at=self._clock())

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        # Counts stale entries too until they are looked up
        return len(self._entries)
