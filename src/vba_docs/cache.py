from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Any, Callable

from .urls import normalize_url


def cache_key(url: str) -> str:
    # The URL carries the sanitized query and every filter, so it is the
    # request fingerprint.
    return hashlib.sha256(normalize_url(url).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class ResponseCache:
    """In-memory TTL cache for decoded upstream payloads.

    A ``ttl_s`` of 0 or less disables caching. Expired entries are dropped
    on every write and at most ``max_entries`` are kept, oldest evicted
    first.
    """

    def __init__(
        self,
        ttl_s: float,
        *,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_s = ttl_s
        self._max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl_s > 0

    def __len__(self) -> int:
        return len(self._entries)

    def read_cached(self, url: str) -> Any | None:
        if not self.enabled:
            return None
        key = cache_key(url)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self._ttl_s

    def _evict(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        # Insertion order is write order, so the first key is the oldest.
        while len(self._entries) >= self._max_entries:
            del self._entries[next(iter(self._entries))]

    def write_cached(self, url: str, value: Any) -> None:
        if not self.enabled:
            return
        now = self._clock()
        key = cache_key(url)
        self._entries.pop(key, None)
        self._evict(now)
        self._entries[key] = CacheEntry(value=value, stored_at=now)

    def clear(self) -> None:
        self._entries.clear()
