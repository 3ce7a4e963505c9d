"""In-memory key/value cache with lazily checked expiry."""

import time
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

DEFAULT_TTL_SECONDS = 4 * 60 * 60


class CacheEntry(BaseModel):
    data: Any = None
    timestamp: float
    expires_at: float


class CacheService:
    """
    Key/value cache with a per-entry TTL.

    Entries are evicted when a read finds them expired; there is no
    background sweep and no capacity bound.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.default_ttl = default_ttl
        self._clock = clock or time.time
        self._cache: Dict[str, CacheEntry] = {}

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._cache[key]
            return None
        return entry

    def get(self, key: str) -> Any:
        """Return the cached value, or None if missing or expired."""
        entry = self._live_entry(key)
        return entry.data if entry is not None else None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` for ``ttl`` seconds (default TTL when omitted)."""
        now = self._clock()
        actual_ttl = ttl if ttl is not None else self.default_ttl
        self._cache[key] = CacheEntry(data=value, timestamp=now, expires_at=now + actual_ttl)

    def has(self, key: str) -> bool:
        """True if the entry exists and has not expired."""
        return self._live_entry(key) is not None

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


cache_service = CacheService()
