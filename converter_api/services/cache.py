"""Expiring key-value cache used by the rate service."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Protocol

from converter_api.utils.datetime import utc_now

DEFAULT_TTL = timedelta(minutes=30)
DEFAULT_MAX_ENTRIES = 1024


class RateCache(Protocol):
    """Minimal cache contract: lookups return None on miss or expiry."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: timedelta) -> None: ...


@dataclass(frozen=True)
class CachedEntry:
    value: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class InMemoryRateCache:
    """Thread-safe in-process cache with per-entry absolute expiry.

    Every write sweeps expired entries; when the cache still holds more than
    ``max_entries`` the oldest writes are evicted first.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CachedEntry] = {}
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: timedelta = DEFAULT_TTL) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        now = self._clock()
        entry = CachedEntry(value=value, expires_at=now + ttl)
        with self._lock:
            self._purge_expired(now)
            # Re-insert so dict order tracks write recency.
            self._entries.pop(key, None)
            self._entries[key] = entry
            while len(self._entries) > self._max_entries:
                del self._entries[next(iter(self._entries))]

    def cleanup_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        with self._lock:
            return self._purge_expired(now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self, now: datetime) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
