from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_TTL_MS = 10 * 60 * 1000


@dataclass(frozen=True)
class CacheEntry:
    observation: Mapping[str, Any]
    fetched_at: Optional[int]  # epoch ms


def is_fresh(entry: Optional[CacheEntry], now_ms: int, ttl_ms: int = DEFAULT_TTL_MS) -> bool:
    if entry is None or entry.fetched_at is None:
        return False
    return now_ms - entry.fetched_at < ttl_ms


class WeatherCache:
    """
    Last observation per airport id. Passive: it never fetches, and staleness
    is only checked when someone reads. Entries are replaced whole on put.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS):
        self.ttl_ms = ttl_ms
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, airport_id: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._store.get(airport_id)

    def put(self, airport_id: str, observation: Mapping[str, Any], fetched_at: int) -> CacheEntry:
        entry = CacheEntry(observation=observation, fetched_at=fetched_at)
        with self._lock:
            self._store[airport_id] = entry
        return entry

    def fresh(self, airport_id: str, now_ms: int) -> Optional[CacheEntry]:
        """The entry for airport_id if it is still within the TTL, else None."""
        entry = self.get(airport_id)
        return entry if is_fresh(entry, now_ms, self.ttl_ms) else None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
