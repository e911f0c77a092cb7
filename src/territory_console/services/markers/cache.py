"""In-memory, time-expiring cache of resolved address coordinates."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from ...config import settings
from ...models.domain import Customer


@dataclass(slots=True)
class CachedMarker:
    lat: float
    lng: float
    customer: Customer
    last_updated: float


class MarkerCache:
    """address_id -> coordinate, valid for ``ttl_seconds`` after it was written.

    Entries are never persisted. Expired entries are evicted when looked up.
    """

    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.marker_cache_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedMarker] = {}

    def get(self, address_id: str) -> Optional[CachedMarker]:
        entry = self._entries.get(address_id)
        if entry is None:
            return None
        if self._clock() - entry.last_updated >= self.ttl_seconds:
            del self._entries[address_id]
            return None
        return entry

    def put(self, address_id: str, lat: float, lng: float, customer: Customer) -> CachedMarker:
        entry = CachedMarker(lat=lat, lng=lng, customer=customer, last_updated=self._clock())
        self._entries[address_id] = entry
        return entry

    def evict(self, address_id: str) -> bool:
        """Drop one entry; True when something was removed."""
        return self._entries.pop(address_id, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
