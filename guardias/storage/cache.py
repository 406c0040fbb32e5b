from __future__ import annotations

import threading
from typing import Any, Protocol

from guardias.core.models import ScheduleCollection


class ScheduleCache(Protocol):
    def get(self, region_id: str, fingerprint: str) -> ScheduleCollection | None:
        """Return the collection cached for this exact document, if any."""

    def put(self, region_id: str, fingerprint: str, collection: ScheduleCollection) -> None:
        """Store a collection, replacing whatever the region held before."""

    def invalidate(self, region_id: str) -> None:
        """Drop the cached collection of a region."""


class InMemoryScheduleCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, ScheduleCollection]] = {}

    def get(self, region_id: str, fingerprint: str) -> ScheduleCollection | None:
        with self._lock:
            entry = self._entries.get(region_id)
        if entry is None or entry[0] != fingerprint:
            return None
        return entry[1]

    def put(self, region_id: str, fingerprint: str, collection: ScheduleCollection) -> None:
        with self._lock:
            self._entries[region_id] = (fingerprint, collection)

    def invalidate(self, region_id: str) -> None:
        with self._lock:
            self._entries.pop(region_id, None)

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def list_entries(self) -> list[dict[str, Any]]:
        with self._lock:
            items = sorted(self._entries.items())
        return [
            {"regionId": region_id, "fingerprint": fingerprint}
            for region_id, (fingerprint, _) in items
        ]

    def ping(self) -> bool:
        return True
