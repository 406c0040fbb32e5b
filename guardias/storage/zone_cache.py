from __future__ import annotations

import logging
import threading
from typing import Callable

from guardias.core.models import PharmacySchedule
from guardias.storage.locks import KeyedLocks

ZoneKey = tuple[str, str, str]

logger = logging.getLogger("guardias.cache")


class ZoneCache:
    """Read-through cache of per-zone schedule partitions.

    Entries are keyed by (region, zone, document fingerprint), so a partition
    is only ever served for the document it was derived from.
    """

    def __init__(self) -> None:
        self._entries: dict[ZoneKey, list[PharmacySchedule]] = {}
        self._guard = threading.Lock()
        self._locks = KeyedLocks()

    def get(self, key: ZoneKey) -> list[PharmacySchedule] | None:
        with self._guard:
            return self._entries.get(key)

    def put(self, key: ZoneKey, schedules: list[PharmacySchedule]) -> None:
        with self._guard:
            self._entries[key] = schedules

    def get_or_compute(
        self, key: ZoneKey, compute: Callable[[], list[PharmacySchedule]]
    ) -> list[PharmacySchedule]:
        cached = self.get(key)
        if cached is not None:
            return cached
        with self._locks.hold(key):
            cached = self.get(key)
            if cached is not None:
                return cached
            schedules = compute()
            self.put(key, schedules)
            return schedules

    def clear(self, region_id: str | None = None) -> None:
        with self._guard:
            if region_id is None:
                self._entries.clear()
            else:
                for key in [key for key in self._entries if key[0] == region_id]:
                    del self._entries[key]
        logger.debug("Zone cache cleared for %s", region_id or "all regions")

    def prune(self, region_id: str, fingerprint: str) -> int:
        """Drop the region's partitions derived from any other document."""
        with self._guard:
            stale = [
                key for key in self._entries if key[0] == region_id and key[2] != fingerprint
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Pruned %d stale zone partitions for %s", len(stale), region_id)
        return len(stale)

    def keys(self) -> list[ZoneKey]:
        with self._guard:
            return list(self._entries)
