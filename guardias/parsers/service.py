from __future__ import annotations

import logging
from pathlib import Path
from time import perf_counter

from guardias.config import ParserProfile
from guardias.core.models import DocumentDescriptor, PharmacySchedule, ScheduleCollection
from guardias.observability.metrics import Metrics
from guardias.parsers.errors import (
    ParseError,
    UnknownRegionError,
    UnreadableDocumentError,
    UnrecognizedLayoutError,
)
from guardias.parsers.extraction import DocumentOpener, open_document
from guardias.parsers.layouts import LayoutStrategy
from guardias.parsers.registry import get_strategy
from guardias.parsers.strategies import entry_count, parse_schedules, partition_zone
from guardias.storage.cache import ScheduleCache
from guardias.storage.locks import KeyedLocks
from guardias.storage.zone_cache import ZoneCache

_ERROR_STATUS = {
    UnreadableDocumentError: "unreadable_document",
    UnrecognizedLayoutError: "unrecognized_layout",
}


class ScheduleParsingService:
    def __init__(
        self,
        strategies: dict[str, LayoutStrategy],
        *,
        profile: ParserProfile,
        cache: ScheduleCache | None = None,
        zone_cache: ZoneCache | None = None,
        metrics: Metrics | None = None,
        opener: DocumentOpener | None = None,
    ) -> None:
        self.strategies = strategies
        self.profile = profile
        self.cache = cache
        self.zone_cache = zone_cache if zone_cache is not None else ZoneCache()
        self.metrics = metrics
        self.opener = opener
        self._locks = KeyedLocks()
        self._logger = logging.getLogger("guardias.service")

    def parse(self, region_id: str, pdf_path: Path | str) -> ScheduleCollection:
        try:
            strategy = get_strategy(self.strategies, region_id)
        except UnknownRegionError:
            # Caller-supplied ids never become metric labels.
            self._mark_parse_status("unknown", "unknown_region")
            raise

        timer_start = perf_counter()
        status = "success"
        try:
            path = Path(pdf_path)
            with open_document(path, self.opener) as document:
                page_count = len(document.pages)
                collection = parse_schedules(strategy, document, profile=self.profile)
            if entry_count(collection, strategy) == 0:
                raise UnrecognizedLayoutError(region_id, page_count)
        except ParseError as exc:
            status = _ERROR_STATUS.get(type(exc), "parse_error")
            self._logger.warning("Parse of %s failed: %s", region_id, exc)
            raise
        finally:
            self._mark_parse_status(region_id, status)
            if self.metrics is not None:
                self.metrics.parse_duration_seconds.observe(perf_counter() - timer_start)

        self._logger.info(
            "Parsed %s: %d dated entries across %d location(s)",
            region_id,
            entry_count(collection, strategy),
            len(collection),
        )
        if self.metrics is not None:
            self.metrics.mark_collection(collection)
        return collection

    def load(
        self,
        region_id: str,
        pdf_path: Path | str,
        descriptor: DocumentDescriptor | None = None,
    ) -> ScheduleCollection:
        fingerprint = descriptor.fingerprint if descriptor is not None else None
        if fingerprint is None or self.cache is None:
            return self.parse(region_id, pdf_path)

        cached = self.cache.get(region_id, fingerprint)
        if cached is not None:
            self._mark_cache("hit")
            return cached

        with self._locks.hold((region_id, fingerprint)):
            cached = self.cache.get(region_id, fingerprint)
            if cached is not None:
                self._mark_cache("hit")
                return cached
            self._mark_cache("miss")
            collection = self.parse(region_id, pdf_path)
            self.cache.put(region_id, fingerprint, collection)
            self.zone_cache.prune(region_id, fingerprint)
            return collection

    def cached(self, region_id: str, fingerprint: str) -> ScheduleCollection | None:
        get_strategy(self.strategies, region_id)
        if self.cache is None:
            return None
        return self.cache.get(region_id, fingerprint)

    def zone_schedules(
        self, region_id: str, zone_id: str, fingerprint: str
    ) -> list[PharmacySchedule] | None:
        strategy = get_strategy(self.strategies, region_id)
        spec = strategy.zone(zone_id)
        if spec is None:
            raise UnknownRegionError(f"Region {region_id} has no zone {zone_id}")

        collection = self.cached(region_id, fingerprint)
        if collection is None:
            return None
        combined = collection.get(strategy.location, [])
        return self.zone_cache.get_or_compute(
            (region_id, zone_id, fingerprint), lambda: partition_zone(combined, spec)
        )

    def invalidate(self, region_id: str) -> None:
        get_strategy(self.strategies, region_id)
        if self.cache is not None:
            self.cache.invalidate(region_id)
        self.zone_cache.clear(region_id)
        self._logger.info("Cache invalidated for %s", region_id)

    def _mark_cache(self, result: str) -> None:
        if self.metrics is not None:
            self.metrics.mark_cache(result)

    def _mark_parse_status(self, region_id: str, status: str) -> None:
        if self.metrics is not None:
            self.metrics.mark_parse_status(region_id, status)
