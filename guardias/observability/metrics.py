from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from guardias.core.models import ScheduleCollection


class Metrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry(auto_describe=True)
        self.parse_runs_total = Counter(
            "guardias_parse_runs_total",
            "Total document parses by region and status",
            labelnames=("region", "status"),
            registry=self.registry,
        )
        self.parse_duration_seconds = Histogram(
            "guardias_parse_duration_seconds",
            "Duration of document parses in seconds",
            registry=self.registry,
        )
        self.cache_requests_total = Counter(
            "guardias_cache_requests_total",
            "Schedule cache lookups by result",
            labelnames=("result",),
            registry=self.registry,
        )
        self.schedule_entries = Gauge(
            "guardias_schedule_entries",
            "Dated entries in the latest parse per duty location",
            labelnames=("location",),
            registry=self.registry,
        )

    def mark_parse_status(self, region_id: str, status: str) -> None:
        self.parse_runs_total.labels(region=region_id, status=status).inc()

    def mark_cache(self, result: str) -> None:
        self.cache_requests_total.labels(result=result).inc()

    def mark_collection(self, collection: ScheduleCollection) -> None:
        for location, schedules in collection.items():
            self.schedule_entries.labels(location=location.id).set(len(schedules))

    def render(self) -> tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
