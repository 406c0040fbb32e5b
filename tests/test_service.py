from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from guardias.config import ParserProfile
from guardias.core.constants import SEGOVIA_CAPITAL
from guardias.core.models import CAPITAL_DAY, DocumentDescriptor, DutyLocation
from guardias.observability.metrics import Metrics
from guardias.parsers.errors import (
    UnknownRegionError,
    UnreadableDocumentError,
    UnrecognizedLayoutError,
)
from guardias.parsers.registry import build_strategies
from guardias.parsers.service import ScheduleParsingService
from guardias.storage.cache import InMemoryScheduleCache
from tests.helpers import FakeDocument, RecordingOpener, capital_page, legend_page, rural_page


def _service(opener, **kwargs) -> ScheduleParsingService:
    profile = ParserProfile()
    return ScheduleParsingService(build_strategies(profile), profile=profile, opener=opener, **kwargs)


@pytest.fixture
def pdf_path(tmp_path):
    path = tmp_path / "roster.pdf"
    path.write_bytes(b"%PDF-1.4")
    return path


def test_parse_returns_capital_schedules_and_closes_document(pdf_path) -> None:
    opener = RecordingOpener([capital_page()])
    collection = _service(opener).parse("capital", pdf_path)

    schedules = collection[DutyLocation.from_region(SEGOVIA_CAPITAL)]
    assert len(schedules) == 2
    assert schedules[0].shifts[CAPITAL_DAY][0].name == "FARMACIA ALFA"
    assert opener.documents[0].closed is True


def test_unknown_region_is_rejected(pdf_path) -> None:
    with pytest.raises(UnknownRegionError):
        _service(RecordingOpener([capital_page()])).parse("madrid", pdf_path)


def test_missing_and_empty_documents_are_unreadable(tmp_path, pdf_path) -> None:
    with pytest.raises(UnreadableDocumentError):
        _service(RecordingOpener([capital_page()])).parse("capital", tmp_path / "missing.pdf")

    opener = RecordingOpener([])
    with pytest.raises(UnreadableDocumentError):
        _service(opener).parse("capital", pdf_path)
    assert opener.documents[0].closed is True


def test_document_without_dates_is_unrecognized_layout(pdf_path) -> None:
    metrics = Metrics()
    opener = RecordingOpener([legend_page(), legend_page()])

    with pytest.raises(UnrecognizedLayoutError) as excinfo:
        _service(opener, metrics=metrics).parse("capital", pdf_path)

    assert excinfo.value.region_id == "capital"
    assert excinfo.value.page_count == 2
    assert opener.documents[0].closed is True
    assert (
        metrics.registry.get_sample_value(
            "guardias_parse_runs_total",
            {"region": "capital", "status": "unrecognized_layout"},
        )
        == 1.0
    )


def test_load_uses_cache_per_fingerprint(pdf_path) -> None:
    metrics = Metrics()
    opener = RecordingOpener([capital_page()])
    service = _service(opener, cache=InMemoryScheduleCache(), metrics=metrics)
    descriptor = DocumentDescriptor(url="https://example.test/capital.pdf", etag='"v1"')

    first = service.load("capital", pdf_path, descriptor)
    second = service.load("capital", pdf_path, descriptor)
    assert first == second
    assert opener.calls == 1

    service.load("capital", pdf_path, DocumentDescriptor(etag='"v2"'))
    assert opener.calls == 2

    assert metrics.registry.get_sample_value("guardias_cache_requests_total", {"result": "hit"}) == 1.0
    assert metrics.registry.get_sample_value("guardias_cache_requests_total", {"result": "miss"}) == 2.0
    assert (
        metrics.registry.get_sample_value("guardias_schedule_entries", {"location": "capital"})
        == 2.0
    )


def test_load_without_fingerprint_always_parses(pdf_path) -> None:
    opener = RecordingOpener([capital_page()])
    service = _service(opener, cache=InMemoryScheduleCache())

    service.load("capital", pdf_path, DocumentDescriptor(url="https://example.test/a.pdf"))
    service.load("capital", pdf_path)
    assert opener.calls == 2


def test_invalidate_forces_reparse(pdf_path) -> None:
    opener = RecordingOpener([rural_page()])
    service = _service(opener, cache=InMemoryScheduleCache())
    descriptor = DocumentDescriptor(etag='"rural-1"')

    service.load("rural", pdf_path, descriptor)
    assert service.zone_schedules("rural", "la-granja", '"rural-1"')[0].zones["la-granja"]

    service.invalidate("rural")
    assert service.cached("rural", '"rural-1"') is None
    assert service.zone_cache.keys() == []
    assert service.zone_schedules("rural", "la-granja", '"rural-1"') is None

    service.load("rural", pdf_path, descriptor)
    assert opener.calls == 2


def test_zone_schedules_rejects_unknown_zone(pdf_path) -> None:
    service = _service(RecordingOpener([rural_page()]), cache=InMemoryScheduleCache())
    with pytest.raises(UnknownRegionError):
        service.zone_schedules("rural", "atlantis", "fp")


def test_zone_schedules_follow_the_requested_document(tmp_path) -> None:
    pages = {
        "a.pdf": [rural_page()],
        "b.pdf": [rural_page(("FARMACIA OTRA", "C/ Otra 2", "921507111"))],
    }
    for name in pages:
        (tmp_path / name).write_bytes(b"%PDF-1.4")
    service = _service(lambda path: FakeDocument(pages[path.name]), cache=InMemoryScheduleCache())

    service.load("rural", tmp_path / "a.pdf", DocumentDescriptor(etag='"A"'))
    service.parse("rural", tmp_path / "b.pdf")

    sierra = service.zone_schedules("rural", "la-sierra", '"A"')
    assert [item.name for item in sierra[0].zones["la-sierra"]] == ["FARMACIA PRADENA"]

    service.load("rural", tmp_path / "b.pdf", DocumentDescriptor(etag='"B"'))
    assert service.zone_schedules("rural", "la-sierra", '"A"') is None
    sierra = service.zone_schedules("rural", "la-sierra", '"B"')
    assert [item.name for item in sierra[0].zones["la-sierra"]] == ["FARMACIA OTRA"]
    assert service.zone_cache.keys() == [("rural", "la-sierra", '"B"')]


class SlowOpener(RecordingOpener):
    def __call__(self, path) -> FakeDocument:
        time.sleep(0.05)
        return super().__call__(path)


def test_concurrent_loads_of_one_document_parse_once(pdf_path) -> None:
    opener = SlowOpener([capital_page()])
    service = _service(opener, cache=InMemoryScheduleCache())
    descriptor = DocumentDescriptor(etag='"v1"')
    start = threading.Barrier(8)

    def load():
        start.wait()
        return service.load("capital", pdf_path, descriptor)

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: load(), range(8)))

    assert opener.calls == 1
    assert all(result == results[0] for result in results)
    assert len(service._locks) == 0


def test_unknown_regions_share_one_metric_label(pdf_path) -> None:
    metrics = Metrics()
    service = _service(RecordingOpener([capital_page()]), metrics=metrics)

    for region_id in ("madrid", "toledo"):
        with pytest.raises(UnknownRegionError):
            service.parse(region_id, pdf_path)

    registry = metrics.registry
    assert (
        registry.get_sample_value(
            "guardias_parse_runs_total", {"region": "unknown", "status": "unknown_region"}
        )
        == 2.0
    )
    assert (
        registry.get_sample_value(
            "guardias_parse_runs_total", {"region": "madrid", "status": "unknown_region"}
        )
        is None
    )
