from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from guardias.config import ParserProfile
from guardias.core.models import (
    DutyDate,
    DutyLocation,
    DutyTimeSpan,
    Pharmacy,
    PharmacySchedule,
    ScheduleCollection,
)
from guardias.parsers.assembler import EntryAssembler, RawEntry, group_pharmacies
from guardias.parsers.extraction import smallest_font_size
from guardias.parsers.layouts import LayoutKind, LayoutStrategy, ZoneSpec, ZoneTable
from guardias.parsers.scanner import TextBlock, scan_columns

logger = logging.getLogger("guardias.parser")


def scan_page(strategy: LayoutStrategy, page: Any, profile: ParserProfile) -> list[TextBlock]:
    try:
        columns = strategy.resolve_columns(float(page.width))
        scan_height = smallest_font_size(page, profile.fallback_font_size)
        blocks = list(
            scan_columns(
                page,
                columns,
                scan_height=scan_height,
                scan_step=scan_height * profile.scan_step_ratio,
                margins=strategy.margins,
            )
        )
    except Exception as exc:
        logger.warning("Unreadable page in %s document: %s", strategy.region.id, exc)
        return []

    if strategy.date_lead:
        lead = strategy.date_lead
        date_column = strategy.date_column
        blocks.sort(key=lambda block: block.y - lead if block.column == date_column else block.y)
    return blocks


def scan_document(
    strategy: LayoutStrategy, document: Any, profile: ParserProfile
) -> list[list[TextBlock]]:
    pages = list(document.pages)
    if profile.max_workers > 1 and len(pages) > 1:
        with ThreadPoolExecutor(max_workers=profile.max_workers) as executor:
            return list(executor.map(lambda page: scan_page(strategy, page, profile), pages))
    return [scan_page(strategy, page, profile) for page in pages]


def collect_entries(
    strategy: LayoutStrategy,
    assembler: EntryAssembler,
    page_scans: list[list[TextBlock]],
) -> dict[DutyDate, RawEntry]:
    entries: dict[DutyDate, RawEntry] = {}
    for page_number, blocks in enumerate(page_scans, start=1):
        page_entries = [entry for entry in assembler.assemble(blocks) if entry.date is not None]
        if not page_entries:
            logger.info(
                "Page %d of %s document has no duty dates, skipping",
                page_number,
                strategy.region.id,
            )
            continue
        for entry in page_entries:
            if entry.date in entries:
                logger.debug("Date %s repeated, keeping the later occurrence", entry.date)
            entries[entry.date] = entry
    return entries


def _parse_shift_columns(
    strategy: LayoutStrategy, page_scans: list[list[TextBlock]]
) -> ScheduleCollection:
    assembler = EntryAssembler(
        strategy.recognizer(),
        date_column=strategy.date_column,
        buckets=[column for column, _ in strategy.shift_columns],
    )
    entries = collect_entries(strategy, assembler, page_scans)

    schedules = [
        PharmacySchedule(
            date=duty_date,
            shifts={
                span: group_pharmacies(entry.buckets[column])
                for column, span in strategy.shift_columns
            },
        )
        for duty_date, entry in entries.items()
    ]
    return {strategy.location: schedules}


def partition_zone(schedules: list[PharmacySchedule], spec: ZoneSpec) -> list[PharmacySchedule]:
    zone_id = spec.zbs.id
    return [
        PharmacySchedule(
            date=schedule.date,
            shifts={spec.span: list(schedule.zones.get(zone_id, []))},
            zones={zone_id: list(schedule.zones.get(zone_id, []))},
        )
        for schedule in schedules
    ]


def _parse_rural(strategy: LayoutStrategy, page_scans: list[list[TextBlock]]) -> ScheduleCollection:
    assembler = EntryAssembler(
        strategy.recognizer(),
        date_column=strategy.date_column,
        buckets=[spec.zbs.id for spec in strategy.zones],
        zone_resolver=ZoneTable(strategy.zones),
    )
    entries = collect_entries(strategy, assembler, page_scans)

    combined: list[PharmacySchedule] = []
    for duty_date, entry in entries.items():
        zones: dict[str, list[Pharmacy]] = {}
        shifts: dict[DutyTimeSpan, list[Pharmacy]] = {span: [] for span in strategy.shifts}
        for spec in strategy.zones:
            pharmacies = list(spec.fixed_pharmacies) + group_pharmacies(entry.buckets[spec.zbs.id])
            zones[spec.zbs.id] = pharmacies
            shifts[spec.span].extend(pharmacies)
        combined.append(PharmacySchedule(date=duty_date, shifts=shifts, zones=zones))

    collection: ScheduleCollection = {strategy.location: combined}
    for spec in strategy.zones:
        location = DutyLocation.from_zbs(spec.zbs, strategy.region)
        collection[location] = partition_zone(combined, spec)
    return collection


_PARSERS: dict[LayoutKind, Callable[[LayoutStrategy, list[list[TextBlock]]], ScheduleCollection]] = {
    LayoutKind.DAY_NIGHT: _parse_shift_columns,
    LayoutKind.FULL_DAY: _parse_shift_columns,
    LayoutKind.RURAL: _parse_rural,
}


def parse_schedules(
    strategy: LayoutStrategy,
    document: Any,
    *,
    profile: ParserProfile,
) -> ScheduleCollection:
    """Parse every page of ``document`` with ``strategy``.

    The result depends only on the document: nothing is read from or written
    to shared state, so concurrent parses of different documents are
    independent.
    """
    page_scans = scan_document(strategy, document, profile)
    return _PARSERS[strategy.kind](strategy, page_scans)


def entry_count(collection: ScheduleCollection, strategy: LayoutStrategy) -> int:
    return len(collection.get(strategy.location, []))
