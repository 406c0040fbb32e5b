from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Protocol, Sequence

from guardias.core.models import DutyDate, Pharmacy
from guardias.parsers.dates import DateRecognizer, with_year
from guardias.parsers.scanner import TextBlock

logger = logging.getLogger("guardias.parser")

PHONE_RE = re.compile(r"(?:tfno\.?:?\s*)?(?<!\d)(\d{3}\s?\d{3}\s?\d{3})(?!\d)", re.IGNORECASE)
_RECORD_START_RE = re.compile(r"^farmacia\b", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


class ZoneResolver(Protocol):
    def header(self, line: str) -> str | None:
        """Return the zone id when ``line`` is a zone header."""

    def town(self, line: str) -> str | None:
        """Return the zone id of a town mentioned in ``line``."""


@dataclass
class RawEntry:
    date: DutyDate | None
    buckets: dict[str, list[str]]

    def has_lines(self) -> bool:
        return any(line for lines in self.buckets.values() for line in lines)


@dataclass
class _Accumulator:
    current: RawEntry
    current_zone: str | None = None
    pending_year: int | None = None
    carried: dict[str, str] = field(default_factory=dict)
    completed: list[RawEntry] = field(default_factory=list)


class EntryAssembler:
    """Folds an ordered block stream into dated entries.

    A recognized date in ``date_column`` closes the open entry and starts a
    new one. Other lines are buffered per bucket: the block's column, or the
    current zone when a ``zone_resolver`` is configured. Every bucket is
    present in every emitted entry. Lines seen before the first date are
    emitted as an entry whose date is ``None``. A standalone year line in the
    date column fills the next year-less date only.
    """

    def __init__(
        self,
        recognizer: DateRecognizer,
        *,
        date_column: str,
        buckets: Sequence[str],
        zone_resolver: ZoneResolver | None = None,
    ) -> None:
        self.recognizer = recognizer
        self.date_column = date_column
        self.buckets = tuple(buckets)
        self.zone_resolver = zone_resolver

    def _open(self, duty_date: DutyDate | None) -> RawEntry:
        return RawEntry(date=duty_date, buckets={name: [] for name in self.buckets})

    def assemble(self, blocks: Iterable[TextBlock]) -> Iterator[RawEntry]:
        acc = _Accumulator(current=self._open(None))
        for block in blocks:
            for line in block.text.split("\n"):
                self._step(acc, block.column, line.strip())
                if acc.completed:
                    yield from acc.completed
                    acc.completed.clear()

        if acc.current.date is not None or acc.current.has_lines():
            yield acc.current

    def _step(self, acc: _Accumulator, column: str, line: str) -> None:
        if column == self.date_column:
            self._step_date(acc, line)
            return

        bucket = self._bucket_for(acc, column, line)
        if bucket is None:
            return

        lines = acc.current.buckets[bucket]
        if not line:
            if lines and lines[-1]:
                lines.append("")
            return
        if lines and lines[-1] == line:
            return
        # A window that reaches a new date may still hold the closed entry's last line.
        if not lines and acc.carried.get(bucket) == line:
            return
        lines.append(line)

    def _step_date(self, acc: _Accumulator, line: str) -> None:
        if not line:
            return

        year = self.recognizer.recognize_year(line)
        if year is not None:
            acc.pending_year = year
            return

        for duty_date in self.recognizer.recognize_all(line):
            if _repeats(duty_date, acc.current.date):
                continue
            if duty_date.year is None and acc.pending_year is not None:
                duty_date = with_year(duty_date, acc.pending_year)
                acc.pending_year = None
            if acc.current.date is not None or acc.current.has_lines():
                acc.completed.append(acc.current)
            acc.carried = {
                name: next((item for item in reversed(lines) if item), "")
                for name, lines in acc.current.buckets.items()
            }
            acc.current = self._open(duty_date)

    def _bucket_for(self, acc: _Accumulator, column: str, line: str) -> str | None:
        if self.zone_resolver is None:
            return column if column in self.buckets else None

        if line:
            zone = self.zone_resolver.header(line)
            if zone is not None:
                acc.current_zone = zone
                return None

        bucket = acc.current_zone
        if bucket is None and line:
            bucket = self.zone_resolver.town(line)
            acc.current_zone = bucket
        if bucket is None:
            if line:
                logger.debug("No zone for line %r", line)
            return None
        return bucket


def _repeats(duty_date: DutyDate, current: DutyDate | None) -> bool:
    if current is None:
        return False
    return (
        duty_date.day == current.day
        and duty_date.month == current.month
        and duty_date.year in (None, current.year)
    )


def split_phone(text: str) -> tuple[str, str]:
    match = PHONE_RE.search(text)
    if match is None:
        return "", text.strip()
    phone = _WHITESPACE_RE.sub("", match.group(1))
    remainder = f"{text[: match.start()]} {text[match.end():]}"
    return phone, _WHITESPACE_RE.sub(" ", remainder).strip()


def build_pharmacy(lines: Sequence[str]) -> Pharmacy:
    parts = [line for line in lines if line]
    phone = ""
    first_candidate = 1 if len(parts) > 1 else 0
    for index in range(first_candidate, len(parts)):
        found, remainder = split_phone(parts[index])
        if found:
            phone = found
            parts[index] = remainder
            break

    name = parts[0] if parts else ""
    address = parts[1] if len(parts) > 1 else ""
    annotation = " ".join(part for part in parts[2:] if part).strip()
    return Pharmacy(name=name, address=address, phone=phone, additional_info=annotation or None)


def group_pharmacies(lines: Iterable[str]) -> list[Pharmacy]:
    """Split buffered column lines into pharmacy records.

    A record ends after a line holding a phone number, at a blank line, when
    a new "FARMACIA ..." line arrives after at least name and address, or at
    the end of the buffer.
    """
    pharmacies: list[Pharmacy] = []
    record: list[str] = []

    for raw in lines:
        line = raw.strip()
        if not line:
            if record:
                pharmacies.append(build_pharmacy(record))
                record = []
            continue

        if len(record) >= 2 and _RECORD_START_RE.match(line):
            pharmacies.append(build_pharmacy(record))
            record = []

        record.append(line)
        if PHONE_RE.search(line):
            pharmacies.append(build_pharmacy(record))
            record = []

    if record:
        pharmacies.append(build_pharmacy(record))
    return pharmacies
