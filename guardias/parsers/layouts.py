from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from guardias.core.models import DutyLocation, DutyTimeSpan, Pharmacy, Region, ZBS
from guardias.parsers.dates import DateRecognizer
from guardias.parsers.scanner import ColumnSpec, Margins


class LayoutKind(str, Enum):
    DAY_NIGHT = "day_night"
    FULL_DAY = "full_day"
    RURAL = "rural"


@dataclass(frozen=True)
class ColumnLayout:
    """Column position as fractions of the page content width."""

    name: str
    start: float
    width: float


@dataclass(frozen=True)
class ZoneSpec:
    zbs: ZBS
    span: DutyTimeSpan
    headers: tuple[str, ...] = ()
    towns: tuple[str, ...] = ()
    fixed_pharmacies: tuple[Pharmacy, ...] = ()


_ZONE_PREFIX_RE = re.compile(r"^(?:Z\.?\s*B\.?\s*S\.?|ZONA BASICA DE SALUD)\s*[:\-]?\s*")
_SEPARATORS_RE = re.compile(r"[\s/\-]+")


def normalize_label(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    collapsed = _SEPARATORS_RE.sub(" ", stripped.upper()).strip(" :.")
    return collapsed


class ZoneTable:
    """Resolves rural zone headers and town names to zone ids."""

    def __init__(self, zones: Sequence[ZoneSpec]) -> None:
        self._headers: dict[str, str] = {}
        self._towns: list[tuple[re.Pattern[str], str]] = []
        for spec in zones:
            for label in (spec.zbs.name, *spec.headers):
                self._headers[normalize_label(label)] = spec.zbs.id
            for town in spec.towns:
                pattern = re.compile(r"\b" + re.escape(normalize_label(town)) + r"\b")
                self._towns.append((pattern, spec.zbs.id))

    def header(self, line: str) -> str | None:
        label = normalize_label(_ZONE_PREFIX_RE.sub("", normalize_label(line)))
        return self._headers.get(label)

    def town(self, line: str) -> str | None:
        label = normalize_label(line)
        for pattern, zone_id in self._towns:
            if pattern.search(label):
                return zone_id
        return None


@dataclass(frozen=True)
class LayoutStrategy:
    kind: LayoutKind
    region: Region
    columns: tuple[ColumnLayout, ...]
    shift_columns: tuple[tuple[str, DutyTimeSpan], ...] = ()
    date_column: str = "date"
    margins: Margins = Margins()
    column_gap: float = 0.0
    date_lead: float = 0.0
    accept_abbreviated_dates: bool = False
    zones: tuple[ZoneSpec, ...] = ()

    @property
    def location(self) -> DutyLocation:
        return DutyLocation.from_region(self.region)

    @property
    def shifts(self) -> tuple[DutyTimeSpan, ...]:
        spans = [span for _, span in self.shift_columns] + [zone.span for zone in self.zones]
        return tuple(dict.fromkeys(spans))

    def zone(self, zone_id: str) -> ZoneSpec | None:
        for spec in self.zones:
            if spec.zbs.id == zone_id:
                return spec
        return None

    def recognizer(self) -> DateRecognizer:
        return DateRecognizer(accept_abbreviated=self.accept_abbreviated_dates)

    def resolve_columns(self, page_width: float) -> list[ColumnSpec]:
        content_width = page_width - self.margins.left - self.margins.right
        resolved: list[ColumnSpec] = []
        for layout in self.columns:
            x = self.margins.left + layout.start * content_width
            width = layout.width * content_width
            if layout.start > 0:
                x += self.column_gap
                width -= self.column_gap
            resolved.append(ColumnSpec(name=layout.name, x=x, width=max(width, 0.0)))
        return resolved
