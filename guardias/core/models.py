from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum

SPANISH_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)

SPANISH_WEEKDAYS = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")


@dataclass(frozen=True)
class DutyDate:
    """Calendar-agnostic duty date as printed in a roster.

    The weekday is display-only; equality and hashing use (day, month, year).
    A missing year stays ``None`` and is resolved by the consumer.
    """

    weekday: str = field(compare=False)
    day: int
    month: str
    year: int | None = None

    @property
    def month_number(self) -> int:
        return SPANISH_MONTHS.index(self.month) + 1

    def to_date(self, reference: date | None = None) -> date:
        year = self.year
        if year is None:
            if reference is None:
                raise ValueError(f"{self} has no year and no reference date was given")
            year = reference.year
        return date(year, self.month_number, self.day)

    def __str__(self) -> str:
        text = f"{self.weekday}, {self.day} de {self.month}"
        if self.year is not None:
            text += f" de {self.year}"
        return text


@dataclass(frozen=True)
class DutyTimeSpan:
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int

    @property
    def spans_multiple_days(self) -> bool:
        return self._end_minutes < self._start_minutes

    @property
    def _start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def _end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute

    def contains(self, moment: time | datetime) -> bool:
        minutes = moment.hour * 60 + moment.minute
        if self.spans_multiple_days:
            return minutes >= self._start_minutes or minutes <= self._end_minutes
        return self._start_minutes <= minutes <= self._end_minutes

    @property
    def key(self) -> str:
        return (
            f"{self.start_hour}:{self.start_minute:02d}-"
            f"{self.end_hour}:{self.end_minute:02d}"
        )

    @classmethod
    def from_key(cls, key: str) -> DutyTimeSpan:
        start, end = key.split("-")
        start_hour, start_minute = start.split(":")
        end_hour, end_minute = end.split(":")
        return cls(int(start_hour), int(start_minute), int(end_hour), int(end_minute))

    @property
    def display_name(self) -> str:
        if self == FULL_DAY:
            return "24 horas"
        start = f"{self.start_hour:02d}:{self.start_minute:02d}"
        end = f"{self.end_hour:02d}:{self.end_minute:02d}"
        if self.spans_multiple_days:
            return f"{start} - {end} (+1)"
        return f"{start} - {end}"


CAPITAL_DAY = DutyTimeSpan(10, 15, 22, 0)
CAPITAL_NIGHT = DutyTimeSpan(22, 0, 10, 15)
FULL_DAY = DutyTimeSpan(0, 0, 23, 59)
RURAL_DAYTIME = DutyTimeSpan(10, 0, 20, 0)
RURAL_EXTENDED_DAYTIME = DutyTimeSpan(10, 0, 22, 0)


@dataclass(frozen=True)
class Pharmacy:
    name: str
    address: str
    phone: str = ""
    additional_info: str | None = None

    def same_as(self, other: Pharmacy) -> bool:
        return self.name == other.name and self.address == other.address

    @property
    def formatted_phone(self) -> str:
        digits = "".join(ch for ch in self.phone if ch.isdigit())
        if len(digits) != 9:
            return self.phone
        return f"{digits[:3]} {digits[3:6]} {digits[6:]}"


@dataclass(frozen=True)
class PharmacySchedule:
    date: DutyDate
    shifts: dict[DutyTimeSpan, list[Pharmacy]]
    zones: dict[str, list[Pharmacy]] = field(default_factory=dict)

    def pharmacies_at(self, moment: time | datetime) -> list[Pharmacy]:
        result: list[Pharmacy] = []
        for span, pharmacies in self.shifts.items():
            if span.contains(moment):
                result.extend(pharmacies)
        return result


@dataclass(frozen=True)
class ZBS:
    id: str
    name: str
    icon: str


@dataclass(frozen=True)
class RegionMetadata:
    notes: str | None = None
    has_24h: bool = False


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    icon: str
    pdf_url: str
    metadata: RegionMetadata = RegionMetadata()


class LocationKind(str, Enum):
    REGION = "region"
    ZONE = "zone"


@dataclass(frozen=True)
class DutyLocation:
    id: str
    name: str
    icon: str
    region_id: str
    kind: LocationKind = LocationKind.REGION

    @classmethod
    def from_region(cls, region: Region) -> DutyLocation:
        return cls(id=region.id, name=region.name, icon=region.icon, region_id=region.id)

    @classmethod
    def from_zbs(cls, zbs: ZBS, region: Region) -> DutyLocation:
        return cls(
            id=zbs.id,
            name=zbs.name,
            icon=zbs.icon,
            region_id=region.id,
            kind=LocationKind.ZONE,
        )


ScheduleCollection = dict[DutyLocation, list[PharmacySchedule]]


@dataclass(frozen=True)
class DocumentDescriptor:
    url: str = ""
    last_modified: str | None = None
    content_length: int | None = None
    etag: str | None = None
    downloaded_at: datetime | None = None

    @property
    def fingerprint(self) -> str | None:
        return self.etag or self.last_modified or None
