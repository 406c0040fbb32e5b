from __future__ import annotations

from dataclasses import dataclass

from guardias.core.constants import SEGOVIA_CAPITAL
from guardias.core.models import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    DutyDate,
    DutyLocation,
    Pharmacy,
    PharmacySchedule,
    ScheduleCollection,
)

CHAR_WIDTH_RATIO = 0.35


@dataclass(frozen=True)
class FakeLine:
    x0: float
    top: float
    text: str
    size: float = 10.0

    @property
    def x1(self) -> float:
        return self.x0 + len(self.text) * self.size * CHAR_WIDTH_RATIO

    @property
    def bottom(self) -> float:
        return self.top + self.size


class FakePage:
    """Minimal stand-in for a pdfplumber page: top-left origin, overlap crop."""

    def __init__(
        self,
        lines: list[FakeLine],
        *,
        width: float = 600.0,
        height: float = 800.0,
        broken: bool = False,
    ) -> None:
        self.lines = lines
        self.width = width
        self.height = height
        self.broken = broken

    @property
    def chars(self) -> list[dict]:
        return [{"size": line.size} for line in self.lines for _ in line.text]

    def crop(self, bbox: tuple[float, float, float, float], relative: bool = False) -> FakePage:
        if self.broken:
            raise ValueError("corrupt content stream")
        x0, top, x1, bottom = bbox
        inside = [
            line
            for line in self.lines
            if line.top < bottom and line.bottom > top and line.x0 < x1 and line.x1 > x0
        ]
        return FakePage(inside, width=x1 - x0, height=bottom - top)

    def extract_text(self) -> str:
        ordered = sorted(self.lines, key=lambda line: (line.top, line.x0))
        return "\n".join(line.text for line in ordered)


class FakeDocument:
    def __init__(self, pages: list[FakePage]) -> None:
        self.pages = pages
        self.closed = False

    def close(self) -> None:
        self.closed = True


class RecordingOpener:
    def __init__(self, pages: list[FakePage]) -> None:
        self.pages = pages
        self.calls = 0
        self.documents: list[FakeDocument] = []

    def __call__(self, path) -> FakeDocument:
        self.calls += 1
        document = FakeDocument(self.pages)
        self.documents.append(document)
        return document


def cell(x0: float, top: float, *texts: str, size: float = 10.0) -> list[FakeLine]:
    return [FakeLine(x0, top + index * 12, text, size) for index, text in enumerate(texts)]


CAPITAL_DATE_X = 42.0
CAPITAL_DAY_X = 165.0
CAPITAL_NIGHT_X = 370.0
FULL_DAY_DATE_X = 45.0
FULL_DAY_PHARMACY_X = 310.0
RURAL_DATE_X = 42.0
RURAL_ZONE_X = 155.0


def capital_page() -> FakePage:
    lines: list[FakeLine] = []
    lines += cell(CAPITAL_DATE_X, 100, "lunes, 5 de mayo de 2025")
    lines += cell(CAPITAL_DAY_X, 100, "FARMACIA ALFA", "C/ Real 1", "Tfno: 921 461589")
    lines += cell(CAPITAL_NIGHT_X, 100, "FARMACIA BETA", "Av. Fernández Ladreda 2", "921 442211")
    lines += cell(CAPITAL_DATE_X, 160, "martes, 6 de mayo de 2025")
    lines += cell(CAPITAL_DAY_X, 160, "FARMACIA GAMMA", "Pl. Mayor 3", "921000111")
    return FakePage(lines)


def dense_capital_page() -> FakePage:
    """Two dates on consecutive 12 pt rows, with no gap after the first entry."""
    lines: list[FakeLine] = []
    lines += cell(CAPITAL_DATE_X, 100, "lunes, 5 de mayo de 2025")
    lines += cell(CAPITAL_DAY_X, 100, "FARMACIA ALFA", "C/ Real 1", "Tfno: 921 461589")
    lines += cell(CAPITAL_NIGHT_X, 100, "FARMACIA BETA", "Av. Fernández Ladreda 2", "921 442211")
    lines += cell(CAPITAL_DATE_X, 136, "martes, 6 de mayo de 2025")
    lines += cell(CAPITAL_DAY_X, 136, "FARMACIA GAMMA", "Pl. Mayor 3", "921000111")
    lines += cell(CAPITAL_NIGHT_X, 136, "FARMACIA DELTA", "C/ Gobernador 4", "921433322")
    return FakePage(lines)


def legend_page() -> FakePage:
    return FakePage(cell(CAPITAL_DATE_X, 100, "Horario de guardia", "de 10:15 a 22:00"))


def full_day_page(rows: list[tuple[str, tuple[str, ...]]]) -> FakePage:
    lines: list[FakeLine] = []
    for index, (date_text, pharmacy_lines) in enumerate(rows):
        top = 100 + index * 60
        lines += cell(FULL_DAY_DATE_X, top, date_text)
        lines += cell(FULL_DAY_PHARMACY_X, top, *pharmacy_lines)
    return FakePage(lines)


def rural_page(
    sierra: tuple[str, ...] = ("FARMACIA PRADENA", "C/ Mayor 1, Prádena", "Tfno: 921 507000"),
) -> FakePage:
    lines: list[FakeLine] = []
    lines += cell(RURAL_DATE_X, 100, "02-sep-25")
    lines += cell(
        RURAL_ZONE_X,
        100,
        "LA SIERRA",
        *sierra,
        "LA GRANJA",
        "FARMACIA VALENCIANA",
        "C/ Valenciana 3",
        "921470038",
    )
    lines += cell(RURAL_DATE_X, 220, "03-sep-25")
    lines += cell(
        RURAL_ZONE_X,
        220,
        "ZBS RIAZA / SEPÚLVEDA",
        "FARMACIA RIAZA",
        "C/ Ricardo Provencio 16",
        "921550131",
    )
    return FakePage(lines)


def sample_collection() -> ScheduleCollection:
    location = DutyLocation.from_region(SEGOVIA_CAPITAL)
    return {
        location: [
            PharmacySchedule(
                date=DutyDate(weekday="lunes", day=5, month="mayo", year=2025),
                shifts={
                    CAPITAL_DAY: [
                        Pharmacy(
                            name="FARMACIA ALFA",
                            address="C/ Real 1",
                            phone="921461589",
                        )
                    ],
                    CAPITAL_NIGHT: [],
                },
            )
        ]
    }
