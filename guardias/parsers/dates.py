from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from typing import Iterator

from guardias.core.models import SPANISH_MONTHS, SPANISH_WEEKDAYS, DutyDate

_MONTH_ABBREVIATIONS = {name[:3]: name for name in SPANISH_MONTHS}

_LONG_DATE_RE = re.compile(
    r"\b(lunes|martes|mi[ée]rcoles|jueves|viernes|s[áa]bado|domingo),\s*(\d{1,2})\s+de\s+"
    r"(" + "|".join(SPANISH_MONTHS) + r")(?:\s+(?:de\s+)?(\d{4}))?\b",
    re.IGNORECASE,
)

_SHORT_DATE_RE = re.compile(
    r"\b(\d{1,2})-(" + "|".join(_MONTH_ABBREVIATIONS) + r")(?:-(\d{4}|\d{2}))?(?!-?\d)\b",
    re.IGNORECASE,
)

_YEAR_LINE_RE = re.compile(r"^\s*((?:19|20|21)\d{2})\s*$")

_WEEKDAY_ALIASES = {
    "miercoles": "miércoles",
    "sabado": "sábado",
}


def _canonical_weekday(raw: str) -> str:
    lowered = raw.lower()
    return _WEEKDAY_ALIASES.get(lowered, lowered)


def _weekday_for(day: int, month: str, year: int | None) -> str:
    if year is None:
        return ""
    try:
        resolved = date(year, SPANISH_MONTHS.index(month) + 1, day)
    except ValueError:
        return ""
    return SPANISH_WEEKDAYS[resolved.weekday()]


def _short_year(raw: str | None) -> int | None:
    if not raw:
        return None
    year = int(raw)
    return year + 2000 if year < 100 else year


def with_year(duty_date: DutyDate, year: int) -> DutyDate:
    return replace(
        duty_date,
        year=year,
        weekday=duty_date.weekday or _weekday_for(duty_date.day, duty_date.month, year),
    )


class DateRecognizer:
    """Finds Spanish duty dates inside scanned text.

    The long form ("martes, 27 de enero de 2026") is always recognized. The
    abbreviated roster form ("27-ene-26" or "27-ene") is opt-in because it
    would otherwise fire on street numbers in pharmacy addresses.
    Day-of-month is checked against 1-31 only.
    """

    def __init__(self, *, accept_abbreviated: bool = False) -> None:
        self.accept_abbreviated = accept_abbreviated

    def recognize(self, text: str) -> DutyDate | None:
        return next(self.recognize_all(text), None)

    def recognize_all(self, text: str) -> Iterator[DutyDate]:
        found: list[tuple[int, DutyDate]] = []

        for match in _LONG_DATE_RE.finditer(text):
            day = int(match.group(2))
            if not 1 <= day <= 31:
                continue
            year = int(match.group(4)) if match.group(4) else None
            found.append(
                (
                    match.start(),
                    DutyDate(
                        weekday=_canonical_weekday(match.group(1)),
                        day=day,
                        month=match.group(3).lower(),
                        year=year,
                    ),
                )
            )

        if self.accept_abbreviated:
            for match in _SHORT_DATE_RE.finditer(text):
                day = int(match.group(1))
                if not 1 <= day <= 31:
                    continue
                month = _MONTH_ABBREVIATIONS[match.group(2).lower()]
                year = _short_year(match.group(3))
                found.append(
                    (
                        match.start(),
                        DutyDate(
                            weekday=_weekday_for(day, month, year),
                            day=day,
                            month=month,
                            year=year,
                        ),
                    )
                )

        found.sort(key=lambda item: item[0])
        for _, duty_date in found:
            yield duty_date

    @staticmethod
    def recognize_year(text: str) -> int | None:
        match = _YEAR_LINE_RE.match(text)
        if match is None:
            return None
        return int(match.group(1))
