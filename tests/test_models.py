from __future__ import annotations

from datetime import date, time

import pytest

from guardias.core.models import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    RURAL_DAYTIME,
    DocumentDescriptor,
    DutyDate,
    DutyTimeSpan,
    Pharmacy,
    PharmacySchedule,
)


def test_midnight_span_is_inclusive_at_both_ends() -> None:
    assert CAPITAL_NIGHT.spans_multiple_days is True
    assert CAPITAL_NIGHT.contains(time(22, 0)) is True
    assert CAPITAL_NIGHT.contains(time(10, 15)) is True
    assert CAPITAL_NIGHT.contains(time(3, 30)) is True
    assert CAPITAL_NIGHT.contains(time(21, 59)) is False
    assert CAPITAL_NIGHT.contains(time(10, 16)) is False
    assert CAPITAL_NIGHT.contains(time(15, 0)) is False


def test_same_day_span_boundaries() -> None:
    assert CAPITAL_DAY.spans_multiple_days is False
    assert CAPITAL_DAY.contains(time(10, 15)) is True
    assert CAPITAL_DAY.contains(time(22, 0)) is True
    assert CAPITAL_DAY.contains(time(10, 14)) is False
    assert CAPITAL_DAY.contains(time(22, 1)) is False
    assert FULL_DAY.contains(time(0, 0)) is True
    assert FULL_DAY.contains(time(23, 59)) is True


def test_span_key_roundtrip_and_display() -> None:
    assert CAPITAL_DAY.key == "10:15-22:00"
    assert DutyTimeSpan.from_key("22:00-10:15") == CAPITAL_NIGHT
    assert FULL_DAY.display_name == "24 horas"
    assert RURAL_DAYTIME.display_name == "10:00 - 20:00"
    assert CAPITAL_NIGHT.display_name == "22:00 - 10:15 (+1)"


def test_duty_date_equality_ignores_weekday() -> None:
    printed = DutyDate(weekday="martes", day=27, month="enero", year=2026)
    derived = DutyDate(weekday="", day=27, month="enero", year=2026)
    assert printed == derived
    assert hash(printed) == hash(derived)
    assert printed != DutyDate(weekday="martes", day=27, month="enero", year=None)
    assert str(printed) == "martes, 27 de enero de 2026"


def test_duty_date_resolves_missing_year_from_reference() -> None:
    duty_date = DutyDate(weekday="lunes", day=5, month="mayo")
    assert duty_date.to_date(date(2025, 1, 1)) == date(2025, 5, 5)
    with pytest.raises(ValueError):
        duty_date.to_date()
    with pytest.raises(ValueError):
        DutyDate(weekday="", day=31, month="febrero", year=2025).to_date()


def test_pharmacy_identity_uses_name_and_address() -> None:
    first = Pharmacy(name="FARMACIA ALFA", address="C/ Real 1", phone="921461589")
    second = Pharmacy(name="FARMACIA ALFA", address="C/ Real 1", phone="", additional_info="x")
    other = Pharmacy(name="FARMACIA ALFA", address="C/ Real 2")
    assert first.same_as(second)
    assert not first.same_as(other)
    assert first.formatted_phone == "921 461 589"


def test_schedule_lists_pharmacies_open_at_time() -> None:
    alfa = Pharmacy(name="FARMACIA ALFA", address="C/ Real 1")
    beta = Pharmacy(name="FARMACIA BETA", address="C/ Real 2")
    schedule = PharmacySchedule(
        date=DutyDate(weekday="lunes", day=5, month="mayo", year=2025),
        shifts={CAPITAL_DAY: [alfa], CAPITAL_NIGHT: [beta]},
    )
    assert schedule.pharmacies_at(time(12, 0)) == [alfa]
    assert schedule.pharmacies_at(time(23, 0)) == [beta]
    assert schedule.pharmacies_at(time(22, 0)) == [alfa, beta]


def test_descriptor_fingerprint_prefers_etag() -> None:
    assert DocumentDescriptor(etag='"abc"', last_modified="Mon").fingerprint == '"abc"'
    assert DocumentDescriptor(last_modified="Mon, 05 May 2025").fingerprint == "Mon, 05 May 2025"
    assert DocumentDescriptor(url="https://example.test/a.pdf").fingerprint is None
