from __future__ import annotations

from typing import Any

from guardias.core.constants import location_from_id
from guardias.core.models import (
    DutyDate,
    DutyTimeSpan,
    Pharmacy,
    PharmacySchedule,
    ScheduleCollection,
)


def pharmacy_to_payload(pharmacy: Pharmacy) -> dict[str, Any]:
    return {
        "name": pharmacy.name,
        "address": pharmacy.address,
        "phone": pharmacy.phone,
        "additionalInfo": pharmacy.additional_info,
    }


def schedule_to_payload(schedule: PharmacySchedule) -> dict[str, Any]:
    return {
        "date": {
            "dayOfWeek": schedule.date.weekday,
            "day": schedule.date.day,
            "month": schedule.date.month,
            "year": schedule.date.year,
        },
        "shifts": {
            span.key: [pharmacy_to_payload(item) for item in pharmacies]
            for span, pharmacies in schedule.shifts.items()
        },
        "zones": {
            zone_id: [pharmacy_to_payload(item) for item in pharmacies]
            for zone_id, pharmacies in schedule.zones.items()
        },
    }


def collection_to_payload(region_id: str, collection: ScheduleCollection) -> dict[str, Any]:
    return {
        "regionId": region_id,
        "locations": [
            {
                "id": location.id,
                "name": location.name,
                "icon": location.icon,
                "kind": location.kind.value,
                "schedules": [schedule_to_payload(item) for item in schedules],
            }
            for location, schedules in collection.items()
        ],
    }


def _pharmacy_from_payload(raw: dict[str, Any]) -> Pharmacy:
    return Pharmacy(
        name=str(raw["name"]),
        address=str(raw["address"]),
        phone=str(raw.get("phone", "")),
        additional_info=raw.get("additionalInfo"),
    )


def _schedule_from_payload(raw: dict[str, Any]) -> PharmacySchedule:
    raw_date = raw["date"]
    return PharmacySchedule(
        date=DutyDate(
            weekday=str(raw_date.get("dayOfWeek", "")),
            day=int(raw_date["day"]),
            month=str(raw_date["month"]),
            year=raw_date.get("year"),
        ),
        shifts={
            DutyTimeSpan.from_key(key): [_pharmacy_from_payload(item) for item in items]
            for key, items in raw.get("shifts", {}).items()
        },
        zones={
            zone_id: [_pharmacy_from_payload(item) for item in items]
            for zone_id, items in raw.get("zones", {}).items()
        },
    )


def collection_from_payload(payload: dict[str, Any]) -> ScheduleCollection:
    collection: ScheduleCollection = {}
    for raw_location in payload.get("locations", []):
        location = location_from_id(str(raw_location["id"]))
        collection[location] = [
            _schedule_from_payload(item) for item in raw_location.get("schedules", [])
        ]
    return collection
