"""Parse a duty-roster PDF from the command line.

Usage: python -m guardias.cli REGION PDF [--json] [--output FILE]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from guardias.config import load_settings
from guardias.core.serialization import collection_to_payload
from guardias.main import configure_logging
from guardias.parsers.errors import ParseError
from guardias.parsers.registry import build_strategies
from guardias.parsers.service import ScheduleParsingService


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    strategies = build_strategies(settings.parser_profile)

    parser = argparse.ArgumentParser(description="Convert a pharmacy duty-roster PDF into schedules")
    parser.add_argument("region", choices=sorted(strategies), help="Region layout of the document")
    parser.add_argument("pdf_path", help="Path to the PDF file")
    parser.add_argument("--json", action="store_true", help="Print the full JSON payload")
    parser.add_argument("--output", "-o", default=None, help="Write the JSON payload to this file")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    service = ScheduleParsingService(strategies, profile=settings.parser_profile)

    try:
        collection = service.parse(args.region, Path(args.pdf_path))
    except ParseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    payload = collection_to_payload(args.region, collection)
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        print(f"JSON saved: {out_path}")

    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    for location, schedules in collection.items():
        print(f"{location.icon} {location.name}: {len(schedules)} dates")
        for schedule in schedules[:3]:
            for span, pharmacies in schedule.shifts.items():
                names = ", ".join(pharmacy.name for pharmacy in pharmacies) or "-"
                print(f"  {schedule.date} [{span.display_name}] {names}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
