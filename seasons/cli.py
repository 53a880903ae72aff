"""Command line entry point: ``python -m seasons [YEARS] [--compare] [--json]``."""

from __future__ import annotations

import argparse
import itertools
import json
import re
import sys
from datetime import UTC, datetime
from typing import List, Optional

from .events import AnnualSolarEvents, SolarEventKind, YearOutOfRangeError
from .julian import ConversionError
from .reference import ReferenceTableError, compare_to_reference, load_reference_events


_YEAR_SPAN = re.compile(r"(\d+)(?:\s*-\s*(\d+))?")


def _expand_year_span(span: str) -> range:
    match = _YEAR_SPAN.fullmatch(span)
    if match is None:
        raise ValueError(f"invalid year or range: {span!r}")
    first = int(match.group(1))
    last = int(match.group(2)) if match.group(2) is not None else first
    if last < first:
        raise ValueError(f"range {span!r} ends before it starts")
    return range(first, last + 1)


def parse_year_arguments(arg: str) -> List[int]:
    """Parse a single year, a ``start-end`` range or a comma separated list of both.

    Years appear once, in the order they are first named.
    """

    spans = [span.strip() for span in arg.split(",") if span.strip()]
    if not spans:
        raise ValueError("no years given")
    years = itertools.chain.from_iterable(_expand_year_span(span) for span in spans)
    return list(dict.fromkeys(years))


def _format_utc(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _year_payload(events: AnnualSolarEvents) -> dict:
    return {
        "year": events.year,
        "events": [
            {
                "kind": event.kind.value,
                "julian_day": event.julian_day,
                "utc": _format_utc(event.date_time),
            }
            for event in events
        ],
    }


def _print_year(events: AnnualSolarEvents) -> None:
    print(f"{events.year}")
    for event in events:
        print(
            f"  {event.kind.label:<18} {event.date_time:%Y-%m-%d %H:%M:%S} UTC"
            f"  JD {event.julian_day:.5f}"
        )


def _print_comparison(as_json: bool) -> None:
    references = load_reference_events()
    reports = [compare_to_reference(kind, references) for kind in SolarEventKind]
    if as_json:
        print(json.dumps({"comparison": [report.as_dict() for report in reports]}, indent=2))
        return
    print("Difference from published times (seconds, computed - published)")
    print(f"  {'event':<18} {'years':>5} {'mean':>8} {'mean |d|':>9} {'max |d|':>8} {'worst':>6}")
    for report in reports:
        print(
            f"  {report.kind.label:<18} {report.count:>5d}"
            f" {report.mean_offset_seconds:>8.1f} {report.mean_absolute_seconds:>9.1f}"
            f" {report.max_absolute_seconds:>8.1f} {report.worst_year:>6d}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="seasons",
        description="Print the UTC times of the equinoxes and solstices (1900-2100).",
    )
    parser.add_argument(
        "years",
        nargs="?",
        default=None,
        help="year, start-end range or comma separated list (default: current UTC year)",
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="compare against the published 1900-2089 table instead",
    )
    parser.add_argument("--json", action="store_true", help="emit JSON")
    args = parser.parse_args(argv)

    if args.compare:
        try:
            _print_comparison(args.json)
        except ReferenceTableError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        return 0

    if args.years is None:
        years = [datetime.now(UTC).year]
    else:
        try:
            years = parse_year_arguments(args.years)
        except ValueError as exc:
            parser.error(f"invalid years argument: {exc}")

    results = []
    for year in years:
        try:
            results.append(AnnualSolarEvents.for_year(year))
        except (YearOutOfRangeError, ConversionError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

    if args.json:
        print(json.dumps([_year_payload(events) for events in results], indent=2))
        return 0

    for idx, events in enumerate(results):
        if idx:
            print()
        _print_year(events)
    return 0
