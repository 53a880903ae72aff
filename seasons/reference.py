"""Published equinox and solstice times used to check the mean-event estimates."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Tuple

import numpy as np

from .events import SolarEventKind, compute_event

__all__ = [
    "ReferenceTableError",
    "ReferenceEvent",
    "AccuracyReport",
    "DEFAULT_REFERENCE_TABLE",
    "resolve_reference_table",
    "parse_reference_table",
    "load_reference_events",
    "compare_to_reference",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_REFERENCE_TABLE = (
    Path(__file__).resolve().parent / "data" / "nasa_solar_events_1900_2089.txt"
)

# Column order of the published table; perihelion and aphelion follow and are ignored.
_TABLE_COLUMNS: Tuple[SolarEventKind, ...] = (
    SolarEventKind.march_equinox,
    SolarEventKind.june_solstice,
    SolarEventKind.september_equinox,
    SolarEventKind.december_solstice,
)

_CACHE: Dict[Path, Dict[SolarEventKind, List["ReferenceEvent"]]] = {}
_CACHE_LOCK = Lock()


class ReferenceTableError(RuntimeError):
    """Raised when the reference table is missing or malformed."""


@dataclass(frozen=True)
class ReferenceEvent:
    """A published event instant, to the minute, in UTC."""

    kind: SolarEventKind
    date_time: datetime

    @property
    def year(self) -> int:
        return self.date_time.year


@dataclass(frozen=True)
class AccuracyReport:
    """Differences, in seconds, between computed and published event times."""

    kind: SolarEventKind
    years: np.ndarray
    differences: np.ndarray

    @property
    def count(self) -> int:
        return int(self.differences.size)

    @property
    def mean_offset_seconds(self) -> float:
        return float(np.mean(self.differences))

    @property
    def mean_absolute_seconds(self) -> float:
        return float(np.mean(np.abs(self.differences)))

    @property
    def max_absolute_seconds(self) -> float:
        return float(np.max(np.abs(self.differences)))

    @property
    def worst_year(self) -> int:
        return int(self.years[int(np.argmax(np.abs(self.differences)))])

    def as_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "count": self.count,
            "mean_offset_seconds": round(self.mean_offset_seconds, 1),
            "mean_absolute_seconds": round(self.mean_absolute_seconds, 1),
            "max_absolute_seconds": round(self.max_absolute_seconds, 1),
            "worst_year": self.worst_year,
        }


def resolve_reference_table() -> Path:
    """Return the reference table path, honouring ``SEASONS_REFERENCE_TABLE``."""

    override = os.environ.get("SEASONS_REFERENCE_TABLE")
    if override:
        return Path(override).expanduser()
    return DEFAULT_REFERENCE_TABLE


def _parse_instant(year: int, day_text: str, time_text: str) -> datetime:
    month, day = (int(part) for part in day_text.split("/"))
    hour, minute = (int(part) for part in time_text.split(":"))
    # The table writes midnight at the end of a day as 24:00.
    return datetime(year, month, day, tzinfo=UTC) + timedelta(hours=hour, minutes=minute)


def parse_reference_table(text: str) -> Dict[SolarEventKind, List[ReferenceEvent]]:
    """Parse the fixed-width table of event times.

    Each data row holds a year followed by ``M/DD HH:MM`` pairs for the March
    equinox, June solstice, September equinox and December solstice. Blank
    lines and lines starting with ``#`` are skipped.

    Raises
    ------
    ReferenceTableError
        If a data row cannot be parsed or the table holds no rows.
    """

    events: Dict[SolarEventKind, List[ReferenceEvent]] = {kind: [] for kind in _TABLE_COLUMNS}
    for line_no, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        fields = stripped.split()
        if len(fields) < 1 + 2 * len(_TABLE_COLUMNS):
            raise ReferenceTableError(f"Line {line_no}: expected a year and four events")
        try:
            year = int(fields[0])
            for index, kind in enumerate(_TABLE_COLUMNS):
                day_text, time_text = fields[1 + 2 * index], fields[2 + 2 * index]
                instant = _parse_instant(year, day_text, time_text)
                events[kind].append(ReferenceEvent(kind=kind, date_time=instant))
        except ValueError as exc:
            raise ReferenceTableError(f"Line {line_no}: {exc}") from exc

    if not events[_TABLE_COLUMNS[0]]:
        raise ReferenceTableError("Reference table contains no rows")
    return events


def load_reference_events(
    path: Optional[Path] = None,
) -> Dict[SolarEventKind, List[ReferenceEvent]]:
    """Load and cache the reference table.

    Parameters
    ----------
    path:
        Table to read; defaults to :func:`resolve_reference_table`.

    Returns
    -------
    dict
        Reference events per kind, ordered by year.

    Raises
    ------
    ReferenceTableError
        If the file is missing or malformed.
    """

    table_path = Path(path).expanduser() if path is not None else resolve_reference_table()
    cached = _CACHE.get(table_path)
    if cached is not None:
        return cached

    with _CACHE_LOCK:
        cached = _CACHE.get(table_path)
        if cached is not None:
            return cached

        if not table_path.is_file():
            raise ReferenceTableError(f"Reference table not found: {table_path}")
        events = parse_reference_table(table_path.read_text(encoding="utf-8"))
        _CACHE[table_path] = events

    years = [event.year for event in events[SolarEventKind.march_equinox]]
    LOGGER.info(
        json.dumps(
            {
                "event": "reference_loaded",
                "path": str(table_path),
                "first_year": years[0],
                "last_year": years[-1],
            }
        )
    )
    return events


def compare_to_reference(
    kind: SolarEventKind,
    references: Optional[Dict[SolarEventKind, List[ReferenceEvent]]] = None,
) -> AccuracyReport:
    """Compare computed event times of *kind* against the published ones.

    Differences are ``computed - published`` in seconds, one per table year.
    """

    if references is None:
        references = load_reference_events()
    rows = references[kind]

    years = np.array([row.year for row in rows], dtype=int)
    differences = np.array(
        [
            (compute_event(kind, row.year).date_time - row.date_time).total_seconds()
            for row in rows
        ],
        dtype=float,
    )
    return AccuracyReport(kind=kind, years=years, differences=differences)
