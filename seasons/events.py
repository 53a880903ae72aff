"""Mean equinox and solstice instants from fixed quartic polynomials."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator

from .julian import RoundingError, julian_day_to_datetime, round_five_decimals

__all__ = [
    "MIN_YEAR",
    "MAX_YEAR",
    "SolarEventKind",
    "EventCoefficients",
    "EVENT_COEFFICIENTS",
    "YearOutOfRangeError",
    "SolarEvent",
    "AnnualSolarEvents",
    "validate_year",
    "estimate_event_julian_day",
    "compute_event",
]

LOGGER = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100


class SolarEventKind(str, Enum):
    """The four annual solar events, in calendar order."""

    march_equinox = "march_equinox"
    june_solstice = "june_solstice"
    september_equinox = "september_equinox"
    december_solstice = "december_solstice"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class EventCoefficients:
    """Coefficients of ``base + linear*m + quad*m**2 + cubic*m**3 + quartic*m**4``."""

    base: float
    linear: float
    quad: float
    cubic: float
    quartic: float


# Mean event instants (JDE) fitted over the years 1000-3000, m = (year - 2000) / 1000.
EVENT_COEFFICIENTS: Dict[SolarEventKind, EventCoefficients] = {
    SolarEventKind.march_equinox: EventCoefficients(
        2_451_623.809_84, 365_242.374_04, 0.051_69, -0.004_11, -0.000_57
    ),
    SolarEventKind.june_solstice: EventCoefficients(
        2_451_716.567_67, 365_241.626_03, 0.003_25, 0.008_88, 0.000_30
    ),
    SolarEventKind.september_equinox: EventCoefficients(
        2_451_810.217_15, 365_242.017_67, 0.003_37, -0.000_78, -0.115_75
    ),
    SolarEventKind.december_solstice: EventCoefficients(
        2_451_900.059_52, 365_242.740_49, 0.000_32, -0.062_23, -0.008_23
    ),
}


class YearOutOfRangeError(ValueError):
    """Raised when a year lies outside the supported window."""

    def __init__(self, year: int) -> None:
        super().__init__(
            f"Year out of range: {year}, must be between {MIN_YEAR} and {MAX_YEAR}"
        )
        self.year = year


def validate_year(year: int) -> int:
    """Return *year* unchanged, or raise :class:`YearOutOfRangeError`."""

    if not MIN_YEAR <= year <= MAX_YEAR:
        raise YearOutOfRangeError(year)
    return year


def estimate_event_julian_day(kind: SolarEventKind, year: int) -> float:
    """Estimate the Julian Day Number of *kind* in *year*.

    The year is not validated here; results outside 1900-2100 are
    extrapolations. The estimate is rounded to five decimals, falling back to
    the unrounded value if rounding fails.
    """

    coefficients = EVENT_COEFFICIENTS[kind]
    m = (year - 2000) / 1000.0
    m2 = m * m
    m3 = m2 * m
    m4 = m3 * m

    jd = (
        coefficients.base
        + coefficients.linear * m
        + coefficients.quad * m2
        + coefficients.cubic * m3
        + coefficients.quartic * m4
    )
    try:
        return round_five_decimals(jd)
    except RoundingError:
        return jd


@dataclass(frozen=True)
class SolarEvent:
    """A solar event with its Julian Day Number and UTC instant."""

    kind: SolarEventKind
    julian_day: float
    date_time: datetime

    @property
    def year(self) -> int:
        return self.date_time.year


def compute_event(kind: SolarEventKind, year: int) -> SolarEvent:
    """Compute the solar event *kind* for *year*.

    Parameters
    ----------
    kind:
        Which of the four events to compute.
    year:
        Calendar year within 1900-2100.

    Returns
    -------
    SolarEvent
        The event with its Julian Day Number and UTC date-time.

    Raises
    ------
    YearOutOfRangeError
        If *year* is outside 1900-2100.
    ConversionError
        If the Julian Day Number cannot be converted into a date-time.
    """

    validate_year(year)
    julian_day = estimate_event_julian_day(kind, year)
    date_time = julian_day_to_datetime(julian_day)
    LOGGER.debug(
        json.dumps(
            {
                "event": "solar_event_computed",
                "kind": kind.value,
                "year": year,
                "julian_day": julian_day,
                "utc": date_time.isoformat(),
            }
        )
    )
    return SolarEvent(kind=kind, julian_day=julian_day, date_time=date_time)


@dataclass(frozen=True)
class AnnualSolarEvents:
    """The March equinox, June solstice, September equinox and December solstice of a year."""

    march_equinox: SolarEvent
    june_solstice: SolarEvent
    september_equinox: SolarEvent
    december_solstice: SolarEvent

    @classmethod
    def for_year(cls, year: int) -> "AnnualSolarEvents":
        """Compute all four events of *year*; see :func:`compute_event`."""

        validate_year(year)
        return cls(
            march_equinox=compute_event(SolarEventKind.march_equinox, year),
            june_solstice=compute_event(SolarEventKind.june_solstice, year),
            september_equinox=compute_event(SolarEventKind.september_equinox, year),
            december_solstice=compute_event(SolarEventKind.december_solstice, year),
        )

    @property
    def year(self) -> int:
        return self.march_equinox.year

    def __iter__(self) -> Iterator[SolarEvent]:
        yield self.march_equinox
        yield self.june_solstice
        yield self.september_equinox
        yield self.december_solstice

    def get(self, kind: SolarEventKind) -> SolarEvent:
        return getattr(self, kind.value)
