"""Equinox and solstice times for the years 1900-2100."""

from .events import (
    MAX_YEAR,
    MIN_YEAR,
    AnnualSolarEvents,
    SolarEvent,
    SolarEventKind,
    YearOutOfRangeError,
    compute_event,
    estimate_event_julian_day,
    validate_year,
)
from .julian import (
    ConversionError,
    InvalidDateError,
    InvalidTimeError,
    MonthOutOfRangeError,
    RoundingError,
    julian_day_to_datetime,
)

__all__ = [
    "AnnualSolarEvents",
    "ConversionError",
    "InvalidDateError",
    "InvalidTimeError",
    "MAX_YEAR",
    "MIN_YEAR",
    "MonthOutOfRangeError",
    "RoundingError",
    "SolarEvent",
    "SolarEventKind",
    "YearOutOfRangeError",
    "compute_event",
    "estimate_event_julian_day",
    "julian_day_to_datetime",
    "validate_year",
]
