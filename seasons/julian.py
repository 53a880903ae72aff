"""Conversion of Julian Day Numbers into UTC calendar date-times."""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Tuple

__all__ = [
    "ConversionError",
    "InvalidDateError",
    "InvalidTimeError",
    "MonthOutOfRangeError",
    "RoundingError",
    "GREGORIAN_REFORM_JDN",
    "round_five_decimals",
    "split_day_fraction",
    "month_and_year",
    "day_and_fraction",
    "build_datetime",
    "julian_day_to_datetime",
]

GREGORIAN_REFORM_JDN = 2_299_161  # 1582-10-15, first day of the Gregorian calendar.

_FIVE_PLACES = Decimal("0.00001")
_SECOND_BIAS = 0.01  # Compensates the truncation of the floor chain below.


class ConversionError(ValueError):
    """Raised when a Julian Day Number cannot be turned into a calendar date-time."""


class InvalidDateError(ConversionError):
    """Raised when the derived year, month and day do not form a calendar date."""

    def __init__(self, year: int, month: int, day: int) -> None:
        super().__init__(f"Unable to set the date: {year}-{month}-{day}")
        self.year = year
        self.month = month
        self.day = day


class InvalidTimeError(ConversionError):
    """Raised when the derived hour, minute and second do not form a time of day."""

    def __init__(self, hour: int, minute: int, second: int) -> None:
        super().__init__(
            f"Unable to create a time from hour {hour}, minute {minute}, second {second}"
        )
        self.hour = hour
        self.minute = minute
        self.second = second


class MonthOutOfRangeError(ConversionError):
    """Raised when the month derived from a Julian Day Number is not within 1-12."""

    def __init__(self, value: int) -> None:
        super().__init__(f"Invalid month number: {value}")
        self.value = value


class RoundingError(ConversionError):
    """Raised when a value cannot be rounded to five decimal places."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Unable to round value: {message}")
        self.message = message


def round_five_decimals(value: float) -> float:
    """Round *value* to five decimal places, halves away from zero.

    The exact binary value is rounded, so ``0.123455`` becomes ``0.12345``
    because the nearest double lies just below the midpoint.

    Raises
    ------
    RoundingError
        If *value* is not finite or its five-decimal text cannot be represented.
    """

    if not math.isfinite(value):
        raise RoundingError(f"{value!r} is not a finite number")
    try:
        rounded = Decimal(value).quantize(_FIVE_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise RoundingError(f"{value!r} has too many digits to keep five decimals") from exc
    return float(rounded)


def split_day_fraction(fraction_of_day: float) -> Tuple[int, int, int, bool]:
    """Split a fraction of a day into ``(hour, minute, second, next_day)``.

    Parameters
    ----------
    fraction_of_day:
        Fraction of the day elapsed since midnight, in ``[0, 1)``.

    Returns
    -------
    tuple
        Hour, minute and second of the day plus a flag that is ``True`` when
        rounding carried the time over midnight into the following day.

    Raises
    ------
    RoundingError
        If the fraction of the hour cannot be rounded.
    """

    hour_with_fraction = 24.0 * fraction_of_day
    hour = math.floor(hour_with_fraction)
    fraction_of_hour = round_five_decimals(hour_with_fraction - hour)
    minute_with_fraction = 60.0 * fraction_of_hour
    minute = math.floor(minute_with_fraction)
    fraction_of_minute = _SECOND_BIAS + minute_with_fraction - minute
    second = math.floor(60.0 * fraction_of_minute)

    next_day = False
    if second == 60:
        second = 0
        minute += 1
    if minute == 60:
        minute = 0
        hour += 1
    if hour == 24:
        hour = 0
        next_day = True
    return hour, minute, second, next_day


def month_and_year(e: int, c: int) -> Tuple[int, int]:
    """Derive ``(month, year)`` from the intermediate terms *e* and *c*.

    Raises
    ------
    MonthOutOfRangeError
        If the derived month is outside 1-12.
    """

    month = e - 1 if e < 14 else e - 13
    if not 1 <= month <= 12:
        raise MonthOutOfRangeError(month)
    year = c - 4716 if month > 2 else c - 4715
    return month, year


def day_and_fraction(f: float, b: int, d: int, e: int) -> Tuple[int, float]:
    """Return the day of the month and the fraction of that day elapsed."""

    day_with_fraction = f + b - d - math.floor(e * 30.6001)
    day = math.floor(day_with_fraction)
    return day, day_with_fraction - day


def build_datetime(year: int, month: int, day: int, fraction_of_day: float) -> datetime:
    """Assemble a UTC datetime from a calendar date and a fraction of that day.

    When the time of day rounds up to midnight the date moves forward by one
    day, rolling over month and year boundaries.

    Raises
    ------
    InvalidDateError
        If the date is not valid before or after moving forward.
    InvalidTimeError
        If the time of day is out of range.
    RoundingError
        If the fraction of the day cannot be split.
    """

    hour, minute, second, next_day = split_day_fraction(fraction_of_day)

    try:
        calendar_date = date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(year, month, day) from exc
    if next_day:
        try:
            calendar_date += timedelta(days=1)
        except OverflowError as exc:
            raise InvalidDateError(year, month, day) from exc

    try:
        time_of_day = time(hour, minute, second)
    except ValueError as exc:
        raise InvalidTimeError(hour, minute, second) from exc

    return datetime.combine(calendar_date, time_of_day, tzinfo=UTC)


def julian_day_to_datetime(jd: float) -> datetime:
    """Convert a Julian Day Number into a timezone-aware UTC datetime.

    Days before JDN 2299161 are read in the Julian calendar and later days in
    the Gregorian calendar, reproducing the 1582 reform.

    Parameters
    ----------
    jd:
        Julian Day Number; a fractional part of ``0.0`` is noon UTC.

    Returns
    -------
    datetime
        The instant, to the whole second, in UTC.

    Raises
    ------
    ConversionError
        One of :class:`InvalidDateError`, :class:`InvalidTimeError`,
        :class:`MonthOutOfRangeError` or :class:`RoundingError`.
    """

    # Rounding must happen before z is compared to the reform day.
    j = round_five_decimals(jd) + 0.5
    z = math.floor(j)
    f = j - z

    if z < GREGORIAN_REFORM_JDN:
        a = z
    else:
        alpha = math.floor((z - 1_867_216.25) / 36_524.25)
        a = z + 1 + alpha - math.floor(alpha / 4)

    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6)

    month, year = month_and_year(e, c)
    day, fraction_of_day = day_and_fraction(f, b, d, e)
    return build_datetime(year, month, day, fraction_of_day)
