from __future__ import annotations

import random
from datetime import UTC, datetime
from pathlib import Path

import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import erfa
import pytest

from seasons.julian import (
    GREGORIAN_REFORM_JDN,
    ConversionError,
    InvalidDateError,
    MonthOutOfRangeError,
    RoundingError,
    build_datetime,
    day_and_fraction,
    julian_day_to_datetime,
    month_and_year,
    round_five_decimals,
    split_day_fraction,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


@pytest.mark.parametrize(
    ("jd", "expected"),
    [
        (2451545.0, _utc(2000, 1, 1, 12, 0, 0)),
        (2451435.0, _utc(1999, 9, 13, 12, 0, 0)),
        (2455435.0, _utc(2010, 8, 26, 12, 0, 0)),
        (2415435.452, _utc(1901, 2, 19, 22, 50, 53)),
        (2451544.5, _utc(2000, 1, 1, 0, 0, 0)),
    ],
)
def test_known_julian_days(jd: float, expected: datetime) -> None:
    assert julian_day_to_datetime(jd) == expected


def test_result_is_utc_and_whole_seconds() -> None:
    result = julian_day_to_datetime(2451623.80984)
    assert result.tzinfo is UTC
    assert result.microsecond == 0


def test_gregorian_reform_boundary() -> None:
    # Thursday 4 October 1582 (Julian) was followed by Friday 15 October 1582 (Gregorian).
    last_julian = julian_day_to_datetime(GREGORIAN_REFORM_JDN - 1.0)
    first_gregorian = julian_day_to_datetime(float(GREGORIAN_REFORM_JDN))
    assert last_julian == _utc(1582, 10, 4, 12, 0, 0)
    assert first_gregorian == _utc(1582, 10, 15, 12, 0, 0)


def test_reform_boundary_uses_rounded_day_number() -> None:
    # Just before midnight starting 15 October; noise below five decimals must not
    # push the day number over the reform boundary.
    assert julian_day_to_datetime(GREGORIAN_REFORM_JDN - 0.5000001).date() == _utc(
        1582, 10, 15
    ).date()
    assert julian_day_to_datetime(GREGORIAN_REFORM_JDN - 0.500006).date() == _utc(
        1582, 10, 4
    ).date()


def test_julian_calendar_dates_before_reform() -> None:
    assert julian_day_to_datetime(2268993.0) == _utc(1500, 3, 1, 12, 0, 0)
    assert julian_day_to_datetime(2268991.0) == _utc(1500, 2, 28, 12, 0, 0)


def test_julian_only_leap_day_is_invalid_date() -> None:
    # 1500 is a leap year in the Julian calendar only; datetime is proleptic Gregorian.
    with pytest.raises(InvalidDateError) as excinfo:
        julian_day_to_datetime(2268992.0)
    assert (excinfo.value.year, excinfo.value.month, excinfo.value.day) == (1500, 2, 29)


def test_gregorian_days_match_erfa() -> None:
    random.seed(42)
    for _ in range(500):
        jdn = random.randint(GREGORIAN_REFORM_JDN, 5_373_484)
        year, month, day, _fraction = erfa.jd2cal(float(jdn), 0.0)
        result = julian_day_to_datetime(float(jdn))
        assert (result.year, result.month, result.day) == (int(year), int(month), int(day))
        assert (result.hour, result.minute, result.second) == (12, 0, 0)


def test_conversion_is_deterministic() -> None:
    first = julian_day_to_datetime(2415435.452)
    second = julian_day_to_datetime(2415435.452)
    assert first == second


@pytest.mark.parametrize(
    ("jd", "expected"),
    [
        (2451540.000005, _utc(1999, 12, 27, 12, 0, 0)),
        (2451540.000075, _utc(1999, 12, 27, 12, 0, 6)),
        (2451540.000495, _utc(1999, 12, 27, 12, 0, 42)),
    ],
)
def test_rounding_uses_binary_value(jd: float, expected: datetime) -> None:
    # Each day number sits just below a sixth-decimal midpoint.
    assert julian_day_to_datetime(jd) == expected


def test_second_carries_into_minute() -> None:
    # 59.616 seconds past midnight: the biased second rounds up to 60.
    assert julian_day_to_datetime(2451544.50069) == _utc(2000, 1, 1, 0, 1, 0)


def test_minute_carries_into_hour() -> None:
    # 10:59:59.712
    assert julian_day_to_datetime(2451544.95833) == _utc(2000, 1, 1, 11, 0, 0)


@pytest.mark.parametrize(
    ("fraction", "expected"),
    [
        (0.0, (0, 0, 0, False)),
        (0.5, (12, 0, 0, False)),
        (0.00069, (0, 1, 0, False)),
        (0.45833, (11, 0, 0, False)),
        (0.999995, (0, 0, 0, True)),
    ],
)
def test_split_day_fraction(fraction: float, expected: tuple) -> None:
    assert split_day_fraction(fraction) == expected


@pytest.mark.parametrize(
    ("year", "month", "day", "expected"),
    [
        (1999, 12, 31, _utc(2000, 1, 1, 0, 0, 0)),
        (2000, 2, 28, _utc(2000, 2, 29, 0, 0, 0)),
        (1900, 2, 28, _utc(1900, 3, 1, 0, 0, 0)),
        (2021, 6, 30, _utc(2021, 7, 1, 0, 0, 0)),
    ],
)
def test_day_carry_rolls_over_calendar(
    year: int, month: int, day: int, expected: datetime
) -> None:
    assert build_datetime(year, month, day, 0.999995) == expected


def test_invalid_date_is_reported() -> None:
    with pytest.raises(InvalidDateError) as excinfo:
        build_datetime(2001, 2, 29, 0.25)
    assert (excinfo.value.year, excinfo.value.month, excinfo.value.day) == (2001, 2, 29)


def test_day_carry_past_last_representable_date() -> None:
    with pytest.raises(InvalidDateError):
        build_datetime(9999, 12, 31, 0.999995)


def test_julian_day_before_year_one_is_invalid_date() -> None:
    with pytest.raises(InvalidDateError) as excinfo:
        julian_day_to_datetime(0.0)
    assert (excinfo.value.year, excinfo.value.month, excinfo.value.day) == (-4712, 1, 1)


@pytest.mark.parametrize(("e", "c", "expected"), [(4, 6700, (3, 1984)), (14, 6715, (1, 2000)), (15, 6616, (2, 1901))])
def test_month_and_year(e: int, c: int, expected: tuple) -> None:
    assert month_and_year(e, c) == expected


@pytest.mark.parametrize("e", [1, 0, 26])
def test_month_out_of_range(e: int) -> None:
    with pytest.raises(MonthOutOfRangeError) as excinfo:
        month_and_year(e, 6700)
    assert not 1 <= excinfo.value.value <= 12


def test_day_and_fraction() -> None:
    day, fraction = day_and_fraction(0.5, 2453082, 2452653, 14)
    assert day == 1
    assert fraction == pytest.approx(0.5)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2451623.809844, 2451623.80984),
        (2451623.8098451, 2451623.80985),
        (0.123455, 0.12345),
        (-0.123455, -0.12345),
        (0.015625, 0.01563),
        (-0.015625, -0.01563),
        (1.0, 1.0),
    ],
)
def test_round_five_decimals(value: float, expected: float) -> None:
    assert round_five_decimals(value) == expected


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), 1e30])
def test_round_five_decimals_failure(value: float) -> None:
    with pytest.raises(RoundingError):
        round_five_decimals(value)


def test_converter_propagates_rounding_failure() -> None:
    with pytest.raises(RoundingError):
        julian_day_to_datetime(float("nan"))


def test_conversion_errors_share_base_class() -> None:
    for error in (RoundingError("x"), MonthOutOfRangeError(0), InvalidDateError(1, 2, 30)):
        assert isinstance(error, ConversionError)
        assert isinstance(error, ValueError)
