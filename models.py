"""Pydantic models for API requests and responses."""

from __future__ import annotations

import math
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from seasons.events import MAX_YEAR, MIN_YEAR, SolarEventKind


class SeasonsQueryParams(BaseModel):
    """Validated query parameters for the ``/seasons`` endpoint."""

    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="Gregorian calendar year")


class JulianDayQueryParams(BaseModel):
    """Validated query parameters for the ``/julian-day`` endpoint."""

    jd: float = Field(..., description="Julian Day Number (fraction 0.0 is noon UTC)")

    @field_validator("jd")
    def validate_jd(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("jd must be a finite number")
        return value


class SolarEventPayload(BaseModel):
    """A single equinox or solstice."""

    kind: SolarEventKind = Field(..., description="Event identifier")
    label: str = Field(..., description="Human readable event name")
    julian_day: float = Field(..., description="Estimated Julian Day Number")
    utc: str = Field(..., description="Event time in UTC (ISO-8601)")


class SeasonsResponse(BaseModel):
    """Successful equinox/solstice response payload."""

    ok: bool = True
    year: int = Field(..., description="Requested year")
    events: List[SolarEventPayload] = Field(..., description="Events in calendar order")
    model: Literal["mean-quartic"] = Field(
        "mean-quartic", description="Computation model identifier"
    )


class JulianDayResponse(BaseModel):
    """Julian Day Number conversion payload."""

    ok: bool = True
    julian_day: float = Field(..., description="Requested Julian Day Number")
    utc: str = Field(..., description="Converted instant in UTC (ISO-8601)")
    calendar: Literal["julian", "gregorian"] = Field(
        ..., description="Calendar the date is expressed in"
    )


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    reference_loaded: bool
    reference_years: List[int]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
