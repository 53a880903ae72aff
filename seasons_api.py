"""FastAPI application exposing equinox and solstice computations."""

from __future__ import annotations

import json
import logging
import math
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse,
    HealthResponse,
    JulianDayQueryParams,
    JulianDayResponse,
    SeasonsQueryParams,
    SeasonsResponse,
    SolarEventPayload,
)
from seasons.events import AnnualSolarEvents, SolarEventKind, YearOutOfRangeError
from seasons.julian import (
    GREGORIAN_REFORM_JDN,
    ConversionError,
    julian_day_to_datetime,
    round_five_decimals,
)
from seasons.reference import ReferenceTableError, load_reference_events

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("seasons-api")

APP_DESCRIPTION = (
    "Equinox and solstice times for 1900-2100 from mean-event polynomials"
)

REFERENCE_YEARS: List[int] = []


@asynccontextmanager
async def lifespan(app: FastAPI):
    global REFERENCE_YEARS
    # The table only backs diagnostics; the computing endpoints run without it.
    try:
        references = load_reference_events()
    except ReferenceTableError as exc:
        LOGGER.error(json.dumps({"event": "reference_load_failed", "error": str(exc)}))
        REFERENCE_YEARS = []
    else:
        years = [event.year for event in references[SolarEventKind.march_equinox]]
        REFERENCE_YEARS = [years[0], years[-1]]
    LOGGER.info(json.dumps({"event": "startup", "reference_years": REFERENCE_YEARS}))
    yield


app = FastAPI(
    title="Seasons API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("SEASONS_CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _format_utc(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        ok=True,
        reference_loaded=bool(REFERENCE_YEARS),
        reference_years=REFERENCE_YEARS,
    )


@app.get(
    "/seasons",
    response_model=SeasonsResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def seasons_endpoint(params: Annotated[SeasonsQueryParams, Query()]) -> SeasonsResponse:
    start_time = time.perf_counter()
    try:
        events = AnnualSolarEvents.for_year(params.year)
    except (YearOutOfRangeError, ConversionError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    response = SeasonsResponse(
        year=params.year,
        events=[
            SolarEventPayload(
                kind=event.kind,
                label=event.kind.label,
                julian_day=event.julian_day,
                utc=_format_utc(event.date_time),
            )
            for event in events
        ],
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "seasons",
                "year": params.year,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/julian-day",
    response_model=JulianDayResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def julian_day_endpoint(
    params: Annotated[JulianDayQueryParams, Query()],
) -> JulianDayResponse:
    try:
        date_time = julian_day_to_datetime(params.jd)
    except ConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # Same day number the converter branches on.
    day_number = math.floor(round_five_decimals(params.jd) + 0.5)
    calendar = "julian" if day_number < GREGORIAN_REFORM_JDN else "gregorian"

    LOGGER.info(
        json.dumps({"event": "julian_day", "jd": params.jd, "calendar": calendar})
    )
    return JulianDayResponse(
        julian_day=params.jd,
        utc=_format_utc(date_time),
        calendar=calendar,
    )
