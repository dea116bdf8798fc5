from __future__ import annotations

import logging
import time
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from .config import APP_TITLE, APP_VERSION, CORS_ALLOW_ORIGINS, HOST, PORT
from .errors import ConfigurationError, ProviderError, ValidationInputError
from .logging_utils import configure_logging, log_event, new_request_id
from .airlines import normalize_flight_number
from .flight_check import (
    FlightDataFetcher,
    boarding_time,
    get_service_timezone,
    load_provider_settings,
    validate_flight_booking,
)
from .flight_check.utils import parse_airport_code, parse_request_date, parse_schedule_type
from .models import (
    AirportScheduleResponse,
    ErrorResponse,
    FlightData,
    FlightDataPayload,
    FlightDataResponse,
    FlightInfo,
    FlightValidationPayload,
    FlightValidationResponse,
)

# ------------------------------------------------------------------------------
# APP + LOGGING SETUP
# ------------------------------------------------------------------------------

configure_logging()
logger = logging.getLogger("transfer.api")

app = FastAPI(title=APP_TITLE, version=APP_VERSION)

# Booking widget calls this cross-origin; preflights are answered here
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# DEPENDENCIES
# ------------------------------------------------------------------------------

def get_fetcher() -> FlightDataFetcher:
    return FlightDataFetcher(load_provider_settings())


def get_timezone() -> tzinfo:
    return get_service_timezone()


# ------------------------------------------------------------------------------
# REQUEST LOGGING MIDDLEWARE
# ------------------------------------------------------------------------------

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    rid = new_request_id()
    start = time.time()

    log_event(
        logger,
        "http_request_started",
        method=request.method,
        path=request.url.path,
        client_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        request_id=rid,
    )

    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration_ms = int((time.time() - start) * 1000)
        log_event(
            logger,
            "http_request_finished",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=rid,
        )


# ------------------------------------------------------------------------------
# ERROR HANDLERS
# ------------------------------------------------------------------------------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(ValidationInputError)
async def validation_input_error_handler(request: Request, exc: ValidationInputError) -> JSONResponse:
    log_event(logger, "request_rejected", level=logging.WARNING, path=request.url.path, error=str(exc))
    return _error(HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "Invalid request body: " + ("; ".join(problems) or "unreadable JSON")
    log_event(logger, "request_rejected", level=logging.WARNING, path=request.url.path, error=message)
    return _error(HTTP_400_BAD_REQUEST, message)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    log_event(logger, "configuration_error", level=logging.ERROR, path=request.url.path, error=str(exc))
    return _error(HTTP_500_INTERNAL_SERVER_ERROR, f"Server configuration error: {exc}")


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    # only reached by lookups without a fallback (airport boards)
    log_event(
        logger,
        "provider_unavailable",
        level=logging.WARNING,
        path=request.url.path,
        provider_status=exc.status,
        error=str(exc),
    )
    return _error(HTTP_502_BAD_GATEWAY, "Flight provider unavailable")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Request failed: {exc}", exc_info=True)
    return _error(HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ------------------------------------------------------------------------------
# ROUTES
# ------------------------------------------------------------------------------

@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@app.post(
    "/flight-validation",
    response_model=FlightValidationResponse,
    response_model_exclude_none=True,
)
async def flight_validation(
    payload: FlightValidationPayload,
    fetcher: FlightDataFetcher = Depends(get_fetcher),
    tz: tzinfo = Depends(get_timezone),
) -> FlightValidationResponse:
    """
    Check a pickup/drop-off time against the flight's schedule.

    Always answers with a verdict; flight_found=false means the verdict was
    computed against the fallback schedule.
    """
    request = payload.to_request()
    outcome = await validate_flight_booking(request, fetcher, tz)
    return FlightValidationResponse.from_outcome(outcome)


async def _flight_data(
    flight: Optional[str],
    airport: Optional[str],
    schedule_type: Optional[str],
    date_str: Optional[str],
    fetcher: FlightDataFetcher,
    tz: tzinfo,
):
    """
    One flight (no fallback; unknown flights answer success=false) or, when
    only an airport is given, that airport's departure/arrival board.
    """
    if (flight or "").strip():
        ident = normalize_flight_number(flight)
        flight_date = parse_request_date(date_str) if date_str else datetime.now(tz).date()

        record = await fetcher.lookup(ident, flight_date)
        if record is None:
            return JSONResponse(
                content={"success": False, "data": None, "error": "Flight not found"}
            )

        data = FlightData(
            **FlightInfo.from_record(record).model_dump(),
            suggested_boarding_time=boarding_time(record).isoformat(),
        )
        return FlightDataResponse(success=True, data=data)

    if (airport or "").strip():
        code = parse_airport_code(airport)
        kind = parse_schedule_type(schedule_type)
        records = await fetcher.airport_schedules(code, kind)
        return AirportScheduleResponse(
            airport=code,
            type=kind.value,
            data=[FlightInfo.from_record(r) for r in records],
        )

    raise ValidationInputError(
        "Invalid parameters. Use ?flight=CODE[&date=YYYY-MM-DD] or ?airport=IATA[&type=departure|arrival]"
    )


@app.get("/flight-data", response_model=None)
async def flight_data(
    flight: Optional[str] = Query(None, description="Flight number, e.g. LA3359"),
    airport: Optional[str] = Query(None, description="Airport IATA code, e.g. GRU"),
    type: Optional[str] = Query(None, description="departure | arrival, defaults to departure"),
    date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    fetcher: FlightDataFetcher = Depends(get_fetcher),
    tz: tzinfo = Depends(get_timezone),
):
    return await _flight_data(flight, airport, type, date, fetcher, tz)


@app.post("/flight-data", response_model=None)
async def flight_data_post(
    payload: FlightDataPayload,
    fetcher: FlightDataFetcher = Depends(get_fetcher),
    tz: tzinfo = Depends(get_timezone),
):
    return await _flight_data(
        payload.flight_number, payload.airport, payload.type, payload.date, fetcher, tz
    )


def main() -> None:
    import uvicorn

    logger.info(f"Starting {APP_TITLE} v{APP_VERSION} on {HOST}:{PORT}")
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
