from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional, Tuple

from ..logging_utils import log_event
from .config import (
    BOARDING_LEAD,
    DROPOFF_EARLY_TOLERANCE,
    DROPOFF_LEAD,
    PICKUP_BUFFER,
    get_service_timezone,
)
from .fetcher import FlightDataFetcher
from .models import (
    BookingType,
    FlightRecord,
    FlightValidationOutcome,
    ValidationRequest,
    ValidationResult,
)

logger = logging.getLogger("transfer.validator")

REASON_TOO_EARLY = "too early"
REASON_TOO_LATE = "too late"
REASON_TOO_EARLY_FOR_ARRIVAL = "too early relative to arrival"
REASON_UNVERIFIED = "flight not found; result based on unverified schedule data"


def _render(instant: datetime, tz: tzinfo) -> Tuple[str, str]:
    local = instant.astimezone(tz)
    return local.strftime("%H:%M"), local.date().isoformat()


def boarding_time(flight: FlightRecord) -> datetime:
    return flight.departure_time - BOARDING_LEAD


def validate_booking_time(
    request: ValidationRequest,
    flight: FlightRecord,
    tz: Optional[tzinfo] = None,
) -> ValidationResult:
    """
    Apply the lead-time policy to one booking.

    dropoff: service must be at most departure - 1h30 and no more than 6h
             before that; suggestion is departure - 1h30.
    pickup:  service must be at least arrival + 30min; suggestion is
             arrival + 30min.

    Suggestions are rendered in ``tz`` and carry the flight's own date.
    A fallback flight goes through the same arithmetic, and the reason says so.
    """
    tz = tz or get_service_timezone()
    requested = request.service_datetime(tz)
    reason: Optional[str] = None

    if request.booking_type == BookingType.DROPOFF:
        latest = flight.departure_time - DROPOFF_LEAD
        if requested > latest:
            reason = REASON_TOO_LATE
        elif requested < latest - DROPOFF_EARLY_TOLERANCE:
            reason = REASON_TOO_EARLY
        suggestion = latest
    else:
        earliest = flight.arrival_time + PICKUP_BUFFER
        if requested < earliest:
            reason = REASON_TOO_EARLY_FOR_ARRIVAL
        suggestion = earliest

    is_valid = reason is None
    suggested_time = suggested_date = None
    if not is_valid:
        suggested_time, suggested_date = _render(suggestion, tz)

    if flight.is_fallback:
        reason = f"{reason}; {REASON_UNVERIFIED}" if reason else REASON_UNVERIFIED

    log_event(
        logger,
        "booking_time_checked",
        booking_type=request.booking_type.value,
        requested=requested.isoformat(),
        departure_time=flight.departure_time.isoformat(),
        arrival_time=flight.arrival_time.isoformat(),
        is_valid=is_valid,
        reason=reason,
        fallback=flight.is_fallback,
    )

    return ValidationResult(
        is_valid=is_valid,
        reason=reason,
        suggested_time=suggested_time,
        suggested_date=suggested_date,
        flight_info=flight,
    )


# ─────────────────────────────────────────────────────────────────────────────
# PUBLIC ENTRYPOINT
# ─────────────────────────────────────────────────────────────────────────────


async def validate_flight_booking(
    request: ValidationRequest,
    fetcher: FlightDataFetcher,
    tz: Optional[tzinfo] = None,
) -> FlightValidationOutcome:
    log_event(
        logger,
        "validation_request_received",
        flight_number=request.flight_number,
        flight_date=request.date.isoformat(),
        booking_type=request.booking_type.value,
    )

    flight = await fetcher.fetch(request.flight_number, request.date)
    result = validate_booking_time(request, flight, tz)

    log_event(
        logger,
        "validation_request_completed",
        flight_number=request.flight_number,
        flight_found=not flight.is_fallback,
        is_valid=result.is_valid,
    )
    return FlightValidationOutcome(
        flight_found=not flight.is_fallback,
        validation_result=result,
    )
