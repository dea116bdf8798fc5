from __future__ import annotations

import re as _re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Optional, Pattern, Tuple

from pydantic import ValidationError

from ..airlines import airline_name, normalize_flight_number
from ..errors import ProviderError, ValidationInputError
from .config import FALLBACK_AIRLINE, FALLBACK_AIRPORT
from .models import (
    BookingType,
    FlightRecord,
    FlightStatus,
    RecordSource,
    ScheduleType,
    ValidationRequest,
)

# Regex helpers

_IDENT_SPLIT_RE: Pattern[str] = _re.compile(
    r"^([A-Z]{3}|[A-Z][A-Z0-9]|[0-9][A-Z])?(\d{1,5})([A-Z]?)$"
)
_AIRPORT_CODE_RE: Pattern[str] = _re.compile(r"^[A-Z]{3}$")
_REQUEST_TIME_RE: Pattern[str] = _re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")
_BOARD_TIME_RE: Pattern[str] = _re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

_BOARD_DATE_FORMATS = ("%d %b %Y", "%d %B %Y", "%Y-%m-%d")

_STATUS_ALIASES: Dict[str, FlightStatus] = {
    "scheduled": FlightStatus.SCHEDULED,
    "delayed": FlightStatus.SCHEDULED,
    "active": FlightStatus.ACTIVE,
    "en-route": FlightStatus.ACTIVE,
    "en route": FlightStatus.ACTIVE,
    "departed": FlightStatus.ACTIVE,
    "landed": FlightStatus.LANDED,
    "arrived": FlightStatus.LANDED,
    "cancelled": FlightStatus.CANCELLED,
    "canceled": FlightStatus.CANCELLED,
}


def split_ident(ident: str) -> Tuple[Optional[str], str, Optional[str]]:
    """
    Returns: (airline_prefix, numeric_part, suffix)
    LA3359 -> ("LA", "3359", None)
    TAM3359A -> ("TAM", "3359", "A")
    3359 -> (None, "3359", None)
    """
    m = _IDENT_SPLIT_RE.match(ident.strip().upper())
    if not m:
        return None, ident.strip().upper(), None
    return (m.group(1), m.group(2), m.group(3) or None)


# ─────────────────────────────────────────────────────────────────────────────
# REQUEST PARSING
# ─────────────────────────────────────────────────────────────────────────────


def parse_request_date(raw: Optional[str]) -> date:
    value = (raw or "").strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationInputError(f"Invalid date {raw!r}, expected YYYY-MM-DD") from None


def parse_request_time(raw: Optional[str]) -> time:
    m = _REQUEST_TIME_RE.match((raw or "").strip())
    if not m:
        raise ValidationInputError(f"Invalid time {raw!r}, expected HH:MM")
    return time(int(m.group(1)), int(m.group(2)), int(m.group(3) or 0))


def parse_booking_type(raw: Optional[str]) -> BookingType:
    try:
        return BookingType((raw or "").strip().lower())
    except ValueError:
        raise ValidationInputError(
            f"Invalid booking_type {raw!r}, expected 'pickup' or 'dropoff'"
        ) from None


def parse_airport_code(raw: Optional[str]) -> str:
    code = (raw or "").strip().upper()
    if not _AIRPORT_CODE_RE.match(code):
        raise ValidationInputError(f"Invalid airport {raw!r}, expected a 3-letter IATA code")
    return code


def parse_schedule_type(raw: Optional[str]) -> ScheduleType:
    value = (raw or "").strip().lower()
    if not value:
        return ScheduleType.DEPARTURE
    try:
        return ScheduleType(value)
    except ValueError:
        raise ValidationInputError(
            f"Invalid type {raw!r}, expected 'departure' or 'arrival'"
        ) from None


def parse_validation_request(
    flight_number: Optional[str],
    date_str: Optional[str],
    time_str: Optional[str],
    booking_type: Optional[str],
    airline: Optional[str] = None,
) -> ValidationRequest:
    """Build a ValidationRequest from raw form fields or raise ValidationInputError."""
    missing = [
        name
        for name, value in (
            ("flight_number", flight_number),
            ("date", date_str),
            ("time", time_str),
            ("booking_type", booking_type),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise ValidationInputError(f"Missing required fields: {', '.join(missing)}")

    return ValidationRequest(
        flight_number=normalize_flight_number(flight_number),
        date=parse_request_date(date_str),
        time=parse_request_time(time_str),
        booking_type=parse_booking_type(booking_type),
        airline=(airline or "").strip() or None,
    )


# ─────────────────────────────────────────────────────────────────────────────
# PROVIDER PAYLOAD NORMALIZATION
# ─────────────────────────────────────────────────────────────────────────────


def parse_iso_instant(value: Any) -> datetime:
    """
    Parse a provider timestamp into an aware datetime.
    Offsets are kept as given; naive timestamps are read as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a timestamp: {value!r}")
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_flight_status(raw: Any) -> FlightStatus:
    if not isinstance(raw, str) or not raw.strip():
        return FlightStatus.UNKNOWN
    status = raw.strip().lower()
    if status in _STATUS_ALIASES:
        return _STATUS_ALIASES[status]
    # board feeds send things like "Landed 14:05" or "Delayed to 16:20"
    for key, mapped in _STATUS_ALIASES.items():
        if status.startswith(key):
            return mapped
    return FlightStatus.UNKNOWN


def _parse_board_date(raw: Any) -> date:
    if not isinstance(raw, str):
        raise ValueError(f"not a date: {raw!r}")
    for fmt in _BOARD_DATE_FORMATS:
        try:
            return datetime.strptime(raw.strip(), fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date: {raw!r}")


def _board_time(raw: Any) -> time:
    m = _BOARD_TIME_RE.match(raw.strip()) if isinstance(raw, str) else None
    if not m:
        raise ValueError(f"unrecognized time: {raw!r}")
    return time(int(m.group(1)), int(m.group(2)))


def _is_board_format(item: Dict[str, Any]) -> bool:
    return all(k in item for k in ("DATE", "FROM", "TO"))


def _normalize_board(item: Dict[str, Any], ident: str) -> FlightRecord:
    """Flat board rows: DATE / FROM / TO / STD / STA / STATUS, times in UTC."""
    day = _parse_board_date(item.get("DATE"))
    departure = datetime.combine(day, _board_time(item.get("STD")), tzinfo=timezone.utc)
    arrival = datetime.combine(day, _board_time(item.get("STA")), tzinfo=timezone.utc)
    if arrival <= departure:
        arrival += timedelta(days=1)

    prefix, _number, _sfx = split_ident(ident)
    return FlightRecord(
        flight_number=ident,
        airline=airline_name(prefix) or FALLBACK_AIRLINE,
        departure_time=departure,
        arrival_time=arrival,
        departure_airport=str(item.get("FROM") or FALLBACK_AIRPORT),
        arrival_airport=str(item.get("TO") or FALLBACK_AIRPORT),
        status=parse_flight_status(item.get("STATUS")),
        source=RecordSource.PROVIDER,
    )


def _airport_label(leg: Dict[str, Any]) -> str:
    return str(leg.get("airport") or leg.get("iata") or leg.get("icao") or FALLBACK_AIRPORT)


def _normalize_nested(item: Dict[str, Any], ident: str) -> FlightRecord:
    dep = item.get("departure")
    arr = item.get("arrival")
    if not isinstance(dep, dict) or not isinstance(arr, dict):
        raise ValueError("departure/arrival objects missing")

    flight = item.get("flight") if isinstance(item.get("flight"), dict) else {}
    airline = item.get("airline") if isinstance(item.get("airline"), dict) else {}

    flight_number = str(flight.get("iata") or ident).upper()
    prefix, _number, _sfx = split_ident(flight_number)

    return FlightRecord(
        flight_number=flight_number,
        airline=str(airline.get("name") or airline_name(airline.get("iata") or prefix) or FALLBACK_AIRLINE),
        departure_time=parse_iso_instant(dep.get("scheduled")),
        arrival_time=parse_iso_instant(arr.get("scheduled")),
        departure_airport=_airport_label(dep),
        arrival_airport=_airport_label(arr),
        terminal=dep.get("terminal"),
        gate=dep.get("gate"),
        status=parse_flight_status(item.get("flight_status")),
        source=RecordSource.PROVIDER,
    )


def payload_ident(item: Any) -> Optional[str]:
    """Flight ident carried by a board entry itself, if any."""
    if not isinstance(item, dict):
        return None
    flight = item.get("flight") if isinstance(item.get("flight"), dict) else {}
    for raw in (flight.get("iata"), item.get("flight_iata"), item.get("FLIGHT")):
        if isinstance(raw, str) and raw.strip():
            return raw.strip().upper().replace(" ", "")
    return None


def normalize_flight_payload(item: Any, ident: str) -> FlightRecord:
    """
    Normalize one provider flight object into a FlightRecord.

    Accepts the nested shape ({departure: {...}, arrival: {...}, airline, flight})
    and the flat board shape (DATE/FROM/TO/STD/STA). Anything else, or a record
    that departs after it arrives, raises ProviderError.
    """
    if not isinstance(item, dict):
        raise ProviderError(f"flight entry is {type(item).__name__}, expected object")
    try:
        if _is_board_format(item):
            return _normalize_board(item, ident)
        return _normalize_nested(item, ident)
    except (ValueError, TypeError, ValidationError) as e:
        raise ProviderError(f"malformed flight entry: {e}") from e
