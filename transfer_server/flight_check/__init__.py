"""
flight_check package

Public API:
    - validate_flight_booking(request, fetcher, tz=None) -> FlightValidationOutcome
    - validate_booking_time(request, flight, tz=None) -> ValidationResult
    - FlightDataFetcher (fetch, lookup, airport_schedules)
    - FlightLabsClient
    - LatestValidationRunner
    - parse_validation_request(...)
"""

from .config import ProviderSettings, get_service_timezone, load_provider_settings
from .fetcher import FlightDataFetcher, fallback_record
from .flightlabs_client import FlightLabsClient
from .latest import LatestValidationRunner
from .models import (
    BookingType,
    FlightRecord,
    FlightStatus,
    FlightValidationOutcome,
    RecordSource,
    ScheduleType,
    ValidationRequest,
    ValidationResult,
)
from .utils import normalize_flight_payload, parse_validation_request
from .validator import boarding_time, validate_booking_time, validate_flight_booking

__all__ = [
    "validate_flight_booking",
    "validate_booking_time",
    "boarding_time",
    "FlightDataFetcher",
    "fallback_record",
    "FlightLabsClient",
    "LatestValidationRunner",
    "ProviderSettings",
    "load_provider_settings",
    "get_service_timezone",
    "normalize_flight_payload",
    "parse_validation_request",
    "BookingType",
    "FlightRecord",
    "FlightStatus",
    "FlightValidationOutcome",
    "RecordSource",
    "ScheduleType",
    "ValidationRequest",
    "ValidationResult",
]
