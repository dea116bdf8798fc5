from __future__ import annotations

from datetime import date as Date, datetime, time as Time, timezone, tzinfo
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class FlightStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    LANDED = "landed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class BookingType(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"


class ScheduleType(str, Enum):
    DEPARTURE = "departure"
    ARRIVAL = "arrival"


class RecordSource(str, Enum):
    PROVIDER = "provider"
    FALLBACK = "fallback"


class FlightRecord(BaseModel):
    """Normalized flight snapshot; lives for one request."""

    model_config = ConfigDict(frozen=True)

    flight_number: str
    airline: str
    departure_time: datetime
    arrival_time: datetime
    departure_airport: str
    arrival_airport: str
    terminal: Optional[str] = None
    gate: Optional[str] = None
    status: FlightStatus = FlightStatus.UNKNOWN
    source: RecordSource = RecordSource.PROVIDER

    @field_validator("departure_time", "arrival_time")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @field_validator("terminal", "gate")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def _departs_before_arrival(self) -> "FlightRecord":
        if self.departure_time >= self.arrival_time:
            raise ValueError(
                f"departure {self.departure_time.isoformat()} is not before "
                f"arrival {self.arrival_time.isoformat()}"
            )
        return self

    @property
    def is_fallback(self) -> bool:
        return self.source == RecordSource.FALLBACK


class ValidationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    flight_number: str
    date: Date
    time: Time
    booking_type: BookingType
    airline: Optional[str] = None

    def service_datetime(self, tz: tzinfo) -> datetime:
        """Requested service instant, reading date/time as wall time in ``tz``."""
        return datetime.combine(self.date, self.time, tzinfo=tz)


class ValidationResult(BaseModel):
    is_valid: bool
    reason: Optional[str] = None
    suggested_time: Optional[str] = None
    suggested_date: Optional[str] = None
    flight_info: Optional[FlightRecord] = None


class FlightValidationOutcome(BaseModel):
    flight_found: bool
    validation_result: ValidationResult
