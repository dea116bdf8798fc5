# models.py
from typing import List, Optional

from pydantic import BaseModel, Field

from .flight_check.models import FlightRecord, FlightValidationOutcome, ValidationRequest
from .flight_check.utils import parse_validation_request


class FlightValidationPayload(BaseModel):
    # All optional so missing fields come back as our own 400, not a schema dump
    flight_number: Optional[str] = Field(None, description="Flight number, e.g. LA3359 or 'LATAM 3359'")
    date: Optional[str] = Field(None, description="YYYY-MM-DD")
    time: Optional[str] = Field(None, description="HH:MM, service time")
    booking_type: Optional[str] = Field(None, description="pickup | dropoff")
    airline: Optional[str] = None

    def to_request(self) -> ValidationRequest:
        return parse_validation_request(
            self.flight_number,
            self.date,
            self.time,
            self.booking_type,
            airline=self.airline,
        )


class FlightInfo(BaseModel):
    flight_number: str
    airline: str
    departure_time: str
    arrival_time: str
    departure_airport: str
    arrival_airport: str
    terminal: Optional[str] = None
    gate: Optional[str] = None
    status: str

    @classmethod
    def from_record(cls, record: FlightRecord) -> "FlightInfo":
        return cls(
            flight_number=record.flight_number,
            airline=record.airline,
            departure_time=record.departure_time.isoformat(),
            arrival_time=record.arrival_time.isoformat(),
            departure_airport=record.departure_airport,
            arrival_airport=record.arrival_airport,
            terminal=record.terminal,
            gate=record.gate,
            status=record.status.value,
        )


class ValidationResultBody(BaseModel):
    is_valid: bool
    reason: Optional[str] = None
    suggested_time: Optional[str] = None
    suggested_date: Optional[str] = None
    flight_info: Optional[FlightInfo] = None


class FlightValidationResponse(BaseModel):
    success: bool = True
    flight_found: bool
    validation_result: ValidationResultBody

    @classmethod
    def from_outcome(cls, outcome: FlightValidationOutcome) -> "FlightValidationResponse":
        result = outcome.validation_result
        return cls(
            flight_found=outcome.flight_found,
            validation_result=ValidationResultBody(
                is_valid=result.is_valid,
                reason=result.reason,
                suggested_time=result.suggested_time,
                suggested_date=result.suggested_date,
                flight_info=FlightInfo.from_record(result.flight_info) if result.flight_info else None,
            ),
        )


class FlightData(FlightInfo):
    suggested_boarding_time: str


class FlightDataResponse(BaseModel):
    success: bool
    data: Optional[FlightData] = None
    error: Optional[str] = None


class FlightDataPayload(BaseModel):
    # POST form of /flight-data; same fields as the query string
    flight_number: Optional[str] = None
    airport: Optional[str] = None
    type: Optional[str] = Field(None, description="departure | arrival (airport boards only)")
    date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to today")


class AirportScheduleResponse(BaseModel):
    success: bool = True
    airport: str
    type: str
    data: List[FlightInfo]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
