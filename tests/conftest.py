"""
Shared pytest fixtures for the transfer booking flight-check test suite.
"""
import asyncio
import os
import sys
from datetime import date, datetime, time, timezone

import pytest

# Ensure the project root is on sys.path so we can import transfer_server.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from transfer_server.flight_check import (
    BookingType,
    FlightRecord,
    FlightStatus,
    ProviderSettings,
    RecordSource,
    ValidationRequest,
    fallback_record,
)


FLIGHT_DAY = date(2024, 12, 20)


class StubFetcher:
    """Stands in for FlightDataFetcher; returns a canned record (None -> fallback)."""

    def __init__(self, record=None, delays=None, schedule=None, schedule_error=None):
        self.record = record
        self.delays = list(delays or [])
        self.schedule = list(schedule or [])
        self.schedule_error = schedule_error
        self.calls = []
        self.schedule_calls = []

    async def airport_schedules(self, airport_iata, schedule_type):
        self.schedule_calls.append((airport_iata, schedule_type))
        if self.schedule_error:
            raise self.schedule_error
        return self.schedule

    async def lookup(self, flight_number, flight_date):
        self.calls.append((flight_number, flight_date))
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        return self.record

    async def fetch(self, flight_number, flight_date):
        record = await self.lookup(flight_number, flight_date)
        return record if record is not None else fallback_record(flight_date)


@pytest.fixture
def provider_settings():
    return ProviderSettings(
        access_key="test-key",
        base_url="http://provider.invalid",
        timeout_s=2.0,
        connect_timeout_s=1.0,
    )


@pytest.fixture
def make_record():
    """Factory for provider-sourced FlightRecords (defaults: 14:00Z -> 15:00Z)."""

    def _make(
        departure=datetime(2024, 12, 20, 14, 0, tzinfo=timezone.utc),
        arrival=datetime(2024, 12, 20, 15, 0, tzinfo=timezone.utc),
        **overrides,
    ):
        fields = dict(
            flight_number="LA3359",
            airline="LATAM Airlines",
            departure_time=departure,
            arrival_time=arrival,
            departure_airport="Sao Paulo Guarulhos",
            arrival_airport="Rio de Janeiro Galeao",
            terminal="2",
            gate="B12",
            status=FlightStatus.SCHEDULED,
            source=RecordSource.PROVIDER,
        )
        fields.update(overrides)
        return FlightRecord(**fields)

    return _make


@pytest.fixture
def make_request():
    def _make(hh, mm, booking_type=BookingType.DROPOFF, day=FLIGHT_DAY, flight_number="LA3359"):
        return ValidationRequest(
            flight_number=flight_number,
            date=day,
            time=time(hh, mm),
            booking_type=booking_type,
        )

    return _make


@pytest.fixture
def stub_fetcher_cls():
    return StubFetcher


@pytest.fixture
def nested_flight_payload():
    """One flight object in the provider's nested shape."""
    return {
        "flight_date": "2024-12-20",
        "flight_status": "scheduled",
        "departure": {
            "airport": "Sao Paulo Guarulhos",
            "iata": "GRU",
            "terminal": "2",
            "gate": "B12",
            "scheduled": "2024-12-20T14:00:00+00:00",
        },
        "arrival": {
            "airport": "Rio de Janeiro Galeao",
            "iata": "GIG",
            "terminal": "",
            "gate": None,
            "scheduled": "2024-12-20T15:00:00+00:00",
        },
        "airline": {"name": "LATAM Airlines", "iata": "LA"},
        "flight": {"number": "3359", "iata": "LA3359"},
    }
