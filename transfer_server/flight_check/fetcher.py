from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..errors import ProviderError
from ..logging_utils import log_event
from .config import (
    FALLBACK_AIRLINE,
    FALLBACK_AIRPORT,
    FALLBACK_DEPARTURE_TIME,
    FALLBACK_DURATION,
    FALLBACK_FLIGHT_NUMBER,
    ProviderSettings,
)
from .flightlabs_client import FlightLabsClient
from .models import FlightRecord, FlightStatus, RecordSource, ScheduleType
from .utils import normalize_flight_payload, payload_ident

logger = logging.getLogger("transfer.fetcher")


def fallback_record(flight_date: date) -> FlightRecord:
    """Synthetic record used when the provider has no usable data."""
    departure = datetime.combine(flight_date, FALLBACK_DEPARTURE_TIME, tzinfo=timezone.utc)
    return FlightRecord(
        flight_number=FALLBACK_FLIGHT_NUMBER,
        airline=FALLBACK_AIRLINE,
        departure_time=departure,
        arrival_time=departure + FALLBACK_DURATION,
        departure_airport=FALLBACK_AIRPORT,
        arrival_airport=FALLBACK_AIRPORT,
        status=FlightStatus.UNKNOWN,
        source=RecordSource.FALLBACK,
    )


class FlightDataFetcher:
    """
    Resolves (flight ident, date) into a FlightRecord.

    One provider call per fetch, no retry. Provider trouble of any kind is
    logged and replaced by the fallback record so the booking flow never
    blocks on an outage.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        client_factory: Callable[[ProviderSettings], FlightLabsClient] = FlightLabsClient,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory

    async def _search(self, flight_number: str, flight_date: date) -> List[Dict[str, Any]]:
        async with self._client_factory(self._settings) as client:
            return await client.search(flight_number, flight_date)

    async def lookup(self, flight_number: str, flight_date: date) -> Optional[FlightRecord]:
        """Provider record for the flight, or None when it cannot be resolved."""
        try:
            flights = await self._search(flight_number, flight_date)
            record = normalize_flight_payload(flights[0], flight_number)
        except ProviderError as e:
            log_event(
                logger,
                "flight_lookup_failed",
                level=logging.WARNING,
                flight_number=flight_number,
                flight_date=flight_date.isoformat(),
                provider_status=e.status,
                error=str(e),
            )
            return None

        log_event(
            logger,
            "flight_lookup_resolved",
            flight_number=record.flight_number,
            flight_date=flight_date.isoformat(),
            status=record.status.value,
            departure_time=record.departure_time.isoformat(),
            arrival_time=record.arrival_time.isoformat(),
        )
        return record

    async def fetch(self, flight_number: str, flight_date: date) -> FlightRecord:
        record = await self.lookup(flight_number, flight_date)
        if record is not None:
            return record

        log_event(
            logger,
            "flight_fallback_used",
            level=logging.WARNING,
            flight_number=flight_number,
            flight_date=flight_date.isoformat(),
        )
        return fallback_record(flight_date)

    async def airport_schedules(
        self, airport_iata: str, schedule_type: ScheduleType = ScheduleType.DEPARTURE
    ) -> List[FlightRecord]:
        """
        Departure or arrival board of one airport.

        There is no fallback board: ProviderError reaches the caller. Entries
        without an ident or that fail normalization are skipped.
        """
        async with self._client_factory(self._settings) as client:
            items = await client.airport_schedules(airport_iata, schedule_type)

        records: List[FlightRecord] = []
        skipped = 0
        for item in items:
            ident = payload_ident(item)
            if ident is None:
                skipped += 1
                continue
            try:
                records.append(normalize_flight_payload(item, ident))
            except ProviderError:
                skipped += 1

        log_event(
            logger,
            "airport_schedule_resolved",
            airport_iata=airport_iata,
            schedule_type=schedule_type.value,
            count=len(records),
            skipped=skipped,
        )
        return records
