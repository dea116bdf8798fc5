from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Any, Dict, List, Optional

import aiohttp

from ..errors import ProviderError
from ..logging_utils import log_event
from .config import FLIGHTS_ENDPOINT, ProviderSettings
from .models import ScheduleType

logger = logging.getLogger("transfer.flightlabs")


def _flight_list(body: Any) -> List[Dict[str, Any]]:
    """Flight objects in a provider envelope; empty when it reports no data."""
    if not isinstance(body, dict):
        raise ProviderError(f"unexpected envelope type {type(body).__name__}")

    if body.get("error"):
        raise ProviderError(f"provider error: {str(body['error'])[:200]}")

    data = body.get("data")
    if body.get("success") is False or isinstance(data, str):
        # e.g. {"success": false, "data": "No data found, check the flight number"}
        log_event(logger, "provider_no_data", detail=str(data)[:200])
        return []

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ProviderError("envelope has no 'data' array")

    return [item for item in data if isinstance(item, dict)]


class FlightLabsClient:
    """
    Flight-data provider client (read-only, single attempt).

    Endpoints used (all on the same resource):
      - GET {base}/flights?access_key=...&flight_iata={LA3359}&flight_date={YYYY-MM-DD}
      - GET {base}/flights?access_key=...&dep_iata={GRU}   (departure board)
      - GET {base}/flights?access_key=...&arr_iata={GRU}   (arrival board)

    Every failure (timeout, network, non-2xx, unparseable envelope) surfaces
    as ProviderError; callers decide what to do about it.
    """

    def __init__(self, settings: ProviderSettings) -> None:
        self._settings = settings
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "FlightLabsClient":
        timeout = aiohttp.ClientTimeout(
            total=self._settings.timeout_s,
            connect=self._settings.connect_timeout_s,
        )
        self._session = aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Shared GET with key injection. Returns the decoded JSON body."""
        if not self._session:
            raise ProviderError("client session not started")

        url = f"{self._settings.base_url}/{endpoint}"
        query = {"access_key": self._settings.access_key, **params}
        t0 = time.perf_counter()

        try:
            async with self._session.get(url, params=query) as r:
                status = r.status
                elapsed_ms = int((time.perf_counter() - t0) * 1000)
                log_event(
                    logger,
                    "provider_http_call",
                    endpoint=endpoint,
                    status_code=status,
                    duration_ms=elapsed_ms,
                    **params,
                )
                if not 200 <= status < 300:
                    # error bodies are only quoted, so undecodable bytes are replaced
                    text = await r.text(errors="replace")
                    raise ProviderError(
                        f"GET /{endpoint} returned {status}: {text[:200]}", status=status
                    )
                try:
                    return await r.json(content_type=None)
                except ValueError as e:
                    raise ProviderError(f"GET /{endpoint} returned invalid JSON: {e}", status=status) from e
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"GET /{endpoint} timed out after {self._settings.timeout_s}s", status=504
            ) from e
        except aiohttp.ClientError as e:
            raise ProviderError(f"GET /{endpoint} failed: {e}", status=502) from e

    async def search(self, flight_iata: str, flight_date: date) -> List[Dict[str, Any]]:
        """
        Returns the provider's flight objects for one ident/day.

        Raises ProviderError when the envelope reports an error or holds no flights.
        """
        params = {
            "flight_iata": flight_iata,
            "flight_date": flight_date.isoformat(),
        }
        flights = _flight_list(await self._get(FLIGHTS_ENDPOINT, params))
        if not flights:
            raise ProviderError(f"no flights for {flight_iata} on {flight_date.isoformat()}")

        log_event(
            logger,
            "provider_flights_found",
            flight_iata=flight_iata,
            flight_date=flight_date.isoformat(),
            count=len(flights),
        )
        return flights

    async def airport_schedules(
        self, airport_iata: str, schedule_type: ScheduleType = ScheduleType.DEPARTURE
    ) -> List[Dict[str, Any]]:
        """Departure or arrival board of one airport. An empty board is not an error."""
        key = "dep_iata" if schedule_type == ScheduleType.DEPARTURE else "arr_iata"
        flights = _flight_list(await self._get(FLIGHTS_ENDPOINT, {key: airport_iata}))

        log_event(
            logger,
            "provider_schedule_found",
            airport_iata=airport_iata,
            schedule_type=schedule_type.value,
            count=len(flights),
        )
        return flights
