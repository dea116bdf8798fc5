"""
Tests for transfer_server/flight_check/fetcher.py
"""
import asyncio
from datetime import date, datetime, timezone

import pytest

from transfer_server.errors import ProviderError
from transfer_server.flight_check import FlightDataFetcher, FlightStatus, RecordSource, ScheduleType


FLIGHT_DAY = date(2024, 12, 20)


class FakeClient:
    """Mimics FlightLabsClient's async context + search()."""

    def __init__(self, result=None, error=None, delay=0.0, board=None):
        self.result = result
        self.board = board or []
        self.error = error
        self.delay = delay
        self.calls = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def search(self, flight_iata, flight_date):
        self.calls.append((flight_iata, flight_date))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result

    async def airport_schedules(self, airport_iata, schedule_type):
        self.calls.append((airport_iata, schedule_type))
        if self.error:
            raise self.error
        return self.board


def _fetcher(provider_settings, client):
    return FlightDataFetcher(provider_settings, client_factory=lambda settings: client)


class TestFetchSuccess:

    def test_first_match_is_normalized(self, provider_settings, nested_flight_payload):
        second = dict(nested_flight_payload, flight={"iata": "LA9999"})
        client = FakeClient(result=[nested_flight_payload, second])

        record = asyncio.run(_fetcher(provider_settings, client).fetch("LA3359", FLIGHT_DAY))

        assert record.flight_number == "LA3359"
        assert record.source == RecordSource.PROVIDER
        assert client.calls == [("LA3359", FLIGHT_DAY)]
        assert client.closed is True

    def test_lookup_returns_record(self, provider_settings, nested_flight_payload):
        client = FakeClient(result=[nested_flight_payload])
        record = asyncio.run(_fetcher(provider_settings, client).lookup("LA3359", FLIGHT_DAY))
        assert record is not None
        assert record.departure_time == datetime(2024, 12, 20, 14, 0, tzinfo=timezone.utc)


class TestFetchFallback:

    @pytest.mark.parametrize(
        "error",
        [
            ProviderError("GET /flights returned 500", status=500),
            ProviderError("GET /flights timed out after 8s", status=504),
            ProviderError("no flights for LA3359 on 2024-12-20"),
        ],
    )
    def test_provider_error_yields_fallback(self, provider_settings, error):
        client = FakeClient(error=error)
        record = asyncio.run(_fetcher(provider_settings, client).fetch("LA3359", FLIGHT_DAY))

        assert record.is_fallback is True
        assert record.flight_number == "UNK0000"
        assert record.airline == "Unknown Airline"
        assert record.status == FlightStatus.UNKNOWN
        assert record.departure_time == datetime(2024, 12, 20, 12, 0, tzinfo=timezone.utc)
        assert record.arrival_time == datetime(2024, 12, 20, 14, 0, tzinfo=timezone.utc)
        assert len(client.calls) == 1

    def test_malformed_first_entry_yields_fallback(self, provider_settings):
        client = FakeClient(result=[{"departure": "nope"}])
        record = asyncio.run(_fetcher(provider_settings, client).fetch("LA3359", FLIGHT_DAY))
        assert record.is_fallback is True

    def test_lookup_returns_none_on_provider_error(self, provider_settings):
        client = FakeClient(error=ProviderError("boom", status=502))
        assert asyncio.run(_fetcher(provider_settings, client).lookup("LA3359", FLIGHT_DAY)) is None

    def test_unexpected_errors_are_not_swallowed(self, provider_settings):
        client = FakeClient(error=RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            asyncio.run(_fetcher(provider_settings, client).fetch("LA3359", FLIGHT_DAY))


def test_cancellation_propagates(provider_settings):
    client = FakeClient(result=[], delay=5.0)
    fetcher = _fetcher(provider_settings, client)

    async def scenario():
        task = asyncio.ensure_future(fetcher.fetch("LA3359", FLIGHT_DAY))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert client.closed is True


class TestAirportSchedules:

    def test_entries_are_normalized_and_bad_ones_skipped(self, provider_settings, nested_flight_payload):
        board_row = {
            "DATE": "13 Sep 2025",
            "FROM": "Nador (NDR)",
            "TO": "Barcelona (BCN)",
            "STD": "10:15",
            "STA": "12:05",
            "FLIGHT": "FR 1234",
        }
        no_ident = dict(nested_flight_payload)
        del no_ident["flight"]
        broken = dict(nested_flight_payload, flight={"iata": "LA1"}, departure={"airport": "GRU"})
        client = FakeClient(board=[nested_flight_payload, board_row, no_ident, broken])

        records = asyncio.run(
            _fetcher(provider_settings, client).airport_schedules("GRU", ScheduleType.DEPARTURE)
        )

        assert [r.flight_number for r in records] == ["LA3359", "FR1234"]
        assert records[1].airline == "Ryanair"
        assert client.calls == [("GRU", ScheduleType.DEPARTURE)]

    def test_provider_error_propagates(self, provider_settings):
        client = FakeClient(error=ProviderError("GET /flights returned 503", status=503))
        with pytest.raises(ProviderError):
            asyncio.run(_fetcher(provider_settings, client).airport_schedules("GRU", ScheduleType.ARRIVAL))
