"""
Tests for flight-number normalization (airlines.py) and request parsing.
"""
from datetime import date, time

import pytest

from transfer_server.airlines import airline_name, normalize_flight_number
from transfer_server.errors import ValidationInputError
from transfer_server.flight_check import BookingType, ScheduleType, parse_validation_request
from transfer_server.flight_check.utils import parse_airport_code, parse_schedule_type


class TestNormalizeFlightNumber:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("LA3359", "LA3359"),
            ("la3359", "LA3359"),
            ("LATAM 3359", "LA3359"),
            ("gol 1900", "G31900"),
            ("g3-1900", "G31900"),
            ("American Airlines 100", "AA100"),
            ("KLM 1234", "KL1234"),
            ("BA 2490", "BA2490"),
            ("  TP 88  ", "TP88"),
            ("5J 123", "5J123"),
            ("Cebu Pacific 123", "5J123"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_flight_number(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", None, "hello", "12", "LATAM", "3359", "33 59", "123456"])
    def test_rejects(self, raw):
        with pytest.raises(ValidationInputError):
            normalize_flight_number(raw)


def test_airline_name_lookup():
    assert airline_name("la") == "LATAM Airlines"
    assert airline_name("ZZ") is None
    assert airline_name(None) is None


class TestParseValidationRequest:

    def test_valid_request(self):
        request = parse_validation_request("LATAM 3359", "2024-12-20", "9:05", "PICKUP", airline=" LATAM ")
        assert request.flight_number == "LA3359"
        assert request.date == date(2024, 12, 20)
        assert request.time == time(9, 5)
        assert request.booking_type == BookingType.PICKUP
        assert request.airline == "LATAM"

    def test_seconds_are_accepted(self):
        request = parse_validation_request("LA3359", "2024-12-20", "14:00:30", "dropoff")
        assert request.time == time(14, 0, 30)

    def test_missing_fields_are_listed(self):
        with pytest.raises(ValidationInputError) as exc:
            parse_validation_request("LA3359", "", None, "dropoff")
        assert "date" in str(exc.value)
        assert "time" in str(exc.value)
        assert "flight_number" not in str(exc.value)

    @pytest.mark.parametrize("bad_date", ["20-12-2024", "2024-02-30", "tomorrow"])
    def test_bad_date(self, bad_date):
        with pytest.raises(ValidationInputError):
            parse_validation_request("LA3359", bad_date, "12:00", "dropoff")

    @pytest.mark.parametrize("bad_time", ["25:00", "12:60", "noon", "1200"])
    def test_bad_time(self, bad_time):
        with pytest.raises(ValidationInputError):
            parse_validation_request("LA3359", "2024-12-20", bad_time, "dropoff")

    def test_bad_booking_type(self):
        with pytest.raises(ValidationInputError):
            parse_validation_request("LA3359", "2024-12-20", "12:00", "taxi")


class TestAirportParams:

    def test_airport_code_is_uppercased(self):
        assert parse_airport_code(" gru ") == "GRU"

    @pytest.mark.parametrize("raw", [None, "", "GR", "GRUX", "G1U"])
    def test_bad_airport_code(self, raw):
        with pytest.raises(ValidationInputError):
            parse_airport_code(raw)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, ScheduleType.DEPARTURE),
            ("", ScheduleType.DEPARTURE),
            ("Arrival", ScheduleType.ARRIVAL),
            ("departure", ScheduleType.DEPARTURE),
        ],
    )
    def test_schedule_type(self, raw, expected):
        assert parse_schedule_type(raw) == expected

    def test_bad_schedule_type(self):
        with pytest.raises(ValidationInputError):
            parse_schedule_type("both")
