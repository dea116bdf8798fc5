from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from ..errors import ConfigurationError

load_dotenv()

# Provider endpoint, relative to FLIGHT_PROVIDER_BASE_URL
FLIGHTS_ENDPOINT = "flights"

# Outbound call timeout; the booking form is waiting on this.
# FLIGHT_PROVIDER_TIMEOUT_S overrides the total, read in load_provider_settings()
DEFAULT_PROVIDER_TIMEOUT_S: float = 8.0
MAX_CONNECT_TIMEOUT_S: float = 3.0

# Timezone the customer's requested date/time is expressed in
SERVICE_TIMEZONE: str = os.getenv("SERVICE_TIMEZONE", "UTC")

# Lead-time policy (fixed)
DROPOFF_LEAD = timedelta(minutes=90)
DROPOFF_EARLY_TOLERANCE = timedelta(hours=6)
PICKUP_BUFFER = timedelta(minutes=30)

# Suggested boarding time shown by the flight-data lookup
BOARDING_LEAD = timedelta(minutes=90)

# Fallback record used when the provider has nothing for us
FALLBACK_AIRLINE = "Unknown Airline"
FALLBACK_FLIGHT_NUMBER = "UNK0000"
FALLBACK_AIRPORT = "Unknown Airport"
FALLBACK_DEPARTURE_TIME = time(12, 0)
FALLBACK_DURATION = timedelta(hours=2)


def get_service_timezone(name: Optional[str] = None) -> tzinfo:
    """Resolve SERVICE_TIMEZONE; an unknown zone name is a configuration error."""
    name = (name or SERVICE_TIMEZONE).strip()
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown SERVICE_TIMEZONE {name!r}") from e


@dataclass(frozen=True)
class ProviderSettings:
    access_key: str
    base_url: str
    timeout_s: float = DEFAULT_PROVIDER_TIMEOUT_S
    connect_timeout_s: float = MAX_CONNECT_TIMEOUT_S

    def __repr__(self) -> str:
        # never print the key
        return (
            f"ProviderSettings(base_url={self.base_url!r}, "
            f"timeout_s={self.timeout_s}, access_key=<{len(self.access_key)} chars>)"
        )


def load_provider_settings() -> ProviderSettings:
    """
    Read provider credentials from the environment.

    Raises ConfigurationError when the access key or base URL is missing, or
    when FLIGHT_PROVIDER_TIMEOUT_S is not a positive number.
    """
    access_key = (os.getenv("FLIGHT_PROVIDER_ACCESS_KEY") or "").strip()
    base_url = (os.getenv("FLIGHT_PROVIDER_BASE_URL") or "").strip()

    missing = [
        name
        for name, value in (
            ("FLIGHT_PROVIDER_ACCESS_KEY", access_key),
            ("FLIGHT_PROVIDER_BASE_URL", base_url),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

    timeout_s = _parse_timeout(os.getenv("FLIGHT_PROVIDER_TIMEOUT_S"))
    return ProviderSettings(
        access_key=access_key,
        base_url=base_url.rstrip("/"),
        timeout_s=timeout_s,
        connect_timeout_s=min(MAX_CONNECT_TIMEOUT_S, timeout_s),
    )


def _parse_timeout(raw: Optional[str]) -> float:
    value = (raw or "").strip()
    if not value:
        return DEFAULT_PROVIDER_TIMEOUT_S
    try:
        timeout_s = float(value)
    except ValueError:
        raise ConfigurationError(f"FLIGHT_PROVIDER_TIMEOUT_S must be a number, got {raw!r}") from None
    if not timeout_s > 0:
        raise ConfigurationError(f"FLIGHT_PROVIDER_TIMEOUT_S must be positive, got {raw!r}")
    return timeout_s
