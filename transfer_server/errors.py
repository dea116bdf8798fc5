# errors.py
"""
Error taxonomy for the transfer booking service.

- ConfigurationError: required credential/config missing (-> 500, not retried)
- ProviderError: flight-data provider unusable; the fetcher swaps in the
  fallback record so it never reaches the caller
- ValidationInputError: malformed request fields (-> 400)
"""


class TransferServiceError(Exception):
    """Base class for service errors."""


class ConfigurationError(TransferServiceError):
    """Required configuration is missing or invalid."""


class ProviderError(TransferServiceError):
    """The flight-data provider failed or returned nothing usable."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class ValidationInputError(TransferServiceError):
    """The caller sent a malformed flight number, date, time or booking type."""
