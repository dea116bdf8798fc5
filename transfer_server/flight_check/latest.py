from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Optional

from ..logging_utils import log_event
from .fetcher import FlightDataFetcher
from .models import FlightValidationOutcome, ValidationRequest
from .validator import validate_flight_booking

logger = logging.getLogger("transfer.latest")


class LatestValidationRunner:
    """
    Last-write-wins wrapper around validate_flight_booking.

    A form that re-validates on every edit submits each new request here.
    Submitting cancels whatever run is still in flight (including its provider
    call), so a stale answer can never land after a newer one. A superseded
    submit returns None.
    """

    def __init__(
        self,
        fetcher: FlightDataFetcher,
        *,
        debounce_s: float = 0.0,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._fetcher = fetcher
        self._debounce_s = debounce_s
        self._tz = tz
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self, request: ValidationRequest) -> FlightValidationOutcome:
        if self._debounce_s > 0:
            await asyncio.sleep(self._debounce_s)
        return await validate_flight_booking(request, self._fetcher, self._tz)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            log_event(logger, "validation_run_cancelled")
        self._task = None

    async def submit(self, request: ValidationRequest) -> Optional[FlightValidationOutcome]:
        self.cancel()
        task = asyncio.ensure_future(self._run(request))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._task is not task:
                # superseded by a newer submit (or cancel())
                return None
            raise
        finally:
            if self._task is task:
                self._task = None
