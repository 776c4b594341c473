"""
On-duty tracking for police and hospital responders.

While on duty the responder position is posted every ON_DUTY_INTERVAL
seconds, skipped when it moved less than ON_DUTY_MIN_DISTANCE metres since
the last posted one.
"""
from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Protocol

from .const import (
    ON_DUTY_GENERIC_ERROR,
    ON_DUTY_INTERVAL,
    ON_DUTY_MIN_DISTANCE,
    ON_DUTY_PERMISSION_REQUIRED,
)
from .coordinator_utils import describe_error, haversine_meters, sample_from_fix
from .location import LocationPermissionError, LocationProvider
from .models import Accuracy, PermissionStatus, PositionSample

_LOGGER = logging.getLogger(__name__)


class OnDutyApi(Protocol):
    async def update_on_duty_location(self, sample: PositionSample): ...

    async def toggle_on_duty(self, on_duty: bool, lat: float | None = None, lng: float | None = None): ...

    async def get_on_duty_status(self) -> bool: ...


class OnDutyTracker:
    """On-duty flag plus the periodic location loop that runs while it is set."""

    def __init__(
        self,
        api: OnDutyApi,
        location_provider: LocationProvider,
        interval: float = ON_DUTY_INTERVAL,
        min_distance_meters: float = ON_DUTY_MIN_DISTANCE,
    ) -> None:
        self.api = api
        self._provider = location_provider
        self._interval = interval
        self._min_distance_meters = min_distance_meters

        self.is_on_duty = False
        self.is_loading = False
        self.error: str | None = None
        self.last_location: tuple[float, float] | None = None
        self.last_update: datetime.datetime | None = None

        self._loop_task: asyncio.Task | None = None

    async def async_load_status(self) -> bool:
        """Read the on-duty flag from the backend and start/stop the loop to match."""
        try:
            on_duty = await self.api.get_on_duty_status()
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning("Failed to load on-duty status: %s", exc)
            return self.is_on_duty
        self._set_on_duty(on_duty)
        return self.is_on_duty

    async def toggle_on_duty(self) -> bool:
        """
        Flip the on-duty flag. Going on duty requires location permission and
        sends the current position with the toggle. Returns the resulting flag.
        """
        self.is_loading = True
        self.error = None
        try:
            new_status = not self.is_on_duty
            location: tuple[float, float] | None = None

            if new_status:
                status = await self._provider.request_foreground_permission()
                if status != PermissionStatus.GRANTED:
                    raise LocationPermissionError(ON_DUTY_PERMISSION_REQUIRED)
                fix = await self._provider.get_current_position(Accuracy.HIGH)
                location = (fix.latitude, fix.longitude)

            lat, lng = location if location is not None else (None, None)
            await self.api.toggle_on_duty(new_status, lat, lng)

            if location is not None:
                self._record_sent(location)
            self._set_on_duty(new_status)
            _LOGGER.info("Status changed to: %s", "ON DUTY" if new_status else "OFF DUTY")
            return new_status
        except Exception as exc:  # noqa: BLE001
            self.error = describe_error(exc, ON_DUTY_GENERIC_ERROR)
            _LOGGER.error("On-duty toggle failed: %s", self.error)
            return self.is_on_duty
        finally:
            self.is_loading = False

    async def update_location(self) -> bool:
        """Post the current position if on duty and moved enough. Returns True if posted."""
        if not self.is_on_duty:
            return False
        try:
            fix = await self._provider.get_current_position(Accuracy.HIGH)
            if self.last_location is not None:
                distance = haversine_meters(
                    self.last_location[0], self.last_location[1], fix.latitude, fix.longitude
                )
                if distance < self._min_distance_meters:
                    _LOGGER.debug(
                        "Skipping update - moved only %sm (min: %sm)",
                        round(distance), self._min_distance_meters,
                    )
                    return False

            sample = sample_from_fix(fix)
            await self.api.update_on_duty_location(sample)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Error updating on-duty location: %s", exc)
            return False

        self._record_sent((fix.latitude, fix.longitude))
        _LOGGER.debug("On-duty location updated: %.6f, %.6f", fix.latitude, fix.longitude)
        return True

    def _record_sent(self, location: tuple[float, float]) -> None:
        self.last_location = location
        self.last_update = datetime.datetime.now(datetime.timezone.utc)

    def _set_on_duty(self, on_duty: bool) -> None:
        self.is_on_duty = on_duty
        if on_duty:
            self._start_loop()
        else:
            self._stop_loop()

    def _start_loop(self) -> None:
        if self._loop_task is not None and not self._loop_task.done():
            return
        self._loop_task = asyncio.ensure_future(self._run_loop())
        _LOGGER.info("Started on-duty location tracking (every %ss)", self._interval)

    def _stop_loop(self) -> None:
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
            _LOGGER.info("Stopped on-duty location tracking")

    async def _run_loop(self) -> None:
        while True:
            await self.update_location()
            await asyncio.sleep(self._interval)

    async def async_shutdown(self) -> None:
        task, self._loop_task = self._loop_task, None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
