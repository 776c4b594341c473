"""
Location provider interfaces.

A provider answers permission queries, produces one-shot fixes and opens
continuous watches. PollingLocationProvider builds the watch on top of
one-shot reads, so a concrete provider only has to implement permissions and
get_current_position().
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Protocol

from .const import POLL_INTERVAL, WATCH_DISTANCE_INTERVAL, WATCH_TIME_INTERVAL
from .coordinator_utils import haversine_meters
from .models import Accuracy, LocationFix, PermissionStatus

_LOGGER = logging.getLogger(__name__)

FixCallback = Callable[[LocationFix], Awaitable[None]]


class LocationPermissionError(Exception):
    """The user declined location access."""


class LocationUnavailableError(Exception):
    """The provider could not produce a fix (services off, no signal)."""


@dataclasses.dataclass(frozen=True)
class WatchOptions:
    """Watch configuration: report after time_interval seconds or distance_interval metres."""

    accuracy: Accuracy = Accuracy.BALANCED
    time_interval: float = WATCH_TIME_INTERVAL
    distance_interval: float = WATCH_DISTANCE_INTERVAL


class LocationSubscription(Protocol):
    """Handle of a running watch."""

    def remove(self) -> None:
        """Stop the watch. Must be synchronous and idempotent."""


class LocationProvider(Protocol):
    """Protocol describing the device location capability."""

    async def request_foreground_permission(self) -> PermissionStatus:
        """Ask the user for foreground location access."""

    async def get_foreground_permission(self) -> PermissionStatus:
        """Return the current permission without prompting."""

    async def get_current_position(self, accuracy: Accuracy) -> LocationFix:
        """Return one fix or raise LocationUnavailableError."""

    async def watch_position(self, options: WatchOptions, callback: FixCallback) -> LocationSubscription:
        """Start reporting fixes to callback until the subscription is removed."""


class PollingSubscription:
    """Subscription backed by an asyncio task that polls the provider."""

    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def remove(self) -> None:
        if not self._task.done():
            self._task.cancel()


class PollingLocationProvider(ABC):
    """
    Base provider whose watch polls get_current_position().

    A fix is reported when time_interval seconds have passed since the last
    reported fix, or when the device moved at least distance_interval metres
    from it, whichever happens first. The first successful read is always
    reported. Read errors are logged and the next poll proceeds.

    Each report runs as its own task: removing the subscription stops the
    polling but lets reports already handed to the callback finish.
    """

    def __init__(self, poll_interval: float = POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval
        self._callback_tasks: set[asyncio.Task] = set()

    async def request_foreground_permission(self) -> PermissionStatus:
        return await self.get_foreground_permission()

    @abstractmethod
    async def get_foreground_permission(self) -> PermissionStatus:
        """Return the current permission without prompting."""

    @abstractmethod
    async def get_current_position(self, accuracy: Accuracy) -> LocationFix:
        """Return one fix or raise LocationUnavailableError."""

    async def watch_position(self, options: WatchOptions, callback: FixCallback) -> PollingSubscription:
        task = asyncio.ensure_future(self._poll(options, callback))
        return PollingSubscription(task)

    @property
    def pending_reports(self) -> int:
        return len(self._callback_tasks)

    def _dispatch(self, callback: FixCallback, fix: LocationFix) -> None:
        task = asyncio.ensure_future(self._report(callback, fix))
        self._callback_tasks.add(task)
        task.add_done_callback(self._callback_tasks.discard)

    @staticmethod
    async def _report(callback: FixCallback, fix: LocationFix) -> None:
        try:
            await callback(fix)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Watch callback failed: %s", exc)

    async def _poll(self, options: WatchOptions, callback: FixCallback) -> None:
        last_fix: LocationFix | None = None
        last_reported = 0.0
        while True:
            try:
                fix = await self.get_current_position(options.accuracy)
            except LocationUnavailableError as exc:
                _LOGGER.debug("No fix this cycle: %s", exc)
                fix = None
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error("Error while polling location: %s", exc)
                fix = None

            if fix is not None:
                now = time.monotonic()
                if last_fix is None:
                    due = True
                else:
                    elapsed = now - last_reported >= options.time_interval
                    moved = haversine_meters(
                        last_fix.latitude, last_fix.longitude, fix.latitude, fix.longitude
                    ) >= options.distance_interval
                    due = elapsed or moved
                if due:
                    last_fix = fix
                    last_reported = now
                    self._dispatch(callback, fix)

            await asyncio.sleep(self.poll_interval)
