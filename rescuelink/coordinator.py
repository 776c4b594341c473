"""
Location tracking coordinator.

Responsibilities:
- Own the single continuous position watch (at most one live handle).
- Fan every position out to all devices of the user, one independent
  submission per device, joined with a settle-all gather.
- Refresh the position once when the app returns to the foreground.
- Start or stop tracking when the session (auth + devices) changes.

Nothing in here raises past its public methods: tracking is a best-effort
background process and every failure is logged and absorbed.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from .app_state import AppStateMonitor
from .const import (
    LOCATION_SOURCE,
    MIN_DISTANCE_METERS,
    PERMISSION_REQUIRED_MESSAGE,
    PERMISSION_REQUIRED_TITLE,
    WATCH_DISTANCE_INTERVAL,
    WATCH_TIME_INTERVAL,
)
from .coordinator_utils import haversine_meters, sample_from_fix
from .location import (
    LocationProvider,
    LocationSubscription,
    LocationUnavailableError,
    WatchOptions,
)
from .models import (
    Accuracy,
    AppStateStatus,
    DeviceRef,
    LocationFix,
    PermissionStatus,
    PositionSample,
    SessionSnapshot,
    SubmissionOutcome,
)

_LOGGER = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class LocationSubmitter(Protocol):
    """What the coordinator needs from the API client."""

    async def submit_device_location(self, device_id: str, sample: PositionSample, source: str = LOCATION_SOURCE):
        """Record one location for one device."""


def log_notification(title: str, message: str) -> None:
    """Default notifier: the user-facing explanation only reaches the log."""
    _LOGGER.warning("%s: %s", title, message)


class LocationTrackingCoordinator:
    """
    Keeps the backend informed about where the user's devices are.

    The coordinator never reads global state: session() returns a fresh
    SessionSnapshot each time an operation starts.
    """

    def __init__(
        self,
        api: LocationSubmitter,
        location_provider: LocationProvider,
        session: Callable[[], SessionSnapshot],
        app_state: AppStateMonitor | None = None,
        notify: Notifier | None = None,
        min_distance_meters: float = MIN_DISTANCE_METERS,
        watch_time_interval: float = WATCH_TIME_INTERVAL,
        watch_distance_interval: float = WATCH_DISTANCE_INTERVAL,
    ) -> None:
        self.api = api
        self._provider = location_provider
        self._session = session
        self._notify = notify or log_notification
        self._min_distance_meters = min_distance_meters
        self._watch_options = WatchOptions(
            accuracy=Accuracy.BALANCED,
            time_interval=watch_time_interval,
            distance_interval=watch_distance_interval,
        )

        self._subscription: LocationSubscription | None = None
        # Bumped on every stop so a start that was still opening its watch
        # can tell it has been superseded
        self._watch_generation = 0

        # device_id -> (lat, lng) of the last successful submission
        self._last_sent: dict[str, tuple[float, float]] = {}

        self._background_tasks: set[asyncio.Task] = set()

        self._remove_app_state_listener: Callable[[], None] | None = None
        if app_state is not None:
            self._remove_app_state_listener = app_state.add_listener(self._handle_app_state_change)

    @property
    def is_tracking(self) -> bool:
        return self._subscription is not None

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def update_device_locations(self, sample: PositionSample) -> list[SubmissionOutcome]:
        """
        Submit sample for every device in the current snapshot.

        All submissions are in flight at once and each one settles on its
        own; a failure is logged and recorded in the returned outcomes, never
        raised and never retried.
        """
        snapshot = self._session()
        if not snapshot.can_track:
            return []
        if not sample.is_complete():
            _LOGGER.warning("Ignoring incomplete position sample: %s", sample)
            return []

        devices = [d for d in snapshot.devices if self._is_due(d, sample)]
        if not devices:
            return []

        results = await asyncio.gather(
            *[self._submit(device, sample) for device in devices],
            return_exceptions=True,
        )

        outcomes = []
        for device, result in zip(devices, results):
            if isinstance(result, BaseException):
                # _submit absorbs its own errors; this only covers cancellation
                outcomes.append(SubmissionOutcome(device.device_id, False, str(result) or type(result).__name__))
            else:
                outcomes.append(result)
        return outcomes

    def _is_due(self, device: DeviceRef, sample: PositionSample) -> bool:
        if self._min_distance_meters <= 0:
            return True
        last = self._last_sent.get(device.device_id)
        if last is None:
            return True
        distance = haversine_meters(last[0], last[1], sample.latitude, sample.longitude)
        if distance < self._min_distance_meters:
            _LOGGER.debug(
                "Skipping %s: moved only %sm (min: %sm)",
                device.label, round(distance), self._min_distance_meters,
            )
            return False
        return True

    async def _submit(self, device: DeviceRef, sample: PositionSample) -> SubmissionOutcome:
        try:
            await self.api.submit_device_location(device.device_id, sample, LOCATION_SOURCE)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning("Failed to update location for device %s: %s", device.device_id, exc)
            return SubmissionOutcome(device.device_id, False, str(exc) or type(exc).__name__)

        self._last_sent[device.device_id] = (sample.latitude, sample.longitude)
        _LOGGER.debug("Location updated for device: %s", device.label)
        return SubmissionOutcome(device.device_id, True)

    # ------------------------------------------------------------------
    # One-shot
    # ------------------------------------------------------------------

    async def request_permission_and_get_location(self) -> PositionSample | None:
        """
        Ask for permission, take one high-accuracy sample and fan it out.

        Returns the sample, or None when permission was denied or no fix
        could be obtained. Denial shows the permission explanation.
        """
        try:
            status = await self._provider.request_foreground_permission()
            if status != PermissionStatus.GRANTED:
                self._notify(PERMISSION_REQUIRED_TITLE, PERMISSION_REQUIRED_MESSAGE)
                return None

            fix = await self._provider.get_current_position(Accuracy.HIGH)
        except LocationUnavailableError:
            _LOGGER.info("Location services unavailable - skipping location update")
            return None
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Error getting location: %s", exc)
            return None

        sample = sample_from_fix(fix)
        await self.update_device_locations(sample)
        return sample

    # ------------------------------------------------------------------
    # Continuous watch
    # ------------------------------------------------------------------

    async def start_location_tracking(self) -> None:
        """
        Replace any running watch with a new one. Does not prompt for
        permission; without it this is a no-op.
        """
        await self._open_watch(self._watch_generation, require_session=False)

    async def _open_watch(self, generation: int, require_session: bool) -> None:
        """
        Open a watch unless the coordinator was stopped after generation was
        taken. With require_session the session must still allow tracking
        when the watch is committed.
        """
        try:
            status = await self._provider.get_foreground_permission()
            if status != PermissionStatus.GRANTED:
                _LOGGER.debug("Location permission not granted, tracking not started")
                return
            if generation != self._watch_generation:
                _LOGGER.debug("Tracking stopped while checking permission, not starting")
                return

            self.stop_location_tracking()
            generation = self._watch_generation

            subscription = await self._provider.watch_position(self._watch_options, self._handle_watch_fix)
        except LocationUnavailableError:
            _LOGGER.info("Location tracking unavailable - will retry when available")
            return
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Error starting location tracking: %s", exc)
            return

        superseded = generation != self._watch_generation
        if superseded or (require_session and not self._session().can_track):
            # Stopped, restarted or logged out while the watch was being opened
            subscription.remove()
            return

        self._subscription = subscription
        _LOGGER.info(
            "Location tracking started (every %ss or %sm)",
            self._watch_options.time_interval, self._watch_options.distance_interval,
        )

    def stop_location_tracking(self) -> None:
        """Release the watch, if any. Safe to call at any time."""
        self._watch_generation += 1
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.remove()
            _LOGGER.info("Location tracking stopped")

    async def _handle_watch_fix(self, fix: LocationFix) -> None:
        try:
            await self.update_device_locations(sample_from_fix(fix))
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Error handling watched position: %s", exc)

    # ------------------------------------------------------------------
    # Lifecycle triggers
    # ------------------------------------------------------------------

    async def async_sync_with_session(self) -> None:
        """
        Track while authenticated with at least one device, stop otherwise.

        A stop issued while the sync is still acquiring its first fix wins:
        no watch is opened afterwards.
        """
        generation = self._watch_generation
        if not self._session().can_track:
            self.stop_location_tracking()
            return

        await self.request_permission_and_get_location()
        if generation != self._watch_generation or not self._session().can_track:
            _LOGGER.debug("Session changed during sync, not starting the watch")
            return
        await self._open_watch(generation, require_session=True)

    def schedule_session_sync(self) -> None:
        """Listener for auth and device changes: sync in the background."""
        self.async_create_task(self.async_sync_with_session())

    def _handle_app_state_change(self, previous: AppStateStatus, next_state: AppStateStatus) -> None:
        returning = previous in (AppStateStatus.BACKGROUND, AppStateStatus.INACTIVE)
        if not (returning and next_state == AppStateStatus.ACTIVE):
            return
        snapshot = self._session()
        if snapshot.is_authenticated and snapshot.devices:
            _LOGGER.debug("App came to foreground, refreshing location")
            self.async_create_task(self.request_permission_and_get_location())

    def async_create_task(self, coro: Awaitable) -> asyncio.Task:
        """Run coro in the background; shutdown cancels it if still pending."""
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def async_shutdown(self) -> None:
        """Stop tracking, drop the app-state listener and cancel pending work."""
        if self._remove_app_state_listener is not None:
            self._remove_app_state_listener()
            self._remove_app_state_listener = None
        self.stop_location_tracking()
        for task in list(self._background_tasks):
            task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
