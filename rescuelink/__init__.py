"""RescueLink client: device location tracking and SOS triggering."""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from .api import AuthState, DeviceRegistry, RescueLinkApi
from .app_state import AppStateMonitor
from .config import validate_entry_data
from .const import (
    CONF_API_URL,
    CONF_MIN_DISTANCE,
    CONF_ON_DUTY_INTERVAL,
    CONF_REQUEST_TIMEOUT,
    CONF_TOKEN,
    CONF_WATCH_DISTANCE,
    CONF_WATCH_INTERVAL,
    DOMAIN,
    VERSION,
)
from .coordinator import LocationTrackingCoordinator, Notifier
from .location import LocationProvider
from .models import SessionSnapshot
from .on_duty import OnDutyTracker
from .sos import SosCoordinator

_LOGGER = logging.getLogger(__name__)

__version__ = VERSION


@dataclasses.dataclass
class RescueLinkRuntime:
    """Everything async_setup_entry builds; pass it back to async_unload_entry."""

    entry_data: dict
    auth: AuthState
    api: RescueLinkApi
    devices: DeviceRegistry
    tracking: LocationTrackingCoordinator
    sos: SosCoordinator
    on_duty: OnDutyTracker
    app_state: AppStateMonitor | None = None
    unload_callbacks: list[Callable[[], None]] = dataclasses.field(default_factory=list)


async def async_setup_entry(
    entry_data: dict,
    location_provider: LocationProvider,
    app_state: AppStateMonitor | None = None,
    notify: Notifier | None = None,
) -> RescueLinkRuntime:
    """
    Build the client from entry data and start tracking if a session exists.

    Raises ConfigError for invalid entry data. Failures of the initial device
    refresh are logged; tracking starts later when the listeners fire.
    """
    config = validate_entry_data(entry_data)
    _LOGGER.debug("Setting up %s %s against %s", DOMAIN, VERSION, config[CONF_API_URL])

    auth = AuthState(config[CONF_TOKEN])
    api = RescueLinkApi(auth, config[CONF_API_URL], config[CONF_REQUEST_TIMEOUT])
    devices = DeviceRegistry(api, auth)

    def session() -> SessionSnapshot:
        return SessionSnapshot(auth.is_authenticated, auth.token, devices.devices)

    tracking = LocationTrackingCoordinator(
        api,
        location_provider,
        session,
        app_state=app_state,
        notify=notify,
        min_distance_meters=config[CONF_MIN_DISTANCE],
        watch_time_interval=config[CONF_WATCH_INTERVAL],
        watch_distance_interval=config[CONF_WATCH_DISTANCE],
    )
    runtime = RescueLinkRuntime(
        entry_data=config,
        auth=auth,
        api=api,
        devices=devices,
        tracking=tracking,
        sos=SosCoordinator(api, location_provider),
        on_duty=OnDutyTracker(api, location_provider, interval=config[CONF_ON_DUTY_INTERVAL]),
        app_state=app_state,
    )

    # The initial sync covers the first device list; listeners come after it
    try:
        await devices.async_refresh()
        await tracking.async_sync_with_session()
    except Exception as e:  # noqa: BLE001
        _LOGGER.error("Failed to initialize RescueLink tracking: %s", e)

    runtime.unload_callbacks.append(devices.add_listener(tracking.schedule_session_sync))
    runtime.unload_callbacks.append(auth.add_listener(_make_auth_listener(runtime)))

    return runtime


def _make_auth_listener(runtime: RescueLinkRuntime) -> Callable[[], None]:
    """On login reload the devices (which triggers a sync); on logout stop at once."""

    def on_auth_change() -> None:
        if runtime.auth.is_authenticated:
            runtime.tracking.async_create_task(runtime.devices.async_refresh())
        else:
            runtime.devices.set_devices(())
            runtime.tracking.stop_location_tracking()

    return on_auth_change


async def async_unload_entry(runtime: RescueLinkRuntime) -> bool:
    """Release listeners and shut every component down."""
    for remove in runtime.unload_callbacks:
        remove()
    runtime.unload_callbacks.clear()
    await runtime.tracking.async_shutdown()
    await runtime.on_duty.async_shutdown()
    return True
