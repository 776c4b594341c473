"""
Device registry for the RescueLink API.

Responsible for:
- Fetching the raw device list of the current user
- Mapping the JSON response onto DeviceRef instances
- Holding the latest device list and announcing changes
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rescuelink.events import EventSource
from rescuelink.models import DeviceRef
from rescuelink.requests import make_request

if TYPE_CHECKING:
    from rescuelink.api import RescueLinkApi
    from rescuelink.api.auth import AuthState

_LOGGER = logging.getLogger(__name__)


def _parse_device(device: dict) -> DeviceRef | None:
    """Map a single raw API device dict onto a DeviceRef."""
    device_id = device.get("_id") or device.get("id")
    if not device_id:
        _LOGGER.warning("Device without id skipped: %s", device.get("name"))
        return None
    return DeviceRef(device_id=str(device_id), name=device.get("name"))


def parse_devices(raw_json) -> list[DeviceRef]:
    """
    Parse a device list response.

    The backend answers with a bare list, {"devices": [...]} or {"data": [...]}.
    Anything else yields an empty list.
    """
    if isinstance(raw_json, list):
        raw_devices = raw_json
    elif isinstance(raw_json, dict):
        raw_devices = raw_json.get("devices") or raw_json.get("data") or []
    else:
        raw_devices = []

    if not isinstance(raw_devices, list):
        _LOGGER.error("Unexpected response format in device list: %s", raw_json)
        return []

    parsed = [_parse_device(device) for device in raw_devices if isinstance(device, dict)]
    return [d for d in parsed if d is not None]


async def fetch_devices(base_url: str, headers: dict, timeout: int) -> list[DeviceRef]:
    """
    Fetch all devices owned by the authenticated user.

    Corresponding CURL command:
    curl -X 'GET' '<base_url>/devices' -H 'Authorization: Bearer <token>'
    """
    raw_json = await make_request("GET", f"{base_url}/devices", headers, timeout=timeout)
    devices = parse_devices(raw_json)
    _LOGGER.debug("Parsed devices: %s", len(devices))
    return devices


class DeviceRegistry(EventSource):
    """
    Latest device list of the authenticated user.

    Listeners are called with no arguments whenever the list changes.
    """

    def __init__(self, api: RescueLinkApi, auth: AuthState) -> None:
        super().__init__()
        self._api = api
        self._auth = auth
        self._devices: tuple[DeviceRef, ...] = ()

    @property
    def devices(self) -> tuple[DeviceRef, ...]:
        return self._devices

    def set_devices(self, devices) -> None:
        devices = tuple(devices)
        if devices == self._devices:
            return
        self._devices = devices
        self._notify()

    async def async_refresh(self) -> tuple[DeviceRef, ...]:
        """
        Reload the device list. Without a token the list is emptied without
        a network call; on failure the list is emptied and the error logged.
        """
        if not self._auth.token:
            _LOGGER.debug("No auth token, skipping device fetch")
            self.set_devices(())
            return self._devices

        try:
            devices = await self._api.list_devices()
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Failed to fetch devices: %s", exc)
            self.set_devices(())
            return self._devices

        self.set_devices(devices)
        return self._devices
