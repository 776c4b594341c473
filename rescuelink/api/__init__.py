"""
RescueLinkApi: thin client over the RescueLink REST backend.

Every call reads the current token from AuthState when it is issued. A 401
answer clears the session before the error is re-raised, so listeners of
AuthState (the tracking coordinator among them) see the logout.
"""
from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

from rescuelink.const import DEFAULT_API_URL, LOCATION_SOURCE, REQUEST_TIMEOUT
from rescuelink.models import DeviceRef, PositionSample, SosTriggerResult
from rescuelink.requests import UnauthorizedError

from .auth import AuthState, get_standard_headers
from .devices import DeviceRegistry, fetch_devices
from .locations import submit_device_location
from .on_duty import fetch_on_duty_status, toggle_on_duty, update_on_duty_location
from .sos import fetch_sos_results, resolve_sos, trigger_sos

__all__ = ["AuthState", "DeviceRegistry", "RescueLinkApi"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class RescueLinkApi:
    """Client for the RescueLink backend."""

    def __init__(
        self,
        auth: AuthState,
        base_url: str = DEFAULT_API_URL,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        self.auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def headers(self) -> dict:
        return get_standard_headers(self.auth.token)

    async def _call(self, request: Awaitable[T]) -> T:
        try:
            return await request
        except UnauthorizedError:
            _LOGGER.warning("Session rejected by the API, clearing credentials")
            self.auth.clear()
            raise

    # ------------------------------------------------------------------
    # Devices and locations
    # ------------------------------------------------------------------

    async def list_devices(self) -> list[DeviceRef]:
        return await self._call(fetch_devices(self.base_url, self.headers, self.timeout))

    async def submit_device_location(
        self, device_id: str, sample: PositionSample, source: str = LOCATION_SOURCE
    ):
        return await self._call(
            submit_device_location(self.base_url, self.headers, device_id, sample, source, self.timeout)
        )

    # ------------------------------------------------------------------
    # SOS
    # ------------------------------------------------------------------

    async def trigger_sos(self, lat: float, lng: float) -> SosTriggerResult:
        return await self._call(trigger_sos(self.base_url, self.headers, lat, lng, self.timeout))

    async def get_sos_results(self, sos_id: str) -> SosTriggerResult:
        return await self._call(fetch_sos_results(self.base_url, self.headers, sos_id, self.timeout))

    async def resolve_sos(self, sos_id: str, notes: str | None = None):
        return await self._call(resolve_sos(self.base_url, self.headers, sos_id, notes, self.timeout))

    # ------------------------------------------------------------------
    # On duty
    # ------------------------------------------------------------------

    async def update_on_duty_location(self, sample: PositionSample):
        return await self._call(update_on_duty_location(self.base_url, self.headers, sample, self.timeout))

    async def toggle_on_duty(self, on_duty: bool, lat: float | None = None, lng: float | None = None):
        return await self._call(toggle_on_duty(self.base_url, self.headers, on_duty, lat, lng, self.timeout))

    async def get_on_duty_status(self) -> bool:
        return await self._call(fetch_on_duty_status(self.base_url, self.headers, self.timeout))
