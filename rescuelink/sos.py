"""
SOS trigger coordinator.

Acquires one high-accuracy fix on demand and submits it as an emergency
trigger. Unlike background tracking, the caller is waiting on the answer,
so every failure ends up in `error` as a single summarised message.
"""
from __future__ import annotations

import logging
from typing import Protocol

from .const import SOS_GENERIC_ERROR, SOS_PERMISSION_DENIED
from .coordinator_utils import describe_error
from .location import LocationPermissionError, LocationProvider
from .models import Accuracy, PermissionStatus, SosTriggerResult

_LOGGER = logging.getLogger(__name__)


class SosApi(Protocol):
    async def trigger_sos(self, lat: float, lng: float) -> SosTriggerResult: ...

    async def get_sos_results(self, sos_id: str) -> SosTriggerResult: ...

    async def resolve_sos(self, sos_id: str, notes: str | None = None): ...


class SosCoordinator:
    """
    Exposes trigger_sos() plus the state a caller renders: is_triggering,
    error and sos_result.

    Concurrent triggers are not de-duplicated; callers disable their control
    while is_triggering is true.
    """

    def __init__(self, api: SosApi, location_provider: LocationProvider) -> None:
        self.api = api
        self._provider = location_provider
        self._in_flight = 0
        self.error: str | None = None
        self.sos_result: SosTriggerResult | None = None

    @property
    def is_triggering(self) -> bool:
        return self._in_flight > 0

    async def trigger_sos(self) -> SosTriggerResult | None:
        """Trigger an SOS at the current position. Returns None on failure."""
        self._in_flight += 1
        self.error = None
        try:
            status = await self._provider.request_foreground_permission()
            if status != PermissionStatus.GRANTED:
                raise LocationPermissionError(SOS_PERMISSION_DENIED)

            fix = await self._provider.get_current_position(Accuracy.HIGH)
            _LOGGER.info("Triggering SOS at location: %s, %s", fix.latitude, fix.longitude)

            result = await self.api.trigger_sos(fix.latitude, fix.longitude)
            self.sos_result = result
            _LOGGER.info(
                "SOS result: %s - found %s responders",
                result.status, result.responders.total_found,
            )
            return result
        except Exception as exc:  # noqa: BLE001
            self.error = describe_error(exc, SOS_GENERIC_ERROR)
            _LOGGER.error("SOS error: %s", self.error)
            return None
        finally:
            self._in_flight -= 1

    async def refresh_results(self) -> SosTriggerResult | None:
        """Reload the stored SOS event from the backend."""
        if self.sos_result is None or not self.sos_result.sos_id:
            return None
        try:
            result = await self.api.get_sos_results(self.sos_result.sos_id)
        except Exception as exc:  # noqa: BLE001
            self.error = describe_error(exc, SOS_GENERIC_ERROR)
            _LOGGER.error("Failed to refresh SOS %s: %s", self.sos_result.sos_id, self.error)
            return None
        self.sos_result = result
        return result

    async def resolve_sos(self, notes: str | None = None) -> bool:
        """Mark the stored SOS event as resolved. Returns True on success."""
        if self.sos_result is None or not self.sos_result.sos_id:
            return False
        sos_id = self.sos_result.sos_id
        try:
            await self.api.resolve_sos(sos_id, notes)
        except Exception as exc:  # noqa: BLE001
            self.error = describe_error(exc, SOS_GENERIC_ERROR)
            _LOGGER.error("Failed to resolve SOS %s: %s", sos_id, self.error)
            return False
        _LOGGER.info("SOS %s resolved", sos_id)
        self.clear_sos()
        return True

    def clear_sos(self) -> None:
        self.sos_result = None
        self.error = None
