"""
Domain models for the RescueLink client.

This module contains pure data classes representing positions, devices and
SOS results. These classes have no dependencies on HTTP or API logic.
"""
from __future__ import annotations

import dataclasses
import enum
import logging
import math

from .const import SOS_STATUSES

_LOGGER = logging.getLogger(__name__)


class Accuracy(enum.IntEnum):
    """Accuracy hint passed to the location provider."""

    LOWEST = 1
    LOW = 2
    BALANCED = 3
    HIGH = 4
    HIGHEST = 5


class PermissionStatus(str, enum.Enum):
    """Foreground location permission state."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class AppStateStatus(str, enum.Enum):
    """Host application lifecycle state."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


@dataclasses.dataclass(frozen=True)
class LocationFix:
    """
    Raw reading from a location provider.

    Speed is in m/s. Providers report 0, a negative value or None when a
    field is unknown.
    """

    latitude: float
    longitude: float
    altitude: float | None = None
    speed: float | None = None
    heading: float | None = None
    accuracy: float | None = None
    timestamp: float | None = None


@dataclasses.dataclass(frozen=True)
class PositionSample:
    """A position ready to be submitted. Speed is in km/h."""

    latitude: float | None
    longitude: float | None
    altitude: float | None = None
    speed: float | None = None
    heading: float | None = None
    accuracy: float | None = None

    def is_complete(self) -> bool:
        """True when both coordinates are present and finite."""
        for value in (self.latitude, self.longitude):
            if value is None or isinstance(value, bool):
                return False
            try:
                if not math.isfinite(value):
                    return False
            except TypeError:
                return False
        return True


@dataclasses.dataclass(frozen=True)
class DeviceRef:
    """A device owned by the authenticated user."""

    device_id: str
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.device_id


@dataclasses.dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only view of auth and device state, taken when an operation starts.

    Later changes to the underlying state do not affect a snapshot.
    """

    is_authenticated: bool = False
    token: str | None = None
    devices: tuple[DeviceRef, ...] = ()

    @property
    def can_track(self) -> bool:
        return self.is_authenticated and bool(self.token) and len(self.devices) > 0


@dataclasses.dataclass(frozen=True)
class SubmissionOutcome:
    """Result of one location submission for one device."""

    device_id: str
    success: bool
    error: str | None = None


@dataclasses.dataclass(frozen=True)
class SosResponder:
    """A police or hospital unit found near an SOS trigger."""

    id: str
    name: str | None = None
    role: str | None = None
    phone: str | None = None
    distance: float | None = None
    distance_meters: float | None = None
    coordinates: tuple[float, float] | None = None
    on_duty: bool = False

    @classmethod
    def from_json(cls, json: dict) -> "SosResponder":
        location = json.get("lastActiveLocation") or {}
        coordinates = location.get("coordinates")
        return cls(
            id=str(json.get("id") or json.get("_id") or ""),
            name=json.get("name"),
            role=json.get("role"),
            phone=json.get("phone"),
            distance=json.get("distance"),
            distance_meters=json.get("distanceMeters"),
            coordinates=tuple(coordinates) if coordinates else None,
            on_duty=bool(json.get("onDuty", False)),
        )


@dataclasses.dataclass(frozen=True)
class SosResponders:
    police: list[SosResponder] = dataclasses.field(default_factory=list)
    hospitals: list[SosResponder] = dataclasses.field(default_factory=list)
    total_found: int = 0


@dataclasses.dataclass(frozen=True)
class SosTriggerResult:
    """Parsed response of the SOS trigger endpoint."""

    status: str
    responders: SosResponders
    success: bool = True
    sos_id: str | None = None
    message: str | None = None
    victim_location: tuple[float, float] | None = None

    @classmethod
    def from_json(cls, json: dict) -> "SosTriggerResult":
        """
        Build a result from the raw response body.

        Raises KeyError when the body carries no status.
        """
        raw_responders = json.get("responders") or {}
        police = [SosResponder.from_json(r) for r in raw_responders.get("police") or []]
        hospitals = [SosResponder.from_json(r) for r in raw_responders.get("hospitals") or []]
        total_found = raw_responders.get("totalFound")
        if total_found is None:
            total_found = len(police) + len(hospitals)

        victim = json.get("victimLocation")
        victim_location = None
        if victim and victim.get("lat") is not None and victim.get("lng") is not None:
            victim_location = (victim["lat"], victim["lng"])

        status = json["status"]
        if status not in SOS_STATUSES:
            _LOGGER.debug("Unknown SOS status %s", status)

        return cls(
            status=status,
            responders=SosResponders(police=police, hospitals=hospitals, total_found=int(total_found)),
            success=bool(json.get("success", True)),
            sos_id=json.get("sosId"),
            message=json.get("message"),
            victim_location=victim_location,
        )
