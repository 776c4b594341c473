"""
Low-level utility functions for the tracking and SOS coordinators.

Responsibilities:
- Great-circle distance between two coordinates.
- Conversion of raw provider fixes into PositionSample objects.
- Extraction of a user-facing message from a failed call.

No network or provider access: these functions are pure.
"""
from __future__ import annotations

import math

from .const import EARTH_RADIUS_METERS, MS_TO_KMH
from .models import LocationFix, PositionSample
from .requests import ApiResponseError


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the distance in metres between two lat/lng points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def convert_speed_to_kmh(speed_ms: float | None) -> float | None:
    """Convert a provider speed in m/s to km/h, one decimal. Unknown speeds give None."""
    if speed_ms is None or speed_ms < 0:
        return None
    return round(speed_ms * MS_TO_KMH, 1)


def _known(value: float | None) -> float | None:
    # Providers report 0 for fields they cannot measure
    return value if value else None


def sample_from_fix(fix: LocationFix) -> PositionSample:
    """Map a raw provider fix onto a PositionSample."""
    return PositionSample(
        latitude=fix.latitude,
        longitude=fix.longitude,
        altitude=_known(fix.altitude),
        speed=convert_speed_to_kmh(fix.speed),
        heading=_known(fix.heading),
        accuracy=_known(fix.accuracy),
    )


def describe_error(exc: BaseException, fallback: str) -> str:
    """
    Return the message to show for exc.

    Server-supplied messages win, then the exception text, then fallback.
    """
    if isinstance(exc, ApiResponseError) and exc.message:
        return exc.message
    text = str(exc)
    return text if text else fallback
