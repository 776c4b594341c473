"""
On-duty endpoints of the RescueLink API (police and hospital users).

Responsible for:
- Posting the responder location while on duty
- Toggling the on-duty flag
- Reading the current on-duty status
"""
from __future__ import annotations

import logging

from rescuelink.models import PositionSample
from rescuelink.requests import make_request

_LOGGER = logging.getLogger(__name__)


async def update_on_duty_location(base_url: str, headers: dict, sample: PositionSample, timeout: int = 10):
    """
    Corresponding CURL command:
    curl -X 'POST' '<base_url>/on-duty/location' -d '{"lat": 0.0, "lng": 0.0}'
    """
    payload = {"lat": sample.latitude, "lng": sample.longitude}
    optional = {
        "accuracy": sample.accuracy,
        "altitude": sample.altitude,
        "speed": sample.speed,
        "heading": sample.heading,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return await make_request(
        "POST", f"{base_url}/on-duty/location", headers,
        payload=payload, timeout=timeout, max_attempts=1,
    )


async def toggle_on_duty(
    base_url: str,
    headers: dict,
    on_duty: bool,
    lat: float | None = None,
    lng: float | None = None,
    timeout: int = 10,
):
    """
    Corresponding CURL command:
    curl -X 'POST' '<base_url>/on-duty/toggle' -d '{"onDuty": true, "lat": 0.0, "lng": 0.0}'
    """
    payload = {"onDuty": on_duty}
    if lat is not None and lng is not None:
        payload["lat"] = lat
        payload["lng"] = lng
    return await make_request(
        "POST", f"{base_url}/on-duty/toggle", headers,
        payload=payload, timeout=timeout, max_attempts=1,
    )


async def fetch_on_duty_status(base_url: str, headers: dict, timeout: int = 10) -> bool:
    """
    Corresponding CURL command:
    curl -X 'GET' '<base_url>/on-duty/status'
    """
    raw_json = await make_request("GET", f"{base_url}/on-duty/status", headers, timeout=timeout)
    if isinstance(raw_json, dict):
        if "onDuty" in raw_json:
            return bool(raw_json["onDuty"])
        data = raw_json.get("data")
        if isinstance(data, dict) and "onDuty" in data:
            return bool(data["onDuty"])
    _LOGGER.warning("Unexpected response format in on-duty status: %s", raw_json)
    return False
