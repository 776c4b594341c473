"""
Device location submission for the RescueLink API.

Responsible for:
- Building the location payload for one device from a PositionSample
- Posting it to the device-locations endpoint
"""
from __future__ import annotations

import logging

from rescuelink.const import LOCATION_SOURCE
from rescuelink.models import PositionSample
from rescuelink.requests import make_request

_LOGGER = logging.getLogger(__name__)


def build_location_payload(device_id: str, sample: PositionSample, source: str = LOCATION_SOURCE) -> dict:
    """
    Build the submission body. Optional fields the sample does not carry are
    left out; a zero speed or heading is treated as unknown.
    """
    payload = {
        "deviceId": device_id,
        "latitude": sample.latitude,
        "longitude": sample.longitude,
        "source": source,
    }
    optional = {
        "altitude": sample.altitude,
        "speed": sample.speed or None,
        "heading": sample.heading or None,
        "accuracy": sample.accuracy,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


async def submit_device_location(
    base_url: str,
    headers: dict,
    device_id: str,
    sample: PositionSample,
    source: str = LOCATION_SOURCE,
    timeout: int = 10,
):
    """
    Record one location for one device. Single attempt, no retry.

    Corresponding CURL command:
    curl -X 'POST' '<base_url>/device-locations/browser' \
      -d '{"deviceId": "<id>", "latitude": 0.0, "longitude": 0.0, "source": "gps"}'
    """
    payload = build_location_payload(device_id, sample, source)
    return await make_request(
        "POST", f"{base_url}/device-locations/browser", headers,
        payload=payload, timeout=timeout, max_attempts=1,
    )
