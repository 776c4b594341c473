"""
SOS endpoints of the RescueLink API.

Responsible for:
- Triggering an SOS at a coordinate and parsing the responders found
- Fetching the results of an SOS event
- Resolving an SOS event
"""
from __future__ import annotations

import logging

from rescuelink.models import SosTriggerResult
from rescuelink.requests import make_request

_LOGGER = logging.getLogger(__name__)


async def trigger_sos(base_url: str, headers: dict, lat: float, lng: float, timeout: int = 10) -> SosTriggerResult:
    """
    Trigger an SOS emergency; the backend looks for nearby police and hospitals.

    Raises ValueError when the response body is not a trigger result.

    Corresponding CURL command:
    curl -X 'POST' '<base_url>/sos/trigger' -d '{"lat": 0.0, "lng": 0.0}'
    """
    raw_json = await make_request(
        "POST", f"{base_url}/sos/trigger", headers,
        payload={"lat": lat, "lng": lng}, timeout=timeout, max_attempts=1,
    )
    if not isinstance(raw_json, dict) or "status" not in raw_json:
        _LOGGER.error("Unexpected response format in SOS trigger: %s", raw_json)
        raise ValueError("Unexpected SOS trigger response")
    return SosTriggerResult.from_json(raw_json)


async def fetch_sos_results(base_url: str, headers: dict, sos_id: str, timeout: int = 10) -> SosTriggerResult:
    """
    Fetch the current state of an SOS event.

    Corresponding CURL command:
    curl -X 'GET' '<base_url>/sos/results/<sos_id>'
    """
    raw_json = await make_request("GET", f"{base_url}/sos/results/{sos_id}", headers, timeout=timeout)
    if isinstance(raw_json, dict) and isinstance(raw_json.get("data"), dict):
        raw_json = raw_json["data"]
    if not isinstance(raw_json, dict) or "status" not in raw_json:
        _LOGGER.error("Unexpected response format in SOS results: %s", raw_json)
        raise ValueError("Unexpected SOS results response")
    raw_json.setdefault("sosId", sos_id)
    return SosTriggerResult.from_json(raw_json)


async def resolve_sos(base_url: str, headers: dict, sos_id: str, notes: str | None = None, timeout: int = 10):
    """
    Mark an SOS event as resolved.

    Corresponding CURL command:
    curl -X 'POST' '<base_url>/sos/resolve/<sos_id>' -d '{"notes": "..."}'
    """
    payload = {"notes": notes} if notes is not None else {}
    return await make_request(
        "POST", f"{base_url}/sos/resolve/{sos_id}", headers,
        payload=payload, timeout=timeout, max_attempts=1,
    )
