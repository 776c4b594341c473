"""
Tests for RescueLinkApi and the endpoint modules: URLs, payloads,
parsing and 401 handling.
"""

from __future__ import annotations

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from rescuelink.api import AuthState, RescueLinkApi
from rescuelink.api.auth import get_standard_headers
from rescuelink.api.locations import build_location_payload
from rescuelink.models import PositionSample
from rescuelink.requests import UnauthorizedError

from .test_common import make_sample, make_sos_json


def make_client(token: str | None = "tok") -> RescueLinkApi:
    return RescueLinkApi(AuthState(token), "http://backend/api/", timeout=7)


class TestHeaders(unittest.TestCase):

    def test_bearer_header_with_token(self):
        headers = get_standard_headers("abc")
        self.assertEqual(headers["Authorization"], "Bearer abc")
        self.assertEqual(headers["accept"], "application/json")

    def test_no_authorization_without_token(self):
        self.assertNotIn("Authorization", get_standard_headers(None))


class TestLocationPayload(unittest.TestCase):

    def test_full_payload(self):
        payload = build_location_payload("dev1", make_sample(lat=1.5, lng=2.5))
        self.assertEqual(payload, {
            "deviceId": "dev1", "latitude": 1.5, "longitude": 2.5, "source": "gps",
            "altitude": 216.0, "speed": 18.0, "heading": 90.0, "accuracy": 8.0,
        })

    def test_absent_fields_are_omitted(self):
        payload = build_location_payload("dev1", PositionSample(latitude=1.0, longitude=2.0, speed=0.0))
        self.assertEqual(set(payload), {"deviceId", "latitude", "longitude", "source"})


class TestRescueLinkApi(unittest.IsolatedAsyncioTestCase):

    async def test_submit_device_location_posts_once(self):
        api = make_client()
        with patch("rescuelink.api.locations.make_request", new=AsyncMock(return_value={})) as mock_request:
            await api.submit_device_location("dev1", make_sample())

        args, kwargs = mock_request.call_args
        self.assertEqual(args[0], "POST")
        self.assertEqual(args[1], "http://backend/api/device-locations/browser")
        self.assertEqual(args[2]["Authorization"], "Bearer tok")
        self.assertEqual(kwargs["payload"]["deviceId"], "dev1")
        self.assertEqual(kwargs["max_attempts"], 1)
        self.assertEqual(kwargs["timeout"], 7)

    async def test_list_devices_parses_response(self):
        api = make_client()
        raw = {"devices": [{"_id": "a1", "name": "Car"}, {"name": "no id"}]}
        with patch("rescuelink.api.devices.make_request", new=AsyncMock(return_value=raw)):
            devices = await api.list_devices()

        self.assertEqual([(d.device_id, d.name) for d in devices], [("a1", "Car")])

    async def test_trigger_sos_parses_result(self):
        api = make_client()
        with patch("rescuelink.api.sos.make_request", new=AsyncMock(return_value=make_sos_json(3))) as mock_request:
            result = await api.trigger_sos(19.0, 72.8)

        self.assertEqual(mock_request.call_args.kwargs["payload"], {"lat": 19.0, "lng": 72.8})
        self.assertEqual(result.responders.total_found, 3)
        self.assertEqual(result.sos_id, "sos-1")
        self.assertEqual(len(result.responders.police), 3)
        self.assertEqual(result.responders.police[0].coordinates, (77.2, 28.6))

    async def test_trigger_sos_rejects_malformed_body(self):
        api = make_client()
        with patch("rescuelink.api.sos.make_request", new=AsyncMock(return_value={"success": True})):
            with self.assertRaises(ValueError):
                await api.trigger_sos(1.0, 2.0)

    async def test_get_sos_results_unwraps_data(self):
        api = make_client()
        body = {"data": {k: v for k, v in make_sos_json(2).items() if k != "sosId"}}
        with patch("rescuelink.api.sos.make_request", new=AsyncMock(return_value=body)) as mock_request:
            result = await api.get_sos_results("sos-9")

        self.assertEqual(mock_request.call_args.args[1], "http://backend/api/sos/results/sos-9")
        self.assertEqual(result.sos_id, "sos-9")
        self.assertEqual(result.responders.total_found, 2)

    async def test_resolve_sos_sends_notes(self):
        api = make_client()
        with patch("rescuelink.api.sos.make_request", new=AsyncMock(return_value={})) as mock_request:
            await api.resolve_sos("sos-1", "all good")

        self.assertEqual(mock_request.call_args.args[1], "http://backend/api/sos/resolve/sos-1")
        self.assertEqual(mock_request.call_args.kwargs["payload"], {"notes": "all good"})

    async def test_on_duty_calls(self):
        api = make_client()
        with patch("rescuelink.api.on_duty.make_request", new=AsyncMock(return_value={"onDuty": True})) as mock_request:
            self.assertTrue(await api.get_on_duty_status())
            await api.toggle_on_duty(True, 1.0, 2.0)
            await api.update_on_duty_location(PositionSample(latitude=1.0, longitude=2.0, accuracy=5.0))

        toggle_call, location_call = mock_request.call_args_list[1:]
        self.assertEqual(toggle_call.kwargs["payload"], {"onDuty": True, "lat": 1.0, "lng": 2.0})
        self.assertEqual(location_call.kwargs["payload"], {"lat": 1.0, "lng": 2.0, "accuracy": 5.0})

    async def test_unauthorized_clears_session(self):
        api = make_client()
        listener = MagicMock()
        api.auth.add_listener(listener)
        with patch(
            "rescuelink.api.devices.make_request",
            new=AsyncMock(side_effect=UnauthorizedError(401, {"message": "Token expired"})),
        ):
            with self.assertRaises(UnauthorizedError):
                await api.list_devices()

        self.assertFalse(api.auth.is_authenticated)
        listener.assert_called_once()
