"""
Tests for the domain models: sample completeness, session snapshots and
SOS result parsing.
"""

from __future__ import annotations

import math
import unittest

from rescuelink.models import PositionSample, SessionSnapshot, SosTriggerResult

from .test_common import make_devices, make_sos_json


class TestPositionSample(unittest.TestCase):

    def test_complete(self):
        self.assertTrue(PositionSample(latitude=0.0, longitude=0.0).is_complete())

    def test_missing_coordinate(self):
        self.assertFalse(PositionSample(latitude=None, longitude=1.0).is_complete())
        self.assertFalse(PositionSample(latitude=1.0, longitude=None).is_complete())

    def test_non_finite_or_non_numeric(self):
        self.assertFalse(PositionSample(latitude=math.nan, longitude=1.0).is_complete())
        self.assertFalse(PositionSample(latitude=1.0, longitude=math.inf).is_complete())
        self.assertFalse(PositionSample(latitude="1.0", longitude=1.0).is_complete())
        self.assertFalse(PositionSample(latitude=True, longitude=1.0).is_complete())


class TestSessionSnapshot(unittest.TestCase):

    def test_can_track_requires_auth_token_and_devices(self):
        self.assertTrue(SessionSnapshot(True, "tok", make_devices(1)).can_track)
        self.assertFalse(SessionSnapshot(True, "tok", ()).can_track)
        self.assertFalse(SessionSnapshot(False, None, make_devices(1)).can_track)
        self.assertFalse(SessionSnapshot(True, None, make_devices(1)).can_track)


class TestSosTriggerResult(unittest.TestCase):

    def test_parses_full_body(self):
        result = SosTriggerResult.from_json(make_sos_json(2))
        self.assertEqual(result.status, "assigned")
        self.assertEqual(result.sos_id, "sos-1")
        self.assertEqual(result.victim_location, (28.6139, 77.2090))
        self.assertEqual(result.responders.total_found, 2)
        self.assertEqual(result.responders.police[1].name, "Police 1")
        self.assertEqual(result.responders.police[0].distance_meters, 1200)
        self.assertTrue(result.responders.police[0].on_duty)

    def test_total_found_defaults_to_count(self):
        body = make_sos_json(2)
        del body["responders"]["totalFound"]
        result = SosTriggerResult.from_json(body)
        self.assertEqual(result.responders.total_found, 2)

    def test_no_responders(self):
        result = SosTriggerResult.from_json({"status": "no-responders"})
        self.assertEqual(result.responders.total_found, 0)
        self.assertEqual(result.responders.police, [])
        self.assertIsNone(result.victim_location)

    def test_missing_status_raises(self):
        with self.assertRaises(KeyError):
            SosTriggerResult.from_json({"success": True})
