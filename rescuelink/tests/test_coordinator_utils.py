"""
Tests for the pure helper functions in coordinator_utils.
"""

from __future__ import annotations

import math
import unittest

from rescuelink.coordinator_utils import (
    convert_speed_to_kmh,
    describe_error,
    haversine_meters,
    sample_from_fix,
)
from rescuelink.requests import ApiResponseError

from .test_common import make_fix


class TestHaversine(unittest.TestCase):

    def test_same_point_is_zero(self):
        self.assertEqual(haversine_meters(28.6, 77.2, 28.6, 77.2), 0.0)

    def test_one_degree_latitude(self):
        self.assertAlmostEqual(haversine_meters(0.0, 0.0, 1.0, 0.0), 111_195, delta=50)

    def test_symmetric(self):
        a = haversine_meters(28.6139, 77.2090, 19.0760, 72.8777)
        b = haversine_meters(19.0760, 72.8777, 28.6139, 77.2090)
        self.assertTrue(math.isclose(a, b))
        self.assertAlmostEqual(a / 1000, 1150, delta=15)


class TestSpeedConversion(unittest.TestCase):

    def test_converts_ms_to_kmh(self):
        self.assertEqual(convert_speed_to_kmh(5.0), 18.0)
        self.assertEqual(convert_speed_to_kmh(1.234), 4.4)

    def test_unknown_speed(self):
        self.assertIsNone(convert_speed_to_kmh(None))
        self.assertIsNone(convert_speed_to_kmh(-1.0))

    def test_zero_speed(self):
        self.assertEqual(convert_speed_to_kmh(0.0), 0.0)


class TestSampleFromFix(unittest.TestCase):

    def test_maps_all_fields(self):
        sample = sample_from_fix(make_fix(lat=1.0, lng=2.0))
        self.assertEqual(sample.latitude, 1.0)
        self.assertEqual(sample.longitude, 2.0)
        self.assertEqual(sample.altitude, 216.0)
        self.assertEqual(sample.speed, 18.0)
        self.assertEqual(sample.heading, 90.0)
        self.assertEqual(sample.accuracy, 8.0)

    def test_unmeasured_fields_become_none(self):
        sample = sample_from_fix(make_fix(altitude=0.0, heading=None, accuracy=0, speed=-1))
        self.assertIsNone(sample.altitude)
        self.assertIsNone(sample.heading)
        self.assertIsNone(sample.accuracy)
        self.assertIsNone(sample.speed)


class TestDescribeError(unittest.TestCase):

    def test_server_message_wins(self):
        exc = ApiResponseError(400, {"message": "No responders nearby"})
        self.assertEqual(describe_error(exc, "fallback"), "No responders nearby")

    def test_exception_text(self):
        self.assertEqual(describe_error(RuntimeError("boom"), "fallback"), "boom")

    def test_fallback_for_empty_text(self):
        self.assertEqual(describe_error(RuntimeError(), "fallback"), "fallback")
