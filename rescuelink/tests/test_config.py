"""
Tests for entry data validation and loading configuration from the environment.
"""

from __future__ import annotations

import os
import unittest
from unittest.mock import patch

from rescuelink.config import ConfigError, load_entry_data, validate_entry_data
from rescuelink.const import (
    CONF_API_URL,
    CONF_MIN_DISTANCE,
    CONF_ON_DUTY_INTERVAL,
    CONF_REQUEST_TIMEOUT,
    CONF_TOKEN,
    CONF_WATCH_DISTANCE,
    CONF_WATCH_INTERVAL,
    DEFAULT_API_URL,
)


class TestValidateEntryData(unittest.TestCase):

    def test_defaults_applied(self):
        config = validate_entry_data({})
        self.assertEqual(config[CONF_API_URL], DEFAULT_API_URL)
        self.assertIsNone(config[CONF_TOKEN])
        self.assertEqual(config[CONF_REQUEST_TIMEOUT], 10)
        self.assertEqual(config[CONF_MIN_DISTANCE], 0.0)
        self.assertEqual(config[CONF_WATCH_INTERVAL], 30.0)
        self.assertEqual(config[CONF_WATCH_DISTANCE], 100.0)
        self.assertEqual(config[CONF_ON_DUTY_INTERVAL], 30.0)

    def test_strings_are_coerced(self):
        config = validate_entry_data({CONF_REQUEST_TIMEOUT: "15", CONF_MIN_DISTANCE: "25.5"})
        self.assertEqual(config[CONF_REQUEST_TIMEOUT], 15)
        self.assertEqual(config[CONF_MIN_DISTANCE], 25.5)

    def test_input_is_not_mutated(self):
        entry = {CONF_TOKEN: "abc"}
        validate_entry_data(entry)
        self.assertEqual(entry, {CONF_TOKEN: "abc"})

    def test_invalid_url(self):
        with self.assertRaises(ConfigError):
            validate_entry_data({CONF_API_URL: "ftp://example.com"})

    def test_invalid_timeout(self):
        with self.assertRaises(ConfigError):
            validate_entry_data({CONF_REQUEST_TIMEOUT: 0})
        with self.assertRaises(ConfigError):
            validate_entry_data({CONF_REQUEST_TIMEOUT: "soon"})

    def test_negative_min_distance(self):
        with self.assertRaises(ConfigError):
            validate_entry_data({CONF_MIN_DISTANCE: -1})

    def test_unknown_key(self):
        with self.assertRaises(ConfigError):
            validate_entry_data({"password": "secret"})


class TestLoadEntryData(unittest.TestCase):

    def test_reads_environment(self):
        env = {
            "RESCUELINK_API_URL": "https://rescue.example.com/api",
            "RESCUELINK_TOKEN": "tok",
            "RESCUELINK_WATCH_INTERVAL": "60",
            "RESCUELINK_MIN_DISTANCE": "",
        }
        with patch.dict(os.environ, env, clear=True), patch("rescuelink.config.load_dotenv"):
            config = load_entry_data()

        self.assertEqual(config[CONF_API_URL], "https://rescue.example.com/api")
        self.assertEqual(config[CONF_TOKEN], "tok")
        self.assertEqual(config[CONF_WATCH_INTERVAL], 60.0)
        self.assertEqual(config[CONF_MIN_DISTANCE], 0.0)

    def test_env_file_is_loaded(self):
        with patch.dict(os.environ, {}, clear=True), patch("rescuelink.config.load_dotenv") as mock_load:
            load_entry_data("custom.env")

        mock_load.assert_called_once_with("custom.env")

    def test_invalid_environment_raises(self):
        with patch.dict(os.environ, {"RESCUELINK_REQUEST_TIMEOUT": "-5"}, clear=True), \
                patch("rescuelink.config.load_dotenv"):
            with self.assertRaises(ConfigError):
                load_entry_data()
