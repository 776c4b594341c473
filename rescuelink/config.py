"""Configuration loading and validation for the RescueLink client."""
from __future__ import annotations

import logging
import os

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    CONF_API_URL,
    CONF_MIN_DISTANCE,
    CONF_ON_DUTY_INTERVAL,
    CONF_REQUEST_TIMEOUT,
    CONF_TOKEN,
    CONF_WATCH_DISTANCE,
    CONF_WATCH_INTERVAL,
    DEFAULT_API_URL,
    MIN_DISTANCE_METERS,
    ON_DUTY_INTERVAL,
    REQUEST_TIMEOUT,
    WATCH_DISTANCE_INTERVAL,
    WATCH_TIME_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

# Environment variable -> config key
ENV_VARS = {
    "RESCUELINK_API_URL": CONF_API_URL,
    "RESCUELINK_TOKEN": CONF_TOKEN,
    "RESCUELINK_REQUEST_TIMEOUT": CONF_REQUEST_TIMEOUT,
    "RESCUELINK_MIN_DISTANCE": CONF_MIN_DISTANCE,
    "RESCUELINK_WATCH_INTERVAL": CONF_WATCH_INTERVAL,
    "RESCUELINK_WATCH_DISTANCE": CONF_WATCH_DISTANCE,
    "RESCUELINK_ON_DUTY_INTERVAL": CONF_ON_DUTY_INTERVAL,
}

positive_int = vol.All(vol.Coerce(int), vol.Range(min=1))
positive_float = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))
non_negative_float = vol.All(vol.Coerce(float), vol.Range(min=0))
url_validator = vol.All(str, vol.Length(min=1), vol.Match(r"^https?://"))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_API_URL, default=DEFAULT_API_URL): url_validator,
        vol.Optional(CONF_TOKEN, default=None): vol.Any(None, vol.All(str, vol.Length(min=1))),
        vol.Required(CONF_REQUEST_TIMEOUT, default=REQUEST_TIMEOUT): positive_int,
        vol.Required(CONF_MIN_DISTANCE, default=MIN_DISTANCE_METERS): non_negative_float,
        vol.Required(CONF_WATCH_INTERVAL, default=WATCH_TIME_INTERVAL): positive_float,
        vol.Required(CONF_WATCH_DISTANCE, default=WATCH_DISTANCE_INTERVAL): positive_float,
        vol.Required(CONF_ON_DUTY_INTERVAL, default=ON_DUTY_INTERVAL): positive_float,
    }
)


class ConfigError(Exception):
    """Raised when entry data does not pass validation."""


def validate_entry_data(entry_data: dict) -> dict:
    """Apply defaults and validate; raises ConfigError with the first problem found."""
    try:
        return CONFIG_SCHEMA(dict(entry_data))
    except vol.Invalid as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_entry_data(env_file: str | None = None) -> dict:
    """
    Build entry data from the environment.

    Values from env_file (or a .env file found by python-dotenv) are loaded
    first; variables already set in the environment win. Empty variables are
    treated as unset.
    """
    load_dotenv(env_file)
    entry_data = {}
    for env_name, key in ENV_VARS.items():
        value = os.getenv(env_name)
        if value:
            entry_data[key] = value
    config = validate_entry_data(entry_data)
    _LOGGER.debug("Loaded configuration for %s", config[CONF_API_URL])
    return config
