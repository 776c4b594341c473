"""
Authentication state for the RescueLink API.

Responsible for:
- Holding the bearer token of the current session
- Announcing login/logout so tracking can start or stop
- Building the standard authorization headers used by all API calls
"""
from __future__ import annotations

import logging

from rescuelink.events import EventSource

_LOGGER = logging.getLogger(__name__)


class AuthState(EventSource):
    """
    Current session. Listeners are called with no arguments whenever the
    authenticated flag or the token changes.
    """

    def __init__(self, token: str | None = None, user: dict | None = None) -> None:
        super().__init__()
        self._token = token or None
        self.user = user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: str | None, user: dict | None = None) -> None:
        """Store a new token (None logs out) and notify listeners on change."""
        token = str(token) if token else None
        if user is not None:
            self.user = user
        if token == self._token:
            return
        self._token = token
        _LOGGER.debug("Session %s", "authenticated" if token else "cleared")
        self._notify()

    def clear(self) -> None:
        """Drop the session, e.g. after the API rejected the token."""
        self.user = None
        self.set_token(None)


def get_standard_headers(token: str | None) -> dict:
    """
    Build the standard HTTP headers used by all RescueLink API requests.

    :param token: Bearer token of the current session, or None for anonymous calls.
    :return: Dictionary of HTTP headers.
    """
    headers = {
        "accept": "application/json",
        "Content-Type": "application/json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers
