"""
Minimal listener registry shared by the auth state, the device registry and
the app-state monitor.

add_listener() returns a callable that removes the listener again, so the
owner can keep it and release it on unload.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

_LOGGER = logging.getLogger(__name__)


class EventSource:
    """Holds listeners and notifies them synchronously, in registration order."""

    def __init__(self) -> None:
        self._listeners: list[Callable[..., Any]] = []

    def add_listener(self, listener: Callable[..., Any]) -> Callable[[], None]:
        """Register listener and return its remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, *args: Any) -> None:
        # Copy so listeners may remove themselves while being notified
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error("Listener %s failed: %s", getattr(listener, "__name__", listener), exc)
