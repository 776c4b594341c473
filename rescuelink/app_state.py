"""
App lifecycle event source.

The host application reports foreground/background transitions through
set_state(); listeners receive (previous_state, next_state).
"""
from __future__ import annotations

import logging

from .events import EventSource
from .models import AppStateStatus

_LOGGER = logging.getLogger(__name__)


class AppStateMonitor(EventSource):
    """Tracks the current app state and announces every transition."""

    def __init__(self, initial_state: AppStateStatus = AppStateStatus.ACTIVE) -> None:
        super().__init__()
        self._state = AppStateStatus(initial_state)

    @property
    def current_state(self) -> AppStateStatus:
        return self._state

    def set_state(self, next_state: AppStateStatus | str) -> None:
        """Record next_state and notify listeners if it differs from the current one."""
        next_state = AppStateStatus(next_state)
        previous = self._state
        if next_state == previous:
            return
        self._state = next_state
        _LOGGER.debug("App state changed: %s -> %s", previous.value, next_state.value)
        self._notify(previous, next_state)
