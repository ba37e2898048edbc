"""Delayed and periodic actions for one device, on top of the HA event helpers."""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_call_later, async_track_time_interval

_LOGGER = logging.getLogger(__name__)


class ScheduledAction:
    """Opaque handle for one pending action."""

    def __init__(self, name: str):
        self.name = name
        self.cancel: CALLBACK_TYPE | None = None


class DeviceScheduler:
    """Keeps every handle it hands out so they can all be dropped at once."""

    def __init__(self, hass: HomeAssistant):
        self._hass = hass
        self._pending: set[ScheduledAction] = set()
        self._periodic: list[CALLBACK_TYPE] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_in(self, delay: float, action: Callable[..., Any], *payload: Any) -> ScheduledAction:
        handle = ScheduledAction(getattr(action, "__name__", repr(action)))

        @callback
        def _fire(_now) -> None:
            self._pending.discard(handle)
            action(*payload)

        handle.cancel = async_call_later(self._hass, delay, _fire)
        self._pending.add(handle)
        _LOGGER.debug("Scheduled %s in %ss", handle.name, delay)
        return handle

    def run_every(self, interval: timedelta, action: Callable[[], Any]) -> CALLBACK_TYPE:
        @callback
        def _tick(_now) -> None:
            action()

        unsub = async_track_time_interval(self._hass, _tick, interval)
        self._periodic.append(unsub)
        _LOGGER.debug("Scheduled %s every %s", getattr(action, "__name__", action), interval)

        @callback
        def _cancel() -> None:
            if unsub in self._periodic:
                self._periodic.remove(unsub)
                unsub()

        return _cancel

    def unschedule(self) -> None:
        """Cancel every pending delayed action and every periodic one."""
        for handle in list(self._pending):
            if handle.cancel is not None:
                handle.cancel()
        self._pending.clear()
        for unsub in self._periodic:
            unsub()
        self._periodic.clear()
