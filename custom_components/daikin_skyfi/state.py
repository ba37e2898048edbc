"""Observable attribute store for one air conditioner."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .const import (
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_HEATING_SETPOINT,
    ATTR_PLENUM_TEMPERATURE,
    ATTR_STATUS_TEXT,
    ATTR_TEMPERATURE,
    DEFAULT_COOLING_SETPOINT,
    DEFAULT_HEATING_SETPOINT,
    STATUS_IDLE,
    DaikinFanRate,
    DaikinMode,
)
from .units import to_device_unit, to_display_unit

_LOGGER = logging.getLogger(__name__)

StateListener = Callable[[dict[str, Any]], None]


def seed_attributes(display_fahrenheit: bool = False) -> dict[str, Any]:
    """Attribute values a freshly installed device starts with."""
    return {
        ATTR_HEATING_SETPOINT: to_display_unit(DEFAULT_HEATING_SETPOINT, display_fahrenheit),
        ATTR_COOLING_SETPOINT: to_display_unit(DEFAULT_COOLING_SETPOINT, display_fahrenheit),
        ATTR_TEMPERATURE: None,
        ATTR_PLENUM_TEMPERATURE: None,
        ATTR_CURR_MODE: None,
        ATTR_FAN_RATE: DaikinFanRate.AUTO.value,
        ATTR_STATUS_TEXT: STATUS_IDLE,
    }


class DeviceStateStore:
    """Synchronous key/value store with change listeners.

    Writes are visible to the next read immediately. Every call to ``apply``
    is one batch and listeners see it once, with only the keys that changed.
    """

    def __init__(
        self, initial: Mapping[str, Any] | None = None, display_fahrenheit: bool = False
    ):
        self._values: dict[str, Any] = seed_attributes(display_fahrenheit)
        if initial:
            self._values.update(initial)
        self._listeners: list[StateListener] = []

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def set(self, key: str, value: Any) -> None:
        self.apply({key: value})

    def apply(self, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Write a batch of attribute updates, returning what actually changed."""
        changed = {
            key: value
            for key, value in updates.items()
            if key not in self._values or self._values[key] != value
        }
        if not changed:
            return changed
        self._values.update(changed)
        _LOGGER.debug("State changed: %s", changed)
        for listener in list(self._listeners):
            listener(changed)
        return changed

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    @property
    def mode(self) -> str | None:
        return self._values.get(ATTR_CURR_MODE)

    @property
    def power(self) -> bool:
        """Derived from the recorded mode; unknown mode counts as off."""
        mode = self.mode
        return mode is not None and mode != DaikinMode.OFF

    def convert_setpoints(self, display_fahrenheit: bool) -> dict[str, Any]:
        """Re-express both stored setpoints after the display unit changed."""
        updates = {}
        for key in (ATTR_HEATING_SETPOINT, ATTR_COOLING_SETPOINT):
            value = self._values.get(key)
            if value is None:
                continue
            if display_fahrenheit:
                updates[key] = to_display_unit(value, True)
            else:
                updates[key] = to_device_unit(value, True)
        return self.apply(updates)
