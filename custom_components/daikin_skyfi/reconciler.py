"""Turn decoded device responses into attribute updates."""

import logging
import math
from collections.abc import Mapping
from typing import Any

from .codec import decode_response, fan_rate_from_code, mode_from_code
from .const import (
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_HEATING_SETPOINT,
    ATTR_PLENUM_TEMPERATURE,
    ATTR_STATUS_TEXT,
    ATTR_SWITCH,
    ATTR_TEMPERATURE,
    SWITCH_OFF,
    SWITCH_ON,
    DaikinMode,
)
from .state import DeviceStateStore
from .units import to_display_unit

_LOGGER = logging.getLogger(__name__)


def _parse_float(value: str | None) -> float | None:
    # The adapter reports "-" or "--" when a sensor or setpoint has no value
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def reconcile(response: Mapping[str, str], display_is_fahrenheit: bool) -> dict[str, Any]:
    """Compute the attribute updates for one decoded response.

    Pure function of the response; it never looks at which request caused it
    or at the current store contents.
    """
    updates: dict[str, Any] = {}
    device_mode = mode_from_code(response.get("mode"))

    if response.get("pow") == "0":
        updates[ATTR_CURR_MODE] = DaikinMode.OFF.value
        updates[ATTR_STATUS_TEXT] = DaikinMode.OFF.value
        updates[ATTR_SWITCH] = SWITCH_OFF
    elif "mode" in response:
        if device_mode is None:
            _LOGGER.debug("Ignoring unknown mode code %r", response["mode"])
        else:
            updates[ATTR_CURR_MODE] = device_mode.value
            updates[ATTR_STATUS_TEXT] = device_mode.value
            updates[ATTR_SWITCH] = SWITCH_ON

    inside = _parse_float(response.get("htemp"))
    if inside is not None:
        reading = to_display_unit(inside, display_is_fahrenheit)
        updates[ATTR_TEMPERATURE] = reading
        updates[ATTR_PLENUM_TEMPERATURE] = reading

    setpoint = _parse_float(response.get("stemp"))
    if setpoint is not None:
        value = to_display_unit(setpoint, display_is_fahrenheit)
        if device_mode == DaikinMode.HEAT:
            updates[ATTR_HEATING_SETPOINT] = value
        elif device_mode == DaikinMode.COOL:
            updates[ATTR_COOLING_SETPOINT] = value

    if "f_rate" in response:
        fan_rate = fan_rate_from_code(response["f_rate"])
        if fan_rate is None:
            _LOGGER.debug("Ignoring unknown fan rate code %r", response["f_rate"])
        else:
            updates[ATTR_FAN_RATE] = fan_rate.value

    return updates


class ResponseReconciler:
    """Inbound stream subscriber that writes device responses to the store."""

    def __init__(self, store: DeviceStateStore, display_is_fahrenheit: bool = False):
        self._store = store
        self.display_is_fahrenheit = display_is_fahrenheit

    def handle_response(self, body: str) -> dict[str, Any]:
        response = decode_response(body)
        _LOGGER.debug("Parsing Daikin response: %s", response)
        updates = reconcile(response, self.display_is_fahrenheit)
        if updates:
            self._store.apply(updates)
        return updates
