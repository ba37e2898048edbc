"""SkyFi query-string codec.

Commands are sent as a single GET with every control field present:

    /skyfi/aircon/set_control_info?pow=1&mode=2&stemp=24&shum=0&f_rate=3&f_dir=0

Responses are plain text, comma separated ``key=value`` tokens:

    ret=OK,pow=1,mode=2,stemp=24.0,f_rate=3,htemp=23.5
"""

import logging
from collections.abc import Mapping
from typing import Any

from .const import (
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_HEATING_SETPOINT,
    CODE_TO_FAN_RATE,
    CODE_TO_MODE,
    FAN_RATE_TO_CODE,
    MODE_TO_CODE,
    PATH_SET_CONTROL_INFO,
    PLACEHOLDER_FAN_RATE,
    PLACEHOLDER_MODE,
    PLACEHOLDER_STEMP,
    DaikinFanRate,
    DaikinMode,
)
from .units import to_device_unit

_LOGGER = logging.getLogger(__name__)


def parse_mode(value: Any) -> DaikinMode | None:
    """Return the mode for a stored name, or None when it is not one we know."""
    if value is None:
        return None
    try:
        return DaikinMode(str(value).lower())
    except ValueError:
        return None


def parse_fan_rate(value: Any) -> DaikinFanRate | None:
    if value is None:
        return None
    try:
        return DaikinFanRate(str(value).lower())
    except ValueError:
        return None


def mode_from_code(code: str | None) -> DaikinMode | None:
    return CODE_TO_MODE.get(code) if code is not None else None


def fan_rate_from_code(code: str | None) -> DaikinFanRate | None:
    return CODE_TO_FAN_RATE.get(code) if code is not None else None


def format_temperature(value: float) -> str:
    """Whole degrees go out without a decimal part."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def encode_control_info(
    state: Mapping[str, Any],
    display_is_fahrenheit: bool,
    turn_off: bool = False,
) -> str:
    """Build the set_control_info path for the intended state.

    Fields that cannot be derived from ``state`` keep their placeholder value
    instead of raising, so a command always goes out.
    """
    mode = parse_mode(state.get(ATTR_CURR_MODE))
    mode_code = MODE_TO_CODE.get(mode) if mode is not None else None
    if mode_code is None:
        _LOGGER.debug(
            "No mode code for %r, sending placeholder mode=%s",
            state.get(ATTR_CURR_MODE),
            PLACEHOLDER_MODE,
        )
        mode_code = PLACEHOLDER_MODE

    stemp = PLACEHOLDER_STEMP
    setpoint = None
    if mode == DaikinMode.HEAT:
        setpoint = state.get(ATTR_HEATING_SETPOINT)
    elif mode == DaikinMode.COOL:
        setpoint = state.get(ATTR_COOLING_SETPOINT)
    if setpoint is not None:
        stemp = format_temperature(to_device_unit(float(setpoint), display_is_fahrenheit))

    fan_rate = parse_fan_rate(state.get(ATTR_FAN_RATE))
    fan_code = FAN_RATE_TO_CODE.get(fan_rate) if fan_rate is not None else None
    if fan_code is None:
        fan_code = PLACEHOLDER_FAN_RATE

    query = "&".join(
        [
            f"pow={0 if turn_off else 1}",
            f"mode={mode_code}",
            f"stemp={stemp}",
            "shum=0",
            f"f_rate={fan_code}",
            "f_dir=0",
        ]
    )
    return f"{PATH_SET_CONTROL_INFO}?{query}"


def decode_response(body: str | None) -> dict[str, str]:
    """Split a response body into a flat mapping.

    Tokens that are not exactly one ``key=value`` pair are skipped; a key seen
    twice keeps its last value.
    """
    result: dict[str, str] = {}
    if not body:
        return result
    for token in body.strip().split(","):
        pair = token.split("=")
        if len(pair) != 2:
            continue
        key, value = pair
        result[key.strip()] = value.strip()
    return result
