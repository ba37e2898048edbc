"""Celsius / Fahrenheit conversion for the display unit.

The adapter only speaks whole-degree Celsius. Converted values are rounded
half away from zero; values shown in Celsius pass through untouched.
"""

import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def celsius_to_fahrenheit(celsius: float) -> int:
    return round_half_away(celsius * 9 / 5 + 32)


def fahrenheit_to_celsius(fahrenheit: float) -> int:
    return round_half_away((fahrenheit - 32) * 5 / 9)


def to_display_unit(celsius: float, display_is_fahrenheit: bool) -> float:
    """Convert a device reading (°C) into the configured display unit."""
    if display_is_fahrenheit:
        return celsius_to_fahrenheit(celsius)
    return celsius


def to_device_unit(display_value: float, display_is_fahrenheit: bool) -> float:
    """Convert a display-unit value back into °C for the device."""
    if display_is_fahrenheit:
        return fahrenheit_to_celsius(display_value)
    return display_value
