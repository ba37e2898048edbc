"""Configuration model and device identity helpers."""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .const import (
    CONF_DEBUG_LOGGING,
    CONF_DISPLAY_FAHRENHEIT,
    CONF_HOST,
    CONF_PORT,
    CONF_REFRESH_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_REFRESH_INTERVAL,
    REFRESH_INTERVALS,
)
from .errors import DaikinSkyfiValidationError


@dataclass(frozen=True)
class DaikinSkyfiConfig:
    host: str
    port: int = DEFAULT_PORT
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    display_fahrenheit: bool = False
    debug_logging: bool = False

    @property
    def host_address(self) -> str:
        """Value for the Host header and the request URL."""
        return f"{self.host}:{self.port}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], options: Mapping[str, Any] | None = None):
        """Build from config entry data, with options taking precedence."""
        merged = dict(data)
        merged.update(options or {})
        interval = int(merged.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL))
        if interval not in REFRESH_INTERVALS:
            interval = DEFAULT_REFRESH_INTERVAL
        return cls(
            host=str(merged.get(CONF_HOST, "")).strip(),
            port=int(merged.get(CONF_PORT) or DEFAULT_PORT),
            refresh_interval=interval,
            display_fahrenheit=bool(merged.get(CONF_DISPLAY_FAHRENHEIT, False)),
            debug_logging=bool(merged.get(CONF_DEBUG_LOGGING, False)),
        )

    @classmethod
    def from_entry(cls, entry) -> DaikinSkyfiConfig:
        return cls.from_mapping(entry.data, entry.options)


def validate_host(host: str) -> str:
    host = (host or "").strip()
    if not host:
        raise DaikinSkyfiValidationError("Host must not be empty")
    if any(ch in host for ch in "/ ?#@"):
        raise DaikinSkyfiValidationError(f"Invalid host: {host}")
    return host


def validate_port(port: Any) -> int:
    try:
        value = int(port)
    except (TypeError, ValueError) as err:
        raise DaikinSkyfiValidationError(f"Invalid port: {port}") from err
    if not 0 < value < 65536:
        raise DaikinSkyfiValidationError(f"Port out of range: {value}")
    return value


def device_network_id(host: str, port: int) -> str:
    """Hex form of ``ip:port``, e.g. ``192.168.1.30:80`` -> ``C0A8011E:0050``.

    Host names that are not IPv4 addresses are kept as-is (upper-cased).
    """
    try:
        address = ipaddress.IPv4Address(host.strip())
    except ValueError:
        host_part = host.strip().upper()
    else:
        host_part = "".join(f"{octet:02X}" for octet in address.packed)
    return f"{host_part}:{int(port):04X}"
