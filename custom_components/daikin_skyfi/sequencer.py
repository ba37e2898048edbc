"""Command sequencing for the SkyFi adapter.

A command writes its intent to the store right away and schedules the actual
request for later. The request is encoded from whatever the store holds when
it fires, so the most recent intent always wins, even when several sequences
interleave. After each request the control and sensor info are polled back.

    intent ──1s──▶ set_control_info ──2s──▶ get_control_info
                                    └──4s──▶ get_sensor_info
"""

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from enum import StrEnum
from typing import Any

from .codec import encode_control_info, parse_fan_rate, parse_mode
from .const import (
    ATTR_CONNECTION,
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_HEATING_SETPOINT,
    ATTR_STATUS_TEXT,
    COMMAND_DELAY,
    CONNECTION_LOCAL,
    CONTROL_POLL_DELAY,
    DEFAULT_COOLING_SETPOINT,
    DEFAULT_HEATING_SETPOINT,
    PATH_GET_CONTROL_INFO,
    PATH_GET_SENSOR_INFO,
    REFRESH_CONTROL_DELAY,
    REFRESH_SENSOR_DELAY,
    SENSOR_POLL_DELAY,
    UPDATED_DEBOUNCE,
    UPDATED_NETWORK_ID_DELAY,
    UPDATED_REFRESH_DELAY,
    DaikinMode,
)
from .errors import DaikinSkyfiValidationError
from .models import DaikinSkyfiConfig, device_network_id
from .state import DeviceStateStore
from .units import to_display_unit

_LOGGER = logging.getLogger(__name__)


class SequencePhase(StrEnum):
    IDLE = "idle"
    INTENT_RECORDED = "intent_recorded"
    COMMAND_SENT = "command_sent"
    AWAITING_CONTROL_POLL = "awaiting_control_poll"
    AWAITING_SENSOR_POLL = "awaiting_sensor_poll"


class CommandSequencer:
    def __init__(
        self,
        store: DeviceStateStore,
        scheduler,
        transport,
        config: DaikinSkyfiConfig,
        on_network_id: Callable[[str], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._scheduler = scheduler
        self._transport = transport
        self.config = config
        self._on_network_id = on_network_id
        self._clock = clock
        self._last_updated: float | None = None
        self._refresh_unsub: Callable[[], None] | None = None
        self._phase = SequencePhase.IDLE
        self._phase_listeners: list[Callable[[SequencePhase], None]] = []

    @property
    def phase(self) -> SequencePhase:
        return self._phase

    @phase.setter
    def phase(self, phase: SequencePhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        for listener in list(self._phase_listeners):
            listener(phase)

    def add_phase_listener(self, listener: Callable[[SequencePhase], None]) -> Callable[[], None]:
        self._phase_listeners.append(listener)

        def _remove() -> None:
            if listener in self._phase_listeners:
                self._phase_listeners.remove(listener)

        return _remove

    # --- Mode commands ---
    def heat(self) -> None:
        self._record_mode(DaikinMode.HEAT)

    def cool(self) -> None:
        self._record_mode(DaikinMode.COOL)

    def dry(self) -> None:
        self._record_mode(DaikinMode.DRY)

    def fan(self) -> None:
        self._record_mode(DaikinMode.FAN)

    def set_mode(self, name: str) -> None:
        mode = parse_mode(name)
        if mode is None:
            raise DaikinSkyfiValidationError(f"Unsupported mode: {name}")
        if mode == DaikinMode.OFF:
            self.off()
            return
        self._record_mode(mode)

    def on(self) -> None:
        # Resume whatever mode is recorded
        _LOGGER.debug("on(): currMode=%s", self._store.mode)
        self._schedule_command(turn_off=False)

    def off(self) -> None:
        _LOGGER.debug("off()")
        self._store.apply(
            {ATTR_CURR_MODE: DaikinMode.OFF.value, ATTR_STATUS_TEXT: DaikinMode.OFF.value}
        )
        self._schedule_command(turn_off=True)

    # --- Setpoints and fan ---
    def set_heating_setpoint(self, value: float) -> None:
        _LOGGER.debug("set_heating_setpoint(%s)", value)
        self._store.apply(
            {
                ATTR_HEATING_SETPOINT: value,
                ATTR_CURR_MODE: DaikinMode.HEAT.value,
                ATTR_STATUS_TEXT: DaikinMode.HEAT.value,
            }
        )
        self._schedule_command(turn_off=False)

    def set_cooling_setpoint(self, value: float) -> None:
        _LOGGER.debug("set_cooling_setpoint(%s)", value)
        self._store.apply(
            {
                ATTR_COOLING_SETPOINT: value,
                ATTR_CURR_MODE: DaikinMode.COOL.value,
                ATTR_STATUS_TEXT: DaikinMode.COOL.value,
            }
        )
        self._schedule_command(turn_off=False)

    def set_fan_rate(self, name: str) -> None:
        _LOGGER.debug("set_fan_rate(%s)", name)
        fan_rate = parse_fan_rate(name)
        if fan_rate is None:
            raise DaikinSkyfiValidationError(f"Unsupported fan rate: {name}")
        self._store.set(ATTR_FAN_RATE, fan_rate.value)
        self._schedule_command(turn_off=self._store.mode == DaikinMode.OFF)

    def temp_up(self) -> None:
        self._bump_setpoint(1)

    def temp_down(self) -> None:
        self._bump_setpoint(-1)

    def _bump_setpoint(self, step: int) -> None:
        mode = self._store.mode
        _LOGGER.debug("Bumping setpoint by %s: currMode=%s", step, mode)
        if mode == DaikinMode.HEAT:
            current = self._store.get(ATTR_HEATING_SETPOINT)
            if current is None:
                current = to_display_unit(DEFAULT_HEATING_SETPOINT, self.config.display_fahrenheit)
            self.set_heating_setpoint(current + step)
        elif mode == DaikinMode.COOL:
            current = self._store.get(ATTR_COOLING_SETPOINT)
            if current is None:
                current = to_display_unit(DEFAULT_COOLING_SETPOINT, self.config.display_fahrenheit)
            self.set_cooling_setpoint(current + step)
        else:
            _LOGGER.debug("No setpoint to change when mode=%s", mode)

    def _record_mode(self, mode: DaikinMode) -> None:
        _LOGGER.debug("%s()", mode.value)
        self._store.apply({ATTR_CURR_MODE: mode.value, ATTR_STATUS_TEXT: mode.value})
        self._schedule_command(turn_off=False)

    def _schedule_command(self, turn_off: bool) -> None:
        self.phase = SequencePhase.INTENT_RECORDED
        self._scheduler.run_in(COMMAND_DELAY, self.send_device_command, turn_off)

    # --- Actuation ---
    def send_device_command(self, turn_off: bool = False) -> str:
        """Encode the stored intent, send it, and schedule the follow-up polls."""
        path = encode_control_info(
            self._store.snapshot(), self.config.display_fahrenheit, turn_off=turn_off
        )
        _LOGGER.debug("send_device_command(): turn_off=%s → %s", turn_off, path)
        self._api_get(path)
        self.phase = SequencePhase.COMMAND_SENT
        self._scheduler.run_in(CONTROL_POLL_DELAY, self.poll_control_info)
        self._scheduler.run_in(SENSOR_POLL_DELAY, self.poll_sensor_info)
        self.phase = SequencePhase.AWAITING_CONTROL_POLL
        return path

    def poll_control_info(self) -> None:
        self._api_get(PATH_GET_CONTROL_INFO)
        if self.phase == SequencePhase.AWAITING_CONTROL_POLL:
            self.phase = SequencePhase.AWAITING_SENSOR_POLL

    def poll_sensor_info(self) -> None:
        self._api_get(PATH_GET_SENSOR_INFO)
        if self.phase == SequencePhase.AWAITING_SENSOR_POLL:
            self.phase = SequencePhase.IDLE

    def _api_get(self, path: str) -> None:
        self._store.set(ATTR_CONNECTION, CONNECTION_LOCAL)
        self._transport.send(path)

    # --- Polling and configuration ---
    def refresh(self) -> None:
        _LOGGER.debug("refresh()")
        self._scheduler.run_in(REFRESH_SENSOR_DELAY, self.poll_sensor_info)
        self._scheduler.run_in(REFRESH_CONTROL_DELAY, self.poll_control_info)

    def poll(self) -> None:
        self.refresh()

    def start_scheduled_refresh(self) -> None:
        minutes = self.config.refresh_interval
        _LOGGER.debug("Scheduling refresh every %s min", minutes)
        if self._refresh_unsub is not None:
            self._refresh_unsub()
        self._refresh_unsub = self._scheduler.run_every(timedelta(minutes=minutes), self.refresh)

    def updated(self, config: DaikinSkyfiConfig | None = None) -> bool:
        """Apply new settings and restart every schedule.

        Calls arriving within five seconds of the previous one only store the
        new settings, except that a changed refresh interval restarts the
        periodic refresh. Returns whether the schedules were rebuilt.
        """
        interval_changed = False
        if config is not None:
            if config.display_fahrenheit != self.config.display_fahrenheit:
                self._store.convert_setpoints(config.display_fahrenheit)
            interval_changed = config.refresh_interval != self.config.refresh_interval
            self.config = config
        now = self._clock()
        rebuilt = False
        if self._last_updated is None or now >= self._last_updated + UPDATED_DEBOUNCE:
            _LOGGER.debug("updated() → %s", self.config)
            self._scheduler.unschedule()
            self._refresh_unsub = None
            self.phase = SequencePhase.IDLE
            self._scheduler.run_in(UPDATED_NETWORK_ID_DELAY, self._publish_network_id)
            self._scheduler.run_in(UPDATED_REFRESH_DELAY, self.refresh)
            self.start_scheduled_refresh()
            rebuilt = True
        elif interval_changed:
            self.start_scheduled_refresh()
        self._last_updated = now
        return rebuilt

    def _publish_network_id(self) -> None:
        network_id = device_network_id(self.config.host, self.config.port)
        _LOGGER.debug("Setting network id %s", network_id)
        if self._on_network_id is not None:
            self._on_network_id(network_id)

    def shutdown(self) -> None:
        self._scheduler.unschedule()
        self._refresh_unsub = None
        self.phase = SequencePhase.IDLE
