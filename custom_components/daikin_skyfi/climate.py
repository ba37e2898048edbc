# custom_components/daikin_skyfi/climate.py
"""
  Daikin SkyFi Home Assistant Climate Integration (local HTTP)

  Description:
    Controls a Daikin split-system air conditioner through the local HTTP API of its
    SkyFi / BRP15B61 WiFi adapter. Commands are turned into set_control_info query strings;
    the adapter's comma separated key=value answers are reconciled back into entity state.

  Features:
    - On/off, HVAC mode (heat, cool, dry, fan only), target temperature, fan rate
    - Separate heating and cooling setpoints; switching back to heat/cool restores the last one
    - Optional Fahrenheit display (the adapter itself only speaks whole-degree Celsius)
    - Periodic polling of control and sensor info (1/5/10/15/30 minutes)
    - Entity services: temp_up, temp_down, set_fan_rate, set_heating_setpoint,
      set_cooling_setpoint, set_mode, refresh

  Endpoints:
    - [command] GET /skyfi/aircon/set_control_info?pow=1&mode=2&stemp=24&shum=0&f_rate=3&f_dir=0
    - [control] GET /skyfi/aircon/get_control_info
    - [sensor]  GET /skyfi/aircon/get_sensor_info

  Example Response:
    ret=OK,pow=1,mode=2,stemp=24.0,f_rate=3,htemp=23.5

  Notes:
    - Requests are fire-and-forget; every response body goes through the same reconciler
    - A lost response only leaves stale state until the next poll
"""

import logging
from typing import Any

import voluptuous as vol
from homeassistant.components.climate import ClimateEntity
from homeassistant.components.climate.const import (
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import callback
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import entity_platform

from .const import (
    ATTR_CONNECTION,
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_HEATING_SETPOINT,
    ATTR_PLENUM_TEMPERATURE,
    ATTR_STATUS_TEXT,
    ATTR_SWITCH,
    ATTR_TEMPERATURE as ATTR_INSIDE_TEMPERATURE,
    DEFAULT_MAX_TEMP,
    DEFAULT_MIN_TEMP,
    DOMAIN,
    DaikinFanRate,
    DaikinMode,
)
from .errors import DaikinSkyfiValidationError
from .units import celsius_to_fahrenheit

_LOGGER = logging.getLogger(__name__)

MODE_TO_HVAC = {
    DaikinMode.HEAT: HVACMode.HEAT,
    DaikinMode.COOL: HVACMode.COOL,
    DaikinMode.DRY: HVACMode.DRY,
    DaikinMode.FAN: HVACMode.FAN_ONLY,
    DaikinMode.OFF: HVACMode.OFF,
}
HVAC_TO_MODE = {v: k for k, v in MODE_TO_HVAC.items()}

# The inside reading is published as current_temperature; "temperature" belongs to the target
EXPOSED_ATTRIBUTES = [
    ATTR_PLENUM_TEMPERATURE,
    ATTR_HEATING_SETPOINT,
    ATTR_COOLING_SETPOINT,
    ATTR_CURR_MODE,
    ATTR_FAN_RATE,
    ATTR_STATUS_TEXT,
    ATTR_CONNECTION,
    ATTR_SWITCH,
]

SERVICE_TEMP_UP = "temp_up"
SERVICE_TEMP_DOWN = "temp_down"
SERVICE_SET_FAN_RATE = "set_fan_rate"
SERVICE_SET_HEATING_SETPOINT = "set_heating_setpoint"
SERVICE_SET_COOLING_SETPOINT = "set_cooling_setpoint"
SERVICE_SET_MODE = "set_mode"
SERVICE_REFRESH = "refresh"


async def async_setup_entry(hass, entry, async_add_entities):
    runtime = hass.data[DOMAIN][entry.entry_id]
    entity = DaikinSkyfiClimate(entry.entry_id, runtime)
    runtime["entity"] = entity
    async_add_entities([entity])
    _LOGGER.debug("[SETUP] Climate entity added: %s", runtime["config"].host_address)

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(SERVICE_TEMP_UP, {}, "async_temp_up")
    platform.async_register_entity_service(SERVICE_TEMP_DOWN, {}, "async_temp_down")
    platform.async_register_entity_service(SERVICE_REFRESH, {}, "async_refresh")
    platform.async_register_entity_service(
        SERVICE_SET_FAN_RATE,
        {vol.Required("fan_rate"): vol.In([rate.value for rate in DaikinFanRate])},
        "async_set_fan_rate",
    )
    platform.async_register_entity_service(
        SERVICE_SET_MODE,
        {vol.Required("mode"): vol.In([mode.value for mode in DaikinMode])},
        "async_set_mode",
    )
    platform.async_register_entity_service(
        SERVICE_SET_HEATING_SETPOINT,
        {vol.Required(ATTR_TEMPERATURE): vol.Coerce(float)},
        "async_set_heating_setpoint",
    )
    platform.async_register_entity_service(
        SERVICE_SET_COOLING_SETPOINT,
        {vol.Required(ATTR_TEMPERATURE): vol.Coerce(float)},
        "async_set_cooling_setpoint",
    )


# --- Main Climate Entity Class ---
class DaikinSkyfiClimate(ClimateEntity):
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.FAN_MODE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT, HVACMode.COOL, HVACMode.DRY, HVACMode.FAN_ONLY]
    _attr_fan_modes = [rate.value for rate in DaikinFanRate]
    _attr_target_temperature_step = 1.0
    _attr_should_poll = False

    def __init__(self, entry_id, runtime):
        self._entry_id = entry_id
        self._store = runtime["store"]
        self._sequencer = runtime["sequencer"]
        self._transport = runtime["transport"]
        self._reconciler = runtime["reconciler"]
        config = runtime["config"]
        self._attr_name = runtime.get("name") or config.host
        self._attr_unique_id = runtime.get("unique_id") or entry_id
        self._unsub_listeners = []
        self._apply_unit(config.display_fahrenheit)
        self._sync_from_store()

    def _apply_unit(self, display_fahrenheit: bool) -> None:
        if display_fahrenheit:
            self._attr_temperature_unit = UnitOfTemperature.FAHRENHEIT
            self._attr_min_temp = celsius_to_fahrenheit(DEFAULT_MIN_TEMP)
            self._attr_max_temp = celsius_to_fahrenheit(DEFAULT_MAX_TEMP)
        else:
            self._attr_temperature_unit = UnitOfTemperature.CELSIUS
            self._attr_min_temp = DEFAULT_MIN_TEMP
            self._attr_max_temp = DEFAULT_MAX_TEMP

    # --- Lifecycle ---
    async def async_added_to_hass(self):
        await super().async_added_to_hass()
        self._unsub_listeners.append(self._transport.add_listener(self._handle_response))
        self._unsub_listeners.append(self._store.add_listener(self._handle_store_change))
        self._unsub_listeners.append(self._sequencer.add_phase_listener(self._handle_phase_change))
        self._sequencer.updated()

    async def async_will_remove_from_hass(self):
        _LOGGER.debug("[%s] Unscheduling all pending actions", self.name)
        for unsub in self._unsub_listeners:
            unsub()
        self._unsub_listeners.clear()
        self._sequencer.shutdown()

    async def async_apply_options(self, config) -> None:
        """Settings changed in the options flow."""
        self._reconciler.display_is_fahrenheit = config.display_fahrenheit
        self._apply_unit(config.display_fahrenheit)
        self._sequencer.updated(config)
        self._sync_from_store()
        if self.hass is not None:
            self.async_write_ha_state()

    @callback
    def _handle_response(self, body: str) -> None:
        try:
            _LOGGER.debug("[%s] 📩 Raw response: %s", self.name, body)
            self._reconciler.handle_response(body)
        except Exception as e:
            _LOGGER.exception("[%s] ❌ Exception in _handle_response: %s", self.name, e)

    @callback
    def _handle_store_change(self, changed: dict[str, Any]) -> None:
        self._sync_from_store()
        if self.hass is not None:
            self.async_write_ha_state()

    @callback
    def _handle_phase_change(self, phase) -> None:
        if self.hass is not None:
            self.async_write_ha_state()

    # --- State ---
    def _sync_from_store(self) -> None:
        mode = self._store.mode
        try:
            daikin_mode = DaikinMode(mode) if mode is not None else None
        except ValueError:
            daikin_mode = None
        self._attr_hvac_mode = MODE_TO_HVAC.get(daikin_mode)

        if daikin_mode == DaikinMode.HEAT:
            self._attr_target_temperature = self._store.get(ATTR_HEATING_SETPOINT)
        elif daikin_mode == DaikinMode.COOL:
            self._attr_target_temperature = self._store.get(ATTR_COOLING_SETPOINT)
        else:
            self._attr_target_temperature = None

        self._attr_current_temperature = self._store.get(ATTR_INSIDE_TEMPERATURE)
        self._attr_fan_mode = self._store.get(ATTR_FAN_RATE) or DaikinFanRate.AUTO.value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        attrs = {key: self._store.get(key) for key in EXPOSED_ATTRIBUTES}
        attrs["sequence_phase"] = str(self._sequencer.phase)
        return attrs

    # --- User Control ---
    async def async_turn_on(self):
        _LOGGER.debug("[%s] 🔛 Turning ON (async_turn_on)", self.name)
        self._sequencer.on()

    async def async_turn_off(self):
        _LOGGER.debug("[%s] 🔴 Turning OFF (async_turn_off)", self.name)
        self._sequencer.off()

    async def async_set_hvac_mode(self, hvac_mode: HVACMode):
        _LOGGER.debug("[%s] ⚙️ Set HVAC mode to: %s", self.name, hvac_mode)
        mode = HVAC_TO_MODE.get(hvac_mode)
        if mode is None:
            raise ServiceValidationError(f"Unsupported HVAC mode: {hvac_mode}")
        self._sequencer.set_mode(mode.value)

    async def async_set_temperature(self, **kwargs):
        hvac_mode = kwargs.get("hvac_mode")
        if hvac_mode is not None and hvac_mode not in (HVACMode.HEAT, HVACMode.COOL):
            await self.async_set_hvac_mode(hvac_mode)
            return

        temp = kwargs.get(ATTR_TEMPERATURE)
        if temp is None:
            return
        target = hvac_mode or self._attr_hvac_mode
        _LOGGER.debug("[%s] 🌡️ Set temperature to: %s (%s)", self.name, temp, target)
        if target == HVACMode.HEAT:
            self._sequencer.set_heating_setpoint(temp)
        elif target == HVACMode.COOL:
            self._sequencer.set_cooling_setpoint(temp)
        else:
            raise ServiceValidationError(
                f"Target temperature can only be set in heat or cool mode, not {target}"
            )

    async def async_set_fan_mode(self, fan_mode: str):
        _LOGGER.debug("[%s] 💨 Set fan_mode to: %s", self.name, fan_mode)
        await self.async_set_fan_rate(fan_mode)

    # --- Entity services ---
    async def async_set_fan_rate(self, fan_rate: str):
        try:
            self._sequencer.set_fan_rate(fan_rate)
        except DaikinSkyfiValidationError as err:
            raise ServiceValidationError(str(err)) from err

    async def async_set_mode(self, mode: str):
        try:
            self._sequencer.set_mode(mode)
        except DaikinSkyfiValidationError as err:
            raise ServiceValidationError(str(err)) from err

    async def async_set_heating_setpoint(self, temperature: float):
        self._sequencer.set_heating_setpoint(temperature)

    async def async_set_cooling_setpoint(self, temperature: float):
        self._sequencer.set_cooling_setpoint(temperature)

    async def async_temp_up(self):
        self._sequencer.temp_up()

    async def async_temp_down(self):
        self._sequencer.temp_down()

    async def async_refresh(self):
        self._sequencer.refresh()

    async def async_update(self):
        """Called by homeassistant.update_entity."""
        self._sequencer.poll()
