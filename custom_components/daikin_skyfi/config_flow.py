import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .codec import decode_response
from .const import (
    CONF_DEBUG_LOGGING,
    CONF_DISPLAY_FAHRENHEIT,
    CONF_HOST,
    CONF_PORT,
    CONF_REFRESH_INTERVAL,
    DEFAULT_NAME,
    DEFAULT_PORT,
    DEFAULT_REFRESH_INTERVAL,
    DOMAIN,
    PATH_GET_CONTROL_INFO,
    REFRESH_INTERVALS,
)
from .errors import DaikinSkyfiConnectionError, DaikinSkyfiValidationError
from .models import device_network_id, validate_host, validate_port
from .transport import SkyfiTransport


async def async_probe_device(hass, host: str, port: int) -> None:
    """Make sure something answering like a SkyFi adapter lives at host:port."""
    transport = SkyfiTransport(hass, async_get_clientsession(hass), host, port)
    body = await transport.async_fetch(PATH_GET_CONTROL_INFO)
    if "pow" not in decode_response(body):
        raise DaikinSkyfiConnectionError(f"Unexpected response: {body}")


def _options_schema(defaults) -> vol.Schema:
    return vol.Schema({
        vol.Required(
            CONF_REFRESH_INTERVAL,
            default=defaults.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL),
        ): vol.In(REFRESH_INTERVALS),
        vol.Required(
            CONF_DISPLAY_FAHRENHEIT, default=defaults.get(CONF_DISPLAY_FAHRENHEIT, False)
        ): bool,
        vol.Required(CONF_DEBUG_LOGGING, default=defaults.get(CONF_DEBUG_LOGGING, False)): bool,
    })


class DaikinSkyfiConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Daikin SkyFi."""

    VERSION = 1

    async def async_step_user(self, user_input=None):
        """Show the setup form to the user."""
        errors = {}

        if user_input is not None:
            try:
                host = validate_host(user_input[CONF_HOST])
                port = validate_port(user_input.get(CONF_PORT, DEFAULT_PORT))
            except DaikinSkyfiValidationError:
                errors[CONF_HOST] = "invalid_host"
            else:
                await self.async_set_unique_id(device_network_id(host, port))
                self._abort_if_unique_id_configured()

                try:
                    await async_probe_device(self.hass, host, port)
                except DaikinSkyfiConnectionError:
                    errors["base"] = "cannot_connect"
                else:
                    user_input[CONF_HOST] = host
                    user_input[CONF_PORT] = port
                    return self.async_create_entry(
                        title=f"{DEFAULT_NAME} ({host})",
                        data=user_input,
                    )

        schema = vol.Schema({
            vol.Required(CONF_HOST): str,
            vol.Required(CONF_PORT, default=DEFAULT_PORT): int,
            vol.Required(CONF_REFRESH_INTERVAL, default=DEFAULT_REFRESH_INTERVAL): vol.In(
                REFRESH_INTERVALS
            ),
            vol.Required(CONF_DISPLAY_FAHRENHEIT, default=False): bool,
            vol.Required(CONF_DEBUG_LOGGING, default=False): bool,
        })

        return self.async_show_form(
            step_id="user",
            data_schema=schema,
            errors=errors
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return DaikinSkyfiOptionsFlow(config_entry)


class DaikinSkyfiOptionsFlow(config_entries.OptionsFlow):
    """Refresh interval, display unit and debug logging."""

    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        defaults = {**self.entry.data, **self.entry.options}
        return self.async_show_form(step_id="init", data_schema=_options_schema(defaults))
