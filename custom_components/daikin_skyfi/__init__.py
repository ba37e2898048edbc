import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import DEFAULT_NAME, DOMAIN
from .models import DaikinSkyfiConfig, device_network_id
from .reconciler import ResponseReconciler
from .scheduler import DeviceScheduler
from .sequencer import CommandSequencer
from .state import DeviceStateStore
from .transport import SkyfiTransport

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["climate"]


def apply_debug_logging(enabled: bool) -> None:
    """Raise the integration's loggers to DEBUG, or hand control back to HA."""
    logging.getLogger(__package__).setLevel(logging.DEBUG if enabled else logging.NOTSET)


async def async_setup(hass: HomeAssistant, config: dict):
    """Set up via configuration.yaml (not used)."""
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Set up from config flow."""
    config = DaikinSkyfiConfig.from_entry(entry)
    apply_debug_logging(config.debug_logging)
    _LOGGER.debug("Setting up entry: %s", config)

    store = DeviceStateStore(display_fahrenheit=config.display_fahrenheit)
    transport = SkyfiTransport(hass, async_get_clientsession(hass), config.host, config.port)
    reconciler = ResponseReconciler(store, config.display_fahrenheit)
    scheduler = DeviceScheduler(hass)

    @callback
    def _set_network_id(network_id: str) -> None:
        if entry.unique_id != network_id:
            hass.config_entries.async_update_entry(entry, unique_id=network_id)

    sequencer = CommandSequencer(store, scheduler, transport, config, on_network_id=_set_network_id)

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "config": config,
        "name": entry.title or DEFAULT_NAME,
        "unique_id": entry.unique_id or device_network_id(config.host, config.port),
        "store": store,
        "transport": transport,
        "reconciler": reconciler,
        "scheduler": scheduler,
        "sequencer": sequencer,
    }

    entry.async_on_unload(entry.add_update_listener(async_options_updated))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry):
    """Push new options to the running device instead of reloading it."""
    runtime = hass.data[DOMAIN].get(entry.entry_id)
    if runtime is None:
        return
    config = DaikinSkyfiConfig.from_entry(entry)
    apply_debug_logging(config.debug_logging)
    runtime["config"] = config
    entity = runtime.get("entity")
    if entity is not None:
        await entity.async_apply_options(config)
    else:
        runtime["reconciler"].display_is_fahrenheit = config.display_fahrenheit
        runtime["sequencer"].updated(config)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Unload integration and cleanup."""
    _LOGGER.debug("Unloading entry: %s", entry.data)
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    runtime = hass.data[DOMAIN].pop(entry.entry_id, None)
    if runtime is not None:
        runtime["sequencer"].shutdown()
    return unload_ok
