"""Fire-and-forget HTTP transport to the SkyFi adapter.

Requests go out on one channel and response bodies come back on another:
listeners registered with ``add_listener`` receive every body, without any
link to the request that produced it.
"""

import logging
from collections.abc import Callable

import aiohttp
from homeassistant.core import HomeAssistant

from .errors import DaikinSkyfiConnectionError

_LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10

ResponseListener = Callable[[str], None]


class SkyfiTransport:
    def __init__(self, hass: HomeAssistant, session: aiohttp.ClientSession, host: str, port: int):
        self._hass = hass
        self._session = session
        self.host = host
        self.port = port
        self._listeners: list[ResponseListener] = []

    @property
    def host_address(self) -> str:
        return f"{self.host}:{self.port}"

    def add_listener(self, listener: ResponseListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def send(self, path: str) -> None:
        """Queue a GET; the response, if any, is delivered to the listeners."""
        _LOGGER.debug("→ HTTP GET: http://%s%s", self.host_address, path)
        self._hass.async_create_task(self.async_send(path))

    async def async_send(self, path: str) -> str | None:
        try:
            body = await self.async_fetch(path)
        except DaikinSkyfiConnectionError as err:
            # State stays stale until the next poll
            _LOGGER.warning("Request to %s%s failed: %s", self.host_address, path, err)
            return None
        self.dispatch(body)
        return body

    async def async_fetch(self, path: str) -> str:
        """GET ``path`` and return the body without dispatching it."""
        url = f"http://{self.host_address}{path}"
        try:
            async with self._session.get(
                url,
                headers={"Host": self.host_address},
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            ) as resp:
                body = await resp.text()
                if resp.status != 200:
                    raise DaikinSkyfiConnectionError(f"HTTP {resp.status}: {body}")
                return body
        except (TimeoutError, aiohttp.ClientError) as err:
            raise DaikinSkyfiConnectionError(str(err) or type(err).__name__) from err

    def dispatch(self, body: str) -> None:
        _LOGGER.debug("← %s: %s", self.host_address, body)
        for listener in list(self._listeners):
            listener(body)
