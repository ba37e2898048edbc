"""Common fixtures for Daikin SkyFi tests."""
from unittest.mock import MagicMock

import pytest
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from custom_components.daikin_skyfi.models import DaikinSkyfiConfig
from custom_components.daikin_skyfi.reconciler import ResponseReconciler
from custom_components.daikin_skyfi.sequencer import CommandSequencer
from custom_components.daikin_skyfi.state import DeviceStateStore


class FakeScheduler:
    """Records delayed actions and runs them in due order on demand."""

    def __init__(self):
        self.now = 0.0
        self.pending = []
        self.periodic = []
        self.unschedule_calls = 0
        self._seq = 0

    def run_in(self, delay, action, *payload):
        self._seq += 1
        entry = (self.now + delay, self._seq, action, payload)
        self.pending.append(entry)
        return entry

    def run_every(self, interval, action):
        entry = (interval, action)
        self.periodic.append(entry)

        def _cancel():
            if entry in self.periodic:
                self.periodic.remove(entry)

        return _cancel

    def unschedule(self):
        self.pending.clear()
        self.periodic.clear()
        self.unschedule_calls += 1

    def scheduled_names(self):
        return [action.__name__ for _, _, action, _ in sorted(self.pending, key=lambda e: e[:2])]

    def run_next(self):
        entry = min(self.pending, key=lambda e: e[:2])
        self.pending.remove(entry)
        self.now = entry[0]
        entry[2](*entry[3])
        return entry

    def run_all(self):
        while self.pending:
            self.run_next()


class FakeTransport:
    """Collects outgoing paths; optionally answers through the listeners."""

    def __init__(self):
        self.sent = []
        self.replies = {}
        self._listeners = []

    def add_listener(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def send(self, path):
        self.sent.append(path)
        for prefix, body in self.replies.items():
            if path.startswith(prefix):
                self.dispatch(body)
                break

    def dispatch(self, body):
        for listener in list(self._listeners):
            listener(body)


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.async_create_task = MagicMock()
    return hass


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.title = "Living room"
    entry.unique_id = "C0A8011E:0050"
    entry.data = {"host": "192.168.1.30", "port": 80}
    entry.options = {}
    return entry


@pytest.fixture
def config():
    return DaikinSkyfiConfig(host="192.168.1.30", port=80)


@pytest.fixture
def store():
    return DeviceStateStore()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def reconciler(store, config):
    return ResponseReconciler(store, config.display_fahrenheit)


@pytest.fixture
def sequencer(store, scheduler, transport, config):
    return CommandSequencer(store, scheduler, transport, config)


@pytest.fixture
def runtime(config, store, scheduler, transport, reconciler, sequencer):
    transport.add_listener(reconciler.handle_response)
    return {
        "config": config,
        "name": "Living room",
        "unique_id": "C0A8011E:0050",
        "store": store,
        "transport": transport,
        "reconciler": reconciler,
        "scheduler": scheduler,
        "sequencer": sequencer,
    }
