"""Tests for command sequencing."""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from custom_components.daikin_skyfi.errors import DaikinSkyfiValidationError
from custom_components.daikin_skyfi.models import DaikinSkyfiConfig
from custom_components.daikin_skyfi.sequencer import CommandSequencer, SequencePhase
from custom_components.daikin_skyfi.state import DeviceStateStore

SET = "/skyfi/aircon/set_control_info"
CONTROL = "/skyfi/aircon/get_control_info"
SENSOR = "/skyfi/aircon/get_sensor_info"


def test_heat_records_intent_before_sending(sequencer, store, scheduler, transport):
    sequencer.heat()

    assert store.get("currMode") == "heat"
    assert store.get("statusText") == "heat"
    assert transport.sent == []
    assert sequencer.phase == SequencePhase.INTENT_RECORDED
    assert scheduler.pending[0][0] == 1
    assert scheduler.scheduled_names() == ["send_device_command"]


def test_command_then_control_then_sensor_poll(sequencer, scheduler, transport, store):
    sequencer.cool()
    scheduler.run_next()

    assert transport.sent == [f"{SET}?pow=1&mode=2&stemp=21&shum=0&f_rate=0&f_dir=0"]
    assert store.get("connection") == "local"
    assert sequencer.phase == SequencePhase.AWAITING_CONTROL_POLL
    assert [e[0] for e in sorted(scheduler.pending)] == [3, 5]

    scheduler.run_next()
    assert transport.sent[-1] == CONTROL
    assert sequencer.phase == SequencePhase.AWAITING_SENSOR_POLL

    scheduler.run_next()
    assert transport.sent[-1] == SENSOR
    assert sequencer.phase == SequencePhase.IDLE


def test_full_loop_reconciles_device_answers(runtime, scheduler, transport, store):
    transport.replies = {
        CONTROL: "ret=OK,pow=1,mode=1,stemp=23.0,f_rate=5",
        SENSOR: "ret=OK,htemp=19.5,otemp=8.0",
    }

    runtime["sequencer"].set_heating_setpoint(23)
    scheduler.run_all()

    assert transport.sent == [
        f"{SET}?pow=1&mode=1&stemp=23&shum=0&f_rate=0&f_dir=0",
        CONTROL,
        SENSOR,
    ]
    assert store.get("heatingSetpoint") == 23.0
    assert store.get("fanRate") == "high"
    assert store.get("switch") == "on"
    assert store.get("temperature") == 19.5


def test_encode_reads_store_at_actuation_time(sequencer, scheduler, transport):
    sequencer.heat()
    sequencer.set_cooling_setpoint(25)

    scheduler.run_next()
    scheduler.run_next()

    sets = [path for path in transport.sent if path.startswith(SET)]
    assert sets == [f"{SET}?pow=1&mode=2&stemp=25&shum=0&f_rate=0&f_dir=0"] * 2


def test_off_sends_power_zero(sequencer, scheduler, transport, store):
    store.apply({"currMode": "cool", "fanRate": "low"})

    sequencer.off()

    assert store.get("currMode") == "off"
    assert store.get("statusText") == "off"
    scheduler.run_next()
    assert transport.sent == [f"{SET}?pow=0&mode=1&stemp=21&shum=0&f_rate=1&f_dir=0"]


def test_on_resumes_recorded_mode(sequencer, scheduler, transport, store):
    store.apply({"currMode": "cool", "coolingSetpoint": 24})

    sequencer.on()
    scheduler.run_next()

    assert store.get("currMode") == "cool"
    assert transport.sent == [f"{SET}?pow=1&mode=2&stemp=24&shum=0&f_rate=0&f_dir=0"]


@pytest.mark.parametrize(
    ("command", "mode", "code"),
    [("heat", "heat", "1"), ("cool", "cool", "2"), ("dry", "dry", "7"), ("fan", "fan", "0")],
)
def test_mode_commands(sequencer, scheduler, transport, store, command, mode, code):
    getattr(sequencer, command)()
    scheduler.run_next()

    assert store.get("currMode") == mode
    assert store.get("statusText") == mode
    assert f"&mode={code}&" in transport.sent[0]


def test_set_mode_accepts_names(sequencer, store):
    sequencer.set_mode("Dry")

    assert store.get("currMode") == "dry"


def test_set_mode_off_is_off(sequencer, scheduler, transport, store):
    sequencer.set_mode("off")
    scheduler.run_next()

    assert store.get("currMode") == "off"
    assert transport.sent[0].startswith(f"{SET}?pow=0")


def test_set_mode_rejects_unknown(sequencer, scheduler, store):
    with pytest.raises(DaikinSkyfiValidationError):
        sequencer.set_mode("turbo")

    assert store.get("currMode") is None
    assert scheduler.pending == []


def test_setpoints_switch_mode_and_keep_the_other(sequencer, store):
    sequencer.set_heating_setpoint(19)
    sequencer.set_cooling_setpoint(26)

    assert store.get("currMode") == "cool"
    assert store.get("heatingSetpoint") == 19
    assert store.get("coolingSetpoint") == 26


def test_set_fan_rate(sequencer, scheduler, transport, store):
    store.set("currMode", "fan")

    sequencer.set_fan_rate("Medium")
    scheduler.run_next()

    assert store.get("fanRate") == "medium"
    assert transport.sent[0] == f"{SET}?pow=1&mode=0&stemp=21&shum=0&f_rate=3&f_dir=0"


def test_set_fan_rate_while_off_keeps_unit_off(sequencer, scheduler, transport, store):
    store.set("currMode", "off")

    sequencer.set_fan_rate("high")
    scheduler.run_next()

    assert transport.sent[0].startswith(f"{SET}?pow=0")


def test_set_fan_rate_rejects_unknown(sequencer):
    with pytest.raises(DaikinSkyfiValidationError):
        sequencer.set_fan_rate("turbo")


def test_temp_up_in_cool(sequencer, store):
    store.apply({"currMode": "cool", "coolingSetpoint": 24, "heatingSetpoint": 20})

    sequencer.temp_up()

    assert store.get("coolingSetpoint") == 25
    assert store.get("heatingSetpoint") == 20


def test_temp_down_in_heat(sequencer, store):
    store.apply({"currMode": "heat", "heatingSetpoint": 21})

    sequencer.temp_down()

    assert store.get("heatingSetpoint") == 20
    assert store.get("coolingSetpoint") == 21


def test_temp_up_uses_default_when_setpoint_missing(sequencer, store):
    store.apply({"currMode": "heat", "heatingSetpoint": None})

    sequencer.temp_up()

    assert store.get("heatingSetpoint") == 21


@pytest.mark.parametrize("mode", ["off", "dry", "fan", None])
def test_temp_up_without_setpoint_mode_is_noop(sequencer, scheduler, store, mode):
    store.set("currMode", mode)
    before = store.snapshot()

    sequencer.temp_up()
    sequencer.temp_down()

    assert store.snapshot() == before
    assert scheduler.pending == []


def test_refresh_polls_sensor_then_control(sequencer, scheduler, transport):
    sequencer.poll()

    assert [e[0] for e in sorted(scheduler.pending)] == [2, 4]
    scheduler.run_all()
    assert transport.sent == [SENSOR, CONTROL]


def test_updated_rebuilds_schedules(scheduler, transport, store):
    clock = MagicMock(return_value=100.0)
    on_network_id = MagicMock()
    config = DaikinSkyfiConfig(host="192.168.1.30", port=80, refresh_interval=15)
    sequencer = CommandSequencer(
        store, scheduler, transport, config, on_network_id=on_network_id, clock=clock
    )
    sequencer.heat()

    assert sequencer.updated() is True

    assert scheduler.unschedule_calls == 1
    assert scheduler.scheduled_names() == ["_publish_network_id", "refresh"]
    assert scheduler.periodic == [(timedelta(minutes=15), sequencer.refresh)]

    scheduler.run_next()
    on_network_id.assert_called_once_with("C0A8011E:0050")


def test_updated_is_debounced(scheduler, transport, store):
    clock = MagicMock(return_value=100.0)
    sequencer = CommandSequencer(
        store, scheduler, transport, DaikinSkyfiConfig(host="10.0.0.2"), clock=clock
    )

    assert sequencer.updated() is True
    clock.return_value = 103.0
    new_config = DaikinSkyfiConfig(host="10.0.0.2", refresh_interval=1)
    assert sequencer.updated(new_config) is False
    assert sequencer.config is new_config
    assert scheduler.unschedule_calls == 1
    assert scheduler.periodic == [(timedelta(minutes=1), sequencer.refresh)]

    # The debounce window restarts from the last call
    clock.return_value = 107.0
    assert sequencer.updated() is False
    clock.return_value = 112.0
    assert sequencer.updated() is True
    assert scheduler.periodic == [(timedelta(minutes=1), sequencer.refresh)]


def test_shutdown_unschedules(sequencer, scheduler):
    sequencer.heat()

    sequencer.shutdown()

    assert scheduler.pending == []
    assert sequencer.phase == SequencePhase.IDLE


def test_fahrenheit_seeds_send_celsius_setpoint(scheduler, transport):
    store = DeviceStateStore(display_fahrenheit=True)
    config = DaikinSkyfiConfig(host="192.168.1.30", display_fahrenheit=True)
    sequencer = CommandSequencer(store, scheduler, transport, config)

    sequencer.heat()
    scheduler.run_next()

    assert store.get("heatingSetpoint") == 68
    assert transport.sent[0] == f"{SET}?pow=1&mode=1&stemp=20&shum=0&f_rate=0&f_dir=0"


def test_unit_change_converts_both_setpoints(sequencer, store, scheduler):
    store.apply({"currMode": "cool", "heatingSetpoint": 22, "coolingSetpoint": 25})

    sequencer.updated(DaikinSkyfiConfig(host="192.168.1.30", display_fahrenheit=True))

    assert store.get("heatingSetpoint") == 72
    assert store.get("coolingSetpoint") == 77
    assert "&mode=2&stemp=25&" in sequencer.send_device_command()

    # Within the debounce window the conversion still happens
    sequencer.updated(DaikinSkyfiConfig(host="192.168.1.30", display_fahrenheit=False))

    assert store.get("heatingSetpoint") == 22
    assert store.get("coolingSetpoint") == 25


def test_temp_up_default_follows_display_unit(scheduler, transport, store):
    config = DaikinSkyfiConfig(host="192.168.1.30", display_fahrenheit=True)
    sequencer = CommandSequencer(store, scheduler, transport, config)
    store.apply({"currMode": "heat", "heatingSetpoint": None})

    sequencer.temp_up()

    assert store.get("heatingSetpoint") == 69


def test_refresh_interval_change_inside_debounce_window(scheduler, transport, store):
    clock = MagicMock(return_value=100.0)
    sequencer = CommandSequencer(
        store, scheduler, transport, DaikinSkyfiConfig(host="10.0.0.2"), clock=clock
    )
    sequencer.updated()

    clock.return_value = 102.0
    rebuilt = sequencer.updated(DaikinSkyfiConfig(host="10.0.0.2", refresh_interval=30))

    assert rebuilt is False
    assert scheduler.unschedule_calls == 1
    assert scheduler.periodic == [(timedelta(minutes=30), sequencer.refresh)]
    assert scheduler.scheduled_names() == ["_publish_network_id", "refresh"]


def test_phase_listeners(sequencer, scheduler):
    listener = MagicMock()
    remove = sequencer.add_phase_listener(listener)

    sequencer.heat()
    scheduler.run_next()

    assert [c[0][0] for c in listener.call_args_list] == [
        SequencePhase.INTENT_RECORDED,
        SequencePhase.COMMAND_SENT,
        SequencePhase.AWAITING_CONTROL_POLL,
    ]

    remove()
    scheduler.run_next()
    assert listener.call_count == 3
