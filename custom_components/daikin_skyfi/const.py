from enum import StrEnum

DOMAIN = "daikin_skyfi"

CONF_HOST = "host"
CONF_PORT = "port"
CONF_REFRESH_INTERVAL = "refresh_interval"
CONF_DISPLAY_FAHRENHEIT = "display_fahrenheit"
CONF_DEBUG_LOGGING = "debug_logging"

DEFAULT_NAME = "Daikin SkyFi"
DEFAULT_PORT = 80
DEFAULT_REFRESH_INTERVAL = 10
REFRESH_INTERVALS = [1, 5, 10, 15, 30]

DEFAULT_HEATING_SETPOINT = 20
DEFAULT_COOLING_SETPOINT = 21
DEFAULT_MIN_TEMP = 10
DEFAULT_MAX_TEMP = 32

# Seconds, relative to the moment the action is scheduled
COMMAND_DELAY = 1
CONTROL_POLL_DELAY = 2
SENSOR_POLL_DELAY = 4
REFRESH_SENSOR_DELAY = 2
REFRESH_CONTROL_DELAY = 4
UPDATED_NETWORK_ID_DELAY = 1
UPDATED_REFRESH_DELAY = 5
UPDATED_DEBOUNCE = 5

PATH_SET_CONTROL_INFO = "/skyfi/aircon/set_control_info"
PATH_GET_CONTROL_INFO = "/skyfi/aircon/get_control_info"
PATH_GET_SENSOR_INFO = "/skyfi/aircon/get_sensor_info"

# Store attribute names, as exposed to the hub
ATTR_TEMPERATURE = "temperature"
ATTR_PLENUM_TEMPERATURE = "plenumTemperature"
ATTR_HEATING_SETPOINT = "heatingSetpoint"
ATTR_COOLING_SETPOINT = "coolingSetpoint"
ATTR_CURR_MODE = "currMode"
ATTR_FAN_RATE = "fanRate"
ATTR_STATUS_TEXT = "statusText"
ATTR_CONNECTION = "connection"
ATTR_SWITCH = "switch"

CONNECTION_LOCAL = "local"
STATUS_IDLE = "idle"
SWITCH_ON = "on"
SWITCH_OFF = "off"


class DaikinMode(StrEnum):
    HEAT = "heat"
    COOL = "cool"
    DRY = "dry"
    FAN = "fan"
    OFF = "off"


class DaikinFanRate(StrEnum):
    AUTO = "auto"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Wire codes. OFF has no mode code; power is sent separately.
MODE_TO_CODE = {
    DaikinMode.HEAT: "1",
    DaikinMode.COOL: "2",
    DaikinMode.DRY: "7",
    DaikinMode.FAN: "0",
}
CODE_TO_MODE = {v: k for k, v in MODE_TO_CODE.items()}

FAN_RATE_TO_CODE = {
    DaikinFanRate.AUTO: "0",
    DaikinFanRate.LOW: "1",
    DaikinFanRate.MEDIUM: "3",
    DaikinFanRate.HIGH: "5",
}
CODE_TO_FAN_RATE = {v: k for k, v in FAN_RATE_TO_CODE.items()}

# Placeholders written when a field cannot be derived from the stored state
PLACEHOLDER_MODE = "1"
PLACEHOLDER_STEMP = "21"
PLACEHOLDER_FAN_RATE = "0"
