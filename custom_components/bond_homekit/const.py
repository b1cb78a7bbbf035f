"""Constants for Bond HomeKit integration."""

DOMAIN = "bond_homekit"

# Configuration keys
CONF_HOST = "host"
CONF_TOKEN = "token"
CONF_SCAN_INTERVAL = "scan_interval"
CONF_INCLUDE_DIMMER = "include_dimmer"

# Default values
DEFAULT_SCAN_INTERVAL = 10
DEFAULT_INCLUDE_DIMMER = False
DEFAULT_REQUEST_TIMEOUT = 10.0

# Storage keys
STORAGE_KEY = f"{DOMAIN}_accessories"
STORAGE_VERSION = 1

# Service names
SERVICE_RELOAD = "reload"
SERVICE_LIST_ACCESSORIES = "list_accessories"

# Bond device types — http://docs-local.appbond.com/#tag/Devices
DEVICE_TYPE_CEILING_FAN = "CF"
DEVICE_TYPE_FIREPLACE = "FP"
DEVICE_TYPE_MOTORIZED_SHADES = "MS"
DEVICE_TYPE_GENERIC = "GX"
DEVICE_TYPE_LIGHT = "LT"

# Bond actions
ACTION_TOGGLE_POWER = "TogglePower"
ACTION_TURN_ON = "TurnOn"
ACTION_TURN_OFF = "TurnOff"
ACTION_TOGGLE_LIGHT = "ToggleLight"
ACTION_TOGGLE_UP_LIGHT = "ToggleUpLight"
ACTION_TOGGLE_DOWN_LIGHT = "ToggleDownLight"
ACTION_SET_BRIGHTNESS = "SetBrightness"
ACTION_SET_FLAME = "SetFlame"
ACTION_SET_SPEED = "SetSpeed"
ACTION_TOGGLE_DIRECTION = "ToggleDirection"
ACTION_OPEN = "Open"
ACTION_CLOSE = "Close"
ACTION_PRESET = "Preset"
ACTION_START_DIMMER = "StartDimmer"
ACTION_STOP = "Stop"

# Default speed scale when the device reports no max_speed property
DEFAULT_MAX_SPEED = 3

# Sub-identifiers for services that share a kind on one accessory
SUBTYPE_UP_LIGHT = "UpLight"
SUBTYPE_DOWN_LIGHT = "DownLight"
SUBTYPE_DIMMER = "Dimmer"
SUBTYPE_PRESET = "Preset"
SUBTYPE_POWER = "Power"

# Momentary button emulation: seconds before a pressed button reverts to off
BUTTON_RESET_DELAY = 0.5

# HomeKit position state values
POSITION_STATE_STOPPED = 2

# HomeKit rotation direction values
ROTATION_DIRECTION_CLOCKWISE = 0
ROTATION_DIRECTION_COUNTER_CLOCKWISE = 1
