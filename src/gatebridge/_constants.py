"""Internal constants shared across the bridge."""

DEFAULT_NAME = "Gate"
DEFAULT_HTTP_HOST = "0.0.0.0"
DEFAULT_HTTP_PORT = 8080

STATUS_PATH = "/status"
COMMAND_PATH = "/command"

# Delay before a rejected close request is reverted, letting the hub's own
# set confirmation land first.
CLOSE_REVERT_DELAY_S = 0.1

MANUFACTURER = "ap0"
MODEL = "Gate Controller"
SERIAL_NUMBER = "001"

INVALID_JSON_ERROR = "Invalid JSON"
