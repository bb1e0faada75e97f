"""gatebridge - Async bridge between an HTTP gate controller and a home hub."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gatebridge")
except PackageNotFoundError:
    __version__ = "0+local"
from gatebridge.bridge import GateBridge
from gatebridge.client import CommandSender, DeviceClient
from gatebridge.config import BridgeConfig
from gatebridge.exceptions import (
    GateBridgeError,
    GateConfigError,
    GateListenerError,
    GateTransportError,
)
from gatebridge.hub import HubAdapter, HubSink, LoggingHubSink
from gatebridge.ingestion import StatusIngestor
from gatebridge.models import (
    AccessoryInfo,
    Characteristic,
    CommandResult,
    DeviceStatus,
    DoorState,
    LockState,
    SwitchEvent,
)
from gatebridge.state import GateState, StateField, StateStore, StatusUpdate

__all__ = [
    "__version__",
    "AccessoryInfo",
    "BridgeConfig",
    "Characteristic",
    "CommandResult",
    "CommandSender",
    "DeviceClient",
    "DeviceStatus",
    "DoorState",
    "GateBridge",
    "GateBridgeError",
    "GateConfigError",
    "GateListenerError",
    "GateState",
    "GateTransportError",
    "HubAdapter",
    "HubSink",
    "LockState",
    "LoggingHubSink",
    "StateField",
    "StateStore",
    "StatusIngestor",
    "StatusUpdate",
    "SwitchEvent",
]
