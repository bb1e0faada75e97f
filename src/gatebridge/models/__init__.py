"""Typed models shared across the bridge."""

from gatebridge.models.accessory import AccessoryInfo, Characteristic, SwitchEvent
from gatebridge.models.command import CommandResult
from gatebridge.models.state import DoorState, LockState
from gatebridge.models.status import DeviceStatus

__all__ = [
    "AccessoryInfo",
    "Characteristic",
    "CommandResult",
    "DeviceStatus",
    "DoorState",
    "LockState",
    "SwitchEvent",
]
