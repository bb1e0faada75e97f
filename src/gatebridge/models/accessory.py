"""Hub characteristic identifiers and accessory metadata."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from gatebridge._constants import MANUFACTURER, MODEL, SERIAL_NUMBER


class Characteristic(enum.StrEnum):
    """Hub characteristics the bridge reads, writes or pushes."""

    CURRENT_DOOR_STATE = "CurrentDoorState"
    TARGET_DOOR_STATE = "TargetDoorState"
    OBSTRUCTION_DETECTED = "ObstructionDetected"
    LOCK_CURRENT_STATE = "LockCurrentState"
    LOCK_TARGET_STATE = "LockTargetState"
    PROGRAMMABLE_SWITCH_EVENT = "ProgrammableSwitchEvent"


class SwitchEvent(enum.IntEnum):
    """``ProgrammableSwitchEvent`` values. The doorbell only ever sends a single press."""

    SINGLE_PRESS = 0


class AccessoryInfo(BaseModel):
    """Static accessory information published to the hub."""

    model_config = ConfigDict(frozen=True)

    name: str
    manufacturer: str = MANUFACTURER
    model: str = MODEL
    serial_number: str = SERIAL_NUMBER

    @property
    def door_service_name(self) -> str:
        return self.name

    @property
    def lock_service_name(self) -> str:
        return f"{self.name} Lock"

    @property
    def doorbell_service_name(self) -> str:
        return f"{self.name} Bell"
