"""Inbound device status payload model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from gatebridge.models.state import DoorState, LockState


class DeviceStatus(BaseModel):
    """A partial status report pushed by the device.

    Every field is optional. Field values are kept as sent so that the
    mapping rules, not validation, decide what an odd value means: an
    unknown door string becomes ``CLOSED`` rather than a rejected request.
    Presence is tracked through ``model_fields_set``, so a key sent as JSON
    ``null`` is still treated as reported.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
    )

    door_state: Any = None
    target_door_state: Any = None
    lock_state: Any = None
    doorbell: Any = None

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original payload as received."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {**values, "raw": dict(values)}

    def has(self, field_name: str) -> bool:
        """Whether the device reported *field_name* at all."""
        return field_name in self.model_fields_set

    @property
    def mapped_door_state(self) -> DoorState | None:
        if not self.has("door_state"):
            return None
        return DoorState.from_device(self.door_state)

    @property
    def mapped_target_door_state(self) -> DoorState | None:
        if not self.has("target_door_state"):
            return None
        return DoorState.from_device(self.target_door_state)

    @property
    def mapped_lock_state(self) -> LockState | None:
        if not self.has("lock_state"):
            return None
        return LockState.from_device(self.lock_state)

    @property
    def doorbell_pressed(self) -> bool:
        # Only a real JSON ``true`` rings the bell.
        return self.doorbell is True
