"""State change events.

The store reports every mutation as one of these records. Only the
state/store layer creates them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StateField(StrEnum):
    CURRENT_DOOR_STATE = "current_door_state"
    TARGET_DOOR_STATE = "target_door_state"
    LOCK_CURRENT_STATE = "lock_current_state"
    LOCK_TARGET_STATE = "lock_target_state"


class UpdateSource(StrEnum):
    DEVICE = "device"
    HUB = "hub"
    DERIVED = "derived"


class StateChange(BaseModel):
    """A single field mutation."""

    model_config = ConfigDict(frozen=True)

    field: StateField
    previous: int
    value: int
    source: UpdateSource
    observed_at: datetime = Field(default_factory=_utcnow)


class DoorbellPressed(BaseModel):
    """Edge event for a doorbell press. Carries no state."""

    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(default_factory=_utcnow)


StateEvent = StateChange | DoorbellPressed


class StatusUpdate(BaseModel):
    """Everything one device status report changed."""

    model_config = ConfigDict(frozen=True)

    changes: tuple[StateChange, ...] = ()
    doorbell: bool = False

    @property
    def changed_fields(self) -> frozenset[StateField]:
        return frozenset(change.field for change in self.changes)

    @property
    def is_noop(self) -> bool:
        return not self.changes and not self.doorbell
