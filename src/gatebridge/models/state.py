"""Hub-facing state enums and device string mapping.

Enum values are the numeric characteristic values the hub expects, so a
member can be pushed to the hub as-is.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

_logger = logging.getLogger(__name__)

_LOCKED = "locked"


class DoorState(enum.IntEnum):
    """Door position, used for both the current and the target door state."""

    OPEN = 0
    CLOSED = 1
    OPENING = 2
    CLOSING = 3
    STOPPED = 4

    @property
    def is_stable(self) -> bool:
        """``True`` for OPEN and CLOSED."""
        return self in (DoorState.OPEN, DoorState.CLOSED)

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_device(cls, value: Any) -> DoorState:
        """Map a device door string to a member.

        Anything outside the five known strings maps to ``CLOSED``.
        """
        if isinstance(value, str):
            state = _DEVICE_DOOR_STATES.get(value)
            if state is not None:
                return state
        _logger.info("Unknown door state %r from device, treating as closed", value)
        return cls.CLOSED


_DEVICE_DOOR_STATES: dict[str, DoorState] = {
    "open": DoorState.OPEN,
    "closed": DoorState.CLOSED,
    "opening": DoorState.OPENING,
    "closing": DoorState.CLOSING,
    "stopped": DoorState.STOPPED,
}


class LockState(enum.IntEnum):
    """Lock state, used for both the current and the target lock state."""

    UNSECURED = 0
    SECURED = 1

    @property
    def command(self) -> str:
        """Device command that drives the lock into this state."""
        return "lock" if self is LockState.SECURED else "unlock"

    @classmethod
    def from_device(cls, value: Any) -> LockState:
        """``"locked"`` is secured; every other value is unsecured."""
        return cls.SECURED if value == _LOCKED else cls.UNSECURED
