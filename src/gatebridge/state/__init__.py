"""State/store layer.

This package is the single source of truth for the mirrored door and lock
state. Device status reports, hub set requests and derived corrections are
all merged here.
"""

from gatebridge.state.events import (
    DoorbellPressed,
    StateChange,
    StateEvent,
    StateField,
    StatusUpdate,
    UpdateSource,
)
from gatebridge.state.store import GateState, StateListener, StateStore

__all__ = [
    "DoorbellPressed",
    "GateState",
    "StateChange",
    "StateEvent",
    "StateField",
    "StateListener",
    "StateStore",
    "StatusUpdate",
    "UpdateSource",
]
