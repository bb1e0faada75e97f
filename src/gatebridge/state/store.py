"""In-memory store for the mirrored gate state.

This is the only component allowed to mutate the four mirrored fields.
Device reports, hub set requests and the delayed close revert all go
through one lock, so a read-modify-write such as the stability rule cannot
interleave with another writer.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from gatebridge._redact import redact_for_log
from gatebridge.models.state import DoorState, LockState
from gatebridge.models.status import DeviceStatus
from gatebridge.state.events import (
    DoorbellPressed,
    StateChange,
    StateEvent,
    StateField,
    StatusUpdate,
    UpdateSource,
)

_logger = logging.getLogger(__name__)

StateListener = Callable[[StateEvent], None]


class GateState(BaseModel):
    """Point-in-time copy of the four mirrored fields."""

    model_config = ConfigDict(frozen=True)

    current_door_state: DoorState = DoorState.CLOSED
    target_door_state: DoorState = DoorState.CLOSED
    lock_current_state: LockState = LockState.SECURED
    lock_target_state: LockState = LockState.SECURED


class StateStore:
    """Holds the current/target door and lock states.

    Listeners registered with :meth:`add_listener` receive a
    :class:`StateChange` for every field a device report actually changed,
    and a :class:`DoorbellPressed` for each doorbell report. Notifications
    are delivered inside the critical section, so they arrive in mutation
    order. Listeners must not block.
    """

    def __init__(self, initial: GateState | None = None) -> None:
        state = initial or GateState()
        self._values: dict[StateField, int] = {
            StateField.CURRENT_DOOR_STATE: state.current_door_state,
            StateField.TARGET_DOOR_STATE: state.target_door_state,
            StateField.LOCK_CURRENT_STATE: state.lock_current_state,
            StateField.LOCK_TARGET_STATE: state.lock_target_state,
        }
        self._lock = threading.RLock()
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StateEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.exception("State listener %r failed for %r", listener, event)

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def current_door_state(self) -> DoorState:
        return DoorState(self._values[StateField.CURRENT_DOOR_STATE])

    @property
    def target_door_state(self) -> DoorState:
        return DoorState(self._values[StateField.TARGET_DOOR_STATE])

    @property
    def lock_current_state(self) -> LockState:
        return LockState(self._values[StateField.LOCK_CURRENT_STATE])

    @property
    def lock_target_state(self) -> LockState:
        return LockState(self._values[StateField.LOCK_TARGET_STATE])

    def get(self, field: StateField) -> int:
        return self._values[field]

    def snapshot(self) -> GateState:
        with self._lock:
            return GateState(
                current_door_state=self.current_door_state,
                target_door_state=self.target_door_state,
                lock_current_state=self.lock_current_state,
                lock_target_state=self.lock_target_state,
            )

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def _set(self, field: StateField, value: int, source: UpdateSource) -> StateChange | None:
        """Write *value* if it differs. Caller holds the lock."""
        previous = self._values[field]
        if previous == value:
            return None
        self._values[field] = value
        return StateChange(field=field, previous=previous, value=value, source=source)

    def apply_device_status(self, payload: Mapping[str, Any] | DeviceStatus) -> StatusUpdate:
        """Apply a (partial) device status report.

        Fields are applied in order door state, target door state, lock
        state, doorbell; each independently and only when the mapped value
        differs from the stored one.
        """
        status = payload if isinstance(payload, DeviceStatus) else DeviceStatus.model_validate(dict(payload))
        _logger.info("Received status update: %s", redact_for_log(status.raw))

        with self._lock:
            changes: list[StateChange] = []

            door_state = status.mapped_door_state
            if door_state is not None:
                change = self._set(StateField.CURRENT_DOOR_STATE, door_state, UpdateSource.DEVICE)
                if change is not None:
                    changes.append(change)
                    if door_state.is_stable:
                        target = DoorState.OPEN if door_state is DoorState.OPEN else DoorState.CLOSED
                        derived = self._set(StateField.TARGET_DOOR_STATE, target, UpdateSource.DERIVED)
                        if derived is not None:
                            changes.append(derived)
                    _logger.info("Door state updated to: %s", door_state.label)

            target_door_state = status.mapped_target_door_state
            if target_door_state is not None:
                change = self._set(StateField.TARGET_DOOR_STATE, target_door_state, UpdateSource.DEVICE)
                if change is not None:
                    changes.append(change)

            lock_state = status.mapped_lock_state
            if lock_state is not None:
                lock_changes = [
                    self._set(StateField.LOCK_CURRENT_STATE, lock_state, UpdateSource.DEVICE),
                    self._set(StateField.LOCK_TARGET_STATE, lock_state, UpdateSource.DEVICE),
                ]
                changes.extend(change for change in lock_changes if change is not None)
                if lock_changes[0] is not None:
                    _logger.info("Lock state updated to: %s", lock_state.name.lower())

            for change in changes:
                self._notify(change)

            doorbell = status.doorbell_pressed
            if doorbell:
                _logger.info("Doorbell triggered")
                self._notify(DoorbellPressed())

        return StatusUpdate(changes=tuple(changes), doorbell=doorbell)

    def set_door_target(self, state: DoorState) -> StateChange | None:
        """Record a hub-requested door target. Hub sets are not echoed to listeners."""
        with self._lock:
            return self._set(StateField.TARGET_DOOR_STATE, DoorState(state), UpdateSource.HUB)

    def set_lock_target(self, state: LockState) -> StateChange | None:
        """Record a hub-requested lock target before the device confirms it."""
        with self._lock:
            return self._set(StateField.LOCK_TARGET_STATE, LockState(state), UpdateSource.HUB)

    def revert_door_target(self) -> DoorState:
        """Align the door target with the current door state and return it."""
        with self._lock:
            current = self.current_door_state
            self._set(StateField.TARGET_DOOR_STATE, current, UpdateSource.DERIVED)
            return current
