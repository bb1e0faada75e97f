"""Boundary between the bridge and the home-automation hub.

The hub framework itself is external. It reaches the bridge through the
getters and async setters on :class:`HubAdapter` and receives state pushes
through a :class:`HubSink` it supplies.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from gatebridge._constants import CLOSE_REVERT_DELAY_S
from gatebridge.client import CommandSender
from gatebridge.models.accessory import AccessoryInfo, Characteristic, SwitchEvent
from gatebridge.models.command import CommandResult
from gatebridge.models.state import DoorState, LockState
from gatebridge.state.events import DoorbellPressed, StateChange, StateEvent, StateField
from gatebridge.state.store import StateStore

_logger = logging.getLogger(__name__)

_FIELD_CHARACTERISTICS: dict[StateField, Characteristic] = {
    StateField.CURRENT_DOOR_STATE: Characteristic.CURRENT_DOOR_STATE,
    StateField.TARGET_DOOR_STATE: Characteristic.TARGET_DOOR_STATE,
    StateField.LOCK_CURRENT_STATE: Characteristic.LOCK_CURRENT_STATE,
    StateField.LOCK_TARGET_STATE: Characteristic.LOCK_TARGET_STATE,
}


class HubSink(Protocol):
    """The hub's "push update" primitive."""

    def push_update(self, characteristic: Characteristic, value: int) -> None:
        ...


class LoggingHubSink:
    """Sink that only logs pushes. Used when no hub is attached."""

    def push_update(self, characteristic: Characteristic, value: int) -> None:
        _logger.info("Hub update %s -> %s", characteristic, int(value))


class HubAdapter:
    """Exposes the store to the hub and forwards hub sets to the device.

    Readers return in-memory values without I/O. Writers record the new
    target first and only then await the device, so a slow or failing
    device never holds the store lock and never rolls the target back.
    """

    def __init__(
        self,
        store: StateStore,
        sender: CommandSender,
        sink: HubSink,
        *,
        name: str = "Gate",
        close_revert_delay: float = CLOSE_REVERT_DELAY_S,
    ) -> None:
        self._store = store
        self._sender = sender
        self._sink = sink
        self._close_revert_delay = close_revert_delay
        self._revert_handle: asyncio.TimerHandle | None = None
        self.info = AccessoryInfo(name=name)
        self._unsubscribe: Callable[[], None] | None = None
        self.attach()

    # ------------------------------------------------------------------
    # Current-state readers
    # ------------------------------------------------------------------

    def get_current_door_state(self) -> DoorState:
        return self._store.current_door_state

    def get_target_door_state(self) -> DoorState:
        return self._store.target_door_state

    def get_lock_current_state(self) -> LockState:
        return self._store.lock_current_state

    def get_lock_target_state(self) -> LockState:
        return self._store.lock_target_state

    def get_obstruction_detected(self) -> bool:
        # The device has no obstruction sensor.
        return False

    def accessory_information(self) -> AccessoryInfo:
        return self.info

    # ------------------------------------------------------------------
    # Target-state writers
    # ------------------------------------------------------------------

    async def set_target_door_state(self, value: DoorState | int) -> CommandResult | None:
        """Handle a hub request to open or close the gate.

        Closing cannot be done remotely: the request is ignored and the
        target is pushed back to the current door state shortly after.
        Returns the device command result for an open request, ``None`` for
        a rejected close.
        """
        target = DoorState(value)
        if target is DoorState.CLOSED:
            _logger.warning("Close command ignored - gate cannot be closed remotely")
            self._schedule_revert()
            return None
        if target is not DoorState.OPEN:
            raise ValueError(f"target door state must be OPEN or CLOSED, got {target.name}")

        self._store.set_door_target(target)
        return await self._sender.send_command("open")

    async def set_target_lock_state(self, value: LockState | int) -> CommandResult:
        target = LockState(value)
        self._store.set_lock_target(target)
        return await self._sender.send_command(target.command)

    # ------------------------------------------------------------------
    # Delayed close revert
    # ------------------------------------------------------------------

    def _schedule_revert(self) -> None:
        loop = asyncio.get_running_loop()
        if self._revert_handle is not None:
            self._revert_handle.cancel()
        self._revert_handle = loop.call_later(self._close_revert_delay, self._revert_door_target)

    def _revert_door_target(self) -> None:
        self._revert_handle = None
        current = self._store.revert_door_target()
        self._sink.push_update(Characteristic.TARGET_DOOR_STATE, current)

    # ------------------------------------------------------------------
    # Store -> hub
    # ------------------------------------------------------------------

    def _on_state_event(self, event: StateEvent) -> None:
        if isinstance(event, DoorbellPressed):
            self.trigger_doorbell()
            return
        if isinstance(event, StateChange):
            self._sink.push_update(_FIELD_CHARACTERISTICS[event.field], event.value)

    def trigger_doorbell(self) -> None:
        _logger.info("Doorbell triggered - access attempt when locked")
        self._sink.push_update(Characteristic.PROGRAMMABLE_SWITCH_EVENT, SwitchEvent.SINGLE_PRESS)

    def attach(self) -> None:
        """Start forwarding store changes to the hub. No-op when already attached."""
        if self._unsubscribe is None:
            self._unsubscribe = self._store.add_listener(self._on_state_event)

    def close(self) -> None:
        """Cancel a pending revert and stop listening to the store."""
        if self._revert_handle is not None:
            self._revert_handle.cancel()
            self._revert_handle = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
