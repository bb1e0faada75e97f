from __future__ import annotations

import threading

import pytest

from gatebridge.models.state import DoorState, LockState
from gatebridge.state.events import DoorbellPressed, StateChange, StateEvent, StateField, UpdateSource
from gatebridge.state.store import GateState, StateStore


def _recording_store(initial: GateState | None = None) -> tuple[StateStore, list[StateEvent]]:
    store = StateStore(initial)
    events: list[StateEvent] = []
    store.add_listener(events.append)
    return store, events


def test_defaults_are_closed_and_secured() -> None:
    snapshot = StateStore().snapshot()

    assert snapshot.current_door_state is DoorState.CLOSED
    assert snapshot.target_door_state is DoorState.CLOSED
    assert snapshot.lock_current_state is LockState.SECURED
    assert snapshot.lock_target_state is LockState.SECURED


@pytest.mark.parametrize(
    ("device_value", "expected"),
    [
        ("open", DoorState.OPEN),
        ("closed", DoorState.CLOSED),
        ("opening", DoorState.OPENING),
        ("closing", DoorState.CLOSING),
        ("stopped", DoorState.STOPPED),
        ("ajar", DoorState.CLOSED),
        ("OPEN", DoorState.CLOSED),
        (3, DoorState.CLOSED),
        (None, DoorState.CLOSED),
    ],
)
def test_door_state_mapping(device_value: object, expected: DoorState) -> None:
    store = StateStore(GateState(current_door_state=DoorState.STOPPED))

    store.apply_device_status({"doorState": device_value})

    assert store.current_door_state is expected


def test_same_door_state_twice_notifies_once() -> None:
    store, events = _recording_store()

    first = store.apply_device_status({"doorState": "opening"})
    second = store.apply_device_status({"doorState": "opening"})

    assert first.changed_fields == {StateField.CURRENT_DOOR_STATE}
    assert second.changed_fields == frozenset()
    assert second.is_noop
    assert len(events) == 1


def test_open_report_forces_target_open() -> None:
    store, events = _recording_store()

    update = store.apply_device_status({"doorState": "open"})

    assert store.target_door_state is DoorState.OPEN
    assert update.changed_fields == {StateField.CURRENT_DOOR_STATE, StateField.TARGET_DOOR_STATE}
    derived = [e for e in events if isinstance(e, StateChange) and e.field is StateField.TARGET_DOOR_STATE]
    assert derived[0].source is UpdateSource.DERIVED
    assert derived[0].value == DoorState.OPEN


def test_closed_report_forces_target_closed() -> None:
    store = StateStore(GateState(current_door_state=DoorState.OPEN, target_door_state=DoorState.OPEN))

    store.apply_device_status({"doorState": "closed"})

    assert store.current_door_state is DoorState.CLOSED
    assert store.target_door_state is DoorState.CLOSED


def test_transient_report_leaves_target_alone() -> None:
    store = StateStore(GateState(target_door_state=DoorState.OPEN))

    update = store.apply_device_status({"doorState": "opening"})

    assert store.current_door_state is DoorState.OPENING
    assert store.target_door_state is DoorState.OPEN
    assert update.changed_fields == {StateField.CURRENT_DOOR_STATE}


def test_stable_report_with_matching_target_only_changes_current() -> None:
    store = StateStore(GateState(current_door_state=DoorState.OPENING, target_door_state=DoorState.OPEN))

    update = store.apply_device_status({"doorState": "open"})

    assert update.changed_fields == {StateField.CURRENT_DOOR_STATE}


def test_explicit_target_is_applied_after_stability_rule() -> None:
    store = StateStore()

    store.apply_device_status({"doorState": "open", "targetDoorState": "closed"})

    assert store.current_door_state is DoorState.OPEN
    assert store.target_door_state is DoorState.CLOSED


def test_explicit_target_alone() -> None:
    store, events = _recording_store()

    update = store.apply_device_status({"targetDoorState": "open"})

    assert store.target_door_state is DoorState.OPEN
    assert store.current_door_state is DoorState.CLOSED
    assert update.changed_fields == {StateField.TARGET_DOOR_STATE}
    assert len(events) == 1


@pytest.mark.parametrize(
    ("device_value", "expected"),
    [
        ("locked", LockState.SECURED),
        ("unlocked", LockState.UNSECURED),
        ("jammed", LockState.UNSECURED),
        (True, LockState.UNSECURED),
    ],
)
def test_lock_state_sets_current_and_target(device_value: object, expected: LockState) -> None:
    store = StateStore(GateState(lock_current_state=LockState.UNSECURED, lock_target_state=LockState.UNSECURED))

    store.apply_device_status({"lockState": device_value})

    assert store.lock_current_state is expected
    assert store.lock_target_state is expected


def test_lock_report_realigns_diverged_target() -> None:
    store = StateStore()
    store.set_lock_target(LockState.UNSECURED)

    update = store.apply_device_status({"lockState": "locked"})

    assert store.lock_target_state is LockState.SECURED
    assert update.changed_fields == {StateField.LOCK_TARGET_STATE}


def test_unlock_report_changes_both_lock_fields() -> None:
    store, events = _recording_store()

    update = store.apply_device_status({"lockState": "unlocked"})

    assert update.changed_fields == {StateField.LOCK_CURRENT_STATE, StateField.LOCK_TARGET_STATE}
    assert [e.field for e in events if isinstance(e, StateChange)] == [
        StateField.LOCK_CURRENT_STATE,
        StateField.LOCK_TARGET_STATE,
    ]


def test_doorbell_true_emits_exactly_one_event() -> None:
    store, events = _recording_store()

    update = store.apply_device_status({"doorbell": True})

    assert update.doorbell is True
    assert update.changed_fields == frozenset()
    assert len([e for e in events if isinstance(e, DoorbellPressed)]) == 1


@pytest.mark.parametrize("payload", [{"doorbell": False}, {}, {"doorbell": "true"}, {"doorbell": 1}])
def test_doorbell_not_triggered(payload: dict[str, object]) -> None:
    store, events = _recording_store()

    update = store.apply_device_status(payload)

    assert update.doorbell is False
    assert events == []


def test_doorbell_rings_on_every_report() -> None:
    store, events = _recording_store()

    store.apply_device_status({"doorbell": True})
    store.apply_device_status({"doorbell": True})

    assert len(events) == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"battery": 80, "firmware": "1.2"},
        {"door_state": "open", "lock_state": "unlocked"},
        {"target_door_state": "open"},
        {"DoorState": "open", "lockstate": "unlocked"},
    ],
)
def test_unknown_fields_are_ignored(payload: dict[str, object]) -> None:
    store, events = _recording_store()

    update = store.apply_device_status(payload)

    assert update.is_noop
    assert events == []
    assert store.snapshot() == GateState()


def test_hub_sets_are_not_echoed_to_listeners() -> None:
    store, events = _recording_store()

    change = store.set_door_target(DoorState.OPEN)
    store.set_lock_target(LockState.UNSECURED)

    assert change is not None
    assert change.source is UpdateSource.HUB
    assert store.target_door_state is DoorState.OPEN
    assert store.lock_target_state is LockState.UNSECURED
    assert store.lock_current_state is LockState.SECURED
    assert events == []


def test_revert_door_target_uses_current_state() -> None:
    store = StateStore(GateState(current_door_state=DoorState.OPENING))
    store.set_door_target(DoorState.CLOSED)

    reverted = store.revert_door_target()

    assert reverted is DoorState.OPENING
    assert store.target_door_state is DoorState.OPENING


def test_unsubscribe_stops_notifications() -> None:
    store = StateStore()
    events: list[StateEvent] = []
    unsubscribe = store.add_listener(events.append)

    unsubscribe()
    store.apply_device_status({"doorState": "open"})

    assert events == []


def test_failing_listener_does_not_block_others() -> None:
    store = StateStore()
    events: list[StateEvent] = []

    def _boom(_event: StateEvent) -> None:
        raise RuntimeError("listener failure")

    store.add_listener(_boom)
    store.add_listener(events.append)

    store.apply_device_status({"doorState": "open"})

    assert store.current_door_state is DoorState.OPEN
    assert len(events) == 2


def test_concurrent_reports_and_hub_sets_stay_consistent() -> None:
    store = StateStore()
    events: list[StateEvent] = []
    store.add_listener(events.append)
    updates: list[list[StateChange]] = []
    updates_lock = threading.Lock()
    start = threading.Barrier(6)

    def _device(lock_values: tuple[str, str], door_values: tuple[str, ...]) -> None:
        start.wait()
        for i in range(200):
            update = store.apply_device_status(
                {"lockState": lock_values[i % 2], "doorState": door_values[i % len(door_values)]}
            )
            with updates_lock:
                updates.append(list(update.changes))

    def _hub_lock() -> None:
        start.wait()
        for i in range(200):
            store.set_lock_target(LockState(i % 2))

    def _hub_door() -> None:
        start.wait()
        for i in range(200):
            store.set_door_target(DoorState.OPEN if i % 2 else DoorState.CLOSED)
            store.revert_door_target()

    threads = [
        threading.Thread(target=_device, args=(("locked", "unlocked"), ("open", "opening"))),
        threading.Thread(target=_device, args=(("unlocked", "locked"), ("closed", "closing"))),
        threading.Thread(target=_device, args=(("locked", "jammed"), ("stopped", "open", "closed"))),
        threading.Thread(target=_hub_lock),
        threading.Thread(target=_hub_door),
        threading.Thread(target=_hub_lock),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = store.apply_device_status({"lockState": "unlocked", "doorState": "opening"})
    updates.append(list(final.changes))
    final = store.apply_device_status({"doorState": "open"})
    updates.append(list(final.changes))

    assert store.lock_target_state == store.lock_current_state == LockState.UNSECURED
    assert store.current_door_state is DoorState.OPEN
    assert store.target_door_state is DoorState.OPEN

    # Listeners see exactly the device-driven changes, one event per returned change.
    returned = [change for changes in updates for change in changes]
    assert len(events) == len(returned)
    assert {id(e) for e in events} == {id(c) for c in returned}
    for changes in updates:
        fields = [change.field for change in changes]
        # Every change within one report is for a distinct field.
        assert len(fields) == len(set(fields))
        for change in changes:
            if change.field is StateField.TARGET_DOOR_STATE and change.source is UpdateSource.DERIVED:
                assert change.value in (DoorState.OPEN, DoorState.CLOSED)
