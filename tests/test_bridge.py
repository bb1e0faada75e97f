from __future__ import annotations

import socket
from dataclasses import dataclass, field

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from gatebridge.bridge import GateBridge
from gatebridge.config import BridgeConfig
from gatebridge.models.accessory import Characteristic
from gatebridge.models.state import DoorState, LockState


@dataclass
class RecordingSink:
    pushes: list[tuple[Characteristic, int]] = field(default_factory=list)

    def push_update(self, characteristic: Characteristic, value: int) -> None:
        self.pushes.append((characteristic, int(value)))


@pytest.mark.asyncio
async def test_status_push_reaches_hub_and_hub_set_reaches_device() -> None:
    commands: list[dict[str, object]] = []

    async def handle_command(request: web.Request) -> web.Response:
        commands.append(await request.json())
        return web.json_response({"accepted": True})

    device_app = web.Application()
    device_app.router.add_post("/command", handle_command)

    sink = RecordingSink()
    async with TestServer(device_app) as device:
        config = BridgeConfig(
            http_host="127.0.0.1",
            http_port=0,
            device_api_url=f"http://{device.host}:{device.port}",
        )
        async with GateBridge(config, sink) as bridge:
            assert bridge.listener_error is None
            port = bridge.ingestor.bound_port

            async with aiohttp.ClientSession() as session:
                async with session.post(
                    f"http://127.0.0.1:{port}/status",
                    json={"lockState": "unlocked", "doorbell": True},
                ) as resp:
                    assert resp.status == 200

            result = await bridge.hub.set_target_lock_state(LockState.SECURED)

    assert result.success
    assert result.response == {"accepted": True}
    assert commands == [{"command": "lock"}]
    assert (Characteristic.LOCK_CURRENT_STATE, LockState.UNSECURED) in sink.pushes
    assert (Characteristic.PROGRAMMABLE_SWITCH_EVENT, 0) in sink.pushes


@pytest.mark.asyncio
async def test_bind_failure_is_reported_not_raised() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        port = int(sock.getsockname()[1])

        bridge = GateBridge(BridgeConfig(http_host="127.0.0.1", http_port=port), RecordingSink())
        started = await bridge.start()
        try:
            assert started is False
            assert bridge.listener_error is not None
            # Hub reads keep working without the listener.
            assert bridge.hub.get_current_door_state() is DoorState.CLOSED
        finally:
            await bridge.stop()


@pytest.mark.asyncio
async def test_without_device_url_commands_fail_fast() -> None:
    bridge = GateBridge(BridgeConfig(http_host="127.0.0.1", http_port=0), RecordingSink())

    result = await bridge.hub.set_target_door_state(DoorState.OPEN)
    await bridge.stop()

    assert result is not None and not result.success
    assert bridge.store.target_door_state is DoorState.OPEN


@pytest.mark.asyncio
async def test_restarted_bridge_still_pushes_status_to_hub() -> None:
    sink = RecordingSink()
    bridge = GateBridge(BridgeConfig(http_host="127.0.0.1", http_port=0), sink)

    assert await bridge.start()
    await bridge.stop()
    assert await bridge.start()
    try:
        port = bridge.ingestor.bound_port
        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"http://127.0.0.1:{port}/status", json={"doorState": "open"}
            ) as resp:
                assert resp.status == 200
    finally:
        await bridge.stop()

    assert (Characteristic.CURRENT_DOOR_STATE, DoorState.OPEN) in sink.pushes
    # A second attach must not double-subscribe.
    assert sink.pushes.count((Characteristic.CURRENT_DOOR_STATE, DoorState.OPEN)) == 1
