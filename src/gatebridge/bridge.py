"""Composition root wiring store, listener, device client and hub adapter."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from gatebridge.client import DeviceClient
from gatebridge.config import BridgeConfig
from gatebridge.exceptions import GateListenerError
from gatebridge.hub import HubAdapter, HubSink, LoggingHubSink
from gatebridge.ingestion.server import StatusIngestor
from gatebridge.state.store import StateStore

_logger = logging.getLogger(__name__)


class GateBridge:
    """One gate accessory: mirrored state plus its inbound and outbound HTTP.

    Usage::

        async with GateBridge(BridgeConfig(device_api_url="http://gate.local"), sink) as bridge:
            await bridge.hub.set_target_door_state(DoorState.OPEN)

    A listener bind failure does not raise out of :meth:`start`; it is logged
    and kept in :attr:`listener_error`. Hub reads and outbound commands keep
    working without inbound updates.
    """

    def __init__(
        self,
        config: BridgeConfig,
        sink: HubSink | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.config = config
        self.store = StateStore()
        self.client = DeviceClient(config.device_api_url, session=session)
        self.hub = HubAdapter(
            self.store,
            self.client,
            sink or LoggingHubSink(),
            name=config.name,
            close_revert_delay=config.close_revert_delay,
        )
        self.ingestor = StatusIngestor(self.store, host=config.http_host, port=config.http_port)
        self.listener_error: GateListenerError | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GateBridge:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> bool:
        """Start the status listener. Returns ``False`` if it could not bind."""
        if not self.config.commands_enabled:
            _logger.warning("No device API URL configured; lock and open commands are disabled")
        self.hub.attach()
        try:
            await self.ingestor.start()
        except GateListenerError as exc:
            self.listener_error = exc
            _logger.error("Status listener unavailable, inbound updates disabled: %s", exc)
            return False
        self.listener_error = None
        _logger.info("%s accessory initialized", self.config.name)
        return True

    async def stop(self) -> None:
        """Release the listener and HTTP session. The bridge can be started again."""
        self.hub.close()
        await self.ingestor.stop()
        await self.client.close()
