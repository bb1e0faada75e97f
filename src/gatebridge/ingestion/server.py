"""HTTP listener for device status pushes.

The device POSTs a JSON object to ``/status`` whenever something changes.
This is the only route; everything else answers 404.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import web

from gatebridge._constants import INVALID_JSON_ERROR, STATUS_PATH
from gatebridge.exceptions import GateListenerError
from gatebridge.state.store import StateStore

_logger = logging.getLogger(__name__)


def _parse_status_body(body: bytes) -> dict[str, Any]:
    """Decode a buffered request body into a status object.

    Raises :class:`ValueError` for anything that is not a UTF-8 encoded
    JSON object.
    """
    payload = json.loads(body.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


class StatusIngestor:
    """Receives device status reports and feeds them to the store."""

    def __init__(self, store: StateStore, *, host: str = "0.0.0.0", port: int = 8080) -> None:
        self._store = store
        self._host = host
        self._port = port
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self.app = self._build_app()

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(STATUS_PATH, self._handle_status)
        app.router.add_route("*", "/{tail:.*}", self._handle_not_found)
        return app

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _handle_status(self, request: web.Request) -> web.Response:
        body = await request.read()
        try:
            payload = _parse_status_body(body)
        except ValueError as exc:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            _logger.error("Error parsing status update: %s", exc)
            return web.json_response({"error": INVALID_JSON_ERROR}, status=400)

        self._store.apply_device_status(payload)
        return web.json_response({"success": True})

    async def _handle_not_found(self, request: web.Request) -> web.Response:
        _logger.debug("No route for %s %s", request.method, request.path)
        return web.Response(status=404, text="Not Found")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._site is not None

    @property
    def bound_port(self) -> int | None:
        """Actual listening port (differs from the configured one when that is 0)."""
        if self._runner is None:
            return None
        for address in self._runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return int(address[1])
        return None

    async def start(self) -> None:
        """Bind the listener once.

        Raises :class:`GateListenerError` when the socket cannot be bound.
        """
        if self._runner is not None:
            return
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            self.app = self._build_app()
            _logger.error("Failed to start HTTP server on %s:%s: %s", self._host, self._port, exc)
            raise GateListenerError(
                f"Could not bind status listener on {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
            ) from exc

        self._runner = runner
        self._site = site
        port = self.bound_port or self._port
        _logger.info("HTTP server listening on port %s", port)
        _logger.info("Device should POST status updates to: http://localhost:%s%s", port, STATUS_PATH)

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        self._site = None
        # A cleaned-up application cannot be run again.
        self.app = self._build_app()
