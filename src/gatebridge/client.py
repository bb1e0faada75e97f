"""Async client for the gate device's command API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from gatebridge._constants import COMMAND_PATH
from gatebridge._redact import redact_for_log
from gatebridge.exceptions import GateTransportError
from gatebridge.models.command import CommandResult

_logger = logging.getLogger(__name__)


class CommandSender(Protocol):
    """Structural interface used by the hub adapter.

    Lets tests pass a recording double instead of a real HTTP client.
    """

    async def send_command(self, command: str, params: Mapping[str, Any] | None = None) -> CommandResult:
        ...


def _decode_body(raw: bytes, charset: str | None) -> Any:
    """JSON-decode a response body, falling back to the raw text.

    Undecodable bytes are replaced rather than raised.
    """
    try:
        text = raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class DeviceClient:
    """Sends commands to the device with a single POST each.

    Usage::

        async with DeviceClient("http://gate.local") as client:
            result = await client.open()

    Without a ``device_api_url`` every command fails immediately without
    touching the network. Failures are reported through
    :class:`CommandResult`, never raised.
    """

    def __init__(
        self,
        device_api_url: str | None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._device_api_url = device_api_url.rstrip("/") if device_api_url else None
        self._external_session = session is not None
        self._http_session = session

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DeviceClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._external_session:
            return
        if self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    @property
    def command_url(self) -> str | None:
        if self._device_api_url is None:
            return None
        return f"{self._device_api_url}{COMMAND_PATH}"

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _post(self, url: str, payload: Mapping[str, Any]) -> tuple[int, Any]:
        session = self._require_session()
        try:
            async with session.post(url, json=dict(payload)) as resp:
                raw = await resp.read()
                charset = resp.charset
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GateTransportError(f"Request to {url} failed: {exc!r}", url=url) from exc
        return status, _decode_body(raw, charset)

    async def send_command(self, command: str, params: Mapping[str, Any] | None = None) -> CommandResult:
        """POST ``{"command": command, **params}`` to ``<device>/command``.

        Exactly one attempt is made. A transport error or an HTTP error
        status yields a failed result; the optimistic state the caller may
        already have written is left alone.
        """
        url = self.command_url
        if url is None:
            _logger.warning("No device API URL configured, cannot send command: %s", command)
            return CommandResult(command=command, success=False, error="device API URL not configured")

        payload: dict[str, Any] = {"command": command, **(params or {})}
        _logger.info("Sending command to device: %s", command)
        _logger.debug("POST %s with payload: %s", url, redact_for_log(payload))

        try:
            status, body = await self._post(url, payload)
        except GateTransportError as exc:
            _logger.error("Failed to send command %s to device: %s", command, exc)
            return CommandResult(command=command, success=False, error=str(exc))

        if status >= 400:
            _logger.error("Device rejected command %s with HTTP %s: %s", command, status, redact_for_log(body))
            return CommandResult(
                command=command,
                success=False,
                response=body,
                status_code=status,
                error=f"HTTP {status}",
            )

        _logger.info("Device response: %s", redact_for_log(body))
        return CommandResult(command=command, success=True, response=body, status_code=status)

    async def open(self, **params: Any) -> CommandResult:
        return await self.send_command("open", params)

    async def lock(self, **params: Any) -> CommandResult:
        return await self.send_command("lock", params)

    async def unlock(self, **params: Any) -> CommandResult:
        return await self.send_command("unlock", params)
