"""Custom exception hierarchy for gatebridge."""

from __future__ import annotations


class GateBridgeError(Exception):
    """Base exception for all gatebridge errors."""


class GateConfigError(GateBridgeError):
    """Invalid or missing configuration."""


class GateTransportError(GateBridgeError):
    """Transport-level failure talking to the device (connection, DNS, timeout)."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class GateListenerError(GateBridgeError):
    """The status listener could not bind its socket."""

    def __init__(self, message: str, *, host: str = "", port: int | None = None) -> None:
        self.host = host
        self.port = port
        super().__init__(message)
