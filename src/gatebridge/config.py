"""Bridge configuration for gatebridge."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from gatebridge._constants import (
    CLOSE_REVERT_DELAY_S,
    DEFAULT_HTTP_HOST,
    DEFAULT_HTTP_PORT,
    DEFAULT_NAME,
)
from gatebridge.exceptions import GateConfigError


def _coerce_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise GateConfigError(f"http_port must be an integer, got {value!r}") from exc
    if not 0 <= port <= 65535:
        raise GateConfigError(f"http_port must be between 0 and 65535, got {port}")
    return port


def _coerce_delay(value: Any) -> float:
    try:
        delay = float(value)
    except (TypeError, ValueError) as exc:
        raise GateConfigError(f"close_revert_delay must be a number, got {value!r}") from exc
    if delay < 0:
        raise GateConfigError(f"close_revert_delay must not be negative, got {delay}")
    return delay


def _normalize_url(value: Any) -> str | None:
    if value is None:
        return None
    url = str(value).strip().rstrip("/")
    return url or None


@dataclasses.dataclass(frozen=True)
class BridgeConfig:
    """Bridge configuration.

    Parameters
    ----------
    name : str
        Display name of the accessory. The lock and doorbell services are
        named ``"<name> Lock"`` and ``"<name> Bell"``.
    http_port : int
        Port the status listener binds to. ``0`` picks a free port.
    device_api_url : str or None
        Base URL of the device's command API. When ``None`` outbound
        commands are disabled and always fail without network I/O.
    http_host : str
        Interface the status listener binds to.
    close_revert_delay : float
        Seconds to wait before reverting a rejected close request.
    """

    name: str = DEFAULT_NAME
    http_port: int = DEFAULT_HTTP_PORT
    device_api_url: str | None = None
    http_host: str = DEFAULT_HTTP_HOST
    close_revert_delay: float = CLOSE_REVERT_DELAY_S

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__.
        object.__setattr__(self, "http_port", _coerce_port(self.http_port))
        object.__setattr__(self, "close_revert_delay", _coerce_delay(self.close_revert_delay))
        object.__setattr__(self, "device_api_url", _normalize_url(self.device_api_url))
        if not self.name:
            object.__setattr__(self, "name", DEFAULT_NAME)

    @property
    def commands_enabled(self) -> bool:
        return self.device_api_url is not None

    @classmethod
    def from_env(cls, **overrides: Any) -> BridgeConfig:
        """Create configuration from environment variables.

        Reads ``GATE_NAME``, ``GATE_HTTP_HOST``, ``GATE_HTTP_PORT``,
        ``GATE_DEVICE_API_URL`` and ``GATE_CLOSE_REVERT_DELAY``. Explicit
        keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GATE_NAME": "name",
            "GATE_HTTP_HOST": "http_host",
            "GATE_HTTP_PORT": "http_port",
            "GATE_DEVICE_API_URL": "device_api_url",
            "GATE_CLOSE_REVERT_DELAY": "close_revert_delay",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BridgeConfig:
        """Create configuration from a hub accessory config block.

        Accepts the hub's camelCase keys (``name``, ``httpPort``,
        ``deviceApiUrl``) as well as the field names. Unknown keys are ignored.
        """
        _KEY_MAP = {
            "name": "name",
            "httpPort": "http_port",
            "http_port": "http_port",
            "httpHost": "http_host",
            "http_host": "http_host",
            "deviceApiUrl": "device_api_url",
            "device_api_url": "device_api_url",
            "closeRevertDelay": "close_revert_delay",
            "close_revert_delay": "close_revert_delay",
        }
        config_kwargs: dict[str, Any] = {}
        for key, value in data.items():
            field_name = _KEY_MAP.get(key)
            if field_name is not None and value is not None:
                config_kwargs[field_name] = value
        return cls(**config_kwargs)
