"""Run a standalone gate bridge.

Without a hub attached, state pushes are written to the log. Configuration
comes from ``GATE_*`` environment variables; command line options win.

Example::

    python -m gatebridge --port 8080 --device-api-url http://192.168.1.50
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

from gatebridge.bridge import GateBridge
from gatebridge.config import BridgeConfig
from gatebridge.exceptions import GateConfigError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bridge a gate controller's HTTP API to a home hub.")
    parser.add_argument("--name", help="Accessory display name (default: Gate)")
    parser.add_argument("--host", dest="http_host", help="Listen address for status pushes")
    parser.add_argument("--port", dest="http_port", type=int, help="Listen port for status pushes (default: 8080)")
    parser.add_argument("--device-api-url", help="Base URL of the device command API")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


async def _run(config: BridgeConfig) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with GateBridge(config) as bridge:
        if bridge.listener_error is not None:
            return 1
        await stop.wait()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        key: value
        for key, value in (
            ("name", args.name),
            ("http_host", args.http_host),
            ("http_port", args.http_port),
            ("device_api_url", args.device_api_url),
        )
        if value is not None
    }
    try:
        config = BridgeConfig.from_env(**overrides)
    except GateConfigError as exc:
        logging.getLogger(__name__).error("Invalid configuration: %s", exc)
        return 2

    try:
        return asyncio.run(_run(config))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
