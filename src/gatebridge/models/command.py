"""Outbound command results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CommandResult(BaseModel):
    """Outcome of a single command sent to the device.

    ``response`` holds the decoded JSON body when the device answered with
    JSON, otherwise the raw body text. ``error`` is set when the command
    failed before or during transport.
    """

    model_config = ConfigDict(frozen=True)

    command: str
    success: bool
    response: Any = None
    status_code: int | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.success
