"""Log-safe rendering of JSON payloads.

Status reports and command bodies are logged as received. Command params
are caller-supplied, so a credential passed along with a command (for
example ``{"command": "unlock", "token": ...}``) is masked here.
"""

from __future__ import annotations

from typing import Any

_MASK = "***"
_SECRET_KEYS = frozenset({"token", "password", "authorization", "apikey"})


def _is_secret(key: str) -> bool:
    return key.lower().replace("_", "").replace("-", "") in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Copy of a decoded JSON *value* with secrets masked and long strings cut."""
    if isinstance(value, dict):
        return {
            key: _MASK if _is_secret(str(key)) else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}...(+{len(value) - max_string} chars)"
    return value
