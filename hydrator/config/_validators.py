from __future__ import annotations

import re
from typing import Any

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def _ensure_api_key(value: str, *, name: str) -> str:
    if not value:
        msg = f"{name} API key is required"
        raise ValueError(msg)
    value = value.strip()
    if not value:
        msg = f"{name} API key is required"
        raise ValueError(msg)
    if len(value) > 500:
        msg = f"{name} API key appears to be too long"
        raise ValueError(msg)
    if any(char in value for char in [" ", "\n", "\t"]):
        msg = f"{name} API key contains invalid characters"
        raise ValueError(msg)
    return value


def parse_duration(value: Any) -> float:
    """Parse a duration into seconds.

    Accepts numbers (seconds) and strings such as ``"30"``, ``"30s"``,
    ``"500ms"``, ``"1m30s"`` or ``"1.5h"``.
    """
    if isinstance(value, bool):
        msg = "duration must be a number or a duration string"
        raise ValueError(msg)
    if isinstance(value, int | float):
        return float(value)

    text = str(value).strip().lower()
    if not text:
        msg = "duration cannot be empty"
        raise ValueError(msg)
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text) or position == 0:
        msg = f"invalid duration: {value!r}"
        raise ValueError(msg)
    return total
