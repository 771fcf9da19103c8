"""
Schedule names, aliases and cron expression checks.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from typing import Dict, Optional


class ScheduleName(str, Enum):
    """
    The two schedules that trigger a reconciliation.

    Using ``str`` as a mixin keeps string literals interchangeable with the
    enum and makes it JSON-serialisable.
    """

    UP = "up"
    DOWN = "down"


# Spellings seen in trigger payloads and rule names.
SCHEDULE_ALIASES: Dict[str, str] = {
    "scale_up": ScheduleName.UP.value,
    "scale-up": ScheduleName.UP.value,
    "scaleup": ScheduleName.UP.value,
    "start": ScheduleName.UP.value,
    "wake": ScheduleName.UP.value,
    "business_hours": ScheduleName.UP.value,
    "scale_down": ScheduleName.DOWN.value,
    "scale-down": ScheduleName.DOWN.value,
    "scaledown": ScheduleName.DOWN.value,
    "stop": ScheduleName.DOWN.value,
    "sleep": ScheduleName.DOWN.value,
    "off_hours": ScheduleName.DOWN.value,
}

_AWS_CRON = re.compile(r"^cron\((?P<body>[^()]+)\)$")


def resolve_env_value(raw: Optional[str]) -> Optional[str]:
    """
    Expand ``env:NAME`` indirection.

    Returns ``None`` when the referenced variable is unset or blank; other
    values are returned stripped.
    """
    if raw is None:
        return None
    value = str(raw).strip()
    if value.lower().startswith("env:"):
        env_key = value[4:].strip()
        if not env_key:
            return None
        env_val = os.getenv(env_key)
        if env_val is None or not env_val.strip():
            return None
        return env_val.strip()
    return value


def resolve_schedule(value: str | ScheduleName | None) -> Optional[str]:
    """
    Normalise a trigger identifier to a schedule name.

    Supports enum members, case-insensitive names (``"UP"``), aliases such
    as ``"scale_up"`` and environment indirection (``"env:SCALEMESH_SCHEDULE"``).
    Unrecognised names are returned lower-cased so that custom schedules
    defined in configuration still resolve; ``None`` means nothing usable
    was supplied.
    """
    if value is None:
        return None
    if isinstance(value, ScheduleName):
        return value.value
    if not isinstance(value, str):
        return None

    raw = resolve_env_value(value)
    if not raw:
        return None
    lowered = raw.lower()
    return SCHEDULE_ALIASES.get(lowered, lowered)


def validate_cron_expression(expression: str) -> str:
    """
    Check the shape of a schedule expression.

    Accepts ``cron(m h dom mon dow year)`` (six fields) and plain five-field
    crontab strings. Field contents are not interpreted.

    Raises:
        ValueError: if the expression has the wrong shape.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ValueError("Cron expression must be a non-empty string")
    text = expression.strip()
    match = _AWS_CRON.match(text)
    if match:
        fields = match.group("body").split()
        if len(fields) != 6:
            raise ValueError(f"cron(...) expression needs 6 fields, got {len(fields)}: {text}")
        return text
    fields = text.split()
    if len(fields) != 5:
        raise ValueError(f"Crontab expression needs 5 fields, got {len(fields)}: {text}")
    return text
