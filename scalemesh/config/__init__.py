"""Static schedule definitions and alias resolution."""

from .schedules import (  # noqa: F401
    SCHEDULE_ALIASES,
    ScheduleName,
    resolve_env_value,
    resolve_schedule,
    validate_cron_expression,
)

__all__ = [
    "SCHEDULE_ALIASES",
    "ScheduleName",
    "resolve_env_value",
    "resolve_schedule",
    "validate_cron_expression",
]
