"""
Trigger adapter for an external time-based scheduler.

The scheduler invokes :func:`handle` with a payload naming the schedule
that fired, e.g. ``{"schedule": "down"}``. When the payload carries no
schedule, ``SCALEMESH_SCHEDULE`` from the environment is used instead.

Rejected requests come back as a FAILED result and are not retried.
:class:`PoolNotFoundError` and :class:`TransientControlPlaneError` propagate
so that the invoker's alerting and retry policy applies.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from scalemesh.core.config import get_scaler_config
from scalemesh.core.controllers.capacity_scheduler import CapacityScheduler
from scalemesh.core.controllers.factory import build_scheduler
from scalemesh.core.errors import ConfigError
from scalemesh.core.utils import configure_runtime_logging

logger = logging.getLogger(__name__)

SCHEDULE_ENV_VAR = "SCALEMESH_SCHEDULE"


def extract_schedule(event: Any) -> str:
    """Pull the schedule name out of a trigger payload."""
    raw: Optional[Any] = None
    if isinstance(event, str):
        raw = event
    elif isinstance(event, Mapping):
        raw = event.get("schedule") or event.get("action")
        detail = event.get("detail")
        if raw is None and isinstance(detail, Mapping):
            raw = detail.get("schedule") or detail.get("action")
    if raw is None or not str(raw).strip():
        raw = os.environ.get(SCHEDULE_ENV_VAR)
    if raw is None or not str(raw).strip():
        raise ConfigError(f"Trigger payload names no schedule and {SCHEDULE_ENV_VAR} is unset")
    return str(raw).strip()


def handle(event: Any, context: Any = None, *, scheduler: Optional[CapacityScheduler] = None) -> Dict[str, Any]:
    """Entry point bound to both the scale-up and scale-down triggers."""
    configure_runtime_logging()
    schedule = extract_schedule(event)
    if scheduler is None:
        scheduler = build_scheduler(get_scaler_config())
    request_id = getattr(context, "aws_request_id", None)
    logger.info("Trigger received schedule=%s request_id=%s", schedule, request_id)
    result = scheduler.run_schedule(schedule)
    return result.to_dict()
