"""
Ray actor collecting reconciliation events from remote schedulers.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

import ray

from .config import ActorConfig
from scalemesh.core.utils import configure_runtime_logging

logger = logging.getLogger(__name__)


@ray.remote
class EventCollectorActor:
    """Bounded in-memory history of reconciliation events."""

    def __init__(self, config: ActorConfig):
        configure_runtime_logging(config.log_level)
        self.config = config
        self._events: Deque[Dict[str, Any]] = deque(maxlen=max(config.max_events, 1))
        logger.info("EventCollectorActor[%s] initialised (max_events=%s)", config.name, config.max_events)

    def record(self, event: Dict[str, Any]) -> bool:
        self._events.append(dict(event))
        logger.debug(
            "EventCollectorActor[%s] recorded schedule=%s outcome=%s",
            self.config.name,
            event.get("schedule"),
            event.get("outcome"),
        )
        return True

    def list_events(self, outcome: Optional[str] = None) -> List[Dict[str, Any]]:
        if outcome is None:
            return list(self._events)
        return [event for event in self._events if event.get("outcome") == outcome]

    def count(self) -> int:
        return len(self._events)
