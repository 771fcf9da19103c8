"""
Observability sinks receiving one structured event per reconciliation.

Delivery is best effort: the scheduler logs and discards sink failures so
they never change the reported outcome.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

EVENT_LOGGER_NAME = "scalemesh.events"


class EventSink(ABC):
    """Destination for reconciliation events."""

    @abstractmethod
    def emit(self, event: Mapping[str, Any]) -> None:
        raise NotImplementedError


class NullEventSink(EventSink):
    def emit(self, event: Mapping[str, Any]) -> None:
        return None


class LoggingEventSink(EventSink):
    """Write each event as a single JSON line through :mod:`logging`."""

    def __init__(self, logger_name: str = EVENT_LOGGER_NAME, level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def emit(self, event: Mapping[str, Any]) -> None:
        self._logger.log(self._level, json.dumps(dict(event), sort_keys=True, default=str))


class JsonLinesEventSink(EventSink):
    """Append events to a JSON-lines file."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def emit(self, event: Mapping[str, Any]) -> None:
        line = json.dumps(dict(event), ensure_ascii=False, default=str)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")


class RecordingEventSink(EventSink):
    """Keep events in memory; handy for tests and the CLI summary."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def emit(self, event: Mapping[str, Any]) -> None:
        self.events.append(dict(event))

    @property
    def last(self) -> Optional[Dict[str, Any]]:
        return self.events[-1] if self.events else None


class ActorEventSink(EventSink):
    """
    Forward events to an :class:`~scalemesh.core.actors.EventCollectorActor`.

    The remote call is fire-and-forget; the returned object ref is not awaited.
    """

    def __init__(self, collector: Any):
        self._collector = collector

    def emit(self, event: Mapping[str, Any]) -> None:
        self._collector.record.remote(dict(event))


class FanOutEventSink(EventSink):
    """Deliver to several sinks; one failing sink does not block the others."""

    def __init__(self, *sinks: EventSink):
        self.sinks = list(sinks)

    def emit(self, event: Mapping[str, Any]) -> None:
        errors: List[BaseException] = []
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception as exc:
                logger.warning("Event sink %s failed: %s", type(sink).__name__, exc)
                errors.append(exc)
        if errors and len(errors) == len(self.sinks):
            raise errors[0]
