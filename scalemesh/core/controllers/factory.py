"""
Build a :class:`CapacityScheduler` and its collaborators from configuration.
"""

from __future__ import annotations

import logging
from typing import Optional

from scalemesh.core.config import ScalerConfig
from scalemesh.core.controlplane.base import ControlPlaneClient
from scalemesh.core.controlplane.memory import InMemoryControlPlane
from scalemesh.core.controllers.capacity_scheduler import CapacityScheduler
from scalemesh.core.errors import ConfigError
from scalemesh.core.sinks import EventSink, JsonLinesEventSink, LoggingEventSink, NullEventSink

logger = logging.getLogger(__name__)


def build_client(config: ScalerConfig) -> ControlPlaneClient:
    if config.backend == "memory":
        return InMemoryControlPlane(config.memory_pools)
    if config.backend == "eks":
        from scalemesh.core.controlplane.eks import EksNodegroupClient

        return EksNodegroupClient(
            config.cluster or "",
            config.region,
            connect_timeout=config.call_timeout,
            read_timeout=config.call_timeout,
        )
    raise ConfigError(f"Unknown backend '{config.backend}'")


def build_sink(config: ScalerConfig) -> EventSink:
    kind = config.sink.kind
    if kind == "log":
        return LoggingEventSink()
    if kind == "jsonl":
        return JsonLinesEventSink(config.sink.path or "scalemesh-events.jsonl")
    return NullEventSink()


def build_scheduler(
    config: ScalerConfig,
    *,
    client: Optional[ControlPlaneClient] = None,
    sink: Optional[EventSink] = None,
    dry_run: Optional[bool] = None,
) -> CapacityScheduler:
    client = client or build_client(config)
    sink = sink or build_sink(config)
    logger.debug("Built CapacityScheduler backend=%s sink=%s pool=%s", config.backend, type(sink).__name__, config.pool)
    return CapacityScheduler(config, client, sink, dry_run=dry_run)
