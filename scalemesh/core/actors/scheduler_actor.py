"""
Ray actor running capacity reconciliations on a cluster worker.

The actor holds no reconciliation state: every :meth:`fire` call fetches
pool state afresh, so any replica can serve any trigger.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import ray

from .config import ActorConfig
from scalemesh.core.config import ScalerConfig
from scalemesh.core.controlplane.memory import InMemoryControlPlane
from scalemesh.core.controllers.factory import build_scheduler
from scalemesh.core.sinks import ActorEventSink, EventSink, FanOutEventSink, LoggingEventSink
from scalemesh.core.utils import configure_runtime_logging

logger = logging.getLogger(__name__)


@ray.remote
class CapacitySchedulerActor:
    """Remote wrapper around :class:`~scalemesh.core.controllers.CapacityScheduler`."""

    def __init__(
        self,
        config: ScalerConfig,
        actor_config: ActorConfig,
        collector: Optional[ray.actor.ActorHandle] = None,
    ):
        configure_runtime_logging(actor_config.log_level)
        self.actor_config = actor_config
        sink: EventSink = LoggingEventSink()
        if collector is not None:
            sink = FanOutEventSink(ActorEventSink(collector), sink)
        self._scheduler = build_scheduler(config, sink=sink)
        logger.info(
            "CapacitySchedulerActor[%s] initialised backend=%s pool=%s",
            actor_config.name,
            config.backend,
            config.pool,
        )

    def fire(self, schedule: str) -> Dict[str, Any]:
        """Handle one trigger. Errors propagate to the caller of ``ray.get``."""
        result = self._scheduler.run_schedule(schedule)
        return result.to_dict()

    def pool_state(self, pool: str) -> Dict[str, Any]:
        return self._scheduler.client.get_pool_state(pool).to_dict()

    def settle(self, pool: str) -> bool:
        """Finish a pending update on the in-memory backend (no-op elsewhere)."""
        client = self._scheduler.client
        if isinstance(client, InMemoryControlPlane):
            client.settle(pool)
            return True
        return False
