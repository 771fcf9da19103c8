"""
Ray actors hosting the capacity scheduler and its event collector.
"""

from .config import ActorConfig  # noqa: F401
from .event_collector import EventCollectorActor  # noqa: F401
from .scheduler_actor import CapacitySchedulerActor  # noqa: F401

__all__ = [
    "ActorConfig",
    "CapacitySchedulerActor",
    "EventCollectorActor",
]
