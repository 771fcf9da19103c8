from .capacity_scheduler import CapacityScheduler
from .factory import build_client, build_scheduler, build_sink

__all__ = ["CapacityScheduler", "build_client", "build_scheduler", "build_sink"]
