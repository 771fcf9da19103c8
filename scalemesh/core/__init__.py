"""
Core package bootstrap for the ScaleMesh runtime.

Re-exports the primary classes so callers can simply do::

    from scalemesh.core import CapacityScheduler
"""

from __future__ import annotations

from scalemesh.core.controllers.capacity_scheduler import CapacityScheduler

__all__ = ["CapacityScheduler"]
