"""
Pool state and reconciliation result types shared across controllers and clients.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from scalemesh.core.entities.capacity import CapacityProfile


class PoolStatus(str, Enum):
    """Lifecycle status of a pool as reported by the control plane."""

    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    DEGRADED = "DEGRADED"
    FAILED = "FAILED"


class ReconcileOutcome(str, Enum):
    """Result of a single reconciliation."""

    APPLIED = "APPLIED"
    SKIPPED_ALREADY_MATCHED = "SKIPPED_ALREADY_MATCHED"
    SKIPPED_BUSY = "SKIPPED_BUSY"
    FAILED = "FAILED"

    @property
    def is_skip(self) -> bool:
        return self in (ReconcileOutcome.SKIPPED_ALREADY_MATCHED, ReconcileOutcome.SKIPPED_BUSY)


@dataclass
class PoolState:
    """Snapshot of a pool fetched from the control plane."""

    pool: str
    current_min: int
    current_max: int
    current_desired: int
    status: PoolStatus = PoolStatus.ACTIVE
    version: Optional[str] = None

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.current_min, self.current_max, self.current_desired)

    def matches(self, profile: CapacityProfile) -> bool:
        return self.as_tuple() == profile.as_tuple()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool": self.pool,
            "current_min": self.current_min,
            "current_max": self.current_max,
            "current_desired": self.current_desired,
            "status": self.status.value,
            "version": self.version,
        }


@dataclass
class UpdateAck:
    """Acknowledgement returned once the control plane accepts a capacity change."""

    pool: str
    update_id: Optional[str] = None
    status: PoolStatus = PoolStatus.UPDATING


@dataclass
class ReconciliationResult:
    """Outcome of one invocation, emitted once to the observability sink."""

    requested_profile: CapacityProfile
    outcome: ReconcileOutcome
    observed_before: Optional[PoolState] = None
    error_detail: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    schedule: Optional[str] = None
    update_id: Optional[str] = None
    dry_run: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome is not ReconcileOutcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule": self.schedule,
            "outcome": self.outcome.value,
            "requested_profile": self.requested_profile.to_dict(),
            "observed_before": self.observed_before.to_dict() if self.observed_before else None,
            "error_detail": self.error_detail,
            "update_id": self.update_id,
            "dry_run": self.dry_run,
            "timestamp": self.timestamp,
        }
