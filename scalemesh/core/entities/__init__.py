"""
Domain entities used throughout the ScaleMesh runtime.
"""

from .capacity import CapacityProfile  # noqa: F401
from .types import (  # noqa: F401
    PoolState,
    PoolStatus,
    ReconcileOutcome,
    ReconciliationResult,
    UpdateAck,
)

__all__ = [
    "CapacityProfile",
    "PoolState",
    "PoolStatus",
    "ReconcileOutcome",
    "ReconciliationResult",
    "UpdateAck",
]
