"""
Control-plane client interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from scalemesh.core.entities.types import PoolState, UpdateAck


class ControlPlaneClient(ABC):
    """
    Pool-management API consumed by the capacity scheduler.

    Implementations translate their transport errors into the
    :mod:`scalemesh.core.errors` taxonomy:

    * unknown pool -> :class:`PoolNotFoundError`
    * timeout / 5xx / connection failure -> :class:`TransientControlPlaneError`
    * update refused because another one is running -> :class:`PoolBusyError`
    * any other refusal -> :class:`RejectedByControlPlane`
    """

    @abstractmethod
    def get_pool_state(self, pool: str) -> PoolState:
        raise NotImplementedError

    @abstractmethod
    def update_pool_capacity(
        self,
        pool: str,
        min_size: int,
        max_size: int,
        desired_size: int,
        *,
        expected_version: Optional[str] = None,
    ) -> UpdateAck:
        """Request a capacity change. Returns once the request is accepted, not converged."""
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources (no-op by default)."""
