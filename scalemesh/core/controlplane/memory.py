"""
In-process control plane used for dry runs, local demos and tests.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from scalemesh.core.controlplane.base import ControlPlaneClient
from scalemesh.core.entities.types import PoolState, PoolStatus, UpdateAck
from scalemesh.core.errors import (
    ControlPlaneError,
    PoolBusyError,
    PoolNotFoundError,
    RejectedByControlPlane,
)

logger = logging.getLogger(__name__)


@dataclass
class _PoolRecord:
    min_size: int
    max_size: int
    desired_size: int
    status: PoolStatus = PoolStatus.ACTIVE
    generation: int = 1

    def snapshot(self, name: str) -> PoolState:
        return PoolState(
            pool=name,
            current_min=self.min_size,
            current_max=self.max_size,
            current_desired=self.desired_size,
            status=self.status,
            version=str(self.generation),
        )


class InMemoryControlPlane(ControlPlaneClient):
    """
    Thread-safe fake of a managed node-group API.

    Accepted updates move the pool to ``UPDATING`` until :meth:`settle` is
    called, mirroring the asynchronous convergence of a real control plane.
    With ``auto_settle=True`` the pool converges as soon as the update is
    accepted.
    """

    def __init__(
        self,
        pools: Optional[Mapping[str, Mapping[str, Any]]] = None,
        *,
        latency: float = 0.0,
        auto_settle: bool = False,
    ):
        self._lock = threading.Lock()
        self._pools: Dict[str, _PoolRecord] = {}
        self._latency = max(latency, 0.0)
        self._auto_settle = auto_settle
        self._armed: Dict[str, List[ControlPlaneError]] = {"get": [], "update": []}
        self.get_calls = 0
        self.update_calls: List[Tuple[str, int, int, int]] = []
        for name, seed in (pools or {}).items():
            self.add_pool(name, **seed)

    # ------------------------------------------------------------------
    # Fixture helpers

    def add_pool(
        self,
        name: str,
        min_size: int = 0,
        max_size: int = 0,
        desired_size: int = 0,
        status: str | PoolStatus = PoolStatus.ACTIVE,
        **_ignored: Any,
    ) -> None:
        with self._lock:
            self._pools[name] = _PoolRecord(
                min_size=int(min_size),
                max_size=int(max_size),
                desired_size=int(desired_size),
                status=PoolStatus(str(getattr(status, "value", status)).upper()),
            )

    def set_status(self, name: str, status: PoolStatus) -> None:
        with self._lock:
            self._require(name).status = status

    def settle(self, name: str) -> None:
        """Complete an in-flight update, returning the pool to ``ACTIVE``."""
        with self._lock:
            record = self._require(name)
            if record.status is PoolStatus.UPDATING:
                record.status = PoolStatus.ACTIVE

    def mutate(self, name: str, *, min_size: int, max_size: int, desired_size: int) -> None:
        """Simulate an out-of-band change (console edit, another controller)."""
        with self._lock:
            record = self._require(name)
            record.min_size, record.max_size, record.desired_size = min_size, max_size, desired_size
            record.generation += 1

    def fail_next(self, operation: str, error: ControlPlaneError) -> None:
        """Arm ``error`` to be raised by the next ``get`` or ``update`` call."""
        if operation not in self._armed:
            raise ValueError(f"Unknown operation '{operation}'")
        with self._lock:
            self._armed[operation].append(error)

    def set_latency(self, seconds: float) -> None:
        self._latency = max(seconds, 0.0)

    # ------------------------------------------------------------------
    # ControlPlaneClient

    def get_pool_state(self, pool: str) -> PoolState:
        self._delay()
        with self._lock:
            self.get_calls += 1
            self._raise_armed("get")
            return self._require(pool).snapshot(pool)

    def update_pool_capacity(
        self,
        pool: str,
        min_size: int,
        max_size: int,
        desired_size: int,
        *,
        expected_version: Optional[str] = None,
    ) -> UpdateAck:
        self._delay()
        with self._lock:
            self.update_calls.append((pool, min_size, max_size, desired_size))
            self._raise_armed("update")
            record = self._require(pool)
            if record.status is PoolStatus.UPDATING:
                raise PoolBusyError(
                    f"Pool '{pool}' is currently being updated",
                    pool=pool,
                    code="ResourceInUseException",
                )
            if min(min_size, max_size, desired_size) < 0 or not min_size <= desired_size <= max_size:
                raise RejectedByControlPlane(
                    f"Invalid scaling config min={min_size} desired={desired_size} max={max_size}",
                    pool=pool,
                    code="InvalidParameterException",
                )
            if expected_version is not None and expected_version != str(record.generation):
                raise RejectedByControlPlane(
                    f"Pool '{pool}' changed since it was read "
                    f"(expected version {expected_version}, found {record.generation})",
                    pool=pool,
                    code="VersionConflict",
                )
            record.min_size, record.max_size, record.desired_size = min_size, max_size, desired_size
            record.status = PoolStatus.UPDATING
            record.generation += 1
            if self._auto_settle:
                record.status = PoolStatus.ACTIVE
            update_id = uuid.uuid4().hex
            logger.debug("In-memory pool[%s] update %s accepted (%s, %s, %s)", pool, update_id, min_size, max_size, desired_size)
            return UpdateAck(pool=pool, update_id=update_id, status=PoolStatus.UPDATING)

    # ------------------------------------------------------------------

    def _require(self, pool: str) -> _PoolRecord:
        record = self._pools.get(pool)
        if record is None:
            raise PoolNotFoundError(f"Pool '{pool}' not found", pool=pool, code="ResourceNotFoundException")
        return record

    def _raise_armed(self, operation: str) -> None:
        queue = self._armed[operation]
        if queue:
            raise queue.pop(0)

    def _delay(self) -> None:
        if self._latency > 0:
            time.sleep(self._latency)
