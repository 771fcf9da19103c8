"""
Capacity scheduler: reconcile a pool toward a static capacity profile.

Each call is an independent, stateless unit of work. Coordination with
concurrent invocations and manual edits relies solely on the status the
control plane reports; there is no local locking.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional, TypeVar

from scalemesh.config.schedules import ScheduleName, resolve_schedule
from scalemesh.core.config import ScalerConfig
from scalemesh.core.controlplane.base import ControlPlaneClient
from scalemesh.core.entities.capacity import CapacityProfile
from scalemesh.core.entities.types import (
    PoolState,
    PoolStatus,
    ReconcileOutcome,
    ReconciliationResult,
)
from scalemesh.core.errors import (
    PoolBusyError,
    PoolNotFoundError,
    RejectedByControlPlane,
    TransientControlPlaneError,
)
from scalemesh.core.sinks import EventSink, NullEventSink

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CapacityScheduler:
    """
    Apply capacity profiles to a pool through the control-plane API.

    Args:
        config: Immutable controller configuration (profiles, timeout, dry-run).
        client: Control-plane client used for reads and updates.
        sink: Observability sink receiving one event per invocation.
        dry_run: Overrides ``config.dry_run`` when given.
    """

    def __init__(
        self,
        config: ScalerConfig,
        client: ControlPlaneClient,
        sink: Optional[EventSink] = None,
        *,
        dry_run: Optional[bool] = None,
    ):
        self.config = config
        self._client = client
        self._sink = sink or NullEventSink()
        self.dry_run = config.dry_run if dry_run is None else dry_run

    @property
    def client(self) -> ControlPlaneClient:
        return self._client

    # ------------------------------------------------------------------
    # Entry points

    def run_schedule(self, schedule: str | ScheduleName) -> ReconciliationResult:
        """Reconcile toward the profile configured for ``schedule``."""
        profile = self.config.profile_for(schedule)
        return self.reconcile(profile, schedule=resolve_schedule(schedule))

    def reconcile(self, profile: CapacityProfile, *, schedule: Optional[str] = None) -> ReconciliationResult:
        """
        Run one reconciliation for ``profile``.

        Returns a result for APPLIED, SKIPPED_* and rejected (FAILED) outcomes.
        Raises :class:`PoolNotFoundError` and :class:`TransientControlPlaneError`
        after emitting a FAILED event, so the invoker's retry policy can act.
        """
        profile.validate()
        observed: Optional[PoolState] = None
        try:
            observed = self._call("get_pool_state", profile.pool, self._client.get_pool_state, profile.pool)
            result = self._apply(profile, observed, schedule)
        except PoolNotFoundError as exc:
            logger.critical(
                "Pool '%s' is unknown to the control plane (schedule=%s); trigger wiring and configuration disagree: %s",
                profile.pool,
                schedule,
                exc.describe(),
            )
            self._publish(self._failed(profile, observed, schedule, exc.describe()))
            raise
        except TransientControlPlaneError as exc:
            logger.warning("Transient control-plane failure for pool '%s': %s", profile.pool, exc.describe())
            self._publish(self._failed(profile, observed, schedule, exc.describe()))
            raise
        except Exception as exc:
            logger.exception("Unexpected failure reconciling pool '%s'", profile.pool)
            self._publish(self._failed(profile, observed, schedule, f"{type(exc).__name__}: {exc}"))
            raise

        self._publish(result)
        return result

    # ------------------------------------------------------------------
    # Decision logic

    def _apply(self, profile: CapacityProfile, observed: PoolState, schedule: Optional[str]) -> ReconciliationResult:
        if observed.status is PoolStatus.UPDATING:
            logger.info("Pool '%s' is mid-transition; skipping %s", profile.pool, profile)
            return self._result(profile, observed, schedule, ReconcileOutcome.SKIPPED_BUSY)

        if observed.matches(profile):
            logger.info("Pool '%s' already matches %s", profile.pool, profile)
            return self._result(profile, observed, schedule, ReconcileOutcome.SKIPPED_ALREADY_MATCHED)

        logger.info(
            "Pool '%s' scaling: current(min=%s, max=%s, desired=%s, status=%s) -> target(min=%s, max=%s, desired=%s)%s",
            profile.pool,
            observed.current_min,
            observed.current_max,
            observed.current_desired,
            observed.status.value,
            profile.min_size,
            profile.max_size,
            profile.desired_size,
            " [dry-run]" if self.dry_run else "",
        )
        if self.dry_run:
            return self._result(profile, observed, schedule, ReconcileOutcome.APPLIED)

        try:
            ack = self._call(
                "update_pool_capacity",
                profile.pool,
                self._client.update_pool_capacity,
                profile.pool,
                profile.min_size,
                profile.max_size,
                profile.desired_size,
                expected_version=observed.version,
            )
        except PoolBusyError as exc:
            logger.info("Pool '%s' became busy before the update landed: %s", profile.pool, exc.describe())
            return self._result(
                profile, observed, schedule, ReconcileOutcome.SKIPPED_BUSY, error_detail=exc.describe()
            )
        except RejectedByControlPlane as exc:
            logger.error("Control plane rejected %s: %s", profile, exc.describe())
            return self._failed(profile, observed, schedule, exc.describe())

        logger.info("Pool '%s' update accepted (update_id=%s)", profile.pool, ack.update_id)
        return self._result(profile, observed, schedule, ReconcileOutcome.APPLIED, update_id=ack.update_id)

    # ------------------------------------------------------------------
    # Helpers

    def _call(self, operation: str, pool: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a control-plane call, abandoning it at ``call_timeout``."""
        timeout = self.config.call_timeout
        outbox: "queue.Queue[tuple[bool, Any]]" = queue.Queue(maxsize=1)

        def _runner() -> None:
            try:
                outbox.put((True, fn(*args, **kwargs)))
            except BaseException as exc:  # handed back to the caller
                outbox.put((False, exc))

        # daemon: an abandoned call must not keep the process alive at exit
        worker = threading.Thread(target=_runner, name=f"scalemesh-{operation}", daemon=True)
        worker.start()
        try:
            ok, value = outbox.get(timeout=timeout)
        except queue.Empty as exc:
            raise TransientControlPlaneError(
                f"{operation} did not complete within {timeout:.2f}s",
                pool=pool,
                code="Timeout",
            ) from exc
        if not ok:
            raise value
        return value

    def _result(
        self,
        profile: CapacityProfile,
        observed: Optional[PoolState],
        schedule: Optional[str],
        outcome: ReconcileOutcome,
        *,
        error_detail: Optional[str] = None,
        update_id: Optional[str] = None,
    ) -> ReconciliationResult:
        return ReconciliationResult(
            requested_profile=profile,
            outcome=outcome,
            observed_before=observed,
            error_detail=error_detail,
            schedule=schedule,
            update_id=update_id,
            dry_run=self.dry_run,
        )

    def _failed(
        self,
        profile: CapacityProfile,
        observed: Optional[PoolState],
        schedule: Optional[str],
        detail: str,
    ) -> ReconciliationResult:
        return self._result(profile, observed, schedule, ReconcileOutcome.FAILED, error_detail=detail)

    def _publish(self, result: ReconciliationResult) -> None:
        try:
            self._sink.emit(result.to_dict())
        except Exception:  # best effort delivery
            logger.exception(
                "Failed to deliver reconciliation event for pool '%s' (outcome=%s)",
                result.requested_profile.pool,
                result.outcome.value,
            )
