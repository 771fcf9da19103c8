"""
EKS managed node-group client.

Wraps ``describe_nodegroup`` / ``update_nodegroup_config`` and maps botocore
failures onto the ScaleMesh error taxonomy. Botocore's own retry loop is
disabled so that retry policy stays with the invoker.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
)

from scalemesh.core.controlplane.base import ControlPlaneClient
from scalemesh.core.entities.types import PoolState, PoolStatus, UpdateAck
from scalemesh.core.errors import (
    ControlPlaneError,
    PoolBusyError,
    PoolNotFoundError,
    RejectedByControlPlane,
    TransientControlPlaneError,
)

logger = logging.getLogger(__name__)


NODEGROUP_STATUS_MAP: Dict[str, PoolStatus] = {
    "ACTIVE": PoolStatus.ACTIVE,
    "UPDATING": PoolStatus.UPDATING,
    "CREATING": PoolStatus.UPDATING,
    "DELETING": PoolStatus.UPDATING,
    "DEGRADED": PoolStatus.DEGRADED,
    "CREATE_FAILED": PoolStatus.FAILED,
    "DELETE_FAILED": PoolStatus.FAILED,
}

TRANSIENT_ERROR_CODES = frozenset(
    {
        "ServerException",
        "ServiceUnavailableException",
        "InternalFailure",
        "InternalServerError",
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "RequestTimeout",
        "RequestTimeoutException",
    }
)


def classify_client_error(exc: ClientError, pool: str) -> ControlPlaneError:
    error = exc.response.get("Error", {})
    code = str(error.get("Code", "Unknown"))
    message = str(error.get("Message", "")) or str(exc)
    status = int(exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0) or 0)

    if code == "ResourceNotFoundException":
        return PoolNotFoundError(message, pool=pool, code=code)
    if code == "ResourceInUseException":
        return PoolBusyError(message, pool=pool, code=code)
    if code in TRANSIENT_ERROR_CODES or status >= 500:
        return TransientControlPlaneError(message, pool=pool, code=code)
    return RejectedByControlPlane(message, pool=pool, code=code)


def map_nodegroup_status(raw: Optional[str]) -> PoolStatus:
    status = NODEGROUP_STATUS_MAP.get(str(raw or "").upper())
    if status is None:
        logger.warning("Unknown nodegroup status '%s', treating as DEGRADED", raw)
        return PoolStatus.DEGRADED
    return status


class EksNodegroupClient(ControlPlaneClient):
    """Control-plane client for the node groups of a single EKS cluster."""

    def __init__(
        self,
        cluster_name: str,
        region: Optional[str] = None,
        *,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
        session: Optional[boto3.session.Session] = None,
        client: Any = None,
    ):
        if not cluster_name:
            raise ValueError("cluster_name is required")
        self.cluster_name = cluster_name
        if client is None:
            session = session or boto3.session.Session()
            client = session.client(
                "eks",
                region_name=region,
                config=Config(
                    connect_timeout=connect_timeout,
                    read_timeout=read_timeout,
                    retries={"total_max_attempts": 1, "mode": "standard"},
                ),
            )
        self._client = client
        logger.debug(
            "EksNodegroupClient created cluster=%s region=%s connect_timeout=%.1fs read_timeout=%.1fs",
            cluster_name,
            region,
            connect_timeout,
            read_timeout,
        )

    def get_pool_state(self, pool: str) -> PoolState:
        try:
            response = self._client.describe_nodegroup(clusterName=self.cluster_name, nodegroupName=pool)
        except (ClientError, BotoCoreError) as exc:
            raise self._translate(exc, pool) from exc

        nodegroup = response.get("nodegroup", {})
        scaling = nodegroup.get("scalingConfig", {})
        return PoolState(
            pool=pool,
            current_min=int(scaling.get("minSize", 0)),
            current_max=int(scaling.get("maxSize", 0)),
            current_desired=int(scaling.get("desiredSize", 0)),
            status=map_nodegroup_status(nodegroup.get("status")),
        )

    def update_pool_capacity(
        self,
        pool: str,
        min_size: int,
        max_size: int,
        desired_size: int,
        *,
        expected_version: Optional[str] = None,
    ) -> UpdateAck:
        # EKS exposes no optimistic version for nodegroup configs; busy
        # detection relies on ResourceInUseException instead.
        try:
            response = self._client.update_nodegroup_config(
                clusterName=self.cluster_name,
                nodegroupName=pool,
                scalingConfig={
                    "minSize": min_size,
                    "maxSize": max_size,
                    "desiredSize": desired_size,
                },
            )
        except (ClientError, BotoCoreError) as exc:
            raise self._translate(exc, pool) from exc

        update = response.get("update", {})
        logger.debug("EKS nodegroup[%s/%s] update %s status=%s", self.cluster_name, pool, update.get("id"), update.get("status"))
        return UpdateAck(pool=pool, update_id=update.get("id"), status=PoolStatus.UPDATING)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def _translate(self, exc: Exception, pool: str) -> ControlPlaneError:
        if isinstance(exc, ClientError):
            return classify_client_error(exc, pool)
        if isinstance(exc, (BotoConnectionError, HTTPClientError)):
            return TransientControlPlaneError(str(exc), pool=pool, code=type(exc).__name__)
        # credentials, parameter validation and other local failures
        return RejectedByControlPlane(str(exc), pool=pool, code=type(exc).__name__)
