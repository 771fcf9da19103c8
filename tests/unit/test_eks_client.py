"""
EksNodegroupClient against a stubbed botocore client.
"""

from __future__ import annotations

from datetime import datetime
from unittest import mock

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError, NoCredentialsError, ReadTimeoutError
from botocore.stub import Stubber

from scalemesh.core.controlplane.eks import EksNodegroupClient, map_nodegroup_status
from scalemesh.core.entities import PoolStatus
from scalemesh.core.errors import (
    PoolBusyError,
    PoolNotFoundError,
    RejectedByControlPlane,
    TransientControlPlaneError,
)

CLUSTER = "demo-cluster"


@pytest.fixture
def eks():
    client = boto3.client(
        "eks",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def _nodegroup(status="ACTIVE", min_size=2, max_size=10, desired=6):
    return {
        "nodegroup": {
            "nodegroupName": "workers",
            "clusterName": CLUSTER,
            "status": status,
            "scalingConfig": {"minSize": min_size, "maxSize": max_size, "desiredSize": desired},
        }
    }


def test_get_pool_state(eks):
    client, stubber = eks
    stubber.add_response(
        "describe_nodegroup",
        _nodegroup(),
        {"clusterName": CLUSTER, "nodegroupName": "workers"},
    )

    state = EksNodegroupClient(CLUSTER, client=client).get_pool_state("workers")

    assert state.as_tuple() == (2, 10, 6)
    assert state.status is PoolStatus.ACTIVE
    assert state.version is None


def test_update_pool_capacity(eks):
    client, stubber = eks
    stubber.add_response(
        "update_nodegroup_config",
        {"update": {"id": "upd-123", "status": "InProgress", "type": "ConfigUpdate", "createdAt": datetime(2024, 1, 1)}},
        {
            "clusterName": CLUSTER,
            "nodegroupName": "workers",
            "scalingConfig": {"minSize": 0, "maxSize": 10, "desiredSize": 0},
        },
    )

    ack = EksNodegroupClient(CLUSTER, client=client).update_pool_capacity("workers", 0, 10, 0, expected_version="7")

    assert ack.update_id == "upd-123"
    assert ack.status is PoolStatus.UPDATING


@pytest.mark.parametrize(
    "code, http_status, expected",
    [
        ("ResourceNotFoundException", 404, PoolNotFoundError),
        ("ServerException", 500, TransientControlPlaneError),
        ("ServiceUnavailableException", 503, TransientControlPlaneError),
        ("ThrottlingException", 429, TransientControlPlaneError),
        ("InvalidParameterException", 400, RejectedByControlPlane),
        ("ResourceLimitExceededException", 400, RejectedByControlPlane),
    ],
)
def test_describe_errors_are_classified(eks, code, http_status, expected):
    client, stubber = eks
    stubber.add_client_error(
        "describe_nodegroup",
        service_error_code=code,
        service_message="boom",
        http_status_code=http_status,
    )

    with pytest.raises(expected) as excinfo:
        EksNodegroupClient(CLUSTER, client=client).get_pool_state("workers")
    assert excinfo.value.code == code
    assert excinfo.value.pool == "workers"


def test_update_in_progress_is_busy(eks):
    client, stubber = eks
    stubber.add_client_error(
        "update_nodegroup_config",
        service_error_code="ResourceInUseException",
        service_message="Nodegroup is currently being updated",
        http_status_code=409,
    )

    with pytest.raises(PoolBusyError):
        EksNodegroupClient(CLUSTER, client=client).update_pool_capacity("workers", 0, 10, 0)


@pytest.mark.parametrize(
    "error, expected",
    [
        (EndpointConnectionError(endpoint_url="https://eks.us-east-1.amazonaws.com"), TransientControlPlaneError),
        (ReadTimeoutError(endpoint_url="https://eks.us-east-1.amazonaws.com"), TransientControlPlaneError),
        (NoCredentialsError(), RejectedByControlPlane),
    ],
)
def test_transport_errors_are_classified(error, expected):
    fake = mock.Mock()
    fake.describe_nodegroup.side_effect = error

    with pytest.raises(expected):
        EksNodegroupClient(CLUSTER, client=fake).get_pool_state("workers")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ACTIVE", PoolStatus.ACTIVE),
        ("UPDATING", PoolStatus.UPDATING),
        ("CREATING", PoolStatus.UPDATING),
        ("DELETING", PoolStatus.UPDATING),
        ("DEGRADED", PoolStatus.DEGRADED),
        ("CREATE_FAILED", PoolStatus.FAILED),
        ("DELETE_FAILED", PoolStatus.FAILED),
        ("SOMETHING_NEW", PoolStatus.DEGRADED),
    ],
)
def test_status_mapping(raw, expected):
    assert map_nodegroup_status(raw) is expected


def test_default_client_disables_botocore_retries():
    session = boto3.session.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="us-east-1",
    )
    client = EksNodegroupClient(CLUSTER, "us-east-1", connect_timeout=2.0, read_timeout=3.0, session=session)
    config = client._client.meta.config  # pylint: disable=protected-access

    assert config.connect_timeout == 2.0
    assert config.read_timeout == 3.0
    assert config.retries["total_max_attempts"] == 1


def test_cluster_name_required():
    with pytest.raises(ValueError):
        EksNodegroupClient("", client=mock.Mock())
