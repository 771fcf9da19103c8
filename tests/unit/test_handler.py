from types import SimpleNamespace

import pytest

from scalemesh.core.config import reset_scaler_config
from scalemesh.core.controllers import CapacityScheduler
from scalemesh.core.controlplane import InMemoryControlPlane
from scalemesh.core.errors import (
    ConfigError,
    PoolNotFoundError,
    RejectedByControlPlane,
    TransientControlPlaneError,
)
from scalemesh.handler import extract_schedule, handle


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv("SCALEMESH_SCHEDULE", raising=False)
    monkeypatch.delenv("SCALEMESH_CONFIG", raising=False)
    reset_scaler_config()
    yield
    reset_scaler_config()


@pytest.mark.parametrize(
    "event, expected",
    [
        ({"schedule": "up"}, "up"),
        ({"action": "scale_down"}, "scale_down"),
        ({"detail": {"schedule": "down"}}, "down"),
        ("down", "down"),
    ],
)
def test_extract_schedule(event, expected):
    assert extract_schedule(event) == expected


def test_extract_schedule_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("SCALEMESH_SCHEDULE", "up")
    assert extract_schedule({}) == "up"


def test_extract_schedule_requires_a_name():
    with pytest.raises(ConfigError):
        extract_schedule({"source": "aws.events"})


def test_handle_returns_result(scheduler, control_plane):
    payload = handle({"schedule": "down"}, SimpleNamespace(aws_request_id="req-1"), scheduler=scheduler)

    assert payload["outcome"] == "APPLIED"
    assert payload["schedule"] == "down"
    assert control_plane.update_calls == [("workers", 0, 10, 0)]


def test_handle_returns_failed_for_rejection(scheduler, control_plane):
    control_plane.fail_next("update", RejectedByControlPlane("bad", pool="workers", code="InvalidParameterException"))

    payload = handle({"schedule": "down"}, scheduler=scheduler)

    assert payload["outcome"] == "FAILED"


def test_handle_propagates_transient(scheduler, control_plane):
    control_plane.fail_next("get", TransientControlPlaneError("timeout", pool="workers"))

    with pytest.raises(TransientControlPlaneError):
        handle({"schedule": "up"}, scheduler=scheduler)


def test_handle_propagates_pool_not_found(scaler_config, sink):
    scheduler = CapacityScheduler(scaler_config, InMemoryControlPlane(), sink)
    with pytest.raises(PoolNotFoundError):
        handle({"schedule": "up"}, scheduler=scheduler)
    assert sink.last["outcome"] == "FAILED"


def test_handle_builds_scheduler_from_config(tmp_path, monkeypatch):
    path = tmp_path / "scalemesh.yaml"
    path.write_text(
        "controller: {pool: workers, backend: memory}\n"
        "profiles:\n"
        "  up: {min_size: 2, max_size: 10, desired_size: 6}\n"
        "  down: {min_size: 0, max_size: 10, desired_size: 0}\n"
        "sink: {kind: none}\n"
        "memory_pools:\n"
        "  workers: {min_size: 0, max_size: 10, desired_size: 0}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SCALEMESH_CONFIG", str(path))

    assert handle({"schedule": "down"})["outcome"] == "SKIPPED_ALREADY_MATCHED"
    assert handle({"schedule": "up"})["outcome"] == "APPLIED"
