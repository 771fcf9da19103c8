"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging

import pytest

from scalemesh.core.config import build_scaler_config
from scalemesh.core.controllers import CapacityScheduler
from scalemesh.core.controlplane import InMemoryControlPlane
from scalemesh.core.sinks import RecordingEventSink

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s", force=True)
logging.getLogger("scalemesh").setLevel(logging.DEBUG)


BASE_CONFIG = {
    "controller": {"pool": "workers", "backend": "memory", "call_timeout": 0.5},
    "profiles": {
        "up": {"min_size": 2, "max_size": 10, "desired_size": 6},
        "down": {"min_size": 0, "max_size": 10, "desired_size": 0},
    },
    "memory_pools": {"workers": {"min_size": 2, "max_size": 10, "desired_size": 6}},
}


@pytest.fixture
def scaler_config():
    return build_scaler_config(BASE_CONFIG, environ={})


@pytest.fixture
def control_plane():
    return InMemoryControlPlane({"workers": {"min_size": 2, "max_size": 10, "desired_size": 6}})


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def scheduler(scaler_config, control_plane, sink):
    return CapacityScheduler(scaler_config, control_plane, sink)


@pytest.fixture
def ray_runtime():
    """Spin up a local Ray runtime for tests."""
    ray = pytest.importorskip("ray")
    try:
        ray.init(
            ignore_reinit_error=True,
            num_cpus=2,
            include_dashboard=False,
            logging_level=logging.INFO,
        )
    except PermissionError as exc:
        pytest.skip(f"Ray init requires system permissions not available in this environment: {exc}")
    except Exception as exc:  # pragma: no cover - restricted sandboxes
        if "Operation not permitted" in str(exc):
            pytest.skip(f"Ray init skipped due to restricted environment: {exc}")
        raise
    try:
        yield
    finally:
        ray.shutdown()
