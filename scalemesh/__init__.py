"""
ScaleMesh package skeleton.

This module exposes high-level entry points while keeping heavy dependencies
(boto3, Ray) lazy-imported so packaging tools do not require them during
metadata builds.
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "CapacityProfile",
    "CapacityScheduler",
    "ReconcileOutcome",
    "build_scheduler",
    "load_scaler_config",
    "__version__",
]


try:
    __version__ = version("scalemesh-core")
except PackageNotFoundError:
    __version__ = "0.0.0"


_LAZY_TARGETS = {
    "CapacityProfile": ("scalemesh.core.entities", "CapacityProfile"),
    "CapacityScheduler": ("scalemesh.core.controllers", "CapacityScheduler"),
    "ReconcileOutcome": ("scalemesh.core.entities", "ReconcileOutcome"),
    "build_scheduler": ("scalemesh.core.controllers", "build_scheduler"),
    "load_scaler_config": ("scalemesh.core.config", "load_scaler_config"),
}


def __getattr__(name: str):
    """Dynamically load public symbols to avoid importing optional deps early."""
    target = _LAZY_TARGETS.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    module_name, attribute = target
    module = import_module(module_name)
    value = getattr(module, attribute)
    globals()[name] = value  # cache for subsequent lookups
    return value
