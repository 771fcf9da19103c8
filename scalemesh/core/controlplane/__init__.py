"""
Control-plane clients for managed compute pools.
"""

from .base import ControlPlaneClient  # noqa: F401
from .memory import InMemoryControlPlane  # noqa: F401

__all__ = [
    "ControlPlaneClient",
    "EksNodegroupClient",
    "InMemoryControlPlane",
]


def __getattr__(name: str):
    # boto3 is only imported when the EKS backend is actually used.
    if name == "EksNodegroupClient":
        from .eks import EksNodegroupClient

        return EksNodegroupClient
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
