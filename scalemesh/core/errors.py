"""
Error taxonomy shared by the capacity scheduler and its collaborators.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ScaleMeshError",
    "ConfigError",
    "InvalidProfileError",
    "ControlPlaneError",
    "PoolNotFoundError",
    "TransientControlPlaneError",
    "RejectedByControlPlane",
    "PoolBusyError",
]


class ScaleMeshError(Exception):
    """Base class for every error raised by ScaleMesh."""


class ConfigError(ScaleMeshError):
    """Static configuration is missing, malformed or references unknown schedules."""


class InvalidProfileError(ScaleMeshError, ValueError):
    """A capacity profile violates ``0 <= min <= desired <= max``."""


class ControlPlaneError(ScaleMeshError):
    """Base class for failures reported by (or while talking to) the control plane."""

    def __init__(self, message: str, *, pool: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.pool = pool
        self.code = code

    def describe(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        return f"{prefix}{self}"


class PoolNotFoundError(ControlPlaneError):
    """
    The pool identifier is unknown to the control plane.

    Indicates drift between trigger wiring and configuration. Never retried.
    """


class TransientControlPlaneError(ControlPlaneError):
    """Timeout, connection failure or 5xx. Safe to retry from the invoker."""


class RejectedByControlPlane(ControlPlaneError):
    """The control plane permanently rejected a specific request (validation, quota, version conflict)."""


class PoolBusyError(ControlPlaneError):
    """The control plane refused an update because another one is still in progress."""
