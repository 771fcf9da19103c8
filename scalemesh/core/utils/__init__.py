"""Utility helpers for ScaleMesh."""

from .logging import configure_runtime_logging, demote_library_logging, resolve_level  # noqa: F401

__all__ = [
    "configure_runtime_logging",
    "demote_library_logging",
    "resolve_level",
]
