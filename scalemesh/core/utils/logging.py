"""Logging utilities for ScaleMesh runtime components."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union


_HANDLER_NAME = "_scalemesh_stream_handler"


def resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def configure_runtime_logging(level: Union[int, str] = logging.INFO, formatter: Optional[logging.Formatter] = None) -> None:
    """Ensure that runtime processes emit logs to stdout with a consistent format."""
    level = resolve_level(level)
    root_logger = logging.getLogger()
    if formatter is None:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    existing = None
    for handler in root_logger.handlers:
        if getattr(handler, _HANDLER_NAME, False):
            existing = handler
            break

    if existing is None:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_NAME, True)
        root_logger.addHandler(stream_handler)
    else:
        existing.setFormatter(formatter)
        existing.setLevel(level)

    if root_logger.level > level or root_logger.level == logging.NOTSET:
        root_logger.setLevel(level)


def demote_library_logging(level: int = logging.WARNING) -> None:
    """Quieten chatty third-party loggers (boto stack, Ray)."""
    for name in ("botocore", "boto3", "urllib3", "ray"):
        logging.getLogger(name).setLevel(level)
