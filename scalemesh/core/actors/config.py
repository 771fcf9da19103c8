"""
Shared configuration dataclasses for ScaleMesh actors.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ActorConfig:
    """Generic configuration for long-lived ScaleMesh actors."""

    name: str
    log_level: str = "INFO"
    max_events: int = 1000
