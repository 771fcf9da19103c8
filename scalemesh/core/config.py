"""Configuration helpers for ScaleMesh.

This module loads the YAML file describing which pool to manage and the
capacity profile attached to each schedule.  Configuration precedence:

1. An explicit path passed by the caller (CLI ``--config``).
2. Environment variable ``SCALEMESH_CONFIG`` pointing to a YAML file.
3. ``scalemesh.yaml`` in the current working directory.

Selected controller fields can be overridden through environment variables
(``SCALEMESH_POOL``, ``SCALEMESH_CLUSTER``, ``SCALEMESH_REGION``,
``SCALEMESH_CALL_TIMEOUT``, ``SCALEMESH_DRY_RUN``) so the same deployment
package can be bound to different pools per trigger.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from scalemesh.config.schedules import (
    ScheduleName,
    resolve_env_value,
    resolve_schedule,
    validate_cron_expression,
)
from scalemesh.core.entities.capacity import CapacityProfile
from scalemesh.core.errors import ConfigError, InvalidProfileError

__all__ = [
    "ScalerConfig",
    "ScheduleSpec",
    "SinkConfig",
    "build_scaler_config",
    "get_scaler_config",
    "load_scaler_config",
    "reset_scaler_config",
]


_ENV_VAR = "SCALEMESH_CONFIG"
_CWD_FILENAME = "scalemesh.yaml"
_BACKENDS = ("eks", "memory")
_SINK_KINDS = ("log", "jsonl", "none")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

DEFAULT_CALL_TIMEOUT = 10.0


@dataclass(frozen=True)
class ScheduleSpec:
    name: str
    cron: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class SinkConfig:
    kind: str = "log"
    path: Optional[str] = None


@dataclass(frozen=True)
class ScalerConfig:
    """Immutable controller configuration, loaded once per process."""

    pool: str
    profiles: Mapping[str, CapacityProfile]
    cluster: Optional[str] = None
    region: Optional[str] = None
    backend: str = "eks"
    call_timeout: float = DEFAULT_CALL_TIMEOUT
    dry_run: bool = False
    schedules: Mapping[str, ScheduleSpec] = field(default_factory=dict)
    sink: SinkConfig = field(default_factory=SinkConfig)
    memory_pools: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # mapping fields are exposed as read-only views
        object.__setattr__(self, "profiles", MappingProxyType(dict(self.profiles)))
        object.__setattr__(self, "schedules", MappingProxyType(dict(self.schedules)))
        object.__setattr__(
            self,
            "memory_pools",
            MappingProxyType({name: MappingProxyType(dict(seed)) for name, seed in self.memory_pools.items()}),
        )

    def __reduce__(self):
        # mappingproxy cannot be pickled; ship plain dicts and re-wrap on load
        state = {f.name: getattr(self, f.name) for f in fields(self)}
        state["profiles"] = dict(self.profiles)
        state["schedules"] = dict(self.schedules)
        state["memory_pools"] = {name: dict(seed) for name, seed in self.memory_pools.items()}
        return (_restore_scaler_config, (state,))

    def profile_for(self, schedule: str | ScheduleName) -> CapacityProfile:
        """Map a trigger identifier to its configured profile."""
        name = resolve_schedule(schedule)
        if name is None or name not in self.profiles:
            raise ConfigError(
                f"No capacity profile configured for schedule '{schedule}'. "
                f"Available: {', '.join(sorted(self.profiles))}"
            )
        return self.profiles[name]


def _restore_scaler_config(state: Dict[str, Any]) -> ScalerConfig:
    return ScalerConfig(**state)


_scaler_config: Optional[ScalerConfig] = None


def _resolve_config_path(explicit: Optional[str | Path] = None) -> Path:
    if explicit is not None:
        candidate = Path(explicit).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"Config file '{candidate}' does not exist")
        return candidate

    env_path = os.environ.get(_ENV_VAR)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate.is_file():
            return candidate
        raise ConfigError(f"{_ENV_VAR} points to missing file '{candidate}'")

    cwd_file = Path.cwd() / _CWD_FILENAME
    if cwd_file.is_file():
        return cwd_file
    raise ConfigError(f"No configuration found: set {_ENV_VAR} or create ./{_CWD_FILENAME}")


def _load_yaml_dict(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of '{path}' must be a mapping")
    return data


def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    node = data.get(name) or {}
    if not isinstance(node, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return node


def _override(node: Dict[str, Any], key: str, environ: Mapping[str, str], env_key: str) -> Optional[str]:
    if env_key in environ and str(environ[env_key]).strip():
        return str(environ[env_key]).strip()
    raw = node.get(key)
    if raw is None:
        return None
    if isinstance(raw, str):
        return resolve_env_value(raw)
    return str(raw)


def _coerce_bool(raw: Optional[str], *, name: str) -> bool:
    if raw is None:
        return False
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"'{name}' must be a boolean, got '{raw}'")


def _coerce_timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_CALL_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"'call_timeout' must be a number, got '{raw}'") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"'call_timeout' must be finite and positive, got {value}")
    return value


def _build_profiles(node: Dict[str, Any], default_pool: str) -> Dict[str, CapacityProfile]:
    profiles: Dict[str, CapacityProfile] = {}
    for raw_name, raw_profile in node.items():
        name = resolve_schedule(str(raw_name))
        if not name:
            raise ConfigError(f"Invalid profile name '{raw_name}'")
        try:
            profiles[name] = CapacityProfile.from_dict(raw_profile, default_pool=default_pool)
        except InvalidProfileError as exc:
            raise ConfigError(f"Profile '{name}': {exc}") from exc

    missing = [s.value for s in ScheduleName if s.value not in profiles]
    if missing:
        raise ConfigError(f"'profiles' must define {', '.join(missing)}")
    return profiles


def _build_schedules(node: Dict[str, Any]) -> Dict[str, ScheduleSpec]:
    schedules: Dict[str, ScheduleSpec] = {}
    for raw_name, raw_spec in node.items():
        name = resolve_schedule(str(raw_name)) or str(raw_name)
        if isinstance(raw_spec, str):
            raw_spec = {"cron": raw_spec}
        if not isinstance(raw_spec, dict):
            raise ConfigError(f"Schedule '{name}' must be a mapping or a cron string")
        cron = raw_spec.get("cron")
        if cron is not None:
            try:
                cron = validate_cron_expression(cron)
            except ValueError as exc:
                raise ConfigError(f"Schedule '{name}': {exc}") from exc
        schedules[name] = ScheduleSpec(
            name=name,
            cron=cron,
            description=str(raw_spec.get("description", "")).strip(),
        )
    return schedules


def _build_sink(node: Dict[str, Any]) -> SinkConfig:
    kind = str(node.get("kind", "log")).strip().lower() or "log"
    if kind not in _SINK_KINDS:
        raise ConfigError(f"Unknown sink kind '{kind}'. Expected one of: {', '.join(_SINK_KINDS)}")
    path = node.get("path")
    if kind == "jsonl" and not path:
        raise ConfigError("Sink kind 'jsonl' requires a 'path'")
    return SinkConfig(kind=kind, path=str(path) if path else None)


def build_scaler_config(data: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> ScalerConfig:
    """Validate a raw configuration mapping and apply environment overrides."""
    env = os.environ if environ is None else environ
    controller = _section(data, "controller")

    pool = _override(controller, "pool", env, "SCALEMESH_POOL")
    if not pool:
        raise ConfigError("'controller.pool' is required")

    backend = str(controller.get("backend", "eks")).strip().lower()
    if backend not in _BACKENDS:
        raise ConfigError(f"Unknown backend '{backend}'. Expected one of: {', '.join(_BACKENDS)}")

    cluster = _override(controller, "cluster", env, "SCALEMESH_CLUSTER")
    if backend == "eks" and not cluster:
        raise ConfigError("'controller.cluster' is required for the eks backend")

    memory_pools = _section(data, "memory_pools")
    for name, seed in memory_pools.items():
        if not isinstance(seed, dict):
            raise ConfigError(f"memory_pools.{name} must be a mapping")

    return ScalerConfig(
        pool=pool,
        profiles=_build_profiles(_section(data, "profiles"), pool),
        cluster=cluster,
        region=_override(controller, "region", env, "SCALEMESH_REGION"),
        backend=backend,
        call_timeout=_coerce_timeout(_override(controller, "call_timeout", env, "SCALEMESH_CALL_TIMEOUT")),
        dry_run=_coerce_bool(_override(controller, "dry_run", env, "SCALEMESH_DRY_RUN"), name="dry_run"),
        schedules=_build_schedules(_section(data, "schedules")),
        sink=_build_sink(_section(data, "sink")),
        memory_pools={str(k): dict(v) for k, v in memory_pools.items()},
    )


def load_scaler_config(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ScalerConfig:
    resolved = _resolve_config_path(path)
    return build_scaler_config(_load_yaml_dict(resolved), environ)


def get_scaler_config() -> ScalerConfig:
    global _scaler_config
    if _scaler_config is None:
        _scaler_config = load_scaler_config()
    return _scaler_config


def reset_scaler_config() -> None:
    """Reset cached configuration (intended for tests)."""
    global _scaler_config
    _scaler_config = None
