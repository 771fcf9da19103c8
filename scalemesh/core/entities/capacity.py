"""
Capacity profile entity definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from scalemesh.core.errors import InvalidProfileError

_FIELD_ALIASES = {
    "min_size": ("min_size", "min", "minSize"),
    "max_size": ("max_size", "max", "maxSize"),
    "desired_size": ("desired_size", "desired", "desiredSize"),
}


def _pick(values: Mapping[str, Any], field_name: str) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in values:
            return values[key]
    raise InvalidProfileError(f"Capacity profile is missing '{field_name}'")


def _coerce_size(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidProfileError(f"{name} must be an integer, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidProfileError(f"{name} must be an integer, got {raw!r}") from exc
    if value != raw and not isinstance(raw, str):
        raise InvalidProfileError(f"{name} must be a whole number, got {raw!r}")
    return value


@dataclass(frozen=True)
class CapacityProfile:
    """Target ``(min, max, desired)`` capacity for a single pool."""

    pool: str
    min_size: int
    max_size: int
    desired_size: int

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.pool, str) or not self.pool.strip():
            raise InvalidProfileError("Capacity profile requires a non-empty pool identifier")
        for name in ("min_size", "max_size", "desired_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidProfileError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidProfileError(f"{name} must be non-negative, got {value}")
        if not self.min_size <= self.desired_size <= self.max_size:
            raise InvalidProfileError(
                f"Profile for pool '{self.pool}' violates min <= desired <= max: "
                f"min={self.min_size} desired={self.desired_size} max={self.max_size}"
            )

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.min_size, self.max_size, self.desired_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool": self.pool,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "desired_size": self.desired_size,
        }

    @classmethod
    def from_dict(cls, values: Mapping[str, Any], *, default_pool: Optional[str] = None) -> "CapacityProfile":
        """
        Build a profile from a configuration mapping.

        Accepts ``min_size``/``max_size``/``desired_size`` as well as the short
        ``min``/``max``/``desired`` spellings. ``pool`` falls back to
        ``default_pool`` when omitted.

        Raises:
            InvalidProfileError: if a field is missing, non-integral or the
                ordering invariant does not hold.
        """
        if not isinstance(values, Mapping):
            raise InvalidProfileError("Capacity profile must be a mapping")
        pool = values.get("pool", default_pool)
        if pool is None:
            raise InvalidProfileError("Capacity profile requires a pool identifier")
        return cls(
            pool=str(pool).strip(),
            min_size=_coerce_size("min_size", _pick(values, "min_size")),
            max_size=_coerce_size("max_size", _pick(values, "max_size")),
            desired_size=_coerce_size("desired_size", _pick(values, "desired_size")),
        )

    def __str__(self) -> str:
        return f"{self.pool}(min={self.min_size}, max={self.max_size}, desired={self.desired_size})"
