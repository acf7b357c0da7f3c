from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

DEFAULT_STEP_SIZE = 0.05
DEFAULT_TOLERANCE_FACTOR = 0.5


class ConfigurationError(ValueError):
    """Raised when a simulation configuration is malformed."""


class CollisionPolicy(str, Enum):
    POINT = "point"
    FOOTPRINT = "footprint"


class TerminationPolicy(str, Enum):
    OBSTACLE_EXHAUSTION = "obstacle-exhaustion"
    OUTRUN = "outrun"


class ProgressMetric(str, Enum):
    """What a scripted command's trigger value is compared against."""

    DISTANCE = "distance"
    TICKS = "ticks"


def _coerce_enum(enum_cls: type[Enum], value: object, *, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"{label} must be one of: {allowed} (got {value!r})") from e


@dataclass(frozen=True)
class SimulationConfig:
    """
    Fixed-step simulation parameters, passed explicitly to every component.

    Two offsets closer than tolerance are treated as the same slot on the track.
    tolerance_factor derives it from step_size (half a step by default) and is
    kept, so a config rebuilt with another step_size re-derives its tolerance.
    Passing tolerance alone pins an absolute value (tolerance_factor stays None).
    """

    step_size: float = DEFAULT_STEP_SIZE
    tolerance: float | None = None
    # When set, wins over tolerance and is multiplied by step_size.
    tolerance_factor: float | None = None
    collision_policy: CollisionPolicy = CollisionPolicy.POINT
    termination_policy: TerminationPolicy = TerminationPolicy.OBSTACLE_EXHAUSTION
    progress_metric: ProgressMetric = ProgressMetric.DISTANCE
    # False: a lane switch consumes the tick without moving forward.
    switch_advances: bool = True
    # Safety cap; None means run until the termination predicate holds.
    max_ticks: int | None = None

    def __post_init__(self) -> None:
        step = self.step_size
        if isinstance(step, bool) or not isinstance(step, (int, float)):
            raise ConfigurationError("step_size must be a number")
        if not math.isfinite(step) or step <= 0:
            raise ConfigurationError(f"step_size must be a positive finite number (got {step!r})")
        object.__setattr__(self, "step_size", float(step))

        factor = self.tolerance_factor
        if factor is None and self.tolerance is None:
            factor = DEFAULT_TOLERANCE_FACTOR
        if factor is not None:
            if isinstance(factor, bool) or not isinstance(factor, (int, float)):
                raise ConfigurationError("tolerance_factor must be a number")
            if not math.isfinite(factor) or factor <= 0:
                raise ConfigurationError(f"tolerance_factor must be a positive finite number (got {factor!r})")
            object.__setattr__(self, "tolerance_factor", float(factor))
            tol = self.step_size * float(factor)
        else:
            tol = self.tolerance
        if isinstance(tol, bool) or not isinstance(tol, (int, float)):
            raise ConfigurationError("tolerance must be a number")
        if not math.isfinite(tol) or tol <= 0:
            raise ConfigurationError(f"tolerance must be a positive finite number (got {tol!r})")
        object.__setattr__(self, "tolerance", float(tol))

        object.__setattr__(
            self,
            "collision_policy",
            _coerce_enum(CollisionPolicy, self.collision_policy, label="collision_policy"),
        )
        object.__setattr__(
            self,
            "termination_policy",
            _coerce_enum(TerminationPolicy, self.termination_policy, label="termination_policy"),
        )
        object.__setattr__(
            self,
            "progress_metric",
            _coerce_enum(ProgressMetric, self.progress_metric, label="progress_metric"),
        )

        if not isinstance(self.switch_advances, bool):
            raise ConfigurationError("switch_advances must be a bool")

        if self.max_ticks is not None:
            if isinstance(self.max_ticks, bool) or not isinstance(self.max_ticks, int):
                raise ConfigurationError("max_ticks must be an int when provided")
            if self.max_ticks < 1:
                raise ConfigurationError(f"max_ticks must be >= 1 (got {self.max_ticks})")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> SimulationConfig:
        """
        Build a config from a JSON-style options object.

        tolerance_factor and tolerance are mutually exclusive.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ConfigurationError("options must be an object")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(f"unknown option(s): {', '.join(unknown)}")

        if raw.get("tolerance") is not None and raw.get("tolerance_factor") is not None:
            raise ConfigurationError("give either tolerance or tolerance_factor, not both")
        return cls(**raw)
