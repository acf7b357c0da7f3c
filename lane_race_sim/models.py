from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


def approx_equal(a: float, b: float, tolerance: float) -> bool:
    """Two track quantities are equal when they differ by less than tolerance."""
    return abs(a - b) < tolerance


@dataclass(slots=True)
class Position:
    # Distance along the track; accumulates fixed steps, so compare with a tolerance.
    offset: float
    lane: int

    def offset_increment(self, delta: float) -> None:
        self.offset += delta

    def set_lane(self, lane: int) -> None:
        self.lane = lane

    def is_same_lane(self, other: Position) -> bool:
        return self.lane == other.lane

    def is_coincident_with(self, other: Position, tolerance: float) -> bool:
        return self.is_same_lane(other) and approx_equal(self.offset, other.offset, tolerance)


class EntityKind(str, Enum):
    ACTOR = "actor"
    OBSTACLE = "obstacle"


class ActionKind(str, Enum):
    ADVANCE = "ADVANCE"
    ADVANCE_AND_SWITCH = "ADVANCE_AND_SWITCH"


@dataclass(frozen=True, slots=True)
class NextAction:
    """One actor's instruction for a single tick."""

    kind: ActionKind
    lane: int | None = None

    @classmethod
    def advance(cls) -> NextAction:
        return cls(ActionKind.ADVANCE)

    @classmethod
    def switch_to(cls, lane: int) -> NextAction:
        return cls(ActionKind.ADVANCE_AND_SWITCH, lane=lane)


@dataclass(frozen=True, slots=True)
class EntityRecord:
    """An already-parsed initialization record for one track entity."""

    name: str
    offset: float
    lane: int
    kind: EntityKind
    footprint_length: float = 0.0


@dataclass(frozen=True, slots=True)
class ScriptedCommand:
    # Distance traveled (or elapsed ticks) at which the switch fires.
    trigger: float
    actor_name: str
    destination_lane: int


@dataclass(slots=True)
class Entity:
    """
    A single participant on the track.

    Actors and obstacles share this record; behavior differs by kind only.
    Dead entities stay in the entity set as inert records for reporting.
    """

    name: str
    kind: EntityKind
    position: Position
    alive: bool = True
    distance_traveled: float = 0.0
    footprint_length: float = 0.0
    next_action: NextAction | None = None

    @classmethod
    def from_record(cls, record: EntityRecord) -> Entity:
        return cls(
            name=record.name,
            kind=record.kind,
            position=Position(float(record.offset), int(record.lane)),
            footprint_length=float(record.footprint_length),
        )

    @property
    def is_actor(self) -> bool:
        return self.kind == EntityKind.ACTOR

    @property
    def is_obstacle(self) -> bool:
        return self.kind == EntityKind.OBSTACLE
