from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator

from lane_race_sim.config import SimulationConfig
from lane_race_sim.event_sink import EventSink
from lane_race_sim.events import EventType
from lane_race_sim.logging_utils import get_logger
from lane_race_sim.models import ActionKind, Entity, EntityKind, EntityRecord

if TYPE_CHECKING:
    from lane_race_sim.collision import CollisionDetector

logger = get_logger("entities")


@dataclass(frozen=True, slots=True)
class TickContext:
    """Everything an entity needs to advance during one tick. Built per tick, never stored."""

    tick: int
    config: SimulationConfig
    detector: CollisionDetector
    event_sink: EventSink | None = None


class EntitySet:
    """
    Index-stable storage for every actor and obstacle.

    Entities are never removed; indices handed out by add() stay valid for the
    lifetime of the set.
    """

    def __init__(self, records: Iterable[EntityRecord] = ()) -> None:
        self._entities: list[Entity] = []
        self._actors: list[int] = []
        self._obstacles: list[int] = []
        for record in records:
            self.add(record)

    def add(self, record: EntityRecord) -> int:
        entity = Entity.from_record(record)
        index = len(self._entities)
        self._entities.append(entity)
        if entity.kind == EntityKind.ACTOR:
            self._actors.append(index)
        else:
            self._obstacles.append(index)
        return index

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def __getitem__(self, index: int) -> Entity:
        return self._entities[index]

    def actor_indices(self) -> list[int]:
        return list(self._actors)

    def obstacle_indices(self) -> list[int]:
        return list(self._obstacles)

    @property
    def actors(self) -> list[Entity]:
        """Actors in registration order (alive or not)."""
        return [self._entities[i] for i in self._actors]

    @property
    def obstacles(self) -> list[Entity]:
        return [self._entities[i] for i in self._obstacles]

    def alive_actor_count(self) -> int:
        return sum(1 for e in self.actors if e.alive)

    def alive_obstacle_count(self) -> int:
        return sum(1 for e in self.obstacles if e.alive)

    def frontmost_actor_offset(self) -> float | None:
        offsets = [e.position.offset for e in self.actors if e.alive]
        return max(offsets) if offsets else None

    def advance(self, index: int, ctx: TickContext) -> None:
        entity = self._entities[index]
        if entity.kind == EntityKind.ACTOR:
            self._advance_actor(index, entity, ctx)
        else:
            self._advance_obstacle(index, entity, ctx)

    def _advance_actor(self, index: int, actor: Entity, ctx: TickContext) -> None:
        action = actor.next_action
        actor.next_action = None
        if not actor.alive:
            return

        step = ctx.config.step_size
        if action is not None and action.kind == ActionKind.ADVANCE_AND_SWITCH:
            from_lane = actor.position.lane
            if ctx.config.switch_advances:
                actor.position.offset_increment(step)
                actor.distance_traveled += step
            actor.position.set_lane(int(action.lane))
            logger.debug(
                "tick %d: %s switched lane %d -> %d at offset %.4f",
                ctx.tick,
                actor.name,
                from_lane,
                actor.position.lane,
                actor.position.offset,
            )
            if ctx.event_sink is not None:
                ctx.event_sink.emit(
                    EventType.LANE_SWITCH,
                    actor=actor.name,
                    from_lane=from_lane,
                    to_lane=actor.position.lane,
                    offset=float(actor.position.offset),
                    distance_traveled=float(actor.distance_traveled),
                )
        else:
            actor.position.offset_increment(step)
            actor.distance_traveled += step

        self._report(index, ctx)

    def _advance_obstacle(self, index: int, obstacle: Entity, ctx: TickContext) -> None:
        # Obstacles never move; they only re-check from their own side.
        if obstacle.alive:
            self._report(index, ctx)

    def _report(self, index: int, ctx: TickContext) -> None:
        hit = ctx.detector.check(index, self)
        if hit is None or ctx.event_sink is None:
            return
        reporter = self._entities[index]
        other = self._entities[hit]
        actor, obstacle = (reporter, other) if reporter.is_actor else (other, reporter)
        ctx.event_sink.emit(
            EventType.COLLISION,
            actor=actor.name,
            obstacle=obstacle.name,
            offset=float(actor.position.offset),
            lane=actor.position.lane,
            distance_traveled=float(actor.distance_traveled),
        )
