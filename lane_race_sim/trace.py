from __future__ import annotations

from dataclasses import dataclass

from lane_race_sim.engine import RaceSimulation
from lane_race_sim.models import EntityKind


@dataclass(frozen=True)
class EntityTrace:
    name: str
    kind: EntityKind
    offset: float
    lane: int
    alive: bool
    # Always 0.0 for obstacles.
    distance_traveled: float


@dataclass(frozen=True)
class TickTrace:
    tick: int
    entities: list[EntityTrace]
    alive_actors: int
    alive_obstacles: int
    terminated: bool


def snapshot_tick(sim: RaceSimulation) -> TickTrace:
    """
    Capture the post-tick state of every entity, in registration order.

    This function does not modify simulation behavior.
    """
    traces = [
        EntityTrace(
            name=e.name,
            kind=e.kind,
            offset=float(e.position.offset),
            lane=int(e.position.lane),
            alive=bool(e.alive),
            distance_traveled=float(e.distance_traveled),
        )
        for e in sim.entities
    ]
    return TickTrace(
        tick=sim.tick,
        entities=traces,
        alive_actors=sim.entities.alive_actor_count(),
        alive_obstacles=sim.entities.alive_obstacle_count(),
        terminated=not sim.is_running,
    )


def run_ticks_with_trace(sim: RaceSimulation, num_ticks: int) -> list[TickTrace]:
    """
    Run up to num_ticks ticks, returning a per-tick trace log.

    Stops early once the race terminates.
    """
    log: list[TickTrace] = []
    for _ in range(num_ticks):
        if not sim.is_running:
            break
        sim.step_tick()
        log.append(snapshot_tick(sim))
    return log
