from __future__ import annotations

from typing import TYPE_CHECKING

from lane_race_sim.config import CollisionPolicy, SimulationConfig
from lane_race_sim.logging_utils import get_logger
from lane_race_sim.models import Entity

if TYPE_CHECKING:
    from lane_race_sim.entities import EntitySet

logger = get_logger("collision")


class CollisionDetector:
    """
    Actor vs obstacle collision checks for one reporting entity at a time.

    Policies:
    - POINT: same lane and offsets coincide within tolerance.
    - FOOTPRINT: same lane and the actor's offset lies within the obstacle's
      footprint [offset, offset + footprint_length], widened by tolerance on
      both ends (a zero-length footprint behaves like POINT).

    Either way the first live match wins and both participants are deactivated.
    Entities of the same kind never collide.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.policy = config.collision_policy
        self.tolerance = float(config.tolerance)

    def obstacle_end(self, obstacle: Entity) -> float:
        """Furthest offset an actor can occupy and still hit this obstacle."""
        if self.policy == CollisionPolicy.FOOTPRINT:
            return obstacle.position.offset + obstacle.footprint_length
        return obstacle.position.offset

    def overlaps(self, actor: Entity, obstacle: Entity) -> bool:
        if self.policy == CollisionPolicy.POINT:
            return actor.position.is_coincident_with(obstacle.position, self.tolerance)

        if not actor.position.is_same_lane(obstacle.position):
            return False
        start = obstacle.position.offset - self.tolerance
        end = self.obstacle_end(obstacle) + self.tolerance
        return start < actor.position.offset < end

    def check(self, index: int, entities: EntitySet) -> int | None:
        """
        Scan live entities of the opposite kind for an overlap with entities[index].

        Returns the index of the entity hit, or None.
        """
        reporter = entities[index]
        if not reporter.alive:
            return None

        candidates = entities.obstacle_indices() if reporter.is_actor else entities.actor_indices()
        for other_index in candidates:
            other = entities[other_index]
            if not other.alive:
                continue
            actor, obstacle = (reporter, other) if reporter.is_actor else (other, reporter)
            if self.overlaps(actor, obstacle):
                actor.alive = False
                obstacle.alive = False
                logger.info(
                    "%s collided with %s at offset %.4f in lane %d",
                    actor.name,
                    obstacle.name,
                    actor.position.offset,
                    actor.position.lane,
                )
                return other_index
        return None
