from __future__ import annotations

from enum import Enum
from typing import Iterable

from lane_race_sim.collision import CollisionDetector
from lane_race_sim.config import SimulationConfig, TerminationPolicy
from lane_race_sim.controller import CommandController
from lane_race_sim.entities import EntitySet, TickContext
from lane_race_sim.event_sink import EventSink
from lane_race_sim.events import EventType
from lane_race_sim.logging_utils import get_logger
from lane_race_sim.models import EntityRecord, ScriptedCommand
from lane_race_sim.reporting import RankingEntry, build_ranking

logger = get_logger("engine")


class SimulationState(str, Enum):
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


class SimulationDidNotConverge(RuntimeError):
    """Raised when max_ticks is reached while the race is still running."""


class RaceSimulation:
    """
    Deterministic fixed-step race between scripted actors and fixed obstacles.

    One tick:
      1) every actor (alive or not) gets its NextAction from the controller
      2) every actor advances, then checks itself for collisions
      3) every obstacle re-checks from its own side
      4) the termination predicate is evaluated

    The predicate is also evaluated once at construction, so a roster that is
    already finished (no actors, or nothing left to hit) never ticks.
    """

    def __init__(
        self,
        records: Iterable[EntityRecord],
        commands: Iterable[ScriptedCommand] = (),
        config: SimulationConfig | None = None,
        *,
        event_sink: EventSink | None = None,
    ) -> None:
        self.config = config if config is not None else SimulationConfig()
        self.entities = EntitySet(records)
        self.controller = CommandController(
            commands,
            tolerance=self.config.tolerance,
            progress_metric=self.config.progress_metric,
        )
        self.detector = CollisionDetector(self.config)
        self.event_sink = event_sink
        self.tick = 0
        self.state = SimulationState.RUNNING
        if self.should_terminate():
            self.state = SimulationState.TERMINATED

        logger.info(
            "race ready: %d actor(s), %d obstacle(s), policies=%s/%s, state=%s",
            len(self.entities.actor_indices()),
            len(self.entities.obstacle_indices()),
            self.config.collision_policy.value,
            self.config.termination_policy.value,
            self.state.value,
        )

    @property
    def is_running(self) -> bool:
        return self.state == SimulationState.RUNNING

    def should_terminate(self) -> bool:
        if self.entities.alive_actor_count() == 0:
            return True

        if self.config.termination_policy == TerminationPolicy.OBSTACLE_EXHAUSTION:
            return self.entities.alive_obstacle_count() == 0

        # OUTRUN: every live obstacle has been reached or passed by the leader.
        front = self.entities.frontmost_actor_offset()
        if front is None:
            return True
        tol = self.config.tolerance
        return all(
            front > self.detector.obstacle_end(o) - tol
            for o in self.entities.obstacles
            if o.alive
        )

    def step_tick(self) -> SimulationState:
        """
        Advance the race by one tick. A terminated race is left untouched.
        """
        if not self.is_running:
            return self.state

        max_ticks = self.config.max_ticks
        if max_ticks is not None and self.tick >= max_ticks:
            raise SimulationDidNotConverge(
                f"simulation did not converge within {max_ticks} ticks "
                f"({self.entities.alive_actor_count()} actor(s) and "
                f"{self.entities.alive_obstacle_count()} obstacle(s) still alive)"
            )

        elapsed = self.tick
        self.tick += 1
        if self.event_sink is not None:
            self.event_sink.start_tick()
            self.event_sink.emit(EventType.TICK_START)

        # 1) dispatch
        for i in self.entities.actor_indices():
            self.controller.dispatch(self.entities[i], elapsed_ticks=elapsed)

        ctx = TickContext(
            tick=self.tick,
            config=self.config,
            detector=self.detector,
            event_sink=self.event_sink,
        )

        # 2) actors, 3) obstacles
        for i in self.entities.actor_indices():
            self.entities.advance(i, ctx)
        for i in self.entities.obstacle_indices():
            self.entities.advance(i, ctx)

        # 4) termination
        if self.should_terminate():
            self.state = SimulationState.TERMINATED
            alive = self.entities.alive_actor_count()
            logger.info("race terminated after %d tick(s); %d actor(s) alive", self.tick, alive)
            if self.event_sink is not None:
                self.event_sink.emit(
                    EventType.TERMINATED,
                    ticks=self.tick,
                    alive_actors=alive,
                    alive_obstacles=self.entities.alive_obstacle_count(),
                )
        return self.state

    def run(self) -> list[RankingEntry]:
        """Tick until terminated; returns the final ranking."""
        while self.is_running:
            self.step_tick()
        return self.ranking()

    def ranking(self) -> list[RankingEntry]:
        return build_ranking(self.entities.actors)
