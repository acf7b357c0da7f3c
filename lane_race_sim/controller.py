from __future__ import annotations

from collections import deque
from typing import Iterable

from lane_race_sim.config import ProgressMetric
from lane_race_sim.logging_utils import get_logger
from lane_race_sim.models import Entity, NextAction, ScriptedCommand, approx_equal

logger = get_logger("controller")


def group_commands(commands: Iterable[ScriptedCommand]) -> dict[str, deque[ScriptedCommand]]:
    """
    Sort commands by trigger (stable) and split them into one FIFO queue per actor.
    """
    ordered = sorted(commands, key=lambda c: c.trigger)
    queues: dict[str, deque[ScriptedCommand]] = {}
    for command in ordered:
        queues.setdefault(command.actor_name, deque()).append(command)
    return queues


class CommandController:
    """
    Decides every actor's NextAction at the start of a tick.

    Only the head of an actor's queue is ever inspected. The head is consumed
    when its trigger equals the actor's progress within tolerance; a trigger that
    is stepped over without such a match is never consumed, and it keeps every
    later command in that queue from firing.

    Commands naming an unknown actor are kept but never consulted.
    """

    def __init__(
        self,
        commands: Iterable[ScriptedCommand] = (),
        *,
        tolerance: float,
        progress_metric: ProgressMetric = ProgressMetric.DISTANCE,
    ) -> None:
        self._queues = group_commands(commands)
        self.tolerance = float(tolerance)
        self.progress_metric = ProgressMetric(progress_metric)

    def pending(self, actor_name: str) -> tuple[ScriptedCommand, ...]:
        return tuple(self._queues.get(actor_name, ()))

    def progress_of(self, actor: Entity, elapsed_ticks: int) -> float:
        if self.progress_metric == ProgressMetric.TICKS:
            return float(elapsed_ticks)
        return float(actor.distance_traveled)

    def dispatch(self, actor: Entity, *, elapsed_ticks: int = 0) -> NextAction:
        """Assign (and return) the actor's action for the coming tick."""
        action = self._next_action(actor, elapsed_ticks)
        actor.next_action = action
        return action

    def _next_action(self, actor: Entity, elapsed_ticks: int) -> NextAction:
        if not actor.alive:
            return NextAction.advance()

        queue = self._queues.get(actor.name)
        if not queue:
            return NextAction.advance()

        head = queue[0]
        if not approx_equal(head.trigger, self.progress_of(actor, elapsed_ticks), self.tolerance):
            return NextAction.advance()

        queue.popleft()
        logger.debug(
            "dispatching lane %d to %s (trigger %.4f)",
            head.destination_lane,
            actor.name,
            head.trigger,
        )
        return NextAction.switch_to(head.destination_lane)
