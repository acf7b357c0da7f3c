from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from lane_race_sim.events import Event, EventType


class EventSink(ABC):
    """
    Receives lane switches, collisions and termination from a running race.
    RaceSimulation runs identically without one (event_sink=None).
    """

    @abstractmethod
    def start_tick(self) -> int: ...

    @abstractmethod
    def emit(self, event_type: EventType, actor: str | None = None, **data: Any) -> None: ...


@dataclass
class InMemoryEventSink(EventSink):
    """
    Keeps every race event in a list, for tests, the CLI --events-out dump
    and post-race inspection.

    Tick numbers advance with start_tick() and so match RaceSimulation.tick;
    seq restarts at 1 on every tick.
    """

    events: list[Event] = field(default_factory=list)
    _tick: int = field(default=0, init=False)
    _seq: int = field(default=0, init=False)

    @property
    def current_tick(self) -> int:
        return self._tick

    def start_tick(self) -> int:
        self._tick += 1
        self._seq = 0
        return self._tick

    def emit(self, event_type: EventType, actor: str | None = None, **data: object) -> None:
        if self._tick <= 0:
            raise RuntimeError(f"{event_type.value} emitted before the first race tick started")
        self._seq += 1
        self.events.append(Event(self._tick, self._seq, event_type, actor, dict(data)))

    def of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.type == event_type]

    def for_actor(self, name: str) -> list[Event]:
        return [e for e in self.events if e.actor == name]
