from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """
    What can happen during a race tick.

    TICK_START opens every tick. LANE_SWITCH and COLLISION follow in advance
    order (actors first, then obstacles). TERMINATED closes the final tick.
    """

    TICK_START = "TICK_START"
    LANE_SWITCH = "LANE_SWITCH"
    COLLISION = "COLLISION"
    TERMINATED = "TERMINATED"


@dataclass(frozen=True, slots=True)
class Event:
    """
    One race fact, ordered by (tick, seq).

    actor names the actor involved (None for tick-level events); data holds
    offsets, lanes and the obstacle name where relevant.
    """

    tick: int
    seq: int
    type: EventType
    actor: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
