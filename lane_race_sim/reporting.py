from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from lane_race_sim.models import Entity


@dataclass(frozen=True, slots=True)
class RankingEntry:
    actor_name: str
    distance_traveled: float
    survived: bool


def build_ranking(actors: Iterable[Entity]) -> list[RankingEntry]:
    """
    Final ranking, ascending by distance traveled.

    sorted() is stable, so ties keep registration order.
    """
    entries = [
        RankingEntry(
            actor_name=a.name,
            distance_traveled=float(a.distance_traveled),
            survived=bool(a.alive),
        )
        for a in actors
    ]
    return sorted(entries, key=lambda e: e.distance_traveled)


def render_leaderboard(ranking: Iterable[RankingEntry]) -> str:
    out: list[str] = []
    for entry in ranking:
        if entry.survived:
            out.append(f"{entry.actor_name} traveled for {entry.distance_traveled:g} without crashing!")
        else:
            out.append(f"{entry.actor_name} crashed after traveling for {entry.distance_traveled:g}")
    if not out:
        return "(No actors were registered.)\n"
    return "\n".join(out) + "\n"
