from __future__ import annotations

from lane_race_sim.config import SimulationConfig, TerminationPolicy
from lane_race_sim.engine import RaceSimulation
from lane_race_sim.models import EntityKind, EntityRecord, ScriptedCommand
from lane_race_sim.reporting import render_leaderboard
from lane_race_sim.trace import run_ticks_with_trace


def main() -> None:
    entities = [
        EntityRecord("Ana", 0.0, 0, EntityKind.ACTOR),
        EntityRecord("Bruno", 0.0, 1, EntityKind.ACTOR),
        EntityRecord("Cone", 0.5, 0, EntityKind.OBSTACLE),
        EntityRecord("Barrel", 1.0, 1, EntityKind.OBSTACLE),
    ]
    commands = [ScriptedCommand(0.45, "Ana", 2)]
    sim = RaceSimulation(entities, commands, SimulationConfig(termination_policy=TerminationPolicy.OUTRUN))

    log = run_ticks_with_trace(sim, 100)

    for entry in log:
        status = "TERMINATED" if entry.terminated else "running"
        print(
            f"\nTick {entry.tick:3d} | actors={entry.alive_actors} "
            f"obstacles={entry.alive_obstacles} | {status}"
        )
        for e in entry.entities:
            # Dead entities are marked with an x
            mark = " " if e.alive else "x"
            print(
                f"  {mark} {e.name:<8s} {e.kind.value:<8s} "
                f"offset={e.offset:6.3f} lane={e.lane:d} traveled={e.distance_traveled:6.3f}"
            )

    print()
    print(render_leaderboard(sim.ranking()), end="")


if __name__ == "__main__":
    main()
