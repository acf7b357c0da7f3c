import pytest

from lane_race_sim.config import SimulationConfig, TerminationPolicy
from lane_race_sim.engine import RaceSimulation
from lane_race_sim.models import EntityKind
from lane_race_sim.trace import run_ticks_with_trace
from tests._support.race_helpers import actor, command, obstacle


def make_sim():
    return RaceSimulation(
        [actor("A", 0.0, 0), obstacle("Rock", 0.5, 0)],
        [command(0.45, "A", 1)],
        SimulationConfig(termination_policy=TerminationPolicy.OUTRUN),
    )


def test_trace_stops_when_race_terminates():
    log = run_ticks_with_trace(make_sim(), 50)

    assert [t.tick for t in log] == list(range(1, 11))
    assert [t.terminated for t in log] == [False] * 9 + [True]


def test_trace_captures_post_tick_state():
    log = run_ticks_with_trace(make_sim(), 3)

    assert len(log) == 3
    first = log[0]
    a, rock = first.entities
    assert a.kind == EntityKind.ACTOR
    assert a.offset == pytest.approx(0.05)
    assert a.distance_traveled == pytest.approx(0.05)
    assert rock.kind == EntityKind.OBSTACLE
    assert rock.distance_traveled == 0.0
    assert first.alive_actors == 1
    assert first.alive_obstacles == 1

    last = run_ticks_with_trace(make_sim(), 10)[-1]
    assert last.entities[0].lane == 1
