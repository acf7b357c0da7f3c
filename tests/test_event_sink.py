import pytest

from lane_race_sim.config import SimulationConfig, TerminationPolicy
from lane_race_sim.engine import RaceSimulation
from lane_race_sim.event_sink import InMemoryEventSink
from lane_race_sim.events import EventType
from tests._support.race_helpers import actor, command, obstacle


def test_event_order_on_switch_tick():
    """
    Asserts causality ordering on the tick where the scripted switch fires
    and the race ends:
      TICK_START -> LANE_SWITCH -> TERMINATED
    """
    sink = InMemoryEventSink()
    sim = RaceSimulation(
        [actor("A", 0.0, 0), obstacle("Rock", 0.5, 0)],
        [command(0.45, "A", 1)],
        SimulationConfig(termination_policy=TerminationPolicy.OUTRUN),
        event_sink=sink,
    )

    sim.run()

    tick10 = [e for e in sink.events if e.tick == 10]
    assert [e.type for e in tick10] == [
        EventType.TICK_START,
        EventType.LANE_SWITCH,
        EventType.TERMINATED,
    ]
    switch = tick10[1]
    assert switch.actor == "A"
    assert switch.data["from_lane"] == 0
    assert switch.data["to_lane"] == 1
    assert switch.data["offset"] == pytest.approx(0.5)
    assert sink.current_tick == sim.tick


def test_collision_event_names_both_participants():
    sink = InMemoryEventSink()
    sim = RaceSimulation([actor("A", 0.0, 0), obstacle("Rock", 0.5, 0)], event_sink=sink)

    sim.run()

    collisions = sink.of_type(EventType.COLLISION)
    assert len(collisions) == 1
    evt = collisions[0]
    assert evt.tick == 10
    assert evt.actor == "A"
    assert evt.data["obstacle"] == "Rock"
    assert evt.data["lane"] == 0
    assert evt.data["distance_traveled"] == pytest.approx(0.5)
    assert sink.events[-1].type == EventType.TERMINATED


def test_sequence_numbers_restart_each_tick():
    sink = InMemoryEventSink()
    sim = RaceSimulation([actor("A", 0.0, 0), obstacle("Rock", 0.2, 0)], event_sink=sink)

    sim.run()

    keys = [(e.tick, e.seq) for e in sink.events]
    assert keys == sorted(keys)
    assert all(e.seq == 1 for e in sink.events if e.type == EventType.TICK_START)


def test_emit_before_start_tick_is_rejected():
    sink = InMemoryEventSink()
    with pytest.raises(RuntimeError):
        sink.emit(EventType.TICK_START)


def test_events_can_be_filtered_by_actor():
    sink = InMemoryEventSink()
    sim = RaceSimulation(
        [actor("A", 0.0, 0), actor("B", 0.0, 1), obstacle("Rock", 0.5, 0)],
        [command(0.1, "B", 2)],
        event_sink=sink,
    )

    sim.run()

    assert [e.type for e in sink.for_actor("A")] == [EventType.COLLISION]
    assert [e.type for e in sink.for_actor("B")] == [EventType.LANE_SWITCH]
