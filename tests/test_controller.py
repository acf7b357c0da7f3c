from lane_race_sim.config import ProgressMetric
from lane_race_sim.controller import CommandController, group_commands
from lane_race_sim.models import ActionKind, Entity
from tests._support.race_helpers import actor, command


def make_actor(name="A", traveled=0.0):
    a = Entity.from_record(actor(name))
    a.distance_traveled = traveled
    return a


def test_grouping_sorts_globally_then_keeps_order_per_actor():
    queues = group_commands(
        [
            command(0.3, "A", 0),
            command(0.1, "B", 4),
            command(0.1, "A", 1),
            command(0.2, "A", 2),
        ]
    )

    assert [c.trigger for c in queues["A"]] == [0.1, 0.2, 0.3]
    assert [c.destination_lane for c in queues["A"]] == [1, 2, 0]
    assert [c.destination_lane for c in queues["B"]] == [4]


def test_equal_triggers_keep_input_order():
    queues = group_commands([command(0.1, "A", 5), command(0.1, "A", 6)])
    assert [c.destination_lane for c in queues["A"]] == [5, 6]


def test_head_is_consumed_only_on_tolerance_match():
    controller = CommandController([command(0.45, "A", 1)], tolerance=0.025)
    a = make_actor(traveled=0.40)

    assert controller.dispatch(a).kind == ActionKind.ADVANCE
    assert len(controller.pending("A")) == 1

    a.distance_traveled = 0.45000000000000007
    action = controller.dispatch(a)
    assert action.kind == ActionKind.ADVANCE_AND_SWITCH
    assert action.lane == 1
    assert a.next_action == action
    assert controller.pending("A") == ()


def test_missed_trigger_stays_queued_forever():
    """
    A trigger that the actor steps over without a tolerance match is never
    consumed, even once the actor is well past it.
    """
    controller = CommandController([command(0.32, "A", 1)], tolerance=0.001)
    a = make_actor()

    for k in range(40):
        a.distance_traveled = k * 0.05
        assert controller.dispatch(a).kind == ActionKind.ADVANCE

    assert len(controller.pending("A")) == 1


def test_missed_head_blocks_later_commands():
    controller = CommandController([command(0.32, "A", 1), command(0.40, "A", 2)], tolerance=0.001)
    a = make_actor(traveled=0.40)

    assert controller.dispatch(a).kind == ActionKind.ADVANCE
    assert len(controller.pending("A")) == 2


def test_dead_actor_gets_advance_only_and_keeps_queue():
    controller = CommandController([command(0.0, "A", 3)], tolerance=0.025)
    a = make_actor()
    a.alive = False

    assert controller.dispatch(a).kind == ActionKind.ADVANCE
    assert len(controller.pending("A")) == 1


def test_actor_without_commands_and_unknown_names():
    controller = CommandController([command(0.0, "Ghost", 3)], tolerance=0.025)
    a = make_actor("A")

    assert controller.dispatch(a).kind == ActionKind.ADVANCE
    assert controller.pending("A") == ()
    assert len(controller.pending("Ghost")) == 1


def test_tick_count_progress_metric():
    controller = CommandController(
        [command(3, "A", 2)],
        tolerance=0.025,
        progress_metric=ProgressMetric.TICKS,
    )
    a = make_actor(traveled=3.0)

    assert controller.dispatch(a, elapsed_ticks=2).kind == ActionKind.ADVANCE
    action = controller.dispatch(a, elapsed_ticks=3)
    assert action.kind == ActionKind.ADVANCE_AND_SWITCH
    assert action.lane == 2
