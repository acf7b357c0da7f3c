from lane_race_sim.collision import CollisionDetector
from lane_race_sim.config import CollisionPolicy, SimulationConfig
from lane_race_sim.entities import EntitySet
from tests._support.race_helpers import actor, obstacle


def make_detector(policy=CollisionPolicy.POINT):
    return CollisionDetector(SimulationConfig(collision_policy=policy))


def test_point_policy_hits_on_coincidence_and_kills_both():
    entities = EntitySet([actor("A", 0.5, 0), obstacle("Rock", 0.5, 0)])

    hit = make_detector().check(0, entities)

    assert hit == 1
    assert entities[0].alive is False
    assert entities[1].alive is False


def test_point_policy_ignores_other_lanes_and_near_misses():
    entities = EntitySet(
        [
            actor("A", 0.5, 0),
            obstacle("SideRock", 0.5, 1),
            obstacle("AheadRock", 0.55, 0),
        ]
    )

    assert make_detector().check(0, entities) is None
    assert all(e.alive for e in entities)


def test_first_match_wins():
    entities = EntitySet([actor("A", 0.5, 0), obstacle("R1", 0.5, 0), obstacle("R2", 0.5, 0)])

    hit = make_detector().check(0, entities)

    assert hit == 1
    assert entities[2].alive is True


def test_dead_entities_are_skipped():
    entities = EntitySet([actor("A", 0.5, 0), obstacle("R1", 0.5, 0), obstacle("R2", 0.5, 0)])
    entities[1].alive = False

    assert make_detector().check(0, entities) == 2

    entities = EntitySet([actor("A", 0.5, 0), obstacle("R1", 0.5, 0)])
    entities[0].alive = False
    assert make_detector().check(0, entities) is None
    assert entities[1].alive is True


def test_same_kind_never_collides():
    entities = EntitySet([actor("A", 0.5, 0), actor("B", 0.5, 0)])
    assert make_detector().check(0, entities) is None

    entities = EntitySet([obstacle("R1", 0.5, 0), obstacle("R2", 0.5, 0)])
    assert make_detector().check(0, entities) is None


def test_footprint_policy_covers_obstacle_length():
    detector = make_detector(CollisionPolicy.FOOTPRINT)

    inside = EntitySet([actor("A", 0.6, 0), obstacle("Log", 0.5, 0, footprint_length=0.2)])
    assert detector.check(0, inside) == 1

    beyond = EntitySet([actor("A", 0.75, 0), obstacle("Log", 0.5, 0, footprint_length=0.2)])
    assert detector.check(0, beyond) is None

    other_lane = EntitySet([actor("A", 0.6, 1), obstacle("Log", 0.5, 0, footprint_length=0.2)])
    assert detector.check(0, other_lane) is None


def test_point_policy_ignores_footprint():
    entities = EntitySet([actor("A", 0.6, 0), obstacle("Log", 0.5, 0, footprint_length=0.2)])
    assert make_detector(CollisionPolicy.POINT).check(0, entities) is None


def test_obstacle_side_check_finds_actor_inside_footprint():
    entities = EntitySet([actor("A", 0.55, 0), obstacle("Log", 0.4, 0, footprint_length=0.3)])

    hit = make_detector(CollisionPolicy.FOOTPRINT).check(1, entities)

    assert hit == 0
    assert not entities[0].alive
    assert not entities[1].alive


def test_obstacle_end_depends_on_policy():
    log = EntitySet([obstacle("Log", 0.5, 0, footprint_length=0.2)])[0]
    assert make_detector(CollisionPolicy.POINT).obstacle_end(log) == 0.5
    assert make_detector(CollisionPolicy.FOOTPRINT).obstacle_end(log) == 0.5 + 0.2
